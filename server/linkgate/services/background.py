# server/linkgate/services/background.py

import logging
import queue
import threading
from typing import Callable, Dict, Optional, Type

from flask import Flask

logger = logging.getLogger(__name__)

EXTENSION_KEY = "linkgate.worker"

Handler = Callable[[object], None]


class BackgroundWorker:
    """Single consumer thread fed through a bounded queue.

    Request handlers call ``submit`` and never wait on the result. Every
    message is handled inside an app context and any exception stops at
    the message boundary. With ``CLICK_RECORDING_ASYNC`` off, messages are
    handled inline under the same isolation.
    """

    def __init__(self, app: Optional[Flask] = None):
        self.app: Optional[Flask] = None
        self.handlers: Dict[Type, Handler] = {}
        self.async_mode = True
        self._queue: Optional[queue.Queue] = None
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        self.app = app
        self.async_mode = app.config.get("CLICK_RECORDING_ASYNC", True)
        self._queue = queue.Queue(maxsize=app.config.get("CLICK_QUEUE_SIZE", 10000))
        app.extensions[EXTENSION_KEY] = self

    def register(self, message_type: Type, handler: Handler) -> None:
        self.handlers[message_type] = handler

    def submit(self, message: object) -> bool:
        if not self.async_mode:
            self._handle(message)
            return True

        self._ensure_started()
        try:
            self._queue.put_nowait(message)
            return True
        except queue.Full:
            logger.warning(f"Background queue full, dropping {type(message).__name__}")
            return False

    def join(self) -> None:
        """Block until every queued message has been handled."""
        if self._queue is not None and self._thread is not None:
            self._queue.join()

    def _ensure_started(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        with self._lock:
            if self._thread is None or not self._thread.is_alive():
                self._thread = threading.Thread(target=self._run, name="linkgate-worker", daemon=True)
                self._thread.start()

    def _run(self) -> None:
        while True:
            message = self._queue.get()
            try:
                self._handle(message)
            finally:
                self._queue.task_done()

    def _handle(self, message: object) -> None:
        handler = self.handlers.get(type(message))
        if handler is None:
            logger.error(f"No handler registered for {type(message).__name__}")
            return

        try:
            with self.app.app_context():
                handler(message)
        except Exception as e:
            logger.error(f"Background task {type(message).__name__} failed: {e}", exc_info=True)


def get_worker(app: Flask) -> BackgroundWorker:
    return app.extensions[EXTENSION_KEY]
