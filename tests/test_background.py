# tests/test_background.py

import threading
from datetime import datetime

import pytest

from linkgate.extensions import db
from linkgate.models.short_link import ShortLink
from linkgate.models.visitor import RequestSignals, VisitorContext
from linkgate.services.background import BackgroundWorker
from linkgate.services.click_service import ClickRecorder, RecordClick


@pytest.fixture
def async_app(app):
    app.config["CLICK_RECORDING_ASYNC"] = True
    return app


def record_click_for(link):
    return RecordClick(
        link_id=link.id,
        code=link.code,
        signals=RequestSignals(ip_address="8.8.8.8", user_agent="curl/8.0"),
        context=VisitorContext(hour=12),
        occurred_at=datetime.utcnow(),
    )


def test_async_worker_records_click(async_app, make_link):
    link = make_link(code="bg1")
    worker = BackgroundWorker(async_app)
    worker.register(RecordClick, ClickRecorder.record)

    assert worker.async_mode is True
    assert worker.submit(record_click_for(link)) is True
    worker.join()

    db.session.expire_all()
    assert db.session.get(ShortLink, link.id).clicks == 1


def test_failing_handler_does_not_stop_the_worker(async_app):
    handled = []

    def flaky(message):
        if message == "boom":
            raise RuntimeError("handler failed")
        handled.append(message)

    worker = BackgroundWorker(async_app)
    worker.register(str, flaky)

    worker.submit("boom")
    worker.submit("after")
    worker.join()

    assert handled == ["after"]


def test_full_queue_drops_message(async_app):
    async_app.config["CLICK_QUEUE_SIZE"] = 1
    started = threading.Event()
    release = threading.Event()

    def blocking(message):
        started.set()
        release.wait(timeout=5)

    worker = BackgroundWorker(async_app)
    worker.register(str, blocking)

    try:
        assert worker.submit("first") is True
        assert started.wait(timeout=5)
        assert worker.submit("second") is True
        assert worker.submit("third") is False
    finally:
        release.set()
        worker.join()


def test_unregistered_message_is_ignored(app):
    worker = BackgroundWorker(app)
    assert worker.submit(object()) is True
