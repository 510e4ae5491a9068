# server/linkgate/utils/validators.py

import re
from typing import Optional, Tuple
from urllib.parse import urlparse

from flask import current_app


class InvalidDestinationError(ValueError):
    """Raised when a destination cannot be turned into an absolute http(s) URL."""


class URLValidator:
    ALLOWED_SCHEMES = {"http", "https"}
    BLOCKED_SCHEMES = {"javascript", "data", "vbscript", "file", "ftp", "mailto"}
    MAX_URL_LENGTH = 2048

    SCHEME_REGEX = re.compile(r'^[a-zA-Z][a-zA-Z0-9+\-.]*://')
    BARE_HOST_REGEX = re.compile(
        r'^(?:[a-zA-Z0-9][a-zA-Z0-9-]*(?:\.[a-zA-Z0-9-]+)+|localhost|\d{1,3}(?:\.\d{1,3}){3})(?::\d+)?(?:[/?#]\S*)?$'
    )
    WRAPPING_CHARS = "\"'()[]{}<>"

    @classmethod
    def validate(cls, url: str) -> Tuple[bool, Optional[str], Optional[str]]:
        if not url:
            return False, None, "URL is required"

        url = url.strip()

        if len(url) > cls.MAX_URL_LENGTH:
            return False, None, f"URL is too long (max {cls.MAX_URL_LENGTH} characters)"

        scheme = urlparse(url).scheme.lower()
        if scheme in cls.BLOCKED_SCHEMES:
            return False, None, "This URL type is not allowed"

        try:
            normalized = cls.normalize(url)
        except InvalidDestinationError as e:
            return False, None, str(e)

        return True, normalized, None

    @classmethod
    def normalize(cls, url: Optional[str]) -> str:
        """Return an absolute http(s) URL or raise InvalidDestinationError.

        Scheme-less hosts get ``https://``; scheme-relative URLs get
        ``https:``. Any other scheme is rejected.
        """
        if not url or not isinstance(url, str):
            raise InvalidDestinationError("Destination URL is empty")

        candidate = url.strip().strip(cls.WRAPPING_CHARS).strip()
        if not candidate:
            raise InvalidDestinationError("Destination URL is empty")

        if cls.SCHEME_REGEX.match(candidate):
            pass
        elif candidate.startswith("//"):
            candidate = f"https:{candidate}"
        elif cls.BARE_HOST_REGEX.match(candidate):
            candidate = f"https://{candidate}"
        else:
            raise InvalidDestinationError("Destination URL is invalid or unsupported")

        try:
            parsed = urlparse(candidate)
            # accessing port raises on out-of-range values
            _ = parsed.port
        except ValueError:
            raise InvalidDestinationError("Destination URL is malformed")

        if parsed.scheme.lower() not in cls.ALLOWED_SCHEMES:
            raise InvalidDestinationError("Destination URL must use http or https")

        if not parsed.hostname:
            raise InvalidDestinationError("Destination URL must include a domain")

        if any(ch.isspace() for ch in candidate):
            raise InvalidDestinationError("Destination URL must not contain whitespace")

        return candidate


class InputValidator:
    CODE_REGEX = re.compile(r'^[a-zA-Z0-9][a-zA-Z0-9_-]*[a-zA-Z0-9]$|^[a-zA-Z0-9]$')

    @classmethod
    def validate_code(cls, code: str) -> Tuple[bool, Optional[str], Optional[str]]:
        if not code:
            return False, None, "Short code is required"

        code = code.strip()

        max_len = current_app.config.get("SHORT_CODE_MAX_LENGTH", 50)

        if len(code) > max_len:
            return False, None, f"Short code cannot exceed {max_len} characters"

        if not cls.CODE_REGEX.match(code):
            return False, None, "Short code can only contain letters, numbers, hyphens, and underscores"

        return True, code, None
