# server/linkgate/models/visitor.py

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class VisitorContext:
    """Normalized, lower-cased view of a single visit. Never persisted."""

    country: Optional[str] = None
    device: Optional[str] = None
    browser: Optional[str] = None
    os: Optional[str] = None
    hour: Optional[int] = None
    referrer: Optional[str] = None
    language: Optional[str] = None


@dataclass(frozen=True)
class RequestSignals:
    """Raw request data captured before the request context goes away."""

    ip_address: Optional[str] = None
    user_agent: str = ""
    referrer: Optional[str] = None
    accept_language: Optional[str] = None
    country_hint: Optional[str] = None
