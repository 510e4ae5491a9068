# server/linkgate/services/visitor_context.py

import ipaddress
import logging
from datetime import datetime, timezone
from typing import Iterable, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from flask import Request
from user_agents import parse as parse_user_agent

from linkgate.models.visitor import RequestSignals, VisitorContext
from linkgate.utils.helpers import extract_domain, first_forwarded_ip

logger = logging.getLogger(__name__)

COUNTRY_UNKNOWN = "Unknown"
COUNTRY_LOCAL = "Local"

DEFAULT_COUNTRY_HEADERS = ("CF-IPCountry", "X-Country-Code")


def lookup_country(ip_address: Optional[str], country_hint: Optional[str] = None) -> str:
    """Country code for a visitor, or the ``Local`` / ``Unknown`` sentinels."""
    if ip_address:
        try:
            ip = ipaddress.ip_address(ip_address)
            if ip.is_private or ip.is_loopback or ip.is_link_local:
                return COUNTRY_LOCAL
        except ValueError:
            pass

    if country_hint:
        hint = country_hint.strip().upper()
        if len(hint) == 2 and hint.isalpha() and hint != "XX":
            return hint

    return COUNTRY_UNKNOWN


def parse_client(user_agent: Optional[str]) -> dict:
    """Device class, browser and OS details from a user agent string."""
    details = {
        "device_type": None,
        "device_brand": None,
        "device_model": None,
        "browser": None,
        "browser_version": None,
        "os": None,
        "os_version": None,
        "is_bot": False,
    }

    if not user_agent:
        return details

    try:
        ua = parse_user_agent(user_agent)

        if ua.is_bot:
            device_type = "bot"
        elif ua.is_tablet:
            device_type = "tablet"
        elif ua.is_mobile:
            device_type = "mobile"
        elif ua.is_pc:
            device_type = "desktop"
        else:
            device_type = "other"

        details.update(
            device_type=device_type,
            device_brand=(ua.device.brand or None),
            device_model=(ua.device.model or None),
            browser=(ua.browser.family or None),
            browser_version=(ua.browser.version_string or None),
            os=(ua.os.family or None),
            os_version=(ua.os.version_string or None),
            is_bot=bool(ua.is_bot),
        )
    except Exception as e:
        logger.debug(f"User agent parsing failed: {e}")
        if "iPad" in user_agent or "Tablet" in user_agent:
            details["device_type"] = "tablet"
        elif "Mobile" in user_agent or "Android" in user_agent:
            details["device_type"] = "mobile"
        else:
            details["device_type"] = "desktop"

    return details


def primary_language(accept_language: Optional[str]) -> Optional[str]:
    if not accept_language:
        return None
    tag = accept_language.split(",")[0].split(";")[0].strip().lower()
    if not tag or tag == "*":
        return None
    return tag


def _lower(value: Optional[str]) -> Optional[str]:
    return value.strip().lower() if value else None


class VisitorContextExtractor:

    def __init__(self, tz_name: str = "UTC", country_headers: Iterable[str] = DEFAULT_COUNTRY_HEADERS):
        self.country_headers = tuple(country_headers)
        self.tz = self._load_timezone(tz_name)

    @staticmethod
    def _load_timezone(tz_name: str):
        if not tz_name or tz_name.upper() == "UTC":
            return timezone.utc
        try:
            return ZoneInfo(tz_name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(f"Unknown timezone {tz_name!r} for time rules, using UTC")
            return timezone.utc

    def capture(self, request: Request) -> RequestSignals:
        ip_address = first_forwarded_ip(request.headers.get("X-Forwarded-For")) or request.remote_addr

        country_hint = None
        for header in self.country_headers:
            country_hint = request.headers.get(header)
            if country_hint:
                break

        return RequestSignals(
            ip_address=ip_address,
            user_agent=request.headers.get("User-Agent", ""),
            referrer=request.headers.get("Referer") or None,
            accept_language=request.headers.get("Accept-Language") or None,
            country_hint=country_hint,
        )

    def local_hour(self, now: datetime) -> int:
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return now.astimezone(self.tz).hour

    def extract(self, signals: RequestSignals, now: datetime) -> VisitorContext:
        client = parse_client(signals.user_agent)

        return VisitorContext(
            country=_lower(lookup_country(signals.ip_address, signals.country_hint)),
            device=_lower(client["device_type"]),
            browser=_lower(client["browser"]),
            os=_lower(client["os"]),
            hour=self.local_hour(now),
            referrer=extract_domain(signals.referrer, include_subdomain=True) or None,
            language=primary_language(signals.accept_language),
        )
