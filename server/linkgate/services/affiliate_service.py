# server/linkgate/services/affiliate_service.py

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple
from urllib.parse import unquote_plus, urlencode, urlsplit, urlunsplit

from linkgate.models.snapshot import AffiliateConfig, LinkSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CookieDirective:
    name: str
    value: str
    max_age: int
    httponly: bool = False
    samesite: str = "Lax"
    secure: bool = False


def parse_custom_params(raw: Optional[str]) -> List[Tuple[str, str]]:
    """Parse ``key=value&key=value``; fragments without a key are skipped."""
    pairs = []
    if not raw:
        return pairs

    for fragment in raw.strip().lstrip("?").split("&"):
        if "=" not in fragment:
            if fragment.strip():
                logger.debug(f"Skipping malformed affiliate parameter {fragment!r}")
            continue
        key, value = fragment.split("=", 1)
        try:
            key, value = unquote_plus(key).strip(), unquote_plus(value).strip()
        except (TypeError, ValueError):
            continue
        if not key:
            continue
        pairs.append((key, value))

    return pairs


def set_query_params(url: str, params: List[Tuple[str, str]]) -> str:
    """Set each param on ``url``, replacing any existing values for that key.

    Query pieces for other keys are kept byte for byte.
    """
    if not params:
        return url

    parts = urlsplit(url)
    overridden = {key for key, _ in params}

    kept = []
    for piece in parts.query.split("&"):
        if not piece:
            continue
        if unquote_plus(piece.split("=", 1)[0]) in overridden:
            continue
        kept.append(piece)

    latest = {}
    for key, value in params:
        latest[key] = value
    kept.append(urlencode(list(latest.items())))

    return urlunsplit((parts.scheme, parts.netloc, parts.path, "&".join(kept), parts.fragment))


class AffiliateAugmenter:

    def __init__(self, cookie_name: str = "aff_ref", secure_cookie: bool = False):
        self.cookie_name = cookie_name
        self.secure_cookie = secure_cookie

    def augment(self, link: LinkSnapshot, resolved_url: str) -> Tuple[str, Optional[CookieDirective]]:
        affiliate = link.affiliate
        if not affiliate.enabled:
            return resolved_url, None

        params = parse_custom_params(affiliate.custom_params)
        if not params:
            params = self._default_params(affiliate)

        try:
            final_url = set_query_params(resolved_url, params)
        except ValueError as e:
            logger.warning(f"Affiliate augmentation skipped for {link.code}: {e}")
            final_url = resolved_url

        return final_url, self._cookie(affiliate)

    @staticmethod
    def _default_params(affiliate: AffiliateConfig) -> List[Tuple[str, str]]:
        params = []
        if affiliate.affiliate_id:
            params.append(("utm_source", affiliate.affiliate_id))
        if affiliate.tag:
            params.append(("utm_medium", affiliate.tag))
        return params

    def _cookie(self, affiliate: AffiliateConfig) -> Optional[CookieDirective]:
        if not affiliate.affiliate_id and not affiliate.tag:
            return None

        value = urlencode({"id": affiliate.affiliate_id or "", "tag": affiliate.tag or ""})
        days = max(1, int(affiliate.cookie_days or 30))

        return CookieDirective(
            name=self.cookie_name,
            value=value,
            max_age=days * 86400,
            secure=self.secure_cookie,
        )
