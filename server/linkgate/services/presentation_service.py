# server/linkgate/services/presentation_service.py

import logging
from dataclasses import dataclass
from typing import Any, Optional, Union
from urllib.parse import urlparse

from flask import Response, redirect, render_template

from linkgate.models.snapshot import LinkSnapshot

logger = logging.getLogger(__name__)

SPLASH_URL_FIELDS = (
    "secure_url",
    "secureUrl",
    "url",
    "path",
    "src",
    "publicUrl",
    "public_url",
)

MAX_SPLASH_DEPTH = 4


@dataclass(frozen=True)
class DirectRedirect:
    url: str
    status_code: int = 302


@dataclass(frozen=True)
class SplashPage:
    asset_url: str
    loading_text: str
    url: str
    countdown_seconds: int


Presentation = Union[DirectRedirect, SplashPage]


def _usable_asset(value: str) -> Optional[str]:
    value = value.strip()
    if not value:
        return None
    if value.startswith("/") and not value.startswith("//"):
        return value
    try:
        parsed = urlparse(value)
    except ValueError:
        return None
    if parsed.scheme in ("http", "https") and parsed.netloc:
        return value
    return None


def resolve_splash_asset(asset: Any, _depth: int = 0) -> Optional[str]:
    """Resolve a stored splash reference to a URL, or ``None``.

    Accepts a bare string, a list (first element wins) or a mapping that
    exposes one of ``SPLASH_URL_FIELDS`` or a nested ``result`` mapping.
    """
    if not asset or _depth > MAX_SPLASH_DEPTH:
        return None

    if isinstance(asset, str):
        return _usable_asset(asset)

    if isinstance(asset, (list, tuple)):
        return resolve_splash_asset(asset[0], _depth + 1)

    if isinstance(asset, dict):
        for key in SPLASH_URL_FIELDS:
            value = asset.get(key)
            if value and isinstance(value, str):
                usable = _usable_asset(value)
                if usable:
                    return usable

        nested = asset.get("result")
        if isinstance(nested, dict):
            return resolve_splash_asset(nested, _depth + 1)

    return None


class PresentationSelector:

    def __init__(self, countdown_seconds: int = 3, default_loading_text: str = "Loading…"):
        self.countdown_seconds = max(0, countdown_seconds)
        self.default_loading_text = default_loading_text

    def present(self, link: LinkSnapshot, final_url: str, skip_splash: bool = False) -> Presentation:
        if skip_splash or not link.splash_asset:
            return DirectRedirect(url=final_url)

        asset_url = resolve_splash_asset(link.splash_asset)
        if asset_url is None:
            logger.warning(f"Unresolvable splash asset for {link.code}, redirecting directly")
            return DirectRedirect(url=final_url)

        return SplashPage(
            asset_url=asset_url,
            loading_text=(link.loading_text or "").strip() or self.default_loading_text,
            url=final_url,
            countdown_seconds=self.countdown_seconds,
        )


def render_presentation(presentation: Presentation) -> Response:
    if isinstance(presentation, SplashPage):
        html = render_template(
            "splash.html",
            splash_image=presentation.asset_url,
            loading_text=presentation.loading_text,
            destination=presentation.url,
            seconds=presentation.countdown_seconds,
        )
        return Response(html, status=200, mimetype="text/html")

    return redirect(presentation.url, code=presentation.status_code)


def render_password_challenge(code: str, error: bool = False, skip_splash: bool = False) -> Response:
    html = render_template(
        "password.html",
        code=code,
        error=error,
        skip_splash=skip_splash,
    )
    return Response(html, status=200, mimetype="text/html")
