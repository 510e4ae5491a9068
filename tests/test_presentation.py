# tests/test_presentation.py

import pytest

from linkgate.models.snapshot import LinkSnapshot
from linkgate.services.presentation_service import (
    DirectRedirect,
    PresentationSelector,
    SplashPage,
    resolve_splash_asset,
)

FINAL = "https://example.com/final"


def make_snapshot(**kwargs):
    return LinkSnapshot(id="link-1", code="abc123", destination_url=FINAL, **kwargs)


@pytest.mark.parametrize("asset, expected", [
    ("https://cdn.example.com/s.png", "https://cdn.example.com/s.png"),
    ("/static/splash.png", "/static/splash.png"),
    (["https://cdn.example.com/a.png", "https://cdn.example.com/b.png"], "https://cdn.example.com/a.png"),
    ({"secure_url": "https://cdn.example.com/s.png"}, "https://cdn.example.com/s.png"),
    ({"publicUrl": "https://cdn.example.com/p.png"}, "https://cdn.example.com/p.png"),
    ({"result": {"url": "https://cdn.example.com/n.png"}}, "https://cdn.example.com/n.png"),
    ({"secure_url": "not a url", "url": "https://cdn.example.com/u.png"}, "https://cdn.example.com/u.png"),
])
def test_resolve_splash_asset_shapes(asset, expected):
    assert resolve_splash_asset(asset) == expected


@pytest.mark.parametrize("asset", [
    None,
    "",
    [],
    "javascript:alert(1)",
    "//cdn.example.com/s.png",
    "not a url",
    {"width": 300},
    {"url": 42},
])
def test_resolve_splash_asset_unusable(asset):
    assert resolve_splash_asset(asset) is None


def test_no_splash_redirects_directly():
    presentation = PresentationSelector().present(make_snapshot(), FINAL)
    assert presentation == DirectRedirect(url=FINAL, status_code=302)


def test_splash_page():
    selector = PresentationSelector(countdown_seconds=5, default_loading_text="Hold on")
    presentation = selector.present(make_snapshot(splash_asset="https://cdn.example.com/s.png"), FINAL)

    assert isinstance(presentation, SplashPage)
    assert presentation.asset_url == "https://cdn.example.com/s.png"
    assert presentation.url == FINAL
    assert presentation.loading_text == "Hold on"
    assert presentation.countdown_seconds == 5


def test_custom_loading_text():
    snapshot = make_snapshot(splash_asset="/s.png", loading_text="  Almost there  ")
    assert PresentationSelector().present(snapshot, FINAL).loading_text == "Almost there"


def test_skip_splash_hint():
    snapshot = make_snapshot(splash_asset="https://cdn.example.com/s.png")
    assert isinstance(PresentationSelector().present(snapshot, FINAL, skip_splash=True), DirectRedirect)


def test_unresolvable_splash_falls_back_to_redirect():
    snapshot = make_snapshot(splash_asset={"width": 300})
    assert PresentationSelector().present(snapshot, FINAL) == DirectRedirect(url=FINAL)
