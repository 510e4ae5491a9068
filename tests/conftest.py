# tests/conftest.py

import pytest

from linkgate import create_app
from linkgate.extensions import db
from linkgate.services.link_service import LinkService
from linkgate.services.redis_service import RedisService

DESKTOP_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
MOBILE_UA = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1"
)


@pytest.fixture(autouse=True)
def reset_redis():
    RedisService.reset()
    yield
    RedisService.reset()


@pytest.fixture
def app():
    app = create_app("testing")

    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_link(app):
    def _make_link(destination_url="https://example.com/landing", **kwargs):
        link, error = LinkService.create_link(destination_url, **kwargs)
        assert error is None, error
        return link

    return _make_link
