# tests/test_link_service.py

from datetime import datetime, timedelta

from linkgate.extensions import db
from linkgate.models.short_link import ShortLink
from linkgate.services.access_gate import DEACTIVATED_BY_EXPIRY
from linkgate.services.link_service import LinkService
from linkgate.services.link_store import LinkStore
from linkgate.utils.secret_codec import SecretCodec


def test_create_link_generates_code(app):
    link, error = LinkService.create_link("example.com/page")

    assert error is None
    assert len(link.code) == app.config["SHORT_CODE_LENGTH"]
    assert link.destination_url == "https://example.com/page"


def test_create_link_rejects_bad_input(app, make_link):
    make_link(code="taken1")

    assert LinkService.create_link("javascript:alert(1)")[1]
    assert LinkService.create_link("https://example.com", code="bad code!")[1]
    assert LinkService.create_link("https://example.com", code="taken1")[1] == "This short code is already taken"
    assert LinkService.create_link("https://example.com", alias="taken1")[1] == "This alias is already taken"


def test_password_is_stored_encrypted(app, make_link):
    link = make_link(code="enc1", password="pw")
    assert link.password_secret != "pw"
    assert SecretCodec(app.config["SECRET_ENCRYPTION_KEY"]).decode(link.password_secret) == "pw"


def test_sanitize_destinations():
    cleaned = LinkService.sanitize_destinations([
        {"url": "https://a.example.com", "rule": "Country:US", "weight": 0},
        {"url": "https://b.example.com", "rule": "time:22-06", "weight": "3"},
        {"url": "", "rule": "device:mobile"},
        {"url": "https://c.example.com", "rule": "time:99-100"},
        "not a dict",
    ])

    assert cleaned == [
        {"url": "https://a.example.com", "dimension": "country", "value": "us", "weight": 1},
        {"url": "https://b.example.com", "dimension": "time", "value": "22-06", "weight": 3},
    ]


def test_rules_keep_their_order(app, make_link):
    link = make_link(code="ord1", destinations=[
        {"url": "https://one.example.com", "rule": "device:mobile"},
        {"url": "https://two.example.com", "rule": "device:tablet"},
    ])

    snapshot = link.to_snapshot()
    assert [d.url for d in snapshot.destinations] == ["https://one.example.com", "https://two.example.com"]


def test_update_destinations(app, make_link):
    link = make_link(code="upd1", destinations=[{"url": "https://one.example.com", "rule": "device:mobile"}])
    LinkService.update_destinations(link, [{"url": "https://two.example.com", "rule": "os:android", "weight": 2}])

    db.session.expire_all()
    rules = db.session.get(ShortLink, link.id).rules
    assert [(r.target_url, r.rule_text, r.weight) for r in rules] == [("https://two.example.com", "os:android", 2)]


def test_sweep_expired(app, make_link):
    past = datetime.utcnow() - timedelta(hours=1)
    expired = make_link(code="swp1", expires_at=past)
    manual = make_link(code="swp2", expires_at=past)
    manual.deactivate("manual")
    fresh = make_link(code="swp3", expires_at=datetime.utcnow() + timedelta(days=1))
    db.session.commit()

    assert LinkService.sweep_expired() == 1
    assert LinkService.sweep_expired() == 0

    assert expired.is_active is False
    assert expired.deactivation_reason == DEACTIVATED_BY_EXPIRY
    assert manual.deactivation_reason == "manual"
    assert fresh.is_active is True


def test_find_by_code_returns_snapshot(app, make_link):
    make_link(code="fnd1", alias="find-me")

    assert LinkStore.find_by_code("fnd1").code == "fnd1"
    assert LinkStore.find_by_code("find-me").code == "fnd1"
    assert LinkStore.find_by_code("") is None
    assert LinkStore.find_by_code("nothing") is None


def test_snapshot_cache_dict_round_trip(app, make_link):
    link = make_link(
        code="cch1",
        expires_at=datetime(2030, 1, 1),
        destinations=[{"url": "https://n.example.com", "rule": "time:22-06", "weight": 2}],
        affiliate={"enabled": True, "id": "p1"},
    )
    snapshot = link.to_snapshot()

    assert type(snapshot).from_cache_dict(snapshot.to_cache_dict()) == snapshot


def test_set_password(app, client, make_link):
    link = make_link(code="setpw1")
    assert client.get("/s/setpw1").status_code == 302

    LinkService.set_password(link, "fresh")
    assert client.get("/s/setpw1").status_code == 200
    assert client.post("/s/setpw1", data={"password": "fresh"}).status_code == 302

    LinkService.set_password(link, None)
    assert link.password_secret is None
