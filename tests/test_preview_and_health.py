# tests/test_preview_and_health.py

from datetime import datetime, timedelta


def test_preview_hides_protected_destination(client, make_link):
    make_link(code="prv1", password="pw", destinations=[{"url": "https://m.example.com", "rule": "device:mobile"}])

    data = client.get("/s/prv1/preview").get_json()["data"]

    assert data["code"] == "prv1"
    assert data["short_url"] == "http://localhost:5000/s/prv1"
    assert data["destination_url"] is None
    assert data["has_password"] is True
    assert data["has_rules"] is True
    assert data["has_splash"] is False


def test_preview_public_link(client, make_link):
    make_link("https://example.com/open", code="prv2")
    data = client.get("/s/prv2/preview").get_json()["data"]
    assert data["destination_url"] == "https://example.com/open"


def test_preview_status_codes(client, make_link):
    make_link(code="prv3", expires_at=datetime.utcnow() - timedelta(hours=1))
    make_link(code="prv4", is_restricted=True)

    assert client.get("/s/missing/preview").status_code == 404
    assert client.get("/s/prv3/preview").status_code == 410
    assert client.get("/s/prv4/preview").status_code == 403


def test_preview_does_not_count_clicks(client, make_link):
    link = make_link(code="prv5")
    client.get("/s/prv5/preview")
    assert link.clicks == 0


def test_health(client):
    response = client.get("/health")
    body = response.get_json()

    assert response.status_code == 200
    assert body["status"] == "healthy"
    assert body["checks"]["database"]["status"] == "healthy"
    assert body["checks"]["redis"]["status"] == "not_configured"


def test_ready(client):
    response = client.get("/ready")
    assert response.status_code == 200
    assert response.get_json()["ready"] is True


def test_index(client):
    assert client.get("/").get_json()["service"] == "linkgate"


def test_method_not_allowed_is_json(client):
    response = client.delete("/s/abc")
    assert response.status_code == 405
    assert response.get_json()["error"]["code"] == "METHOD_NOT_ALLOWED"
