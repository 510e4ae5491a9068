# tests/test_affiliate.py

from urllib.parse import parse_qs

from linkgate.models.snapshot import AffiliateConfig, LinkSnapshot
from linkgate.services.affiliate_service import AffiliateAugmenter, parse_custom_params, set_query_params


def make_snapshot(**affiliate):
    return LinkSnapshot(
        id="link-1",
        code="abc123",
        destination_url="https://x.com/p",
        affiliate=AffiliateConfig(**affiliate),
    )


def test_disabled_affiliate_leaves_url_alone():
    url, cookie = AffiliateAugmenter().augment(make_snapshot(enabled=False, tag="t"), "https://x.com/p?b=0")
    assert url == "https://x.com/p?b=0"
    assert cookie is None


def test_custom_params_override_existing_keys():
    snapshot = make_snapshot(enabled=True, custom_params="a=1&b=2")
    url, _ = AffiliateAugmenter().augment(snapshot, "https://x.com/p?b=0")
    assert url == "https://x.com/p?a=1&b=2"


def test_default_params_from_id_and_tag():
    snapshot = make_snapshot(enabled=True, affiliate_id="partner7", tag="spring")
    url, _ = AffiliateAugmenter().augment(snapshot, "https://x.com/p")
    assert parse_qs(url.split("?", 1)[1]) == {"utm_source": ["partner7"], "utm_medium": ["spring"]}


def test_cookie_attributes():
    snapshot = make_snapshot(enabled=True, affiliate_id="partner7", tag="spring", cookie_days=7)
    _, cookie = AffiliateAugmenter(cookie_name="aff_ref", secure_cookie=True).augment(snapshot, "https://x.com/p")

    assert cookie.name == "aff_ref"
    assert parse_qs(cookie.value) == {"id": ["partner7"], "tag": ["spring"]}
    assert cookie.max_age == 7 * 86400
    assert cookie.httponly is False
    assert cookie.samesite == "Lax"
    assert cookie.secure is True


def test_no_cookie_without_id_or_tag():
    snapshot = make_snapshot(enabled=True, custom_params="ref=abc")
    url, cookie = AffiliateAugmenter().augment(snapshot, "https://x.com/p")
    assert url == "https://x.com/p?ref=abc"
    assert cookie is None


def test_malformed_fragments_are_skipped():
    assert parse_custom_params("a=1&broken&=nokey&b=two%20words") == [("a", "1"), ("b", "two words")]
    assert parse_custom_params(None) == []


def test_set_query_params_keeps_fragment_and_other_keys():
    url = set_query_params("https://x.com/p?keep=1&b=0#top", [("b", "2")])
    assert url == "https://x.com/p?keep=1&b=2#top"


def test_untouched_query_pieces_keep_their_raw_form():
    url = set_query_params("https://shop.example.com/item?flag&x=%2F&b=0", [("a", "1"), ("b", "2")])
    assert url == "https://shop.example.com/item?flag&x=%2F&a=1&b=2"
