# tests/test_rules.py

import pytest

from linkgate.models.rules import (
    CountryRule,
    DeviceRule,
    LanguageRule,
    ReferrerRule,
    TimeRule,
    parse_rule,
)
from linkgate.models.visitor import VisitorContext


@pytest.mark.parametrize("text, expected", [
    ("country:US", CountryRule("us")),
    ("Device: Mobile ", DeviceRule("mobile")),
    ("referrer:https://news.example.com", ReferrerRule("https://news.example.com")),
    ("language:EN", LanguageRule("en")),
    ("time:9-17", TimeRule(9, 17)),
    ("time:22-06", TimeRule(22, 6)),
])
def test_parse_rule_valid(text, expected):
    assert parse_rule(text) == expected


@pytest.mark.parametrize("text", [
    None,
    "",
    "country",
    "country:",
    ":us",
    "planet:earth",
    "time:25-03",
    "time:9",
    "time:a-b",
    "time:1-2-3",
])
def test_parse_rule_malformed(text):
    assert parse_rule(text) is None


def test_rule_text_round_trips_through_parser():
    rule = parse_rule("time:7-9")
    assert rule.to_text() == "time:07-09"
    assert parse_rule(rule.to_text()) == rule


def test_time_rule_inclusive_bounds():
    rule = TimeRule(9, 17)
    assert rule.matches(VisitorContext(hour=9))
    assert rule.matches(VisitorContext(hour=17))
    assert not rule.matches(VisitorContext(hour=18))
    assert not rule.matches(VisitorContext(hour=None))


OVERNIGHT_HOURS = {22, 23, 0, 1, 2, 3, 4, 5, 6}


@pytest.mark.parametrize("hour", range(24))
def test_time_rule_overnight_wraparound(hour):
    rule = parse_rule("time:22-06")
    assert rule.matches(VisitorContext(hour=hour)) is (hour in OVERNIGHT_HOURS)


def test_simple_rules_need_a_value_on_the_context():
    assert not CountryRule("us").matches(VisitorContext())
    assert CountryRule("us").matches(VisitorContext(country="us"))
    assert not CountryRule("us").matches(VisitorContext(country="gb"))


def test_referrer_and_language_matching():
    assert ReferrerRule("twitter.com").matches(VisitorContext(referrer="mobile.twitter.com"))
    assert not ReferrerRule("twitter.com").matches(VisitorContext(referrer=None))
    assert LanguageRule("en").matches(VisitorContext(language="en-us"))
    assert not LanguageRule("fr").matches(VisitorContext(language="en-us"))
