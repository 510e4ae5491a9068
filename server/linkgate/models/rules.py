# server/linkgate/models/rules.py

"""Typed targeting rules.

Rules are stored as ``<dimension>:<value>`` strings by the write path and
parsed exactly once into one of the variants below. The resolver only ever
sees typed rules, so a malformed rule never reaches request handling.
"""

import enum
from dataclasses import dataclass
from typing import Optional, Union

from linkgate.models.visitor import VisitorContext


class Dimension(enum.Enum):
    COUNTRY = "country"
    DEVICE = "device"
    BROWSER = "browser"
    OS = "os"
    TIME = "time"
    REFERRER = "referrer"
    LANGUAGE = "language"


@dataclass(frozen=True)
class CountryRule:
    value: str
    dimension = Dimension.COUNTRY

    def matches(self, context: VisitorContext) -> bool:
        return bool(context.country) and context.country == self.value

    def to_text(self) -> str:
        return f"{self.dimension.value}:{self.value}"


@dataclass(frozen=True)
class DeviceRule:
    value: str
    dimension = Dimension.DEVICE

    def matches(self, context: VisitorContext) -> bool:
        return bool(context.device) and context.device == self.value

    def to_text(self) -> str:
        return f"{self.dimension.value}:{self.value}"


@dataclass(frozen=True)
class BrowserRule:
    value: str
    dimension = Dimension.BROWSER

    def matches(self, context: VisitorContext) -> bool:
        return bool(context.browser) and context.browser == self.value

    def to_text(self) -> str:
        return f"{self.dimension.value}:{self.value}"


@dataclass(frozen=True)
class OsRule:
    value: str
    dimension = Dimension.OS

    def matches(self, context: VisitorContext) -> bool:
        return bool(context.os) and context.os == self.value

    def to_text(self) -> str:
        return f"{self.dimension.value}:{self.value}"


@dataclass(frozen=True)
class TimeRule:
    start_hour: int
    end_hour: int
    dimension = Dimension.TIME

    def matches(self, context: VisitorContext) -> bool:
        hour = context.hour
        if hour is None:
            return False
        if self.start_hour <= self.end_hour:
            return self.start_hour <= hour <= self.end_hour
        # overnight range, e.g. 22-06
        return hour >= self.start_hour or hour <= self.end_hour

    def to_text(self) -> str:
        return f"{self.dimension.value}:{self.start_hour:02d}-{self.end_hour:02d}"


@dataclass(frozen=True)
class ReferrerRule:
    value: str
    dimension = Dimension.REFERRER

    def matches(self, context: VisitorContext) -> bool:
        return bool(context.referrer) and self.value in context.referrer

    def to_text(self) -> str:
        return f"{self.dimension.value}:{self.value}"


@dataclass(frozen=True)
class LanguageRule:
    value: str
    dimension = Dimension.LANGUAGE

    def matches(self, context: VisitorContext) -> bool:
        return bool(context.language) and context.language.startswith(self.value)

    def to_text(self) -> str:
        return f"{self.dimension.value}:{self.value}"


Rule = Union[CountryRule, DeviceRule, BrowserRule, OsRule, TimeRule, ReferrerRule, LanguageRule]

_SIMPLE_RULES = {
    Dimension.COUNTRY: CountryRule,
    Dimension.DEVICE: DeviceRule,
    Dimension.BROWSER: BrowserRule,
    Dimension.OS: OsRule,
    Dimension.REFERRER: ReferrerRule,
    Dimension.LANGUAGE: LanguageRule,
}


def _parse_hour(value: str) -> Optional[int]:
    value = value.strip()
    if not value.isdigit():
        return None
    hour = int(value)
    if 0 <= hour <= 23:
        return hour
    return None


def parse_time_range(value: str) -> Optional[TimeRule]:
    parts = value.split("-")
    if len(parts) != 2:
        return None
    start, end = _parse_hour(parts[0]), _parse_hour(parts[1])
    if start is None or end is None:
        return None
    return TimeRule(start_hour=start, end_hour=end)


def parse_rule(text: Optional[str]) -> Optional[Rule]:
    """Parse ``"dimension:value"`` into a typed rule, or ``None`` if malformed.

    Only the first colon splits dimension from value, so values such as
    ``referrer:https://news.example`` survive intact. Values are lower-cased
    because every dimension matches case-insensitively.
    """
    if not text or ":" not in text:
        return None

    raw_dimension, raw_value = text.split(":", 1)
    raw_dimension = raw_dimension.strip().lower()
    raw_value = raw_value.strip().lower()

    if not raw_dimension or not raw_value:
        return None

    try:
        dimension = Dimension(raw_dimension)
    except ValueError:
        return None

    if dimension is Dimension.TIME:
        return parse_time_range(raw_value)

    return _SIMPLE_RULES[dimension](value=raw_value)
