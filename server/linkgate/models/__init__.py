# server/linkgate/models/__init__.py

from linkgate.models.visitor import VisitorContext, RequestSignals
from linkgate.models.rules import (
    Dimension,
    Rule,
    CountryRule,
    DeviceRule,
    BrowserRule,
    OsRule,
    TimeRule,
    ReferrerRule,
    LanguageRule,
    parse_rule,
)
from linkgate.models.snapshot import LinkSnapshot, AffiliateConfig, WeightedDestination
from linkgate.models.short_link import ShortLink
from linkgate.models.destination_rule import DestinationRule
from linkgate.models.click_event import ClickEvent

__all__ = [
    "VisitorContext",
    "RequestSignals",
    "Dimension",
    "Rule",
    "CountryRule",
    "DeviceRule",
    "BrowserRule",
    "OsRule",
    "TimeRule",
    "ReferrerRule",
    "LanguageRule",
    "parse_rule",
    "LinkSnapshot",
    "AffiliateConfig",
    "WeightedDestination",
    "ShortLink",
    "DestinationRule",
    "ClickEvent",
]
