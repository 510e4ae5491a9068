# server/linkgate/models/snapshot.py

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Tuple

from linkgate.models.rules import Rule, parse_rule


@dataclass(frozen=True)
class WeightedDestination:
    url: str
    rule: Rule
    weight: int = 1


@dataclass(frozen=True)
class AffiliateConfig:
    enabled: bool = False
    tag: Optional[str] = None
    affiliate_id: Optional[str] = None
    cookie_days: int = 30
    custom_params: Optional[str] = None
    commission_rate: Optional[float] = None


@dataclass(frozen=True)
class LinkSnapshot:
    """Read-only view of a ShortLink handed to the resolution engine.

    Built either from the ORM row or from the Redis cache, so request
    handling never depends on a live database session.
    """

    id: str
    code: str
    destination_url: str
    alias: Optional[str] = None
    is_active: bool = True
    is_restricted: bool = False
    deactivation_reason: Optional[str] = None
    expires_at: Optional[datetime] = None
    password_secret: Optional[str] = None
    splash_asset: Any = None
    loading_text: Optional[str] = None
    affiliate: AffiliateConfig = field(default_factory=AffiliateConfig)
    destinations: Tuple[WeightedDestination, ...] = ()

    def to_cache_dict(self) -> dict:
        return {
            "id": self.id,
            "code": self.code,
            "alias": self.alias,
            "destination_url": self.destination_url,
            "is_active": self.is_active,
            "is_restricted": self.is_restricted,
            "deactivation_reason": self.deactivation_reason,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
            "password_secret": self.password_secret,
            "splash_asset": self.splash_asset,
            "loading_text": self.loading_text,
            "affiliate": {
                "enabled": self.affiliate.enabled,
                "tag": self.affiliate.tag,
                "affiliate_id": self.affiliate.affiliate_id,
                "cookie_days": self.affiliate.cookie_days,
                "custom_params": self.affiliate.custom_params,
                "commission_rate": self.affiliate.commission_rate,
            },
            "destinations": [
                {"url": d.url, "rule": d.rule.to_text(), "weight": d.weight}
                for d in self.destinations
            ],
        }

    @classmethod
    def from_cache_dict(cls, data: dict) -> "LinkSnapshot":
        destinations = []
        for item in data.get("destinations") or []:
            rule = parse_rule(item.get("rule"))
            if rule is None or not item.get("url"):
                continue
            destinations.append(
                WeightedDestination(url=item["url"], rule=rule, weight=max(1, int(item.get("weight") or 1)))
            )

        expires_at = data.get("expires_at")

        return cls(
            id=data["id"],
            code=data["code"],
            alias=data.get("alias"),
            destination_url=data["destination_url"],
            is_active=data.get("is_active", True),
            is_restricted=data.get("is_restricted", False),
            deactivation_reason=data.get("deactivation_reason"),
            expires_at=datetime.fromisoformat(expires_at) if expires_at else None,
            password_secret=data.get("password_secret"),
            splash_asset=data.get("splash_asset"),
            loading_text=data.get("loading_text"),
            affiliate=AffiliateConfig(**(data.get("affiliate") or {})),
            destinations=tuple(destinations),
        )
