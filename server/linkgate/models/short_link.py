# server/linkgate/models/short_link.py

import uuid
from datetime import datetime
from typing import Optional

from linkgate.extensions import db
from linkgate.models.snapshot import AffiliateConfig, LinkSnapshot


class ShortLink(db.Model):
    __tablename__ = "short_links"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    owner_id = db.Column(db.String(36), nullable=True, index=True)

    code = db.Column(db.String(50), unique=True, nullable=False, index=True)
    alias = db.Column(db.String(50), unique=True, nullable=True, index=True)
    destination_url = db.Column(db.Text, nullable=False)

    is_active = db.Column(db.Boolean, default=True, nullable=False, index=True)
    is_restricted = db.Column(db.Boolean, default=False, nullable=False)
    deactivation_reason = db.Column(db.String(20), nullable=True)
    deactivated_at = db.Column(db.DateTime, nullable=True)
    expires_at = db.Column(db.DateTime, nullable=True, index=True)

    password_secret = db.Column(db.Text, nullable=True)

    splash_asset = db.Column(db.JSON, nullable=True)
    loading_text = db.Column(db.String(200), nullable=True)

    affiliate_enabled = db.Column(db.Boolean, default=False, nullable=False)
    affiliate_tag = db.Column(db.String(100), nullable=True)
    affiliate_id = db.Column(db.String(100), nullable=True)
    affiliate_cookie_days = db.Column(db.Integer, default=30, nullable=False)
    affiliate_params = db.Column(db.String(1024), nullable=True)
    commission_rate = db.Column(db.Float, nullable=True)
    conversion_pixel = db.Column(db.Text, nullable=True)

    clicks = db.Column(db.BigInteger, default=0, nullable=False)
    unique_clicks = db.Column(db.BigInteger, default=0, nullable=False)
    last_clicked_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    rules = db.relationship(
        "DestinationRule",
        back_populates="link",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="DestinationRule.position",
    )
    click_events = db.relationship("ClickEvent", back_populates="link", lazy="dynamic", cascade="all, delete-orphan")

    __table_args__ = (
        db.Index("idx_short_links_active_expires", "is_active", "expires_at"),
    )

    def __init__(
        self,
        code: str,
        destination_url: str,
        alias: Optional[str] = None,
        expires_at: Optional[datetime] = None,
        **kwargs
    ):
        self.code = code.strip()
        self.destination_url = destination_url.strip()
        self.alias = alias.strip() if alias else None
        self.expires_at = expires_at
        self.is_active = kwargs.pop("is_active", True)
        self.is_restricted = kwargs.pop("is_restricted", False)
        self.affiliate_enabled = kwargs.pop("affiliate_enabled", False)
        self.affiliate_cookie_days = kwargs.pop("affiliate_cookie_days", 30)
        self.clicks = 0
        self.unique_clicks = 0

        for key, value in kwargs.items():
            if hasattr(self, key):
                setattr(self, key, value)

    def deactivate(self, reason: str) -> None:
        self.is_active = False
        self.deactivation_reason = reason
        self.deactivated_at = datetime.utcnow()

    def to_snapshot(self) -> LinkSnapshot:
        weighted = [rule.to_weighted() for rule in self.rules]

        return LinkSnapshot(
            id=self.id,
            code=self.code,
            alias=self.alias,
            destination_url=self.destination_url,
            is_active=self.is_active,
            is_restricted=self.is_restricted,
            deactivation_reason=self.deactivation_reason,
            expires_at=self.expires_at,
            password_secret=self.password_secret,
            splash_asset=self.splash_asset,
            loading_text=self.loading_text,
            affiliate=AffiliateConfig(
                enabled=self.affiliate_enabled,
                tag=self.affiliate_tag,
                affiliate_id=self.affiliate_id,
                cookie_days=self.affiliate_cookie_days or 30,
                custom_params=self.affiliate_params,
                commission_rate=self.commission_rate,
            ),
            destinations=tuple(w for w in weighted if w is not None),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "code": self.code,
            "alias": self.alias,
            "destination_url": self.destination_url,
            "is_active": self.is_active,
            "is_restricted": self.is_restricted,
            "deactivation_reason": self.deactivation_reason,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
            "has_password": bool(self.password_secret),
            "has_splash": bool(self.splash_asset),
            "affiliate_enabled": self.affiliate_enabled,
            "destinations": [rule.to_dict() for rule in self.rules],
            "clicks": self.clicks,
            "unique_clicks": self.unique_clicks,
            "last_clicked_at": self.last_clicked_at.isoformat() if self.last_clicked_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return f"<ShortLink {self.code}>"
