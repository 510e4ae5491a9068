# server/linkgate/models/click_event.py

import uuid
from datetime import datetime
from typing import Optional

from linkgate.extensions import db


class ClickEvent(db.Model):
    __tablename__ = "click_events"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    link_id = db.Column(db.String(36), db.ForeignKey("short_links.id", ondelete="CASCADE"), nullable=False, index=True)

    clicked_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)

    ip_address = db.Column(db.String(64), nullable=True)
    ip_hash = db.Column(db.String(64), nullable=True, index=True)
    user_agent = db.Column(db.String(512), nullable=True)
    referrer = db.Column(db.String(512), nullable=True)
    referrer_domain = db.Column(db.String(255), nullable=True, index=True)

    country = db.Column(db.String(16), nullable=True, index=True)
    device_type = db.Column(db.String(20), nullable=True)
    device_brand = db.Column(db.String(50), nullable=True)
    device_model = db.Column(db.String(50), nullable=True)
    browser = db.Column(db.String(50), nullable=True)
    browser_version = db.Column(db.String(30), nullable=True)
    os = db.Column(db.String(50), nullable=True)
    os_version = db.Column(db.String(30), nullable=True)
    language = db.Column(db.String(35), nullable=True)
    hour = db.Column(db.Integer, nullable=True)

    is_bot = db.Column(db.Boolean, default=False, nullable=False)
    is_unique = db.Column(db.Boolean, default=False, nullable=False)

    link = db.relationship("ShortLink", back_populates="click_events")

    __table_args__ = (
        db.Index("idx_click_events_link_date", "link_id", "clicked_at"),
    )

    def __init__(
        self,
        link_id: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        referrer: Optional[str] = None,
        clicked_at: Optional[datetime] = None,
        **kwargs
    ):
        self.link_id = link_id
        self.ip_address = ip_address
        self.user_agent = user_agent
        self.referrer = referrer
        self.clicked_at = clicked_at or datetime.utcnow()
        self.is_bot = kwargs.pop("is_bot", False)
        self.is_unique = kwargs.pop("is_unique", False)

        for key, value in kwargs.items():
            if hasattr(self, key):
                setattr(self, key, value)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "clicked_at": self.clicked_at.isoformat(),
            "referrer_domain": self.referrer_domain,
            "country": self.country,
            "device_type": self.device_type,
            "browser": self.browser,
            "os": self.os,
            "language": self.language,
            "is_unique": self.is_unique,
        }

    def __repr__(self) -> str:
        return f"<ClickEvent {self.link_id[:8]}>"
