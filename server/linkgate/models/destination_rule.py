# server/linkgate/models/destination_rule.py

import uuid
from datetime import datetime
from typing import Optional

from linkgate.extensions import db
from linkgate.models.rules import parse_rule
from linkgate.models.snapshot import WeightedDestination


class DestinationRule(db.Model):
    __tablename__ = "destination_rules"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    link_id = db.Column(db.String(36), db.ForeignKey("short_links.id", ondelete="CASCADE"), nullable=False, index=True)

    position = db.Column(db.Integer, default=0, nullable=False)
    target_url = db.Column(db.Text, nullable=False)
    dimension = db.Column(db.String(20), nullable=False)
    value = db.Column(db.String(255), nullable=False)
    weight = db.Column(db.Integer, default=1, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    link = db.relationship("ShortLink", back_populates="rules")

    __table_args__ = (
        db.CheckConstraint("weight >= 1", name="ck_destination_rules_weight"),
        db.Index("idx_destination_rules_link_position", "link_id", "position"),
    )

    @property
    def rule_text(self) -> str:
        return f"{self.dimension}:{self.value}"

    def to_weighted(self) -> Optional[WeightedDestination]:
        rule = parse_rule(self.rule_text)
        if rule is None:
            return None
        return WeightedDestination(url=self.target_url, rule=rule, weight=max(1, self.weight or 1))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "url": self.target_url,
            "rule": self.rule_text,
            "weight": self.weight,
        }

    def __repr__(self) -> str:
        return f"<DestinationRule {self.rule_text} -> {self.target_url[:30]}>"
