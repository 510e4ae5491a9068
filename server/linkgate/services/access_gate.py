# server/linkgate/services/access_gate.py

import enum
import logging
from datetime import datetime, timezone
from typing import NamedTuple, Optional

from linkgate.models.snapshot import LinkSnapshot

logger = logging.getLogger(__name__)

DEACTIVATED_BY_EXPIRY = "expired"


class AccessOutcome(enum.Enum):
    ALLOWED = "allowed"
    INACTIVE = "inactive"
    RESTRICTED = "restricted"
    EXPIRED = "expired"


class AccessDecision(NamedTuple):
    outcome: AccessOutcome
    deactivate: bool = False

    @property
    def allowed(self) -> bool:
        return self.outcome is AccessOutcome.ALLOWED


def _as_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class AccessGate:
    """Activation, restriction and expiry checks.

    Checked in a fixed order, first match wins:
    inactive -> restricted -> expired -> allowed.
    A link that an earlier expiry already deactivated keeps answering
    ``EXPIRED`` rather than ``INACTIVE``.
    """

    def evaluate(self, link: LinkSnapshot, now: Optional[datetime] = None) -> AccessDecision:
        now = _as_naive_utc(now or datetime.utcnow())

        if not link.is_active:
            if link.deactivation_reason == DEACTIVATED_BY_EXPIRY:
                return AccessDecision(AccessOutcome.EXPIRED)
            return AccessDecision(AccessOutcome.INACTIVE)

        if link.is_restricted:
            return AccessDecision(AccessOutcome.RESTRICTED)

        if link.expires_at is not None and _as_naive_utc(link.expires_at) <= now:
            logger.info(f"Link {link.code} expired at {link.expires_at.isoformat()}, requesting deactivation")
            return AccessDecision(AccessOutcome.EXPIRED, deactivate=True)

        return AccessDecision(AccessOutcome.ALLOWED)
