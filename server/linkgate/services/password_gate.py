# server/linkgate/services/password_gate.py

import enum
import hmac
import logging
from typing import Optional

from linkgate.models.snapshot import LinkSnapshot
from linkgate.utils.secret_codec import SecretCodec, check_strong_hash, is_strong_hash

logger = logging.getLogger(__name__)


class PasswordOutcome(enum.Enum):
    NOT_REQUIRED = "not_required"
    PROMPT = "prompt"
    ACCEPTED = "accepted"
    REJECTED = "rejected"

    @property
    def passed(self) -> bool:
        return self in (PasswordOutcome.NOT_REQUIRED, PasswordOutcome.ACCEPTED)


class PasswordGate:

    def __init__(self, codec: SecretCodec):
        self.codec = codec

    def verify(self, link: LinkSnapshot, submitted: Optional[str]) -> PasswordOutcome:
        stored = link.password_secret
        if not stored:
            return PasswordOutcome.NOT_REQUIRED

        if submitted is None or submitted == "":
            return PasswordOutcome.PROMPT

        if is_strong_hash(stored):
            ok = check_strong_hash(stored, submitted)
        else:
            ok = self._check_reversible(link, stored, submitted)

        return PasswordOutcome.ACCEPTED if ok else PasswordOutcome.REJECTED

    def _check_reversible(self, link: LinkSnapshot, stored: str, submitted: str) -> bool:
        decoded = self.codec.decode(stored)
        if decoded is None:
            logger.error(f"Could not decode password secret for link {link.code}")
            return False

        return hmac.compare_digest(
            decoded.strip().encode("utf-8"),
            submitted.strip().encode("utf-8"),
        )
