# tests/test_access_gate.py

from datetime import datetime, timedelta

from linkgate.models.snapshot import LinkSnapshot
from linkgate.services.access_gate import AccessGate, AccessOutcome, DEACTIVATED_BY_EXPIRY

NOW = datetime(2024, 5, 1, 12, 0, 0)


def make_snapshot(**kwargs):
    return LinkSnapshot(id="link-1", code="abc123", destination_url="https://example.com", **kwargs)


def test_active_link_is_allowed():
    decision = AccessGate().evaluate(make_snapshot(), NOW)
    assert decision.allowed
    assert not decision.deactivate


def test_inactive_wins_over_everything():
    snapshot = make_snapshot(is_active=False, is_restricted=True, expires_at=NOW - timedelta(days=1))
    decision = AccessGate().evaluate(snapshot, NOW)
    assert decision.outcome is AccessOutcome.INACTIVE
    assert not decision.deactivate


def test_restricted_before_expired():
    snapshot = make_snapshot(is_restricted=True, expires_at=NOW - timedelta(days=1))
    assert AccessGate().evaluate(snapshot, NOW).outcome is AccessOutcome.RESTRICTED


def test_expired_requests_deactivation():
    decision = AccessGate().evaluate(make_snapshot(expires_at=NOW), NOW)
    assert decision.outcome is AccessOutcome.EXPIRED
    assert decision.deactivate


def test_future_expiry_is_allowed():
    assert AccessGate().evaluate(make_snapshot(expires_at=NOW + timedelta(seconds=1)), NOW).allowed


def test_link_deactivated_by_expiry_stays_expired():
    snapshot = make_snapshot(
        is_active=False,
        deactivation_reason=DEACTIVATED_BY_EXPIRY,
        expires_at=NOW - timedelta(days=1),
    )
    decision = AccessGate().evaluate(snapshot, NOW)
    assert decision.outcome is AccessOutcome.EXPIRED
    assert not decision.deactivate
