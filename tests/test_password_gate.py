# tests/test_password_gate.py

import bcrypt
import pytest
from werkzeug.security import generate_password_hash

from linkgate.models.snapshot import LinkSnapshot
from linkgate.services.password_gate import PasswordGate, PasswordOutcome
from linkgate.utils.secret_codec import SecretCodec

KEY = "test-encryption-key"


@pytest.fixture
def codec():
    return SecretCodec(KEY)


@pytest.fixture
def gate(codec):
    return PasswordGate(codec)


def make_snapshot(secret):
    return LinkSnapshot(id="link-1", code="abc123", destination_url="https://example.com", password_secret=secret)


def test_unprotected_link(gate):
    assert gate.verify(make_snapshot(None), "anything") is PasswordOutcome.NOT_REQUIRED
    assert gate.verify(make_snapshot(""), None) is PasswordOutcome.NOT_REQUIRED


@pytest.mark.parametrize("submitted", [None, ""])
def test_missing_submission_prompts(gate, codec, submitted):
    assert gate.verify(make_snapshot(codec.encrypt("secret")), submitted) is PasswordOutcome.PROMPT


def test_aes_secret(gate, codec):
    snapshot = make_snapshot(codec.encrypt("hunter2"))
    assert gate.verify(snapshot, "hunter2") is PasswordOutcome.ACCEPTED
    assert gate.verify(snapshot, "  hunter2 ") is PasswordOutcome.ACCEPTED
    assert gate.verify(snapshot, "hunter3") is PasswordOutcome.REJECTED


def test_legacy_base64_secret_is_trimmed(gate):
    snapshot = make_snapshot(SecretCodec.encode_legacy(" open sesame "))
    assert gate.verify(snapshot, "open sesame") is PasswordOutcome.ACCEPTED
    assert gate.verify(snapshot, "closed") is PasswordOutcome.REJECTED


def test_bcrypt_secret(gate):
    stored = bcrypt.hashpw(b"s3cret", bcrypt.gensalt(rounds=4)).decode("utf-8")
    snapshot = make_snapshot(stored)
    assert gate.verify(snapshot, "s3cret") is PasswordOutcome.ACCEPTED
    assert gate.verify(snapshot, "s3cret ") is PasswordOutcome.REJECTED


def test_werkzeug_hash_secret(gate):
    snapshot = make_snapshot(generate_password_hash("letmein"))
    assert gate.verify(snapshot, "letmein") is PasswordOutcome.ACCEPTED
    assert gate.verify(snapshot, "letmeout") is PasswordOutcome.REJECTED


def test_legacy_plain_secret(gate):
    snapshot = make_snapshot("secret")
    assert gate.verify(snapshot, "secret") is PasswordOutcome.ACCEPTED
    assert gate.verify(snapshot, " secret ") is PasswordOutcome.ACCEPTED
    assert gate.verify(snapshot, "other") is PasswordOutcome.REJECTED


def test_blank_secret_rejects(gate):
    assert gate.verify(make_snapshot("   "), "   x") is PasswordOutcome.REJECTED


def test_secret_encrypted_with_another_key_rejects(gate):
    foreign = SecretCodec("some-other-key").encrypt("hunter2")
    assert gate.verify(make_snapshot(foreign), "hunter2") is PasswordOutcome.REJECTED


def test_outcome_passed():
    assert PasswordOutcome.NOT_REQUIRED.passed
    assert PasswordOutcome.ACCEPTED.passed
    assert not PasswordOutcome.PROMPT.passed
    assert not PasswordOutcome.REJECTED.passed
