# server/linkgate/utils/secret_codec.py

import base64
import binascii
import hashlib
import os
from typing import Callable, List, Optional

import bcrypt
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from werkzeug.security import check_password_hash, generate_password_hash

OPENSSL_MAGIC = b"Salted__"
BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")
WERKZEUG_PREFIXES = ("pbkdf2:", "scrypt:")

DecodeStrategy = Callable[[str], Optional[str]]


def is_strong_hash(stored: Optional[str]) -> bool:
    if not stored or not isinstance(stored, str):
        return False
    return stored.startswith(BCRYPT_PREFIXES) or stored.startswith(WERKZEUG_PREFIXES)


def hash_secret(plain: str) -> str:
    return generate_password_hash(plain)


def check_strong_hash(stored: str, submitted: str) -> bool:
    """Constant-time comparison against a bcrypt or werkzeug hash."""
    try:
        if stored.startswith(BCRYPT_PREFIXES):
            return bcrypt.checkpw(submitted.encode("utf-8"), stored.encode("utf-8"))
        return check_password_hash(stored, submitted)
    except ValueError:
        # over-long bcrypt input or a corrupt hash
        return False


def _evp_bytes_to_key(passphrase: bytes, salt: bytes, key_len: int = 32, iv_len: int = 16):
    derived = b""
    block = b""
    while len(derived) < key_len + iv_len:
        block = hashlib.md5(block + passphrase + salt).digest()
        derived += block
    return derived[:key_len], derived[key_len:key_len + iv_len]


class SecretCodec:
    """Reversible encodings for link passwords.

    ``encrypt`` produces the OpenSSL/CryptoJS ``Salted__`` AES-256-CBC
    format. ``decode`` runs the strategies in order (AES, base64, then the
    stored text itself for legacy plain secrets) and returns the first
    value produced, or ``None`` when every strategy fails.
    """

    def __init__(self, key: str):
        if not key:
            raise ValueError("SecretCodec requires a non-empty key")
        self._key = key.encode("utf-8")
        self.strategies: List[DecodeStrategy] = [self.decode_aes, self.decode_base64, self.decode_plain]

    def encrypt(self, plain: str) -> str:
        salt = os.urandom(8)
        key, iv = _evp_bytes_to_key(self._key, salt)

        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        data = padder.update(plain.encode("utf-8")) + padder.finalize()

        encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(data) + encryptor.finalize()

        return base64.b64encode(OPENSSL_MAGIC + salt + ciphertext).decode("ascii")

    @staticmethod
    def encode_legacy(plain: str) -> str:
        return base64.b64encode(plain.encode("utf-8")).decode("ascii")

    def decode(self, stored: Optional[str]) -> Optional[str]:
        if not stored or not isinstance(stored, str):
            return None
        for strategy in self.strategies:
            value = strategy(stored)
            if value is not None:
                return value
        return None

    def decode_aes(self, stored: str) -> Optional[str]:
        try:
            raw = base64.b64decode(stored, validate=True)
        except (binascii.Error, ValueError):
            return None

        if not raw.startswith(OPENSSL_MAGIC) or len(raw) < 32:
            return None

        salt, ciphertext = raw[8:16], raw[16:]
        if len(ciphertext) % 16:
            return None

        key, iv = _evp_bytes_to_key(self._key, salt)
        try:
            decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
            data = decryptor.update(ciphertext) + decryptor.finalize()

            unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
            plain = unpadder.update(data) + unpadder.finalize()
            value = plain.decode("utf-8")
        except ValueError:
            return None

        return value or None

    @staticmethod
    def decode_base64(stored: str) -> Optional[str]:
        try:
            value = base64.b64decode(stored.strip(), validate=True).decode("utf-8")
        except (binascii.Error, ValueError):
            return None

        if not value or not value.isprintable():
            return None
        return value

    @staticmethod
    def decode_plain(stored: str) -> Optional[str]:
        return stored if stored.strip() else None
