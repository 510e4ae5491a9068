# server/linkgate/utils/__init__.py

from linkgate.utils.validators import URLValidator, InputValidator, InvalidDestinationError
from linkgate.utils.secret_codec import SecretCodec, is_strong_hash, hash_secret, check_strong_hash
from linkgate.utils.base_url import get_public_base_url, build_short_url
from linkgate.utils.helpers import (
    hash_string,
    truncate_string,
    extract_domain,
    is_truthy,
    first_forwarded_ip,
)

__all__ = [
    "URLValidator",
    "InputValidator",
    "InvalidDestinationError",
    "SecretCodec",
    "is_strong_hash",
    "hash_secret",
    "check_strong_hash",
    "get_public_base_url",
    "build_short_url",
    "hash_string",
    "truncate_string",
    "extract_domain",
    "is_truthy",
    "first_forwarded_ip",
]
