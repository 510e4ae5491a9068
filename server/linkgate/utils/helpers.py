# server/linkgate/utils/helpers.py

import hashlib
from typing import Optional
from urllib.parse import urlparse

TRUTHY_VALUES = {"1", "true", "yes", "on"}


def hash_string(value: str, algorithm: str = "sha256") -> str:
    if algorithm == "md5":
        return hashlib.md5(value.encode()).hexdigest()
    elif algorithm == "sha256":
        return hashlib.sha256(value.encode()).hexdigest()
    else:
        raise ValueError(f"Unsupported algorithm: {algorithm}")


def truncate_string(value: Optional[str], max_length: int = 100) -> Optional[str]:
    if not value:
        return None
    return value[:max_length]


def extract_domain(url: Optional[str], include_subdomain: bool = False) -> str:
    if not url:
        return ""
    try:
        parsed = urlparse(url if "//" in url else f"//{url}")
        domain = parsed.netloc

        domain = domain.split("@")[-1].split(":")[0]

        if not include_subdomain and domain.startswith("www."):
            domain = domain[4:]

        return domain.lower()
    except ValueError:
        return ""


def is_truthy(value) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in TRUTHY_VALUES


def first_forwarded_ip(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    ip = value.split(",")[0].strip()
    if "::ffff:" in ip:
        ip = ip.split("::ffff:")[-1]
    return ip or None
