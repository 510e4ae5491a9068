# server/linkgate/utils/base_url.py

from flask import current_app


def get_public_base_url() -> str:
    return current_app.config.get("PUBLIC_BASE_URL", "http://localhost:5000")


def build_short_url(code: str) -> str:
    base = get_public_base_url().rstrip("/")
    return f"{base}/s/{code}"
