# server/linkgate/utils/slug.py

import secrets
import string
from typing import Optional

from flask import current_app

from linkgate.extensions import db
from linkgate.models.short_link import ShortLink


class CodeGenerator:
    ALLOWED_CHARS = string.ascii_letters + string.digits

    WORD_SAFE_CHARS = "abcdefghjkmnpqrstuvwxyz23456789"

    def __init__(self, exclude_ambiguous: bool = True):
        if exclude_ambiguous:
            self.chars = self.WORD_SAFE_CHARS
        else:
            self.chars = self.ALLOWED_CHARS

    def generate(self, length: Optional[int] = None) -> str:
        if length is None:
            length = current_app.config.get("SHORT_CODE_LENGTH", 7)

        return "".join(secrets.choice(self.chars) for _ in range(length))

    def generate_unique(self, max_attempts: int = 10) -> Optional[str]:
        for length in (None, 10):
            for _ in range(max_attempts):
                code = self.generate(length)
                if CodeGenerator.is_available(code):
                    return code

        return None

    @staticmethod
    def is_available(code: str) -> bool:
        """Codes and aliases share one namespace."""
        existing = ShortLink.query.filter(
            db.or_(ShortLink.code == code, ShortLink.alias == code)
        ).first()
        return existing is None
