# server/linkgate/services/link_service.py

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from linkgate.extensions import db
from linkgate.models.destination_rule import DestinationRule
from linkgate.models.rules import parse_rule
from linkgate.models.short_link import ShortLink
from linkgate.services.access_gate import DEACTIVATED_BY_EXPIRY
from linkgate.services.link_store import LinkStore
from linkgate.utils.secret_codec import SecretCodec, hash_secret
from linkgate.utils.slug import CodeGenerator
from linkgate.utils.validators import InputValidator, URLValidator

logger = logging.getLogger(__name__)


def _to_int(value, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


class LinkService:

    @staticmethod
    def sanitize_destinations(destinations: Optional[Iterable[dict]]) -> List[dict]:
        """Keep well-formed ``{url, rule, weight}`` entries only.

        Rules are parsed here so that nothing malformed is ever stored.
        Weights below one are raised to one.
        """
        cleaned = []
        if not destinations:
            return cleaned

        for item in destinations:
            if not isinstance(item, dict):
                continue

            url = str(item.get("url") or "").strip()
            if not url:
                continue

            rule = parse_rule(str(item.get("rule") or ""))
            if rule is None:
                logger.debug(f"Dropping malformed destination rule {item.get('rule')!r}")
                continue

            dimension, value = rule.to_text().split(":", 1)
            cleaned.append({
                "url": url,
                "dimension": dimension,
                "value": value,
                "weight": max(1, _to_int(item.get("weight"), 1)),
            })

        return cleaned

    @staticmethod
    def encode_password(password: Optional[str]) -> Optional[str]:
        if not password:
            return None

        storage = current_app.config.get("PASSWORD_STORAGE", "aes")
        if storage == "hash":
            return hash_secret(password)
        return SecretCodec(current_app.config["SECRET_ENCRYPTION_KEY"]).encrypt(password)

    @staticmethod
    def create_link(
        destination_url: str,
        code: Optional[str] = None,
        alias: Optional[str] = None,
        password: Optional[str] = None,
        expires_at: Optional[datetime] = None,
        destinations: Optional[Iterable[dict]] = None,
        splash_asset=None,
        loading_text: Optional[str] = None,
        affiliate: Optional[dict] = None,
        owner_id: Optional[str] = None,
        is_restricted: bool = False,
    ) -> Tuple[Optional[ShortLink], Optional[str]]:

        is_valid, normalized_url, error = URLValidator.validate(destination_url)
        if not is_valid:
            return None, error

        if code:
            is_valid, code, error = InputValidator.validate_code(code)
            if not is_valid:
                return None, error
            if not CodeGenerator.is_available(code):
                return None, "This short code is already taken"
        else:
            code = CodeGenerator().generate_unique()
            if not code:
                return None, "Could not generate short code"

        if alias:
            is_valid, alias, error = InputValidator.validate_code(alias)
            if not is_valid:
                return None, error
            if alias == code or not CodeGenerator.is_available(alias):
                return None, "This alias is already taken"

        affiliate = affiliate or {}

        try:
            link = ShortLink(
                code=code,
                destination_url=normalized_url,
                alias=alias,
                expires_at=expires_at,
                owner_id=owner_id,
                is_restricted=is_restricted,
                password_secret=LinkService.encode_password(password),
                splash_asset=splash_asset,
                loading_text=loading_text.strip()[:200] if loading_text else None,
                affiliate_enabled=bool(affiliate.get("enabled")),
                affiliate_tag=affiliate.get("tag") or None,
                affiliate_id=affiliate.get("id") or None,
                affiliate_cookie_days=max(1, _to_int(affiliate.get("cookie_days"), 30)),
                affiliate_params=affiliate.get("custom_params") or None,
                commission_rate=affiliate.get("commission_rate"),
                conversion_pixel=affiliate.get("conversion_pixel"),
            )

            for position, item in enumerate(LinkService.sanitize_destinations(destinations)):
                link.rules.append(DestinationRule(
                    position=position,
                    target_url=item["url"],
                    dimension=item["dimension"],
                    value=item["value"],
                    weight=item["weight"],
                ))

            db.session.add(link)
            db.session.commit()

            logger.info(f"Short link {link.code} created")
            return link, None

        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Link creation failed: {e}")
            return None, "Failed to create link"

    @staticmethod
    def update_destinations(link: ShortLink, destinations: Optional[Iterable[dict]]) -> ShortLink:
        link.rules.clear()
        for position, item in enumerate(LinkService.sanitize_destinations(destinations)):
            link.rules.append(DestinationRule(
                position=position,
                target_url=item["url"],
                dimension=item["dimension"],
                value=item["value"],
                weight=item["weight"],
            ))

        try:
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            raise

        LinkStore.invalidate(link)
        return link

    @staticmethod
    def set_password(link: ShortLink, password: Optional[str]) -> ShortLink:
        link.password_secret = LinkService.encode_password(password)

        try:
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            raise

        LinkStore.invalidate(link)
        return link

    @staticmethod
    def sweep_expired(now: Optional[datetime] = None) -> int:
        now = now or datetime.utcnow()

        expired = ShortLink.query.filter(
            ShortLink.is_active.is_(True),
            ShortLink.expires_at.isnot(None),
            ShortLink.expires_at <= now,
        ).all()

        if not expired:
            return 0

        try:
            for link in expired:
                link.deactivate(DEACTIVATED_BY_EXPIRY)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Expiry sweep failed: {e}")
            return 0

        for link in expired:
            LinkStore.invalidate(link)
            logger.info(f"Expired link deactivated: {link.code}")

        return len(expired)
