# server/linkgate/services/link_store.py

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from linkgate.extensions import db
from linkgate.models.click_event import ClickEvent
from linkgate.models.short_link import ShortLink
from linkgate.models.snapshot import LinkSnapshot
from linkgate.services.access_gate import DEACTIVATED_BY_EXPIRY
from linkgate.services.redis_service import RedisService

logger = logging.getLogger(__name__)


class RecordingFailure(Exception):
    """A click could not be persisted. Logged, never shown to visitors."""


@dataclass(frozen=True)
class DeactivateLink:
    link_id: str
    reason: str = DEACTIVATED_BY_EXPIRY


class LinkStore:

    @staticmethod
    def find_by_code(code: str) -> Optional[LinkSnapshot]:
        """Look a link up by short code or alias, Redis first."""
        code = (code or "").strip()
        max_len = current_app.config.get("SHORT_CODE_MAX_LENGTH", 50)
        if not code or len(code) > max_len:
            return None

        redis_service = RedisService()

        cached = redis_service.get_cached_link(code)
        if cached:
            try:
                return LinkSnapshot.from_cache_dict(cached)
            except (KeyError, TypeError, ValueError) as e:
                logger.debug(f"Discarding unreadable cache entry for {code}: {e}")
                redis_service.invalidate_link_cache(code)

        link = ShortLink.query.filter(
            db.or_(ShortLink.code == code, ShortLink.alias == code)
        ).first()

        if not link:
            return None

        snapshot = link.to_snapshot()
        redis_service.cache_link(code, snapshot.to_cache_dict())
        return snapshot

    @staticmethod
    def invalidate(link: ShortLink) -> None:
        RedisService().invalidate_link_cache(link.code, link.alias)

    @staticmethod
    def deactivate(message: DeactivateLink) -> bool:
        """Clear the activation flag. A link that is already inactive is left untouched."""
        link = db.session.get(ShortLink, message.link_id)
        if not link or not link.is_active:
            return False

        try:
            link.deactivate(message.reason)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Deactivation failed for {message.link_id}: {e}")
            return False

        LinkStore.invalidate(link)
        logger.info(f"Link {link.code} deactivated ({message.reason})")
        return True

    @staticmethod
    def register_click(link_id: str, click_data: dict, is_unique: bool = False) -> ClickEvent:
        now = click_data.get("clicked_at") or datetime.utcnow()

        try:
            updates = {
                ShortLink.clicks: ShortLink.clicks + 1,
                ShortLink.last_clicked_at: now,
            }
            if is_unique:
                updates[ShortLink.unique_clicks] = ShortLink.unique_clicks + 1

            updated = ShortLink.query.filter_by(id=link_id).update(updates, synchronize_session=False)
            if not updated:
                raise RecordingFailure(f"Link {link_id} no longer exists")

            click = ClickEvent(link_id=link_id, is_unique=is_unique, **click_data)
            db.session.add(click)
            db.session.commit()
            return click

        except SQLAlchemyError as e:
            db.session.rollback()
            raise RecordingFailure(str(e)) from e
