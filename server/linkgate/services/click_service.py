# server/linkgate/services/click_service.py

import logging
from dataclasses import dataclass
from datetime import datetime

from linkgate.models.visitor import RequestSignals, VisitorContext
from linkgate.services.link_store import LinkStore, RecordingFailure
from linkgate.services.redis_service import RedisService
from linkgate.services.visitor_context import lookup_country, parse_client
from linkgate.utils.helpers import extract_domain, hash_string, truncate_string

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordClick:
    link_id: str
    code: str
    signals: RequestSignals
    context: VisitorContext
    occurred_at: datetime


class ClickRecorder:

    @staticmethod
    def build_click_data(message: RecordClick) -> dict:
        signals = message.signals
        client = parse_client(signals.user_agent)

        ip_hash = None
        if signals.ip_address:
            ip_hash = hash_string(signals.ip_address)

        return {
            "clicked_at": message.occurred_at,
            "ip_address": truncate_string(signals.ip_address, 64),
            "ip_hash": ip_hash,
            "user_agent": truncate_string(signals.user_agent, 512),
            "referrer": truncate_string(signals.referrer, 512),
            "referrer_domain": extract_domain(signals.referrer) or None,
            "country": lookup_country(signals.ip_address, signals.country_hint),
            "device_type": client["device_type"],
            "device_brand": truncate_string(client["device_brand"], 50),
            "device_model": truncate_string(client["device_model"], 50),
            "browser": truncate_string(client["browser"], 50),
            "browser_version": truncate_string(client["browser_version"], 30),
            "os": truncate_string(client["os"], 50),
            "os_version": truncate_string(client["os_version"], 30),
            "language": truncate_string(message.context.language, 35),
            "hour": message.context.hour,
            "is_bot": client["is_bot"],
        }

    @staticmethod
    def record(message: RecordClick) -> None:
        """Persist one click. Failures are logged here and never re-raised."""
        try:
            click_data = ClickRecorder.build_click_data(message)

            redis_service = RedisService()
            is_unique = redis_service.add_unique_visitor(message.link_id, click_data["ip_hash"])

            LinkStore.register_click(message.link_id, click_data, is_unique=is_unique)
            redis_service.increment_click_counter(message.code)

        except RecordingFailure as e:
            logger.error(f"Click recording failed for {message.code}: {e}")
