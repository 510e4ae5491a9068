# server/linkgate/services/resolution_service.py

"""Per-request decision engine for short links.

``ResolutionEngine.resolve`` is pure with respect to storage: it takes a
link snapshot and the captured request signals and returns a
``Resolution`` carrying the outcome, the presentation to render and an
ordered list of side effects. The caller renders the response first and
dispatches the effects afterwards.

Flow: visitor context -> access gate -> password gate -> destination
resolver -> affiliate augmenter -> presentation selector. A click is only
recorded when every gate passed.
"""

import enum
import logging
import random
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from flask import Flask

from linkgate.models.snapshot import LinkSnapshot
from linkgate.models.visitor import RequestSignals
from linkgate.services.access_gate import AccessGate, AccessOutcome
from linkgate.services.affiliate_service import AffiliateAugmenter, CookieDirective
from linkgate.services.click_service import RecordClick
from linkgate.services.destination_resolver import DestinationResolver
from linkgate.services.link_store import DeactivateLink
from linkgate.services.password_gate import PasswordGate, PasswordOutcome
from linkgate.services.presentation_service import Presentation, PresentationSelector, SplashPage
from linkgate.services.visitor_context import VisitorContextExtractor
from linkgate.utils.secret_codec import SecretCodec
from linkgate.utils.validators import InvalidDestinationError, URLValidator

logger = logging.getLogger(__name__)

EXTENSION_KEY = "linkgate.engine"


class ResolutionKind(enum.Enum):
    NOT_FOUND = "not_found"
    INACTIVE = "inactive"
    RESTRICTED = "restricted"
    EXPIRED = "expired"
    PASSWORD_REQUIRED = "password_required"
    PASSWORD_REJECTED = "password_rejected"
    INVALID_DESTINATION = "invalid_destination"
    REDIRECT = "redirect"
    SPLASH = "splash"


STATUS_CODES = {
    ResolutionKind.NOT_FOUND: 404,
    ResolutionKind.INACTIVE: 403,
    ResolutionKind.RESTRICTED: 403,
    ResolutionKind.EXPIRED: 410,
    ResolutionKind.PASSWORD_REQUIRED: 200,
    ResolutionKind.PASSWORD_REJECTED: 200,
    ResolutionKind.INVALID_DESTINATION: 400,
    ResolutionKind.REDIRECT: 302,
    ResolutionKind.SPLASH: 200,
}

MESSAGES = {
    ResolutionKind.NOT_FOUND: "Link not found",
    ResolutionKind.INACTIVE: "This link is currently inactive",
    ResolutionKind.RESTRICTED: "This link has been restricted",
    ResolutionKind.EXPIRED: "This link has expired",
    ResolutionKind.INVALID_DESTINATION: "Destination URL is invalid or unsupported",
}

ACCESS_KINDS = {
    AccessOutcome.INACTIVE: ResolutionKind.INACTIVE,
    AccessOutcome.RESTRICTED: ResolutionKind.RESTRICTED,
    AccessOutcome.EXPIRED: ResolutionKind.EXPIRED,
}


@dataclass
class Resolution:
    kind: ResolutionKind
    presentation: Optional[Presentation] = None
    effects: List[object] = field(default_factory=list)

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.kind]

    @property
    def message(self) -> Optional[str]:
        return MESSAGES.get(self.kind)

    @property
    def succeeded(self) -> bool:
        return self.kind in (ResolutionKind.REDIRECT, ResolutionKind.SPLASH)

    @property
    def cookies(self) -> List[CookieDirective]:
        return [e for e in self.effects if isinstance(e, CookieDirective)]

    @property
    def background_tasks(self) -> List[object]:
        return [e for e in self.effects if isinstance(e, (RecordClick, DeactivateLink))]


class ResolutionEngine:

    def __init__(
        self,
        extractor: VisitorContextExtractor,
        access_gate: AccessGate,
        password_gate: PasswordGate,
        resolver: DestinationResolver,
        augmenter: AffiliateAugmenter,
        presenter: PresentationSelector,
    ):
        self.extractor = extractor
        self.access_gate = access_gate
        self.password_gate = password_gate
        self.resolver = resolver
        self.augmenter = augmenter
        self.presenter = presenter

    @classmethod
    def from_config(cls, config, rng: Optional[random.Random] = None) -> "ResolutionEngine":
        return cls(
            extractor=VisitorContextExtractor(
                tz_name=config.get("TIME_RULES_TIMEZONE", "UTC"),
                country_headers=config.get("TRUSTED_COUNTRY_HEADERS", ("CF-IPCountry", "X-Country-Code")),
            ),
            access_gate=AccessGate(),
            password_gate=PasswordGate(SecretCodec(config["SECRET_ENCRYPTION_KEY"])),
            resolver=DestinationResolver(rng=rng),
            augmenter=AffiliateAugmenter(
                cookie_name=config.get("AFFILIATE_COOKIE_NAME", "aff_ref"),
                secure_cookie=config.get("AFFILIATE_COOKIE_SECURE", False),
            ),
            presenter=PresentationSelector(
                countdown_seconds=config.get("SPLASH_REDIRECT_SECONDS", 3),
                default_loading_text=config.get("DEFAULT_LOADING_TEXT", "Loading…"),
            ),
        )

    def resolve(
        self,
        link: Optional[LinkSnapshot],
        signals: RequestSignals,
        password: Optional[str] = None,
        skip_splash: bool = False,
        now: Optional[datetime] = None,
    ) -> Resolution:
        now = now or datetime.utcnow()

        if link is None:
            return Resolution(ResolutionKind.NOT_FOUND)

        context = self.extractor.extract(signals, now)

        decision = self.access_gate.evaluate(link, now)
        if not decision.allowed:
            effects = [DeactivateLink(link.id)] if decision.deactivate else []
            return Resolution(ACCESS_KINDS[decision.outcome], effects=effects)

        password_outcome = self.password_gate.verify(link, password)
        if password_outcome is PasswordOutcome.PROMPT:
            return Resolution(ResolutionKind.PASSWORD_REQUIRED)
        if password_outcome is PasswordOutcome.REJECTED:
            logger.info(f"Password rejected for {link.code}")
            return Resolution(ResolutionKind.PASSWORD_REJECTED)

        try:
            destination = self._normalized_destination(link, self.resolver.resolve(link, context))
        except InvalidDestinationError as e:
            logger.warning(f"Invalid destination for {link.code}: {e}")
            return Resolution(ResolutionKind.INVALID_DESTINATION)

        final_url, cookie = self.augmenter.augment(link, destination)
        presentation = self.presenter.present(link, final_url, skip_splash=skip_splash)

        effects: List[object] = []
        if cookie is not None:
            effects.append(cookie)
        effects.append(RecordClick(
            link_id=link.id,
            code=link.code,
            signals=signals,
            context=context,
            occurred_at=now,
        ))

        kind = ResolutionKind.SPLASH if isinstance(presentation, SplashPage) else ResolutionKind.REDIRECT
        return Resolution(kind, presentation=presentation, effects=effects)

    @staticmethod
    def _normalized_destination(link: LinkSnapshot, resolved: str) -> str:
        try:
            return URLValidator.normalize(resolved)
        except InvalidDestinationError:
            if resolved == link.destination_url:
                raise
            logger.warning(f"Resolved destination for {link.code} is invalid, falling back to primary")
            return URLValidator.normalize(link.destination_url)


def init_engine(app: Flask) -> ResolutionEngine:
    engine = ResolutionEngine.from_config(app.config)
    app.extensions[EXTENSION_KEY] = engine
    return engine


def get_engine(app: Flask) -> ResolutionEngine:
    return app.extensions[EXTENSION_KEY]
