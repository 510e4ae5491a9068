# server/linkgate/services/__init__.py

from linkgate.services.redis_service import RedisService
from linkgate.services.visitor_context import VisitorContextExtractor
from linkgate.services.access_gate import AccessGate, AccessOutcome, AccessDecision
from linkgate.services.password_gate import PasswordGate, PasswordOutcome
from linkgate.services.destination_resolver import DestinationResolver
from linkgate.services.affiliate_service import AffiliateAugmenter, CookieDirective
from linkgate.services.presentation_service import PresentationSelector, DirectRedirect, SplashPage
from linkgate.services.link_store import LinkStore, DeactivateLink, RecordingFailure
from linkgate.services.click_service import ClickRecorder, RecordClick
from linkgate.services.background import BackgroundWorker
from linkgate.services.resolution_service import ResolutionEngine, Resolution, ResolutionKind
from linkgate.services.link_service import LinkService

__all__ = [
    "RedisService",
    "VisitorContextExtractor",
    "AccessGate",
    "AccessOutcome",
    "AccessDecision",
    "PasswordGate",
    "PasswordOutcome",
    "DestinationResolver",
    "AffiliateAugmenter",
    "CookieDirective",
    "PresentationSelector",
    "DirectRedirect",
    "SplashPage",
    "LinkStore",
    "DeactivateLink",
    "RecordingFailure",
    "ClickRecorder",
    "RecordClick",
    "BackgroundWorker",
    "ResolutionEngine",
    "Resolution",
    "ResolutionKind",
    "LinkService",
]
