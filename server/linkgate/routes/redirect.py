# server/linkgate/routes/redirect.py

import logging

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from linkgate.extensions import limiter
from linkgate.services.access_gate import AccessOutcome
from linkgate.services.background import get_worker
from linkgate.services.link_store import DeactivateLink, LinkStore
from linkgate.services.presentation_service import render_password_challenge, render_presentation
from linkgate.services.resolution_service import Resolution, ResolutionKind, get_engine
from linkgate.utils.base_url import build_short_url
from linkgate.utils.helpers import is_truthy

redirect_bp = Blueprint("redirect", __name__)
logger = logging.getLogger(__name__)


def password_attempt_limit() -> str:
    return current_app.config.get("PASSWORD_ATTEMPT_LIMIT", "10 per minute")


def error_response(message: str, status: int, code: str):
    return jsonify({"success": False, "error": {"code": code, "message": message}}), status


def build_response(code: str, resolution: Resolution, skip_splash: bool):
    if resolution.kind is ResolutionKind.PASSWORD_REQUIRED:
        return render_password_challenge(code, error=False, skip_splash=skip_splash)

    if resolution.kind is ResolutionKind.PASSWORD_REJECTED:
        return render_password_challenge(code, error=True, skip_splash=skip_splash)

    if resolution.succeeded:
        response = render_presentation(resolution.presentation)
        for cookie in resolution.cookies:
            response.set_cookie(
                cookie.name,
                cookie.value,
                max_age=cookie.max_age,
                httponly=cookie.httponly,
                samesite=cookie.samesite,
                secure=cookie.secure,
            )
        return response

    return error_response(resolution.message, resolution.status_code, resolution.kind.name)


def dispatch_effects(resolution: Resolution) -> None:
    worker = get_worker(current_app)
    for task in resolution.background_tasks:
        worker.submit(task)


@redirect_bp.route("/s/<code>", methods=["GET", "POST"])
@limiter.limit(password_attempt_limit, methods=["POST"])
def resolve_link(code: str):
    params = request.form if request.method == "POST" else request.args
    password = params.get("password")
    skip_splash = is_truthy(params.get("skipSplash"))

    engine = get_engine(current_app)
    signals = engine.extractor.capture(request)

    try:
        link = LinkStore.find_by_code(code)
    except SQLAlchemyError as e:
        logger.error(f"Link lookup failed for {code}: {e}")
        return error_response("Service temporarily unavailable", 503, "LOOKUP_FAILED")

    resolution = engine.resolve(link, signals, password=password, skip_splash=skip_splash)

    if not resolution.succeeded and resolution.kind is not ResolutionKind.NOT_FOUND:
        logger.info(f"Resolution for {code} ended with {resolution.kind.value}")

    response = build_response(code, resolution, skip_splash)
    dispatch_effects(resolution)
    return response


@redirect_bp.route("/s/<code>/preview", methods=["GET"])
def preview_link(code: str):
    engine = get_engine(current_app)

    try:
        link = LinkStore.find_by_code(code)
    except SQLAlchemyError as e:
        logger.error(f"Link lookup failed for {code}: {e}")
        return error_response("Service temporarily unavailable", 503, "LOOKUP_FAILED")

    if link is None:
        return error_response("Link not found", 404, "NOT_FOUND")

    decision = engine.access_gate.evaluate(link)
    if decision.deactivate:
        get_worker(current_app).submit(DeactivateLink(link.id))

    if decision.outcome is AccessOutcome.EXPIRED:
        return error_response("This link has expired", 410, "EXPIRED")
    if decision.outcome is AccessOutcome.INACTIVE:
        return error_response("This link is currently inactive", 403, "INACTIVE")
    if decision.outcome is AccessOutcome.RESTRICTED:
        return error_response("This link has been restricted", 403, "RESTRICTED")

    protected = bool(link.password_secret)

    return jsonify({
        "success": True,
        "data": {
            "code": link.code,
            "alias": link.alias,
            "short_url": build_short_url(link.code),
            "destination_url": None if protected else link.destination_url,
            "has_password": protected,
            "has_splash": bool(link.splash_asset),
            "has_rules": bool(link.destinations),
        }
    }), 200
