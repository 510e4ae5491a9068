# server/linkgate/routes/health.py

import logging
from datetime import datetime

from flask import Blueprint, current_app, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from linkgate.extensions import db
from linkgate.services.redis_service import RedisService

health_bp = Blueprint("health", __name__)
logger = logging.getLogger(__name__)


def check_database() -> dict:
    start_time = datetime.utcnow()
    try:
        db.session.execute(text("SELECT 1"))
        response_time = (datetime.utcnow() - start_time).total_seconds() * 1000
        return {"status": "healthy", "response_time_ms": round(response_time, 2)}
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        db.session.rollback()
        return {"status": "unhealthy", "error": str(e)}


def check_redis() -> dict:
    if not current_app.config.get("REDIS_URL"):
        return {"status": "not_configured"}

    redis_service = RedisService()
    start_time = datetime.utcnow()
    if redis_service.ping():
        response_time = (datetime.utcnow() - start_time).total_seconds() * 1000
        return {"status": "healthy", "response_time_ms": round(response_time, 2)}
    return {"status": "unhealthy"}


@health_bp.route("/health", methods=["GET"])
def health_check():
    health_status = {
        "status": "healthy",
        "service": "linkgate",
        "timestamp": datetime.utcnow().isoformat() + "Z",
        "checks": {
            "database": check_database(),
            "redis": check_redis(),
        },
    }

    if any(c["status"] == "unhealthy" for c in health_status["checks"].values()):
        health_status["status"] = "degraded"

    status_code = 200 if health_status["status"] == "healthy" else 503
    return jsonify(health_status), status_code


@health_bp.route("/ready", methods=["GET"])
def readiness_check():
    """Redis is optional; only the database gates readiness."""
    is_ready = check_database()["status"] == "healthy"

    return jsonify({
        "ready": is_ready,
        "service": "linkgate",
        "timestamp": datetime.utcnow().isoformat() + "Z",
    }), 200 if is_ready else 503
