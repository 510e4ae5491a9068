# server/linkgate/routes/__init__.py

from linkgate.routes.redirect import redirect_bp
from linkgate.routes.health import health_bp

__all__ = [
    "redirect_bp",
    "health_bp",
]
