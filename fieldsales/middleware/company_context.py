"""
Company context middleware: resolves the calling user's company into g.

Resolution order:
  1. Authorization: Bearer <token>  →  sub → users.id → users.company_id
  2. X-Company-ID header            →  only when API_AUTH_ENABLED is false

The middleware never rejects a request; endpoints that need a company check
``g.company_id`` and answer 401 themselves. The company always comes from the
user row, never from a claim, so a token cannot widen its own scope.
"""

import logging

import jwt as pyjwt
from flask import current_app, g, request

from fieldsales.models import db
from fieldsales.models.company import User
from fieldsales.services.jwt_service import decode_access_token

logger = logging.getLogger(__name__)

SKIP_PREFIXES = (
    "/api/v1/health",
    "/static/",
)


def _auth_enabled() -> bool:
    return str(current_app.config.get("API_AUTH_ENABLED", "true")).lower() in ("1", "true", "yes")


def _company_from_token(token: str) -> tuple[int | None, int | None]:
    try:
        payload = decode_access_token(token)
    except pyjwt.ExpiredSignatureError:
        logger.info("Expired bearer token on %s", request.path)
        return None, None
    except pyjwt.InvalidTokenError as exc:
        logger.info("Rejected bearer token on %s: %s", request.path, exc)
        return None, None

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        return None, None

    user = db.session.get(User, user_id)
    if user is None or user.is_active is False:
        return user_id, None
    return user.id, user.company_id


def init_company_context(app):
    """Register the company-resolution before_request hook."""

    @app.before_request
    def _resolve_company():
        g.user_id = None
        g.company_id = None

        if request.path.startswith(SKIP_PREFIXES):
            return

        auth_header = request.headers.get("Authorization", "")
        if auth_header.startswith("Bearer "):
            g.user_id, g.company_id = _company_from_token(auth_header[7:])
            return

        if not _auth_enabled():
            raw = request.headers.get("X-Company-ID", "")
            if raw.isdigit():
                g.company_id = int(raw)
