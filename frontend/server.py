"""
Flask web server for the Knowledge Base Assistant.
Provides the JSON API and binds sessions to clients through a cookie.
"""

import logging

from flask import Flask, jsonify, request

from config import (
    COOKIE_SECURE,
    SESSION_COOKIE_MAX_AGE,
    SESSION_COOKIE_NAME,
    SESSION_HEADER,
    SESSION_ID_MAX_LENGTH,
)
from core.errors import BackendFailure, ValidationError
from core.sessions import resolve_session_id

logger = logging.getLogger(__name__)


def create_app(pipeline, cookie_secure: bool = COOKIE_SECURE):
    """Create and configure the Flask application."""
    app = Flask(__name__)

    def _session_id():
        data = request.get_json(silent=True) or {}
        body_value = data.get("sessionId") if isinstance(data, dict) else None
        return resolve_session_id(
            header_value=request.headers.get(SESSION_HEADER),
            body_value=body_value,
            cookie_value=request.cookies.get(SESSION_COOKIE_NAME),
            max_length=SESSION_ID_MAX_LENGTH,
        )

    def _with_session(payload, sid, minted, status=200):
        response = jsonify(payload)
        response.status_code = status
        if minted:
            response.set_cookie(
                SESSION_COOKIE_NAME,
                sid,
                max_age=SESSION_COOKIE_MAX_AGE,
                httponly=True,
                samesite="Lax",
                secure=cookie_secure,
            )
        return response

    @app.route("/api/health", methods=["GET"])
    def health():
        return jsonify(pipeline.health())

    @app.route("/api/reset", methods=["POST"])
    def reset():
        """Clear the caller's conversation history."""
        sid, minted = _session_id()
        return _with_session(pipeline.reset(sid), sid, minted)

    @app.route("/api/session", methods=["GET"])
    def session_info():
        sid, minted = _session_id()
        return _with_session(pipeline.session_info(sid), sid, minted)

    @app.route("/api/ask", methods=["POST"])
    def ask():
        """
        Q&A endpoint.
        Request:  {"question": "..."} or {"message": "..."}, optional "sessionId"
        Response: {"answer": "...", "mode": "...", "sessionId": "...", "citations": [{"idx", "score"}]}
        """
        sid, minted = _session_id()
        data = request.get_json(silent=True) or {}
        question = (data.get("question") or data.get("message")) if isinstance(data, dict) else None

        try:
            result = pipeline.ask(question, sid)
        except ValidationError as e:
            return _with_session({"error": str(e)}, sid, minted, status=400)
        except BackendFailure as e:
            logger.error("Ask error: %s", e.message)
            return _with_session(
                {"error": e.message, "details": {"status": e.status, "type": e.error_type}},
                sid, minted, status=e.status,
            )

        status = 503 if result.get("degraded") else 200
        return _with_session(result, sid, minted, status=status)

    @app.route("/api/stats", methods=["GET"])
    def stats():
        """Return pipeline statistics."""
        return jsonify(pipeline.get_stats())

    return app
