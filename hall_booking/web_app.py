from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Any, Callable
import logging
import random

from flask import Flask, Request, jsonify, request

from .config import BookingSettings
from .engine import ANONYMOUS_CALLER, BookingEngine
from .errors import BackendError, BookingError, ConflictError, RateLimitError, ValidationError
from .rate_limit import RateLimiter

logger = logging.getLogger(__name__)

IdentityResolver = Callable[[Request], str | None]

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


def anonymous_identity(_request: Request) -> str | None:
    return None


def create_app(
    data_dir: str | Path | None = None,
    now_provider: Callable[[], datetime] | None = None,
    settings: BookingSettings | None = None,
    identity_resolver: IdentityResolver | None = None,
    rate_limiter: RateLimiter | None = None,
    rng: random.Random | None = None,
) -> Flask:
    app = Flask(__name__)
    effective_settings = settings or BookingSettings.from_env()
    if data_dir is not None:
        effective_settings = replace(effective_settings, data_dir=Path(data_dir))

    engine = BookingEngine.from_settings(
        effective_settings,
        rate_limiter=rate_limiter,
        now_provider=now_provider,
        rng=rng,
    )
    resolve_identity: IdentityResolver = identity_resolver or anonymous_identity
    app.extensions["hall_booking_engine"] = engine

    def _caller_subject() -> str | None:
        try:
            return resolve_identity(request)
        except Exception:
            logger.warning("Identity resolution failed; treating caller as anonymous", exc_info=True)
            return None

    def _caller_key(subject: str | None) -> str:
        return subject or request.remote_addr or ANONYMOUS_CALLER

    @app.after_request
    def add_security_headers(response: Any) -> Any:
        for name, value in SECURITY_HEADERS.items():
            response.headers[name] = value
        if request.path.startswith("/api/"):
            response.headers["Access-Control-Allow-Origin"] = "*"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,OPTIONS"
            response.headers["Access-Control-Allow-Headers"] = "Content-Type, Authorization"
        return response

    @app.post("/api/venues/<venue_id>/check-availability")
    def check_availability(venue_id: str) -> Any:
        subject = _caller_subject()
        payload = request.get_json(silent=True)
        try:
            result = engine.check_availability(venue_id, payload, _caller_key(subject))
        except BookingError as error:
            return _error_response(error)
        except Exception:
            logger.exception("Unexpected error while checking availability")
            return jsonify({"error": "Server error"}), 500

        return jsonify(result.to_dict())

    @app.post("/api/bookings")
    def create_booking() -> Any:
        subject = _caller_subject()
        payload = request.get_json(silent=True)
        try:
            confirmation = engine.create_booking(payload, _caller_key(subject), subject)
        except BookingError as error:
            return _error_response(error)
        except Exception:
            logger.exception("Unexpected error while creating booking")
            return jsonify({"error": "Server error"}), 500

        return jsonify(confirmation.to_dict())

    @app.get("/api/halls/<hall_id>")
    def get_hall(hall_id: str) -> Any:
        try:
            hall = engine.get_hall(hall_id, _caller_key(_caller_subject()))
        except BookingError as error:
            return _error_response(error)
        except Exception:
            logger.exception("Unexpected error while loading hall %s", hall_id)
            return jsonify({"error": "Server error"}), 500

        if hall is None:
            return jsonify({"error": "Hall not found"}), 404
        payload = hall.to_dict()
        payload["price_per_hour"] = float(hall.price_per_hour)
        if engine.demo_mode:
            payload["demo"] = True
        return jsonify(payload)

    return app


def _error_response(error: BookingError) -> Any:
    if isinstance(error, ValidationError):
        return jsonify({"error": error.message, "details": error.errors}), 400
    if isinstance(error, ConflictError):
        return (
            jsonify(
                {
                    "error": error.message,
                    "conflicts": [window.to_dict() for window in error.conflicts],
                }
            ),
            409,
        )
    if isinstance(error, RateLimitError):
        response = jsonify({"error": error.message, "resetMs": error.reset_ms})
        response.headers["Retry-After"] = str(max(1, -(-error.reset_ms // 1000)))
        return response, 429
    if isinstance(error, BackendError):
        logger.error("Backend failure: %s", error.message)
    return jsonify({"error": "Server error"}), 500


if __name__ == "__main__":
    app = create_app()
    app.run(host="127.0.0.1", port=5000, debug=False)
