from __future__ import annotations

import logging
from functools import wraps

from flask import jsonify, request, session

from ..core.exceptions import ConcurrentUpdateConflict, DataIntegrityWarning, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def ok(data=None, *, status: int = 200, message: str | None = None):
    body = {"success": True, "data": data}
    if message:
        body["message"] = message
    return jsonify(body), status


def fail(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def api_errors(view):
    """Translate domain errors raised by services into JSON responses."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except ValidationError as e:
            return fail(str(e), 400)
        except NotFoundError as e:
            return fail(str(e), 404)
        except ConcurrentUpdateConflict as e:
            return fail(f"{e}. Reload and retry.", 409)
        except DataIntegrityWarning as e:
            logger.warning("stored record %s is unreadable: %s", e.record_id, e)
            return fail("Stored record is unreadable", 500)
        except Exception:
            logger.exception("unhandled error in %s %s", request.method, request.path)
            return fail("Internal server error", 500)

    return wrapper


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def current_identity() -> str:
    """Identity string of the caller, as supplied by the auth layer."""

    name = session.get("name") or request.headers.get("X-User", "").strip()
    return name or "system"
