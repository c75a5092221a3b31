from __future__ import annotations

from functools import wraps

import structlog
from flask import jsonify

from ..core.exceptions import NotFoundError, ValidationError

logger = structlog.get_logger(__name__)


def json_endpoint(view):
    """Map domain exceptions to JSON error responses (400 / 404 / 500)."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except ValidationError as e:
            return jsonify({"message": str(e)}), 400
        except NotFoundError as e:
            return jsonify({"message": str(e)}), 404
        except Exception as e:
            logger.exception("request_failed", endpoint=view.__name__)
            return jsonify({"message": "Internal server error.", "error": str(e)}), 500

    return wrapper
