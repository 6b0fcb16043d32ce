from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from flask import jsonify, request

from ..core.exceptions import DuplicateShiftError, NotFoundError, StoreError, ValidationError
from .datetime_utils import parse_hhmm, parse_iso_date

logger = logging.getLogger(__name__)


def error_response(e: Exception):
    """Map an exception onto the JSON error body and status code."""

    if isinstance(e, ValidationError):
        status = 400
    elif isinstance(e, NotFoundError):
        status = 404
    elif isinstance(e, DuplicateShiftError):
        status = 409
    elif isinstance(e, StoreError):
        logger.warning("store unavailable: %s", e)
        status = 503
    else:
        logger.exception("unhandled error in %s", request.path)
        return jsonify({"success": False, "message": "Internal server error"}), 500
    return jsonify({"success": False, "message": str(e)}), status


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("JSON object expected")
    return data


def date_arg(value: Optional[str], field_name: str, default: Optional[date] = None) -> date:
    if not value:
        if default is None:
            raise ValidationError(f"{field_name} is required")
        return default
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"{field_name} must be YYYY-MM-DD")


def time_arg(value: Optional[str]):
    return parse_hhmm(value) if value else None


def optional_int_arg(value, field_name: str) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")
