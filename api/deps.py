"""Accessors for the objects the application factory wires into app.extensions."""
from __future__ import annotations

from typing import Tuple

from flask import current_app, request

from models.db_storage import DBStorage
from services.auth_service import AuthService
from utils.exceptions import RequestValidationError

MAX_LIMIT = 100


def get_storage() -> DBStorage:
    return current_app.extensions["storage"]


def get_auth_service() -> AuthService:
    return current_app.extensions["auth_service"]


def get_json_body() -> dict:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def parse_pagination() -> Tuple[int, int]:
    try:
        page = int(request.args.get("page", "1"))
        limit = int(request.args.get("limit", "20"))
    except ValueError:
        raise RequestValidationError("page and limit must be integers")
    page = max(page, 1)
    limit = max(1, min(limit, MAX_LIMIT))
    return page, limit
