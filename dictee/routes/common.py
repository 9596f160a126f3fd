"""Helpers shared by the JSON API routers."""

from __future__ import annotations

import json

from fastapi import Request
from fastapi.responses import JSONResponse

from dictee.errors import DicteeError, ValidationError


async def read_json(request: Request) -> dict:
    """Decode the request body as a JSON object."""
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError("Request body must be valid JSON") from None
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def error_response(exc: DicteeError) -> JSONResponse:
    return JSONResponse({"error": str(exc)}, status_code=exc.status_code)
