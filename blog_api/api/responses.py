"""
Response envelope convention shared by every handler.

Successful payloads and error envelopes are written as two-space indented
JSON. Errors always take the shape ``{"statusCode": <int>, "error": <str>}``.
"""

from __future__ import annotations

import json
from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from .schemas import ErrorEnvelope

JSON_INDENT = 2


class IndentedJSONResponse(JSONResponse):
    """JSON response rendered with a two-space indent."""

    def render(self, content: Any) -> bytes:
        return json.dumps(
            content,
            ensure_ascii=False,
            allow_nan=False,
            indent=JSON_INDENT,
            separators=(",", ": "),
        ).encode("utf-8")


class ApiError(Exception):
    """Terminal request failure carrying the status to answer with."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def render(payload: Any, status_code: int = 200) -> IndentedJSONResponse:
    """Serialize pydantic models (or lists of them) as indented JSON."""
    return IndentedJSONResponse(
        content=jsonable_encoder(payload, by_alias=True),
        status_code=status_code,
    )


def error_response(status_code: int, message: str) -> IndentedJSONResponse:
    """Write the error envelope with the given status code."""
    envelope = ErrorEnvelope(status_code=status_code, error=message)
    return render(envelope, status_code=status_code)


__all__ = [
    "JSON_INDENT",
    "ApiError",
    "IndentedJSONResponse",
    "error_response",
    "render",
]
