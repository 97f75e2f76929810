"""Error response bodies returned by the API."""

from __future__ import annotations

from http import HTTPStatus

from pydantic import BaseModel

URN_PREFIX = "urn:dx:os:"


class ErrorResponse(BaseModel):
    """JSON error body with type, title and detail."""

    type: str
    title: str
    detail: str | None = None

    @classmethod
    def for_status(cls, status_code: int, detail: str | None = None) -> "ErrorResponse":
        try:
            phrase = HTTPStatus(status_code).phrase
        except ValueError:
            phrase = "Error"
        return cls(
            type=f"{URN_PREFIX}{phrase.title().replace(' ', '').replace('-', '')}",
            title=phrase,
            detail=detail,
        )
