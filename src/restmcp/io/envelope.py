"""Outcome envelopes returned for every tool call.

Callers tell the shapes apart by `error: true`, never by parsing messages:

    success   {status, statusText, headers, data}
    saved     {status, statusText, headers, savedTo, size}
    failure   {error: true, message, status?, statusText?, headers?, data?}

Failure response fields appear only when an HTTP response was received.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt
from pydantic.alias_generators import to_camel

_ENVELOPE_CONFIG = ConfigDict(
    frozen=True,
    extra="forbid",
    alias_generator=to_camel,
    populate_by_name=True,
)


class SuccessEnvelope(BaseModel):
    model_config = _ENVELOPE_CONFIG

    status: int
    status_text: str
    headers: dict[str, str] = Field(default_factory=dict)
    data: Any = None

    @property
    def is_error(self) -> bool:
        return False

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class SavedEnvelope(BaseModel):
    """Success whose body went to disk instead of into the envelope."""

    model_config = _ENVELOPE_CONFIG

    status: int
    status_text: str
    headers: dict[str, str] = Field(default_factory=dict)
    saved_to: str
    size: NonNegativeInt

    @property
    def is_error(self) -> bool:
        return False

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class FailureEnvelope(BaseModel):
    model_config = _ENVELOPE_CONFIG

    error: Literal[True] = True
    message: str
    status: int | None = None
    status_text: str | None = None
    headers: dict[str, str] | None = None
    data: Any = None

    @property
    def is_error(self) -> bool:
        return True

    @property
    def has_response(self) -> bool:
        return self.status is not None

    def to_dict(self) -> dict[str, Any]:
        if not self.has_response:
            return {"error": True, "message": self.message}
        return self.model_dump(by_alias=True)


Envelope = SuccessEnvelope | SavedEnvelope | FailureEnvelope


def failure(message: str) -> FailureEnvelope:
    """Failure with no HTTP response attached."""
    return FailureEnvelope(message=message)
