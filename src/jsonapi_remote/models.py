"""Canonical Pydantic models shared across all jsonapi_remote modules.

The models fall into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`RequestConfig`, :class:`OutputConfig` and :class:`GlobalConfig`.

**JSON:API document models** -- produced by the decoders in
:mod:`jsonapi_remote.decoding`:
    :class:`ErrorSource`, :class:`JsonApiError`, :class:`ResourceObject`
    and :class:`Document`.

JSON:API models use ``extra="allow"`` so that members this library does not
know about (``jsonapi``, extension members, vendor metadata) survive a
decode and are reachable through ``model_extra``.
"""

from __future__ import annotations

import enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from jsonapi_remote.exceptions import InvalidUsageError


class HTTPMethod(str, enum.Enum):
    """HTTP verbs a JSON:API request may use.

    The enum value is the exact token sent on the wire.
    """

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"

    @classmethod
    def parse(cls, value: Union[str, HTTPMethod]) -> HTTPMethod:
        """Return the member for *value*, accepting any letter case.

        Raises:
            InvalidUsageError: If *value* is not one of the supported verbs.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            allowed = ", ".join(m.value for m in cls)
            raise InvalidUsageError(
                f"Unsupported HTTP method {value!r} (expected one of: {allowed})"
            ) from None


# --- Configuration ---


class RequestConfig(BaseModel):
    """Transport settings applied to every call made by a client."""

    base_url: Optional[str] = Field(
        default=None, description="Prefix for relative request URLs"
    )
    timeout: Optional[float] = Field(
        default=None, description="Request timeout in seconds; unset means no timeout"
    )
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    follow_redirects: bool = Field(default=True, description="Follow 3xx redirects")


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/jsonapi-remote/config.json``.

    See :func:`~jsonapi_remote.config.resolve_config` for the precedence
    chain that layers environment variables and CLI flags on top.
    """

    request: RequestConfig = Field(default_factory=RequestConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    extract_headers: list[str] = Field(
        default_factory=list,
        description="Response headers the CLI extracts when --extract is not given",
    )


# --- JSON:API documents ---


class ErrorSource(BaseModel):
    """The ``source`` member of a JSON:API error object."""

    model_config = ConfigDict(extra="allow")

    pointer: Optional[str] = Field(
        default=None, description="JSON Pointer to the offending request member"
    )
    parameter: Optional[str] = Field(
        default=None, description="Query parameter that caused the error"
    )
    header: Optional[str] = Field(
        default=None, description="Request header that caused the error"
    )


class JsonApiError(BaseModel):
    """A single entry of a JSON:API ``errors`` array.

    Every member is optional.  Validation errors usually carry a
    ``source.pointer`` such as ``/data/attributes/password`` that
    :func:`~jsonapi_remote.messages.field_name` turns into a field name.
    """

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    id: Optional[str] = None
    status: Optional[str] = None
    code: Optional[str] = None
    title: Optional[str] = None
    detail: Optional[str] = None
    source: Optional[ErrorSource] = None
    links: Optional[dict[str, Any]] = None
    meta: Optional[dict[str, Any]] = None


class ResourceObject(BaseModel):
    """A JSON:API resource object.

    ``id`` is optional because client-created resources may omit it.
    """

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    type: str
    id: Optional[str] = None
    attributes: dict[str, Any] = Field(default_factory=dict)
    relationships: Optional[dict[str, Any]] = None
    links: Optional[dict[str, Any]] = None
    meta: Optional[dict[str, Any]] = None


class Document(BaseModel):
    """A JSON:API top-level document.

    A document must contain at least one of ``data``, ``errors`` or
    ``meta``, and ``data`` and ``errors`` must not coexist.  Violations are
    structural failures and surface from the decoder as
    :class:`~jsonapi_remote.decoding.ParseFailure`.
    """

    model_config = ConfigDict(extra="allow")

    data: Optional[Union[ResourceObject, list[ResourceObject]]] = None
    errors: Optional[list[JsonApiError]] = None
    meta: Optional[dict[str, Any]] = None
    links: Optional[dict[str, Any]] = None
    included: list[ResourceObject] = Field(default_factory=list)
    jsonapi: Optional[dict[str, Any]] = None

    @model_validator(mode="before")
    @classmethod
    def _check_top_level(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            raise ValueError("a JSON:API document must be a JSON object")
        if not any(key in values for key in ("data", "errors", "meta")):
            raise ValueError(
                "a JSON:API document must contain at least one of 'data', 'errors' or 'meta'"
            )
        if "data" in values and "errors" in values:
            raise ValueError("'data' and 'errors' must not coexist in a JSON:API document")
        return values

    def resources(self) -> list[ResourceObject]:
        """Return the primary data as a list (empty for ``null`` or meta-only documents)."""
        if self.data is None:
            return []
        if isinstance(self.data, list):
            return list(self.data)
        return [self.data]
