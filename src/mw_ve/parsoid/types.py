"""Request and response types shared by Parsoid clients.

The response envelope mirrors what a RESTBase server returns, so callers
can consume a local transform exactly like a remote one:

- success: ``{"code": 200, "headers": {...}, "body": ...}``
- failure: ``{"error": {"message": key, "params": [...]}, "headers": {}, "body": text}``
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal

import httpx

from mw_ve.parsoid.errors import MessageValue, RawMessage

if TYPE_CHECKING:
    from mw_ve.parsoid.errors import Err, LocalizableMessage
    from mw_ve.parsoid.revision import PageIdentity, RevisionRecord

Flavor = Literal["view", "fragment"]
"""Rendering mode: full page render or body-only fragment."""


@dataclass(frozen=True)
class TransformRequest:
    """Parameters of a single transform call.

    Attributes:
        page: Page the content belongs to
        payload: Wikitext or HTML being transformed
        revision: Revision to render (real or synthetic)
        base_revision_id: Revision the payload is based on
        target_language: Language code for the output
        stash: Whether to stash the result for reuse
        flavor: Rendering mode
        etag: Cache-validation token of the HTML being transformed
    """

    page: PageIdentity
    payload: str = ""
    revision: RevisionRecord | None = None
    base_revision_id: int | None = None
    target_language: str | None = None
    stash: bool = False
    flavor: Flavor = "view"
    etag: str | None = None

    def renderer_params(self) -> dict[str, Any]:
        """Fake REST params for an HTML output renderer."""
        return {"stash": self.stash, "flavor": self.flavor}

    def transformer_body(self) -> dict[str, Any]:
        """Fake REST body for an HTML input transformer."""
        return {
            "html": {
                "body": self.payload,
            },
            "original": {
                "revid": self.base_revision_id,
                "etag": self.etag,
            },
        }


@dataclass(frozen=True)
class SuccessResponse:
    """A successful RESTBase-style response."""

    body: str | bytes
    headers: dict[str, str] = field(default_factory=dict)
    code: int = httpx.codes.OK

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": int(self.code),
            "headers": dict(self.headers),
            "body": self.body,
        }


@dataclass(frozen=True)
class ErrorResponse:
    """A failed RESTBase-style response.

    Attributes:
        error_key: Message key, "" when the failure had no localization
        error_params: Ordered message params
        headers: Response headers (always empty for local failures)
        body: Plain failure text
    """

    error_key: str
    error_params: list[Any] = field(default_factory=list)
    headers: dict[str, str] = field(default_factory=dict)
    body: str = ""

    @classmethod
    def from_err(cls, err: Err) -> ErrorResponse:
        return cls(
            error_key=err.message.get_key() or "",
            error_params=err.message.get_params() or [],
            body=err.text,
        )

    def message(self) -> LocalizableMessage:
        """Reconstruct the displayable message carried by this response."""
        if not self.error_key:
            return RawMessage(self.body)
        return MessageValue(self.error_key, tuple(self.error_params))

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": {
                "message": self.error_key,
                "params": list(self.error_params),
            },
            "headers": dict(self.headers),
            "body": self.body,
        }


ResponseEnvelope = SuccessResponse | ErrorResponse


def response_from_dict(data: dict[str, Any]) -> ResponseEnvelope:
    """Decode a RESTBase-style response dict.

    Raises:
        ValueError: If the dict is neither a success nor a failure shape,
            or claims to be both.
    """
    has_code = "code" in data
    has_error = "error" in data
    if has_code == has_error:
        raise ValueError("Response must have exactly one of 'code' or 'error'")

    headers = dict(data.get("headers") or {})
    if has_code:
        return SuccessResponse(body=data.get("body", ""), headers=headers, code=int(data["code"]))

    error = data["error"]
    if not isinstance(error, dict):
        raise ValueError(f"'error' must be a mapping, got {type(error).__name__}")
    return ErrorResponse(
        error_key=error.get("message") or "",
        error_params=list(error.get("params") or []),
        headers=headers,
        body=data.get("body", ""),
    )
