"""Errors raised by rendering collaborators and their localizable messages.

Collaborators (HTML output renderers, HTML input transformers) signal
failures by raising one of the exceptions below. The client never lets
them escape: every collaborator call runs through :func:`attempt`, which
returns an :class:`Ok` or :class:`Err` result instead.

A failure is described by a :data:`LocalizableMessage`, which is either a
structured :class:`MessageValue` (message key plus ordered params) or a
:class:`RawMessage` holding plain text.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Generic, TypeVar

import httpx

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

logger = logging.getLogger(__name__)

T = TypeVar("T")

# $1, $2, ... placeholders used by MediaWiki message texts
MESSAGE_PARAM_PATTERN: re.Pattern[str] = re.compile(r"\$(\d+)")


# =============================================================================
# LOCALIZABLE MESSAGES
# =============================================================================


@dataclass(frozen=True)
class MessageValue:
    """A localizable message: a message key and its ordered parameters.

    Attributes:
        key: Message key (e.g. "rest-nonexistent-title")
        params: Ordered parameters substituted for $1, $2, ...
    """

    key: str
    params: tuple[Any, ...] = ()

    def get_key(self) -> str:
        return self.key

    def get_params(self) -> list[Any]:
        return list(self.params)

    def text(self, messages: Mapping[str, str] | None = None) -> str:
        """Render the message using a key -> text catalog.

        Unknown keys render as ``⧼key⧽``, the way MediaWiki displays a
        missing message.
        """
        template = (messages or {}).get(self.key)
        if template is None:
            return f"⧼{self.key}⧽"

        def substitute(match: re.Match[str]) -> str:
            index = int(match.group(1)) - 1
            if 0 <= index < len(self.params):
                return str(self.params[index])
            return match.group(0)

        return MESSAGE_PARAM_PATTERN.sub(substitute, template)


@dataclass(frozen=True)
class RawMessage:
    """Plain message text with no localization key."""

    raw_text: str

    def get_key(self) -> str:
        return ""

    def get_params(self) -> list[Any]:
        return []

    def text(self, messages: Mapping[str, str] | None = None) -> str:
        return self.raw_text


LocalizableMessage = MessageValue | RawMessage
"""Either a structured message or raw text."""


# =============================================================================
# EXCEPTIONS
# =============================================================================


class HttpError(Exception):
    """Raised by a collaborator to signal a transport-style failure.

    Attributes:
        code: HTTP-like status code describing the failure
    """

    def __init__(self, message: str, code: int = httpx.codes.INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.code = code


class LocalizedHttpError(HttpError):
    """HttpError carrying a structured, localizable message."""

    def __init__(
        self,
        message_value: MessageValue,
        code: int = httpx.codes.INTERNAL_SERVER_ERROR,
        message: str | None = None,
    ) -> None:
        super().__init__(message if message is not None else message_value.key, code)
        self.message_value = message_value


class LocalizedError(Exception):
    """Failure with a localizable message but no HTTP status."""

    def __init__(self, message_object: MessageValue, message: str | None = None) -> None:
        super().__init__(message if message is not None else message_object.key)
        self.message_object = message_object


def describe_error(exc: BaseException) -> LocalizableMessage:
    """Return the most specific localizable form of an exception."""
    if isinstance(exc, LocalizedHttpError):
        return exc.message_value
    if isinstance(exc, LocalizedError):
        return exc.message_object
    return RawMessage(str(exc))


# =============================================================================
# RESULT TYPE
# =============================================================================


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful collaborator call."""

    value: T


@dataclass(frozen=True)
class Err:
    """Failed collaborator call.

    Attributes:
        message: Localizable description of the failure
        text: Plain exception text
        code: HTTP-like status code
    """

    message: LocalizableMessage
    text: str
    code: int = httpx.codes.INTERNAL_SERVER_ERROR
    exception: BaseException | None = field(default=None, compare=False, repr=False)


Result = Ok[T] | Err


def attempt(call: Callable[[], T]) -> Result[T]:
    """Run a collaborator call, converting any failure into an Err."""
    try:
        return Ok(call())
    except HttpError as e:
        logger.warning(
            f"Transform failed with {e.code} {httpx.codes.get_reason_phrase(e.code)}: {e}"
        )
        return Err(message=describe_error(e), text=str(e), code=e.code, exception=e)
    except LocalizedError as e:
        logger.warning(f"Transform failed: {e.message_object.key}")
        return Err(message=describe_error(e), text=str(e), exception=e)
    except Exception as e:
        logger.exception(f"Unexpected transform error: {type(e).__name__}: {e}")
        return Err(message=describe_error(e), text=str(e), exception=e)
