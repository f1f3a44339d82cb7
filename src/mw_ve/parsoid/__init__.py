"""In-process Parsoid client producing RESTBase-style responses.

Public API:
    Client:
        - ParsoidClient: Protocol for any Parsoid client
        - DirectParsoidClient: Client backed by local rendering helpers

    Responses:
        - SuccessResponse / ErrorResponse: The two envelope shapes
        - response_from_dict: Decode a RESTBase-style response dict

    Errors:
        - HttpError, LocalizedHttpError, LocalizedError
        - MessageValue, RawMessage: Localizable message forms
"""

from mw_ve.parsoid.client import (
    FLAVOR_DEFAULT,
    FLAVOR_FRAGMENT,
    PARSOID_VERSION,
    DirectParsoidClient,
    ParsoidClient,
)
from mw_ve.parsoid.errors import (
    HttpError,
    LocalizableMessage,
    LocalizedError,
    LocalizedHttpError,
    MessageValue,
    RawMessage,
    describe_error,
)
from mw_ve.parsoid.revision import (
    MAIN_SLOT,
    PageIdentity,
    RevisionRecord,
    WikitextContent,
    make_fake_revision,
)
from mw_ve.parsoid.types import (
    ErrorResponse,
    ResponseEnvelope,
    SuccessResponse,
    TransformRequest,
    response_from_dict,
)

__all__ = [
    "FLAVOR_DEFAULT",
    "FLAVOR_FRAGMENT",
    "MAIN_SLOT",
    "PARSOID_VERSION",
    "DirectParsoidClient",
    "ErrorResponse",
    "HttpError",
    "LocalizableMessage",
    "LocalizedError",
    "LocalizedHttpError",
    "MessageValue",
    "PageIdentity",
    "ParsoidClient",
    "RawMessage",
    "ResponseEnvelope",
    "RevisionRecord",
    "SuccessResponse",
    "TransformRequest",
    "WikitextContent",
    "describe_error",
    "make_fake_revision",
    "response_from_dict",
]
