"""Edit checks over the editor's linear document model.

Public API:
    Checks:
        - does_added_content_need_reference: Long unreferenced insertion check
        - find_unreferenced_insertions: The qualifying ranges themselves
        - get_inserted_ranges: Inserted ranges of a squashed transaction

    Document model:
        - Document: Linear data plus complete transaction history
        - LinearData, ContentRange, from_wikitext
        - Transaction and its operations
        - squash, SquashError
"""

from mw_ve.editcheck.checks import (
    DocumentModel,
    does_added_content_need_reference,
    find_unreferenced_insertions,
    get_inserted_ranges,
    range_has_reference,
)
from mw_ve.editcheck.document import Document
from mw_ve.editcheck.linear_data import ContentRange, LinearData, from_wikitext
from mw_ve.editcheck.squash import SquashError, squash
from mw_ve.editcheck.transactions import (
    AnnotateOp,
    AttributeOp,
    Operation,
    ReplaceOp,
    RetainOp,
    Transaction,
    TransactionError,
)

__all__ = [
    "AnnotateOp",
    "AttributeOp",
    "ContentRange",
    "Document",
    "DocumentModel",
    "LinearData",
    "Operation",
    "ReplaceOp",
    "RetainOp",
    "SquashError",
    "Transaction",
    "TransactionError",
    "does_added_content_need_reference",
    "find_unreferenced_insertions",
    "from_wikitext",
    "get_inserted_ranges",
    "range_has_reference",
    "squash",
]
