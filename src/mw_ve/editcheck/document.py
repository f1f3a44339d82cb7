"""Editable document with a complete transaction history."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from mw_ve.editcheck.linear_data import ContentRange, LinearData, from_wikitext
from mw_ve.editcheck.squash import squash
from mw_ve.editcheck.transactions import Transaction

if TYPE_CHECKING:
    from collections.abc import Iterable

    from mw_ve.editcheck.linear_data import Item
    from mw_ve.editcheck.transactions import Operation

logger = logging.getLogger(__name__)


class Document:
    """A linear document and every transaction committed to it this session.

    Usage:
        doc = Document.from_wikitext("Some text.<ref>Source</ref>")
        doc.commit(Transaction.new_from_insertion(doc.data, 1, "new words"))
        ops = doc.squashed_operations()
    """

    def __init__(self, data: LinearData | Iterable[Item] = ()) -> None:
        self.data = data if isinstance(data, LinearData) else LinearData(data)
        self.complete_history: list[Transaction] = []

    @classmethod
    def from_wikitext(cls, text: str) -> Document:
        return cls(from_wikitext(text))

    def commit(self, transaction: Transaction) -> None:
        """Apply a transaction and record it in the history.

        Raises:
            TransactionError: If the transaction does not fit the document.
        """
        self.data = LinearData(transaction.apply_to(self.data.items()))
        self.complete_history.append(transaction)
        logger.debug(
            f"Committed transaction {len(self.complete_history)} "
            f"({transaction.input_length} -> {transaction.output_length} items)"
        )

    def get_document_range(self) -> ContentRange:
        """Range of user-visible content, excluding the internal list."""
        return ContentRange(0, self.data.document_end())

    def squash_history(self) -> Transaction:
        """Squash the complete history. Raises SquashError on failure."""
        return squash(self.complete_history)

    # =========================================================================
    # DOCUMENT MODEL INTERFACE
    # =========================================================================

    def squashed_operations(self) -> list[Operation]:
        return self.squash_history().operations

    def content_length(self) -> int:
        return self.get_document_range().end

    def is_marker_at(self, offset: int) -> bool:
        return self.data.is_element_data(offset)

    def marker_type_at(self, offset: int) -> str | None:
        return self.data.get_type(offset)
