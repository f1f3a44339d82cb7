"""Edit checks run against the editor's document model.

The reference check looks at everything the user inserted during the
editing session and asks whether any single insertion is long enough to
need a citation but does not contain one yet.

Insertions are taken from the squashed transaction history rather than the
cursor, so the result reflects the net content added since the session
started regardless of how many keystrokes it took.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from mw_ve.config import config
from mw_ve.editcheck.linear_data import ContentRange
from mw_ve.editcheck.transactions import ReplaceOp, RetainOp

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from mw_ve.editcheck.transactions import Operation

logger = logging.getLogger(__name__)

MAIN_NAMESPACE = config.main_namespace
MINIMUM_CHARACTERS = config.minimum_characters
REFERENCE_TYPE = config.reference_type


class DocumentModel(Protocol):
    """What the edit checks need from a document."""

    def squashed_operations(self) -> list[Operation]: ...

    def content_length(self) -> int: ...

    def is_marker_at(self, offset: int) -> bool: ...

    def marker_type_at(self, offset: int) -> str | None: ...


def get_inserted_ranges(operations: Iterable[Operation], end_offset: int) -> list[ContentRange]:
    """Collect the ranges inserted by a squashed transaction.

    Walks the operations with a running offset into the new document and
    stops once the offset reaches ``end_offset``: anything after that
    belongs to the internal list, not to user-visible content. Ranges
    are clamped to ``end_offset``.

    Args:
        operations: Squashed operations in order
        end_offset: End of user-visible content

    Returns:
        Inserted ranges in document order.
    """
    ranges: list[ContentRange] = []
    offset = 0
    for op in operations:
        if isinstance(op, RetainOp):
            offset += op.length
        elif isinstance(op, ReplaceOp):
            end = offset + len(op.insert)
            ranges.append(ContentRange(offset, min(end, end_offset)))
            offset = end
        if offset >= end_offset:
            break
    return ranges


def range_has_reference(
    document: DocumentModel, content_range: ContentRange, reference_type: str = REFERENCE_TYPE
) -> bool:
    """Whether any offset in the range holds a reference marker."""
    return any(
        document.is_marker_at(offset) and document.marker_type_at(offset) == reference_type
        for offset in content_range
    )


def find_unreferenced_insertions(
    document: DocumentModel,
    *,
    minimum_characters: int = MINIMUM_CHARACTERS,
    reference_type: str = REFERENCE_TYPE,
    on_squash_error: Callable[[Exception], None] | None = None,
) -> list[ContentRange]:
    """Return inserted ranges that are long enough and have no reference.

    A failure while squashing the history yields no ranges. It is logged
    and passed to ``on_squash_error`` if given.
    """
    try:
        operations = document.squashed_operations()
    except Exception as e:
        logger.warning(f"Could not squash edit history: {type(e).__name__}: {e}")
        if on_squash_error is not None:
            on_squash_error(e)
        return []

    ranges = get_inserted_ranges(operations, document.content_length())
    return [
        content_range
        for content_range in ranges
        if content_range.length >= minimum_characters
        and not range_has_reference(document, content_range, reference_type)
    ]


def does_added_content_need_reference(
    document: DocumentModel,
    namespace: int,
    *,
    main_namespace: int = MAIN_NAMESPACE,
    minimum_characters: int = MINIMUM_CHARACTERS,
    reference_type: str = REFERENCE_TYPE,
    on_squash_error: Callable[[Exception], None] | None = None,
) -> bool:
    """Whether the user added a long run of content without a reference.

    Only articles are checked; any other namespace returns False.

    Args:
        document: Document being edited
        namespace: Namespace of the page being edited
        main_namespace: Namespace number of articles
        minimum_characters: Shortest insertion that needs a reference
        reference_type: Element type of reference markers
        on_squash_error: Called with the exception if the history can't be squashed

    Returns:
        True if at least one qualifying insertion exists.
    """
    if namespace != main_namespace:
        return False

    insertions = find_unreferenced_insertions(
        document,
        minimum_characters=minimum_characters,
        reference_type=reference_type,
        on_squash_error=on_squash_error,
    )
    if insertions:
        logger.debug(
            f"{len(insertions)} unreferenced insertion(s), longest {max(r.length for r in insertions)}"
        )
    return bool(insertions)
