"""Transactions over linear document data.

A transaction is an ordered list of operations that together span the
whole document:

- ``RetainOp(length)``: keep the next ``length`` items
- ``ReplaceOp(remove, insert)``: remove the next items, insert new ones
- ``AttributeOp(key, from_value, to_value)``: change an attribute of the
  element at the current offset (zero length)
- ``AnnotateOp(method, bias, index)``: start/stop an annotation (zero length)

Operations serialize to the same JSON shape the editor uses, e.g.
``{"type": "retain", "length": 10}``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from difflib import SequenceMatcher
from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from mw_ve.editcheck.linear_data import Item

logger = logging.getLogger(__name__)


class TransactionError(Exception):
    """Raised when a transaction is malformed or does not fit the document."""

    pass


# =============================================================================
# OPERATIONS
# =============================================================================


@dataclass(frozen=True)
class RetainOp:
    """Keep the next ``length`` items unchanged."""

    length: int
    type: ClassVar[str] = "retain"

    def __post_init__(self) -> None:
        if self.length < 0:
            raise TransactionError(f"Retain length must be non-negative, got {self.length}")

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "length": self.length}


@dataclass(frozen=True)
class ReplaceOp:
    """Remove the next ``len(remove)`` items and insert ``insert`` in their place."""

    remove: tuple[Item, ...] = ()
    insert: tuple[Item, ...] = ()
    type: ClassVar[str] = "replace"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "remove": list(self.remove), "insert": list(self.insert)}


@dataclass(frozen=True)
class AttributeOp:
    """Change attribute ``key`` of the element at the current offset."""

    key: str
    from_value: Any = None
    to_value: Any = None
    type: ClassVar[str] = "attribute"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "key": self.key, "from": self.from_value, "to": self.to_value}


@dataclass(frozen=True)
class AnnotateOp:
    """Start or stop applying an annotation from the current offset."""

    method: str
    bias: str
    index: str
    type: ClassVar[str] = "annotate"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "method": self.method, "bias": self.bias, "index": self.index}


Operation = RetainOp | ReplaceOp | AttributeOp | AnnotateOp


def operation_from_dict(data: dict[str, Any]) -> Operation:
    """Deserialize one operation.

    Raises:
        TransactionError: On an unknown type or missing fields.
    """
    op_type = data.get("type")
    try:
        if op_type == "retain":
            return RetainOp(int(data["length"]))
        if op_type == "replace":
            return ReplaceOp(tuple(data.get("remove", ())), tuple(data.get("insert", ())))
        if op_type == "attribute":
            return AttributeOp(data["key"], data.get("from"), data.get("to"))
        if op_type == "annotate":
            return AnnotateOp(data["method"], data["bias"], data["index"])
    except (KeyError, TypeError, ValueError) as e:
        raise TransactionError(f"Malformed {op_type} operation: {data!r}") from e
    raise TransactionError(f"Unknown operation type: {op_type!r}")


def normalize_operations(operations: Iterable[Operation]) -> list[Operation]:
    """Merge adjacent retains and replaces, dropping empty ones."""
    result: list[Operation] = []
    for op in operations:
        if isinstance(op, RetainOp):
            if op.length == 0:
                continue
            if result and isinstance(result[-1], RetainOp):
                result[-1] = RetainOp(result[-1].length + op.length)
                continue
        elif isinstance(op, ReplaceOp):
            if not op.remove and not op.insert:
                continue
            if result and isinstance(result[-1], ReplaceOp):
                previous = result[-1]
                result[-1] = ReplaceOp(previous.remove + op.remove, previous.insert + op.insert)
                continue
        result.append(op)
    return result


# =============================================================================
# TRANSACTIONS
# =============================================================================


@dataclass
class Transaction:
    """An ordered list of operations spanning a whole document."""

    operations: list[Operation] = field(default_factory=list)

    @property
    def input_length(self) -> int:
        """Length of the document this transaction applies to."""
        total = 0
        for op in self.operations:
            if isinstance(op, RetainOp):
                total += op.length
            elif isinstance(op, ReplaceOp):
                total += len(op.remove)
        return total

    @property
    def output_length(self) -> int:
        """Length of the document this transaction produces."""
        total = 0
        for op in self.operations:
            if isinstance(op, RetainOp):
                total += op.length
            elif isinstance(op, ReplaceOp):
                total += len(op.insert)
        return total

    def is_noop(self) -> bool:
        return all(isinstance(op, RetainOp) for op in self.operations)

    def to_dict(self) -> dict[str, Any]:
        return {"operations": [op.to_dict() for op in self.operations]}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | list[dict[str, Any]]) -> Transaction:
        """Deserialize from ``{"operations": [...]}`` or a bare operation list."""
        ops = data.get("operations", []) if isinstance(data, dict) else data
        return cls([operation_from_dict(op) for op in ops])

    def apply_to(self, data: Sequence[Item]) -> list[Item]:
        """Apply this transaction to ``data`` and return the new item list.

        Raises:
            TransactionError: If removed items don't match the document, an
                attribute change targets a non-element, or the transaction
                does not span the whole document.
        """
        source = list(data)
        result: list[Item] = []
        offset = 0

        for op in self.operations:
            if isinstance(op, RetainOp):
                if offset + op.length > len(source):
                    raise TransactionError(
                        f"Retain of {op.length} at offset {offset} exceeds document length {len(source)}"
                    )
                result.extend(source[offset : offset + op.length])
                offset += op.length
            elif isinstance(op, ReplaceOp):
                end = offset + len(op.remove)
                if list(op.remove) != source[offset:end]:
                    raise TransactionError(f"Removed data does not match document at offset {offset}")
                result.extend(op.insert)
                offset = end
            elif isinstance(op, AttributeOp):
                item = source[offset] if offset < len(source) else None
                if not isinstance(item, dict) or item.get("type", "").startswith("/"):
                    raise TransactionError(f"No open element at offset {offset} for attribute change")
                source[offset] = set_attribute(item, op.key, op.to_value)
            # Annotations don't change the item sequence

        if offset != len(source):
            raise TransactionError(
                f"Transaction spans {offset} items but document has {len(source)}"
            )
        return result

    # =========================================================================
    # BUILDERS
    # =========================================================================

    @classmethod
    def new_from_replacement(
        cls, data: Sequence[Item], start: int, end: int, insert: Iterable[Item]
    ) -> Transaction:
        """Replace data[start:end] with ``insert``."""
        if not 0 <= start <= end <= len(data):
            raise TransactionError(f"Invalid range [{start}, {end}) for document of length {len(data)}")
        return cls(
            normalize_operations(
                [
                    RetainOp(start),
                    ReplaceOp(tuple(data[start:end]), tuple(insert)),
                    RetainOp(len(data) - end),
                ]
            )
        )

    @classmethod
    def new_from_insertion(cls, data: Sequence[Item], offset: int, insert: Iterable[Item]) -> Transaction:
        return cls.new_from_replacement(data, offset, offset, insert)

    @classmethod
    def new_from_removal(cls, data: Sequence[Item], start: int, end: int) -> Transaction:
        return cls.new_from_replacement(data, start, end, ())

    @classmethod
    def new_from_diff(cls, old: Sequence[Item], new: Sequence[Item]) -> Transaction:
        """Build the transaction turning ``old`` into ``new``.

        Uses difflib to find matching runs; everything between matches
        becomes a replace operation.
        """
        matcher = SequenceMatcher(
            None, [_item_key(item) for item in old], [_item_key(item) for item in new], autojunk=False
        )
        ops: list[Operation] = []
        for tag, i1, i2, j1, j2 in matcher.get_opcodes():
            if tag == "equal":
                ops.append(RetainOp(i2 - i1))
            else:
                ops.append(ReplaceOp(tuple(old[i1:i2]), tuple(new[j1:j2])))
        transaction = cls(normalize_operations(ops))
        logger.debug(
            f"Diff transaction: {len(transaction.operations)} operations, "
            f"{transaction.input_length} -> {transaction.output_length} items"
        )
        return transaction


def set_attribute(item: dict[str, Any], key: str, value: Any) -> dict[str, Any]:
    """Return a copy of an element item with one attribute changed."""
    attributes = dict(item.get("attributes") or {})
    if value is None:
        attributes.pop(key, None)
    else:
        attributes[key] = value
    updated = dict(item)
    updated["attributes"] = attributes
    return updated


def _item_key(item: Item) -> str:
    if isinstance(item, str):
        return item
    return json.dumps(item, sort_keys=True)
