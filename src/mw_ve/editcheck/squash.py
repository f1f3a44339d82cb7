"""Squash a transaction history into one equivalent transaction.

Squashing composes transactions pairwise: the output of the first is the
input of the second. Each operation is split into components (retain,
remove, insert, attribute) which are consumed from both sides in step:

- a removal from the first transaction passes straight through
- an insertion by the second transaction passes straight through
- otherwise both sides advance by the shorter component, and
  retain/retain stays a retain, retain/remove becomes a remove,
  insert/retain stays an insert, and insert/remove cancels out

Annotation operations are not supported and raise SquashError.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import TYPE_CHECKING, Any, Final

from mw_ve.editcheck.transactions import (
    AttributeOp,
    ReplaceOp,
    RetainOp,
    Transaction,
    normalize_operations,
    set_attribute,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Sequence

    from mw_ve.editcheck.transactions import Operation

logger = logging.getLogger(__name__)

RETAIN: Final = "retain"
REMOVE: Final = "remove"
INSERT: Final = "insert"
ATTRIBUTE: Final = "attribute"


class SquashError(Exception):
    """Raised when transactions cannot be squashed."""

    pass


def _components(operations: Iterable[Operation]) -> Iterator[list[Any]]:
    for op in operations:
        if isinstance(op, RetainOp):
            if op.length:
                yield [RETAIN, op.length]
        elif isinstance(op, ReplaceOp):
            if op.remove:
                yield [REMOVE, list(op.remove)]
            if op.insert:
                yield [INSERT, list(op.insert)]
        elif isinstance(op, AttributeOp):
            yield [ATTRIBUTE, op]
        else:
            raise SquashError(f"Cannot squash {op.type} operation")


def _size(component: list[Any]) -> int:
    return component[1] if component[0] == RETAIN else len(component[1])


def _consume(queue: deque[list[Any]], n: int) -> None:
    head = queue[0]
    if _size(head) == n:
        queue.popleft()
    elif head[0] == RETAIN:
        head[1] -= n
    else:
        head[1] = head[1][n:]


def _to_operations(components: Iterable[list[Any]]) -> list[Operation]:
    ops: list[Operation] = []
    for kind, value in components:
        if kind == RETAIN:
            ops.append(RetainOp(value))
        elif kind == REMOVE:
            ops.append(ReplaceOp(remove=tuple(value)))
        elif kind == INSERT:
            ops.append(ReplaceOp(insert=tuple(value)))
        else:
            ops.append(value)
    return normalize_operations(ops)


def compose(first: Sequence[Operation], second: Sequence[Operation]) -> list[Operation]:
    """Compose two operation lists into one.

    Raises:
        SquashError: If the lists have mismatched lengths or contain
            operations that cannot be composed.
    """
    a = deque(_components(first))
    b = deque(_components(second))
    out: list[list[Any]] = []

    while a or b:
        if a and a[0][0] in (REMOVE, ATTRIBUTE):
            out.append(a.popleft())
            continue
        if b and b[0][0] == INSERT:
            out.append(b.popleft())
            continue
        if b and b[0][0] == ATTRIBUTE:
            if not a:
                raise SquashError("Attribute change beyond the end of the document")
            op: AttributeOp = b.popleft()[1]
            if a[0][0] == RETAIN:
                out.append([ATTRIBUTE, op])
            else:
                # Element was inserted by the first transaction: change it in place
                element = a[0][1][0]
                if not isinstance(element, dict) or element.get("type", "").startswith("/"):
                    raise SquashError("Attribute change on inserted non-element data")
                a[0][1] = [set_attribute(element, op.key, op.to_value), *a[0][1][1:]]
            continue
        if not a or not b:
            raise SquashError("Transactions have mismatched lengths")

        n = min(_size(a[0]), _size(b[0]))
        kinds = (a[0][0], b[0][0])
        if kinds == (RETAIN, RETAIN):
            out.append([RETAIN, n])
        elif kinds == (RETAIN, REMOVE):
            out.append([REMOVE, b[0][1][:n]])
        elif kinds == (INSERT, RETAIN):
            out.append([INSERT, a[0][1][:n]])
        # (INSERT, REMOVE): inserted then removed again, nothing to emit
        _consume(a, n)
        _consume(b, n)

    return _to_operations(out)


def squash(transactions: Sequence[Transaction]) -> Transaction:
    """Squash a transaction history into a single transaction.

    Args:
        transactions: Transactions in the order they were applied

    Returns:
        One transaction with the same net effect.

    Raises:
        SquashError: If the history cannot be squashed.
    """
    if not transactions:
        return Transaction([])

    operations = list(_to_operations(_components(transactions[0].operations)))
    for transaction in transactions[1:]:
        operations = compose(operations, transaction.operations)

    logger.debug(f"Squashed {len(transactions)} transactions into {len(operations)} operations")
    return Transaction(operations)
