"""Fallback-chain field extraction over GDS result trees.

GDS responses place the same logical value at different nested paths
depending on the response variant. Every attribute is read through an ordered
list of accessors, each returning a value or None; the first non-empty value
wins. Structural mismatches (missing keys, wrong node types) never raise, they
just mean "no value found".
"""

import logging
from typing import Any, Callable, Iterable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
Accessor = Callable[[Any], Optional[T]]

_STRUCTURAL_ERRORS = (KeyError, IndexError, TypeError, ValueError, AttributeError)


def as_list(node: Any) -> list:
    """GDS nodes may be a single object or a list of them."""
    if node is None:
        return []
    if isinstance(node, list):
        return node
    return [node]


def dig(tree: Any, *path: Any) -> Any:
    """Walk *path* (dict keys / list indexes) into *tree*.

    An integer step applied to a dict treats the dict as a one-element list,
    so ``dig(x, "FareInfo", 0)`` works whether FareInfo is a list or not.
    Returns None as soon as a step cannot be taken.
    """
    node = tree
    for step in path:
        if node is None:
            return None
        if isinstance(step, int):
            items = as_list(node)
            if not -len(items) <= step < len(items):
                return None
            node = items[step]
        elif isinstance(node, dict):
            node = node.get(step)
        else:
            return None
    return node


def is_empty(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == {}


def safe(accessor: Accessor, tree: Any) -> Optional[Any]:
    """Run one accessor, mapping structural errors to None."""
    try:
        value = accessor(tree)
    except _STRUCTURAL_ERRORS as e:
        logger.debug(f"Accessor {getattr(accessor, '__name__', accessor)} failed: {e}")
        return None
    return None if is_empty(value) else value


def first_of(accessors: Iterable[Accessor], tree: Any) -> Optional[Any]:
    """Return the first non-empty accessor result, or None."""
    for accessor in accessors:
        value = safe(accessor, tree)
        if value is not None:
            return value
    return None


def path(*steps: Any) -> Accessor:
    """Accessor reading a fixed path."""
    def accessor(tree: Any) -> Any:
        return dig(tree, *steps)
    accessor.__name__ = "/".join(str(s) for s in steps)
    return accessor


def to_amount(value: Any) -> Optional[float]:
    """Parse a money value (number, numeric string or {"Amount": ...})."""
    if isinstance(value, dict):
        value = value.get("Amount", value.get("amount"))
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return None
    if amount != amount or amount in (float("inf"), float("-inf")):
        return None
    return amount


def to_positive_int(value: Any) -> Optional[int]:
    try:
        number = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return None
    return number if number > 0 else None
