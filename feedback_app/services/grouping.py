from __future__ import annotations

from typing import Callable, Dict, Hashable, Iterable, List, TypeVar

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)


def group_by(items: Iterable[T], key_fn: Callable[[T], K]) -> Dict[K, List[T]]:
    """
    Partition items by key_fn(item).

    Groups come out in first-appearance order and each group keeps input order.
    Composite keys should be tuples: joining dimension values into one string
    breaks as soon as a value contains the separator.
    """
    groups: Dict[K, List[T]] = {}
    for item in items:
        groups.setdefault(key_fn(item), []).append(item)
    return groups
