"""Repair of externally produced task orderings - no I/O dependencies.

An ordering ranks ``n`` items as a sequence of the 1-based values ``1..n``.
The baseline is the identity ``[1..n]``; value ``v`` belongs at index ``v - 1``.
"""

from typing import Iterable, Sequence, TypeVar

T = TypeVar("T")


def sanitize(candidate: Iterable[int], n: int) -> list[int]:
    """
    Turn an untrusted candidate into a permutation of ``1..n``.

    Keeps the first occurrence of each in-range value in encounter order,
    then appends the missing values ascending. Never fails.
    """
    seen: set[int] = set()
    result = []
    for value in candidate:
        if 1 <= value <= n and value not in seen:
            seen.add(value)
            result.append(value)
    result.extend(v for v in range(1, n + 1) if v not in seen)
    return result


def displacement(position: int, value: int) -> int:
    return abs(position - (value - 1))


def max_displacement_of(ordering: Sequence[int]) -> int:
    return max((displacement(i, v) for i, v in enumerate(ordering)), default=0)


def is_permutation(ordering: Sequence[int], n: int) -> bool:
    return len(ordering) == n and set(ordering) == set(range(1, n + 1))


def _schedulable(remaining: set[int], start: int, n: int, bound: int) -> bool:
    """
    Whether ``remaining`` fits positions ``start..n-1`` within the bound.

    Each value has a window [v-1-bound, v-1+bound]; windows are ordered by
    value, so filling each slot with the smallest eligible value is
    earliest-deadline-first and optimal.
    """
    pending = sorted(remaining)
    for position in range(start, n):
        if not pending or pending[0] - 1 - bound > position:
            return False
        if pending[0] - 1 + bound < position:
            return False
        pending.pop(0)
    return not pending


def clamp(ordering: Sequence[int], max_displacement: int) -> list[int]:
    """
    Bring every value within ``max_displacement`` of its baseline index.

    Input that already satisfies the bound comes back unchanged. Otherwise
    slots are filled left to right with the first not-yet-placed value, in
    input order, that fits the slot's window and leaves the rest placeable;
    in-bound values keep their place where they can and out-of-bound values
    are pulled back only as far as needed. A negative bound acts as zero.
    Expects a valid permutation.
    """
    n = len(ordering)
    max_displacement = max(0, max_displacement)
    if max_displacement_of(ordering) <= max_displacement:
        return list(ordering)

    remaining = set(ordering)
    result = []
    for position in range(n):
        for value in ordering:
            if value not in remaining or displacement(position, value) > max_displacement:
                continue
            if _schedulable(remaining - {value}, position + 1, n, max_displacement):
                result.append(value)
                remaining.discard(value)
                break
    return result


def repair(candidate: Iterable[int], n: int, max_displacement: int) -> list[int]:
    """Sanitize then clamp: the full treatment for a model-produced ordering."""
    return clamp(sanitize(candidate, n), max_displacement)


def apply_ordering(items: Sequence[T], ordering: Sequence[int]) -> list[T]:
    """Reorder ``items`` by a 1-based ordering of the same length."""
    return [items[v - 1] for v in ordering]
