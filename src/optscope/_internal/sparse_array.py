"""Sparse array used for indexed hook slots.

Note
----
This is an internal API not covered by versioning policy.
"""

from __future__ import annotations

import typing as t

T = t.TypeVar("T")


class SparseArray(dict[int, T], t.Generic[T]):
    """Indexed slots with gaps, iterated in index order.

    Hooks are registered at explicit indexes (``FileType[0]``, ``FileType[5]``).
    Removing one must not shift the others, which a :class:`list` would do.

    Examples
    --------
    >>> arr: SparseArray[str] = SparseArray()
    >>> arr.add(5, "set shiftwidth")
    >>> arr.add(0, "set tabstop")
    >>> arr.as_list()
    ['set tabstop', 'set shiftwidth']

    >>> arr.append("set expandtab")
    6
    >>> sorted(arr.keys())
    [0, 5, 6]

    >>> arr.pop(0)
    'set tabstop'
    >>> list(arr.iter_values())
    ['set shiftwidth', 'set expandtab']
    """

    def add(self, index: int, value: T) -> None:
        """Store *value* at *index*, replacing what was there."""
        self[index] = value

    def append(self, value: T) -> int:
        """Store *value* after the highest index, returning the index used.

        >>> arr: SparseArray[str] = SparseArray()
        >>> arr.append("first")
        0
        >>> arr.add(9, "ninth")
        >>> arr.append("tenth")
        10
        """
        index = max(self.keys(), default=-1) + 1
        self[index] = value
        return index

    def iter_values(self) -> t.Iterator[T]:
        """Iterate over values in ascending index order."""
        for index in sorted(self.keys()):
            yield self[index]

    def as_list(self) -> list[T]:
        """Return values as a list in ascending index order."""
        return list(self.iter_values())
