"""
Priority sorter.

Ascending by priority, ties in input order. The tie-break is part of the
sort key rather than left to the stability of the sort primitive, so the
result never depends on which algorithm sorted() happens to use.
"""

from __future__ import annotations

from typing import Callable, Iterable


def sort_by_priority(
    identities: Iterable[str],
    priority_of: Callable[[str], int],
) -> list[str]:
    """
    Total, deterministic order. priority_of is called once per identity.

        sort_by_priority(["a", "b", "c"], {"a": 30, "b": 10, "c": 10}.get)
        → ["b", "c", "a"]
    """
    keyed = [
        (priority_of(identity), position, identity)
        for position, identity in enumerate(identities)
    ]
    keyed.sort(key=lambda item: (item[0], item[1]))
    return [identity for _, _, identity in keyed]
