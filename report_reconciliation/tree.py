"""Depth-first search over report trees.

Both QBO rows and Xero rows expose a ``label`` (header text or section
title, ``None`` for unlabeled rows) and ``children``. The walkers below are
pure: matches are threaded back through return values, the whole tree is
always searched, and children are visited in document order.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from typing import Protocol, TypeVar


class ReportNode(Protocol):
    @property
    def label(self) -> str | None: ...

    @property
    def children(self) -> Sequence[ReportNode]: ...


NodeT = TypeVar("NodeT", bound=ReportNode)


def normalize_label(label: str) -> str:
    return label.strip().casefold()


def find_nodes(nodes: Iterable[NodeT], predicate: Callable[[str], bool]) -> list[NodeT]:
    """Return every labeled node whose label satisfies ``predicate``.

    Pre-order, depth-first. A matched node is not searched further (its rows
    belong to the match); its siblings and the rest of the tree still are.
    """

    matches: list[NodeT] = []
    for node in nodes:
        label = node.label
        if label is not None and predicate(label):
            matches.append(node)
            continue
        matches.extend(find_nodes(node.children, predicate))  # type: ignore[arg-type]
    return matches


def locate_category(nodes: Iterable[NodeT], target_name: str) -> list[NodeT]:
    """Find all category nodes named ``target_name`` (trimmed, case-insensitive)."""

    wanted = normalize_label(target_name)
    if not wanted:
        return []
    return find_nodes(nodes, lambda label: normalize_label(label) == wanted)


def locate_sections(nodes: Iterable[NodeT], titles: Iterable[str]) -> list[NodeT]:
    """Find all section nodes whose label equals one of ``titles`` (case-insensitive)."""

    wanted = frozenset(normalize_label(t) for t in titles)
    return find_nodes(nodes, lambda label: normalize_label(label) in wanted)


__all__ = [
    "ReportNode",
    "find_nodes",
    "locate_category",
    "locate_sections",
    "normalize_label",
]
