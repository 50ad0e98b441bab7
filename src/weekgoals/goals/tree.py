"""Recursive helpers over an ordered sub-item forest.

All functions walk the tree depth-first and mutate lists in place. They are
used by the in-process stores directly and by the SQLite store to
materialize rows into nested SubItem lists.
"""

from collections.abc import Callable, Iterable, Iterator
from typing import Any, TypeVar

from weekgoals.goals.types import Goal, SubItem

_T = TypeVar("_T", Goal, SubItem)


def iter_nodes(subs: list[SubItem]) -> Iterator[SubItem]:
    """Yield every node depth-first, parents before children."""
    for sub in subs:
        yield sub
        yield from iter_nodes(sub.subs)


def find_node_by_id(subs: list[SubItem], node_id: str) -> SubItem | None:
    """Return the first node with ``node_id``, or None."""
    for sub in subs:
        if sub.id == node_id:
            return sub
        found = find_node_by_id(sub.subs, node_id)
        if found is not None:
            return found
    return None


def node_depth(subs: list[SubItem], node_id: str, _depth: int = 1) -> int | None:
    """Depth of ``node_id`` (a goal's direct children are depth 1)."""
    for sub in subs:
        if sub.id == node_id:
            return _depth
        found = node_depth(sub.subs, node_id, _depth + 1)
        if found is not None:
            return found
    return None


def remove_node(subs: list[SubItem], node_id: str) -> bool:
    """Remove ``node_id`` and its whole subtree.

    Sibling ``order`` values are left untouched.
    """
    for index, sub in enumerate(subs):
        if sub.id == node_id:
            del subs[index]
            return True
        if remove_node(sub.subs, node_id):
            return True
    return False


def rename_node(subs: list[SubItem], node_id: str, text: str) -> bool:
    node = find_node_by_id(subs, node_id)
    if node is None:
        return False
    node.text = text
    return True


def next_order(siblings: list[SubItem] | list[Goal]) -> int:
    """Order for a sibling appended after ``siblings``."""
    return len(siblings)


def append_child(siblings: list[SubItem], item: SubItem) -> SubItem:
    item.order = next_order(siblings)
    siblings.append(item)
    return item


def sort_forest(items: Iterable[_T]) -> list[_T]:
    """Sort by ``order`` at every level; ties keep insertion order."""
    ordered = sorted(items, key=lambda item: item.order)
    for item in ordered:
        item.subs[:] = sort_forest(item.subs)
    return ordered


def renumber(items: list[SubItem]) -> list[SubItem]:
    """Assign positional orders recursively (used for freshly decoded trees)."""
    for index, item in enumerate(items):
        item.order = index
        renumber(item.subs)
    return items


def count_nodes(subs: list[SubItem]) -> int:
    return sum(1 for _ in iter_nodes(subs))


def build_tree(
    rows: Iterable[Any],
    parent_id: str | None = None,
    *,
    make: Callable[[Any], SubItem],
    parent_of: Callable[[Any], str | None],
) -> list[SubItem]:
    """Materialize flat rows carrying a parent reference into nested SubItems.

    Args:
        rows: Flat rows for a single goal
        parent_id: Parent to collect children for (None = goal top level)
        make: Builds a childless SubItem from a row
        parent_of: Extracts a row's parent id
    """
    rows = list(rows)
    by_parent: dict[str | None, list[SubItem]] = {}
    for row in rows:
        by_parent.setdefault(parent_of(row), []).append(make(row))

    def attach(key: str | None) -> list[SubItem]:
        children = sorted(by_parent.get(key, []), key=lambda s: s.order)
        for child in children:
            child.subs = attach(child.id)
        return children

    return attach(parent_id)
