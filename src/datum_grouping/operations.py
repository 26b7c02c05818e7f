"""Sorting and grouping of datums with a :class:`GroupingSpec`."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import cmp_to_key
from typing import Iterable, Iterator, Sequence

from datum_grouping.errors import argument_invalid
from datum_grouping.grouping import TREE_POST, TREE_PRE, GroupingSpec
from datum_grouping.level import GroupingLevelSpec
from datum_grouping.protocols import Atom, Datum

logger = logging.getLogger(__name__)


@dataclass
class GroupNode:
    """A bucket of datums sharing the same composite key at one level.

    The root node (``depth == 0``) holds every datum and is labelled with
    the grouping's flatten root label.
    """

    key: str
    atoms: tuple[Atom, ...]
    datums: list[Datum] = field(default_factory=list)
    children: list["GroupNode"] = field(default_factory=list)
    depth: int = 0

    @property
    def is_leaf(self) -> bool:
        return not self.children


def _compare(levels: Sequence[GroupingLevelSpec], a: Datum, b: Datum) -> int:
    for level in levels:
        result = level.compare(a, b)
        if result != 0:
            return result
    return 0


def sort_datums(datums: Iterable[Datum], grouping: GroupingSpec) -> list[Datum]:
    """Sort datums by every level of ``grouping``; ties keep input order."""
    levels = grouping.levels
    return sorted(datums, key=cmp_to_key(lambda a, b: _compare(levels, a, b)))


def group_datums(
    datums: Iterable[Datum],
    grouping: GroupingSpec,
    *,
    root_label: str | None = None,
) -> GroupNode:
    """Bucket datums into a tree with one depth per grouping level.

    The root is labelled ``root_label`` when given, otherwise with the
    grouping's flatten root label.
    """
    label = grouping.flatten_root_label if root_label is None else root_label
    root = GroupNode(key=label, atoms=(), datums=list(datums))
    _group_children(root, grouping.levels)
    logger.debug(
        "grouped %d datums with %s into %d top-level groups",
        len(root.datums),
        grouping.id,
        len(root.children),
    )
    return root


def _group_children(node: GroupNode, levels: Sequence[GroupingLevelSpec]) -> None:
    if not levels:
        return
    level = levels[0]
    buckets: dict[str, GroupNode] = {}
    for datum in node.datums:
        level_key = level.key(datum)
        child = buckets.get(level_key.key)
        if child is None:
            child = GroupNode(key=level_key.key, atoms=level_key.atoms, depth=node.depth + 1)
            buckets[level_key.key] = child
        child.datums.append(datum)

    node.children = sorted(
        buckets.values(),
        key=cmp_to_key(lambda a, b: level.compare(a.datums[0], b.datums[0])),
    )
    for child in node.children:
        _group_children(child, levels[1:])


def flatten_groups(root: GroupNode, mode: str | None = None) -> list[GroupNode]:
    """Linearize a group tree.

    Without a mode only the leaves are returned. ``"tree-pre"`` lists every
    node, the root included, parents before children; ``"tree-post"`` lists
    children before parents, the root last.
    """
    if mode is None:
        return [node for node in _walk(root, post=False) if node.is_leaf and node is not root]
    if mode == TREE_PRE:
        return list(_walk(root, post=False))
    if mode == TREE_POST:
        return list(_walk(root, post=True))
    raise argument_invalid("mode", "unsupported flattening mode", value=mode)


def _walk(node: GroupNode, *, post: bool) -> Iterator[GroupNode]:
    if not post:
        yield node
    for child in node.children:
        yield from _walk(child, post=post)
    if post:
        yield node
