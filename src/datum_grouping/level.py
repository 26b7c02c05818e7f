"""Grouping levels: one or more dimensions combined into a single key."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, NamedTuple

from datum_grouping.dimension import GroupingDimensionSpec
from datum_grouping.protocols import Atom, Datum


class LevelKey(NamedTuple):
    """Composite key of a datum at one level, with the atoms it was built from."""

    key: str
    atoms: tuple[Atom, ...]


@dataclass(frozen=True, eq=False)
class GroupingLevelSpec:
    """An ordered set of dimensions compared lexicographically.

    The first dimension is the primary sort key, the second breaks its ties,
    and so on. :meth:`key` walks the dimensions in the same order so that
    bucketing and sorting agree.
    """

    dimensions: Iterable[GroupingDimensionSpec]
    id: str = field(init=False)
    depth: int = field(init=False)

    def __post_init__(self) -> None:
        dims = tuple(self.dimensions)
        object.__setattr__(self, "dimensions", dims)
        object.__setattr__(self, "id", ",".join(dim.id for dim in dims))
        object.__setattr__(self, "depth", len(dims))

    @property
    def comparer(self) -> Callable[[Datum, Datum], int]:
        return self.compare

    def compare(self, a: Datum, b: Datum) -> int:
        for dim in self.dimensions:
            result = dim.compare_datums(a, b)
            if result != 0:
                return result
        return 0

    def key(self, datum: Datum) -> LevelKey:
        atoms = tuple(datum.atoms[dim.name] for dim in self.dimensions)
        return LevelKey(",".join(atom.global_key() for atom in atoms), atoms)

    def reversed(self) -> "GroupingLevelSpec":
        return GroupingLevelSpec(dim.reversed() for dim in self.dimensions)
