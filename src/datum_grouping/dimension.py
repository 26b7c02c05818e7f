"""Ordering of a single dimension inside a grouping level."""

from __future__ import annotations

from dataclasses import dataclass, field

from datum_grouping.protocols import AtomComparer, Datum, DimensionType


@dataclass(frozen=True, eq=False)
class GroupingDimensionSpec:
    """One dimension plus its sort direction.

    The comparer is always obtained from the dimension type for the given
    direction; it cannot be supplied separately.
    """

    type: DimensionType
    reverse: bool = False
    name: str = field(init=False)
    id: str = field(init=False)
    comparer: AtomComparer = field(init=False, repr=False)

    def __post_init__(self) -> None:
        reverse = bool(self.reverse)
        object.__setattr__(self, "reverse", reverse)
        object.__setattr__(self, "name", self.type.name)
        object.__setattr__(self, "id", f"{self.type.name}:{'0' if reverse else '1'}")
        object.__setattr__(self, "comparer", self.type.atom_comparer(reverse))

    def compare_datums(self, a: Datum, b: Datum) -> int:
        # Ties are left to the next dimension of the owning level.
        return self.comparer(a.atoms[self.name], b.atoms[self.name])

    def reversed(self) -> "GroupingDimensionSpec":
        return GroupingDimensionSpec(self.type, not self.reverse)
