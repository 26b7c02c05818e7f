"""Top-level grouping specification.

A grouping specification holds information similar to an SQL ``ORDER BY``
clause: an ordered sequence of levels, each made of one or more dimensions
with a sort direction. It is immutable once built; the derived variants
(reversed, collapsed to a single level) are computed on first request and
cached on the instance.
"""

from __future__ import annotations

import logging
from itertools import chain
from typing import Any, Iterable, Iterator, Sequence

from datum_grouping.dimension import GroupingDimensionSpec
from datum_grouping.errors import argument_invalid, argument_required
from datum_grouping.level import GroupingLevelSpec
from datum_grouping.parser import parse_levels
from datum_grouping.protocols import Complex, ComplexType

logger = logging.getLogger(__name__)

TREE_PRE = "tree-pre"
TREE_POST = "tree-post"
SINGLE_LEVEL = "singleLevel"
FLATTENING_MODES = (TREE_PRE, TREE_POST)


class GroupingSpec:
    """An ordered sequence of :class:`GroupingLevelSpec`.

    Attributes:
        id: Semantic identifier. Two specs with the same id group and sort
            datums identically.
        type: The complex type dimension names were resolved against.
        levels: The retained (non-empty) levels.
        depth: Number of levels.
        is_single_level: Only one level.
        is_single_dimension: Only one level holding a single dimension.
        has_composite_levels: At least one level has more than one dimension.
        first_dimension: First dimension spec of the first level.
        flattening_mode: ``None``, ``"tree-pre"`` or ``"tree-post"``.
        flatten_root_label: Label of the root node of a flattening operation.
    """

    def __init__(
        self,
        level_specs: Iterable[GroupingLevelSpec] | None,
        complex_type: ComplexType | None,
        *,
        flattening_mode: str | None = None,
        flatten_root_label: str | None = "",
    ) -> None:
        if level_specs is None:
            raise argument_required("levelSpecs")
        if complex_type is None:
            raise argument_required("complexType")
        if flattening_mode and flattening_mode not in FLATTENING_MODES:
            raise argument_invalid(
                "flatteningMode",
                "unsupported flattening mode",
                value=flattening_mode,
            )

        self.type = complex_type
        self.has_composite_levels = False

        levels: list[GroupingLevelSpec] = []
        for level in level_specs:
            if not level.dimensions:
                continue
            if level.depth > 1:
                self.has_composite_levels = True
            levels.append(level)

        if not levels:
            raise argument_invalid("levelSpecs", "Must have at least one element.")

        self.levels: tuple[GroupingLevelSpec, ...] = tuple(levels)
        self.depth = len(self.levels)
        self.is_single_level = self.depth == 1
        self.is_single_dimension = self.is_single_level and not self.has_composite_levels
        self.first_dimension: GroupingDimensionSpec = self.levels[0].dimensions[0]

        self.flattening_mode = flattening_mode or None
        self.flatten_root_label = flatten_root_label or ""

        self.id = "##".join(
            (
                self.flattening_mode or "",
                self.flatten_root_label,
                "||".join(level.id for level in self.levels),
            )
        )

        self._dimension_names: tuple[str, ...] | None = None
        self._reversed: GroupingSpec | None = None
        self._single_level: dict[bool, GroupingSpec] = {}

    def __repr__(self) -> str:
        return f"GroupingSpec({self.id!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GroupingSpec):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def dimensions(self) -> Iterator[GroupingDimensionSpec]:
        """Iterate the dimension specs of every level, in order."""
        return chain.from_iterable(level.dimensions for level in self.levels)

    def dimension_names(self) -> tuple[str, ...]:
        if self._dimension_names is None:
            self._dimension_names = tuple(dim.name for dim in self.dimensions())
        return self._dimension_names

    def view(self, complex: Complex) -> Any:
        return complex.view(self.dimension_names())

    def is_discrete(self) -> bool:
        """Whether the data resulting from the grouping is discrete.

        Anything other than a single dimension is treated as discrete.
        """
        return not self.is_single_dimension or bool(self.first_dimension.type.is_discrete)

    def ensure(
        self,
        *,
        flattening_mode: str | None = None,
        flatten_root_label: str | None = "",
        reverse: bool = False,
    ) -> "GroupingSpec":
        """Return a version of this grouping conforming to the given options.

        ``flattening_mode="singleLevel"`` is the same as calling
        :meth:`single_level_grouping`. Flattening is applied before reversal.
        """
        grouping = self

        if flattening_mode:
            if flattening_mode == SINGLE_LEVEL:
                return grouping.single_level_grouping(reverse=reverse)

            root_label = flatten_root_label or ""
            if self.flattening_mode != flattening_mode or self.flatten_root_label != root_label:
                grouping = GroupingSpec(
                    grouping.levels,
                    grouping.type,
                    flattening_mode=flattening_mode,
                    flatten_root_label=root_label,
                )

        if reverse:
            grouping = grouping.reversed()

        return grouping

    def single_level_grouping(self, *, reverse: bool = False) -> "GroupingSpec":
        """Collapse every dimension into one composite level.

        Returns ``self`` when already single-level and not reversing.
        """
        reverse = bool(reverse)
        if self.is_single_level and not reverse:
            return self

        single_level = self._single_level.get(reverse)
        if single_level is None:
            dims = (dim.reversed() if reverse else dim for dim in self.dimensions())
            single_level = GroupingSpec(
                [GroupingLevelSpec(dims)],
                self.type,
                flattening_mode=self.flattening_mode,
            )
            logger.debug("collapsed %s into %s", self.id, single_level.id)
            self._single_level[reverse] = single_level

        return single_level

    def reversed(self) -> "GroupingSpec":
        if self._reversed is None:
            self._reversed = GroupingSpec(
                [level.reversed() for level in self.levels],
                self.type,
                flattening_mode=self.flattening_mode,
            )
            logger.debug("reversed %s into %s", self.id, self._reversed.id)
        return self._reversed

    @classmethod
    def parse(
        cls,
        spec_text: str | Sequence[str] | None,
        complex_type: ComplexType | None,
    ) -> "GroupingSpec":
        """Parse grouping text such as ``"series1 asc|series2 desc, category"``.

        Levels are separated by commas, dimensions within a level by pipes,
        and each dimension may be followed by ``asc`` or ``desc``.
        """
        levels = parse_levels(spec_text, complex_type)
        return cls(levels, complex_type)

    @classmethod
    def multiple(
        cls,
        groupings: Iterable["GroupingSpec"],
        *,
        reverse: bool = False,
    ) -> "GroupingSpec | None":
        """Combine several groupings, one level per grouping.

        All groupings must have been resolved against the same complex type.
        Returns ``None`` when no groupings are given.
        """
        complex_type: ComplexType | None = None
        levels: list[GroupingLevelSpec] = []
        for grouping in groupings:
            if complex_type is None:
                complex_type = grouping.type
            elif grouping.type is not complex_type:
                raise argument_invalid(
                    "groupings",
                    "Multiple groupings must have the same complex type.",
                    grouping=grouping.id,
                )
            dims = (dim.reversed() if reverse else dim for dim in grouping.dimensions())
            levels.append(GroupingLevelSpec(dims))

        if complex_type is None:
            return None
        return cls(levels, complex_type)
