"""Parser for the textual grouping grammar.

Grammar::

    grouping  := level ("," level)*
    level     := dimension ("|" dimension)*
    dimension := name [("asc" | "desc")]

Whitespace around separators is ignored, order tokens are case-insensitive
and the default order is ascending. For example ``"series1 asc, series2 desc,
category"`` yields three single-dimension levels, while ``"series1 asc|series2
desc, category"`` puts both series dimensions in one composite level.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence

from datum_grouping.dimension import GroupingDimensionSpec
from datum_grouping.errors import GroupingError, argument_invalid, argument_required
from datum_grouping.level import GroupingLevelSpec
from datum_grouping.protocols import ComplexType, DimensionType

if TYPE_CHECKING:
    from datum_grouping.grouping import GroupingSpec

logger = logging.getLogger(__name__)

LEVEL_SEPARATOR = ","
DIMENSION_SEPARATOR = "|"
_ORDER_TOKENS = {"asc": False, "desc": True}


def split_levels(spec_text: str | Sequence[str]) -> list[str]:
    if isinstance(spec_text, str):
        return [part.strip() for part in spec_text.split(LEVEL_SEPARATOR)]
    if isinstance(spec_text, (list, tuple)):
        return list(spec_text)
    raise argument_invalid(
        "groupingSpecText",
        "must be a string or a list of level strings",
        value=spec_text,
    )


def parse_dimension_text(text: str) -> tuple[str, bool]:
    """Split ``"<name> [asc|desc]"`` into the name and its reverse flag."""
    tokens = text.split()
    if len(tokens) == 1:
        return tokens[0], False
    if len(tokens) == 2 and tokens[1].lower() in _ORDER_TOKENS:
        return tokens[0], _ORDER_TOKENS[tokens[1].lower()]
    raise argument_invalid(
        "groupLevelText",
        f"Invalid grouping level syntax '{text}'.",
        fragment=text,
    )


def resolve_dimension(complex_type: ComplexType, name: str) -> DimensionType:
    try:
        return complex_type.dimensions(name)
    except GroupingError:
        raise
    except (LookupError, ValueError) as exc:
        raise argument_invalid(
            "name",
            f"Undefined dimension '{name}'.",
            cause=exc,
            dimension=name,
        )


def parse_level(level_text: str, complex_type: ComplexType) -> GroupingLevelSpec:
    if not isinstance(level_text, str):
        raise argument_invalid(
            "groupLevelText",
            "Invalid grouping specification.",
            value=level_text,
        )

    dims: list[GroupingDimensionSpec] = []
    for fragment in level_text.split(DIMENSION_SEPARATOR):
        fragment = fragment.strip()
        if not fragment:
            continue
        name, reverse = parse_dimension_text(fragment)
        dims.append(GroupingDimensionSpec(resolve_dimension(complex_type, name), reverse))
    return GroupingLevelSpec(dims)


def parse_levels(
    spec_text: str | Sequence[str] | None,
    complex_type: ComplexType | None,
) -> list[GroupingLevelSpec]:
    """Parse grouping text into level specs.

    Levels left without dimensions are returned as-is; the owning
    :class:`~datum_grouping.grouping.GroupingSpec` drops them.
    """
    if spec_text is None:
        raise argument_required("groupingSpecText")
    if complex_type is None:
        raise argument_required("type")

    levels = [parse_level(text, complex_type) for text in split_levels(spec_text)]
    logger.debug("parsed %r into levels %s", spec_text, [level.id for level in levels])
    return levels


def format_grouping(grouping: "GroupingSpec") -> str:
    """Render a grouping back into canonical grammar text."""
    return f"{LEVEL_SEPARATOR} ".join(
        DIMENSION_SEPARATOR.join(
            f"{dim.name} desc" if dim.reverse else dim.name for dim in level.dimensions
        )
        for level in grouping.levels
    )
