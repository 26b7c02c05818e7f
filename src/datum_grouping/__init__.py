"""Grouping and sorting specifications over typed datasets."""

from .dimension import GroupingDimensionSpec
from .errors import GroupingError, GroupingErrorCode
from .grouping import GroupingSpec
from .level import GroupingLevelSpec, LevelKey
from .loader import GroupingRequest, build_groupings, load_groupings
from .operations import GroupNode, flatten_groups, group_datums, sort_datums
from .parser import format_grouping

__all__ = [
    "GroupingDimensionSpec",
    "GroupingError",
    "GroupingErrorCode",
    "GroupingLevelSpec",
    "GroupingRequest",
    "GroupingSpec",
    "GroupNode",
    "LevelKey",
    "build_groupings",
    "flatten_groups",
    "format_grouping",
    "group_datums",
    "load_groupings",
    "sort_datums",
]
