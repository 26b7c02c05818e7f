"""pandas-backed implementations of the dataset capabilities.

Each column of a :class:`pandas.DataFrame` becomes a dimension and each row a
datum, so a frame can be grouped and sorted directly::

    ctype = FrameComplexType.from_frame(df)
    grouping = GroupingSpec.parse("region, year desc", ctype)
    ordered = sort_datums(ctype.datums(), grouping)
"""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass
from datetime import datetime
from fractions import Fraction
from typing import Any, Iterable, Mapping, Sequence

import pandas as pd

from datum_grouping.errors import argument_invalid
from datum_grouping.protocols import AtomComparer


def _normalize(value: Any) -> Any:
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        # list-like cells
        pass
    if isinstance(value, str) and not value:
        return None
    if hasattr(value, "item") and not isinstance(value, pd.Timestamp):
        return value.item()
    return value


def _number_key(value: numbers.Real) -> str:
    if isinstance(value, float):
        # -0.0 and integral floats share the key of the equal int
        return str(int(value)) if value.is_integer() else repr(value)
    if not math.isfinite(value):
        return repr(float(value))
    frac = Fraction(value)
    if frac.denominator == 1:
        return str(frac.numerator)
    as_float = float(frac)
    if Fraction(as_float) == frac:
        return repr(as_float)
    return f"{frac.numerator}/{frac.denominator}"


def value_key(value: Any) -> str:
    """Canonical text of a cell value; equal values always share a key."""
    if value is None:
        return ""
    if isinstance(value, numbers.Real):
        return _number_key(value)
    if isinstance(value, datetime):
        stamp = pd.Timestamp(value)
        if stamp.tzinfo is not None:
            stamp = stamp.tz_convert("UTC")
        return stamp.isoformat()
    return str(value)


@dataclass(frozen=True)
class FrameAtom:
    dimension: str
    value: Any

    @property
    def key(self) -> str:
        return value_key(self.value)

    def global_key(self) -> str:
        return f"{self.dimension}:{self.key}"


def _compare_values(a: Any, b: Any) -> int:
    # Missing values sort first.
    if a is None or b is None:
        return (a is not None) - (b is not None)
    try:
        if a < b:
            return -1
        if b < a:
            return 1
    except TypeError:
        pass
    # Unordered or tied values fall back to their keys, so 0 means equal keys.
    ka, kb = value_key(a), value_key(b)
    return (ka > kb) - (ka < kb)


@dataclass(frozen=True)
class FrameDimensionType:
    name: str
    is_discrete: bool

    def atom_comparer(self, reverse: bool) -> AtomComparer:
        if reverse:
            return lambda a, b: _compare_values(b.value, a.value)
        return lambda a, b: _compare_values(a.value, b.value)


@dataclass(frozen=True, eq=False)
class FrameDatum:
    id: int
    atoms: Mapping[str, FrameAtom]

    def view(self, names: Sequence[str]) -> tuple[FrameAtom, ...]:
        return tuple(self.atoms[name] for name in names)

    @property
    def values(self) -> dict[str, Any]:
        return {name: atom.value for name, atom in self.atoms.items()}


def infer_is_discrete(series: pd.Series) -> bool:
    """Numeric (non-bool) and datetime columns are continuous."""
    if pd.api.types.is_bool_dtype(series):
        return True
    if pd.api.types.is_numeric_dtype(series) or pd.api.types.is_datetime64_any_dtype(series):
        return False
    return True


class FrameComplexType:
    """Complex type whose dimensions are the columns of a data frame."""

    def __init__(self, frame: pd.DataFrame, dimension_types: Mapping[str, FrameDimensionType]):
        self.frame = frame
        self._dimensions = dict(dimension_types)

    @classmethod
    def from_frame(
        cls,
        frame: pd.DataFrame,
        *,
        discrete: Iterable[str] = (),
    ) -> "FrameComplexType":
        forced = set(discrete)
        unknown = forced.difference(str(column) for column in frame.columns)
        if unknown:
            raise argument_invalid(
                "discrete",
                "columns not found in frame",
                columns=sorted(unknown),
            )

        dimension_types: dict[str, FrameDimensionType] = {}
        for column in frame.columns:
            name = str(column)
            series = frame[column]
            dimension_types[name] = FrameDimensionType(
                name=name,
                is_discrete=name in forced or infer_is_discrete(series),
            )
        return cls(frame, dimension_types)

    @property
    def dimension_names(self) -> list[str]:
        return list(self._dimensions)

    def dimensions(self, name: str) -> FrameDimensionType:
        dim_type = self._dimensions.get(name)
        if dim_type is None:
            raise argument_invalid(
                "name",
                f"Undefined dimension '{name}'.",
                dimension=name,
                available=self.dimension_names,
            )
        return dim_type

    def datums(self) -> list[FrameDatum]:
        names = self.dimension_names
        datums: list[FrameDatum] = []
        for index, row in enumerate(self.frame.itertuples(index=False, name=None)):
            atoms = {
                name: FrameAtom(name, _normalize(value))
                for name, value in zip(names, row, strict=True)
            }
            datums.append(FrameDatum(id=index, atoms=atoms))
        return datums
