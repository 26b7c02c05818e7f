"""Capabilities the grouping engine expects from the dataset layer.

Chart adapters satisfy these structurally; nothing here needs to be
subclassed. See :mod:`datum_grouping.frame` for a pandas-backed implementation.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Protocol, Sequence, runtime_checkable


@runtime_checkable
class Atom(Protocol):
    """Immutable value of one dimension of one datum."""

    def global_key(self) -> str:
        """Stable key; equal atoms must produce equal keys."""
        ...


AtomComparer = Callable[[Atom, Atom], int]


@runtime_checkable
class Datum(Protocol):
    atoms: Mapping[str, Atom]


@runtime_checkable
class DimensionType(Protocol):
    name: str
    is_discrete: bool

    def atom_comparer(self, reverse: bool) -> AtomComparer:
        """Return a three-way comparer over atoms of this dimension."""
        ...


@runtime_checkable
class ComplexType(Protocol):
    def dimensions(self, name: str) -> DimensionType:
        """Resolve a dimension by name, raising when it is unknown."""
        ...


@runtime_checkable
class Complex(Protocol):
    def view(self, names: Sequence[str]) -> Any:
        ...
