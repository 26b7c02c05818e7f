"""Minimal in-memory implementations of the dataset capabilities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping

import pytest


@dataclass(frozen=True)
class StubAtom:
    value: Any

    def global_key(self) -> str:
        return "" if self.value is None else str(self.value)


@dataclass(frozen=True)
class StubDimensionType:
    name: str
    is_discrete: bool = True

    def atom_comparer(self, reverse: bool):
        def compare(a: StubAtom, b: StubAtom) -> int:
            result = (a.value > b.value) - (a.value < b.value)
            return -result if reverse else result

        return compare


class StubComplexType:
    def __init__(self, dims: Mapping[str, StubDimensionType]):
        self._dims = dict(dims)

    def dimensions(self, name: str) -> StubDimensionType:
        return self._dims[name]


@dataclass(eq=False)
class StubDatum:
    id: int
    atoms: Mapping[str, StubAtom]


class StubComplex:
    def __init__(self) -> None:
        self.requested: tuple[str, ...] | None = None

    def view(self, names):
        self.requested = tuple(names)
        return {"names": tuple(names)}


@pytest.fixture
def ctype() -> StubComplexType:
    return StubComplexType(
        {
            "series1": StubDimensionType("series1"),
            "series2": StubDimensionType("series2"),
            "category": StubDimensionType("category"),
            "value": StubDimensionType("value", is_discrete=False),
        }
    )


@pytest.fixture
def other_ctype() -> StubComplexType:
    return StubComplexType({"series1": StubDimensionType("series1")})


@pytest.fixture
def make_datum() -> Callable[..., StubDatum]:
    counter = iter(range(1_000_000))

    def factory(**values: Any) -> StubDatum:
        return StubDatum(
            id=next(counter),
            atoms={name: StubAtom(value) for name, value in values.items()},
        )

    return factory


@pytest.fixture
def stub_complex() -> StubComplex:
    return StubComplex()
