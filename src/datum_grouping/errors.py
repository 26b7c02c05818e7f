"""Error types for the grouping engine.

Every failure is raised eagerly while a grouping is being built, so callers
never receive a half-constructed spec.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any


class GroupingErrorCode(Enum):
    ARGUMENT_REQUIRED = auto()
    ARGUMENT_INVALID = auto()
    IO_ERROR = auto()


@dataclass(eq=False)
class GroupingError(Exception):
    """Structured error raised by the parser, the specs and the loader."""

    code: GroupingErrorCode
    ctx: dict[str, Any] | None = None
    cause: Exception | None = None

    def __post_init__(self) -> None:
        if self.ctx is None:
            self.ctx = {}
        if self.cause is not None:
            self.__cause__ = self.cause
        super().__init__(self.code.name)

    def __str__(self) -> str:
        if not self.ctx:
            return self.code.name
        parts = ", ".join(f"{k}={v!r}" for k, v in self.ctx.items())
        return f"{self.code.name}: {parts}"


def argument_required(name: str) -> GroupingError:
    return GroupingError(GroupingErrorCode.ARGUMENT_REQUIRED, ctx={"argument": name})


def argument_invalid(
    name: str,
    message: str,
    *,
    cause: Exception | None = None,
    **extra: Any,
) -> GroupingError:
    ctx: dict[str, Any] = {"argument": name, "error": message}
    ctx.update(extra)
    return GroupingError(GroupingErrorCode.ARGUMENT_INVALID, ctx=ctx, cause=cause)
