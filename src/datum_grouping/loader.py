"""Loader for named grouping definitions stored in YAML or JSON files."""

from __future__ import annotations

import json
import logging
from collections import OrderedDict
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Sequence

import yaml

from datum_grouping.errors import GroupingError, GroupingErrorCode
from datum_grouping.grouping import FLATTENING_MODES, SINGLE_LEVEL, GroupingSpec
from datum_grouping.protocols import ComplexType

logger = logging.getLogger(__name__)

_ALLOWED_KEYS = {"by", "flattening_mode", "flatten_root_label", "reverse"}


@dataclass(frozen=True)
class GroupingRequest:
    """A named, not yet resolved grouping."""

    name: str
    by: str | tuple[str, ...]
    flattening_mode: str | None = None
    flatten_root_label: str = ""
    reverse: bool = False

    def build(self, complex_type: ComplexType) -> GroupingSpec:
        return GroupingSpec.parse(self.by, complex_type).ensure(
            flattening_mode=self.flattening_mode,
            flatten_root_label=self.flatten_root_label,
            reverse=self.reverse,
        )


def _invalid(path: Path | None, error: str, **extra: Any) -> GroupingError:
    ctx: dict[str, Any] = {"error": error}
    if path is not None:
        ctx["path"] = str(path)
    ctx.update(extra)
    return GroupingError(GroupingErrorCode.ARGUMENT_INVALID, ctx=ctx)


def _parse_file(path: Path) -> Any:
    suffix = path.suffix.lower()
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise GroupingError(
            GroupingErrorCode.IO_ERROR,
            ctx={"path": str(path), "error": "cannot read grouping file"},
            cause=exc,
        )
    if suffix in {".yaml", ".yml"}:
        try:
            return yaml.safe_load(raw) or {}
        except yaml.YAMLError as exc:
            raise GroupingError(
                GroupingErrorCode.ARGUMENT_INVALID,
                ctx={"path": str(path), "error": "malformed YAML"},
                cause=exc,
            )
    if suffix == ".json":
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            raise GroupingError(
                GroupingErrorCode.ARGUMENT_INVALID,
                ctx={"path": str(path), "error": "malformed JSON"},
                cause=exc,
            )
    raise _invalid(path, "unsupported grouping file extension", suffix=suffix)


def load_groupings(path: Path | str) -> "OrderedDict[str, GroupingRequest]":
    """Load a grouping file into :class:`GroupingRequest` objects keyed by name."""

    config_path = Path(path)
    data = _parse_file(config_path)
    requests = parse_groupings_mapping(data, source=config_path)
    logger.debug("loaded %d groupings from %s", len(requests), config_path)
    return requests


def parse_groupings_mapping(
    data: Any,
    *,
    source: Path | None = None,
) -> "OrderedDict[str, GroupingRequest]":
    if not isinstance(data, Mapping):
        raise _invalid(source, "top-level must be mapping")

    section = data.get("groupings")
    if not isinstance(section, Mapping):
        raise _invalid(source, "groupings must be mapping")

    requests: OrderedDict[str, GroupingRequest] = OrderedDict()
    for name, payload in section.items():
        if not isinstance(name, str) or not name:
            raise _invalid(source, "grouping name must be non-empty string")
        requests[name] = _parse_entry(name, payload, source=source)
    return requests


def _parse_by(name: str, value: Any, *, source: Path | None) -> str | tuple[str, ...]:
    if isinstance(value, str) and value.strip():
        return value
    if isinstance(value, list) and value and all(isinstance(item, str) for item in value):
        return tuple(value)
    raise _invalid(
        source,
        "grouping.by must be non-empty string or list of strings",
        grouping=name,
    )


def _parse_entry(name: str, payload: Any, *, source: Path | None) -> GroupingRequest:
    if isinstance(payload, (str, list)):
        return GroupingRequest(name=name, by=_parse_by(name, payload, source=source))

    if not isinstance(payload, Mapping):
        raise _invalid(source, "grouping payload must be string, list or mapping", grouping=name)

    unknown = set(payload) - _ALLOWED_KEYS
    if unknown:
        raise _invalid(
            source,
            "unsupported grouping keys",
            grouping=name,
            keys=sorted(str(key) for key in unknown),
        )

    by = _parse_by(name, payload.get("by"), source=source)

    mode = payload.get("flattening_mode")
    if mode is not None and mode not in (*FLATTENING_MODES, SINGLE_LEVEL):
        raise _invalid(
            source,
            "grouping.flattening_mode must be tree-pre, tree-post or singleLevel",
            grouping=name,
        )

    root_label = payload.get("flatten_root_label", "")
    if root_label is None:
        root_label = ""
    if not isinstance(root_label, str):
        raise _invalid(source, "grouping.flatten_root_label must be string", grouping=name)

    reverse = payload.get("reverse", False)
    if not isinstance(reverse, bool):
        raise _invalid(source, "grouping.reverse must be boolean", grouping=name)

    return GroupingRequest(
        name=name,
        by=by,
        flattening_mode=mode,
        flatten_root_label=root_label,
        reverse=reverse,
    )


def build_groupings(
    requests: Mapping[str, GroupingRequest] | Sequence[GroupingRequest],
    complex_type: ComplexType,
) -> "OrderedDict[str, GroupingSpec]":
    """Resolve requests against ``complex_type``."""
    items = requests.values() if isinstance(requests, Mapping) else requests
    return OrderedDict((request.name, request.build(complex_type)) for request in items)
