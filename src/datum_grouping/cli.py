"""Command-line entry point for grouping CSV data."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Iterable

import pandas as pd

from datum_grouping.errors import GroupingError, GroupingErrorCode
from datum_grouping.frame import FrameComplexType
from datum_grouping.grouping import FLATTENING_MODES, SINGLE_LEVEL, GroupingSpec
from datum_grouping.loader import load_groupings
from datum_grouping.operations import GroupNode, flatten_groups, group_datums

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Group and sort CSV rows by a grouping spec")
    parser.add_argument("data", help="Path to a CSV file with a header row")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--by", help="Grouping text, e.g. 'region|country desc, year'")
    source.add_argument("--config", help="YAML or JSON file with named groupings")
    parser.add_argument("--name", help="Grouping name to use from --config")
    parser.add_argument(
        "--flatten",
        choices=[*FLATTENING_MODES, SINGLE_LEVEL],
        help="Flattening mode applied to the grouping",
    )
    parser.add_argument("--root-label", default="", help="Label of the flattening root node")
    parser.add_argument("--reverse", action="store_true", help="Reverse every dimension's order")
    parser.add_argument(
        "--discrete",
        action="append",
        default=None,
        metavar="COLUMN",
        help="Treat COLUMN as discrete regardless of dtype (may be repeated)",
    )
    parser.add_argument("--out", help="Optional JSONL output path")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Iterable[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(None if argv is None else list(argv))
    if args.name and not args.config:
        parser.error("--name requires --config")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    frame = _read_frame(Path(args.data))
    ctype = FrameComplexType.from_frame(frame, discrete=args.discrete or ())

    grouping, config_root_label = _resolve_grouping(args, ctype)
    grouping = grouping.ensure(
        flattening_mode=args.flatten,
        flatten_root_label=args.root_label,
        reverse=args.reverse,
    )
    logger.info("grouping %s rows with %s", len(frame), grouping.id)

    # reversal resets the grouping's root label, so pass the requested one through
    root_label = args.root_label or config_root_label or grouping.flatten_root_label
    root = group_datums(ctype.datums(), grouping, root_label=root_label)
    nodes = flatten_groups(root, grouping.flattening_mode)

    if args.out:
        _write_jsonl(nodes, Path(args.out))
    else:
        for node in nodes:
            indent = "  " * max(node.depth - 1, 0)
            label = node.key if node.depth else (node.key or "(root)")
            print(f"{indent}{label}\t{len(node.datums)}")

    return 0


def _read_frame(path: Path) -> pd.DataFrame:
    try:
        return pd.read_csv(path)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        raise GroupingError(
            GroupingErrorCode.IO_ERROR,
            ctx={"path": str(path), "error": "cannot read CSV"},
            cause=exc,
        )


def _resolve_grouping(
    args: argparse.Namespace,
    ctype: FrameComplexType,
) -> tuple[GroupingSpec, str]:
    if args.by:
        return GroupingSpec.parse(args.by, ctype), ""

    requests = load_groupings(args.config)
    if not args.name:
        if len(requests) != 1:
            raise GroupingError(
                GroupingErrorCode.ARGUMENT_REQUIRED,
                ctx={"argument": "name", "available": list(requests)},
            )
        request = next(iter(requests.values()))
    elif args.name in requests:
        request = requests[args.name]
    else:
        raise GroupingError(
            GroupingErrorCode.ARGUMENT_INVALID,
            ctx={"argument": "name", "error": "unknown grouping", "name": args.name},
        )
    return request.build(ctype), request.flatten_root_label


def _write_jsonl(nodes: list[GroupNode], out: Path) -> None:
    with out.open("w", encoding="utf-8") as fh:
        for node in nodes:
            record = {
                "key": node.key,
                "depth": node.depth,
                "count": len(node.datums),
                "datum_ids": [getattr(datum, "id", None) for datum in node.datums],
            }
            fh.write(json.dumps(record) + "\n")


def entrypoint() -> None:  # pragma: no cover - console entry
    try:
        raise SystemExit(main())
    except GroupingError as exc:  # pragma: no cover - console behavior
        raise SystemExit(f"error: {exc}")
