from __future__ import annotations

import json
from pathlib import Path

import pytest

from datum_grouping.cli import main
from datum_grouping.errors import GroupingError, GroupingErrorCode


def write_csv(tmp_path: Path) -> Path:
    path = tmp_path / "sales.csv"
    path.write_text(
        "region,country,year\n"
        "EU,FR,2020\n"
        "US,US,2020\n"
        "EU,DE,2021\n"
        "EU,FR,2021\n",
        encoding="utf-8",
    )
    return path


def test_cli_prints_leaf_groups(tmp_path: Path, capsys) -> None:
    exit_code = main([str(write_csv(tmp_path)), "--by", "region, country desc"])

    assert exit_code == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines == [
        "  country:FR\t2",
        "  country:DE\t1",
        "  country:US\t1",
    ]


def test_cli_tree_pre_with_root_label(tmp_path: Path, capsys) -> None:
    exit_code = main(
        [
            str(write_csv(tmp_path)),
            "--by",
            "region",
            "--flatten",
            "tree-pre",
            "--root-label",
            "All",
        ]
    )

    assert exit_code == 0
    assert capsys.readouterr().out.splitlines() == [
        "All\t4",
        "region:EU\t3",
        "region:US\t1",
    ]


def test_cli_writes_jsonl(tmp_path: Path) -> None:
    out_path = tmp_path / "groups.jsonl"

    exit_code = main(
        [str(write_csv(tmp_path)), "--by", "region|year", "--reverse", "--out", str(out_path)]
    )

    assert exit_code == 0
    records = [json.loads(line) for line in out_path.read_text(encoding="utf-8").splitlines()]
    assert [r["key"] for r in records] == [
        "region:US,year:2020",
        "region:EU,year:2021",
        "region:EU,year:2020",
    ]
    assert records[1]["datum_ids"] == [2, 3]
    assert all(r["depth"] == 1 for r in records)


def test_cli_uses_config(tmp_path: Path, capsys) -> None:
    config = tmp_path / "groupings.yaml"
    config.write_text(
        "groupings:\n  by_year:\n    by: year desc\n  by_region: region\n",
        encoding="utf-8",
    )

    exit_code = main([str(write_csv(tmp_path)), "--config", str(config), "--name", "by_year"])

    assert exit_code == 0
    assert capsys.readouterr().out.splitlines() == ["year:2021\t2", "year:2020\t2"]


def test_cli_config_requires_name_when_ambiguous(tmp_path: Path) -> None:
    config = tmp_path / "groupings.yaml"
    config.write_text("groupings:\n  a: year\n  b: region\n", encoding="utf-8")

    with pytest.raises(GroupingError) as exc:
        main([str(write_csv(tmp_path)), "--config", str(config)])
    assert exc.value.code is GroupingErrorCode.ARGUMENT_REQUIRED
    assert exc.value.ctx["available"] == ["a", "b"]


def test_cli_unknown_dimension(tmp_path: Path) -> None:
    with pytest.raises(GroupingError) as exc:
        main([str(write_csv(tmp_path)), "--by", "city"])
    assert exc.value.code is GroupingErrorCode.ARGUMENT_INVALID


def test_cli_missing_csv(tmp_path: Path) -> None:
    with pytest.raises(GroupingError) as exc:
        main([str(tmp_path / "missing.csv"), "--by", "region"])
    assert exc.value.code is GroupingErrorCode.IO_ERROR


def test_cli_keeps_root_label_when_reversed(tmp_path: Path, capsys) -> None:
    exit_code = main(
        [
            str(write_csv(tmp_path)),
            "--by",
            "region",
            "--flatten",
            "tree-pre",
            "--root-label",
            "All",
            "--reverse",
        ]
    )

    assert exit_code == 0
    assert capsys.readouterr().out.splitlines() == [
        "All\t4",
        "region:US\t1",
        "region:EU\t3",
    ]


def test_cli_config_root_label_survives_reverse(tmp_path: Path, capsys) -> None:
    config = tmp_path / "groupings.yaml"
    config.write_text(
        "groupings:\n"
        "  tree:\n"
        "    by: region\n"
        "    flattening_mode: tree-post\n"
        "    flatten_root_label: Total\n"
        "    reverse: true\n",
        encoding="utf-8",
    )

    exit_code = main([str(write_csv(tmp_path)), "--config", str(config)])

    assert exit_code == 0
    assert capsys.readouterr().out.splitlines() == [
        "region:US\t1",
        "region:EU\t3",
        "Total\t4",
    ]


def test_cli_rejects_name_without_config(tmp_path: Path, capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        main([str(write_csv(tmp_path)), "--by", "region", "--name", "by_year"])
    assert exc.value.code == 2
    assert "--name requires --config" in capsys.readouterr().err
