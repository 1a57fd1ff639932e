"""Unit tests for flattening the table into a DataFrame / CSV."""

from __future__ import annotations

import json

import pandas as pd
import pytest

from gw2_stat_table.export import table_to_frame, write_csv, write_json

pytestmark = pytest.mark.unit

TABLE = {
    "ring": {"ascended": {"2": {"majorAttribute": "42"}, "1": {"majorAttribute": "40"}, "3": None}},
    "axe": {"fine": {"1": {"majorAttribute": "5", "defense": "0"}}},
}


def test_table_to_frame_skips_empty_cells_and_sorts() -> None:
    df = table_to_frame(TABLE)

    assert list(df[["item_type", "rarity", "level"]].itertuples(index=False, name=None)) == [
        ("axe", "fine", 1),
        ("ring", "ascended", 1),
        ("ring", "ascended", 2),
    ]
    assert df.loc[2, "majorAttribute"] == "42"


def test_table_to_frame_empty_table() -> None:
    df = table_to_frame({"ring": {"fine": {"1": None}}})

    assert df.empty
    assert list(df.columns) == ["item_type", "rarity", "level"]


def test_write_csv_and_json(tmp_path) -> None:
    csv_file = tmp_path / "out" / "stats.csv"
    json_file = tmp_path / "out" / "stats.json"

    write_csv(TABLE, csv_file)
    write_json(TABLE, json_file)

    assert len(pd.read_csv(csv_file)) == 3
    assert json.loads(json_file.read_text()) == TABLE
