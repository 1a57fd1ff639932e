# src/gw2_stat_table/export.py
"""Flatten the nested stat table for spreadsheets and downstream tools."""
from __future__ import annotations
import json
from pathlib import Path

import pandas as pd

from gw2_stat_table.cache import Table

KEY_COLUMNS = ["item_type", "rarity", "level"]


def table_to_frame(table: Table) -> pd.DataFrame:
    """One row per populated cell; empty cells are skipped."""
    rows = []
    for item_type, rarities in table.items():
        for rarity, levels in rarities.items():
            for level, record in levels.items():
                if not record:
                    continue
                rows.append({"item_type": item_type, "rarity": rarity,
                             "level": int(level), **record})
    if not rows:
        return pd.DataFrame(columns=KEY_COLUMNS)
    df = pd.DataFrame(rows)
    return df.sort_values(by=KEY_COLUMNS).reset_index(drop=True)


def write_csv(table: Table, out_file: str | Path) -> pd.DataFrame:
    out_file = Path(out_file)
    out_file.parent.mkdir(parents=True, exist_ok=True)
    df = table_to_frame(table)
    df.to_csv(out_file, index=False)
    return df


def write_json(table: Table, out_file: str | Path) -> None:
    out_file = Path(out_file)
    out_file.parent.mkdir(parents=True, exist_ok=True)
    with open(out_file, "w", encoding="utf-8") as f:
        json.dump(table, f, indent=2)
