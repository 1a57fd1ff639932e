# src/gw2_stat_table/corrector.py
"""
Ascended trinkets and back items get fixed bonuses that
Template:Item stat lookup leaves out; Template:Prefix attributes adds them:

  {{#vardefine:major attribute asc|{{#expr:{{#var:major attribute}}+32}}}}
  {{#vardefine:minor attribute asc|{{#expr:{{#var:minor attribute}}+18}}}}
  {{#vardefine:major quad attribute asc|{{#expr:{{#var:major quad attribute}}+25}}}}
  {{#vardefine:minor quad attribute asc|{{#expr:{{#var:minor quad attribute}}+12}}}}
  {{#vardefine:celestial nbr asc|{{#expr:{{#var:celestial nbr}}+13}}}}

Source: https://wiki.guildwars2.com/index.php?title=Template:prefix_attributes&action=edit
"""
from __future__ import annotations

import re

from gw2_stat_table.errors import MalformedResponseError

ASCENDED_BONUSES = {
    "majorAttribute"    : 32,
    "minorAttribute"    : 18,
    "majorQuadAttribute": 25,
    "minorQuadAttribute": 12,
    "celestialNbr"      : 13,
}

ASCENDED_SUPERTYPES = {"back item", "trinket"}

LEADING_INT_RE = re.compile(r"\s*([-+]?\d+)")


def leading_int(value: str) -> int:
    """Integer prefix of `value` ("12.5" → 12, " 7 pts" → 7)."""
    match = LEADING_INT_RE.match(str(value))
    if match is None:
        raise MalformedResponseError(f"expected a number, got {value!r}")
    return int(match.group(1))


def needs_correction(record: dict[str, str]) -> bool:
    return (record.get("rarityStd") == "ascended"
            and record.get("supertype") in ASCENDED_SUPERTYPES)


def add_attributes(record: dict[str, str], add_map: dict[str, int]) -> dict[str, str]:
    """Copy of `record` with each integer field in `add_map` increased."""
    out = dict(record)
    for key, bonus in add_map.items():
        out[key] = str(leading_int(out.get(key, "0")) + bonus)
    return out


def correct(record: dict[str, str]) -> dict[str, str]:
    # Cached records are stored uncorrected, so this runs on every read
    if not needs_correction(record):
        return record
    return add_attributes(record, ASCENDED_BONUSES)
