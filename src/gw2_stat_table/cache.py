# src/gw2_stat_table/cache.py
"""
JSON checkpoint of the stat table.

The whole table lives in memory and the file is rewritten after every new
cell, so a killed run picks up where it stopped.
"""
from __future__ import annotations
import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Any

from gw2_stat_table.config import CACHE_FILE, ITEM_TYPES, MAX_LEVEL, RARITIES
from gw2_stat_table.errors import CacheWriteError

logger = logging.getLogger(__name__)

Record = dict[str, str]
Table = dict[str, dict[str, dict[str, Any]]]


def build_skeleton(item_types: list[str], rarities: list[str], max_level: int) -> Table:
    """Every (type, rarity, level) cell present and set to None."""
    levels = [str(lvl) for lvl in range(1, max_level + 1)]
    return {
        item_type: {rarity: {lvl: None for lvl in levels} for rarity in rarities}
        for item_type in item_types
    }


def _check_shape(path: Path, stored: Any) -> None:
    """Cache files must be type → rarity → level → record-or-null mappings."""
    def bad(where: str) -> ValueError:
        return ValueError(f"cache {path} is not a type → rarity → level table ({where})")

    if not isinstance(stored, dict):
        raise bad(f"top level is {type(stored).__name__}")
    for item_type, rarities in stored.items():
        if rarities is None:
            continue
        if not isinstance(rarities, dict):
            raise bad(item_type)
        for rarity, levels in rarities.items():
            if levels is None:
                continue
            if not isinstance(levels, dict):
                raise bad(f"{item_type}/{rarity}")
            for lvl, record in levels.items():
                if record is not None and not isinstance(record, dict):
                    raise bad(f"{item_type}/{rarity}/{lvl}")


def _write_atomic(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    with open(tmp, "w", encoding="utf-8") as f:
        f.write(text)
    os.replace(tmp, path)


class CacheStore:
    """Durable (type, rarity, level) → raw record mapping. Single writer."""

    def __init__(self,
                 path: str | Path = CACHE_FILE,
                 item_types: list[str] = ITEM_TYPES,
                 rarities: list[str] = RARITIES,
                 max_level: int = MAX_LEVEL):
        self.path = Path(path)
        self.item_types = list(item_types)
        self.rarities = list(rarities)
        self.max_level = max_level
        self.table: Table = build_skeleton(self.item_types, self.rarities, max_level)
        self._flush_lock = asyncio.Lock()

    def load(self) -> Table:
        """Read the file into memory, creating it from the skeleton if absent."""
        if not self.path.exists():
            logger.info(f"No cache at {self.path}, writing empty skeleton")
            self._write_sync()
            return self.table

        with open(self.path, "r", encoding="utf-8") as f:
            stored = json.load(f)
        _check_shape(self.path, stored)
        # Keep stored cells, including types/rarities no longer configured
        for item_type, rarities in stored.items():
            for rarity, levels in (rarities or {}).items():
                cells = self.table.setdefault(item_type, {}).setdefault(rarity, {})
                for lvl, record in (levels or {}).items():
                    if record or lvl not in cells:
                        cells[lvl] = record
        logger.info(f"Loaded cache from {self.path}: {self.cached_count()} cells populated")
        return self.table

    def get(self, item_type: str, rarity: str, level: int | str) -> Record | None:
        record = self.table.get(item_type, {}).get(rarity, {}).get(str(level))
        return record or None

    def cached_count(self) -> int:
        return sum(
            1
            for rarities in self.table.values()
            for levels in rarities.values()
            for record in levels.values()
            if record
        )

    async def put(self, item_type: str, rarity: str, level: int | str, record: Record) -> Record:
        """Store `record` in memory, then rewrite the whole file."""
        self.table.setdefault(item_type, {}).setdefault(rarity, {})[str(level)] = record
        await self.flush()
        logger.info(f"written to cache {rarity} {item_type} of level {level}")
        return record

    async def flush(self) -> None:
        # Serialise under the lock so the newest in-memory table always wins
        async with self._flush_lock:
            text = json.dumps(self.table)
            try:
                await asyncio.to_thread(_write_atomic, self.path, text)
            except OSError as e:
                raise CacheWriteError(f"could not write cache {self.path}: {e}") from e

    def _write_sync(self) -> None:
        try:
            _write_atomic(self.path, json.dumps(self.table))
        except OSError as e:
            raise CacheWriteError(f"could not write cache {self.path}: {e}") from e
