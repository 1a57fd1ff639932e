# src/gw2_stat_table/table.py
"""
Builds the type × rarity × level stat table.

Types run one after another, and so do the rarities inside a type; the
levels of one (type, rarity) group are fetched together and joined before
the next group starts. The shared token bucket is what actually bounds
request rate.
"""
from __future__ import annotations
import asyncio
import logging
from pathlib import Path

import aiohttp
from tqdm.auto import tqdm

from gw2_stat_table.cache import CacheStore, Record, Table, build_skeleton
from gw2_stat_table.config import (
    CACHE_FILE,
    ITEM_TYPES,
    MAX_ATTEMPTS,
    MAX_LEVEL,
    RARITIES,
    RATE_LIMIT_INTERVAL,
    RATE_LIMIT_TOKENS,
    REQUEST_TIMEOUT,
)
from gw2_stat_table.corrector import correct
from gw2_stat_table.errors import CellFailure, TableBuildError
from gw2_stat_table.parser import parse_response
from gw2_stat_table.rate_limiter import TokenBucket
from gw2_stat_table.wiki_api import TemplateFetcher

logger = logging.getLogger(__name__)

__all__ = ["TableBuilder", "build_skeleton", "fetch_table", "query_item_attributes"]


class TableBuilder:
    """Populates a table from the cache, falling back to the wiki on a miss.

    With ``fail_fast`` (the default) the first group with a failed cell stops
    the run. Without it every group is attempted and all failures are raised
    together at the end.
    """

    def __init__(self,
                 cache: CacheStore,
                 fetcher: TemplateFetcher,
                 item_types: list[str] | None = None,
                 rarities: list[str] | None = None,
                 max_level: int | None = None,
                 fail_fast: bool = True):
        self.cache = cache
        self.fetcher = fetcher
        self.item_types = list(item_types if item_types is not None else cache.item_types)
        self.rarities = list(rarities if rarities is not None else cache.rarities)
        self.max_level = max_level if max_level is not None else cache.max_level
        self.fail_fast = fail_fast

    async def query_item_attributes(self, item_type: str, rarity: str, level: int | str) -> Record:
        """Corrected record for one cell."""
        cached = self.cache.get(item_type, rarity, level)
        if cached is not None:
            return correct(cached)

        payload = await self.fetcher.fetch(item_type, rarity, level)
        record = parse_response(payload)
        # Uncorrectable records never reach the cache; the cached copy stays uncorrected
        corrected = correct(record)
        await self.cache.put(item_type, rarity, level, record)
        return corrected

    async def _build_group(self, item_type: str, rarity: str,
                           cells: dict[str, Record | None]) -> list[CellFailure]:
        levels = list(cells)
        results = await asyncio.gather(
            *(self.query_item_attributes(item_type, rarity, lvl) for lvl in levels),
            return_exceptions=True,
        )
        failures = []
        for lvl, result in zip(levels, results):
            if isinstance(result, Exception):
                logger.error(f"{rarity} {item_type} of level {lvl} failed: "
                             f"{type(result).__name__}: {result}")
                failures.append(CellFailure(item_type, rarity, lvl, result))
            elif isinstance(result, BaseException):
                raise result
            else:
                cells[lvl] = result
        return failures

    async def build(self, populate: bool = True) -> Table:
        table = build_skeleton(self.item_types, self.rarities, self.max_level)
        if not populate:
            return table

        failures: list[CellFailure] = []
        groups = [(t, r) for t in self.item_types for r in self.rarities]
        for item_type, rarity in tqdm(groups, desc="Groups"):
            group_failures = await self._build_group(item_type, rarity, table[item_type][rarity])
            if not group_failures:
                continue
            failures.extend(group_failures)
            if self.fail_fast:
                raise TableBuildError(failures, table)

        if failures:
            raise TableBuildError(failures, table)
        return table


# ---------- Entry points ----------
async def fetch_table(cache_file: str | Path = CACHE_FILE,
                      item_types: list[str] = ITEM_TYPES,
                      rarities: list[str] = RARITIES,
                      max_level: int = MAX_LEVEL,
                      fail_fast: bool = True,
                      populate: bool = True) -> Table:
    """Load the cache and return the fully populated table."""
    cache = CacheStore(cache_file, item_types, rarities, max_level)
    cache.load()
    limiter = TokenBucket(RATE_LIMIT_TOKENS, RATE_LIMIT_INTERVAL)
    async with aiohttp.ClientSession() as session:
        fetcher = TemplateFetcher(session, limiter, MAX_ATTEMPTS, REQUEST_TIMEOUT)
        builder = TableBuilder(cache, fetcher, item_types, rarities, max_level, fail_fast)
        return await builder.build(populate=populate)


async def query_item_attributes(item_type: str, rarity: str, level: int | str,
                                cache_file: str | Path = CACHE_FILE) -> Record:
    """Corrected record for a single cell, going through the same cache."""
    cache = CacheStore(cache_file)
    cache.load()
    limiter = TokenBucket(RATE_LIMIT_TOKENS, RATE_LIMIT_INTERVAL)
    async with aiohttp.ClientSession() as session:
        builder = TableBuilder(cache, TemplateFetcher(session, limiter))
        return await builder.query_item_attributes(item_type, rarity, level)
