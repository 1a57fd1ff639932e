# src/gw2_stat_table/scrape_items.py
"""
Command-line entry-point that:
1. Loads (or bootstraps) the JSON cache
2. Fills every missing cell from the wiki, group by group
3. Optionally writes the finished table as CSV / JSON
"""

from __future__ import annotations
import argparse
import asyncio
import logging
import sys

from gw2_stat_table.cache import CacheStore
from gw2_stat_table.config import CACHE_FILE, DATA_PROCESSED, ITEM_TYPES, MAX_LEVEL, RARITIES
from gw2_stat_table.errors import TableBuildError
from gw2_stat_table.export import write_csv, write_json
from gw2_stat_table.table import fetch_table

logger = logging.getLogger("gw2_stat_table")


def setup_logging(debug: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )
    # aiohttp is chatty at debug level
    logging.getLogger("aiohttp").setLevel(logging.WARNING)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Build the GW2 item stat table from the wiki's Item stat lookup template"
    )
    parser.add_argument("--cache", default=str(CACHE_FILE),
                        help="Cache file to resume from and write to")
    parser.add_argument("--skeleton-only", action="store_true",
                        help="Only create the empty cache file, no network activity")
    parser.add_argument("--types", nargs="+", default=ITEM_TYPES, metavar="TYPE",
                        help="Item types to fetch (default: all)")
    parser.add_argument("--rarities", nargs="+", default=RARITIES, metavar="RARITY",
                        help="Rarities to fetch (default: all)")
    parser.add_argument("--max-level", type=int, default=MAX_LEVEL,
                        help="Highest item level to fetch")
    parser.add_argument("--keep-going", action="store_true",
                        help="Keep fetching other groups after a group fails")
    parser.add_argument("--csv", nargs="?", const=str(DATA_PROCESSED / "item_stats.csv"),
                        help="Write the table as CSV")
    parser.add_argument("--json", help="Write the corrected table as JSON")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(args.debug)

    if args.skeleton_only:
        cache = CacheStore(args.cache, args.types, args.rarities, args.max_level)
        cache.load()
        print(f"Cache ready at {args.cache} ({cache.cached_count()} cells populated)")
        return 0

    try:
        table = asyncio.run(fetch_table(
            cache_file=args.cache,
            item_types=args.types,
            rarities=args.rarities,
            max_level=args.max_level,
            fail_fast=not args.keep_going,
        ))
    except TableBuildError as e:
        logger.error(f"{len(e.failures)} cell(s) failed; completed cells are cached, rerun to retry")
        for failure in e.failures:
            logger.error(f"  {failure.describe()}")
        return 1

    if args.csv:
        df = write_csv(table, args.csv)
        print(f"✅  Saved {len(df):5} rows → {args.csv}")
    if args.json:
        write_json(table, args.json)
        print(f"✅  Saved table → {args.json}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
