# src/gw2_stat_table/config.py
"""
Endpoint, request pacing, table dimensions and file locations.

The CLI flags in `scrape_items.py` override the dimensions and cache path.
"""

from pathlib import Path

# ---------- Wiki endpoint ----------
WIKI_API = "https://wiki.guildwars2.com/api.php"

# The wiki asks API clients to identify themselves
HEADERS = {
    "User-Agent": (
        "GW2StatTable/1.0 "
        "(item stat lookup table builder; https://wiki.guildwars2.com/wiki/Template:Item_stat_lookup)"
    )
}

# ---------- Throttling knobs ----------
# Token bucket: at most 10 requests per 1.5 s window, bursts up to 10
RATE_LIMIT_TOKENS   = 10
RATE_LIMIT_INTERVAL = 1.5       # seconds
MAX_ATTEMPTS        = 10        # total tries per cell, first one included
REQUEST_TIMEOUT     = 30        # seconds, per request

# ---------- Table dimensions ----------
# Item types understood by Template:Item stat lookup
ITEM_TYPES = [
    # weapons
    "axe", "dagger", "mace", "pistol", "scepter", "sword",
    "focus", "shield", "torch", "warhorn",
    "greatsword", "hammer", "longbow", "rifle", "short bow", "staff",
    "harpoon gun", "spear", "trident",
    # armor
    "helm", "shoulders", "coat", "gloves", "leggings", "boots",
    # trinkets and back items
    "amulet", "ring", "accessory", "back item",
]

RARITIES = [
    "basic", "fine", "masterwork", "rare", "exotic", "ascended", "legendary",
]

MAX_LEVEL = 80

# ---------- Paths ----------
PROJECT_ROOT   = Path(__file__).resolve().parents[2]
CACHE_FILE     = PROJECT_ROOT / "data" / "cache.json"
DATA_PROCESSED = PROJECT_ROOT / "data" / "processed"
