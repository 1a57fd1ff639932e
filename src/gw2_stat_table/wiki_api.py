# src/gw2_stat_table/wiki_api.py
"""
Requests against the wiki's ``expandtemplates`` API: the lookup template
sent for one (type, rarity, level) cell, and the retrying POST that returns
its raw body.
"""
from __future__ import annotations
import asyncio
import logging
from typing import Any

import aiohttp

from gw2_stat_table.config import (
    WIKI_API,
    HEADERS,
    MAX_ATTEMPTS,
    REQUEST_TIMEOUT,
)
from gw2_stat_table.errors import FetchExhaustedError, MalformedResponseError, NetworkError
from gw2_stat_table.rate_limiter import TokenBucket

logger = logging.getLogger(__name__)

# ---------- Template ----------
# Variables set by https://wiki.guildwars2.com/wiki/Template:Item_stat_lookup
TEMPLATE_VARIABLES = [
    "major attribute",
    "minor attribute",
    "major quad attribute",
    "minor quad attribute",
    "celestial nbr",
    "boon duration",
    "condition duration",
    "magic find",
    "type_ori",
    "type_std",
    "rarity_std",
    "attribute_lu",
    "defense_lu",
    "level_lu",
    "strength_lu",
    "supertype",
    "defense",
    "min strength",
    "max strength",
]


def build_template(item_type: str, rarity: str, level: int | str) -> str:
    """Wikitext that runs the lookup and echoes every variable, 0 when unset."""
    lines = [f"{{{{item stat lookup|type={item_type}|rarity={rarity}|level={level}}}}}"]
    lines += [f"#var:{name}={{{{#var:{name}|0}}}}" for name in TEMPLATE_VARIABLES]
    return "\n".join(lines) + "\n"


def build_form(item_type: str, rarity: str, level: int | str) -> dict[str, Any]:
    return {
        "action"     : "expandtemplates",
        "format"     : "jsonfm",
        "text"       : build_template(item_type, rarity, level),
        "prop"       : "wikitext",
        "wrappedhtml": 1,
    }


# ---------- Fetching ----------
class TemplateFetcher:
    """Posts one template expansion per cell through a shared token bucket."""

    def __init__(self,
                 session: aiohttp.ClientSession,
                 limiter: TokenBucket,
                 max_attempts: int = MAX_ATTEMPTS,
                 timeout: float = REQUEST_TIMEOUT,
                 url: str = WIKI_API):
        self.session = session
        self.limiter = limiter
        self.max_attempts = max_attempts
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.url = url

    async def _post(self, form: dict[str, Any]) -> str:
        await self.limiter.acquire()
        try:
            async with self.session.post(self.url, data=form, headers=HEADERS,
                                         timeout=self.timeout) as resp:
                if resp.status != 200:
                    raise NetworkError(f"HTTP {resp.status} from {self.url}", status=resp.status)
                try:
                    return await resp.text()
                except UnicodeDecodeError as e:
                    raise MalformedResponseError(f"response body is not valid text: {e}") from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise NetworkError(f"{type(e).__name__}: {e}") from e

    async def fetch(self, item_type: str, rarity: str, level: int | str) -> str:
        """Raw response body for one cell; retried, paced only by the limiter."""
        form = build_form(item_type, rarity, level)
        last_error: NetworkError | None = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                body = await self._post(form)
            except NetworkError as e:
                last_error = e
                logger.debug(f"request for {rarity} {item_type} of level {level} failed "
                             f"(attempt {attempt}/{self.max_attempts}): {e}")
                continue
            logger.info(f"pulled {rarity} {item_type} of level {level}")
            return body
        raise FetchExhaustedError(item_type, rarity, level, self.max_attempts, last_error)
