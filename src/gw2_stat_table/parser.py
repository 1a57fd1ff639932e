# src/gw2_stat_table/parser.py
"""
Pull the ``#var:name=value`` lines out of an expandtemplates response.

The answer is nested: an outer JSON envelope whose ``html`` field holds the
pretty-printed (``jsonfm``) API result, itself JSON, whose
``expandtemplates.wikitext`` field holds the expanded lines.
"""
from __future__ import annotations

import html
import json
import re

from gw2_stat_table.errors import MalformedResponseError

VAR_RE = re.compile(r"#var:(.+?)=([^\n]+)")
BLOCK_RE = re.compile(r"\{[\s\S]+\}")
WORD_RE = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|\d+")


def camel_case(name: str) -> str:
    """`major attribute` → `majorAttribute`, `rarity_std` → `rarityStd`."""
    words = WORD_RE.findall(name)
    if not words:
        return ""
    return words[0].lower() + "".join(w.capitalize() for w in words[1:])


def parse_wikitext(text: str) -> dict[str, str]:
    """Map every assigned variable to its value; unassigned names are absent."""
    out: dict[str, str] = {}
    for m in VAR_RE.finditer(text):
        key = camel_case(m.group(1).strip())
        if key:
            out[key] = m.group(2).strip()
    return out


def _inner_json(fragment: str) -> dict:
    match = BLOCK_RE.search(fragment)
    if match is None:
        raise MalformedResponseError("no JSON block inside the html field")
    block = match.group(0)
    try:
        return json.loads(block)
    except ValueError:
        pass
    # jsonfm escapes the pretty-printed result as HTML
    try:
        return json.loads(html.unescape(block))
    except ValueError as e:
        raise MalformedResponseError(f"embedded JSON does not parse: {e}") from e


def extract_wikitext(payload: str) -> str:
    try:
        outer = json.loads(payload)
    except ValueError as e:
        raise MalformedResponseError(f"response is not JSON: {e}") from e
    if not isinstance(outer, dict) or not isinstance(outer.get("html"), str):
        raise MalformedResponseError("response has no html field")

    inner = _inner_json(outer["html"])
    try:
        text = inner["expandtemplates"]["wikitext"]
    except (KeyError, TypeError) as e:
        raise MalformedResponseError("embedded JSON has no expandtemplates.wikitext") from e
    if not isinstance(text, str):
        raise MalformedResponseError("expandtemplates.wikitext is not a string")
    return text


def parse_response(payload: str) -> dict[str, str]:
    return parse_wikitext(extract_wikitext(payload))
