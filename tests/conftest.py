"""Shared fakes for the wiki, its HTTP session and the template fetcher."""

from __future__ import annotations

import json

import pytest


def make_wikitext(variables: dict[str, str]) -> str:
    lines = ["<span>expanded lookup</span>"]
    lines += [f"#var:{name}={value}" for name, value in variables.items()]
    return "\n".join(lines) + "\n"


def make_payload(variables: dict[str, str]) -> str:
    """Body shaped like an expandtemplates reply with format=jsonfm&wrappedhtml=1."""
    inner = json.dumps({"expandtemplates": {"wikitext": make_wikitext(variables)}}, indent=4)
    return json.dumps({
        "status": 200,
        "title": "MediaWiki API result",
        "html": f'<div class="api-pretty-header">This is the HTML representation</div>'
                f'<pre class="api-pretty-content">{inner}</pre>',
    })


class FakeFetcher:
    """Stands in for TemplateFetcher; `respond` returns a payload or an exception."""

    def __init__(self, respond):
        self.respond = respond
        self.calls: list[tuple[str, str, str]] = []

    async def fetch(self, item_type, rarity, level):
        self.calls.append((item_type, rarity, str(level)))
        result = self.respond(item_type, rarity, str(level))
        if isinstance(result, BaseException):
            raise result
        return result


class FakeResponse:
    def __init__(self, status: int, body: str):
        self.status = status
        self.body = body

    async def text(self) -> str:
        if isinstance(self.body, BaseException):
            raise self.body
        return self.body

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class FakeSession:
    """Replays `outcomes` in order, repeating the last one once exhausted."""

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls: list[dict] = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    def post(self, url, data=None, headers=None, timeout=None):
        self.calls.append(data)
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return FakeResponse(*outcome)


@pytest.fixture
def payload_factory():
    return make_payload


@pytest.fixture
def fake_fetcher():
    return FakeFetcher


@pytest.fixture
def fake_session():
    return FakeSession
