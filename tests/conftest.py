"""Pytest configuration and shared fixtures for the test suite."""

import asyncio
import copy
from pathlib import Path

import pytest

from hybridchat.llm.base import LLMResponse, ToolCall
from hybridchat.service.documents import DocumentCatalog, DocumentStore, load_catalog
from hybridchat.service.gateway import RetrievalGateway
from hybridchat.service.orchestrator import Orchestrator
from hybridchat.service.state import VoiceUsage

# A small corpus: one resident document, three searchable ones
CORPUS = {
    "a.txt": "the quick brown fox",
    "b.txt": "slow turtle\nfox eats turtle\nend",
    "rates.txt": (
        "Power rates\n"
        "The block price is 2.5 cents/kWh.\n"
        "Rates rise with inflation.\n"
        "Rates are reviewed yearly.\n"
    ),
    "history.txt": "A long history of the agreement.\nSigned in 1969.\n",
}
RESIDENT = ["a.txt"]
SEARCHABLE = ["b.txt", "rates.txt", "history.txt"]


@pytest.fixture
def content_dir(tmp_path) -> Path:
    """Write the test corpus to a temporary content directory.

    Returns:
        Path to the directory
    """
    for name, text in CORPUS.items():
        (tmp_path / name).write_text(text, encoding="utf-8")
    return tmp_path


@pytest.fixture
def catalog(content_dir) -> DocumentCatalog:
    """Catalog over the temporary corpus."""
    return DocumentCatalog(resident=list(RESIDENT), searchable=list(SEARCHABLE), base_directory=content_dir)


@pytest.fixture
def store(catalog) -> DocumentStore:
    """Document store loaded from the temporary corpus."""
    loop = asyncio.new_event_loop()
    try:
        loaded, _ = loop.run_until_complete(load_catalog(catalog))
    finally:
        loop.close()
    return loaded


@pytest.fixture
def gateway(store) -> RetrievalGateway:
    """Gateway over the searchable partition of the test corpus."""
    return RetrievalGateway(store, SEARCHABLE)


class FakeLLM:
    """Scripted LLM service that records every request it receives."""

    def __init__(self, responses=None, default=None, model="fake-model"):
        self.model = model
        self.responses = list(responses or [])
        self.default = default
        self.calls = []

    async def generate(self, system, messages, tools=None, max_tokens=4096):
        self.calls.append(
            {
                "system": system,
                "messages": copy.deepcopy(messages),
                "tools": tools,
                "max_tokens": max_tokens,
            }
        )
        if self.responses:
            return self.responses.pop(0)
        if self.default is not None:
            return self.default
        return LLMResponse(text="Done.")


def tool_request(name: str, arguments: dict | None = None, call_id: str = "call_1", text: str = "") -> LLMResponse:
    """Build an LLM response that asks for one tool call."""
    return LLMResponse(text=text, tool_calls=[ToolCall(id=call_id, name=name, arguments=arguments or {})])


@pytest.fixture
def fake_llm():
    """Factory fixture creating scripted fake LLM services."""

    def _create(*responses, default=None):
        return FakeLLM(responses=responses, default=default)

    return _create


@pytest.fixture
def make_orchestrator(store, gateway):
    """Factory fixture building an orchestrator around a fake LLM."""

    def _create(llm, max_tool_rounds=3):
        return Orchestrator(llm, store, gateway, RESIDENT, max_tool_rounds=max_tool_rounds)

    return _create


@pytest.fixture
def usage() -> VoiceUsage:
    """Fresh voice usage counter with the default budget."""
    return VoiceUsage(monthly_limit=100_000)
