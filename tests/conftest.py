"""
Pytest configuration and fixtures for call-sheet agent tests.
"""

import json

import pytest

from callsheet_agent.errors import ProviderError
from callsheet_agent.messages import ToolCall
from callsheet_agent.orchestration import ToolDispatcher
from callsheet_agent.providers import ProviderReply
from callsheet_agent.tools import ToolRegistry


VALID_BASIC = {
    "date": "2025-03-14",
    "projectName": "Der Bergdoktor",
    "locations": ["Rustenschacherallee 9, 1020 Wien"],
}


class ScriptedProvider:
    """Provider double that replays a fixed list of replies and records requests."""

    def __init__(self, replies, model="test-model"):
        self.model = model
        self.replies = list(replies)
        self.requests = []

    def complete(self, request):
        self.requests.append(request)
        if not self.replies:
            raise AssertionError("ScriptedProvider ran out of replies")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    @property
    def calls(self) -> int:
        return len(self.requests)


def text_reply(content) -> ProviderReply:
    """A final-answer reply; dicts are encoded as JSON."""
    if not isinstance(content, str):
        content = json.dumps(content)
    return ProviderReply(content=content)


def tool_reply(*calls, content=None) -> ProviderReply:
    """A tool-call reply from (id, name, arguments) tuples."""
    tool_calls = tuple(
        ToolCall(
            id=call_id,
            function_name=name,
            raw_arguments=args if isinstance(args, str) else json.dumps(args),
        )
        for call_id, name, args in calls
    )
    return ProviderReply(content=content, tool_calls=tool_calls)


@pytest.fixture
def registry():
    """Registry with deterministic tools."""
    reg = ToolRegistry()
    reg.register(
        name="address_normalize",
        description="Normalize an address",
        parameters={
            "type": "object",
            "properties": {"raw": {"type": "string"}},
            "required": ["raw"],
        },
        handler=lambda args: {"normalized": args["raw"].strip().upper()},
    )
    reg.register(
        name="explode",
        description="Always fails",
        parameters={"type": "object", "properties": {}},
        handler=_explode,
    )
    return reg


def _explode(args):
    raise RuntimeError("boom")


@pytest.fixture
def dispatcher(registry):
    d = ToolDispatcher(registry, timeout=5)
    yield d
    d.close()


@pytest.fixture
def provider_error():
    return ProviderError("Provider error 503: upstream unavailable", status_code=503)


@pytest.fixture
def make_provider():
    """Factory for ScriptedProvider instances."""
    return ScriptedProvider


@pytest.fixture
def reply():
    """Helpers for building provider replies: reply.text(...), reply.tools(...)."""

    class _Reply:
        text = staticmethod(text_reply)
        tools = staticmethod(tool_reply)

    return _Reply


@pytest.fixture
def valid_basic():
    return dict(VALID_BASIC)
