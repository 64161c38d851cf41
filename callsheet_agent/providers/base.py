"""
Provider client contract consumed by the extraction loop.
"""

from dataclasses import dataclass
from typing import Literal, Optional, Protocol

from ..messages import ToolCall


@dataclass(frozen=True)
class ProviderRequest:
    """One chat-completions request."""

    model: str
    messages: list[dict]
    tools: list[dict]
    tool_choice: Literal["auto"] = "auto"
    temperature: float = 0

    def to_payload(self) -> dict:
        payload: dict = {
            "model": self.model,
            "messages": self.messages,
            "temperature": self.temperature,
        }
        # Some providers reject tool_choice without tools
        if self.tools:
            payload["tools"] = self.tools
            payload["tool_choice"] = self.tool_choice
        return payload


@dataclass(frozen=True)
class ProviderReply:
    """The first choice of a completion: final content and/or tool calls."""

    content: Optional[str] = None
    tool_calls: tuple[ToolCall, ...] = ()
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)


class ProviderClient(Protocol):
    """Sends a request to the completion service.

    Implementations raise ProviderError for transport failures, error
    statuses and replies without a usable choice. They never retry.
    """

    model: str

    def complete(self, request: ProviderRequest) -> ProviderReply: ...
