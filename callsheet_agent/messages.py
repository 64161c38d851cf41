"""
Conversation messages and the append-only message log.

The log is an immutable tuple of messages. ``append`` returns a new log,
so a retried turn can never rewrite earlier context.
"""

from dataclasses import dataclass
from typing import Iterator, Literal, Optional

Role = Literal["system", "user", "assistant", "tool"]


@dataclass(frozen=True)
class ToolCall:
    """A function call requested by the model."""

    id: str
    function_name: str
    raw_arguments: str

    def to_wire(self) -> dict:
        return {
            "id": self.id,
            "type": "function",
            "function": {
                "name": self.function_name,
                "arguments": self.raw_arguments,
            },
        }


@dataclass(frozen=True)
class Message:
    """A single chat message."""

    role: Role
    content: str
    tool_calls: tuple[ToolCall, ...] = ()
    tool_call_id: Optional[str] = None
    name: Optional[str] = None

    def to_wire(self) -> dict:
        """Render in OpenAI chat-completions format."""
        data: dict = {"role": self.role, "content": self.content}
        if self.tool_calls:
            data["tool_calls"] = [tc.to_wire() for tc in self.tool_calls]
        if self.tool_call_id is not None:
            data["tool_call_id"] = self.tool_call_id
        if self.name is not None:
            data["name"] = self.name
        return data


def system_message(content: str) -> Message:
    return Message(role="system", content=content)


def user_message(content: str) -> Message:
    return Message(role="user", content=content)


def assistant_message(
    content: str, tool_calls: tuple[ToolCall, ...] = ()
) -> Message:
    return Message(role="assistant", content=content, tool_calls=tuple(tool_calls))


def tool_message(tool_call: ToolCall, content: str) -> Message:
    return Message(
        role="tool",
        content=content,
        tool_call_id=tool_call.id,
        name=tool_call.function_name,
    )


class MessageLog:
    """Ordered, append-only conversation record."""

    __slots__ = ("_messages",)

    def __init__(self, messages: tuple[Message, ...] = ()):
        self._messages = tuple(messages)
        self._check_tool_correlation()

    def append(self, *messages: Message) -> "MessageLog":
        """Return a new log with ``messages`` added at the end."""
        return MessageLog(self._messages + tuple(messages))

    @property
    def messages(self) -> tuple[Message, ...]:
        return self._messages

    def to_wire(self) -> list[dict]:
        return [m.to_wire() for m in self._messages]

    def count(self, role: Role) -> int:
        return sum(1 for m in self._messages if m.role == role)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(self._messages)

    def __getitem__(self, index):
        return self._messages[index]

    def __repr__(self) -> str:
        return f"MessageLog({len(self._messages)} messages)"

    def _check_tool_correlation(self) -> None:
        """Every tool message must answer a call of the preceding assistant turn."""
        pending: set[str] = set()
        for index, message in enumerate(self._messages):
            if message.role == "tool":
                if message.tool_call_id not in pending:
                    raise ValueError(
                        f"Tool message at index {index} has no matching tool call "
                        f"(tool_call_id={message.tool_call_id!r})"
                    )
                pending.discard(message.tool_call_id)
            elif message.role == "assistant":
                pending = {tc.id for tc in message.tool_calls}
            else:
                pending = set()
