"""
Tool Registry - Single source of truth for tool definitions.

Maps tool names to handlers and their JSON parameter schemas. Handlers
take the decoded argument object and return a JSON-serializable result;
they must hold no per-run state, since one registry is shared by every
concurrent extraction.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional


@dataclass(frozen=True)
class ToolDefinition:
    """Metadata for a tool - defined once, used everywhere."""

    name: str
    description: str
    parameters: dict  # JSON schema of the argument object
    handler: Callable[[dict], Any]

    def declaration(self) -> dict:
        """Render as an OpenAI function-calling tool declaration."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


class ToolRegistry:
    """Registry of callable tools keyed by name."""

    def __init__(self) -> None:
        self._tools: dict[str, ToolDefinition] = {}

    def register(
        self,
        name: str,
        description: str,
        parameters: dict,
        handler: Callable[[dict], Any],
    ) -> ToolDefinition:
        """Register a tool, replacing any previous tool with the same name."""
        tool = ToolDefinition(
            name=name,
            description=description,
            parameters=parameters,
            handler=handler,
        )
        self._tools[name] = tool
        return tool

    def get(self, name: str) -> Optional[ToolDefinition]:
        """Get a tool by name."""
        return self._tools.get(name)

    def all_tools(self) -> dict[str, ToolDefinition]:
        """Get a copy of all registered tools."""
        return self._tools.copy()

    def declarations(self) -> list[dict]:
        """Tool declarations in registration order."""
        return [tool.declaration() for tool in self._tools.values()]

    def get_tools_summary(self) -> str:
        """Get formatted summary of all tools for logs and the CLI."""
        return "\n".join(
            f"- {name}: {tool.description}" for name, tool in self._tools.items()
        )

    def clear(self) -> None:
        """Clear all registered tools (mainly for testing)."""
        self._tools.clear()

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)


# Process-wide registry populated by the built-in tool modules on import.
default_registry = ToolRegistry()
