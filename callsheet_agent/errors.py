"""
Exception types for the extraction agent.

Only ProviderError and TurnBudgetExhausted escape ExtractionLoop.run();
ToolExecutionError is absorbed into the conversation as a tool message.
"""

from typing import Optional


class AgentError(Exception):
    """Base class for all agent errors."""


class ProviderError(AgentError):
    """The completion service failed or returned an unusable reply."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        detail: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class ToolExecutionError(AgentError):
    """A requested tool is unknown, got bad arguments, or failed."""

    def __init__(self, tool_name: str, message: str):
        super().__init__(message)
        self.tool_name = tool_name


class TurnBudgetExhausted(AgentError):
    """No acceptable answer was produced within the allowed turns."""

    def __init__(self, turns: int, last_problem: Optional[str] = None):
        message = f"Agent exceeded {turns} turns without producing valid output"
        if last_problem:
            message = f"{message} (last problem: {last_problem})"
        super().__init__(message)
        self.turns = turns
        self.last_problem = last_problem


class SchemaConfigError(AgentError):
    """A target schema definition is invalid or cannot be found."""


class CredentialsError(AgentError):
    """No provider API key was supplied or configured."""
