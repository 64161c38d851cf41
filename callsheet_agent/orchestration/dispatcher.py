"""
Tool dispatch for the extraction loop.

Tools are resolved by name in a ToolRegistry at call time. Every failure
(unknown name, undecodable arguments, handler exception, timeout) becomes
a ToolExecutionError, which the loop feeds back to the model instead of
aborting the run.
"""

import json
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from typing import Any, Optional

from ..errors import ToolExecutionError
from ..messages import ToolCall
from ..tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

# Cap on error text returned to the model
MAX_ERROR_CHARS = 500


@dataclass(frozen=True)
class ToolOutcome:
    """Result of one tool call, ready to be encoded into a tool message."""

    tool_call: ToolCall
    result: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def encode(self) -> str:
        payload = self.result if self.ok else {"error": self.error}
        return json.dumps(payload, ensure_ascii=False, default=str)


def decode_arguments(tool_name: str, raw_arguments: str) -> dict:
    """Decode a tool call's JSON arguments into a dict."""
    if not raw_arguments or not raw_arguments.strip():
        return {}
    try:
        args = json.loads(raw_arguments)
    except json.JSONDecodeError as e:
        raise ToolExecutionError(
            tool_name, f"Invalid JSON arguments for tool '{tool_name}': {e}"
        ) from e
    if not isinstance(args, dict):
        raise ToolExecutionError(
            tool_name, f"Arguments for tool '{tool_name}' must be a JSON object"
        )
    return args


class ToolDispatcher:
    """
    Resolve and run tools with a per-call timeout.

    Handlers run on a shared thread pool so a hung tool is abandoned after
    ``timeout`` seconds. With ``parallel=True`` the calls of one assistant
    turn run concurrently; outcomes always come back in request order.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        timeout: Optional[float] = None,
        parallel: bool = False,
        max_workers: int = 4,
    ):
        self.registry = registry
        self.timeout = timeout
        self.parallel = parallel
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="tool"
        )

    def dispatch(self, name: str, raw_arguments: str) -> Any:
        """
        Run a single tool.

        Raises:
            ToolExecutionError: If the tool is unknown or fails.
        """
        return self._wait(name, self._submit(name, raw_arguments))

    def dispatch_all(self, tool_calls: tuple[ToolCall, ...]) -> list[ToolOutcome]:
        """Run all calls of one turn and return outcomes in request order."""
        if not self.parallel:
            return [self._outcome(tc, self._submit_safely(tc)) for tc in tool_calls]

        futures = [self._submit_safely(tc) for tc in tool_calls]
        return [self._outcome(tc, f) for tc, f in zip(tool_calls, futures)]

    def close(self) -> None:
        self._executor.shutdown(wait=False)

    def _submit(self, name: str, raw_arguments: str) -> Future:
        tool = self.registry.get(name)
        if tool is None:
            raise ToolExecutionError(name, f"Unknown tool: {name}")
        args = decode_arguments(name, raw_arguments)
        logger.debug("Executing tool '%s' with args=%s", name, args)
        return self._executor.submit(tool.handler, args)

    def _submit_safely(self, tool_call: ToolCall):
        try:
            return self._submit(tool_call.function_name, tool_call.raw_arguments)
        except ToolExecutionError as e:
            return e

    def _wait(self, name: str, future: Future) -> Any:
        try:
            return future.result(timeout=self.timeout)
        except FutureTimeoutError as e:
            future.cancel()
            raise ToolExecutionError(
                name, f"Tool '{name}' timed out after {self.timeout}s"
            ) from e
        except Exception as e:
            logger.exception("Unhandled error in tool '%s'", name)
            raise ToolExecutionError(name, f"Tool '{name}' raised an error: {e}") from e

    def _outcome(self, tool_call: ToolCall, pending) -> ToolOutcome:
        name = tool_call.function_name
        try:
            if isinstance(pending, ToolExecutionError):
                raise pending
            result = self._wait(name, pending)
        except ToolExecutionError as e:
            logger.warning("Tool call %s failed: %s", tool_call.id, e)
            message = str(e)
            if len(message) > MAX_ERROR_CHARS:
                message = message[:MAX_ERROR_CHARS] + "..."
            return ToolOutcome(tool_call=tool_call, error=message)
        return ToolOutcome(tool_call=tool_call, result=result)
