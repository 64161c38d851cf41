"""
Run-scoped tracing context.

One TracingContext covers one extraction run: a root span for the run,
a generation per provider call and a span per tool call. Children are
linked to the root through an explicit Langfuse ``TraceContext``.
"""

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Generator, Literal, Optional

from langfuse.types import TraceContext

from .client import get_tracing_client

logger = logging.getLogger(__name__)


@dataclass
class Observation:
    """A span or generation. Every method is a no-op while disabled."""

    name: str
    as_type: Literal["span", "generation"] = "span"
    enabled: bool = False
    start_kwargs: dict = field(default_factory=dict)
    trace_context: Optional[TraceContext] = None
    _context_manager: Any = field(default=None, repr=False)
    _observation: Any = field(default=None, repr=False)
    _start_time: float = field(default=0.0, repr=False)
    _output: Any = field(default=None, repr=False)
    _usage: Optional[dict] = field(default=None, repr=False)
    _status: str = field(default="success", repr=False)

    def start(self) -> None:
        if not self.enabled:
            return
        client = get_tracing_client()
        if not client or not client.client:
            return
        try:
            self._start_time = time.time()
            kwargs = {k: v for k, v in self.start_kwargs.items() if v is not None}
            self._context_manager = client.client.start_as_current_observation(
                trace_context=self.trace_context,
                as_type=self.as_type,
                name=self.name,
                **kwargs,
            )
            self._observation = self._context_manager.__enter__()
        except Exception as e:
            logger.warning("Failed to start %s '%s': %s", self.as_type, self.name, e)
            self._observation = None

    def end(self) -> None:
        if not self.enabled or self._observation is None:
            return
        try:
            update: dict[str, Any] = {
                "metadata": {
                    "status": self._status,
                    "duration_ms": round((time.time() - self._start_time) * 1000, 2),
                }
            }
            if self._output is not None:
                update["output"] = self._output
            if self._usage:
                update["usage_details"] = self._usage
            self._observation.update(**update)
            self._context_manager.__exit__(None, None, None)
        except Exception as e:
            logger.warning("Failed to end %s '%s': %s", self.as_type, self.name, e)

    def set_output(self, output: Any) -> None:
        self._output = output

    def set_status(self, status: str) -> None:
        self._status = status

    def set_usage(
        self,
        prompt_tokens: Optional[int] = None,
        completion_tokens: Optional[int] = None,
    ) -> None:
        usage = {}
        if prompt_tokens is not None:
            usage["input"] = prompt_tokens
        if completion_tokens is not None:
            usage["output"] = completion_tokens
        self._usage = usage or None


@dataclass
class TracingContext:
    """Tracing for a single extraction run."""

    execution_id: str
    _context_manager: Any = field(default=None, repr=False)
    _root: Any = field(default=None, repr=False)
    _enabled: bool = field(default=False, repr=False)
    _start_time: float = field(default_factory=time.time, repr=False)
    _trace_id: Optional[str] = field(default=None, repr=False)
    _root_span_id: Optional[str] = field(default=None, repr=False)

    def __post_init__(self):
        client = get_tracing_client()
        self._enabled = client is not None and client.enabled

    @property
    def enabled(self) -> bool:
        return self._enabled

    def start_trace(
        self,
        name: str = "extraction",
        input: Optional[Any] = None,
        metadata: Optional[dict] = None,
    ) -> None:
        """Open the root span for this run."""
        client = get_tracing_client()
        if not self._enabled or not client or not client.client:
            return
        try:
            self._context_manager = client.client.start_as_current_observation(
                as_type="span",
                name=name,
                input=input,
                metadata={"execution_id": self.execution_id, **(metadata or {})},
            )
            self._root = self._context_manager.__enter__()
            self._trace_id = getattr(self._root, "trace_id", None)
            self._root_span_id = getattr(self._root, "id", None)
            self._start_time = time.time()
        except Exception as e:
            logger.warning("[%s] Failed to start trace: %s", self.execution_id, e)
            self._root = None

    def end_trace(
        self,
        output: Optional[Any] = None,
        status: str = "success",
        metadata: Optional[dict] = None,
    ) -> None:
        """Close the root span."""
        if not self._enabled or self._root is None:
            return
        try:
            self._root.update(
                output=output,
                metadata={
                    "status": status,
                    "duration_ms": round((time.time() - self._start_time) * 1000, 2),
                    **(metadata or {}),
                },
            )
            self._context_manager.__exit__(None, None, None)
        except Exception as e:
            logger.warning("[%s] Failed to end trace: %s", self.execution_id, e)

    def _child_context(self) -> Optional[TraceContext]:
        if not self._trace_id or not self._root_span_id:
            return None
        return TraceContext(trace_id=self._trace_id, parent_span_id=self._root_span_id)

    @contextmanager
    def _observe(self, observation: Observation) -> Generator[Observation, None, None]:
        try:
            observation.start()
            yield observation
        finally:
            observation.end()

    def span(
        self,
        name: str,
        input: Optional[Any] = None,
        metadata: Optional[dict] = None,
    ):
        """Context manager for a tool execution span."""
        return self._observe(
            Observation(
                name=name,
                as_type="span",
                enabled=self._enabled,
                start_kwargs={"input": input, "metadata": metadata},
                trace_context=self._child_context(),
            )
        )

    def generation(
        self,
        name: str,
        model: str,
        input: Optional[Any] = None,
        model_parameters: Optional[dict] = None,
    ):
        """Context manager for a provider call."""
        return self._observe(
            Observation(
                name=name,
                as_type="generation",
                enabled=self._enabled,
                start_kwargs={
                    "model": model,
                    "input": input,
                    "model_parameters": model_parameters,
                },
                trace_context=self._child_context(),
            )
        )
