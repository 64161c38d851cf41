"""
Extraction loop: a bounded, tool-calling conversation with the provider.

The loop seeds the message log with a system instruction and the call-sheet
text, then alternates between provider calls and its reaction to each reply:

    SEEDED -> AWAITING_REPLY -> TOOL_DISPATCH -> AWAITING_REPLY
                             -> VALIDATING -> DONE
                                           -> CORRECTION_APPENDED -> AWAITING_REPLY
                             -> EXHAUSTED

Every provider call is one turn; after ``max_turns`` calls without an
accepted answer the run fails with TurnBudgetExhausted. Provider failures
abort immediately. Tool failures and rejected answers are fed back to the
model as messages.
"""

import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from ..config import config
from ..errors import ProviderError, TurnBudgetExhausted
from ..messages import (
    MessageLog,
    assistant_message,
    system_message,
    tool_message,
    user_message,
)
from ..prompts import (
    PARSE_CORRECTION,
    build_schema_correction,
    build_seed_message,
    build_system_instruction,
)
from ..providers.base import ProviderClient, ProviderReply, ProviderRequest
from ..schemas import TargetSchema
from ..tools.registry import ToolRegistry, default_registry
from ..tracing import TracingContext
from .dispatcher import ToolDispatcher
from .validator import Accepted, ParseFailure, accept

logger = logging.getLogger(__name__)


class LoopState(Enum):
    SEEDED = "seeded"
    AWAITING_REPLY = "awaiting_reply"
    TOOL_DISPATCH = "tool_dispatch"
    VALIDATING = "validating"
    CORRECTION_APPENDED = "correction_appended"
    DONE = "done"
    EXHAUSTED = "exhausted"


@dataclass
class RunState:
    """State owned by a single run; discarded when run() returns."""

    log: MessageLog
    turn: int = 0
    state: LoopState = LoopState.SEEDED
    reply: Optional[ProviderReply] = None
    result: Any = None
    last_problem: Optional[str] = None
    tools_used: list[str] = field(default_factory=list)
    transitions: list[LoopState] = field(default_factory=lambda: [LoopState.SEEDED])

    def transition(self, state: LoopState) -> None:
        self.state = state
        self.transitions.append(state)


@dataclass
class ExtractionResult:
    """An accepted, schema-conformant answer."""

    data: Any
    turns: int
    tools_used: list[str] = field(default_factory=list)
    messages: Optional[MessageLog] = None


class ExtractionLoop:
    """
    Drives the tool-calling conversation until the model's answer is accepted.

    The provider, registry and dispatcher may be shared between concurrent
    runs; everything mutable lives in the RunState created by run().
    """

    def __init__(
        self,
        provider: ProviderClient,
        registry: Optional[ToolRegistry] = None,
        dispatcher: Optional[ToolDispatcher] = None,
        model: Optional[str] = None,
        tracing_context: Optional[TracingContext] = None,
        execution_id: Optional[str] = None,
    ):
        self.provider = provider
        self.model = model or provider.model
        self.registry = registry if registry is not None else default_registry
        self._owns_dispatcher = dispatcher is None
        self.dispatcher = dispatcher or ToolDispatcher(
            self.registry,
            timeout=config.tools.timeout,
            parallel=config.tools.parallel,
        )
        self.tracing_context = tracing_context
        self.execution_id = execution_id or f"exec-{uuid.uuid4().hex[:8]}"

    def run(
        self,
        seed_text: str,
        schema: TargetSchema,
        max_turns: Optional[int] = None,
    ) -> ExtractionResult:
        """
        Extract a schema-conformant object from ``seed_text``.

        Args:
            seed_text: Raw call-sheet text.
            schema: Target schema the final answer must satisfy.
            max_turns: Maximum number of provider calls.

        Returns:
            ExtractionResult with the parsed answer.

        Raises:
            ProviderError: The provider failed or returned no usable reply.
            TurnBudgetExhausted: No accepted answer within ``max_turns``.
        """
        max_turns = max_turns if max_turns is not None else config.agent.max_turns
        if max_turns < 1:
            raise ValueError("max_turns must be at least 1")

        run = RunState(
            log=MessageLog().append(
                system_message(build_system_instruction(schema)),
                user_message(build_seed_message(seed_text)),
            )
        )
        tools = self.registry.declarations()

        logger.info(
            "[%s] Starting extraction (schema=%s, max_turns=%d, tools=%d)",
            self.execution_id,
            schema.name,
            max_turns,
            len(tools),
        )

        run.transition(LoopState.AWAITING_REPLY)
        while run.state is not LoopState.DONE:
            if run.state is LoopState.AWAITING_REPLY:
                if run.turn >= max_turns:
                    self._exhaust(run, max_turns)
                run.turn += 1
                run.reply = self._call_provider(run, tools, max_turns)
                if run.reply.has_tool_calls:
                    run.transition(LoopState.TOOL_DISPATCH)
                else:
                    run.transition(LoopState.VALIDATING)

            elif run.state is LoopState.TOOL_DISPATCH:
                self._dispatch_tools(run)
                run.transition(LoopState.AWAITING_REPLY)

            elif run.state is LoopState.VALIDATING:
                self._validate(run, schema, max_turns)

            elif run.state is LoopState.CORRECTION_APPENDED:
                run.transition(LoopState.AWAITING_REPLY)

        logger.info(
            "[%s] Accepted %s answer after %d turn(s)",
            self.execution_id,
            schema.name,
            run.turn,
        )
        return ExtractionResult(
            data=run.result,
            turns=run.turn,
            tools_used=list(dict.fromkeys(run.tools_used)),
            messages=run.log,
        )

    def _call_provider(
        self, run: RunState, tools: list[dict], max_turns: int
    ) -> ProviderReply:
        request = ProviderRequest(
            model=self.model,
            messages=run.log.to_wire(),
            tools=tools,
        )
        logger.debug("[%s] Turn %d/%d: calling provider", self.execution_id, run.turn, max_turns)

        if self.tracing_context is None:
            return self._complete(request, run.turn)

        with self.tracing_context.generation(
            name=f"extraction_turn_{run.turn}",
            model=request.model,
            input=request.messages,
            model_parameters={"temperature": request.temperature},
        ) as gen:
            try:
                reply = self._complete(request, run.turn)
            except ProviderError:
                gen.set_status("error")
                raise
            gen.set_output(
                {
                    "content": reply.content,
                    "tool_calls": [tc.function_name for tc in reply.tool_calls],
                }
            )
            gen.set_usage(reply.prompt_tokens, reply.completion_tokens)
            return reply

    def _complete(self, request: ProviderRequest, turn: int) -> ProviderReply:
        try:
            return self.provider.complete(request)
        except ProviderError as e:
            logger.error("[%s] Provider call failed at turn %d: %s", self.execution_id, turn, e)
            raise

    def _dispatch_tools(self, run: RunState) -> None:
        reply = run.reply
        ids = [tc.id for tc in reply.tool_calls]
        if not all(ids) or len(set(ids)) != len(ids):
            raise ProviderError(f"Malformed reply: tool call ids must be unique and non-empty, got {ids}")
        logger.info(
            "[%s] Model requested %d tool call(s): %s",
            self.execution_id,
            len(reply.tool_calls),
            ", ".join(tc.function_name for tc in reply.tool_calls),
        )

        if self.tracing_context is None:
            outcomes = self.dispatcher.dispatch_all(reply.tool_calls)
        else:
            with self.tracing_context.span(
                name=f"tools_turn_{run.turn}",
                input=[tc.to_wire() for tc in reply.tool_calls],
            ) as span:
                outcomes = self.dispatcher.dispatch_all(reply.tool_calls)
                span.set_output([o.encode()[:500] for o in outcomes])
                if not all(o.ok for o in outcomes):
                    span.set_status("error")

        run.log = run.log.append(
            assistant_message(reply.content or "", reply.tool_calls),
            *(tool_message(o.tool_call, o.encode()) for o in outcomes),
        )
        run.tools_used.extend(tc.function_name for tc in reply.tool_calls)

    def _validate(self, run: RunState, schema: TargetSchema, max_turns: int) -> None:
        content = run.reply.content
        if not content or not content.strip():
            raise ProviderError("Empty response from model")

        outcome = accept(content, schema)
        if isinstance(outcome, Accepted):
            run.result = outcome.data
            run.transition(LoopState.DONE)
            return

        run.log = run.log.append(assistant_message(content))
        if isinstance(outcome, ParseFailure):
            logger.warning("[%s] Turn %d: answer is not valid JSON: %s", self.execution_id, run.turn, outcome.error)
            run.last_problem = f"invalid JSON: {outcome.error}"
            correction = PARSE_CORRECTION
        else:
            logger.warning("[%s] Turn %d: answer does not match schema: %s", self.execution_id, run.turn, outcome.summary)
            run.last_problem = outcome.summary
            correction = build_schema_correction(schema, outcome.problems)

        # Nobody would read a correction after the last allowed turn
        if run.turn >= max_turns:
            self._exhaust(run, max_turns)

        run.log = run.log.append(user_message(correction))
        run.transition(LoopState.CORRECTION_APPENDED)

    def _exhaust(self, run: RunState, max_turns: int) -> None:
        run.transition(LoopState.EXHAUSTED)
        logger.error(
            "[%s] Turn budget of %d exhausted without a valid answer",
            self.execution_id,
            max_turns,
        )
        raise TurnBudgetExhausted(max_turns, run.last_problem)

    def close(self) -> None:
        if self._owns_dispatcher:
            self.dispatcher.close()
