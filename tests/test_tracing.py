"""
Tests for Langfuse tracing integration with SDK v3.

Tests cover:
- Client disabled states (credentials, auth failure)
- Context manager no-ops when disabled
- Full trace lifecycle with mocked Langfuse
"""

from unittest.mock import MagicMock, patch

from callsheet_agent.tracing import (
    Observation,
    TracingClient,
    TracingContext,
    get_tracing_client,
    init_tracing_client,
    shutdown_tracing,
)


def _mock_langfuse():
    """Langfuse instance whose observations come from a context manager."""
    instance = MagicMock()
    context_manager = MagicMock()
    observation = MagicMock()
    context_manager.__enter__ = MagicMock(return_value=observation)
    context_manager.__exit__ = MagicMock(return_value=None)
    instance.start_as_current_observation.return_value = context_manager
    return instance, context_manager, observation


class TestTracingClient:
    """Tests for TracingClient."""

    def test_client_disabled_without_credentials(self):
        """Test client is disabled when credentials not provided."""
        client = TracingClient(public_key="", secret_key="")
        assert client.enabled is False
        assert "credentials not configured" in client.error.lower()

    def test_client_disabled_with_partial_credentials(self):
        """Test client is disabled with only public key."""
        client = TracingClient(public_key="pk-test", secret_key="")
        assert client.enabled is False

    def test_flush_and_shutdown_no_op_when_disabled(self):
        """Test flush and shutdown do nothing when tracing disabled."""
        client = TracingClient()
        client.flush()
        client.shutdown()
        assert client.client is None

    @patch("callsheet_agent.tracing.client.Langfuse")
    def test_client_enabled_with_valid_credentials(self, mock_langfuse_class):
        """Test client is enabled with valid credentials."""
        mock_langfuse_class.return_value = MagicMock()

        client = TracingClient(public_key="pk-test", secret_key="sk-test", host="http://lf:3000")

        assert client.enabled is True
        assert client.error is None
        assert mock_langfuse_class.call_args.kwargs["host"] == "http://lf:3000"

    @patch("callsheet_agent.tracing.client.Langfuse")
    def test_client_disabled_when_auth_fails(self, mock_langfuse_class):
        """Test auth_check() failure disables tracing."""
        mock_langfuse_class.return_value.auth_check.return_value = False

        client = TracingClient(public_key="pk-test", secret_key="sk-test")

        assert client.enabled is False
        assert "auth_check" in client.error

    @patch("callsheet_agent.tracing.client.Langfuse")
    def test_client_disabled_when_constructor_raises(self, mock_langfuse_class):
        mock_langfuse_class.side_effect = RuntimeError("no route to host")

        client = TracingClient(public_key="pk-test", secret_key="sk-test")

        assert client.enabled is False
        assert "no route to host" in client.error

    @patch("callsheet_agent.tracing.client.Langfuse")
    def test_flush_handles_exception(self, mock_langfuse_class):
        """Test flush swallows exporter errors."""
        mock_langfuse_class.return_value.flush.side_effect = RuntimeError("network")

        client = TracingClient(public_key="pk-test", secret_key="sk-test")
        client.flush()

        mock_langfuse_class.return_value.flush.assert_called_once()


class TestTracingSingleton:
    """Tests for the process-wide client."""

    def test_init_and_shutdown(self):
        try:
            client = init_tracing_client()
            assert get_tracing_client() is client
        finally:
            shutdown_tracing()
        assert get_tracing_client() is None


class TestTracingContextDisabled:
    """Tests for TracingContext without a working client."""

    def test_context_disabled_without_client(self):
        ctx = TracingContext(execution_id="exec-1")
        assert ctx.enabled is False

    def test_span_and_generation_are_no_ops(self):
        ctx = TracingContext(execution_id="exec-1")
        ctx.start_trace(name="t", input={"text": "x"})

        with ctx.span(name="tools", input=[]) as span:
            span.set_output({"ok": True})
            span.set_status("error")
        with ctx.generation(name="turn", model="m", input=[]) as gen:
            gen.set_usage(10, 5)

        ctx.end_trace(output="done")
        assert isinstance(span, Observation)

    def test_set_usage_maps_token_counts(self):
        observation = Observation(name="turn", as_type="generation")
        observation.set_usage(prompt_tokens=12, completion_tokens=4)
        assert observation._usage == {"input": 12, "output": 4}

        observation.set_usage()
        assert observation._usage is None


class TestTracingContextWithMockedLangfuse:
    """Full lifecycle with a mocked Langfuse client."""

    @patch("callsheet_agent.tracing.client.Langfuse")
    def test_trace_lifecycle(self, mock_langfuse_class):
        instance, context_manager, root = _mock_langfuse()
        mock_langfuse_class.return_value = instance

        try:
            init_tracing_client(public_key="pk-test", secret_key="sk-test")

            ctx = TracingContext(execution_id="exec-1")
            assert ctx.enabled is True
            ctx.start_trace(name="callsheet_extraction", input={"text": "x"})

            kwargs = instance.start_as_current_observation.call_args.kwargs
            assert kwargs["as_type"] == "span"
            assert kwargs["metadata"]["execution_id"] == "exec-1"

            ctx.end_trace(output={"date": "2025-03-14"}, status="success")
            root.update.assert_called_once()
            context_manager.__exit__.assert_called_once_with(None, None, None)
        finally:
            shutdown_tracing()

    @patch("callsheet_agent.tracing.client.Langfuse")
    def test_generation_records_usage(self, mock_langfuse_class):
        instance, context_manager, observation = _mock_langfuse()
        mock_langfuse_class.return_value = instance

        try:
            init_tracing_client(public_key="pk-test", secret_key="sk-test")
            ctx = TracingContext(execution_id="exec-1")

            with ctx.generation(name="extraction_turn_1", model="m", input=[]) as gen:
                gen.set_output({"content": "{}"})
                gen.set_usage(100, 20)

            kwargs = instance.start_as_current_observation.call_args.kwargs
            assert kwargs["as_type"] == "generation"
            assert kwargs["model"] == "m"
            update = observation.update.call_args.kwargs
            assert update["usage_details"] == {"input": 100, "output": 20}
            assert update["output"] == {"content": "{}"}
            context_manager.__exit__.assert_called_once_with(None, None, None)
        finally:
            shutdown_tracing()

    @patch("callsheet_agent.tracing.client.Langfuse")
    def test_span_start_handles_exception(self, mock_langfuse_class):
        """A failing Langfuse call never breaks the traced code."""
        instance = MagicMock()
        instance.start_as_current_observation.side_effect = RuntimeError("exporter down")
        mock_langfuse_class.return_value = instance

        try:
            init_tracing_client(public_key="pk-test", secret_key="sk-test")
            ctx = TracingContext(execution_id="exec-1")

            with ctx.span(name="tools_turn_1") as span:
                span.set_output("ok")
        finally:
            shutdown_tracing()
