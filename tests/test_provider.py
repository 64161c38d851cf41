"""
Tests for the OpenAI-SDK provider client.
"""

from types import SimpleNamespace
from unittest.mock import patch

import httpx
import openai
import pytest

from callsheet_agent.errors import CredentialsError, ProviderError
from callsheet_agent.providers import OpenAIProviderClient, ProviderRequest, parse_completion

URL = "https://openrouter.ai/api/v1/chat/completions"


def _completion(content=None, tool_calls=None, usage=None):
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)], usage=usage)


def _tool_call(call_id, name, arguments):
    return SimpleNamespace(id=call_id, function=SimpleNamespace(name=name, arguments=arguments))


def _request():
    return ProviderRequest(
        model="test-model",
        messages=[{"role": "user", "content": "hi"}],
        tools=[{"type": "function", "function": {"name": "t", "parameters": {}}}],
    )


class TestParseCompletion:
    """Tests for normalizing SDK responses."""

    def test_content_reply(self):
        reply = parse_completion(
            _completion(content='{"a": 1}', usage=SimpleNamespace(prompt_tokens=10, completion_tokens=3))
        )

        assert reply.content == '{"a": 1}'
        assert not reply.has_tool_calls
        assert reply.prompt_tokens == 10
        assert reply.completion_tokens == 3

    def test_tool_call_reply(self):
        reply = parse_completion(
            _completion(
                tool_calls=[
                    _tool_call("c1", "address_normalize", '{"raw": "x"}'),
                    _tool_call("c2", "geocode_address", None),
                ]
            )
        )

        assert reply.has_tool_calls
        assert [tc.id for tc in reply.tool_calls] == ["c1", "c2"]
        assert reply.tool_calls[0].function_name == "address_normalize"
        assert reply.tool_calls[1].raw_arguments == "{}"

    def test_no_choices(self):
        with pytest.raises(ProviderError, match="no choices"):
            parse_completion(SimpleNamespace(choices=[], usage=None))

    def test_neither_content_nor_tools(self):
        with pytest.raises(ProviderError, match="neither content nor tool calls"):
            parse_completion(_completion())

    def test_tool_call_without_function(self):
        """Custom tool calls carry no function and are rejected."""
        custom = SimpleNamespace(id="c1", type="custom", function=None)

        with pytest.raises(ProviderError, match="Unsupported tool call type"):
            parse_completion(_completion(tool_calls=[custom]))

    def test_empty_string_content_passes_through(self):
        """Empty content is left for the loop to reject."""
        assert parse_completion(_completion(content="")).content == ""


class TestOpenAIProviderClient:
    """Tests for OpenAIProviderClient with the SDK mocked."""

    def test_requires_api_key(self):
        with patch("callsheet_agent.providers.openai_client.config") as mock_config:
            mock_config.provider.api_key = ""
            with pytest.raises(CredentialsError):
                OpenAIProviderClient()

    @patch("callsheet_agent.providers.openai_client.OpenAI")
    def test_client_configuration(self, mock_openai):
        client = OpenAIProviderClient(api_key="sk-test", model="m", base_url="http://x", timeout=5)

        kwargs = mock_openai.call_args.kwargs
        assert kwargs["api_key"] == "sk-test"
        assert kwargs["base_url"] == "http://x"
        assert kwargs["timeout"] == 5
        assert kwargs["max_retries"] == 0
        assert "HTTP-Referer" in kwargs["default_headers"]
        assert client.model == "m"

    @patch("callsheet_agent.providers.openai_client.OpenAI")
    def test_complete_sends_payload(self, mock_openai):
        create = mock_openai.return_value.chat.completions.create
        create.return_value = _completion(content="{}")

        reply = OpenAIProviderClient(api_key="sk-test").complete(_request())

        assert reply.content == "{}"
        kwargs = create.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["temperature"] == 0
        assert kwargs["tool_choice"] == "auto"
        assert kwargs["tools"][0]["function"]["name"] == "t"

    @patch("callsheet_agent.providers.openai_client.OpenAI")
    def test_status_error(self, mock_openai):
        request = httpx.Request("POST", URL)
        response = httpx.Response(429, request=request, text="rate limited")
        mock_openai.return_value.chat.completions.create.side_effect = openai.RateLimitError(
            "rate limited", response=response, body=None
        )

        with pytest.raises(ProviderError) as exc_info:
            OpenAIProviderClient(api_key="sk-test").complete(_request())

        assert exc_info.value.status_code == 429
        assert exc_info.value.detail == "rate limited"

    @patch("callsheet_agent.providers.openai_client.OpenAI")
    def test_timeout(self, mock_openai):
        mock_openai.return_value.chat.completions.create.side_effect = openai.APITimeoutError(
            request=httpx.Request("POST", URL)
        )

        with pytest.raises(ProviderError, match="timed out"):
            OpenAIProviderClient(api_key="sk-test", timeout=3).complete(_request())

    @patch("callsheet_agent.providers.openai_client.OpenAI")
    def test_connection_error(self, mock_openai):
        mock_openai.return_value.chat.completions.create.side_effect = openai.APIConnectionError(
            request=httpx.Request("POST", URL)
        )

        with pytest.raises(ProviderError, match="request failed"):
            OpenAIProviderClient(api_key="sk-test").complete(_request())

    def test_tools_omitted_when_empty(self):
        request = ProviderRequest(model="m", messages=[], tools=[])
        payload = request.to_payload()

        assert "tools" not in payload
        assert "tool_choice" not in payload
