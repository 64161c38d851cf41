"""
OpenAI-SDK provider client for OpenAI-compatible endpoints (OpenRouter).
"""

import logging
from typing import Optional

import openai
from openai import OpenAI

from ..config import config
from ..errors import CredentialsError, ProviderError
from ..messages import ToolCall
from .base import ProviderReply, ProviderRequest

logger = logging.getLogger(__name__)


class OpenAIProviderClient:
    """Chat-completions client with tool calling.

    SDK retries are disabled: a failed call surfaces immediately as
    ProviderError and callers decide whether to retry the whole run.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        resolved_key = api_key or config.provider.api_key
        if not resolved_key:
            raise CredentialsError("Provider API key is not configured")

        self.model = model or config.provider.model
        self.base_url = base_url or config.provider.base_url
        self.timeout = timeout if timeout is not None else config.provider.timeout
        self._client = OpenAI(
            base_url=self.base_url,
            api_key=resolved_key,
            timeout=self.timeout,
            max_retries=0,
            default_headers={
                "HTTP-Referer": config.provider.http_referer,
                "X-Title": config.provider.title,
            },
        )

    def complete(self, request: ProviderRequest) -> ProviderReply:
        """Send one request and normalize the first choice."""
        try:
            response = self._client.chat.completions.create(**request.to_payload())
        except openai.APIStatusError as e:
            detail = _response_text(e)
            raise ProviderError(
                f"Provider error {e.status_code}: {detail}",
                status_code=e.status_code,
                detail=detail,
            ) from e
        except openai.APITimeoutError as e:
            raise ProviderError(f"Provider request timed out after {self.timeout}s") from e
        except openai.APIError as e:
            raise ProviderError(f"Provider request failed: {e}") from e

        return parse_completion(response)

    def close(self) -> None:
        """Close the underlying OpenAI client."""
        try:
            self._client.close()
        except Exception as e:
            logger.debug("Error closing OpenAI client: %s", e)


def parse_completion(response) -> ProviderReply:
    """
    Convert a chat completion into a ProviderReply.

    Raises:
        ProviderError: If the reply has no choice, or a choice with neither
            content nor tool calls.
    """
    choices = getattr(response, "choices", None)
    if not choices:
        raise ProviderError("No response from provider: reply has no choices")

    message = choices[0].message
    if message is None:
        raise ProviderError("No response from provider: choice has no message")

    raw_calls = message.tool_calls or []
    for tc in raw_calls:
        if getattr(tc, "function", None) is None:
            raise ProviderError(
                f"Unsupported tool call type: {getattr(tc, 'type', None)!r} has no function"
            )
    tool_calls = tuple(
        ToolCall(
            id=tc.id,
            function_name=tc.function.name,
            raw_arguments=tc.function.arguments or "{}",
        )
        for tc in raw_calls
    )
    content = message.content
    if not tool_calls and content is None:
        raise ProviderError("Provider reply has neither content nor tool calls")

    usage = getattr(response, "usage", None)
    return ProviderReply(
        content=content,
        tool_calls=tool_calls,
        prompt_tokens=getattr(usage, "prompt_tokens", None) if usage else None,
        completion_tokens=getattr(usage, "completion_tokens", None) if usage else None,
    )


def _response_text(error: "openai.APIStatusError") -> str:
    try:
        return error.response.text
    except Exception:
        return str(error)
