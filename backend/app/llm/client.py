"""Structured-output LLM client with OpenAI integration.

Security: Reads API key from settings/environment only, never hardcoded.
When no key is present an always-unavailable client is returned so callers
exercise their fallback paths instead of failing at import time.
"""

import json
import logging
from typing import Any, Protocol

import openai
from openai import AsyncOpenAI

from backend.app.config import Settings, get_settings
from backend.app.errors import GenerationError

logger = logging.getLogger(__name__)

# Providers only accept object schemas at the top level.
_ARRAY_ENVELOPE_KEY = "items"


class StructuredCompletionClient(Protocol):
    """Protocol for structured completion implementations."""

    async def complete(
        self,
        *,
        system_instruction: str,
        output_schema: dict[str, Any],
        user_payload: str,
    ) -> Any:
        """Run one completion constrained to output_schema.

        Args:
            system_instruction: Role/system prompt
            output_schema: JSON schema the result must satisfy
            user_payload: Serialized task input

        Returns:
            Parsed JSON value matching output_schema

        Raises:
            GenerationError: reason is one of unavailable, malformed_output,
                rejected, timeout
        """
        ...


class UnavailableClient:
    """Client used when no provider is configured. Every call fails."""

    async def complete(
        self,
        *,
        system_instruction: str,
        output_schema: dict[str, Any],
        user_payload: str,
    ) -> Any:
        """Always raise GenerationError("unavailable")."""
        raise GenerationError("unavailable", "AI service is not configured")


def wrap_array_schema(schema: dict[str, Any]) -> dict[str, Any]:
    """Wrap an array schema in an object envelope, hoisting $defs to the root."""
    inner = dict(schema)
    defs = inner.pop("$defs", None)
    envelope: dict[str, Any] = {
        "type": "object",
        "properties": {_ARRAY_ENVELOPE_KEY: inner},
        "required": [_ARRAY_ENVELOPE_KEY],
    }
    if defs:
        envelope["$defs"] = defs
    return envelope


class OpenAIStructuredClient:
    """OpenAI-backed client using json_schema response formats."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        timeout_seconds: float = 60.0,
        client: AsyncOpenAI | None = None,
    ):
        """Initialize OpenAI client.

        Args:
            api_key: OpenAI API key (read from environment)
            model: Model name to use (default: gpt-4o-mini for cost efficiency)
            timeout_seconds: Per-request timeout enforced by the SDK
            client: Pre-built SDK client (tests)
        """
        # Retries are disabled: batching callers own pacing and never retry.
        self.client = client or AsyncOpenAI(
            api_key=api_key, timeout=timeout_seconds, max_retries=0
        )
        self.model = model

    async def complete(
        self,
        *,
        system_instruction: str,
        output_schema: dict[str, Any],
        user_payload: str,
    ) -> Any:
        """Generate a structured result using the OpenAI API."""
        is_array = output_schema.get("type") == "array"
        schema = wrap_array_schema(output_schema) if is_array else output_schema

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_instruction},
                    {"role": "user", "content": user_payload},
                ],
                response_format={
                    "type": "json_schema",
                    "json_schema": {
                        "name": "structured_output",
                        "schema": schema,
                        "strict": False,
                    },
                },
                temperature=0.4,
            )
        except openai.APITimeoutError as e:
            logger.error(f"OpenAI request timed out: {e}")
            raise GenerationError("timeout", "AI request timed out") from e
        except openai.BadRequestError as e:
            logger.error(f"OpenAI rejected the request: {e}")
            raise GenerationError("rejected", "AI provider rejected the request") from e
        except openai.APIError as e:
            logger.error(f"OpenAI API call failed: {e}")
            raise GenerationError("unavailable", "AI service is unavailable") from e

        choice = response.choices[0]
        if choice.finish_reason == "content_filter" or getattr(choice.message, "refusal", None):
            logger.warning("OpenAI refused to produce output")
            raise GenerationError("rejected", "AI provider refused the request")

        content = choice.message.content or ""
        if not content.strip():
            raise GenerationError("malformed_output", "AI returned an empty response")

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            logger.warning(f"OpenAI returned invalid JSON ({len(content)} chars)")
            raise GenerationError("malformed_output", "AI returned invalid JSON") from e

        if not is_array:
            return data

        if not isinstance(data, dict) or not isinstance(data.get(_ARRAY_ENVELOPE_KEY), list):
            raise GenerationError("malformed_output", "AI response did not contain a list")
        return data[_ARRAY_ENVELOPE_KEY]


def get_llm_client(settings: Settings | None = None) -> StructuredCompletionClient:
    """Factory function to get appropriate LLM client based on config.

    Returns:
        OpenAIStructuredClient if API key is configured, UnavailableClient otherwise
    """
    settings = settings or get_settings()
    api_key = settings.openai_api_key

    if api_key and api_key.get_secret_value():
        logger.info(f"Using OpenAI client ({settings.openai_model}) for structured completions")
        return OpenAIStructuredClient(
            api_key=api_key.get_secret_value(),
            model=settings.openai_model,
            timeout_seconds=settings.llm_timeout_seconds,
        )

    logger.warning("No OpenAI API key configured, AI features will report 'unavailable'")
    return UnavailableClient()
