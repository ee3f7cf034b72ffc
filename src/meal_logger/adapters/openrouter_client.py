"""OpenRouter chat completions client with structured outputs."""

import json
import logging
from dataclasses import dataclass

import httpx
import openai
from openai import AsyncOpenAI
from pydantic import BaseModel, Field, ValidationError

from meal_logger.domain.completions import Completion, OutputSchema, T, TokenUsage
from meal_logger.services.completion import (
    ApiError,
    AuthenticationError,
    BadRequestError,
    ConfigurationError,
    NetworkError,
    RateLimitError,
    ResponseParsingError,
    StructuredCompletionClient,
    UpstreamServerError,
)

HTTP_BAD_REQUEST = 400
HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403
HTTP_UNPROCESSABLE = 422
HTTP_TOO_MANY_REQUESTS = 429
HTTP_SERVER_ERROR = 500

_logger = logging.getLogger(__name__)


class _Message(BaseModel):
    content: str


class _Choice(BaseModel):
    message: _Message


class _Usage(BaseModel):
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


class _ChatCompletionEnvelope(BaseModel):
    choices: list[_Choice] = Field(min_length=1)
    model: str
    usage: _Usage


@dataclass
class OpenRouterCompletionClient(StructuredCompletionClient):
    """Structured completion client backed by the OpenAI SDK and OpenRouter."""

    client: AsyncOpenAI
    model: str
    timeout_seconds: float

    @classmethod
    def create(
        cls,
        api_key: str,
        *,
        base_url: str,
        model: str,
        timeout_seconds: float,
        http_client: httpx.AsyncClient | None = None,
    ) -> "OpenRouterCompletionClient":
        """Create a client, failing fast when the API key is missing."""
        if not api_key or not api_key.strip():
            raise ConfigurationError("OpenRouter API key is not configured")
        client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout_seconds,
            max_retries=0,
            http_client=http_client,
        )
        return cls(client=client, model=model, timeout_seconds=timeout_seconds)

    async def complete(  # noqa: PLR0913
        self,
        *,
        prompt: str,
        schema: OutputSchema[T],
        system_prompt: str | None = None,
        max_tokens: int = 2048,
        temperature: float = 0.7,
    ) -> Completion[T]:
        """Send one chat completion request and validate its JSON content."""
        if not prompt or not prompt.strip():
            raise BadRequestError(
                "Prompt must be a non-empty string", status_code=HTTP_BAD_REQUEST
            )
        messages: list[dict[str, str]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        try:
            raw = await self.client.chat.completions.with_raw_response.create(
                model=self.model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
                response_format={
                    "type": "json_schema",
                    "json_schema": {
                        "name": schema.name,
                        "strict": True,
                        "schema": schema.json_schema,
                    },
                },
            )
        except openai.APITimeoutError as exc:
            raise NetworkError(
                f"Request timed out after {self.timeout_seconds:g}s"
            ) from exc
        except openai.APIConnectionError as exc:
            raise NetworkError(f"Could not reach completion API: {exc}") from exc
        except openai.APIStatusError as exc:
            raise _status_error(exc) from exc

        completion = _parse_response(raw.http_response, schema)
        _logger.info(
            "Completion %s: model=%s prompt_tokens=%s completion_tokens=%s",
            schema.name,
            completion.model,
            completion.usage.prompt_tokens,
            completion.usage.completion_tokens,
        )
        return completion

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()


def _status_error(exc: openai.APIStatusError) -> ApiError:
    """Map an SDK status error onto the completion failure taxonomy."""
    status_code = exc.status_code
    if status_code in {HTTP_UNAUTHORIZED, HTTP_FORBIDDEN}:
        return AuthenticationError(
            f"API authentication failed: {exc.message}", status_code
        )
    if status_code in {HTTP_BAD_REQUEST, HTTP_UNPROCESSABLE}:
        return BadRequestError(f"Bad request: {exc.message}", status_code)
    if status_code == HTTP_TOO_MANY_REQUESTS:
        return RateLimitError(f"Rate limited: {exc.message}", status_code)
    if status_code >= HTTP_SERVER_ERROR:
        return UpstreamServerError(
            f"Completion API server error ({status_code}): {exc.message}",
            status_code,
        )
    return ApiError(f"API request failed ({status_code}): {exc.message}", status_code)


def _parse_response(response: httpx.Response, schema: OutputSchema[T]) -> Completion[T]:
    """Validate the response envelope and the structured content inside it."""
    try:
        envelope = _ChatCompletionEnvelope.model_validate_json(response.content)
    except ValidationError as exc:
        raise ResponseParsingError(
            "Invalid response structure from completion API"
        ) from exc

    try:
        content = json.loads(envelope.choices[0].message.content)
    except json.JSONDecodeError as exc:
        raise ResponseParsingError("Failed to parse response content as JSON") from exc

    try:
        validated = schema.model.model_validate(content)
    except ValidationError as exc:
        raise ResponseParsingError(
            f"Response content does not match the {schema.name} schema"
        ) from exc

    return Completion(
        content=validated,
        model=envelope.model,
        usage=TokenUsage(
            prompt_tokens=envelope.usage.prompt_tokens,
            completion_tokens=envelope.usage.completion_tokens,
            total_tokens=envelope.usage.total_tokens,
        ),
    )
