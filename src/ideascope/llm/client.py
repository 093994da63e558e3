"""
LLM Client - chat completions for premium artifact generation.

Talks to OpenAI or any OpenAI-compatible endpoint in JSON mode. Rate
limits, gateway errors and dropped connections are retried with
exponential backoff; every other failure is mapped onto the LLMError
family so the generation gateway can report it without caching.
"""

import json
import logging
import os
import re
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from typing import Any

import httpx
from pydantic import BaseModel, Field
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from ideascope.core.exceptions import (
    LLMAuthenticationError,
    LLMError,
    LLMParseError,
    LLMRateLimitError,
)

logger = logging.getLogger(__name__)

OPENAI_CHAT_URL = "https://api.openai.com/v1/chat/completions"
RETRYABLE_STATUS_CODES = frozenset({429, 502, 503, 504})

_FENCED_JSON = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)


class LLMProvider(Enum):
    """Where chat completions are sent."""

    OPENAI = "openai"
    CUSTOM = "custom"

    @property
    def api_key_env(self) -> str:
        """Environment variable holding this provider's key."""
        return "OPENAI_API_KEY" if self is LLMProvider.OPENAI else "IS_LLM_API_KEY"


@dataclass
class LLMRequest:
    """One chat completion asking for an artifact payload."""

    prompt: str
    system_prompt: str | None = None
    max_tokens: int = 3000
    temperature: float = 0.7
    json_mode: bool = True

    def messages(self) -> list[dict[str, str]]:
        messages = []
        if self.system_prompt:
            messages.append({"role": "system", "content": self.system_prompt})
        messages.append({"role": "user", "content": self.prompt})
        return messages


@dataclass
class LLMResponse:
    """Completion text plus the metadata worth logging."""

    content: str
    model: str
    provider: LLMProvider
    tokens_used: int | None = None
    finish_reason: str | None = None
    raw_response: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_completion(
        cls, data: dict[str, Any], provider: LLMProvider, model: str
    ) -> "LLMResponse":
        choice = data["choices"][0]
        return cls(
            content=choice["message"]["content"] or "",
            model=data.get("model", model),
            provider=provider,
            tokens_used=(data.get("usage") or {}).get("total_tokens"),
            finish_reason=choice.get("finish_reason"),
            raw_response=data,
        )

    def parse_json(self) -> dict[str, Any] | None:
        """
        Parse the content as a JSON object.

        Content wrapped in a markdown code fence is unwrapped first. Arrays
        and scalars are rejected because every artifact is an object.
        """
        candidates = [self.content]
        match = _FENCED_JSON.search(self.content)
        if match:
            candidates.append(match.group(1))
        for candidate in candidates:
            try:
                parsed = json.loads(candidate)
            except json.JSONDecodeError:
                continue
            return parsed if isinstance(parsed, dict) else None
        return None


class LLMConfig(BaseModel):
    """Connection and retry settings for the LLM client."""

    provider: LLMProvider = LLMProvider.OPENAI
    api_key: str = ""
    base_url: str | None = None
    model: str = "gpt-4o-mini"
    timeout_seconds: float = 120.0
    max_attempts: int = Field(default=3, ge=1)
    backoff_seconds: float = Field(default=1.0, ge=0)

    @property
    def endpoint(self) -> str:
        return self.base_url or OPENAI_CHAT_URL

    @classmethod
    def from_env(cls) -> "LLMConfig":
        """
        Load settings from the environment.

        Environment variables:
        - OPENAI_API_KEY: API key for OpenAI
        - IS_LLM_API_KEY: API key for a custom compatible endpoint
        - IS_LLM_PROVIDER: openai (default) or custom; unknown values mean openai
        - IS_LLM_MODEL: Model name (default: gpt-4o-mini)
        - IS_LLM_BASE_URL: Chat completions URL of a compatible endpoint
        """
        try:
            provider = LLMProvider(os.getenv("IS_LLM_PROVIDER", "openai"))
        except ValueError:
            provider = LLMProvider.OPENAI
        return cls(
            provider=provider,
            api_key=os.getenv(provider.api_key_env, ""),
            base_url=os.getenv("IS_LLM_BASE_URL"),
            model=os.getenv("IS_LLM_MODEL", "gpt-4o-mini"),
        )


def _is_retryable(error: BaseException) -> bool:
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code in RETRYABLE_STATUS_CODES
    return isinstance(error, httpx.TransportError)


def _retry_after(response: httpx.Response) -> int | None:
    value = response.headers.get("retry-after", "")
    return int(value) if value.isdigit() else None


class LLMClient:
    """
    Blocking client for OpenAI-compatible chat completions.

    Example:
        with LLMClient(LLMConfig(api_key="sk-...")) as client:
            payload = client.complete_json(LLMRequest(prompt="..."))
    """

    def __init__(self, config: LLMConfig | None = None):
        self._config = config or LLMConfig.from_env()
        self._client = httpx.Client(timeout=self._config.timeout_seconds)

    @property
    def provider(self) -> LLMProvider:
        return self._config.provider

    @property
    def model(self) -> str:
        return self._config.model

    @property
    def is_configured(self) -> bool:
        """True when an API key is available."""
        return bool(self._config.api_key)

    def complete(self, request: LLMRequest) -> LLMResponse:
        """
        Send one chat completion, retrying transient failures.

        Raises:
            LLMAuthenticationError: If the key is missing or rejected
            LLMRateLimitError: If the provider still throttles after retries
            LLMError: For any other HTTP or transport failure
        """
        provider = self._config.provider
        if not self.is_configured:
            raise LLMAuthenticationError(
                f"API key not configured for {provider.value}. "
                f"Set {provider.api_key_env} environment variable.",
                provider=provider.value,
            )

        try:
            for attempt in self._retrying():
                with attempt:
                    data = self._post(request)
        except httpx.HTTPStatusError as e:
            raise self._error_for(e) from e
        except httpx.HTTPError as e:
            raise LLMError(
                f"HTTP error during LLM request: {e}",
                provider=provider.value,
                model=self._config.model,
            ) from e

        response = LLMResponse.from_completion(data, provider, self._config.model)
        logger.info(
            f"LLM completion from {response.model}",
            extra={
                "event": "llm_completion",
                "model": response.model,
                "tokens_used": response.tokens_used,
                "finish_reason": response.finish_reason,
            },
        )
        return response

    def complete_json(self, request: LLMRequest) -> dict[str, Any]:
        """
        Complete and parse the response as a JSON object.

        Raises:
            LLMParseError: If the content is not a JSON object
        """
        response = self.complete(request)
        parsed = response.parse_json()
        if parsed is None:
            raise LLMParseError(response_preview=response.content)
        return parsed

    def _retrying(self) -> Retrying:
        backoff = self._config.backoff_seconds
        return Retrying(
            stop=stop_after_attempt(self._config.max_attempts),
            wait=wait_exponential(multiplier=backoff, min=2 * backoff, max=60),
            retry=retry_if_exception(_is_retryable),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

    def _post(self, request: LLMRequest) -> dict[str, Any]:
        body: dict[str, Any] = {
            "model": self._config.model,
            "max_completion_tokens": request.max_tokens,
            "temperature": request.temperature,
            "messages": request.messages(),
        }
        if request.json_mode:
            body["response_format"] = {"type": "json_object"}

        response = self._client.post(
            self._config.endpoint,
            headers={
                "Authorization": f"Bearer {self._config.api_key}",
                "content-type": "application/json",
            },
            json=body,
        )
        response.raise_for_status()
        return response.json()

    def _error_for(self, error: httpx.HTTPStatusError) -> LLMError:
        status_code = error.response.status_code
        provider = self._config.provider.value
        if status_code in (401, 403):
            return LLMAuthenticationError(
                f"Authentication failed for {provider}", provider=provider
            )
        if status_code == 429:
            return LLMRateLimitError(
                f"Rate limit exceeded for {provider}",
                provider=provider,
                retry_after=_retry_after(error.response),
            )
        origin = "Server" if status_code >= 500 else "Request"
        return LLMError(
            f"{origin} error from {provider}: {status_code}",
            provider=provider,
            model=self._config.model,
            status_code=status_code,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "LLMClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


@lru_cache(maxsize=1)
def get_default_client() -> LLMClient:
    """Get the default LLM client (cached)."""
    return LLMClient()
