"""LLM client for UX audits."""

import logging
import os
import time
from typing import Any, Dict, List, Optional

import anthropic
import httpx
import openai

from uxaudit.config import Config
from uxaudit.constants import MAX_AUDIT_COMPLETION_TOKENS, RETRYABLE_STATUS_CODES
from uxaudit.exceptions import (
    ModelCallError,
    ModelFatalError,
    ModelQuotaExceededError,
    ModelRetryableError,
)
from uxaudit.logging_config import format_event

logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS = ("openai", "anthropic")

# Provider messages that mean the account is out of quota or credit
QUOTA_MESSAGES = (
    "insufficient_quota",
    "exceeded your current quota",
    "quota exceeded",
    "credit balance is too low",
)

TRANSIENT_MESSAGES = ("timeout", "timed out", "network")

# OpenAI-compatible hosts known to reject image parts
TEXT_ONLY_HOSTS = ("groq",)


def _error_code(error: BaseException) -> Optional[str]:
    code = getattr(error, "code", None)
    if code:
        return str(code)
    body = getattr(error, "body", None)
    if isinstance(body, dict):
        inner = body.get("error") if isinstance(body.get("error"), dict) else body
        if inner.get("code"):
            return str(inner["code"])
        if inner.get("type"):
            return str(inner["type"])
    return None


def _status_code(error: BaseException) -> Optional[int]:
    status = getattr(error, "status_code", None)
    return status if isinstance(status, int) else None


def is_quota_exhausted(error: BaseException) -> bool:
    """Whether a provider error means no further calls can succeed.

    A plain 429 rate limit is not quota exhaustion; it is retried.

    Args:
        error: Exception raised by a provider SDK

    Returns:
        True for insufficient quota or exhausted credit
    """
    if isinstance(error, ModelQuotaExceededError):
        return True
    if _error_code(error) == "insufficient_quota":
        return True
    message = str(error).lower()
    return any(marker in message for marker in QUOTA_MESSAGES)


def classify_error(error: BaseException) -> ModelCallError:
    """Translate a provider SDK error into a typed model-call failure.

    Args:
        error: Exception raised while calling the provider

    Returns:
        ModelQuotaExceededError, ModelRetryableError or ModelFatalError
    """
    if isinstance(error, ModelCallError):
        return error

    message = str(error) or type(error).__name__
    if is_quota_exhausted(error):
        return ModelQuotaExceededError(message)

    if isinstance(error, (
        openai.APIConnectionError,
        anthropic.APIConnectionError,
        httpx.TimeoutException,
        httpx.NetworkError,
    )):
        return ModelRetryableError(message)

    status = _status_code(error)
    if status is not None:
        if status in RETRYABLE_STATUS_CODES or status >= 500:
            return ModelRetryableError(message)
        return ModelFatalError(message)

    if any(marker in message.lower() for marker in TRANSIENT_MESSAGES):
        return ModelRetryableError(message)

    return ModelFatalError(message)


def _to_anthropic_image(url: str) -> Dict[str, Any]:
    if url.startswith("data:") and ";base64," in url:
        header, data = url.split(",", 1)
        media_type = header[len("data:"):].split(";", 1)[0] or "image/png"
        return {
            "type": "image",
            "source": {"type": "base64", "media_type": media_type, "data": data},
        }
    return {"type": "image", "source": {"type": "url", "url": url}}


def to_anthropic_messages(messages: List[Dict[str, Any]]) -> tuple[str, List[Dict[str, Any]]]:
    """Split OpenAI-style chat messages into an Anthropic system prompt and messages."""
    system_parts = []
    converted = []

    for message in messages:
        content = message.get("content")
        if message.get("role") == "system":
            system_parts.append(content if isinstance(content, str) else str(content))
            continue

        if isinstance(content, str):
            blocks = [{"type": "text", "text": content}]
        else:
            blocks = []
            for part in content or []:
                if part.get("type") == "image_url":
                    blocks.append(_to_anthropic_image(part["image_url"]["url"]))
                else:
                    blocks.append({"type": "text", "text": part.get("text", "")})

        converted.append({"role": message.get("role", "user"), "content": blocks})

    return "\n\n".join(system_parts), converted


class LLMClient:
    """Async client that asks the configured provider for JSON.

    Provider failures are translated into the typed model-call errors so
    callers never inspect provider-specific error shapes.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gpt-4o-mini",
        provider: str = "openai",
        base_url: Optional[str] = None,
        timeout: float = 60.0,
        max_tokens: int = MAX_AUDIT_COMPLETION_TOKENS,
        temperature: float = 0.2,
    ):
        """Initialize the LLM client.

        Args:
            api_key: API key for the LLM provider
            model: Model name to use
            provider: LLM provider (openai or anthropic)
            base_url: Base URL for OpenAI-compatible endpoints
            timeout: Request timeout in seconds
            max_tokens: Maximum tokens for the completion
            temperature: Sampling temperature
        """
        self.api_key = api_key or os.getenv("LLM_API_KEY")
        self.model = model
        self.provider = provider
        self.base_url = base_url
        self.timeout = timeout
        self.max_tokens = max_tokens
        self.temperature = temperature

        if not self.api_key:
            raise ValueError(
                "API key must be provided or set in LLM_API_KEY environment variable"
            )
        if self.provider not in SUPPORTED_PROVIDERS:
            raise ValueError(f"Unsupported provider: {self.provider}")

        self._client: Any = None

    @classmethod
    def from_config(cls, config: Config) -> "LLMClient":
        return cls(
            api_key=config.llm_api_key,
            model=config.llm_model,
            provider=config.llm_provider,
            base_url=config.llm_base_url,
            timeout=config.llm_timeout,
        )

    @property
    def supports_vision(self) -> bool:
        """Whether screenshots may be attached as image parts."""
        if self.base_url and any(host in self.base_url.lower() for host in TEXT_ONLY_HOSTS):
            return False
        return True

    def _get_client(self) -> Any:
        # SDK-level retries are disabled; the audit runner owns retry policy
        if self._client is None:
            if self.provider == "openai":
                self._client = openai.AsyncOpenAI(
                    api_key=self.api_key,
                    base_url=self.base_url,
                    timeout=self.timeout,
                    max_retries=0,
                )
            else:
                self._client = anthropic.AsyncAnthropic(
                    api_key=self.api_key,
                    timeout=self.timeout,
                    max_retries=0,
                )
        return self._client

    async def complete_json(
        self, messages: List[Dict[str, Any]], max_tokens: Optional[int] = None
    ) -> str:
        """Send chat messages and return the raw JSON-ish response text.

        Args:
            messages: OpenAI-style chat messages
            max_tokens: Override for the completion token limit

        Returns:
            Response text

        Raises:
            ModelQuotaExceededError: Provider quota or credit is exhausted
            ModelRetryableError: Timeout, connection error, 408/409/429/5xx
            ModelFatalError: Anything else, including an empty response
        """
        start = time.monotonic()
        try:
            if self.provider == "openai":
                text = await self._call_openai(messages, max_tokens or self.max_tokens)
            else:
                text = await self._call_anthropic(messages, max_tokens or self.max_tokens)
        except ModelCallError:
            raise
        except Exception as e:
            failure = classify_error(e)
            logger.debug(format_event(
                "llm.call.error",
                provider=self.provider,
                model=self.model,
                failure=failure.failure,
                error=type(e).__name__,
            ))
            raise failure from e

        if not text or not text.strip():
            raise ModelFatalError("Model returned an empty response.")

        logger.debug(format_event(
            "llm.call.success",
            provider=self.provider,
            model=self.model,
            duration_ms=int((time.monotonic() - start) * 1000),
            chars=len(text),
        ))
        return text

    async def _call_openai(self, messages: List[Dict[str, Any]], max_tokens: int) -> str:
        """Call the OpenAI (or OpenAI-compatible) chat completions API."""
        client = self._get_client()
        response = await client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=self.temperature,
            response_format={"type": "json_object"},
            max_tokens=max_tokens,
        )
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    async def _call_anthropic(self, messages: List[Dict[str, Any]], max_tokens: int) -> str:
        """Call the Anthropic messages API."""
        client = self._get_client()
        system, converted = to_anthropic_messages(messages)
        response = await client.messages.create(
            model=self.model,
            max_tokens=max_tokens,
            temperature=self.temperature,
            system=system,
            messages=converted,
        )
        return "".join(
            getattr(block, "text", "") for block in response.content
            if getattr(block, "type", "text") == "text"
        )

    async def health_check(self) -> str:
        """Ping the provider with a tiny JSON request.

        Returns:
            "OK" when the provider answered, otherwise "ERROR"
        """
        start = time.monotonic()
        try:
            await self.complete_json(
                [
                    {"role": "system", "content": "Return JSON with a single key: status."},
                    {"role": "user", "content": "Ping"},
                ],
                max_tokens=30,
            )
        except ModelCallError as e:
            logger.warning(format_event(
                "llm.health.error",
                provider=self.provider,
                model=self.model,
                failure=e.failure,
                error=str(e),
            ))
            return "ERROR"

        logger.info(format_event(
            "llm.health.success",
            provider=self.provider,
            model=self.model,
            duration_ms=int((time.monotonic() - start) * 1000),
        ))
        return "OK"
