"""
Generative service client.

Wraps a single-shot text completion against the configured LLM provider.
Failures are classified rather than retried: the caller decides what to do
(the pipeline falls back to local templates).
"""

from __future__ import annotations

import asyncio
import hashlib
import re
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field, SecretStr

from ..core.config import AgentConfig, get_config
from ..core.exceptions import CompletionError, CompletionErrorKind
from ..core.logging import get_logger

logger = get_logger(__name__)

_BLANK_RUN = re.compile(r"\n{3,}")


@dataclass(frozen=True)
class PromptTemplate:
    """A versioned generation prompt.

    The user template is a ``str.format`` template; optional slots such as
    additional instructions may render empty, leaving no blank-line runs.
    """

    template_id: str
    version: str
    system_prompt: str
    user_prompt_template: str
    output_format_instructions: str = ""

    def render_system(self) -> str:
        return self.system_prompt

    def render_user(self, **kwargs: Any) -> str:
        """Fill the user template and append the output format instructions."""
        prompt = self.user_prompt_template.format(**kwargs).strip()
        if self.output_format_instructions:
            prompt = f"{prompt}\n\n{self.output_format_instructions}"
        return _BLANK_RUN.sub("\n\n", prompt)

    def get_hash(self) -> str:
        """16-character fingerprint of every part that shapes the request."""
        parts = (
            self.template_id,
            self.version,
            self.system_prompt,
            self.user_prompt_template,
            self.output_format_instructions,
        )
        return hashlib.sha256("\x1f".join(parts).encode("utf-8")).hexdigest()[:16]


class CompletionResponse(BaseModel):
    """Result of a completion call; failures are data, not exceptions."""

    success: bool = Field(description="Whether the completion succeeded")
    text: str = Field(default="")
    error: str | None = Field(default=None)
    error_kind: CompletionErrorKind | None = Field(default=None)
    status_code: int | None = Field(default=None)

    # Metrics
    prompt_tokens: int = Field(default=0)
    completion_tokens: int = Field(default=0)
    total_tokens: int = Field(default=0)
    latency_ms: float = Field(default=0.0)

    # Provenance
    model_used: str = Field(default="")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


def classify_error(error: BaseException) -> CompletionError:
    """Classify a provider exception.

    Both SDKs expose the HTTP status as `status_code` on their status errors;
    anything without one (connection problems, timeouts) is `OTHER`.

    Args:
        error: The exception raised while calling the provider.

    Returns:
        CompletionError carrying the kind and status code.
    """
    if isinstance(error, CompletionError):
        return error
    if isinstance(error, (asyncio.TimeoutError, TimeoutError)):
        return CompletionError(
            message="Completion request timed out",
            operation="complete",
            kind=CompletionErrorKind.OTHER,
            cause=error if isinstance(error, Exception) else None,
        )
    status_code = getattr(error, "status_code", None)
    if not isinstance(status_code, int):
        status_code = None
    return CompletionError(
        message=str(error) or type(error).__name__,
        operation="complete",
        kind=CompletionErrorKind.from_status(status_code),
        status_code=status_code,
        cause=error if isinstance(error, Exception) else None,
    )


class CompletionAgent:
    """Single-shot completion client for the configured provider."""

    name = "flutter_codegen"

    def __init__(
        self,
        config: AgentConfig | None = None,
        api_key: SecretStr | None = None,
        client: Any = None,
    ) -> None:
        """Initialize the agent.

        Args:
            config: Agent configuration. Uses global config if not provided.
            api_key: Provider key. The SDK reads its own environment variable if None.
            client: Pre-built async SDK client, mainly for tests.
        """
        self.config = config or get_config().agent
        self.api_key = api_key
        self._client: Any = client

    def _get_client(self) -> Any:
        """Get or create the async SDK client for the configured provider.

        Raises:
            CompletionError: If the configured provider is unknown.
        """
        if self._client is not None:
            return self._client

        key = self.api_key.get_secret_value() if self.api_key else None
        if self.config.provider == "openai":
            import openai
            self._client = openai.AsyncOpenAI(api_key=key, timeout=self.config.timeout_seconds, max_retries=0)
        elif self.config.provider == "anthropic":
            import anthropic
            self._client = anthropic.AsyncAnthropic(api_key=key, timeout=self.config.timeout_seconds, max_retries=0)
        elif self.config.provider == "azure_openai":
            import openai
            self._client = openai.AsyncAzureOpenAI(
                api_key=key,
                azure_endpoint=self.config.azure_endpoint,
                api_version=self.config.azure_api_version,
                timeout=self.config.timeout_seconds,
                max_retries=0,
            )
        else:
            raise CompletionError(
                message=f"Unknown provider: {self.config.provider}",
                operation="get_client",
                kind=CompletionErrorKind.MALFORMED_REQUEST,
            )

        return self._client

    async def _call_llm(
        self,
        system_prompt: str,
        user_prompt: str,
        model: str,
        temperature: float,
    ) -> tuple[str, dict[str, int]]:
        """Call the provider and return the reply text and token counts."""
        client = self._get_client()
        if self.config.provider == "anthropic":
            return await self._anthropic_messages(client, system_prompt, user_prompt, model, temperature)
        if self.config.provider == "azure_openai" and self.config.azure_deployment_name:
            model = self.config.azure_deployment_name
        return await self._openai_chat(client, system_prompt, user_prompt, model, temperature)

    async def _openai_chat(
        self, client: Any, system_prompt: str, user_prompt: str, model: str, temperature: float
    ) -> tuple[str, dict[str, int]]:
        response = await client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=temperature,
            max_completion_tokens=self.config.max_tokens,
        )
        text = (response.choices[0].message.content or "") if response.choices else ""
        usage = response.usage
        if usage is None:
            return text, {"prompt_tokens": 0, "completion_tokens": 0, "total_tokens": 0}
        return text, {
            "prompt_tokens": usage.prompt_tokens,
            "completion_tokens": usage.completion_tokens,
            "total_tokens": usage.total_tokens,
        }

    async def _anthropic_messages(
        self, client: Any, system_prompt: str, user_prompt: str, model: str, temperature: float
    ) -> tuple[str, dict[str, int]]:
        response = await client.messages.create(
            model=model,
            max_tokens=self.config.max_tokens,
            temperature=temperature,
            system=system_prompt,
            messages=[{"role": "user", "content": user_prompt}],
        )
        # Non-text blocks (tool use, thinking) carry no text attribute
        text = "".join(getattr(block, "text", "") for block in response.content or [])
        prompt_tokens, completion_tokens = response.usage.input_tokens, response.usage.output_tokens
        return text, {
            "prompt_tokens": prompt_tokens,
            "completion_tokens": completion_tokens,
            "total_tokens": prompt_tokens + completion_tokens,
        }

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        model: str | None = None,
        temperature: float | None = None,
    ) -> CompletionResponse:
        """Request one completion.

        Makes exactly one attempt within the configured timeout budget.

        Args:
            system_prompt: System prompt.
            user_prompt: User prompt.
            model: Model override.
            temperature: Temperature override.

        Returns:
            CompletionResponse; on failure `success` is False and `error_kind` is set.
        """
        model = model or self.config.model
        temperature = self.config.temperature if temperature is None else temperature
        start = time.perf_counter()

        logger.info(
            "Completion request starting",
            provider=self.config.provider,
            model=model,
            temperature=temperature,
            system_prompt_chars=len(system_prompt),
            user_prompt_chars=len(user_prompt),
        )

        try:
            text, tokens = await asyncio.wait_for(
                self._call_llm(system_prompt, user_prompt, model, temperature),
                timeout=self.config.timeout_seconds,
            )
        except Exception as e:
            error = classify_error(e)
            latency_ms = (time.perf_counter() - start) * 1000
            logger.warning(
                "Completion request failed",
                provider=self.config.provider,
                model=model,
                error_kind=error.kind.value,
                status_code=error.status_code,
                error=error.message,
                latency_ms=round(latency_ms, 1),
            )
            return CompletionResponse(
                success=False,
                error=error.message,
                error_kind=error.kind,
                status_code=error.status_code,
                latency_ms=latency_ms,
                model_used=model,
            )

        latency_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "Completion response received",
            provider=self.config.provider,
            model=model,
            response_chars=len(text),
            total_tokens=tokens["total_tokens"],
            latency_ms=round(latency_ms, 1),
        )
        return CompletionResponse(
            success=True,
            text=text,
            latency_ms=latency_ms,
            model_used=model,
            **tokens,
        )
