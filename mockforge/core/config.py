"""
Configuration management for Mockforge.

Provides centralized, type-safe configuration with environment variable overrides
and sensible defaults for the generation pipeline.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field, SecretStr

from ..models.generation import GenerationCapabilities

# Load .env file if it exists (looks in cwd and parent directories)
load_dotenv()


def _secret_from_env(name: str) -> SecretStr | None:
    value = os.environ.get(name, "")
    return SecretStr(value) if value else None


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class AgentConfig(BaseModel):
    """Generative service client configuration."""

    provider: Literal["openai", "anthropic", "azure_openai"] = Field(
        default="openai", description="LLM provider"
    )
    # Azure OpenAI specific settings
    azure_endpoint: str | None = Field(default=None, description="Azure OpenAI endpoint URL")
    azure_api_version: str = Field(default="2024-02-15-preview", description="Azure OpenAI API version")
    azure_deployment_name: str | None = Field(default=None, description="Azure OpenAI deployment name")
    model: str = Field(default="gpt-4o", description="Model identifier")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0, description="Sampling temperature")
    max_tokens: int = Field(default=16000, ge=256, description="Max output tokens")
    timeout_seconds: float = Field(default=180.0, gt=0, description="Single-shot request timeout")


class GenerationConfig(BaseModel):
    """Code generation and recovery configuration."""

    fallback_enabled: bool = Field(
        default=True, description="Fall back to local templates when remote generation fails"
    )
    min_reply_chars: int = Field(
        default=100, ge=0, description="Replies at or below this length fail the sanity check"
    )
    default_app_name: str = Field(default="flutter_app", description="Dart package name fallback")
    project_packages: list[str] = Field(
        default_factory=lambda: ["app", "example", "flutter_app"],
        description="Package names treated as project-internal when rewriting imports",
    )


class StorageConfig(BaseModel):
    """Storage configuration for generated projects."""

    backend: Literal["local"] = Field(default="local", description="Storage backend")
    base_path: Path = Field(
        default=Path("./output"), description="Base path for local storage"
    )


class Config(BaseModel):
    """Root configuration for Mockforge."""

    project_name: str = Field(default="Mockforge", description="Project identifier")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging level"
    )
    json_logs: bool | None = Field(
        default=None, description="Force JSON log output (None: JSON unless stderr is a TTY)"
    )
    agent: AgentConfig = Field(default_factory=AgentConfig)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)

    # API Keys (loaded from environment)
    openai_api_key: SecretStr | None = Field(
        default_factory=lambda: _secret_from_env("OPENAI_API_KEY")
    )
    anthropic_api_key: SecretStr | None = Field(
        default_factory=lambda: _secret_from_env("ANTHROPIC_API_KEY")
    )
    azure_openai_api_key: SecretStr | None = Field(
        default_factory=lambda: _secret_from_env("AZURE_OPENAI_API_KEY")
    )

    model_config = {"extra": "ignore"}

    def api_key_for(self, provider: str | None = None) -> SecretStr | None:
        """Return the API key configured for a provider.

        Args:
            provider: Provider name. Defaults to the configured agent provider.

        Returns:
            The secret key, or None when the provider has no key.
        """
        provider = provider or self.agent.provider
        return {
            "openai": self.openai_api_key,
            "anthropic": self.anthropic_api_key,
            "azure_openai": self.azure_openai_api_key,
        }.get(provider)

    def capabilities(self) -> GenerationCapabilities:
        """Derive the explicit generation capabilities for a pipeline run."""
        return GenerationCapabilities(
            remote_generation=self.api_key_for() is not None,
            fallback_enabled=self.generation.fallback_enabled,
        )

    @classmethod
    def from_env(cls) -> Config:
        """Create configuration from environment variables."""
        json_logs = os.environ.get("MOCKFORGE_JSON_LOGS")
        packages = os.environ.get("MOCKFORGE_PROJECT_PACKAGES")
        generation = GenerationConfig(
            fallback_enabled=_env_flag("MOCKFORGE_FALLBACK", True),
            min_reply_chars=int(os.environ.get("MOCKFORGE_MIN_REPLY_CHARS", "100")),
            default_app_name=os.environ.get("MOCKFORGE_DEFAULT_APP_NAME", "flutter_app"),
        )
        if packages:
            generation.project_packages = [p.strip() for p in packages.split(",") if p.strip()]

        return cls(
            log_level=os.environ.get("MOCKFORGE_LOG_LEVEL", "INFO"),  # type: ignore
            json_logs=_env_flag("MOCKFORGE_JSON_LOGS", False) if json_logs is not None else None,
            agent=AgentConfig(
                provider=os.environ.get("MOCKFORGE_AGENT_PROVIDER", "openai"),  # type: ignore
                model=os.environ.get("MOCKFORGE_AGENT_MODEL", "gpt-4o"),
                temperature=float(os.environ.get("MOCKFORGE_AGENT_TEMPERATURE", "0.7")),
                timeout_seconds=float(os.environ.get("MOCKFORGE_AGENT_TIMEOUT", "180")),
                azure_endpoint=os.environ.get("AZURE_OPENAI_ENDPOINT"),
                azure_api_version=os.environ.get("AZURE_OPENAI_API_VERSION", "2024-02-15-preview"),
                azure_deployment_name=os.environ.get("AZURE_OPENAI_DEPLOYMENT_NAME"),
            ),
            generation=generation,
            storage=StorageConfig(
                base_path=Path(os.environ.get("MOCKFORGE_OUTPUT_PATH", "./output")),
            ),
        )


@lru_cache(maxsize=1)
def get_config() -> Config:
    """Get cached configuration instance."""
    return Config.from_env()
