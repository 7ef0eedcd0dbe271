"""Configuration models for the ragchat client."""

import os
from collections.abc import Mapping
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from ragchat.exceptions import ConfigurationError

DEFAULT_BASE_URL = "http://legal-search-api:8123"
DEFAULT_POLL_INTERVAL_MS = 15000
DEFAULT_MAX_POLL_ATTEMPTS = 25
DEFAULT_SENDER = "Legal Research Assistant"

ENV_BASE_URL = "RAG_SERVER_URL"
ENV_POLL_INTERVAL_MS = "RAG_POLL_INTERVAL_MS"
ENV_MAX_POLL_ATTEMPTS = "RAG_MAX_POLL_ATTEMPTS"
ENV_API_KEY = "RAG_API_KEY"


class RequestConfig(BaseModel):
    """Settings shared with the surrounding chat application."""

    model_config = ConfigDict(frozen=True)

    api_key: Optional[str] = Field(default=None)
    sender: str = Field(default=DEFAULT_SENDER)

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None, **overrides: Any
    ) -> "RequestConfig":
        env = os.environ if environ is None else environ
        params: dict[str, Any] = {}
        if env.get(ENV_API_KEY):
            params["api_key"] = env[ENV_API_KEY]
        params.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**params)

    def auth_headers(self) -> dict[str, str]:
        """Bearer credential header, empty when no API key is set."""
        if not self.api_key:
            return {}
        return {"Authorization": f"Bearer {self.api_key}"}


class ClientConfig(BaseModel):
    """Configuration for the search service connection."""

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(default=DEFAULT_BASE_URL, min_length=1)
    poll_interval_ms: int = Field(default=DEFAULT_POLL_INTERVAL_MS, gt=0)
    max_poll_attempts: int = Field(default=DEFAULT_MAX_POLL_ATTEMPTS, gt=0)
    timeout: float = Field(default=30.0, gt=0)

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None, **overrides: Any
    ) -> "ClientConfig":
        """Build a config from ``RAG_*`` variables; non-None overrides win."""
        env = os.environ if environ is None else environ
        params: dict[str, Any] = {}
        if env.get(ENV_BASE_URL):
            params["base_url"] = env[ENV_BASE_URL]
        for key, field in (
            (ENV_POLL_INTERVAL_MS, "poll_interval_ms"),
            (ENV_MAX_POLL_ATTEMPTS, "max_poll_attempts"),
        ):
            raw = env.get(key)
            if not raw:
                continue
            try:
                params[field] = int(raw)
            except ValueError as e:
                raise ConfigurationError(f"{key} must be an integer, got {raw!r}") from e
        params.update({k: v for k, v in overrides.items() if v is not None})

        try:
            return cls(**params)
        except PydanticValidationError as e:
            raise ConfigurationError(f"Invalid client configuration: {e}") from e

    @property
    def poll_interval_seconds(self) -> float:
        return self.poll_interval_ms / 1000

    def search_url(self) -> str:
        return f"{self.base_url}/search"

    def task_url(self, task_id: str) -> str:
        return f"{self.base_url}/tasks/{task_id}"
