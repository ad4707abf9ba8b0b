"""
Shared configuration management for the ModelSignature SDK.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_BASE_URL = "https://modelsignature-api-541734326273.us-central1.run.app"


class ClientSettings(BaseSettings):
    """Environment-driven defaults (``MODELSIGNATURE_*``)."""

    model_config = SettingsConfigDict(
        env_prefix="MODELSIGNATURE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Logging
    log_level: str = Field(default="info")

    # Verification authority
    api_base_url: str = Field(default=DEFAULT_API_BASE_URL)
    api_key: Optional[str] = Field(default=None)

    # Request pipeline (seconds)
    timeout: float = Field(default=10.0, gt=0)
    retries: int = Field(default=3, ge=0)
    base_delay: float = Field(default=1.0, ge=0)
    max_delay: float = Field(default=10.0, ge=0)
    jitter: float = Field(default=1.0, ge=0)


class ClientConfig(BaseModel):
    """Resolved configuration held by a client instance."""

    api_base_url: str
    api_key: Optional[str] = None
    timeout: float = Field(gt=0)
    retries: int = Field(ge=0)
    base_delay: float = Field(ge=0)
    max_delay: float = Field(ge=0)
    jitter: float = Field(ge=0)

    def merged(self, **changes: Any) -> "ClientConfig":
        """Return a validated copy with ``changes`` applied."""
        unknown = set(changes) - set(type(self).model_fields)
        if unknown:
            raise TypeError(f"Unknown client config field(s): {', '.join(sorted(unknown))}")
        return type(self).model_validate({**self.model_dump(), **changes})


def get_settings(**overrides: Any) -> ClientSettings:
    """Build settings from the environment, with explicit overrides."""
    return ClientSettings(**overrides)


def resolve_client_config(settings: Optional[ClientSettings] = None, **overrides: Any) -> ClientConfig:
    """Combine settings with non-None constructor overrides."""
    settings = settings or get_settings()
    values = {
        "api_base_url": settings.api_base_url,
        "api_key": settings.api_key,
        "timeout": settings.timeout,
        "retries": settings.retries,
        "base_delay": settings.base_delay,
        "max_delay": settings.max_delay,
        "jitter": settings.jitter,
    }
    values.update({key: value for key, value in overrides.items() if value is not None})
    values["api_base_url"] = values["api_base_url"].rstrip("/")
    return ClientConfig(**values)
