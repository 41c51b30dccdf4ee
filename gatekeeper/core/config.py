# gatekeeper/core/config.py
import os
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class GatekeeperSettings(BaseSettings):
    # Shared store
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        validation_alias=AliasChoices("GATEKEEPER_REDIS_URL", "REDIS_URL"),
        description="Redis URL used for shared rate-limit windows and flag overrides",
    )
    backend_timeout_seconds: Optional[float] = Field(
        default=None,
        gt=0,
        validation_alias=AliasChoices("GATEKEEPER_BACKEND_TIMEOUT_SECONDS", "backend_timeout_seconds"),
        description="Per round-trip timeout for shared store calls (unset = no timeout)",
    )

    # Rate Limiting Configuration
    rate_limit_enabled: bool = Field(
        default=True,
        validation_alias=AliasChoices("GATEKEEPER_RATE_LIMIT_ENABLED", "rate_limit_enabled"),
        description="Enable rate limiting in the HTTP dependency (disable for testing)",
    )
    rate_limit_key_prefix: str = Field(
        default="rl:",
        validation_alias=AliasChoices("GATEKEEPER_RATE_LIMIT_KEY_PREFIX", "rate_limit_key_prefix"),
    )

    # Feature flags
    flags_file: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("GATEKEEPER_FLAGS_FILE", "flags_file"),
        description="Path to the JSON flag definition document",
    )
    flag_override_prefix: str = Field(
        default="flag:",
        validation_alias=AliasChoices("GATEKEEPER_FLAG_OVERRIDE_PREFIX", "flag_override_prefix"),
    )

    # Circuit breakers
    circuit_failure_threshold: int = Field(
        default=5,
        gt=0,
        validation_alias=AliasChoices("GATEKEEPER_CIRCUIT_FAILURE_THRESHOLD", "circuit_failure_threshold"),
    )
    circuit_reset_timeout_ms: int = Field(
        default=30_000,
        gt=0,
        validation_alias=AliasChoices("GATEKEEPER_CIRCUIT_RESET_TIMEOUT_MS", "circuit_reset_timeout_ms"),
        description="Milliseconds an open circuit waits before allowing a probe",
    )

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
    )


settings = GatekeeperSettings()
