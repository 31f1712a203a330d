"""Configuration management for the Provador try-on service.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the PROVADOR_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (PROVADOR_* prefix)
2. .env file in the project root
3. Default values defined in ProvadorConfig

Example .env file:
    PROVADOR_AI_GATEWAY_API_KEY=sk-...
    PROVADOR_SUPABASE_URL=https://xyz.supabase.co
    PROVADOR_SUPABASE_SERVICE_ROLE_KEY=eyJ...
    PROVADOR_FALLBACK_DELAY_SECONDS=1.0

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.
This ensures a single source of truth for all configuration values across
the application.

Usage Example
-------------
    from provador.core.config import config

    print(config.premium_model)
    print(config.fallback_delay_seconds)

Escalation Settings
-------------------
Each escalation tier is bound to exactly one gateway model:
- fast_model: first attempt for a fresh try-on (retryCount 0)
- balanced_model: first attempt for the first client retry
- premium_model: first attempt for every later retry, and the last resort
  for every chain

When ``ai_gateway_api_key`` is unset, every gateway provider is skipped and
the chain ends in an exhaustion failure.

Result Store Settings
---------------------
When both ``supabase_url`` and ``supabase_service_role_key`` are set, results
are persisted to the ``results_table`` table.  Otherwise an in-memory store is
used (suitable for local development only).
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProvadorConfig(BaseSettings):
    """Main configuration for the Provador try-on service.

    Attributes
    ----------
    AI Gateway Settings:
        ai_gateway_url : str
            OpenAI-compatible chat-completions endpoint
        ai_gateway_api_key : str | None
            Bearer key for the gateway (providers are skipped when unset)
        fast_model / balanced_model / premium_model : str
            Gateway model identifiers bound to each escalation tier
        provider_timeout_seconds : float
            Timeout applied to each individual provider call

    Validation Settings:
        validation_timeout_seconds : float
            Timeout for the HEAD pre-check of each input image
        min_image_bytes : int
            Content-length below which a warning is logged

    Escalation Settings:
        fallback_delay_seconds : float
            Pause between a failed provider and the next candidate

    Result Store Settings:
        supabase_url, supabase_service_role_key : str | None
        results_table : str

    Server Settings:
        server_host, server_port, log_level
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PROVADOR_",
        case_sensitive=False,
    )

    # AI gateway
    ai_gateway_url: str = Field(
        default="https://ai.gateway.lovable.dev/v1/chat/completions",
        description="OpenAI-compatible chat-completions endpoint",
    )
    ai_gateway_api_key: str | None = Field(
        default=None,
        description="Bearer key for the AI gateway (providers are skipped when unset)",
    )

    # One model per escalation tier
    fast_model: str = Field(
        default="google/gemini-2.5-flash",
        description="Model for the fast tier",
    )
    balanced_model: str = Field(
        default="google/gemini-2.5-pro",
        description="Model for the balanced tier",
    )
    premium_model: str = Field(
        default="google/gemini-3-pro-image-preview",
        description="Model for the premium tier",
    )

    provider_timeout_seconds: float = Field(
        default=120.0,
        description="Timeout for a single provider call",
        gt=0,
    )
    validation_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout for the HEAD pre-check of each input image",
        gt=0,
    )
    fallback_delay_seconds: float = Field(
        default=1.0,
        description="Pause between a failed provider and the next candidate",
        ge=0,
    )
    min_image_bytes: int = Field(
        default=5000,
        description="Content-length below which a small-image warning is logged",
        ge=0,
    )
    default_category: str = Field(
        default="upper_body",
        description="Garment category used when the request omits one",
    )

    # Result store
    supabase_url: str | None = Field(
        default=None,
        description="Supabase project URL",
    )
    supabase_service_role_key: str | None = Field(
        default=None,
        description="Supabase service role key",
    )
    results_table: str = Field(
        default="try_on_results",
        description="Table holding try-on result records",
    )

    # Server
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address",
    )
    server_port: int = Field(
        default=8000,
        description="Server port",
        ge=1024,
        le=65535,
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Root log level applied by the CLI entry point",
    )

    @property
    def supabase_configured(self) -> bool:
        """True when both Supabase credentials are present."""
        return bool(self.supabase_url and self.supabase_service_role_key)


# Global configuration instance
# Loads values from environment variables (PROVADOR_* prefix) and .env file.
config = ProvadorConfig()
