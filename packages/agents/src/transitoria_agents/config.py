"""Configuration system for Transitoria Agents.

This module provides Pydantic Settings-based configuration with environment
variable support and sensible defaults for the review dashboard and the
classification agent.

Usage:
    from transitoria_agents.config import TransitoriaConfig

    # Load from environment variables and .env file
    config = TransitoriaConfig()

    # Access LLM settings
    print(config.llm.model)

    # Access dashboard settings
    if config.dashboard.currency_in_thousands:
        print("Amounts shown in thousands")
"""

import os
from decimal import Decimal
from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from transitoria_core.aggregator import InvalidPeriodPolicy

DEFAULT_MODEL = "claude-sonnet-4-20250514"


class LLMConfig(BaseSettings):
    """LLM configuration settings.

    Configuration for the language model used by the classification agent.
    Supports environment variables with the prefix TRANSITORIA_LLM_.

    Environment Variables:
        TRANSITORIA_LLM_ENABLED: Run AI analysis at all
        TRANSITORIA_LLM_MODEL: Model name (e.g., claude-sonnet-4-20250514)
        TRANSITORIA_LLM_TEMPERATURE: Sampling temperature (0.0-1.0)
        TRANSITORIA_LLM_MAX_TOKENS: Maximum output tokens
        TRANSITORIA_LLM_API_KEY: API key (falls back to ANTHROPIC_API_KEY)
        TRANSITORIA_LLM_TIMEOUT: Request timeout in seconds
    """

    model_config = SettingsConfigDict(
        env_prefix="TRANSITORIA_LLM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    enabled: bool = Field(
        default=True,
        description="Run the AI classification when transactions are loaded",
    )
    model: str = Field(
        default=DEFAULT_MODEL,
        description="Model identifier for the LLM",
    )
    temperature: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Sampling temperature for generation",
    )
    max_tokens: int = Field(
        default=4096,
        gt=0,
        le=64000,
        description="Maximum tokens in response",
    )
    api_key: Optional[str] = Field(
        default=None,
        description="API key for the Anthropic API",
    )
    timeout: float = Field(
        default=60.0,
        gt=0,
        description="Request timeout in seconds",
    )

    @field_validator("model")
    @classmethod
    def validate_model(cls, v: str) -> str:
        """Ensure model name is not empty."""
        if not v or not v.strip():
            raise ValueError("Model name cannot be empty")
        return v.strip()

    @model_validator(mode="after")
    def fall_back_to_anthropic_key(self) -> "LLMConfig":
        """Use ANTHROPIC_API_KEY when no prefixed key is configured."""
        if not self.api_key:
            self.api_key = os.environ.get("ANTHROPIC_API_KEY") or None
        return self


class DashboardConfig(BaseSettings):
    """Review dashboard settings.

    Environment Variables:
        TRANSITORIA_DASHBOARD_APP_NAME: Title shown on reports
        TRANSITORIA_DASHBOARD_LANGUAGE: nl or en
        TRANSITORIA_DASHBOARD_CURRENCY_IN_THOUSANDS: Compact amounts (€ 15.0k)
        TRANSITORIA_DASHBOARD_SHOW_AI_ANALYSIS: Show the agent's rationale
        TRANSITORIA_DASHBOARD_USER_NAME: Reviewer recorded in the audit log
        TRANSITORIA_DASHBOARD_REPORTING_YEAR: Year of the time-shift horizon
        TRANSITORIA_DASHBOARD_SMALL_AMOUNT_THRESHOLD: Small-amount filter
        TRANSITORIA_DASHBOARD_INVALID_PERIOD_POLICY: booked_month or skip
    """

    model_config = SettingsConfigDict(
        env_prefix="TRANSITORIA_DASHBOARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = Field(
        default="Transitoria Controle Tool",
        description="Application name shown in report headers",
    )
    language: str = Field(
        default="nl",
        description="Display language (nl or en)",
    )
    currency_in_thousands: bool = Field(
        default=False,
        description="Render amounts in thousands",
    )
    show_ai_analysis: bool = Field(
        default=True,
        description="Show the classification agent's rationale per transaction",
    )
    user_name: str = Field(
        default="J. de Vries",
        min_length=1,
        description="Reviewer identity written to the audit log",
    )
    reporting_year: Optional[int] = Field(
        default=None,
        ge=1900,
        le=2999,
        description="Year of the time-shift horizon; defaults to the latest booking year",
    )
    small_amount_threshold: Decimal = Field(
        default=Decimal("50"),
        ge=0,
        description="Absolute amount below which transactions are hidden",
    )
    invalid_period_policy: InvalidPeriodPolicy = Field(
        default=InvalidPeriodPolicy.BOOKED_MONTH,
        description="Handling of malformed allocated periods in the time-shift",
    )

    @field_validator("language")
    @classmethod
    def validate_language(cls, v: str) -> str:
        """Validate and normalize the display language."""
        v_lower = v.lower().strip()
        if v_lower not in {"nl", "en"}:
            raise ValueError(f"Invalid language: {v}. Must be one of: nl, en")
        return v_lower


class TransitoriaConfig(BaseSettings):
    """Root configuration for Transitoria Agents.

    Environment Variables:
        TRANSITORIA_ENV: Environment name (development, staging, production)
        TRANSITORIA_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
        TRANSITORIA_DEBUG_MODE: Enable verbose debug logging

    Example:
        config = TransitoriaConfig(
            llm=LLMConfig(model="claude-3-5-haiku-20241022"),
            dashboard=DashboardConfig(language="en"),
        )
    """

    model_config = SettingsConfigDict(
        env_prefix="TRANSITORIA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Environment settings
    env: str = Field(
        default="development",
        description="Environment name (development, staging, production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable verbose debug logging for development",
    )

    # Nested configuration
    llm: LLMConfig = Field(default_factory=LLMConfig)
    dashboard: DashboardConfig = Field(default_factory=DashboardConfig)

    @field_validator("env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment name."""
        valid_envs = {"development", "staging", "production", "test"}
        v_lower = v.lower().strip()
        if v_lower not in valid_envs:
            raise ValueError(f"Invalid environment: {v}. Must be one of: {valid_envs}")
        return v_lower

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper().strip()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of: {valid_levels}")
        return v_upper

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.env == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.env == "development"

    @property
    def is_debug(self) -> bool:
        """Check if debug mode is enabled (via flag or log level)."""
        return self.debug_mode or self.log_level == "DEBUG"
