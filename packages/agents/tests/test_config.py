"""Tests for the configuration system."""

from decimal import Decimal

import pytest

from transitoria_agents.config import (
    DEFAULT_MODEL,
    DashboardConfig,
    LLMConfig,
    TransitoriaConfig,
)
from transitoria_core.aggregator import InvalidPeriodPolicy


class TestLLMConfig:
    """Test suite for LLMConfig."""

    def test_default_values(self):
        """LLMConfig should have sensible defaults."""
        config = LLMConfig()

        assert config.enabled is True
        assert config.model == DEFAULT_MODEL
        assert config.temperature == 0.0
        assert config.max_tokens == 4096
        assert config.timeout == 60.0
        assert config.api_key is None

    def test_custom_values(self):
        """LLMConfig should accept custom values."""
        config = LLMConfig(
            model="claude-3-5-haiku-20241022",
            temperature=0.7,
            max_tokens=8192,
            api_key="test-key",
            timeout=120.0,
        )

        assert config.model == "claude-3-5-haiku-20241022"
        assert config.temperature == 0.7
        assert config.max_tokens == 8192
        assert config.api_key == "test-key"
        assert config.timeout == 120.0

    def test_temperature_validation(self):
        """Temperature should be between 0.0 and 1.0."""
        LLMConfig(temperature=0.0)
        LLMConfig(temperature=1.0)

        with pytest.raises(ValueError):
            LLMConfig(temperature=-0.1)

        with pytest.raises(ValueError):
            LLMConfig(temperature=1.1)

    def test_model_validation(self):
        """Model name cannot be empty."""
        with pytest.raises(ValueError):
            LLMConfig(model="")

        with pytest.raises(ValueError):
            LLMConfig(model="   ")

    def test_max_tokens_validation(self):
        """Max tokens must be positive and within limits."""
        with pytest.raises(ValueError):
            LLMConfig(max_tokens=0)

        with pytest.raises(ValueError):
            LLMConfig(max_tokens=64001)

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValueError):
            LLMConfig(timeout=0)

    def test_from_environment(self, monkeypatch):
        """LLMConfig should load from environment variables."""
        monkeypatch.setenv("TRANSITORIA_LLM_ENABLED", "false")
        monkeypatch.setenv("TRANSITORIA_LLM_MODEL", "claude-3-5-haiku-20241022")
        monkeypatch.setenv("TRANSITORIA_LLM_TEMPERATURE", "0.5")
        monkeypatch.setenv("TRANSITORIA_LLM_MAX_TOKENS", "2048")
        monkeypatch.setenv("TRANSITORIA_LLM_API_KEY", "env-api-key")

        config = LLMConfig()

        assert config.enabled is False
        assert config.model == "claude-3-5-haiku-20241022"
        assert config.temperature == 0.5
        assert config.max_tokens == 2048
        assert config.api_key == "env-api-key"

    def test_falls_back_to_anthropic_key(self, monkeypatch):
        """The SDK's own variable is used when no prefixed key is set."""
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sdk-key")
        assert LLMConfig().api_key == "sdk-key"

    def test_prefixed_key_wins(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sdk-key")
        monkeypatch.setenv("TRANSITORIA_LLM_API_KEY", "own-key")
        assert LLMConfig().api_key == "own-key"


class TestDashboardConfig:
    """Test suite for DashboardConfig."""

    def test_default_values(self):
        config = DashboardConfig()

        assert config.app_name == "Transitoria Controle Tool"
        assert config.language == "nl"
        assert config.currency_in_thousands is False
        assert config.show_ai_analysis is True
        assert config.user_name == "J. de Vries"
        assert config.reporting_year is None
        assert config.small_amount_threshold == Decimal("50")
        assert config.invalid_period_policy == InvalidPeriodPolicy.BOOKED_MONTH

    def test_language_validation(self):
        """Language is nl or en, case-insensitive."""
        assert DashboardConfig(language="EN").language == "en"

        with pytest.raises(ValueError):
            DashboardConfig(language="de")

    def test_reporting_year_range(self):
        DashboardConfig(reporting_year=2024)

        with pytest.raises(ValueError):
            DashboardConfig(reporting_year=24)

    def test_threshold_not_negative(self):
        with pytest.raises(ValueError):
            DashboardConfig(small_amount_threshold=Decimal("-1"))

    def test_from_environment(self, monkeypatch):
        """DashboardConfig should load from environment variables."""
        monkeypatch.setenv("TRANSITORIA_DASHBOARD_LANGUAGE", "en")
        monkeypatch.setenv("TRANSITORIA_DASHBOARD_CURRENCY_IN_THOUSANDS", "true")
        monkeypatch.setenv("TRANSITORIA_DASHBOARD_REPORTING_YEAR", "2023")
        monkeypatch.setenv("TRANSITORIA_DASHBOARD_SMALL_AMOUNT_THRESHOLD", "100")
        monkeypatch.setenv("TRANSITORIA_DASHBOARD_INVALID_PERIOD_POLICY", "skip")

        config = DashboardConfig()

        assert config.language == "en"
        assert config.currency_in_thousands is True
        assert config.reporting_year == 2023
        assert config.small_amount_threshold == Decimal("100")
        assert config.invalid_period_policy == InvalidPeriodPolicy.SKIP


class TestTransitoriaConfig:
    """Test suite for TransitoriaConfig."""

    def test_default_values(self):
        """TransitoriaConfig should have sensible defaults."""
        config = TransitoriaConfig()

        assert config.env == "development"
        assert config.log_level == "INFO"
        assert config.debug_mode is False

        # Check nested configs have defaults
        assert config.llm.model == DEFAULT_MODEL
        assert config.dashboard.language == "nl"

    def test_custom_nested_config(self):
        """Should accept custom nested configuration."""
        config = TransitoriaConfig(
            llm=LLMConfig(model="custom-model", temperature=0.5),
            dashboard=DashboardConfig(language="en"),
        )

        assert config.llm.model == "custom-model"
        assert config.llm.temperature == 0.5
        assert config.dashboard.language == "en"

    def test_environment_validation(self):
        """Environment should be validated."""
        TransitoriaConfig(env="development")
        TransitoriaConfig(env="staging")
        TransitoriaConfig(env="production")
        TransitoriaConfig(env="test")

        with pytest.raises(ValueError):
            TransitoriaConfig(env="invalid")

    def test_environment_case_insensitive(self):
        """Environment should be case-insensitive."""
        assert TransitoriaConfig(env="PRODUCTION").env == "production"
        assert TransitoriaConfig(env="Development").env == "development"

    def test_log_level_validation(self):
        """Log level should be validated and normalized."""
        assert TransitoriaConfig(log_level="debug").log_level == "DEBUG"
        assert TransitoriaConfig(log_level="Warning").log_level == "WARNING"

        with pytest.raises(ValueError):
            TransitoriaConfig(log_level="INVALID")

    def test_environment_properties(self):
        assert TransitoriaConfig(env="production").is_production is True
        assert TransitoriaConfig(env="development").is_production is False
        assert TransitoriaConfig(env="development").is_development is True
        assert TransitoriaConfig(env="staging").is_development is False

    def test_is_debug_property(self):
        """is_debug should return True when debug mode or DEBUG log level."""
        assert TransitoriaConfig(debug_mode=True).is_debug is True
        assert TransitoriaConfig(log_level="DEBUG").is_debug is True
        assert TransitoriaConfig(log_level="INFO", debug_mode=False).is_debug is False

    def test_from_environment(self, monkeypatch):
        """TransitoriaConfig should load from environment variables."""
        monkeypatch.setenv("TRANSITORIA_ENV", "production")
        monkeypatch.setenv("TRANSITORIA_LOG_LEVEL", "WARNING")
        monkeypatch.setenv("TRANSITORIA_DEBUG_MODE", "true")

        config = TransitoriaConfig()

        assert config.env == "production"
        assert config.log_level == "WARNING"
        assert config.debug_mode is True

    def test_loads_from_dotenv_file(self, tmp_path):
        """TransitoriaConfig should load from the .env file in the working directory."""
        (tmp_path / ".env").write_text(
            "TRANSITORIA_ENV=staging\n"
            "TRANSITORIA_LOG_LEVEL=ERROR\n"
            "TRANSITORIA_LLM_MODEL=test-model\n"
            "TRANSITORIA_DASHBOARD_LANGUAGE=en\n"
        )

        config = TransitoriaConfig()

        assert config.env == "staging"
        assert config.log_level == "ERROR"
        assert config.llm.model == "test-model"
        assert config.dashboard.language == "en"

    def test_validates_on_instantiation(self):
        """Configuration should validate on instantiation."""
        with pytest.raises(ValueError):
            TransitoriaConfig(env="invalid-env")

        with pytest.raises(ValueError):
            TransitoriaConfig(llm=LLMConfig(temperature=5.0))
