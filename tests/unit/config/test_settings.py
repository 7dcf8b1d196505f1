# tests/unit/config/test_settings.py — v1
"""Tests for config/settings.py — typed Settings and validation rules."""

from __future__ import annotations

import pytest

from salesintel.config.settings import ConfigurationError, Settings, load_settings
from salesintel.core.errors import ConfigurationError as CoreConfigurationError


class TestSettingsDefaults:
    def test_default_provider(self):
        s = Settings(_env_file=None)
        assert s.llm_default_provider == "anthropic"

    def test_default_cache(self):
        s = Settings(_env_file=None, cache_backend="memory")
        assert s.cache_backend == "memory"
        assert s.cache_redis_url == ""

    def test_default_call_policy(self):
        s = Settings(_env_file=None)
        assert s.retry_max_attempts == 3
        assert s.retry_base_delay_s == 1.0
        assert s.retry_max_delay_s == 10.0
        assert s.serpapi_timeout_s == 10.0

    def test_default_sources_exclude_contacts(self):
        s = Settings(_env_file=None, enabled_sources="organic,news,jobs,linkedin,youtube")
        assert s.enabled_sources_list == ["organic", "news", "jobs", "linkedin", "youtube"]
        assert "contacts" not in s.enabled_sources_list

    def test_serpapi_endpoint(self):
        s = Settings(_env_file=None)
        assert s.serpapi_base_url == "https://serpapi.com/search"


class TestSettingsValidation:
    def test_redis_backend_without_url(self):
        with pytest.raises(ConfigurationError, match="CACHE_REDIS_URL"):
            Settings(_env_file=None, cache_backend="redis", cache_redis_url="")

    def test_redis_backend_with_url(self):
        s = Settings(
            _env_file=None, cache_backend="redis", cache_redis_url="redis://localhost:6379/0",
        )
        assert s.cache_backend == "redis"

    def test_max_delay_below_base(self):
        with pytest.raises(ConfigurationError, match="RETRY_MAX_DELAY_S"):
            Settings(_env_file=None, retry_base_delay_s=5.0, retry_max_delay_s=1.0)

    def test_unknown_source(self):
        with pytest.raises(ConfigurationError, match="telepathy"):
            Settings(_env_file=None, enabled_sources="organic,telepathy")

    def test_zero_attempts_rejected(self):
        with pytest.raises(ValueError):
            Settings(_env_file=None, retry_max_attempts=0)

    def test_zero_rate_limit_rejected(self):
        with pytest.raises(ValueError):
            Settings(_env_file=None, source_rate_limit_per_minute=0)

    def test_configuration_error_is_core_taxonomy(self):
        assert ConfigurationError is CoreConfigurationError


class TestSettingsHelpers:
    def test_sources_list_strips_blanks(self):
        s = Settings(_env_file=None, enabled_sources=" organic, ,news ")
        assert s.enabled_sources_list == ["organic", "news"]


class TestLoadSettings:
    def test_overrides(self):
        s = load_settings(_env_file=None, environment="production", llm_temperature=0.0)
        assert s.environment == "production"
        assert s.llm_temperature == 0.0

    def test_env_var(self, monkeypatch):
        monkeypatch.setenv("SERPAPI_API_KEY", "from-env")
        s = load_settings(_env_file=None)
        assert s.serpapi_api_key == "from-env"
