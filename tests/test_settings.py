"""Tests for configuration and source wiring."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from visconnect.datasource import MockTournamentSource, VisSource, create_tournament_source
from visconnect.settings import Settings, load_settings


class TestSettings:
    """Test environment-driven settings."""

    def test_defaults(self):
        settings = load_settings({})

        assert settings.vis_api_url.startswith("https://")
        assert settings.rate_limit_rpm == 60
        assert settings.max_retries == 3
        assert settings.circuit_breaker_threshold == 5
        assert settings.port == 3001
        assert settings.is_demo is True

    def test_env_names_and_coercion(self):
        settings = load_settings(
            {
                "VIS_API_KEY": "secret",
                "REQUEST_TIMEOUT": "2.5",
                "RATE_LIMIT_MAX_REQUESTS": "120",
                "CIRCUIT_BREAKER_COOLDOWN": "30",
                "LOG_LEVEL": "DEBUG",
                "UNRELATED": "ignored",
            }
        )

        assert settings.vis_api_key == "secret"
        assert settings.request_timeout == 2.5
        assert settings.rate_limit_rpm == 120
        assert settings.circuit_breaker_cooldown == 30.0
        assert settings.log_level == "DEBUG"
        assert settings.is_demo is False

    def test_demo_mode_flag(self):
        assert load_settings({"VIS_API_KEY": "secret", "DEMO_MODE": "true"}).is_demo is True

    def test_api_key_hidden_from_repr(self):
        assert "secret" not in repr(load_settings({"VIS_API_KEY": "secret"}))

    @pytest.mark.parametrize(
        "name, value",
        [("RATE_LIMIT_MAX_REQUESTS", "0"), ("MAX_RETRIES", "-1"), ("REQUEST_TIMEOUT", "abc")],
    )
    def test_invalid_values_rejected(self, name, value):
        with pytest.raises(ValidationError):
            load_settings({name: value})


class TestSourceFactory:
    """Test choosing and wiring the tournament source."""

    def test_demo_source_without_key(self):
        source = create_tournament_source(Settings())
        assert isinstance(source, MockTournamentSource)

    def test_vis_source_wired_from_settings(self, clock):
        settings = Settings(
            vis_api_key="secret",
            rate_limit_rpm=30,
            request_queue_max_size=5,
            max_retries=2,
            retry_base_delay=0.5,
            circuit_breaker_threshold=4,
            circuit_breaker_cooldown=15,
            cache_max_size=10,
        )

        source = create_tournament_source(settings, clock=clock)

        assert isinstance(source, VisSource)
        client = source.client
        assert client.clock is clock
        assert client.request_queue.min_interval == 2.0
        assert client.retry_policy.max_retries == 2
        assert client.retry_policy.base_delay == 0.5
        assert client.circuit_breaker.config.failure_threshold == 4
        assert client.circuit_breaker.config.reset_timeout == timedelta(seconds=15)
        assert client.cache.get_stats().max_size == 10
