import logging

import config
from config import OnboardingSettings, load_settings


def test_defaults_without_environment() -> None:
    settings = load_settings({})

    assert settings == OnboardingSettings()
    assert settings.api_base_url == "http://localhost:8000/api"
    assert settings.auto_advance_delay_ms == 500
    assert settings.completion_redirect_delay_ms == 1000
    assert settings.status_poll_interval_ms * settings.status_poll_max_attempts == 2000
    assert settings.debug is False


def test_environment_overrides() -> None:
    settings = load_settings(
        {
            "ONBOARDING_API_BASE_URL": "https://api.example.test/v1/ ",
            "ONBOARDING_API_TOKEN": " secret ",
            "ONBOARDING_API_TIMEOUT": "2.5",
            "ONBOARDING_API_MAX_TRIES": "5",
            "AUTO_ADVANCE_DELAY_MS": "0",
            "STATUS_POLL_MAX_ATTEMPTS": "3",
            "ONBOARDING_DEBUG": "Yes",
        }
    )

    assert settings.api_base_url == "https://api.example.test/v1"
    assert settings.api_token == "secret"
    assert settings.api_timeout == 2.5
    assert settings.api_max_tries == 5
    assert settings.auto_advance_delay_ms == 0
    assert settings.status_poll_max_attempts == 3
    assert settings.debug is True


def test_invalid_values_fall_back_with_warning(caplog) -> None:
    with caplog.at_level(logging.WARNING):
        settings = load_settings(
            {
                "ONBOARDING_API_TIMEOUT": "soon",
                "ONBOARDING_API_MAX_TRIES": "0",
                "COMPLETION_REDIRECT_DELAY_MS": "-5",
                "STATUS_POLL_INTERVAL_MS": "fast",
            }
        )

    assert settings.api_timeout == config.DEFAULT_API_TIMEOUT
    assert settings.api_max_tries == config.DEFAULT_API_MAX_TRIES
    assert settings.completion_redirect_delay_ms == config.DEFAULT_COMPLETION_REDIRECT_DELAY_MS
    assert settings.status_poll_interval_ms == config.DEFAULT_STATUS_POLL_INTERVAL_MS
    assert "ONBOARDING_API_TIMEOUT" in caplog.text
    assert "STATUS_POLL_INTERVAL_MS" in caplog.text


def test_module_constants_mirror_settings() -> None:
    assert config.AUTO_ADVANCE_DELAY_MS == config.SETTINGS.auto_advance_delay_ms
    assert config.STATUS_POLL_MAX_ATTEMPTS == config.SETTINGS.status_poll_max_attempts
