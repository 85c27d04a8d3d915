"""Configuration loading from YAML and environment variables."""

from __future__ import annotations

from pathlib import Path

import pytest

from weatherwear_app.config import AppConfig

_KEYS = [
    "APP_ENV",
    "APP_CONFIG_PATH",
    "WEATHERWEAR_CONFIG_DIR",
    "GEMINI_API_KEY",
    "WEATHER_API_KEY",
    "MODEL",
    "REASONING_BACKEND",
    "REQUEST_TIMEOUT_SECONDS",
    "SUGGESTION_DEBOUNCE_MS",
    "SUGGESTION_MIN_CHARS",
    "STRICT_GARMENTS",
    "OUTFIT_DB_PATH",
    "ACCOUNTS_PATH",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults() -> None:
    config = AppConfig.from_env()

    assert config.model == "gemini-2.0-flash"
    assert config.reasoning_backend == "rest"
    assert config.request_timeout_seconds == 10.0
    assert config.suggestion_debounce_seconds == pytest.approx(0.3)
    assert config.suggestion_min_chars == 2
    assert config.strict_garments is True
    assert config.environment is None


def test_environment_yaml_is_loaded(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    (tmp_path / "staging.yaml").write_text(
        "# staging\n"
        "weather_api_key: \"weather-secret\"\n"
        "model: gemini-1.5-pro\n"
        "strict_garments: false\n"
        "suggestion_debounce_ms: 150\n"
    )
    monkeypatch.setenv("APP_ENV", "staging")
    monkeypatch.setenv("WEATHERWEAR_CONFIG_DIR", str(tmp_path))

    config = AppConfig.from_env()

    assert config.environment == "staging"
    assert config.weather_api_key == "weather-secret"
    assert config.model == "gemini-1.5-pro"
    assert config.strict_garments is False
    assert config.suggestion_debounce_seconds == pytest.approx(0.15)


def test_environment_variables_override_yaml(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    path = tmp_path / "custom.yaml"
    path.write_text("reasoning_backend: rest\nrequest_timeout_seconds: 5\n")
    monkeypatch.setenv("APP_CONFIG_PATH", str(path))
    monkeypatch.setenv("REASONING_BACKEND", "SDK")
    monkeypatch.setenv("GEMINI_API_KEY", "gemini-secret")

    config = AppConfig.from_env()

    assert config.reasoning_backend == "sdk"
    assert config.request_timeout_seconds == 5.0
    assert config.gemini_api_key == "gemini-secret"
