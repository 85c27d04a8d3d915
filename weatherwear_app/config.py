"""Configuration helpers for the WeatherWear app."""

from dataclasses import dataclass
from pathlib import Path
import os
from typing import Optional

DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"
DEFAULT_GEMINI_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_WEATHER_ENDPOINT = "https://api.weatherapi.com/v1"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class AppConfig:
    """Configuration values for the WeatherWear app.

    Every remote call shares one fixed timeout and is never retried; the user
    re-triggers the action instead.
    """

    gemini_api_key: Optional[str] = None
    weather_api_key: Optional[str] = None
    model: str = DEFAULT_GEMINI_MODEL
    gemini_endpoint: str = DEFAULT_GEMINI_ENDPOINT
    weather_endpoint: str = DEFAULT_WEATHER_ENDPOINT
    reasoning_backend: str = "rest"
    request_timeout_seconds: float = 10.0
    suggestion_debounce_ms: int = 300
    suggestion_min_chars: int = 2
    strict_garments: bool = True
    outfit_db_path: Optional[str] = None
    accounts_path: Optional[str] = None
    environment: str | None = None

    @property
    def suggestion_debounce_seconds(self) -> float:
        return self.suggestion_debounce_ms / 1000

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Build a config from environment variables or an environment YAML file.

        Environment specific YAML lives in ``config/environments/<env>.yaml`` by
        default and is merged with environment variables so that API keys can be
        injected by the runtime environment.
        """

        env_name = os.getenv("APP_ENV")
        config_path = os.getenv("APP_CONFIG_PATH")
        config_dir = Path(os.getenv("WEATHERWEAR_CONFIG_DIR", "config/environments"))
        yaml_config: dict = {}

        if config_path:
            path = Path(config_path)
        elif env_name:
            path = config_dir / f"{env_name}.yaml"
        else:
            path = None

        if path and path.exists():
            yaml_config = cls._load_yaml_config(path)

        def get_value(key: str, default: Optional[str] = None) -> Optional[str]:
            env_key = key.upper()
            return os.getenv(env_key, yaml_config.get(key, default))

        timeout = get_value("request_timeout_seconds", "10.0")
        debounce_ms = get_value("suggestion_debounce_ms", "300")
        min_chars = get_value("suggestion_min_chars", "2")
        strict = get_value("strict_garments", "true")

        return cls(
            gemini_api_key=get_value("gemini_api_key"),
            weather_api_key=get_value("weather_api_key"),
            model=str(get_value("model", DEFAULT_GEMINI_MODEL) or DEFAULT_GEMINI_MODEL),
            gemini_endpoint=str(get_value("gemini_endpoint", DEFAULT_GEMINI_ENDPOINT)),
            weather_endpoint=str(get_value("weather_endpoint", DEFAULT_WEATHER_ENDPOINT)),
            reasoning_backend=str(get_value("reasoning_backend", "rest") or "rest").lower(),
            request_timeout_seconds=float(timeout or 10.0),
            suggestion_debounce_ms=int(debounce_ms or 300),
            suggestion_min_chars=int(min_chars or 2),
            strict_garments=str(strict).strip().lower() in _TRUTHY,
            outfit_db_path=get_value("outfit_db_path"),
            accounts_path=get_value("accounts_path"),
            environment=env_name,
        )

    @staticmethod
    def _load_yaml_config(path: Path) -> dict:
        """Parse a minimal flat ``key: value`` YAML file."""

        config: dict[str, str] = {}
        for line in path.read_text().splitlines():
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            if ":" not in stripped:
                continue
            key, raw_value = stripped.split(":", 1)
            value = raw_value.strip()
            if (value.startswith("\"") and value.endswith("\"")) or (
                value.startswith("'") and value.endswith("'")
            ):
                value = value[1:-1]
            config[key.strip()] = value
        return config
