"""Configuration helpers for the barn tracker."""

from dataclasses import dataclass
from pathlib import Path
import os
from typing import Callable, Optional, TypeVar

DEFAULT_VISION_MODEL = "gemini-1.5-flash"
DEFAULT_LATITUDE = 32.9427
DEFAULT_LONGITUDE = -117.1837
DEFAULT_DATABASE_PATH = "data/barn.db"

T = TypeVar("T")


def _parse_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"not a boolean: {raw!r}")


@dataclass
class BarnConfig:
    """Configuration values for the barn tracker.

    The barn location is configuration rather than a hard-coded constant so
    that the weather lookup and every blanketing calculation can be pointed at
    a different stable without code changes.
    """

    openweather_api_key: Optional[str] = None
    google_api_key: Optional[str] = None
    vision_model: str = DEFAULT_VISION_MODEL
    barn_latitude: float = DEFAULT_LATITUDE
    barn_longitude: float = DEFAULT_LONGITUDE
    database_path: str = DEFAULT_DATABASE_PATH
    weather_timeout_seconds: float = 5.0
    restore_streak_on_revert: bool = True
    environment: str | None = None

    @classmethod
    def from_env(cls) -> "BarnConfig":
        """Build a config from environment variables or an environment YAML file.

        Environment specific YAML lives in ``config/environments/<env>.yaml`` by
        default and is merged with environment variables so that secrets can be
        injected by the runtime environment.
        """

        env_name = os.getenv("APP_ENV")
        config_path = os.getenv("APP_CONFIG_PATH")
        config_dir = Path(os.getenv("BARN_CONFIG_DIR", "config/environments"))
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

        def get_typed(key: str, parse: Callable[[str], T], default: T) -> T:
            raw = get_value(key)
            if raw is None or raw == "":
                return default
            try:
                return parse(raw)
            except ValueError as exc:
                raise ValueError(f"Invalid value for {key}: {raw!r}") from exc

        return cls(
            openweather_api_key=get_value("openweather_api_key"),
            google_api_key=get_value("google_api_key"),
            vision_model=str(get_value("vision_model") or DEFAULT_VISION_MODEL),
            barn_latitude=get_typed("barn_latitude", float, DEFAULT_LATITUDE),
            barn_longitude=get_typed("barn_longitude", float, DEFAULT_LONGITUDE),
            database_path=str(get_value("database_path") or DEFAULT_DATABASE_PATH),
            weather_timeout_seconds=get_typed("weather_timeout_seconds", float, 5.0),
            restore_streak_on_revert=get_typed("restore_streak_on_revert", _parse_bool, True),
            environment=env_name,
        )

    @staticmethod
    def _load_yaml_config(path: Path) -> dict:
        """Parse a minimal ``key: value`` config file."""

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
