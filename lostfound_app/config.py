"""Configuration helpers for the lost & found matcher."""

from dataclasses import dataclass, field
from pathlib import Path
import math
import os
from typing import Dict, Optional

from models.errors import ConfigurationFailure

DEFAULT_GEMINI_MODEL = "models/gemini-1.5-flash-002"


def _finite_number(name: str, value: object) -> float:
    """Return ``value`` as a finite float or raise :class:`ConfigurationFailure`."""

    if isinstance(value, bool):
        raise ConfigurationFailure(f"{name} must be a number, got a boolean")
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError as exc:
            raise ConfigurationFailure(f"{name} must be numeric, got {value!r}") from exc
    if not isinstance(value, (int, float)):
        raise ConfigurationFailure(f"{name} must be numeric, got {type(value).__name__}")
    number = float(value)
    if not math.isfinite(number):
        raise ConfigurationFailure(f"{name} must be finite, got {value!r}")
    return number


@dataclass(frozen=True)
class MatchingConfig:
    """Weights and threshold consumed by the scorer and orchestrator.

    Weights need not sum to one and are not range-checked; only the composite
    confidence is clamped.
    """

    image_weight: float = 0.4
    text_weight: float = 0.4
    metadata_weight: float = 0.2
    confidence_threshold: float = 0.6
    max_concurrency: int = 4
    collaborator_timeout_seconds: float = 30.0
    candidate_limit: int = 50

    def __post_init__(self) -> None:
        for name in ("image_weight", "text_weight", "metadata_weight", "confidence_threshold"):
            object.__setattr__(self, name, _finite_number(name, getattr(self, name)))

        for name in ("max_concurrency", "candidate_limit"):
            raw = getattr(self, name)
            number = _finite_number(name, raw)
            if number < 1 or number != int(number):
                raise ConfigurationFailure(f"{name} must be a positive integer, got {raw!r}")
            object.__setattr__(self, name, int(number))

        timeout = _finite_number("collaborator_timeout_seconds", self.collaborator_timeout_seconds)
        if timeout <= 0:
            raise ConfigurationFailure("collaborator_timeout_seconds must be positive")
        object.__setattr__(self, "collaborator_timeout_seconds", timeout)


# Config key -> environment variable. Weight names follow the deployed functions.
_MATCHING_ENV_KEYS = {
    "image_weight": "IMAGE_SIMILARITY_WEIGHT",
    "text_weight": "TEXT_SIMILARITY_WEIGHT",
    "metadata_weight": "METADATA_SIMILARITY_WEIGHT",
    "confidence_threshold": "MATCHING_CONFIDENCE_THRESHOLD",
    "max_concurrency": "MATCHING_MAX_CONCURRENCY",
    "collaborator_timeout_seconds": "COLLABORATOR_TIMEOUT_SECONDS",
    "candidate_limit": "MATCHING_CANDIDATE_LIMIT",
}


@dataclass
class AppConfig:
    """Configuration values for the lost & found app.

    Secrets come from the environment; everything else may also live in an
    environment specific ``key: value`` file.
    """

    matching: MatchingConfig = field(default_factory=MatchingConfig)
    project_id: str = "campus-lost-found-local"
    model: str = DEFAULT_GEMINI_MODEL
    api_key: Optional[str] = None
    use_cloud_vision: bool = False
    environment: str | None = None

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Resolve settings from the process environment over an optional settings file.

        ``APP_CONFIG_PATH`` names the file directly; otherwise ``APP_ENV`` picks
        ``<LOSTFOUND_CONFIG_DIR>/<env>.yaml`` (default ``config/environments``).
        An environment variable that is unset or blank falls through to the file,
        then to the dataclass default.
        """

        env_name = os.getenv("APP_ENV")
        file_values = cls._read_settings_file(cls._settings_path(env_name))

        def lookup(key: str, env_key: str | None = None) -> Optional[str]:
            raw = os.getenv(env_key or key.upper(), "")
            if raw.strip():
                return raw.strip()
            fallback = file_values.get(key, "")
            return fallback.strip() or None

        overrides: Dict[str, str] = {}
        for name, env_key in _MATCHING_ENV_KEYS.items():
            value = lookup(name, env_key)
            if value is not None:
                overrides[name] = value
        matching = MatchingConfig(**overrides)
        vision_flag = (lookup("use_cloud_vision") or "false").lower()

        return cls(
            matching=matching,
            project_id=lookup("project_id") or "campus-lost-found-local",
            model=lookup("gemini_model") or DEFAULT_GEMINI_MODEL,
            api_key=lookup("gemini_api_key") or lookup("google_api_key"),
            use_cloud_vision=vision_flag in {"1", "true", "yes"},
            environment=env_name,
        )

    @staticmethod
    def _settings_path(env_name: str | None) -> Path | None:
        explicit = os.getenv("APP_CONFIG_PATH")
        if explicit:
            return Path(explicit)
        if env_name:
            return Path(os.getenv("LOSTFOUND_CONFIG_DIR", "config/environments")) / f"{env_name}.yaml"
        return None

    @staticmethod
    def _read_settings_file(path: Path | None) -> Dict[str, str]:
        """Read flat ``key: value`` lines; comments, blank lines and nesting are ignored."""

        if path is None or not path.is_file():
            return {}
        settings: Dict[str, str] = {}
        for line in path.read_text(encoding="utf-8").splitlines():
            key, sep, value = line.partition(":")
            key = key.strip()
            if not sep or not key or key.startswith("#") or line[:1].isspace():
                continue
            value = value.strip()
            if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
                value = value[1:-1]
            settings[key] = value
        return settings
