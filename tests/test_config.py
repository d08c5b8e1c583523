"""Configuration loading and validation."""

from pathlib import Path

import pytest

from lostfound_app.config import DEFAULT_GEMINI_MODEL, AppConfig, MatchingConfig
from models.errors import ConfigurationFailure

_ENV_KEYS = [
    "APP_ENV",
    "APP_CONFIG_PATH",
    "LOSTFOUND_CONFIG_DIR",
    "IMAGE_SIMILARITY_WEIGHT",
    "TEXT_SIMILARITY_WEIGHT",
    "METADATA_SIMILARITY_WEIGHT",
    "MATCHING_CONFIDENCE_THRESHOLD",
    "MATCHING_MAX_CONCURRENCY",
    "COLLABORATOR_TIMEOUT_SECONDS",
    "MATCHING_CANDIDATE_LIMIT",
    "GEMINI_API_KEY",
    "GOOGLE_API_KEY",
    "GEMINI_MODEL",
    "USE_CLOUD_VISION",
    "PROJECT_ID",
]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults() -> None:
    config = AppConfig.from_env()
    assert config.matching == MatchingConfig()
    assert config.matching.image_weight == 0.4
    assert config.matching.text_weight == 0.4
    assert config.matching.metadata_weight == 0.2
    assert config.matching.confidence_threshold == 0.6
    assert config.matching.max_concurrency == 4
    assert config.model == DEFAULT_GEMINI_MODEL
    assert config.api_key is None
    assert config.use_cloud_vision is False


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("IMAGE_SIMILARITY_WEIGHT", "0.5")
    monkeypatch.setenv("TEXT_SIMILARITY_WEIGHT", "0.3")
    monkeypatch.setenv("MATCHING_CONFIDENCE_THRESHOLD", "0.7")
    monkeypatch.setenv("MATCHING_MAX_CONCURRENCY", "2")
    monkeypatch.setenv("METADATA_SIMILARITY_WEIGHT", "   ")
    monkeypatch.setenv("GOOGLE_API_KEY", "key-123")
    monkeypatch.setenv("USE_CLOUD_VISION", "true")

    config = AppConfig.from_env()

    assert config.matching.image_weight == 0.5
    assert config.matching.text_weight == 0.3
    assert config.matching.metadata_weight == 0.2
    assert config.matching.confidence_threshold == 0.7
    assert config.matching.max_concurrency == 2
    assert config.api_key == "key-123"
    assert config.use_cloud_vision is True


def test_file_values_apply_below_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    env_dir = tmp_path / "environments"
    env_dir.mkdir()
    (env_dir / "staging.yaml").write_text(
        "# staging matcher settings\n"
        "image_weight: 0.3\n"
        "confidence_threshold: '0.65'\n"
        "gemini_model: \"models/gemini-test\"\n"
    )
    monkeypatch.setenv("APP_ENV", "staging")
    monkeypatch.setenv("LOSTFOUND_CONFIG_DIR", str(env_dir))
    monkeypatch.setenv("MATCHING_CONFIDENCE_THRESHOLD", "0.55")

    config = AppConfig.from_env()

    assert config.environment == "staging"
    assert config.matching.image_weight == 0.3
    assert config.matching.confidence_threshold == 0.55
    assert config.model == "models/gemini-test"


def test_non_numeric_weight_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TEXT_SIMILARITY_WEIGHT", "heavy")
    with pytest.raises(ConfigurationFailure):
        AppConfig.from_env()


@pytest.mark.parametrize("value", [float("nan"), float("inf"), True, "nan", None])
def test_non_finite_or_non_numeric_values_are_rejected(value) -> None:
    with pytest.raises(ConfigurationFailure):
        MatchingConfig(confidence_threshold=value)


def test_out_of_range_weights_are_accepted() -> None:
    config = MatchingConfig(image_weight=1.5, text_weight=-0.2)
    assert config.image_weight == 1.5
    assert config.text_weight == -0.2


@pytest.mark.parametrize("workers", [0, -1, 2.5])
def test_max_concurrency_must_be_a_positive_integer(workers) -> None:
    with pytest.raises(ConfigurationFailure):
        MatchingConfig(max_concurrency=workers)


def test_timeout_must_be_positive() -> None:
    with pytest.raises(ConfigurationFailure):
        MatchingConfig(collaborator_timeout_seconds=0)


def test_candidate_limit_defaults_to_fifty_and_reads_env(monkeypatch) -> None:
    assert MatchingConfig().candidate_limit == 50

    monkeypatch.setenv("MATCHING_CANDIDATE_LIMIT", "10")
    assert AppConfig.from_env().matching.candidate_limit == 10

    with pytest.raises(ConfigurationFailure):
        MatchingConfig(candidate_limit=0)
