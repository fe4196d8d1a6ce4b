"""Tests for the configuration loader and API key resolution."""

import json
from pathlib import Path

import pytest

from anchor.config import (
    PLACEHOLDER_API_KEY,
    ProviderConfig,
    get_api_key,
    load_config,
    usable_api_key,
)


def test_load_config_success(test_config_path: str) -> None:
    """Loading a valid config file returns a populated AnchorConfig."""
    config = load_config(test_config_path)

    assert config.provider.name == "test-provider"
    assert config.provider.base_url == "https://api.example.com/v1"
    assert config.provider.model == "test-model"
    assert config.provider.timeout_seconds == 5.0
    assert config.generation.temperature == 0.7
    assert config.generation.max_tokens == 1024
    assert config.generation.top_p == 1.0
    assert config.generation.stop is None


def test_load_config_defaults(tmp_path: Path) -> None:
    """An empty object falls back to the Groq defaults."""
    path = tmp_path / "empty.json"
    path.write_text("{}")

    config = load_config(path)

    assert config.provider.completions_url == (
        "https://api.groq.com/openai/v1/chat/completions"
    )
    assert config.provider.model == "llama3-8b-8192"
    assert config.provider.api_key_env == "GROQ_API_KEY"
    assert config.provider.timeout_seconds == 30.0
    assert config.generation.max_tokens == 1024


def test_example_config_loads() -> None:
    path = Path(__file__).resolve().parent.parent / "config" / "example.config.json"
    config = load_config(path)
    assert config.provider.model == "llama3-8b-8192"


def test_load_config_missing_file() -> None:
    """Loading from a nonexistent path raises FileNotFoundError."""
    with pytest.raises(FileNotFoundError):
        load_config("/tmp/nonexistent_anchor_config.json")


def test_load_config_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json")
    with pytest.raises(ValueError, match="not valid JSON"):
        load_config(path)


def test_load_config_bad_generation(tmp_path: Path) -> None:
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"generation": {"max_tokens": "lots"}}))
    with pytest.raises(ValueError, match="Invalid generation parameters"):
        load_config(path)


@pytest.mark.parametrize("stop", ["\n", ["\n", "END"], None])
def test_load_config_stop_sequences(tmp_path: Path, stop) -> None:
    path = tmp_path / "stop.json"
    path.write_text(json.dumps({"generation": {"stop": stop}}))

    assert load_config(path).generation.stop == stop


@pytest.mark.parametrize("stop", [7, ["\n", 3], {"seq": "\n"}])
def test_load_config_rejects_bad_stop(tmp_path: Path, stop) -> None:
    """A malformed stop value fails at load time rather than on every request."""
    path = tmp_path / "stop.json"
    path.write_text(json.dumps({"generation": {"stop": stop}}))

    with pytest.raises(ValueError, match="Invalid generation parameters"):
        load_config(path)


def test_completions_url_strips_trailing_slash() -> None:
    provider = ProviderConfig(base_url="https://api.example.com/v1/")
    assert provider.completions_url == "https://api.example.com/v1/chat/completions"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("sk-live", "sk-live"),
        ("  sk-live\n", "sk-live"),
        ("", None),
        ("   ", None),
        (PLACEHOLDER_API_KEY, None),
        (None, None),
    ],
)
def test_usable_api_key(raw, expected) -> None:
    assert usable_api_key(raw) == expected


def test_api_key_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """The environment variable wins over the secrets file."""
    secrets = tmp_path / "secrets.yaml"
    secrets.write_text("GroqAPIKey: sk-from-file\n")
    monkeypatch.setenv("GROQ_API_KEY", "sk-from-env")

    assert get_api_key(ProviderConfig(), str(secrets)) == "sk-from-env"


def test_api_key_from_secrets_file(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    secrets = tmp_path / "secrets.yaml"
    secrets.write_text("GroqAPIKey: sk-from-file\n")
    monkeypatch.delenv("GROQ_API_KEY", raising=False)

    assert get_api_key(ProviderConfig(), str(secrets)) == "sk-from-file"


def test_api_key_placeholder_in_secrets_file(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    secrets = tmp_path / "secrets.yaml"
    secrets.write_text("GroqAPIKey: YOUR_GROQ_API_KEY\n")
    monkeypatch.delenv("GROQ_API_KEY", raising=False)

    assert get_api_key(ProviderConfig(), str(secrets)) is None
    assert "placeholder" in caplog.text


def test_api_key_placeholder_in_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GROQ_API_KEY", PLACEHOLDER_API_KEY)
    assert get_api_key(ProviderConfig()) is None


def test_api_key_missing_from_secrets_file(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    secrets = tmp_path / "secrets.yaml"
    secrets.write_text("OtherKey: sk-other\n")
    monkeypatch.delenv("GROQ_API_KEY", raising=False)

    assert get_api_key(ProviderConfig(), str(secrets)) is None


def test_api_key_unreadable_secrets_file(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    secrets = tmp_path / "secrets.yaml"
    secrets.write_text("GroqAPIKey: [unterminated\n")
    monkeypatch.delenv("GROQ_API_KEY", raising=False)

    assert get_api_key(ProviderConfig(), str(secrets)) is None


def test_api_key_no_source(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GROQ_API_KEY", raising=False)
    assert get_api_key(ProviderConfig(), "/tmp/nonexistent_anchor_secrets.yaml") is None


def test_config_get_api_key(
    test_config_path: str, monkeypatch: pytest.MonkeyPatch
) -> None:
    """AnchorConfig.get_api_key resolves through the configured provider."""
    monkeypatch.setenv("TEST_API_KEY", "sk-test-12345")
    config = load_config(test_config_path)
    assert config.get_api_key() == "sk-test-12345"
