"""Configuration loader for the Anchor guidance service.

Reads a JSON config file describing the chat-completion provider and the
generation parameters. The provider API key is resolved from an environment
variable first and then from a YAML secrets file.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

_logger = logging.getLogger("anchor")

# Value shipped in config/secrets.example.yaml; never a real key.
PLACEHOLDER_API_KEY = "YOUR_GROQ_API_KEY"


@dataclass
class ProviderConfig:
    """Configuration for the chat-completion provider."""

    name: str = "groq"
    base_url: str = "https://api.groq.com/openai/v1"
    api_key_env: str = "GROQ_API_KEY"
    api_key_secret: str = "GroqAPIKey"
    model: str = "llama3-8b-8192"
    timeout_seconds: float = 30.0

    @property
    def api_key(self) -> Optional[str]:
        """Resolve the API key from the environment variable."""
        return os.getenv(self.api_key_env)

    @property
    def completions_url(self) -> str:
        return "{}/chat/completions".format(self.base_url.rstrip("/"))


@dataclass
class GenerationConfig:
    """Sampling parameters sent with every completion request."""

    temperature: float = 0.7
    max_tokens: int = 1024
    top_p: float = 1.0
    stop: Optional[Union[str, List[str]]] = None


@dataclass
class AnchorConfig:
    """Top-level service configuration."""

    provider: ProviderConfig = field(default_factory=ProviderConfig)
    generation: GenerationConfig = field(default_factory=GenerationConfig)
    secrets_file: Optional[str] = "config/secrets.yaml"
    log_file: str = "logs/anchor.log"

    def get_api_key(self) -> Optional[str]:
        """Return a usable provider API key, or None if none is configured."""
        return get_api_key(self.provider, self.secrets_file)


def usable_api_key(value: Optional[str]) -> Optional[str]:
    """Return ``value`` stripped, or None if it is empty or the placeholder."""
    if value is None:
        return None
    key = value.strip()
    if not key or key == PLACEHOLDER_API_KEY:
        return None
    return key


def _read_secret(secrets_file: str, name: str) -> Optional[str]:
    path = Path(secrets_file)
    if not path.exists():
        _logger.error("Secrets file not found: %s", path)
        return None

    try:
        with open(path, "r") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        _logger.error("Secrets file %s could not be read: %s", path, exc)
        return None

    if not isinstance(raw, dict) or not isinstance(raw.get(name), str):
        _logger.error("'%s' not found in secrets file %s.", name, path)
        return None

    return raw[name]


def get_api_key(
    provider: ProviderConfig, secrets_file: Optional[str] = None
) -> Optional[str]:
    """Resolve the provider API key.

    The environment variable named by ``provider.api_key_env`` wins; when it
    is unset the key is read from ``secrets_file`` under
    ``provider.api_key_secret``.

    Args:
        provider: Provider configuration.
        secrets_file: Optional path to a YAML mapping of secret names to values.

    Returns:
        The key, or None if it is missing, empty, or still the placeholder.
    """
    raw = provider.api_key
    source = "environment variable {}".format(provider.api_key_env)

    if raw is None and secrets_file:
        raw = _read_secret(secrets_file, provider.api_key_secret)
        source = "secrets file {}".format(secrets_file)

    if raw is None:
        _logger.error(
            "No API key configured. Set %s or add '%s' to the secrets file.",
            provider.api_key_env,
            provider.api_key_secret,
        )
        return None

    key = usable_api_key(raw)
    if key is None:
        _logger.error(
            "Please replace the placeholder API key in the %s with your actual key.",
            source,
        )
    return key


def _parse_stop(value: Any) -> Optional[Union[str, List[str]]]:
    """Accept a stop sequence as null, a string, or a list of strings."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, list) and all(isinstance(s, str) for s in value):
        return value
    raise ValueError("stop must be a string or a list of strings")


def load_config(path: Union[str, Path]) -> AnchorConfig:
    """Load service configuration from a JSON file.

    Args:
        path: Path to the JSON config file.

    Returns:
        A fully resolved AnchorConfig instance.

    Raises:
        FileNotFoundError: If the config file does not exist.
        ValueError: If the config file contains invalid data.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        try:
            raw: Dict[str, Any] = json.load(f)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Config file is not valid JSON: {path}") from exc

    if not isinstance(raw, dict):
        raise ValueError("Config file must contain a JSON object at the top level")

    defaults = ProviderConfig()
    provider_raw = raw.get("provider", {})
    provider = ProviderConfig(
        name=provider_raw.get("name", defaults.name),
        base_url=provider_raw.get("base_url", defaults.base_url),
        api_key_env=provider_raw.get("api_key_env", defaults.api_key_env),
        api_key_secret=provider_raw.get("api_key_secret", defaults.api_key_secret),
        model=provider_raw.get("model", defaults.model),
        timeout_seconds=float(
            provider_raw.get("timeout_seconds", defaults.timeout_seconds)
        ),
    )

    generation_raw = raw.get("generation", {})
    try:
        generation = GenerationConfig(
            temperature=float(generation_raw.get("temperature", 0.7)),
            max_tokens=int(generation_raw.get("max_tokens", 1024)),
            top_p=float(generation_raw.get("top_p", 1.0)),
            stop=_parse_stop(generation_raw.get("stop")),
        )
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid generation parameters: {exc}") from exc

    return AnchorConfig(
        provider=provider,
        generation=generation,
        secrets_file=raw.get("secrets_file", "config/secrets.yaml"),
        log_file=raw.get("log_file", "logs/anchor.log"),
    )
