"""Shared test fixtures for the Anchor guidance service tests."""

import json
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from anchor.client import GuidanceClient
from anchor.config import AnchorConfig, load_config


def _make_config(tmp_path: Path, overrides: Optional[Dict] = None) -> str:
    """Write a minimal test config and return its path."""
    config = {
        "provider": {
            "name": "test-provider",
            "base_url": "https://api.example.com/v1",
            "api_key_env": "TEST_API_KEY",
            "api_key_secret": "TestAPIKey",
            "model": "test-model",
            "timeout_seconds": 5,
        },
        "generation": {
            "temperature": 0.7,
            "max_tokens": 1024,
            "top_p": 1,
        },
        "secrets_file": str(tmp_path / "secrets.yaml"),
        "log_file": str(tmp_path / "test.log"),
    }
    if overrides:
        config.update(overrides)

    path = tmp_path / "test_config.json"
    path.write_text(json.dumps(config))
    return str(path)


@pytest.fixture()
def test_config_path(tmp_path: Path) -> str:
    """Return the path to a temporary test config file."""
    return _make_config(tmp_path)


@pytest.fixture()
def test_config(test_config_path: str, monkeypatch: pytest.MonkeyPatch) -> AnchorConfig:
    """Return a loaded test AnchorConfig with no key in the environment."""
    monkeypatch.delenv("TEST_API_KEY", raising=False)
    return load_config(test_config_path)


@pytest.fixture()
def sent() -> List[httpx.Request]:
    """Requests seen by the mock transport, in order."""
    return []


@pytest.fixture()
def make_client(
    test_config: AnchorConfig, sent: List[httpx.Request]
) -> Callable[..., GuidanceClient]:
    """Return a factory for clients backed by a recording MockTransport.

    ``handler`` receives each httpx.Request and returns an httpx.Response
    (or raises, or returns a coroutine).
    """

    def factory(
        handler: Callable[[httpx.Request], Any],
        api_key: Optional[str] = "sk-test-12345",
    ) -> GuidanceClient:
        def record(request: httpx.Request) -> Any:
            sent.append(request)
            return handler(request)

        return GuidanceClient(
            test_config,
            key_source=lambda: api_key,
            transport=httpx.MockTransport(record),
        )

    return factory
