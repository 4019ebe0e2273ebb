"""Shared fixtures for unit tests."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from unittest.mock import MagicMock

import pytest

from sonarqube_provisioner.config import load
from sonarqube_provisioner.core import SonarQubeClient, SonarQubeProvider
from sonarqube_provisioner.engine.handlers import EngineContext

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from sonarqube_provisioner.config.schema import Config

BASE_URL = "https://sonar.example.com"

_SONAR_ENV_VARS = (
    "SONAR_HOST",
    "SONAR_TOKEN",
    "SONAR_USER",
    "SONAR_PASSWORD",
    "SONAR_EDITION",
    "SONAR_VERSION",
    "SONAR_VERIFY_SSL",
    "SONAR_LOG",
)


@pytest.fixture(autouse=True)
def _clean_sonar_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove SONAR_* env vars so unit tests don't leak host config."""
    for var in _SONAR_ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def make_config(tmp_path: Path) -> Callable[..., Config]:
    """Factory fixture: write YAML + optional .env, return loaded Config."""

    def _make(yaml_str: str, *, dotenv: str | None = None) -> Config:
        (tmp_path / "config.yaml").write_text(yaml_str)
        if dotenv is not None:
            (tmp_path / ".env").write_text(dotenv)
        return load(tmp_path / "config.yaml")

    return _make


@pytest.fixture
def respond() -> Callable[..., MagicMock]:
    """Factory fixture: build a fake ``requests.Response``."""

    def _make(status: int = 204, body: Any = None, text: str = "") -> MagicMock:
        resp = MagicMock()
        resp.status_code = status
        resp.text = text
        if body is None:
            resp.json.side_effect = ValueError("Expecting value")
        else:
            resp.json.return_value = body
        return resp

    return _make


@pytest.fixture
def session() -> MagicMock:
    return MagicMock()


@pytest.fixture
def client(session: MagicMock) -> SonarQubeClient:
    return SonarQubeClient(BASE_URL, session=session)


@pytest.fixture
def ctx(client: SonarQubeClient) -> EngineContext:
    provider = SonarQubeProvider.from_client(client, edition="developer", version="10.4")
    return EngineContext(provider=provider)
