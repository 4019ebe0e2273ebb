"""YAML configuration file loader."""

from __future__ import annotations

import logging
from collections import Counter
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError
from ruamel.yaml import YAML

from sonarqube_provisioner.config.schema import Config, ProviderConfig

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from sonarqube_provisioner.resources.base import Resource


class ConfigError(Exception):
    """Raised for configuration loading / validation errors."""


def _load_provider(raw_provider: Any, config_dir: Path) -> ProviderConfig:
    """Build connection settings for the file in *config_dir*.

    Values set in YAML win over ``SONAR_*`` environment variables, which win
    over a ``.env`` file next to the configuration file.
    """
    if raw_provider is None:
        raw_provider = {}
    if not isinstance(raw_provider, dict):
        raise ConfigError("provider: expected a mapping")
    explicit = {k: v for k, v in raw_provider.items() if v is not None}
    return ProviderConfig(_env_file=config_dir / ".env", **explicit)


def _duplicate_addresses(resources: list[Resource]) -> list[str]:
    counts = Counter(r.address for r in resources)
    return [f"Duplicate resource address '{a}'" for a, n in counts.items() if n > 1]


def load_config(path: Path | str) -> Config:
    """Load a YAML configuration file and return a ``Config`` object.

    Selector rules are not checked here; see ``sonarqube_provisioner.config.validate``.

    Raises:
        ConfigError: On unreadable YAML, schema violations or duplicate addresses.
    """
    path = Path(path)

    try:
        raw = YAML(typ="safe").load(path)
    except Exception as exc:
        raise ConfigError(f"Failed to read {path}: {exc}") from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"{path}: expected a mapping at the top level")

    try:
        provider = _load_provider(raw.get("provider"), path.parent)
        config = Config.model_validate({**raw, "provider": provider, "config_dir": path.parent})
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc

    errors = _duplicate_addresses(config.resources)
    if errors:
        raise ConfigError("\n".join(errors))

    logger.info("Loaded %s: %d declarations", path, len(config.resources))
    return config
