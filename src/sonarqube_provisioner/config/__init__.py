"""YAML configuration loading and convenience reconciliation API."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import SecretStr

from sonarqube_provisioner.config.loader import ConfigError, load_config
from sonarqube_provisioner.config.registry import default_registry
from sonarqube_provisioner.config.schema import Config, ProviderConfig
from sonarqube_provisioner.core.provider import BasicAuth, SonarQubeProvider, TokenAuth
from sonarqube_provisioner.core.state import ResourceInstance, compute_attributes_hash
from sonarqube_provisioner.engine.reconciler import Reconciler

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from pathlib import Path

__all__ = [
    "Config",
    "ConfigError",
    "ProviderConfig",
    "import_resource",
    "load",
    "load_config",
    "provider_from_config",
    "read",
    "reconciler_from_config",
    "validate",
]


def load(path: Path | str) -> Config:
    """Load a YAML configuration file."""
    return load_config(path)


def provider_from_config(config: Config) -> SonarQubeProvider:
    """Build a ``SonarQubeProvider`` from the ``provider`` section."""
    pc = config.provider
    if not pc.host:
        raise ConfigError("provider.host is required (set in YAML or SONAR_HOST env var)")

    auth: TokenAuth | BasicAuth
    if pc.token:
        auth = TokenAuth(token=SecretStr(pc.token))
    elif pc.user and pc.password:
        auth = BasicAuth(user=pc.user, password=SecretStr(pc.password))
    else:
        raise ConfigError(
            "provider.token (SONAR_TOKEN) or provider.user + provider.password is required"
        )
    return SonarQubeProvider(
        host=pc.host,
        auth=auth,
        edition=pc.edition,
        version=pc.version,
        verify_ssl=pc.verify_ssl,
    )


def reconciler_from_config(config: Config) -> Reconciler:
    """Build a ``Reconciler`` from a ``Config`` instance.

    The server edition is resolved here, so an unconfigured edition costs its
    discovery requests once at startup and edition checks never touch the network.
    """
    provider = provider_from_config(config)
    info = provider.server_info
    logger.info("Connected to SonarQube %s edition", info.edition)
    return Reconciler(provider=provider, registry=default_registry())


def validate(config: Config) -> None:
    """Check every declaration's selectors and scopes without contacting the server."""
    reconciler = Reconciler(provider=SonarQubeProvider(), registry=default_registry())
    reconciler.validate(config.resources)


def read(config: Config, address: str, resource_id: str) -> ResourceInstance | None:
    """Refresh the declaration at *address*, tracked under *resource_id*."""
    resource = config.get(address)
    if resource is None:
        raise ConfigError(f"No resource declared at address '{address}'")
    attrs = resource.attributes()
    prior = ResourceInstance(
        id=resource_id,
        resource_type=resource.resource_type,
        name=resource.name,
        attributes=attrs,
        attributes_hash=compute_attributes_hash(attrs),
    )
    return reconciler_from_config(config).read(prior)


def import_resource(
    config: Config, resource_type: str, resource_id: str, *, name: str
) -> ResourceInstance:
    """Adopt an existing server object by its identity string."""
    registry = default_registry()
    if resource_type not in registry:
        known = ", ".join(registry)
        raise ConfigError(f"Unknown resource type '{resource_type}' (expected one of: {known})")
    return reconciler_from_config(config).import_resource(resource_type, resource_id, name=name)
