"""Default resource type registry factory."""

from __future__ import annotations

from sonarqube_provisioner.engine.gitlab_binding_handler import GitlabBindingHandler
from sonarqube_provisioner.engine.permissions_handler import PermissionsHandler
from sonarqube_provisioner.engine.registry import ResourceTypeRegistry


def default_registry() -> ResourceTypeRegistry:
    """Create a fresh registry with all built-in resource types and handlers."""
    return ResourceTypeRegistry([PermissionsHandler(), GitlabBindingHandler()])
