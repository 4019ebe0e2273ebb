"""SonarQube resource definitions."""

from sonarqube_provisioner.resources.base import Resource
from sonarqube_provisioner.resources.gitlab_binding import GitlabBindingResource
from sonarqube_provisioner.resources.permissions import PermissionsResource

__all__ = [
    "GitlabBindingResource",
    "PermissionsResource",
    "Resource",
]
