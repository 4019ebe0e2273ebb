"""Core infrastructure components for SonarQube Provisioner."""

from sonarqube_provisioner.core.client import SonarQubeClient
from sonarqube_provisioner.core.provider import BasicAuth, ServerInfo, SonarQubeProvider, TokenAuth
from sonarqube_provisioner.core.state import ResourceInstance

__all__ = [
    "BasicAuth",
    "ResourceInstance",
    "ServerInfo",
    "SonarQubeClient",
    "SonarQubeProvider",
    "TokenAuth",
]
