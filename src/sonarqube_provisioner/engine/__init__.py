"""Reconciliation engine for SonarQube resources."""

from sonarqube_provisioner.engine.errors import (
    DecodeError,
    EditionUnsupportedError,
    EngineError,
    ImportNotSupportedError,
    NotFoundError,
    TransportError,
    UnknownResourceTypeError,
    ValidationError,
)
from sonarqube_provisioner.engine.handlers import EngineContext, ResourceHandler
from sonarqube_provisioner.engine.reconciler import Reconciler
from sonarqube_provisioner.engine.registry import ResourceTypeRegistry

__all__ = [
    "DecodeError",
    "EditionUnsupportedError",
    "EngineContext",
    "EngineError",
    "ImportNotSupportedError",
    "NotFoundError",
    "Reconciler",
    "ResourceHandler",
    "ResourceTypeRegistry",
    "TransportError",
    "UnknownResourceTypeError",
    "ValidationError",
]
