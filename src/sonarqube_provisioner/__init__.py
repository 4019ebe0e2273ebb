"""Declarative provisioning of SonarQube permissions and ALM bindings."""

__version__ = "0.1.0"
