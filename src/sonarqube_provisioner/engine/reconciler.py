"""Lifecycle entry points for declared SonarQube resources."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sonarqube_provisioner.engine.errors import ValidationError
from sonarqube_provisioner.engine.handlers import EngineContext
from sonarqube_provisioner.resources.markers import replacement_fields

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sonarqube_provisioner.core import SonarQubeProvider
    from sonarqube_provisioner.core.state import ResourceInstance
    from sonarqube_provisioner.engine.handlers import ResourceHandler
    from sonarqube_provisioner.engine.registry import ResourceTypeRegistry
    from sonarqube_provisioner.resources.base import Resource

logger = logging.getLogger(__name__)


class Reconciler:
    """Create/Read/Update/Delete/Import for individual resources.

    Each call reconciles one resource synchronously and keeps no state
    between calls. Errors propagate to the caller unchanged; nothing is
    retried or rolled back.
    """

    def __init__(self, *, provider: SonarQubeProvider, registry: ResourceTypeRegistry) -> None:
        self._provider = provider
        self._registry = registry

    def _ctx(self) -> EngineContext:
        return EngineContext(provider=self._provider)

    def _handler(self, resource_type: str) -> ResourceHandler[Any]:
        return self._registry.handler(resource_type)

    def validate(self, resources: Sequence[Resource]) -> None:
        """Run every handler's validation; raise ``ValidationError`` with all failures."""
        ctx = self._ctx()
        errors: list[str] = []
        for r in resources:
            errors.extend(self._handler(r.resource_type).validate(ctx, r))
        if errors:
            raise ValidationError(errors)

    def create(self, desired: Resource) -> ResourceInstance:
        logger.debug("Creating %s", desired.address)
        self.validate([desired])
        inst = self._handler(desired.resource_type).create(self._ctx(), desired)
        logger.info("Created %s (id=%s)", desired.address, inst.id)
        return inst

    def read(self, prior: ResourceInstance) -> ResourceInstance | None:
        """Refresh *prior* from the server; None means it must be recreated."""
        logger.debug("Reading %s (id=%s)", prior.address, prior.id)
        inst = self._handler(prior.resource_type).read(self._ctx(), prior)
        if inst is None:
            logger.info("%s no longer exists on the server", prior.address)
        elif inst.attributes_hash != prior.attributes_hash:
            logger.info("Drift detected on %s", prior.address)
        return inst

    def replacement_fields(self, desired: Resource, prior: ResourceInstance) -> list[str]:
        """Fields whose change requires delete + create instead of update."""
        model = self._registry.model(desired.resource_type)
        return replacement_fields(model, desired.attributes(), prior.attributes)

    def update(self, desired: Resource, prior: ResourceInstance) -> ResourceInstance:
        logger.debug("Updating %s (id=%s)", desired.address, prior.id)
        self.validate([desired])
        inst = self._handler(desired.resource_type).update(self._ctx(), desired, prior)
        logger.info("Updated %s (id=%s)", desired.address, inst.id)
        return inst

    def delete(self, prior: ResourceInstance) -> None:
        logger.debug("Deleting %s (id=%s)", prior.address, prior.id)
        self._handler(prior.resource_type).delete(self._ctx(), prior)
        logger.info("Deleted %s", prior.address)

    def import_resource(
        self, resource_type: str, resource_id: str, *, name: str
    ) -> ResourceInstance:
        """Adopt an existing server object by its identity string."""
        logger.debug("Importing %s %s", resource_type, resource_id)
        inst = self._handler(resource_type).import_resource(self._ctx(), resource_id, name)
        logger.info("Imported %s (id=%s)", inst.address, inst.id)
        return inst
