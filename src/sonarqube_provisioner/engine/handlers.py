"""Engine-facing handler interfaces."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, Generic, TypeVar

from sonarqube_provisioner.engine.errors import ImportNotSupportedError
from sonarqube_provisioner.resources.base import Resource

if TYPE_CHECKING:
    from sonarqube_provisioner.core import SonarQubeProvider
    from sonarqube_provisioner.core.state import ResourceInstance

R = TypeVar("R", bound=Resource)


@dataclass(frozen=True)
class EngineContext:
    """Context passed to handlers."""

    provider: SonarQubeProvider


class ResourceHandler(Generic[R]):
    """Base class for resource handlers.

    Handlers are responsible for translating resources into SonarQube web API
    calls. Subclass and override the CRUD methods. Validation and import are
    optional.
    """

    model: ClassVar[type[Resource]]

    def validate(self, ctx: EngineContext, desired: R) -> list[str]:
        """Single-resource validation, before any request is made.

        Return list of error messages (empty = valid).
        """
        _ = ctx, desired
        return []

    def desired_from(self, prior: ResourceInstance) -> R:
        """Rebuild the declaration stored on *prior*."""
        return self.model.model_validate(prior.attributes)  # type: ignore[return-value]

    def read(self, ctx: EngineContext, prior: ResourceInstance) -> ResourceInstance | None:
        """Read the resource from SonarQube. Return None if it no longer exists."""
        raise NotImplementedError

    def create(self, ctx: EngineContext, desired: R) -> ResourceInstance:
        """Create the resource in SonarQube. Return the tracked instance."""
        raise NotImplementedError

    def update(self, ctx: EngineContext, desired: R, prior: ResourceInstance) -> ResourceInstance:
        """Update the resource in SonarQube. Return the tracked instance."""
        raise NotImplementedError

    def delete(self, ctx: EngineContext, prior: ResourceInstance) -> None:
        """Delete the resource from SonarQube."""
        raise NotImplementedError

    def import_resource(self, ctx: EngineContext, resource_id: str, name: str) -> ResourceInstance:
        """Adopt an existing server object identified by *resource_id*."""
        _ = ctx, resource_id, name
        raise ImportNotSupportedError(self.model.resource_type)
