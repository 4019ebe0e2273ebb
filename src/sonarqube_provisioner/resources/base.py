"""Base resource class for SonarQube resources."""

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, computed_field


class Resource(BaseModel):
    """Base class for all SonarQube resources.

    Resources are pure data - they define the desired state.
    Handlers know how to CRUD resources.
    """

    model_config = ConfigDict(extra="forbid")

    resource_type: ClassVar[str]

    name: str = Field(pattern=r"^[a-zA-Z0-9_\-]+$")

    @computed_field
    @property
    def address(self) -> str:
        """Unique address for this resource (e.g., 'sonarqube_permissions.devs')."""
        return f"{self.resource_type}.{self.name}"

    def attributes(self) -> dict[str, Any]:
        """Declared attributes as stored on a ``ResourceInstance``."""
        return self.model_dump(exclude={"address"})
