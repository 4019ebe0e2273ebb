"""Configuration models for YAML-based provisioning."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

from sonarqube_provisioner.resources.base import (
    Resource,  # noqa: TC001 (needed by pydantic at runtime)
)
from sonarqube_provisioner.resources.gitlab_binding import (
    GitlabBindingResource,  # noqa: TC001 (needed by pydantic at runtime)
)
from sonarqube_provisioner.resources.permissions import (
    PermissionsResource,  # noqa: TC001 (needed by pydantic at runtime)
)


class ProviderConfig(BaseSettings):
    """SonarQube connection settings.

    Fields can be set via YAML (constructor kwargs), environment variables
    with the ``SONAR_`` prefix, or a ``.env`` file passed as ``_env_file``.
    Constructor kwargs take precedence, then the environment.

    ``token`` (or ``password``) is typically provided via the ``SONAR_TOKEN``
    environment variable rather than YAML to avoid committing secrets to
    version control. ``edition``/``version`` skip server discovery when set.
    """

    model_config = SettingsConfigDict(
        env_prefix="SONAR_",
        env_file_encoding="utf-8-sig",
        extra="ignore",
    )

    host: str | None = None
    token: str | None = None
    user: str | None = None
    password: str | None = None
    edition: str | None = None
    version: str | None = None
    verify_ssl: bool = True


def _none_to_list(v: Any) -> Any:
    return v if v is not None else []


class Config(BaseModel):
    """Declarations and connection settings from one YAML file."""

    provider: ProviderConfig
    permissions: Annotated[list[PermissionsResource], BeforeValidator(_none_to_list)] = []
    gitlab_bindings: Annotated[list[GitlabBindingResource], BeforeValidator(_none_to_list)] = []
    config_dir: Path = Path()

    @computed_field  # type: ignore[prop-decorator]
    @property
    def resources(self) -> list[Resource]:
        """All declared resources; ordering is not significant."""
        return [*self.permissions, *self.gitlab_bindings]

    def get(self, address: str) -> Resource | None:
        return next((r for r in self.resources if r.address == address), None)
