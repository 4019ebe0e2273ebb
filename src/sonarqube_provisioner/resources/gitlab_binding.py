"""GitLab binding resource model."""

from __future__ import annotations

from typing import Annotated, ClassVar

from pydantic import Field

from sonarqube_provisioner.resources.base import Resource
from sonarqube_provisioner.resources.markers import ForceNew, QueryParam


class GitlabBindingResource(Resource):
    """Binding between a SonarQube project and a GitLab repository.

    The set call is an upsert, so everything except ``project`` can be
    changed in place.
    """

    resource_type: ClassVar[str] = "sonarqube_gitlab_binding"

    alm_setting: Annotated[str, QueryParam("almSetting")] = Field(min_length=1)
    monorepo: Annotated[bool, QueryParam("monorepo")] = False
    project: Annotated[str, ForceNew(), QueryParam("project")] = Field(min_length=1)
    repository: Annotated[str, QueryParam("repository")] = Field(min_length=1)

    @property
    def binding_id(self) -> str:
        return f"{self.project}/{self.repository}"
