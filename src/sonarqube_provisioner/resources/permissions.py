"""Permissions resource model."""

from __future__ import annotations

from typing import Annotated, ClassVar, Literal

from pydantic import Field

from sonarqube_provisioner.resources.base import Resource
from sonarqube_provisioner.resources.markers import ForceNew, QueryParam


class PermissionsResource(Resource):
    """Global, project or permission-template permissions for one principal.

    Exactly one of ``login_name``, ``group_name`` and ``special_group_name``
    names the principal. ``project_key`` scopes the grant to a project;
    ``template_id`` / ``template_name`` scope it to a permission template.
    With none of them set the permissions are global. The special group
    (``project_creator``) only exists inside templates.

    Every field is immutable: any change recreates the resource.
    """

    resource_type: ClassVar[str] = "sonarqube_permissions"

    login_name: Annotated[str | None, ForceNew(), QueryParam("login")] = None
    group_name: Annotated[str | None, ForceNew(), QueryParam("groupName")] = None
    special_group_name: Annotated[Literal["project_creator"] | None, ForceNew()] = None
    project_key: Annotated[str | None, ForceNew(), QueryParam("projectKey")] = None
    template_id: Annotated[str | None, ForceNew(), QueryParam("templateId")] = None
    template_name: Annotated[str | None, ForceNew(), QueryParam("templateName")] = None
    permissions: Annotated[
        list[Annotated[str, Field(min_length=1)]],
        ForceNew(),
    ] = Field(min_length=1)
