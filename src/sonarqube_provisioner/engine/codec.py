"""Mapping between declared attributes and SonarQube web API payloads."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

import pydantic
from pydantic import BaseModel, ConfigDict, Field

from sonarqube_provisioner.engine.errors import DecodeError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sonarqube_provisioner.resources.permissions import PermissionsResource

T = TypeVar("T", bound=BaseModel)


class _Payload(BaseModel):
    # Responses carry many fields we never look at.
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class Paging(_Payload):
    page_index: int = Field(default=1, alias="pageIndex")
    page_size: int = Field(default=0, alias="pageSize")
    total: int = 0


class UserPermission(_Payload):
    login: str
    name: str = ""
    permissions: list[str] | None = None


class GroupPermission(_Payload):
    id: str = ""
    name: str
    description: str = ""
    permissions: list[str] | None = None


class UserPermissionsPage(_Payload):
    paging: Paging = Field(default_factory=Paging)
    users: list[UserPermission] = Field(default_factory=list)


class GroupPermissionsPage(_Payload):
    paging: Paging = Field(default_factory=Paging)
    groups: list[GroupPermission] = Field(default_factory=list)


class PermissionTemplatePermission(_Payload):
    key: str
    users_count: int = Field(default=0, alias="usersCount")
    groups_count: int = Field(default=0, alias="groupsCount")
    with_project_creator: bool = Field(default=False, alias="withProjectCreator")


class PermissionTemplate(_Payload):
    id: str
    name: str
    description: str = ""
    project_key_pattern: str = Field(default="", alias="projectKeyPattern")
    permissions: list[PermissionTemplatePermission] | None = None


class PermissionTemplatesPage(_Payload):
    paging: Paging = Field(default_factory=Paging)
    permission_templates: list[PermissionTemplate] = Field(
        default_factory=list, alias="permissionTemplates"
    )


class ServerNavigation(_Payload):
    # Community servers omit the field.
    edition: str | None = None


class Binding(_Payload):
    key: str
    alm: str
    repository: str = ""
    url: str = ""
    monorepo: bool = False


def decode(model: type[T], payload: Any, caller: str) -> T:
    """Validate a decoded JSON body against *model*."""
    try:
        return model.model_validate(payload)
    except pydantic.ValidationError as exc:
        raise DecodeError(caller, str(exc)) from exc


def expand_permissions(resource: PermissionsResource) -> list[str]:
    """Declared permissions, one value per outgoing call."""
    return list(resource.permissions)


def flatten_permissions(values: Iterable[str] | None) -> list[str]:
    """Server permission list as a declared list, keeping server order."""
    if values is None:
        return []
    return list(values)


def flatten_project_creator_permissions(
    items: Iterable[PermissionTemplatePermission] | None,
) -> list[str]:
    """Keys of the template permissions granted to the project creator."""
    if items is None:
        return []
    return [item.key for item in items if item.with_project_creator]
