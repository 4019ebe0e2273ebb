"""Selector resolution for permission declarations.

A declaration names its principal through exactly one selector field and its
scope through at most one scope field. Resolution turns those fields into a
tagged target, a scope, and finally the web API endpoint for a lifecycle
operation. Everything here is pure; no request is ever issued.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, ClassVar, TypeAlias

from sonarqube_provisioner.engine.errors import ValidationError

if TYPE_CHECKING:
    from sonarqube_provisioner.resources.permissions import PermissionsResource

READ_PAGE_SIZE = "100"


class PrincipalMode(str, Enum):
    USER = "user"
    GROUP = "group"
    SPECIAL_GROUP = "special-group"


class ScopeMode(str, Enum):
    GLOBAL = "global"
    PROJECT = "project"
    TEMPLATE_BY_ID = "template-by-id"
    TEMPLATE_BY_NAME = "template-by-name"

    @property
    def is_template(self) -> bool:
        return self in (ScopeMode.TEMPLATE_BY_ID, ScopeMode.TEMPLATE_BY_NAME)


class Operation(str, Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


# ── Targets ─────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class UserTarget:
    login: str
    mode: ClassVar[PrincipalMode] = PrincipalMode.USER

    def params(self) -> dict[str, str]:
        return {"login": self.login}


@dataclass(frozen=True, slots=True)
class GroupTarget:
    name: str
    mode: ClassVar[PrincipalMode] = PrincipalMode.GROUP

    def params(self) -> dict[str, str]:
        return {"groupName": self.name}


@dataclass(frozen=True, slots=True)
class SpecialGroupTarget:
    name: str = "project_creator"
    mode: ClassVar[PrincipalMode] = PrincipalMode.SPECIAL_GROUP

    def params(self) -> dict[str, str]:
        return {}


PermissionTarget: TypeAlias = UserTarget | GroupTarget | SpecialGroupTarget


@dataclass(frozen=True, slots=True)
class Scope:
    mode: ScopeMode
    value: str | None = None

    _PARAM_NAMES: ClassVar[dict[ScopeMode, str]] = {
        ScopeMode.PROJECT: "projectKey",
        ScopeMode.TEMPLATE_BY_ID: "templateId",
        ScopeMode.TEMPLATE_BY_NAME: "templateName",
    }

    def params(self) -> dict[str, str]:
        param = self._PARAM_NAMES.get(self.mode)
        if param is None or self.value is None:
            return {}
        return {param: self.value}


@dataclass(frozen=True, slots=True)
class Endpoint:
    """A resolved web API call: path plus the parameters shared by every value."""

    path: str
    params: dict[str, str] = field(default_factory=dict)


# ── Endpoint table ──────────────────────────────────────────────────

_DIRECT = (ScopeMode.GLOBAL, ScopeMode.PROJECT)
_TEMPLATE = (ScopeMode.TEMPLATE_BY_ID, ScopeMode.TEMPLATE_BY_NAME)

_ROWS: tuple[tuple[PrincipalMode, tuple[ScopeMode, ...], Operation, str], ...] = (
    (PrincipalMode.USER, _DIRECT, Operation.CREATE, "add_user"),
    (PrincipalMode.USER, _TEMPLATE, Operation.CREATE, "add_user_to_template"),
    (PrincipalMode.USER, _DIRECT, Operation.READ, "users"),
    (PrincipalMode.USER, _TEMPLATE, Operation.READ, "template_users"),
    (PrincipalMode.USER, _DIRECT, Operation.DELETE, "remove_user"),
    (PrincipalMode.USER, _TEMPLATE, Operation.DELETE, "remove_user_from_template"),
    (PrincipalMode.GROUP, _DIRECT, Operation.CREATE, "add_group"),
    (PrincipalMode.GROUP, _TEMPLATE, Operation.CREATE, "add_group_to_template"),
    (PrincipalMode.GROUP, _DIRECT, Operation.READ, "groups"),
    (PrincipalMode.GROUP, _TEMPLATE, Operation.READ, "template_groups"),
    (PrincipalMode.GROUP, _DIRECT, Operation.DELETE, "remove_group"),
    (PrincipalMode.GROUP, _TEMPLATE, Operation.DELETE, "remove_group_from_template"),
    (PrincipalMode.SPECIAL_GROUP, _TEMPLATE, Operation.CREATE, "add_project_creator_to_template"),
    (PrincipalMode.SPECIAL_GROUP, _TEMPLATE, Operation.READ, "search_templates"),
    (
        PrincipalMode.SPECIAL_GROUP,
        _TEMPLATE,
        Operation.DELETE,
        "remove_project_creator_from_template",
    ),
)

ENDPOINTS: dict[tuple[PrincipalMode, ScopeMode, Operation], str] = {
    (principal, scope, op): f"/api/permissions/{action}"
    for principal, scopes, op, action in _ROWS
    for scope in scopes
}


# ── Resolution ──────────────────────────────────────────────────────


def _selectors(resource: PermissionsResource) -> list[tuple[str, str]]:
    candidates = (
        ("login_name", resource.login_name),
        ("group_name", resource.group_name),
        ("special_group_name", resource.special_group_name),
    )
    return [(name, value) for name, value in candidates if value]


def validation_errors(resource: PermissionsResource) -> list[str]:
    """Selector and scope violations for *resource* (empty = valid)."""
    errors: list[str] = []
    where = resource.address

    selectors = _selectors(resource)
    if len(selectors) != 1:
        found = ", ".join(name for name, _ in selectors) or "none"
        errors.append(
            f"{where}: exactly one of login_name, group_name, special_group_name "
            f"must be set (found: {found})"
        )

    if resource.project_key and (resource.template_id or resource.template_name):
        errors.append(f"{where}: project_key cannot be combined with template_id/template_name")
    if resource.template_id and resource.template_name:
        errors.append(f"{where}: template_id and template_name are mutually exclusive")
    if resource.special_group_name:
        if resource.project_key:
            errors.append(f"{where}: project_key cannot be used with special_group_name")
        elif not (resource.template_id or resource.template_name):
            errors.append(
                f"{where}: template_id or template_name must be set when "
                f"special_group_name is set to '{resource.special_group_name}'"
            )
    return errors


def resolve_target(resource: PermissionsResource) -> PermissionTarget:
    """Map the single non-empty selector field to a tagged target."""
    selectors = _selectors(resource)
    if len(selectors) != 1:
        found = ", ".join(name for name, _ in selectors) or "none"
        raise ValidationError(
            [
                f"{resource.address}: exactly one of login_name, group_name, "
                f"special_group_name must be set (found: {found})"
            ]
        )
    name, value = selectors[0]
    if name == "login_name":
        return UserTarget(login=value)
    if name == "group_name":
        return GroupTarget(name=value)
    return SpecialGroupTarget(name=value)


def resolve_scope(resource: PermissionsResource) -> Scope:
    """Map the scope fields to a single scope."""
    present = [
        (mode, value)
        for mode, value in (
            (ScopeMode.PROJECT, resource.project_key),
            (ScopeMode.TEMPLATE_BY_ID, resource.template_id),
            (ScopeMode.TEMPLATE_BY_NAME, resource.template_name),
        )
        if value
    ]
    if len(present) > 1:
        fields = ", ".join(mode.value for mode, _ in present)
        raise ValidationError([f"{resource.address}: conflicting scopes: {fields}"])
    if not present:
        return Scope(ScopeMode.GLOBAL)
    mode, value = present[0]
    return Scope(mode, value)


def resolve_endpoint(target: PermissionTarget, scope: Scope, operation: Operation) -> Endpoint:
    """Look up the endpoint for ``(principal, scope, operation)``.

    ``UPDATE`` shares the ``CREATE`` endpoint. Read endpoints request the
    largest page the API allows and do not carry the principal, which is
    matched client-side instead.
    """
    op = Operation.CREATE if operation is Operation.UPDATE else operation
    path = ENDPOINTS.get((target.mode, scope.mode, op))
    if path is None:
        if isinstance(target, SpecialGroupTarget):
            raise ValidationError(
                [
                    "template_id or template_name must be set when special_group_name "
                    f"is set to '{target.name}'"
                ]
            )
        raise ValidationError(
            [f"No endpoint for {target.mode.value} / {scope.mode.value} / {op.value}"]
        )

    if op is not Operation.READ:
        return Endpoint(path, {**target.params(), **scope.params()})

    params = {"ps": READ_PAGE_SIZE}
    if isinstance(target, SpecialGroupTarget):
        # search_templates filters by name through `q`; ids are matched client-side.
        if scope.mode is ScopeMode.TEMPLATE_BY_NAME and scope.value:
            params["q"] = scope.value
    else:
        params.update(scope.params())
    return Endpoint(path, params)


def resolve(resource: PermissionsResource, operation: Operation) -> Endpoint:
    """Resolve *resource* straight to the endpoint for *operation*."""
    return resolve_endpoint(resolve_target(resource), resolve_scope(resource), operation)
