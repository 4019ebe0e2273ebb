"""Permissions handler implementing CRUD via the /api/permissions web services."""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING, Any

from sonarqube_provisioner.core.state import ResourceInstance, compute_attributes_hash
from sonarqube_provisioner.engine.codec import (
    GroupPermissionsPage,
    PermissionTemplatesPage,
    UserPermissionsPage,
    decode,
    expand_permissions,
    flatten_permissions,
    flatten_project_creator_permissions,
)
from sonarqube_provisioner.engine.errors import NotFoundError
from sonarqube_provisioner.engine.handlers import ResourceHandler
from sonarqube_provisioner.engine.selector import (
    GroupTarget,
    Operation,
    Scope,
    ScopeMode,
    SpecialGroupTarget,
    UserTarget,
    resolve,
    resolve_scope,
    resolve_target,
    validation_errors,
)
from sonarqube_provisioner.resources.permissions import PermissionsResource

if TYPE_CHECKING:
    from sonarqube_provisioner.engine.handlers import EngineContext

logger = logging.getLogger(__name__)


def _same(a: str | None, b: str | None) -> bool:
    return a is not None and b is not None and a.casefold() == b.casefold()


class PermissionsHandler(ResourceHandler[PermissionsResource]):
    """CRUD handler for user, group and project-creator permissions.

    Each permission value is granted (or revoked) by its own request. A failed
    request aborts the loop; values already applied stay applied.
    """

    model = PermissionsResource

    def validate(self, ctx: EngineContext, desired: PermissionsResource) -> list[str]:
        _ = ctx
        return validation_errors(desired)

    def _apply_each(
        self, ctx: EngineContext, desired: PermissionsResource, operation: Operation
    ) -> None:
        """Issue one request per declared permission value."""
        endpoint = resolve(desired, operation)
        caller = f"PermissionsHandler.{operation.value}"
        client = ctx.provider.client
        for permission in expand_permissions(desired):
            logger.debug("%s %s on %s", operation.value, permission, desired.address)
            params = {**endpoint.params, "permission": permission}
            client.post(endpoint.path, params=params, caller=caller)

    def _read_back(self, ctx: EngineContext, instance: ResourceInstance) -> ResourceInstance:
        refreshed = self.read(ctx, instance)
        if refreshed is None:
            raise NotFoundError(self.model.resource_type, instance.id)
        return refreshed

    def create(self, ctx: EngineContext, desired: PermissionsResource) -> ResourceInstance:
        """Grant every declared permission, then read the result back."""
        self._apply_each(ctx, desired, Operation.CREATE)
        attrs = desired.attributes()
        instance = ResourceInstance(
            id=str(uuid.uuid4()),
            resource_type=self.model.resource_type,
            name=desired.name,
            attributes=attrs,
            attributes_hash=compute_attributes_hash(attrs),
        )
        return self._read_back(ctx, instance)

    def update(
        self, ctx: EngineContext, desired: PermissionsResource, prior: ResourceInstance
    ) -> ResourceInstance:
        """Re-assert the declared permissions under the prior identity.

        Every field is ``ForceNew``, so a changed declaration is recreated by
        the caller; this only repairs drift for an unchanged one.
        """
        self._apply_each(ctx, desired, Operation.UPDATE)
        return self._read_back(ctx, prior.with_attributes(desired.attributes()))

    def read(self, ctx: EngineContext, prior: ResourceInstance) -> ResourceInstance | None:
        """Find the principal in the matching permissions listing.

        Returns None when the principal holds none of the permissions any more.
        """
        desired = self.desired_from(prior)
        target = resolve_target(desired)
        scope = resolve_scope(desired)
        endpoint = resolve(desired, Operation.READ)
        payload = ctx.provider.client.get_json(
            endpoint.path, params=endpoint.params, caller="PermissionsHandler.read"
        )

        found = self._match(target, scope, payload)
        if found is None:
            logger.debug("%s not found in %s", desired.address, endpoint.path)
            return None

        attrs = {**desired.attributes(), **found}
        if not attrs["permissions"]:
            return None
        return prior.with_attributes(attrs)

    def _match(
        self,
        target: UserTarget | GroupTarget | SpecialGroupTarget,
        scope: Scope,
        payload: Any,
    ) -> dict[str, Any] | None:
        """Scan a listing for the target and return the attributes it refreshes."""
        match target:
            case UserTarget(login=login):
                users = decode(UserPermissionsPage, payload, "PermissionsHandler.read").users
                for user in users:
                    if _same(user.login, login):
                        return {
                            "login_name": user.login,
                            "permissions": flatten_permissions(user.permissions),
                        }
            case GroupTarget(name=name):
                groups = decode(GroupPermissionsPage, payload, "PermissionsHandler.read").groups
                for group in groups:
                    if _same(group.name, name):
                        return {
                            "group_name": group.name,
                            "permissions": flatten_permissions(group.permissions),
                        }
            case SpecialGroupTarget(name=name):
                page = decode(PermissionTemplatesPage, payload, "PermissionsHandler.read")
                for template in page.permission_templates:
                    key = template.id if scope.mode is ScopeMode.TEMPLATE_BY_ID else template.name
                    if _same(key, scope.value):
                        return {
                            "special_group_name": name,
                            "permissions": flatten_project_creator_permissions(
                                template.permissions
                            ),
                        }
        return None

    def delete(self, ctx: EngineContext, prior: ResourceInstance) -> None:
        """Revoke every stored permission. The server's status decides success."""
        desired = self.desired_from(prior)
        self._apply_each(ctx, desired, Operation.DELETE)
