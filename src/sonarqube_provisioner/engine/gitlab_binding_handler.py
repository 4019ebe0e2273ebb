"""GitLab binding handler implementing CRUD via the /api/alm_settings web services."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sonarqube_provisioner.core.state import ResourceInstance, compute_attributes_hash
from sonarqube_provisioner.engine.codec import Binding, decode
from sonarqube_provisioner.engine.errors import (
    EditionUnsupportedError,
    NotFoundError,
    TransportError,
    ValidationError,
)
from sonarqube_provisioner.engine.handlers import ResourceHandler
from sonarqube_provisioner.resources.gitlab_binding import GitlabBindingResource
from sonarqube_provisioner.resources.markers import build_query_params

if TYPE_CHECKING:
    from sonarqube_provisioner.core import SonarQubeProvider
    from sonarqube_provisioner.engine.handlers import EngineContext

logger = logging.getLogger(__name__)

_SET_BINDING = "/api/alm_settings/set_gitlab_binding"
_GET_BINDING = "/api/alm_settings/get_binding"
_DELETE_BINDING = "/api/alm_settings/delete_binding"


def check_binding_support(provider: SonarQubeProvider) -> None:
    """Refuse binding operations on a Community edition server."""
    info = provider.server_info
    if info.is_community:
        raise EditionUnsupportedError("GitLab Bindings", info.edition, info.version)


def split_binding_id(resource_id: str) -> tuple[str, str]:
    """Split a ``<project>/<repository>`` identity."""
    project, sep, repository = resource_id.partition("/")
    if not sep or not project or not repository:
        raise ValidationError(
            [f"Invalid GitLab binding id {resource_id!r}: expected '<project>/<repository>'"]
        )
    return project, repository


class GitlabBindingHandler(ResourceHandler[GitlabBindingResource]):
    """CRUD handler for project bindings to GitLab repositories."""

    model = GitlabBindingResource

    def create(self, ctx: EngineContext, desired: GitlabBindingResource) -> ResourceInstance:
        """Bind the project; the identity is ``<project>/<repository>``."""
        check_binding_support(ctx.provider)
        ctx.provider.client.post(
            _SET_BINDING,
            params=build_query_params(desired),
            caller="GitlabBindingHandler.create",
        )
        attrs = desired.attributes()
        instance = ResourceInstance(
            id=desired.binding_id,
            resource_type=self.model.resource_type,
            name=desired.name,
            attributes=attrs,
            attributes_hash=compute_attributes_hash(attrs),
        )
        refreshed = self.read(ctx, instance)
        if refreshed is None:
            raise NotFoundError(self.model.resource_type, instance.id)
        return refreshed

    def update(
        self, ctx: EngineContext, desired: GitlabBindingResource, prior: ResourceInstance
    ) -> ResourceInstance:
        """Same call as create: the set endpoint overwrites the existing binding.

        A new repository yields a new identity; a new project needs replacement
        (``project`` is ``ForceNew``).
        """
        _ = prior
        return self.create(ctx, desired)

    def read(self, ctx: EngineContext, prior: ResourceInstance) -> ResourceInstance | None:
        """Read the project's binding and check it still points at the repository."""
        check_binding_support(ctx.provider)
        project, repository = split_binding_id(prior.id)
        try:
            payload = ctx.provider.client.get_json(
                _GET_BINDING, params={"project": project}, caller="GitlabBindingHandler.read"
            )
        except TransportError as exc:
            if exc.status_code == 404:
                logger.debug("Project %s has no binding", project)
                return None
            raise

        binding = decode(Binding, payload, "GitlabBindingHandler.read")
        if binding.repository != repository or binding.alm.lower() != "gitlab":
            logger.debug(
                "Binding of %s points at %s/%s, expected gitlab/%s",
                project,
                binding.alm,
                binding.repository,
                repository,
            )
            return None

        attrs = {
            **prior.attributes,
            "project": project,
            "repository": repository,
            "alm_setting": binding.key,
            "monorepo": binding.monorepo,
        }
        return prior.with_attributes(attrs)

    def delete(self, ctx: EngineContext, prior: ResourceInstance) -> None:
        check_binding_support(ctx.provider)
        project = prior.attributes.get("project") or split_binding_id(prior.id)[0]
        ctx.provider.client.post(
            _DELETE_BINDING, params={"project": project}, caller="GitlabBindingHandler.delete"
        )

    def import_resource(self, ctx: EngineContext, resource_id: str, name: str) -> ResourceInstance:
        """Adopt an existing binding from its ``<project>/<repository>`` id."""
        check_binding_support(ctx.provider)
        project, repository = split_binding_id(resource_id)
        seed = ResourceInstance(
            id=resource_id,
            resource_type=self.model.resource_type,
            name=name,
            attributes={"name": name, "project": project, "repository": repository},
        )
        found = self.read(ctx, seed)
        if found is None:
            raise NotFoundError(self.model.resource_type, resource_id)
        return found
