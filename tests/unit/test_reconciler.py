"""Tests for the Reconciler lifecycle entry points."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest

from sonarqube_provisioner.config.registry import default_registry
from sonarqube_provisioner.core.state import ResourceInstance, compute_attributes_hash
from sonarqube_provisioner.engine import Reconciler
from sonarqube_provisioner.engine.errors import (
    ImportNotSupportedError,
    UnknownResourceTypeError,
    ValidationError,
)
from sonarqube_provisioner.resources.gitlab_binding import GitlabBindingResource
from sonarqube_provisioner.resources.permissions import PermissionsResource

if TYPE_CHECKING:
    from collections.abc import Callable
    from unittest.mock import MagicMock

    from sonarqube_provisioner.engine.handlers import EngineContext


@pytest.fixture
def reconciler(ctx: EngineContext) -> Reconciler:
    return Reconciler(provider=ctx.provider, registry=default_registry())


def _groups(name: str, perms: list[str]) -> dict:
    return {"groups": [{"name": name, "permissions": perms}]}


def _instance(resource: PermissionsResource | GitlabBindingResource, rid: str) -> ResourceInstance:
    attrs = resource.attributes()
    return ResourceInstance(
        id=rid,
        resource_type=resource.resource_type,
        name=resource.name,
        attributes=attrs,
        attributes_hash=compute_attributes_hash(attrs),
    )


class TestValidate:
    def test_aggregates_errors(self, reconciler: Reconciler) -> None:
        resources = [
            PermissionsResource(name="a", permissions=["admin"]),
            PermissionsResource(name="b", special_group_name="project_creator", permissions=["x"]),
            PermissionsResource(name="c", group_name="devs", permissions=["scan"]),
        ]

        with pytest.raises(ValidationError) as excinfo:
            reconciler.validate(resources)

        assert len(excinfo.value.errors) == 2
        assert excinfo.value.errors[0].startswith("sonarqube_permissions.a:")
        assert excinfo.value.errors[1].startswith("sonarqube_permissions.b:")

    def test_valid(self, reconciler: Reconciler) -> None:
        reconciler.validate(
            [
                PermissionsResource(name="c", group_name="devs", permissions=["scan"]),
                GitlabBindingResource(name="b", alm_setting="gl", project="p", repository="1"),
            ]
        )


class TestCreate:
    def test_invalid_declaration_issues_no_request(
        self, reconciler: Reconciler, session: MagicMock
    ) -> None:
        with pytest.raises(ValidationError):
            reconciler.create(
                PermissionsResource(
                    name="x", login_name="a", group_name="b", permissions=["admin"]
                )
            )
        session.request.assert_not_called()

    def test_dispatches_to_handler(
        self,
        reconciler: Reconciler,
        session: MagicMock,
        respond: Callable[..., MagicMock],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        session.request.side_effect = [respond(204), respond(200, body=_groups("devs", ["scan"]))]

        with caplog.at_level(logging.INFO, logger="sonarqube_provisioner"):
            inst = reconciler.create(
                PermissionsResource(name="devs", group_name="devs", permissions=["scan"])
            )

        assert inst.resource_type == "sonarqube_permissions"
        assert f"Created sonarqube_permissions.devs (id={inst.id})" in caplog.text


class TestRead:
    def test_logs_drift(
        self,
        reconciler: Reconciler,
        session: MagicMock,
        respond: Callable[..., MagicMock],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        session.request.return_value = respond(200, body=_groups("devs", ["scan", "admin"]))
        prior = _instance(
            PermissionsResource(name="devs", group_name="devs", permissions=["scan"]), "r1"
        )

        with caplog.at_level(logging.INFO, logger="sonarqube_provisioner"):
            inst = reconciler.read(prior)

        assert inst is not None
        assert "Drift detected on sonarqube_permissions.devs" in caplog.text

    def test_logs_disappearance(
        self,
        reconciler: Reconciler,
        session: MagicMock,
        respond: Callable[..., MagicMock],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        session.request.return_value = respond(200, body={"groups": []})
        prior = _instance(
            PermissionsResource(name="devs", group_name="devs", permissions=["scan"]), "r1"
        )

        with caplog.at_level(logging.INFO, logger="sonarqube_provisioner"):
            assert reconciler.read(prior) is None

        assert "no longer exists" in caplog.text

    def test_unknown_type(self, reconciler: Reconciler) -> None:
        prior = ResourceInstance(id="1", resource_type="sonarqube_project", name="x")
        with pytest.raises(UnknownResourceTypeError, match="sonarqube_project"):
            reconciler.read(prior)


class TestReplacementFields:
    def test_permissions_change_forces_replacement(self, reconciler: Reconciler) -> None:
        prior = _instance(
            PermissionsResource(name="devs", group_name="devs", permissions=["scan"]), "r1"
        )
        desired = PermissionsResource(name="devs", group_name="devs", permissions=["admin"])

        assert reconciler.replacement_fields(desired, prior) == ["permissions"]

    def test_binding_repository_change_is_in_place(self, reconciler: Reconciler) -> None:
        prior = _instance(
            GitlabBindingResource(name="b", alm_setting="gl", project="p", repository="1"), "p/1"
        )
        desired = GitlabBindingResource(name="b", alm_setting="gl", project="p", repository="2")

        assert reconciler.replacement_fields(desired, prior) == []


class TestUpdateDelete:
    def test_update_validates_first(self, reconciler: Reconciler, session: MagicMock) -> None:
        desired = PermissionsResource(
            name="c", special_group_name="project_creator", permissions=["admin"]
        )
        with pytest.raises(ValidationError):
            reconciler.update(desired, _instance(desired, "r1"))
        session.request.assert_not_called()

    def test_delete(
        self,
        reconciler: Reconciler,
        session: MagicMock,
        respond: Callable[..., MagicMock],
    ) -> None:
        session.request.return_value = respond(204)
        prior = _instance(
            PermissionsResource(name="devs", group_name="devs", permissions=["scan", "admin"]),
            "r1",
        )

        reconciler.delete(prior)

        assert session.request.call_count == 2


class TestImport:
    def test_binding(
        self,
        reconciler: Reconciler,
        session: MagicMock,
        respond: Callable[..., MagicMock],
    ) -> None:
        session.request.return_value = respond(
            200, body={"key": "gl", "alm": "gitlab", "repository": "1", "monorepo": False}
        )

        inst = reconciler.import_resource("sonarqube_gitlab_binding", "p/1", name="b")

        assert inst.address == "sonarqube_gitlab_binding.b"

    def test_permissions_not_importable(self, reconciler: Reconciler) -> None:
        with pytest.raises(ImportNotSupportedError):
            reconciler.import_resource("sonarqube_permissions", "some-uuid", name="x")
