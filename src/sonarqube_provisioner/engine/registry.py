"""Handlers indexed by the resource type they manage."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sonarqube_provisioner.engine.errors import UnknownResourceTypeError

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from sonarqube_provisioner.engine.handlers import ResourceHandler
    from sonarqube_provisioner.resources.base import Resource


class ResourceTypeRegistry:
    """Dispatch table from ``resource_type`` to its handler.

    The key comes from the handler's ``model``, so a handler can only be
    registered under the type it actually reconciles.
    """

    def __init__(self, handlers: Iterable[ResourceHandler[Any]] = ()) -> None:
        self._handlers: dict[str, ResourceHandler[Any]] = {}
        for handler in handlers:
            self.register(handler)

    def register(self, handler: ResourceHandler[Any]) -> None:
        model = getattr(handler, "model", None)
        resource_type = getattr(model, "resource_type", None)
        if not isinstance(resource_type, str) or not resource_type:
            name = type(handler).__name__
            raise ValueError(f"{name} does not declare a model with a resource_type")

        existing = self._handlers.get(resource_type)
        if existing is not None:
            raise ValueError(f"{resource_type} is already handled by {type(existing).__name__}")
        self._handlers[resource_type] = handler

    def handler(self, resource_type: str) -> ResourceHandler[Any]:
        try:
            return self._handlers[resource_type]
        except KeyError as e:
            raise UnknownResourceTypeError(resource_type) from e

    def model(self, resource_type: str) -> type[Resource]:
        return self.handler(resource_type).model

    def __contains__(self, resource_type: object) -> bool:
        return resource_type in self._handlers

    def __iter__(self) -> Iterator[str]:
        return iter(self.resource_types())

    def resource_types(self) -> list[str]:
        return sorted(self._handlers)
