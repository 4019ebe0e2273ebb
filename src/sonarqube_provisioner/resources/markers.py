"""Declarative field markers for resource models.

Two markers attach to Pydantic fields via ``Annotated``:

- ``QueryParam``: field maps to a SonarQube web API query parameter
- ``ForceNew``: changing the field cannot be applied in place; the
  resource has to be deleted and created again

Helper functions introspect these markers at runtime to build request
parameters and to decide whether an update needs a replacement.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

if TYPE_CHECKING:
    from pydantic.fields import FieldInfo

M = TypeVar("M")


# ── Marker dataclasses ──────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class QueryParam:
    """Field maps to the query parameter *name* (e.g. ``"projectKey"``)."""

    name: str


@dataclass(frozen=True, slots=True)
class ForceNew:
    """Field is immutable on the server side."""


# ── Shared introspection primitives ─────────────────────────────────


def _find_marker(field_info: FieldInfo, marker_type: type[M]) -> M | None:
    """Return the first marker of *marker_type* on a field, or ``None``."""
    return next((m for m in field_info.metadata if isinstance(m, marker_type)), None)


def _iter_marked_fields(
    model_or_cls: Any,
    marker_type: type[M],
) -> list[tuple[str, FieldInfo, M]]:
    """Return ``(field_name, field_info, marker)`` for every field carrying *marker_type*."""
    cls = model_or_cls if isinstance(model_or_cls, type) else type(model_or_cls)
    return [
        (name, fi, marker)
        for name, fi in cls.model_fields.items()
        if (marker := _find_marker(fi, marker_type)) is not None
    ]


def _param_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


# ── Public helpers ──────────────────────────────────────────────────


def build_query_params(resource: Any, *, only: set[str] | None = None) -> dict[str, str]:
    """Build query params from ``QueryParam`` fields, skipping empty values.

    ``only`` restricts the output to the given field names.
    """
    params: dict[str, str] = {}
    for name, _, marker in _iter_marked_fields(resource, QueryParam):
        if only is not None and name not in only:
            continue
        value = getattr(resource, name)
        if value is None or value == "":
            continue
        params[marker.name] = _param_value(value)
    return params


def collect_force_new(resource_or_cls: Any) -> list[str]:
    """Names of fields marked ``ForceNew``."""
    return [name for name, _, _ in _iter_marked_fields(resource_or_cls, ForceNew)]


def replacement_fields(
    resource_cls: type,
    desired: Mapping[str, Any],
    prior: Mapping[str, Any],
) -> list[str]:
    """``ForceNew`` fields whose desired value differs from the prior one."""
    return [
        name for name in collect_force_new(resource_cls) if desired.get(name) != prior.get(name)
    ]
