"""Tracked resource instances (declared attributes plus remote identity)."""

import hashlib
import json
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


def _canonical_json(obj: Any) -> str:
    # Stable encoding for hashes. `default=str` keeps it robust for
    # datetimes/paths/etc while staying deterministic enough for our use.
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), default=str)


def compute_attributes_hash(attrs: Mapping[str, Any]) -> str:
    """Compute a stable hash for a resource's stored attributes."""
    payload = _canonical_json(attrs)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class ResourceInstance(BaseModel):
    """A resource known to exist on the server.

    Attributes:
        id: Durable identity (a UUID for permissions, ``project/repository``
            for bindings). Never recomputed once assigned.
        resource_type: Type of the resource (e.g., "sonarqube_permissions")
        name: Local declaration name
        attributes: Declared attribute values as last read from the server
        attributes_hash: SHA256 hash for drift detection
        created_at: When the resource was created
        updated_at: When the resource was last updated
    """

    id: str
    resource_type: str
    name: str = ""
    attributes: dict[str, Any] = Field(default_factory=dict)
    attributes_hash: str = ""
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @property
    def address(self) -> str:
        return f"{self.resource_type}.{self.name}"

    def with_attributes(self, attrs: dict[str, Any]) -> "ResourceInstance":
        """Return a copy carrying refreshed attributes and hash."""
        return self.model_copy(
            update={
                "attributes": attrs,
                "attributes_hash": compute_attributes_hash(attrs),
                "updated_at": datetime.now(),
            }
        )
