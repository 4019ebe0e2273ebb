"""Engine error types."""

from __future__ import annotations


class EngineError(Exception):
    """Base exception for engine errors."""


class UnknownResourceTypeError(EngineError):
    """Raised when a resource type has no registration/handler."""

    def __init__(self, resource_type: str) -> None:
        super().__init__(f"Unknown resource type: {resource_type}")
        self.resource_type = resource_type


class ValidationError(EngineError):
    """A declaration violates its selector/scope preconditions."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        msg = "Validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        super().__init__(msg)


class EditionUnsupportedError(EngineError):
    """Raised when a feature is not available in the server's edition."""

    def __init__(self, feature: str, edition: str, version: str | None) -> None:
        self.feature = feature
        self.edition = edition
        self.version = version
        super().__init__(
            f"{feature} are not supported in the {edition} edition of SonarQube. "
            f"You are using: SonarQube {edition} version {version or 'unknown'}"
        )


class TransportError(EngineError):
    """Network failure or unexpected status code from the SonarQube API.

    The underlying ``requests`` exception, if any, is chained via ``__cause__``.
    """

    def __init__(
        self,
        *,
        method: str,
        url: str,
        caller: str,
        status_code: int | None = None,
        detail: str = "",
    ) -> None:
        self.method = method
        self.url = url
        self.caller = caller
        self.status_code = status_code
        self.detail = detail
        status = f"status {status_code}" if status_code is not None else "no response"
        msg = f"{caller}: {method} {url} failed ({status})"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class DecodeError(EngineError):
    """Raised when a response body does not match the expected shape."""

    def __init__(self, caller: str, message: str) -> None:
        self.caller = caller
        super().__init__(f"{caller}: failed to decode response: {message}")


class NotFoundError(EngineError):
    """Raised when no remote record matches a declaration."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(f"Unable to find {resource_type} with id {resource_id!r}")


class ImportNotSupportedError(EngineError):
    """Raised when a resource type has no importable identity."""

    def __init__(self, resource_type: str) -> None:
        self.resource_type = resource_type
        super().__init__(f"Resource type {resource_type} does not support import")
