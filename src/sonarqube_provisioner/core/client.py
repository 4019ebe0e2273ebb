"""Low-level HTTP client for the SonarQube web API."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import requests

from sonarqube_provisioner.engine.errors import DecodeError, TransportError

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30


class SonarQubeClient:
    """Issue single requests against ``<base_url>/api/...`` and validate status codes.

    No retries are attempted: a failed request surfaces immediately as a
    ``TransportError``.
    """

    def __init__(
        self,
        base_url: str,
        *,
        session: requests.Session | None = None,
        timeout: float = REQUEST_TIMEOUT,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, str] | list[tuple[str, str]] | None = None,
        expected_status: int,
        caller: str,
    ) -> requests.Response:
        """Send one request; raise ``TransportError`` unless *expected_status* comes back."""
        url = self.url(path)
        logger.debug("%s %s params=%s", method, url, params)
        try:
            resp = self.session.request(method, url, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            raise TransportError(method=method, url=url, caller=caller, detail=str(exc)) from exc

        if resp.status_code != expected_status:
            raise TransportError(
                method=method,
                url=url,
                caller=caller,
                status_code=resp.status_code,
                detail=(resp.text or "")[:500],
            )
        return resp

    def post(
        self,
        path: str,
        *,
        params: Mapping[str, str] | list[tuple[str, str]] | None = None,
        caller: str,
        expected_status: int = 204,
    ) -> None:
        """POST a mutating call (``204 No Content`` by default)."""
        self.request("POST", path, params=params, expected_status=expected_status, caller=caller)

    def get_json(
        self,
        path: str,
        *,
        params: Mapping[str, str] | list[tuple[str, str]] | None = None,
        caller: str,
    ) -> Any:
        """GET a read endpoint and return its decoded JSON body."""
        resp = self.request("GET", path, params=params, expected_status=200, caller=caller)
        try:
            return resp.json()
        except ValueError as exc:
            raise DecodeError(caller, str(exc)) from exc

    def get_text(self, path: str, *, caller: str) -> str:
        resp = self.request("GET", path, expected_status=200, caller=caller)
        return resp.text
