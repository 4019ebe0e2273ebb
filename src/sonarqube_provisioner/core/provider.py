"""SonarQube Provider - Connection configuration for a SonarQube server."""

import logging
from dataclasses import dataclass
from functools import cached_property
from typing import Self

import requests
from pydantic import BaseModel, ConfigDict, SecretStr

from sonarqube_provisioner.core.client import SonarQubeClient
from sonarqube_provisioner.engine.codec import ServerNavigation, decode

logger = logging.getLogger(__name__)


class TokenAuth(BaseModel):
    """User token authentication (sent as the basic-auth login with an empty password)."""

    token: SecretStr


class BasicAuth(BaseModel):
    """Login/password authentication."""

    user: str
    password: SecretStr


@dataclass(frozen=True)
class ServerInfo:
    """Edition and version of the connected server."""

    edition: str
    version: str | None = None

    @property
    def is_community(self) -> bool:
        return self.edition.lower() == "community"


class SonarQubeProvider(BaseModel):
    """Connection configuration for a SonarQube server.

    The provider is shared read-only by every reconciliation call. The server
    edition/version is resolved once (from configuration, or from the server
    on first use) and never changes afterwards.

    Examples:
        # Token authentication, edition discovered from the server
        provider = SonarQubeProvider(
            host="https://sonar.company.com",
            auth=TokenAuth(token="squ_..."),
        )

        # Tests: inject a client with a mocked session
        provider = SonarQubeProvider.from_client(client, edition="developer")
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    host: str | None = None
    auth: TokenAuth | BasicAuth | None = None
    edition: str | None = None
    version: str | None = None
    verify_ssl: bool = True

    # Injected client (for testing)
    _injected_client: SonarQubeClient | None = None

    @classmethod
    def from_client(
        cls,
        client: SonarQubeClient,
        *,
        edition: str | None = None,
        version: str | None = None,
    ) -> Self:
        """Create a provider around a pre-built client.

        Args:
            client: A configured SonarQubeClient instance
            edition: Server edition, skips discovery when set
            version: Server version reported in edition errors
        """
        provider = cls.model_construct(edition=edition, version=version)
        provider._injected_client = client
        return provider

    @cached_property
    def client(self) -> SonarQubeClient:
        """Get the SonarQube client."""
        if self._injected_client is not None:
            return self._injected_client

        if self.host is None:
            raise ValueError(
                "Either provide host (+auth), or use SonarQubeProvider.from_client() "
                "to inject a client"
            )

        session = requests.Session()
        session.verify = self.verify_ssl
        if isinstance(self.auth, TokenAuth):
            session.auth = (self.auth.token.get_secret_value(), "")
        elif isinstance(self.auth, BasicAuth):
            session.auth = (self.auth.user, self.auth.password.get_secret_value())
        return SonarQubeClient(self.host, session=session)

    @cached_property
    def server_info(self) -> ServerInfo:
        """Server edition and version, fetched at most once."""
        if self.edition is not None:
            return ServerInfo(edition=self.edition, version=self.version)

        version = self.version or self.client.get_text(
            "/api/server/version", caller="SonarQubeProvider.server_info"
        ).strip()
        payload = self.client.get_json(
            "/api/navigation/global", caller="SonarQubeProvider.server_info"
        )
        navigation = decode(ServerNavigation, payload, "SonarQubeProvider.server_info")
        edition = navigation.edition or "community"
        logger.debug("Detected SonarQube %s edition, version %s", edition, version)
        return ServerInfo(edition=edition, version=version)
