"""aioboto3 client factory shared by all operations."""

from dataclasses import dataclass
from typing import Any

import aioboto3


@dataclass(frozen=True)
class Credentials:
    """An AWS credentials bundle supplied by the caller."""

    access_key_id: str
    secret_access_key: str
    session_token: str | None = None

    @classmethod
    def from_sts(cls, response: dict[str, Any]) -> "Credentials":
        """Build from the ``Credentials`` block of an AssumeRole response."""
        creds = response["Credentials"]
        return cls(
            access_key_id=creds["AccessKeyId"],
            secret_access_key=creds["SecretAccessKey"],
            session_token=creds.get("SessionToken"),
        )


class ClientFactory:
    """
    Creates and caches aioboto3 clients for one set of credentials.

    One client is kept per (service, region) and reused by every operation
    until :meth:`close` is called. Construct one factory per process and pass
    it to the operations that need AWS access.

    Supports both AWS and LocalStack environments. When endpoint_url is
    provided, all clients are created against that endpoint.
    """

    def __init__(
        self,
        credentials: Credentials | None = None,
        endpoint_url: str | None = None,
    ) -> None:
        """
        Initialize client factory.

        Args:
            credentials: Credentials for every client (default: boto3 defaults)
            endpoint_url: Optional endpoint URL (for LocalStack or other AWS-compatible services)
        """
        self.credentials = credentials
        self.endpoint_url = endpoint_url
        self._session: aioboto3.Session | None = None
        self._clients: dict[tuple[str, str | None], Any] = {}

    def _get_session(self) -> aioboto3.Session:
        if self._session is None:
            if self.credentials is not None:
                self._session = aioboto3.Session(
                    aws_access_key_id=self.credentials.access_key_id,
                    aws_secret_access_key=self.credentials.secret_access_key,
                    aws_session_token=self.credentials.session_token,
                )
            else:
                self._session = aioboto3.Session()
        return self._session

    async def client(self, service: str, region: str | None = None) -> Any:
        """Get or create the client for a service in a region."""
        key = (service, region)
        if key in self._clients:
            return self._clients[key]

        kwargs: dict[str, Any] = {}
        if region:
            kwargs["region_name"] = region
        if self.endpoint_url:
            kwargs["endpoint_url"] = self.endpoint_url

        session = self._get_session()
        client = await session.client(service, **kwargs).__aenter__()
        self._clients[key] = client
        return client

    def with_credentials(self, credentials: Credentials) -> "ClientFactory":
        """A new factory for other credentials, against the same endpoint."""
        return ClientFactory(credentials=credentials, endpoint_url=self.endpoint_url)

    async def close(self) -> None:
        """Close every cached client."""
        clients, self._clients = self._clients, {}
        for client in clients.values():
            await client.__aexit__(None, None, None)
        self._session = None

    async def __aenter__(self) -> "ClientFactory":
        """Enter async context manager."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """Exit async context manager."""
        await self.close()
