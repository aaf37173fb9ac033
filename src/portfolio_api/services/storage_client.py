"""Object storage client.

Talks to the Supabase Storage REST API with the service-role key. Only
the calls the admin back office needs are implemented: list buckets,
list objects in one bucket (offset paginated) and remove objects by
name in a batch.

Two failure classes are distinguished: ``StorageError`` when the store
answered with an error status (one bucket is misconfigured, missing or
forbidden; the caller records a step failure and moves on) and
``StorageUnavailableError`` when the store could not be reached at all.
"""

from collections.abc import AsyncGenerator
from typing import Any

import httpx

from portfolio_api.config import settings
from portfolio_api.logging_config import get_logger

logger = get_logger(__name__)


class StorageError(Exception):
    """The storage service rejected a request."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class StorageUnavailableError(Exception):
    """The storage service could not be reached."""


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or f"HTTP {resp.status_code}"
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or body)
    return str(body)


class StorageClient:
    """Async client for the object storage service.

    Usage::

        async with StorageClient() as storage:
            files = await storage.list_objects("project-images")
    """

    def __init__(
        self,
        base_url: str | None = None,
        service_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        root = (base_url or settings.supabase_url).rstrip("/")
        key = settings.supabase_service_role_key if service_key is None else service_key
        self._client = httpx.AsyncClient(
            base_url=f"{root}/storage/v1",
            headers={
                "apikey": key,
                "Authorization": f"Bearer {key}",
            },
            timeout=timeout or settings.storage_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "StorageClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            resp = await self._client.request(method, path, **kwargs)
        except httpx.TransportError as exc:
            logger.error(
                "Storage service unreachable",
                method=method,
                path=path,
                error=str(exc),
            )
            raise StorageUnavailableError(
                f"Storage service unreachable: {exc}"
            ) from exc

        if resp.status_code >= 400:
            raise StorageError(_error_message(resp), status_code=resp.status_code)

        if not resp.content:
            return None
        return resp.json()

    async def list_buckets(self) -> list[dict[str, Any]]:
        """Return every bucket visible to the service role."""
        return await self._request("GET", "/bucket") or []

    async def list_objects(
        self,
        bucket: str,
        prefix: str = "",
        limit: int = 100,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        """Return one page of entries directly under ``prefix``.

        Folders come back as entries with ``id`` set to None. An empty or
        null body is returned as an empty list.
        """
        body = {
            "prefix": prefix,
            "limit": limit,
            "offset": offset,
            "sortBy": {"column": "name", "order": "asc"},
        }
        return await self._request("POST", f"/object/list/{bucket}", json=body) or []

    async def remove_objects(self, bucket: str, paths: list[str]) -> list[dict[str, Any]]:
        """Remove the named objects; returns the entries the store deleted."""
        if not paths:
            return []
        return (
            await self._request("DELETE", f"/object/{bucket}", json={"prefixes": paths})
            or []
        )


async def get_storage_client() -> AsyncGenerator[StorageClient, None]:
    """FastAPI dependency yielding a storage client for one request."""
    async with StorageClient() as client:
        yield client
