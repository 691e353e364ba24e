"""Remote registry over HTTP.

Wire contract::

    POST {endpoint}/records                 submit a record
    GET  {endpoint}/records/{revisionId}    fetch one record
    GET  {endpoint}/records/count           {"count": n}
    GET  {endpoint}/records                 {"revisionIds": [...]}

Timeouts and connection failures become ``TRANSIENT_FAILURE`` outcomes;
retrying them is the ``RegistryClient``'s job, not this adapter's.
"""

from __future__ import annotations

import logging
from urllib.parse import quote

import httpx

from commitproof.config import RegistryConfig
from commitproof.core.record.models import AttestationRecord
from commitproof.exceptions import RegistryUnavailable
from commitproof.registry.base import Registry
from commitproof.registry.http_client import (
    build_client,
    parse_count_response,
    parse_get_response,
    parse_ids_response,
    parse_put_response,
    transport_failure,
)
from commitproof.registry.outcomes import FetchOutcome, SubmitOutcome

logger = logging.getLogger(__name__)


class HttpRegistry(Registry):
    """Registry backed by a remote HTTP service.

    Example::

        registry = HttpRegistry(config)
        try:
            outcome = await registry.put(record)
        finally:
            await registry.aclose()
    """

    def __init__(
        self,
        config: RegistryConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._client = build_client(config, transport=transport)

    @property
    def registry_name(self) -> str:
        return self.config.endpoint

    async def put(self, record: AttestationRecord) -> SubmitOutcome:
        try:
            response = await self._client.post("/records", json=record.to_payload())
        except httpx.HTTPError as exc:
            reason = transport_failure(exc)
            logger.warning("Submit of %s failed: %s", record.revision_id, reason)
            return SubmitOutcome.transient(reason)
        return parse_put_response(response)

    async def get(self, revision_id: str) -> FetchOutcome:
        try:
            response = await self._client.get(f"/records/{quote(revision_id, safe='')}")
        except httpx.HTTPError as exc:
            reason = transport_failure(exc)
            logger.warning("Fetch of %s failed: %s", revision_id, reason)
            return FetchOutcome.transient(reason)
        return parse_get_response(response)

    async def count(self) -> int:
        try:
            return parse_count_response(await self._client.get("/records/count"))
        except (httpx.HTTPError, ValueError) as exc:
            raise RegistryUnavailable(f"Cannot count records: {exc}") from exc

    async def revision_ids(self) -> list[str]:
        try:
            return parse_ids_response(await self._client.get("/records"))
        except (httpx.HTTPError, ValueError) as exc:
            raise RegistryUnavailable(f"Cannot list records: {exc}") from exc

    async def aclose(self) -> None:
        await self._client.aclose()
