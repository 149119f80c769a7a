"""HTTP client for the ledger gateway.

The gateway fronts the ledger network and exposes one write endpoint:

    POST {ledger_url}/logs
    {"logId": "...", "payload": {...reduced entry, camelCase...}}
    -> 201 {"txHash": "...", "blockNumber": 123}

Transport failures become LedgerUnavailableError; non-2xx or malformed
responses become LedgerResponseError. There are no retries here.
"""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from auditchain.ledger.base import LedgerClient
from auditchain.middleware.exceptions import LedgerResponseError, LedgerUnavailableError
from auditchain.schemas.log_entry import LedgerReceipt, ReducedLogEntry

logger = logging.getLogger("auditchain.ledger")


class HttpLedgerClient(LedgerClient):
    """LedgerClient backed by the gateway's REST API."""

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str = "",
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        headers = {"Authorization": f"Bearer {api_key}"} if api_key else {}
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout_seconds,
            headers=headers,
            transport=transport,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def create_blockchain_log(
        self, log_id: str, payload: ReducedLogEntry
    ) -> LedgerReceipt:
        try:
            response = await self._client.post(
                "/logs",
                json={"logId": log_id, "payload": payload.to_wire()},
            )
        except httpx.RequestError as exc:
            raise LedgerUnavailableError(
                f"Ledger request failed for log {log_id}: {exc!r}"
            ) from exc

        if response.is_error:
            raise LedgerResponseError(
                f"Ledger returned HTTP {response.status_code} for log {log_id}",
                status_code=response.status_code,
            )

        try:
            receipt = LedgerReceipt.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise LedgerResponseError(
                f"Ledger returned an invalid receipt for log {log_id}",
                status_code=response.status_code,
            ) from exc

        logger.debug("Ledger accepted %s: tx=%s block=%d", log_id, receipt.tx_hash, receipt.block_number)
        return receipt
