"""In-process, hash-chained ledger.

Used when no ledger gateway is configured (local development) and in
tests. Each accepted payload becomes one block whose hash covers the
previous block's hash, so any later edit to a recorded payload breaks
`verify()`.
"""

import hashlib
import json
from dataclasses import dataclass

from auditchain.ledger.base import LedgerClient
from auditchain.schemas.log_entry import LedgerReceipt, ReducedLogEntry

GENESIS_HASH = "0" * 64


@dataclass(frozen=True)
class Block:
    number: int
    log_id: str
    payload: dict
    previous_hash: str
    tx_hash: str


def _block_hash(previous_hash: str, log_id: str, payload: dict) -> str:
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(f"{previous_hash}:{log_id}:{canonical}".encode()).hexdigest()


class InMemoryLedger(LedgerClient):
    """Append-only list of blocks held in memory."""

    def __init__(self) -> None:
        self._blocks: list[Block] = []
        self._by_log_id: dict[str, Block] = {}

    @property
    def blocks(self) -> tuple[Block, ...]:
        return tuple(self._blocks)

    @property
    def head_hash(self) -> str:
        return self._blocks[-1].tx_hash if self._blocks else GENESIS_HASH

    def get(self, log_id: str) -> Block | None:
        return self._by_log_id.get(log_id)

    async def create_blockchain_log(
        self, log_id: str, payload: ReducedLogEntry
    ) -> LedgerReceipt:
        existing = self._by_log_id.get(log_id)
        if existing is not None:
            return LedgerReceipt(tx_hash=existing.tx_hash, block_number=existing.number)

        body = payload.to_wire()
        previous = self.head_hash
        block = Block(
            number=len(self._blocks) + 1,
            log_id=log_id,
            payload=body,
            previous_hash=previous,
            tx_hash=_block_hash(previous, log_id, body),
        )
        self._blocks.append(block)
        self._by_log_id[log_id] = block
        return LedgerReceipt(tx_hash=block.tx_hash, block_number=block.number)

    def verify(self) -> bool:
        """Recompute the chain and report whether every link still holds."""
        previous = GENESIS_HASH
        for block in self._blocks:
            if block.previous_hash != previous:
                return False
            if _block_hash(previous, block.log_id, block.payload) != block.tx_hash:
                return False
            previous = block.tx_hash
        return True
