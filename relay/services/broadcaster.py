from __future__ import annotations

import logging
import time
from dataclasses import dataclass

from web3 import Web3
from web3.exceptions import TimeExhausted, Web3Exception

from relay.core.errors import BroadcastError, ConfirmationTimeout, EndpointError, rpc_message
from relay.services.assembler import SignedTransaction
from relay.services.endpoints import EndpointPool

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Confirmation:
    tx_hash: str
    block_number: int
    status: int


class Broadcaster:
    def __init__(
        self,
        pool: EndpointPool,
        timeout: float = 120.0,
        poll_interval: float = 0.5,
        confirmations: int = 1,
    ):
        self.pool = pool
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.confirmations = confirmations

    async def send(self, signed: SignedTransaction) -> str:
        """Hand the raw payload to the endpoint once; return the transaction hash."""
        try:
            tx_hash = await self.pool.run(
                lambda w3: w3.eth.send_raw_transaction(signed.raw)
            )
        except (Web3Exception, ValueError) as exc:
            raise BroadcastError(rpc_message(exc)) from exc
        tx_hash = Web3.to_hex(tx_hash)
        logger.info("TX Hash: %s", tx_hash)
        return tx_hash

    def _wait(self, w3, tx_hash: str) -> Confirmation:
        deadline = time.monotonic() + self.timeout
        receipt = w3.eth.wait_for_transaction_receipt(
            tx_hash, timeout=self.timeout, poll_latency=self.poll_interval
        )
        block_number = int(receipt["blockNumber"])
        while int(w3.eth.block_number) - block_number + 1 < self.confirmations:
            if time.monotonic() >= deadline:
                raise TimeExhausted(
                    f"Transaction {tx_hash} has fewer than {self.confirmations} confirmations"
                )
            time.sleep(self.poll_interval)
        return Confirmation(
            tx_hash=tx_hash,
            block_number=block_number,
            status=int(receipt.get("status", 1)),
        )

    async def wait_for_confirmation(self, tx_hash: str) -> Confirmation:
        """Block until ``tx_hash`` is included. Never resubmits anything."""
        try:
            confirmation = await self.pool.run(self._wait, tx_hash)
        except TimeExhausted as exc:
            raise ConfirmationTimeout(
                f"Transaction {tx_hash} not confirmed within {self.timeout:g}s; it may still be mined",
                tx_hash=tx_hash,
            ) from exc
        except EndpointError as exc:
            raise ConfirmationTimeout(
                f"Lost endpoint while awaiting {tx_hash}: {exc.message}",
                tx_hash=tx_hash,
            ) from exc
        except (Web3Exception, ValueError) as exc:
            raise ConfirmationTimeout(
                f"Receipt lookup for {tx_hash} failed: {rpc_message(exc)}",
                tx_hash=tx_hash,
            ) from exc
        if confirmation.status == 0:
            raise BroadcastError(
                f"Transaction {tx_hash} reverted in block {confirmation.block_number}"
            )
        logger.info("Confirmed %s in block %s", tx_hash, confirmation.block_number)
        return confirmation

    async def submit(self, signed: SignedTransaction) -> Confirmation:
        tx_hash = await self.send(signed)
        return await self.wait_for_confirmation(tx_hash)
