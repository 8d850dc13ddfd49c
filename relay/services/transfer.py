"""Orchestration of a single transfer from balance check to confirmation."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from relay.core.errors import RelayError, SigningError, WalletNotConfigured
from relay.core.units import from_wei, to_wei
from relay.services.account import AccountState
from relay.services.assembler import TransactionAssembler
from relay.services.broadcaster import Broadcaster
from relay.services.clamp import AmountClamper
from relay.services.endpoints import EndpointPool
from relay.services.fees import FeeEstimator

logger = logging.getLogger(__name__)

# operator has to fix the deployment; retrying the request cannot help
MISCONFIGURATION = (SigningError, WalletNotConfigured)


class TransferStage(str, Enum):
    idle = "idle"
    connection_ensured = "connection_ensured"
    balance_checked = "balance_checked"
    fees_fetched = "fees_fetched"
    assembled = "assembled"
    broadcast = "broadcast"
    confirmed = "confirmed"
    failed = "failed"


@dataclass(frozen=True)
class TransferRequest:
    amount: Decimal
    destination: str


@dataclass(frozen=True)
class TransferResult:
    tx_hash: str
    sender: str
    destination: str
    amount: Decimal
    requested: Decimal
    nonce: int
    block_number: int

    @property
    def clamped(self) -> bool:
        return self.amount != self.requested


class TransferFailed(RelayError):
    """Terminal ``failed`` state of a transfer.

    ``stage`` is the last stage completed before ``cause`` was raised.
    """

    state = TransferStage.failed

    def __init__(self, stage: TransferStage, cause: RelayError):
        super().__init__(cause.message, cause.code)
        self.stage = stage
        self.cause = cause


class TransferService:
    def __init__(
        self,
        pool: EndpointPool,
        account: AccountState,
        fees: FeeEstimator,
        clamper: AmountClamper,
        broadcaster: Broadcaster,
        serialize: bool = True,
    ):
        self.pool = pool
        self.account = account
        self.fees = fees
        self.clamper = clamper
        self.broadcaster = broadcaster
        # one writer at a time so two transfers never read the same nonce
        self._writer = asyncio.Lock() if serialize else None

    def _serialized(self):
        return self._writer if self._writer is not None else contextlib.nullcontext()

    async def execute_transfer(self, request: TransferRequest) -> TransferResult:
        """Run one transfer end to end.

        Raises :class:`TransferFailed` carrying the first error hit; no stage
        is retried and nothing is recorded on failure.
        """
        async with self._serialized():
            stage = TransferStage.idle
            try:
                signer = self.account.signer

                await self.pool.ensure_connected()
                stage = self._advance(stage, TransferStage.connection_ensured)

                balance_wei = await self.account.balance()
                clamp = self.clamper.clamp(to_wei(request.amount), balance_wei)
                stage = self._advance(stage, TransferStage.balance_checked)

                nonce = await self.account.pending_nonce()
                fees = await self.fees.current_fees()
                stage = self._advance(stage, TransferStage.fees_fetched)

                assembler = TransactionAssembler(signer)
                signed = assembler.assemble(
                    request.destination, clamp.amount_wei, nonce, fees, self.pool.chain_id
                )
                stage = self._advance(stage, TransferStage.assembled)

                tx_hash = await self.broadcaster.send(signed)
                stage = self._advance(stage, TransferStage.broadcast)

                confirmation = await self.broadcaster.wait_for_confirmation(tx_hash)
                stage = self._advance(stage, TransferStage.confirmed)
            except RelayError as exc:
                self._advance(stage, TransferStage.failed)
                level = logging.ERROR if isinstance(exc, MISCONFIGURATION) else logging.WARNING
                logger.log(
                    level, "Transfer failed after %s: [%s] %s", stage.value, exc.code, exc.message
                )
                raise TransferFailed(stage, exc) from exc

        return TransferResult(
            tx_hash=confirmation.tx_hash,
            sender=signer.address,
            destination=request.destination,
            amount=from_wei(clamp.amount_wei),
            requested=from_wei(clamp.requested_wei),
            nonce=nonce,
            block_number=confirmation.block_number,
        )

    @staticmethod
    def _advance(current: TransferStage, nxt: TransferStage) -> TransferStage:
        logger.debug("transfer %s -> %s", current.value, nxt.value)
        return nxt
