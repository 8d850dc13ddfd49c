from __future__ import annotations

import logging
from dataclasses import dataclass, field

from eth_account.signers.local import LocalAccount
from web3 import Web3

from relay.core.errors import SigningError
from relay.services.fees import FeeParameters

logger = logging.getLogger(__name__)

PLAIN_TRANSFER_GAS = 21000
DYNAMIC_FEE_TX_TYPE = 2


@dataclass(frozen=True)
class UnsignedTransaction:
    destination: str
    value: int
    nonce: int
    max_fee_per_gas: int
    max_priority_fee_per_gas: int
    chain_id: int
    # plain value transfer only: no call data, so gas and type never vary
    gas_limit: int = field(default=PLAIN_TRANSFER_GAS, init=False)
    tx_type: int = field(default=DYNAMIC_FEE_TX_TYPE, init=False)

    def as_dict(self) -> dict:
        return {
            "to": self.destination,
            "value": self.value,
            "nonce": self.nonce,
            "gas": self.gas_limit,
            "maxFeePerGas": self.max_fee_per_gas,
            "maxPriorityFeePerGas": self.max_priority_fee_per_gas,
            "type": self.tx_type,
            "chainId": self.chain_id,
        }


@dataclass(frozen=True)
class SignedTransaction:
    raw: bytes
    tx_hash: str
    unsigned: UnsignedTransaction


class TransactionAssembler:
    """Builds a type-2 value transfer and signs it locally."""

    def __init__(self, signer: LocalAccount):
        self.signer = signer

    def build(
        self,
        destination: str,
        amount_wei: int,
        nonce: int,
        fees: FeeParameters,
        chain_id: int,
    ) -> UnsignedTransaction:
        return UnsignedTransaction(
            destination=destination,
            value=amount_wei,
            nonce=nonce,
            max_fee_per_gas=fees.max_fee_per_gas,
            max_priority_fee_per_gas=fees.max_priority_fee_per_gas,
            chain_id=chain_id,
        )

    def sign(self, tx: UnsignedTransaction) -> SignedTransaction:
        try:
            signed = self.signer.sign_transaction(tx.as_dict())
        except (ValueError, TypeError, KeyError) as exc:
            raise SigningError(f"Signing failed: {exc}") from exc
        return SignedTransaction(
            raw=bytes(signed.raw_transaction),
            tx_hash=Web3.to_hex(signed.hash),
            unsigned=tx,
        )

    def assemble(
        self,
        destination: str,
        amount_wei: int,
        nonce: int,
        fees: FeeParameters,
        chain_id: int,
    ) -> SignedTransaction:
        tx = self.build(destination, amount_wei, nonce, fees, chain_id)
        logger.info(
            "EIP-1559 TX: to=%s value=%s nonce=%s type=%s",
            tx.destination,
            tx.value,
            tx.nonce,
            tx.tx_type,
        )
        return self.sign(tx)
