from decimal import Decimal
from typing import Optional, Union

from pydantic import BaseModel, Field, validator

from relay.core.units import normalize_address, parse_amount
from relay.services.transfer import TransferRequest, TransferResult

Amount = Optional[Union[float, str]]


class TransferIn(BaseModel):
    amount: Amount = None
    amountETH: Amount = None
    to: Optional[str] = None
    toAddress: Optional[str] = None
    treasury: Optional[str] = None

    @validator("to", "toAddress", "treasury")
    def _addr_ok(cls, v):
        if v in (None, ""):
            return None
        return normalize_address(v)

    def to_request(self, default_amount: Decimal, default_destination: str) -> TransferRequest:
        amount = parse_amount(self.amountETH) or parse_amount(self.amount) or default_amount
        destination = self.to or self.toAddress or self.treasury or default_destination
        return TransferRequest(amount=amount, destination=normalize_address(destination))


class TransferOut(BaseModel):
    success: bool = True
    txHash: str
    hash: str
    transactionHash: str
    from_: str = Field(..., alias="from")
    to: str
    amount: float
    requested: float
    clamped: bool
    nonce: int
    blockNumber: int
    type: str = "EIP-1559"

    class Config:
        populate_by_name = True

    @classmethod
    def from_result(cls, result: TransferResult) -> "TransferOut":
        return cls(
            txHash=result.tx_hash,
            hash=result.tx_hash,
            transactionHash=result.tx_hash,
            from_=result.sender,
            to=result.destination,
            amount=float(result.amount),
            requested=float(result.requested),
            clamped=result.clamped,
            nonce=result.nonce,
            blockNumber=result.block_number,
        )


class BalanceOut(BaseModel):
    wallet: str
    balance: str


class StatusOut(BaseModel):
    status: str = "online"
    method: str
    wallet: Optional[str] = None
    balance: Optional[str] = None
    degraded: bool = False
    endpoint: Optional[str] = None


class HealthOut(BaseModel):
    status: str = "healthy"
