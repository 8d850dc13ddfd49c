from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from relay.core.errors import InsufficientFunds
from relay.core.units import from_wei, to_wei

MIN_RESERVE = Decimal("0.002")


@dataclass(frozen=True)
class ClampResult:
    amount_wei: int
    requested_wei: int

    @property
    def clamped(self) -> bool:
        return self.amount_wei != self.requested_wei


class AmountClamper:
    """Caps a transfer so ``reserve`` stays behind to pay the network fee."""

    def __init__(self):
        self.reserve = MIN_RESERVE
        self.reserve_wei = to_wei(self.reserve)

    def clamp(self, requested_wei: int, balance_wei: int) -> ClampResult:
        balance = from_wei(balance_wei)
        if balance_wei < self.reserve_wei:
            raise InsufficientFunds(
                f"Need {self.reserve} ETH for gas", balance=balance, reserve=self.reserve
            )
        amount_wei = min(requested_wei, balance_wei - self.reserve_wei)
        if amount_wei <= 0:
            raise InsufficientFunds(
                "Insufficient after gas reserve", balance=balance, reserve=self.reserve
            )
        return ClampResult(amount_wei=amount_wei, requested_wei=requested_wei)
