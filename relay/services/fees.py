from __future__ import annotations

import logging
from dataclasses import dataclass

from web3.exceptions import Web3Exception

from relay.core.errors import FeeUnavailable
from relay.services.endpoints import EndpointPool

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeeParameters:
    max_fee_per_gas: int
    max_priority_fee_per_gas: int


def _suggest_fees(w3) -> FeeParameters:
    block = w3.eth.get_block("latest")
    base_fee = block.get("baseFeePerGas")
    if base_fee is None:
        raise FeeUnavailable("Latest block carries no baseFeePerGas; network is not EIP-1559")
    priority = int(w3.eth.max_priority_fee)
    # same headroom rule as the common client libraries: two base fees plus tip
    max_fee = 2 * int(base_fee) + priority
    return FeeParameters(max_fee_per_gas=max_fee, max_priority_fee_per_gas=priority)


class FeeEstimator:
    """Pass-through of the endpoint's current fee suggestion. No caching."""

    def __init__(self, pool: EndpointPool):
        self.pool = pool

    async def current_fees(self) -> FeeParameters:
        try:
            fees = await self.pool.run(_suggest_fees)
        except (Web3Exception, ValueError, KeyError) as exc:
            raise FeeUnavailable(f"Fee data unavailable: {exc}") from exc
        if fees.max_fee_per_gas < 0 or fees.max_priority_fee_per_gas < 0:
            raise FeeUnavailable("Endpoint suggested a negative fee")
        logger.debug(
            "Fees: maxFeePerGas=%s maxPriorityFeePerGas=%s",
            fees.max_fee_per_gas,
            fees.max_priority_fee_per_gas,
        )
        return fees
