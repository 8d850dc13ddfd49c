from __future__ import annotations

from dataclasses import dataclass

from relay.config import Settings
from relay.services.account import AccountState, load_account
from relay.services.broadcaster import Broadcaster
from relay.services.clamp import AmountClamper
from relay.services.endpoints import EndpointPool, build_web3
from relay.services.fees import FeeEstimator
from relay.services.transfer import TransferService


@dataclass
class RelayContext:
    """Everything a request needs, built once at startup."""

    settings: Settings
    pool: EndpointPool
    account: AccountState
    transfers: TransferService


def build_context(settings: Settings, web3_factory=build_web3) -> RelayContext:
    pool = EndpointPool(
        settings.RPC_URLS,
        chain_id=settings.CHAIN_ID,
        timeout=settings.RPC_TIMEOUT,
        web3_factory=web3_factory,
    )
    account = AccountState(pool, load_account(settings.TREASURY_PRIVATE_KEY))
    transfers = TransferService(
        pool=pool,
        account=account,
        fees=FeeEstimator(pool),
        clamper=AmountClamper(),
        broadcaster=Broadcaster(
            pool,
            timeout=settings.RECEIPT_TIMEOUT,
            poll_interval=settings.RECEIPT_POLL_INTERVAL,
            confirmations=settings.CONFIRMATIONS,
        ),
        serialize=settings.SERIALIZE_TRANSFERS,
    )
    return RelayContext(settings=settings, pool=pool, account=account, transfers=transfers)
