"""Ordered RPC endpoint selection with lazy failover."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Callable, Sequence, TypeVar

from web3 import HTTPProvider, Web3
from web3.exceptions import ProviderConnectionError

from relay.core.errors import EndpointError, NoReachableEndpoint, WrongNetwork

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Errors that say the endpoint itself is unusable, as opposed to the node
# rejecting a well-formed request.
TRANSPORT_ERRORS = (OSError, ProviderConnectionError)


class PoolState(str, Enum):
    unbound = "unbound"
    bound = "bound"
    failed = "failed"


def build_web3(url: str, timeout: float) -> Web3:
    return Web3(HTTPProvider(url, request_kwargs={"timeout": timeout}))


class EndpointPool:
    """Holds at most one live endpoint chosen first-success from ``urls``.

    ``Unbound -> Bound(url)`` on a successful probe, ``Bound -> Failed`` when
    an operation hits a transport error, and ``Failed -> Bound`` again on the
    next :meth:`ensure_connected`. Nothing monitors idle endpoints.
    """

    def __init__(
        self,
        urls: Sequence[str],
        chain_id: int,
        timeout: float = 10.0,
        web3_factory: Callable[[str, float], Web3] = build_web3,
    ):
        if not urls:
            raise ValueError("at least one RPC endpoint is required")
        self.urls = list(urls)
        self.chain_id = chain_id
        self.timeout = timeout
        self._web3_factory = web3_factory
        self._lock = asyncio.Lock()
        self._state = PoolState.unbound
        self._web3: Web3 | None = None
        self._active_url: str | None = None

    @property
    def state(self) -> PoolState:
        return self._state

    @property
    def active_url(self) -> str | None:
        return self._active_url

    @property
    def is_bound(self) -> bool:
        return self._state is PoolState.bound and self._web3 is not None

    def _probe(self, url: str) -> Web3:
        web3 = self._web3_factory(url, self.timeout)
        web3.eth.block_number  # liveness
        remote_chain = int(web3.eth.chain_id)
        if remote_chain != self.chain_id:
            raise WrongNetwork(
                f"{url} serves chain {remote_chain}, expected {self.chain_id}"
            )
        return web3

    async def ensure_connected(self) -> Web3:
        """Return the bound client, probing the list in order if none is bound."""
        if self.is_bound:
            return self._web3
        async with self._lock:
            # another caller may have bound while we waited
            if self.is_bound:
                return self._web3
            for url in self.urls:
                try:
                    web3 = await asyncio.to_thread(self._probe, url)
                except WrongNetwork as exc:
                    logger.warning("Skipping endpoint: %s", exc.message)
                    continue
                except Exception as exc:
                    logger.warning("Endpoint %s failed liveness probe: %s", url, exc)
                    continue
                self._web3 = web3
                self._active_url = url
                self._state = PoolState.bound
                logger.info("Connected: %s (chain %s)", url, self.chain_id)
                return web3
            self._web3 = None
            self._active_url = None
            self._state = PoolState.failed
            raise NoReachableEndpoint(
                f"No reachable RPC endpoint among {len(self.urls)} configured"
            )

    def mark_failed(self, reason: str = "") -> None:
        if self._state is PoolState.bound:
            logger.warning("Dropping endpoint %s: %s", self._active_url, reason)
        self._web3 = None
        self._active_url = None
        self._state = PoolState.failed

    async def run(self, op: Callable[..., T], *args: Any) -> T:
        """Run the blocking ``op(web3, *args)`` against the bound endpoint.

        Transport failures unbind the endpoint so the next call re-selects.
        """
        web3 = await self.ensure_connected()
        url = self._active_url
        try:
            return await asyncio.to_thread(op, web3, *args)
        except TRANSPORT_ERRORS as exc:
            if self._web3 is web3:
                self.mark_failed(str(exc))
            raise EndpointError(f"RPC endpoint {url} failed: {exc}") from exc
