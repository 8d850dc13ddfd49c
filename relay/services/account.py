from __future__ import annotations

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3.exceptions import Web3Exception

from relay.core.errors import RpcError, SigningError, WalletNotConfigured, rpc_message
from relay.services.endpoints import EndpointPool


def load_account(private_key: str | None) -> LocalAccount | None:
    """Build the signing account, or ``None`` when no key is configured."""
    if not private_key:
        return None
    try:
        return Account.from_key(private_key)
    except (ValueError, TypeError) as exc:
        # never echo the key material itself
        raise SigningError(f"Invalid signing key: {type(exc).__name__}") from exc


class AccountState:
    """Read-through view of the relay account on the bound endpoint.

    Balance and nonce are re-read on every call and never cached.
    """

    def __init__(self, pool: EndpointPool, account: LocalAccount | None):
        self.pool = pool
        self._account = account

    @property
    def configured(self) -> bool:
        return self._account is not None

    @property
    def address(self) -> str | None:
        return self._account.address if self._account is not None else None

    @property
    def signer(self) -> LocalAccount:
        if self._account is None:
            raise WalletNotConfigured()
        return self._account

    async def _read(self, what: str, op):
        try:
            return await self.pool.run(op)
        except (Web3Exception, ValueError) as exc:
            raise RpcError(f"{what} read failed: {rpc_message(exc)}") from exc

    async def balance(self) -> int:
        """Current balance in wei."""
        address = self.signer.address
        return await self._read("Balance", lambda w3: int(w3.eth.get_balance(address)))

    async def pending_nonce(self) -> int:
        """Transaction count including those still in the pending pool."""
        address = self.signer.address
        return await self._read(
            "Nonce", lambda w3: int(w3.eth.get_transaction_count(address, "pending"))
        )
