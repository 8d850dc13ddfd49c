from decimal import Decimal


class RelayError(Exception):
    """Base class for every failure a transfer can end in."""

    code = "relay_error"

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code


class NoReachableEndpoint(RelayError):
    code = "no_reachable_endpoint"


class WrongNetwork(RelayError):
    code = "wrong_network"


class WalletNotConfigured(RelayError):
    code = "wallet_not_configured"

    def __init__(self, message: str = "Wallet not configured"):
        super().__init__(message)


class InsufficientFunds(RelayError):
    """Raised by the clamp when the balance cannot cover reserve plus transfer.

    ``balance`` is the observed balance in native units, reported back to the
    caller so they can correct the request.
    """

    code = "insufficient_funds"

    def __init__(self, message: str, balance: Decimal, reserve: Decimal):
        super().__init__(message)
        self.balance = balance
        self.reserve = reserve


class FeeUnavailable(RelayError):
    code = "fee_unavailable"


class SigningError(RelayError):
    code = "signing_error"


class BroadcastError(RelayError):
    code = "broadcast_error"


class ConfirmationTimeout(RelayError):
    """The network accepted the transaction but no receipt arrived in time.

    The transaction may still be mined later; ``tx_hash`` identifies it.
    """

    code = "confirmation_timeout"

    def __init__(self, message: str, tx_hash: str):
        super().__init__(message)
        self.tx_hash = tx_hash


class EndpointError(RelayError):
    """The bound endpoint failed mid-operation; it has been unbound."""

    code = "endpoint_error"


class RpcError(RelayError):
    """The node answered a read with an error (rate limit, bad params, ...).

    The endpoint stays bound; only transport failures unbind it.
    """

    code = "rpc_error"


def rpc_message(exc: Exception) -> str:
    """Pull the node's own message out of an RPC error."""
    payload = exc.args[0] if exc.args else exc
    if isinstance(payload, dict) and "message" in payload:
        return str(payload["message"])
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(payload)
