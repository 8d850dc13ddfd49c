from decimal import Decimal

import pytest
from web3 import Web3
from web3.exceptions import TimeExhausted

from relay.config import Settings

# Well-known development key; never funded on mainnet.
TEST_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
TEST_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
DEST = "0x4024Fd78E2AD5532FBF3ec2B3eC83870FAe45fC7"

GWEI = 10 ** 9


def eth(value: str) -> int:
    return int(Decimal(value) * 10 ** 18)


class FakeEth:
    """In-memory stand-in for ``web3.eth`` with just the calls the relay makes."""

    def __init__(self, chain_id=1, balance=eth("1"), nonce=0, base_fee=10 * GWEI,
                 priority_fee=GWEI, fail=False):
        self.chain_id = chain_id
        self.balance = balance
        self.nonce = nonce
        self.base_fee = base_fee
        self.priority_fee = priority_fee
        self.fail = fail
        self.head = 100
        self.sent: list[bytes] = []
        self.calls: list[str] = []
        self.reject_with = None
        self.receipt_timeout = False
        self.receipt_status = 1
        self.read_error = None
        self.nonce_error = None

    def _check(self, name):
        self.calls.append(name)
        if self.fail:
            raise ConnectionError(f"{name}: connection refused")

    @property
    def block_number(self):
        self._check("block_number")
        return self.head

    def get_balance(self, address):
        self._check("get_balance")
        if self.read_error is not None:
            raise ValueError(self.read_error)
        return self.balance

    def get_transaction_count(self, address, block_identifier="latest"):
        self._check("get_transaction_count")
        assert block_identifier == "pending"
        if self.nonce_error is not None:
            raise ValueError(self.nonce_error)
        return self.nonce

    def get_block(self, identifier):
        self._check("get_block")
        block = {"number": self.head}
        if self.base_fee is not None:
            block["baseFeePerGas"] = self.base_fee
        return block

    @property
    def max_priority_fee(self):
        self._check("max_priority_fee")
        return self.priority_fee

    def send_raw_transaction(self, raw):
        self._check("send_raw_transaction")
        if self.reject_with is not None:
            raise ValueError(self.reject_with)
        self.sent.append(bytes(raw))
        self.nonce += 1
        return Web3.keccak(raw)

    def wait_for_transaction_receipt(self, tx_hash, timeout=120, poll_latency=0.1):
        self._check("wait_for_transaction_receipt")
        if self.receipt_timeout:
            raise TimeExhausted(f"Transaction {tx_hash} is not in the chain after {timeout} seconds")
        self.head += 1
        return {"transactionHash": tx_hash, "blockNumber": self.head, "status": self.receipt_status}


class FakeWeb3:
    def __init__(self, url, eth):
        self.url = url
        self.eth = eth


class FakeNetwork:
    """Maps endpoint URLs to fake nodes and records every construction."""

    def __init__(self, nodes: dict):
        self.nodes = nodes
        self.built: list[str] = []

    def __call__(self, url, timeout):
        self.built.append(url)
        return FakeWeb3(url, self.nodes[url])


@pytest.fixture
def node():
    return FakeEth()


@pytest.fixture
def network(node):
    return FakeNetwork({"http://down": FakeEth(fail=True), "http://up": node})


@pytest.fixture
def settings():
    return Settings(environ={
        "TREASURY_PRIVATE_KEY": TEST_KEY,
        "RPC_URLS": "http://down,http://up",
        "RECEIPT_POLL_INTERVAL": "0",
    })
