import pytest
from fastapi.testclient import TestClient

from relay.main import create_app
from relay.routes.transfer import TRANSFER_PATHS

from conftest import DEST, TEST_ADDRESS, FakeEth, FakeNetwork, eth


@pytest.fixture
def client(settings, network):
    with TestClient(create_app(settings, web3_factory=network)) as c:
        yield c


@pytest.mark.parametrize("path", TRANSFER_PATHS)
def test_every_alias_runs_the_transfer(client, node, path):
    r = client.post(path, json={"amount": 0.01})
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["txHash"] == body["hash"] == body["transactionHash"]
    assert body["from"] == TEST_ADDRESS
    assert body["to"] == DEST
    assert body["amount"] == 0.01
    assert body["type"] == "EIP-1559"
    assert body["blockNumber"] == 101
    assert len(node.sent) == 1


def test_aliased_body_fields(client, node):
    other = "0x000000000000000000000000000000000000dEaD"
    r = client.post("/transfer", json={"amountETH": "0.02", "amount": 5, "toAddress": other.lower()})
    assert r.status_code == 200
    assert r.json()["to"] == other
    assert r.json()["amount"] == 0.02


def test_empty_body_uses_defaults(client):
    r = client.post("/convert", json={})
    assert r.status_code == 200
    assert r.json()["amount"] == 0.01
    assert r.json()["to"] == DEST


def test_clamped_transfer_is_visible(client, node):
    node.balance = eth("0.011")
    r = client.post("/convert", json={"amount": 0.01})
    body = r.json()
    assert body["amount"] == 0.009
    assert body["requested"] == 0.01
    assert body["clamped"] is True


def test_low_balance_is_400_with_balance(client, node):
    node.balance = eth("0.001")
    r = client.post("/withdraw", json={"amount": 0.01})
    assert r.status_code == 400
    assert r.json()["balance"] == 0.001
    assert r.json()["code"] == "insufficient_funds"
    assert node.sent == []


def test_invalid_destination_is_400(client, node):
    r = client.post("/convert", json={"to": "not_an_address"})
    assert r.status_code == 400
    assert "error" in r.json()
    assert node.sent == []


def test_rejected_broadcast_is_500_with_node_message(client, node):
    node.reject_with = {"code": -32000, "message": "replacement transaction underpriced"}
    r = client.post("/convert", json={})
    assert r.status_code == 500
    assert r.json()["error"] == "replacement transaction underpriced"


def test_confirmation_timeout_is_distinct(client, node):
    node.receipt_timeout = True
    r = client.post("/convert", json={})
    assert r.status_code == 504
    assert r.json()["code"] == "confirmation_timeout"
    assert r.json()["txHash"].startswith("0x")


def test_wallet_not_configured(settings, network):
    settings.TREASURY_PRIVATE_KEY = None
    with TestClient(create_app(settings, web3_factory=network)) as c:
        r = c.post("/convert", json={})
        assert r.status_code == 500
        assert r.json()["error"] == "Wallet not configured"
        assert c.get("/status").json()["wallet"] is None


def test_balance(client, node):
    node.balance = eth("1.5")
    r = client.get("/balance")
    assert r.status_code == 200
    assert r.json() == {"wallet": TEST_ADDRESS, "balance": "1.5"}


def test_status_online(client, node):
    node.balance = eth("0.05")
    body = client.get("/status").json()
    assert body["status"] == "online"
    assert body["method"] == "V3-EIP1559"
    assert body["wallet"] == TEST_ADDRESS
    assert body["balance"] == "0.050000"
    assert body["degraded"] is False


def test_status_degrades_instead_of_reporting_zero(settings):
    dead = FakeNetwork({"http://down": FakeEth(fail=True), "http://up": FakeEth(fail=True)})
    with TestClient(create_app(settings, web3_factory=dead)) as c:
        r = c.get("/status")
        assert r.status_code == 200
        assert r.json()["balance"] is None
        assert r.json()["degraded"] is True

        r = c.post("/convert", json={})
        assert r.status_code == 500
        assert r.json()["code"] == "no_reachable_endpoint"


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_status_degrades_when_node_returns_rpc_error(client, node):
    node.read_error = {"code": -32005, "message": "rate limit exceeded"}
    r = client.get("/status")
    assert r.status_code == 200
    assert r.json()["balance"] is None
    assert r.json()["degraded"] is True


def test_balance_rpc_error_is_json_500(client, node):
    node.read_error = {"code": -32005, "message": "rate limit exceeded"}
    r = client.get("/balance")
    assert r.status_code == 500
    assert r.json()["code"] == "rpc_error"
    assert "rate limit exceeded" in r.json()["error"]


def test_transfer_rpc_error_carries_code(client, node):
    node.nonce_error = {"code": -32602, "message": "invalid block tag"}
    r = client.post("/convert", json={})
    assert r.status_code == 500
    assert r.json()["code"] == "rpc_error"
    assert node.sent == []
