"""Ledger & Service Routes — development token surface, executor info, health probes."""

from metarelay.api.dependencies import get_executor
from metarelay.core.compute_digest import DEFAULT_DOMAIN, digest_hex, domain_separator
from metarelay.core.domain_types import UINT256_MAX
from metarelay.infrastructure.signature_scheme import Secp256k1SignatureScheme
from metarelay.infrastructure.token_ledger import ZERO_ADDRESS
from metarelay.main import app
from metarelay.services.relay_executor import MetaTransferExecutor
from tests.identities import EXECUTOR, SENDER, TOKEN

LEDGER = f"/api/v1/ledger/{TOKEN}"


async def test_mint_returns_new_balance(client):
    res = await client.post(f"{LEDGER}/mint", json={"owner": SENDER, "amount": 10000})
    assert res.status_code == 201
    assert res.json()["amount"] == "10000"
    res = await client.post(f"{LEDGER}/mint", json={"owner": SENDER, "amount": "5"})
    assert res.json()["amount"] == "10005"


async def test_balance_path_normalized_to_checksum(client):
    res = await client.get(f"/api/v1/ledger/{TOKEN.lower()}/balances/{SENDER.lower()}")
    assert res.status_code == 200
    assert res.json() == {
        "token": TOKEN, "owner": SENDER, "spender": None, "amount": "0",
    }


async def test_approve_and_read_allowance(client):
    res = await client.post(
        f"{LEDGER}/approve",
        json={"owner": SENDER, "spender": EXECUTOR, "amount": str(UINT256_MAX)},
    )
    assert res.status_code == 200
    res = await client.get(f"{LEDGER}/allowances/{SENDER}/{EXECUTOR}")
    assert int(res.json()["amount"]) == UINT256_MAX
    assert res.json()["spender"] == EXECUTOR


async def test_invalid_path_address_is_400(client):
    res = await client.get(f"{LEDGER}/balances/0xnope")
    assert res.status_code == 400


async def test_executor_info(client):
    res = await client.get("/api/v1/executor")
    assert res.status_code == 200
    assert res.json()["address"] == EXECUTOR
    assert res.json()["domain_separator"] == digest_hex(DEFAULT_DOMAIN)
    assert res.json()["domain_name"] == "MetaTokenTransfer"


async def test_liveness(client):
    res = await client.get("/api/v1/health/")
    assert res.status_code == 200
    assert res.json()["status"] == "healthy"


async def test_readiness_with_database(client):
    res = await client.get("/api/v1/health/ready")
    assert res.status_code == 200
    assert res.json()["checks"]["database"] == "healthy"


async def test_transfer_events_listed(client):
    await client.post(f"{LEDGER}/mint", json={"owner": SENDER, "amount": "100"})
    res = await client.get(f"{LEDGER}/transfers")
    assert res.status_code == 200
    assert res.json() == [
        {"sender": ZERO_ADDRESS, "recipient": SENDER, "amount": "100"},
    ]


async def test_executor_info_reports_executor_domain(client, sql_store, sql_ledger):
    staging = MetaTransferExecutor(
        sql_store, sql_ledger, Secp256k1SignatureScheme(), EXECUTOR,
        domain_name="Staging",
    )
    app.dependency_overrides[get_executor] = lambda: staging
    res = await client.get("/api/v1/executor")
    assert res.json()["domain_name"] == "Staging"
    assert res.json()["domain_separator"] == digest_hex(domain_separator("Staging"))
