"""Counter & health routes — request validation, response shaping, error envelope.

Tests cover:
    - POST /initialize defaults seed to "counter" and returns 201
    - POST /increment without counterAddress returns 400 with a field detail
    - GET /api/counter/{address} shapes authority/count; missing account → 404
    - GET /health returns static config and makes no RPC call
    - Unknown routes → 404 {"error": {"message": "Resource not found"}}
    - Unknown exceptions → 500 generic envelope, original message in details
"""

from solders.keypair import Keypair
from solders.transaction_status import (
    InstructionErrorCustom,
    TransactionErrorInstructionError,
)

from counter_gateway.core.errors import (
    AccountNotFoundError,
    SolanaError,
    TransactionError,
)
from counter_gateway.services.counter_gateway import (
    CounterAccountView,
    IncrementedCounter,
    InitializedCounter,
)
from tests.services.fake_solana import encode_counter

COUNTER = "Counter111111111111111111111111111111111111"
AUTHORITY = "Authority111111111111111111111111111111111"


# --- health -------------------------------------------------------------------

async def test_health_returns_cluster_and_program(client, app_config):
    res = await client.get("/health")
    assert res.status_code == 200
    assert res.json() == {
        "status": "ok",
        "solanaCluster": app_config.solana_cluster_url,
        "programId": app_config.program_id,
    }


async def test_health_makes_no_rpc_call(chain_client, fake_rpc, app_config):
    res = await chain_client.get("/health")
    assert res.status_code == 200
    assert res.json()["programId"] == app_config.program_id
    assert fake_rpc.calls == []


# --- initialize ---------------------------------------------------------------

async def test_initialize_with_empty_body_defaults_seed(client, mock_gateway):
    mock_gateway.initialize_counter.return_value = InitializedCounter(
        counter_address=COUNTER, seed="counter", signature="signature123",
    )
    res = await client.post("/api/counter/initialize", json={})
    assert res.status_code == 201
    assert res.json() == {
        "success": True,
        "counterAddress": COUNTER,
        "seed": "counter",
        "signature": "signature123",
    }
    mock_gateway.initialize_counter.assert_awaited_once_with("counter")


async def test_initialize_without_body_defaults_seed(client, mock_gateway):
    mock_gateway.initialize_counter.return_value = InitializedCounter(
        counter_address=COUNTER, seed="counter", signature="sig",
    )
    res = await client.post("/api/counter/initialize")
    assert res.status_code == 201
    mock_gateway.initialize_counter.assert_awaited_once_with("counter")


async def test_initialize_with_custom_seed(client, mock_gateway):
    mock_gateway.initialize_counter.return_value = InitializedCounter(
        counter_address=COUNTER, seed="custom-seed", signature="signature456",
    )
    res = await client.post("/api/counter/initialize", json={"seed": "custom-seed"})
    assert res.status_code == 201
    assert res.json()["seed"] == "custom-seed"
    mock_gateway.initialize_counter.assert_awaited_once_with("custom-seed")


async def test_initialize_non_string_seed_is_400(client, mock_gateway):
    res = await client.post("/api/counter/initialize", json={"seed": 42})
    assert res.status_code == 400
    assert res.json()["error"]["details"][0]["field"] == "seed"
    mock_gateway.initialize_counter.assert_not_awaited()


async def test_initialize_malformed_json_is_400(client):
    res = await client.post(
        "/api/counter/initialize", content=b"{not json",
        headers={"content-type": "application/json"},
    )
    assert res.status_code == 400
    assert res.json() == {"error": {
        "message": "Request validation failed",
        "details": [{"message": "Malformed JSON body"}],
    }}


async def test_initialize_chain_failure_is_500(client, mock_gateway):
    mock_gateway.initialize_counter.side_effect = SolanaError(
        "Failed to initialize counter", RuntimeError("insufficient funds"),
    )
    res = await client.post("/api/counter/initialize", json={})
    assert res.status_code == 500
    assert res.json() == {"error": {
        "message": "Failed to initialize counter: insufficient funds",
    }}


async def test_initialize_overlong_seed_is_500_envelope(chain_client, fake_rpc):
    res = await chain_client.post("/api/counter/initialize", json={"seed": "x" * 40})
    assert res.status_code == 500
    assert res.json() == {"error": {
        "message": "Failed to initialize counter: Max seed length exceeded",
    }}
    assert fake_rpc.calls == []


# --- increment ----------------------------------------------------------------

async def test_increment_returns_new_count(client, mock_gateway):
    mock_gateway.increment_counter.return_value = IncrementedCounter(
        signature="sig789", new_count="5",
    )
    res = await client.post("/api/counter/increment", json={"counterAddress": COUNTER})
    assert res.status_code == 200
    assert res.json() == {
        "success": True,
        "counterAddress": COUNTER,
        "newCount": "5",
        "signature": "sig789",
    }
    mock_gateway.increment_counter.assert_awaited_once_with(COUNTER)


async def test_increment_missing_address_is_400(client, mock_gateway):
    res = await client.post("/api/counter/increment", json={})
    assert res.status_code == 400
    error = res.json()["error"]
    assert error["message"] == "Request validation failed"
    assert [d["field"] for d in error["details"]] == ["counterAddress"]
    mock_gateway.increment_counter.assert_not_awaited()


async def test_increment_missing_account_is_404(client, mock_gateway):
    mock_gateway.increment_counter.side_effect = AccountNotFoundError(COUNTER)
    res = await client.post("/api/counter/increment", json={"counterAddress": COUNTER})
    assert res.status_code == 404
    assert res.json() == {"error": {"message": f"Account not found: {COUNTER}"}}


async def test_increment_execution_error_is_500_with_signature(
    chain_client, chain_gateway, fake_rpc, wallet,
):
    address = chain_gateway.derive_counter_address()
    fake_rpc.accounts[address] = encode_counter(1, wallet.pubkey())
    fake_rpc.confirmation_err = TransactionErrorInstructionError(0, InstructionErrorCustom(6001))

    res = await chain_client.post(
        "/api/counter/increment", json={"counterAddress": str(address)},
    )

    assert res.status_code == 500
    signature = str(fake_rpc.sent[0].signatures[0])
    message = res.json()["error"]["message"]
    assert signature in message
    assert '{"InstructionError":[0,{"Custom":6001}]}' in message


async def test_increment_transaction_error_is_500(client, mock_gateway):
    mock_gateway.increment_counter.side_effect = TransactionError(
        "Failed to confirm transaction", "abc",
    )
    res = await client.post("/api/counter/increment", json={"counterAddress": COUNTER})
    assert res.status_code == 500
    assert res.json()["error"]["message"].endswith("Transaction signature: abc")


# --- get ----------------------------------------------------------------------

async def test_get_counter_shapes_view(client, mock_gateway):
    mock_gateway.get_counter_data.return_value = CounterAccountView(
        authority=AUTHORITY, count="42",
    )
    res = await client.get(f"/api/counter/{COUNTER}")
    assert res.status_code == 200
    assert res.json() == {
        "success": True,
        "counterAddress": COUNTER,
        "authority": AUTHORITY,
        "count": "42",
    }
    mock_gateway.get_counter_data.assert_awaited_once_with(COUNTER)


async def test_get_counter_missing_account_is_404(chain_client):
    address = str(Keypair().pubkey())
    res = await chain_client.get(f"/api/counter/{address}")
    assert res.status_code == 404
    assert res.json() == {"error": {"message": f"Account not found: {address}"}}


async def test_round_trip_fetch_initialize_increment(chain_client):
    created = await chain_client.post("/api/counter/initialize", json={"seed": "rt"})
    assert created.status_code == 201
    address = created.json()["counterAddress"]

    before = await chain_client.get(f"/api/counter/{address}")
    incremented = await chain_client.post(
        "/api/counter/increment", json={"counterAddress": address},
    )
    after = await chain_client.get(f"/api/counter/{address}")

    assert before.json()["count"] == "0"
    assert incremented.json()["newCount"] == "1"
    assert after.json()["count"] == "1"


# --- fallbacks ----------------------------------------------------------------

async def test_unknown_route_is_404(client):
    res = await client.get("/unknown-route")
    assert res.status_code == 404
    assert res.json() == {"error": {"message": "Resource not found"}}


async def test_wrong_method_on_known_path_is_404(client):
    for method, path in (("PUT", "/health"), ("DELETE", "/api/counter/initialize")):
        res = await client.request(method, path)
        assert res.status_code == 404
        assert res.json() == {"error": {"message": "Resource not found"}}


async def test_unknown_exception_is_generic_500(client, mock_gateway):
    mock_gateway.get_counter_data.side_effect = KeyError("boom")
    res = await client.get(f"/api/counter/{COUNTER}")
    assert res.status_code == 500
    body = res.json()
    assert body["error"]["message"] == "Internal server error"
    assert body["error"]["details"] == [{"message": "'boom'"}]
    assert "Traceback" not in res.text


async def test_security_headers_present(client):
    res = await client.get("/health")
    assert res.headers["x-content-type-options"] == "nosniff"
    assert res.headers["x-frame-options"] == "DENY"
