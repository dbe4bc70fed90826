import json
import logging
from unittest.mock import MagicMock

import pytest
from httpx import AsyncClient

from chain.entities import PurchaseEventEntity, UserPurchaseEntity
from core.exceptions import (
    ChainConnectionException,
    ContractNotConfiguredException,
    SigningKeyRequiredException,
    TransactionRevertedException,
)
from sale.usecases import StreamPurchaseEventsUseCase
from conftest import BUYER, OTHER, SALE_ADDRESS, TEST_SIGNER, TX_HASH, make_pending, make_snapshot


class TestSystemAPI:
    """
    Tests for root, health and metrics endpoints.
    """

    @pytest.mark.asyncio
    async def test_root_endpoint(self, client: AsyncClient):
        """
        Test root endpoint returns correct application information.

        Parameters
        ----------
        client : AsyncClient
            Test client fixture
        """
        response = await client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "whitelist-token-backend"
        assert data["version"] == "1.0.0"
        assert data["endpoints"]["whitelist_status"] == "/v1/whitelist/status/{address}"
        assert data["endpoints"]["sale_info"] == "/v1/sale/info"

    @pytest.mark.asyncio
    async def test_health_endpoint(self, client: AsyncClient):
        response = await client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["chain"] is True
        assert data["cache"] is True
        assert data["read_only"] is False

    @pytest.mark.asyncio
    async def test_health_degraded_without_node(self, client: AsyncClient, chain_client):
        chain_client.is_connected.return_value = False
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "degraded"

    @pytest.mark.asyncio
    async def test_metrics_placeholder(self, client: AsyncClient):
        response = await client.get("/metrics")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"


class TestWhitelistAPI:
    """
    Tests for whitelist status lookups.
    """

    @pytest.mark.asyncio
    async def test_status(self, client: AsyncClient, gateway, mock_redis):
        """
        Test that a cache miss reads the contract and caches the answer.

        Parameters
        ----------
        client : AsyncClient
            Test client fixture
        gateway : AsyncMock
            Contract gateway double
        mock_redis : AsyncMock
            Redis double
        """
        gateway.is_whitelisted.return_value = True

        response = await client.get(f"/v1/whitelist/status/{BUYER.upper().replace('0X', '0x')}")
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["data"] == {"address": BUYER, "is_whitelisted": True}

        gateway.is_whitelisted.assert_awaited_once_with(BUYER)
        key, ttl, payload = mock_redis.setex.await_args.args
        assert key == f"whitelist:{BUYER}"
        assert ttl == 30
        assert json.loads(payload) == {"address": BUYER, "is_whitelisted": True}

    @pytest.mark.asyncio
    async def test_status_from_cache(self, client: AsyncClient, gateway, mock_redis):
        mock_redis.get.return_value = json.dumps({"address": BUYER, "is_whitelisted": False})

        response = await client.get(f"/v1/whitelist/status/{BUYER}")
        assert response.status_code == 200
        assert response.json()["data"]["is_whitelisted"] is False
        gateway.is_whitelisted.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_status_invalid_address(self, client: AsyncClient, gateway):
        response = await client.get("/v1/whitelist/status/0x1234")
        assert response.status_code == 400
        assert response.json()["status"] == "error"
        gateway.is_whitelisted.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_status_node_unreachable(self, client: AsyncClient, gateway):
        gateway.is_whitelisted.side_effect = ChainConnectionException("Connection failed")

        response = await client.get(f"/v1/whitelist/status/{BUYER}")
        assert response.status_code == 502
        assert response.json() == {"status": "error", "message": "Connection failed"}

    @pytest.mark.asyncio
    async def test_status_without_token_contract(self, client: AsyncClient, gateway):
        gateway.is_whitelisted.side_effect = ContractNotConfiguredException("token contract address not set")

        response = await client.get(f"/v1/whitelist/status/{BUYER}")
        assert response.status_code == 503

    @pytest.mark.asyncio
    async def test_verify_placeholder(self, client: AsyncClient):
        response = await client.get(f"/v1/whitelist/verify/{BUYER}")
        assert response.status_code == 200
        assert response.json()["verified"] is False


class TestSaleAPI:
    """
    Tests for sale information endpoints.
    """

    @pytest.mark.asyncio
    async def test_sale_info(self, client: AsyncClient, gateway):
        gateway.get_sale_info.return_value = make_snapshot()

        response = await client.get("/v1/sale/info")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["token_price"] == "1000000000000000"
        assert data["max_supply"] == "4" + "0" * 27
        assert data["total_sold"] == "1" + "0" * 27
        assert data["remaining_supply"] == "3" + "0" * 27
        assert data["progress"] == 25.0
        assert data["whitelist_required"] is True
        assert data["is_active"] is True
        assert data["start_time"] == "2024-01-01T00:00:00Z"
        assert data["end_time"] == "2024-02-01T00:00:00Z"

    @pytest.mark.asyncio
    async def test_sale_info_open_ended(self, client: AsyncClient, gateway):
        gateway.get_sale_info.return_value = make_snapshot(end_time=2**256 - 1)

        response = await client.get("/v1/sale/info")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["start_time"] == "2024-01-01T00:00:00Z"
        assert data["end_time"] is None

    @pytest.mark.asyncio
    async def test_sale_info_failure(self, client: AsyncClient, gateway):
        gateway.get_sale_info.side_effect = ChainConnectionException("Connection failed: call totalSold")

        response = await client.get("/v1/sale/info")
        assert response.status_code == 502
        assert response.json()["status"] == "error"

    @pytest.mark.asyncio
    async def test_user_purchases(self, client: AsyncClient, gateway):
        gateway.get_user_purchase_info.return_value = UserPurchaseEntity(
            address=BUYER,
            amount=10**18,
            paid_amount=10**15,
            timestamp=make_snapshot().start_time,
            claimed=False,
            total_purchased=3 * 10**18
        )

        response = await client.get(f"/v1/sale/purchases/{BUYER}")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["amount"] == "1000000000000000000"
        assert data["total_purchased"] == "3000000000000000000"
        assert data["timestamp"] == "2024-01-01T00:00:00Z"
        gateway.get_user_purchase_info.assert_awaited_once_with(BUYER)

    @pytest.mark.asyncio
    async def test_purchase_event_stream(self, client: AsyncClient, gateway):
        event = PurchaseEventEntity(
            buyer=BUYER,
            token_amount=5 * 10**18,
            paid_amount=10**16,
            timestamp=1700000000,
            transaction_hash=TX_HASH,
            block_number=1234
        )
        watcher = FakeWatcher([event])
        gateway.watch_purchase_events.return_value = watcher

        response = await client.get("/v1/sale/events")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")

        chunks = [chunk for chunk in response.text.split("\n\n") if chunk]
        assert len(chunks) == 1
        assert chunks[0].startswith("event: purchase\ndata: ")
        payload = json.loads(chunks[0].split("data: ", 1)[1])
        assert payload["token_amount"] == "5000000000000000000"
        assert payload["block_number"] == 1234
        assert watcher.cancelled

    @pytest.mark.asyncio
    async def test_stats_placeholder(self, client: AsyncClient):
        response = await client.get("/v1/sale/stats")
        assert response.status_code == 200


class TestAuthAPI:
    """
    Tests for demo admin login and the admin guard.
    """

    @pytest.mark.asyncio
    async def test_login_admin(self, client: AsyncClient):
        payload = {"address": TEST_SIGNER, "message": "login", "signature": "0x00"}

        response = await client.post("/v1/auth/login", json=payload)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["token"].startswith(f"demo-admin-token-{TEST_SIGNER}-")
        assert data["role"] == "admin"

    @pytest.mark.asyncio
    async def test_login_not_admin(self, client: AsyncClient):
        payload = {"address": OTHER, "message": "login", "signature": "0x00"}

        response = await client.post("/v1/auth/login", json=payload)
        assert response.status_code == 403
        assert response.json()["message"] == "Not authorized as admin"

    @pytest.mark.asyncio
    async def test_login_invalid_address(self, client: AsyncClient):
        payload = {"address": "not-an-address", "message": "login", "signature": "0x00"}

        response = await client.post("/v1/auth/login", json=payload)
        assert response.status_code == 422
        assert "errors" in response.json()

    @pytest.mark.asyncio
    async def test_admin_requires_header(self, client: AsyncClient, gateway):
        response = await client.post("/v1/admin/whitelist", json={"address": BUYER})
        assert response.status_code == 401
        gateway.add_to_whitelist.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("header", ["Token abc", "Bearer ", "Bearer some-other-token"])
    async def test_admin_rejects_bad_tokens(self, client: AsyncClient, header):
        response = await client.post(
            "/v1/admin/whitelist", json={"address": BUYER}, headers={"Authorization": header}
        )
        assert response.status_code == 401


class TestAdminAPI:
    """
    Tests for admin whitelist and sale control endpoints.
    """

    @pytest.mark.asyncio
    async def test_add_to_whitelist(self, client: AsyncClient, gateway, mock_redis, admin_headers):
        """
        Test that a confirmed addition returns the transaction and drops the
        cached status.

        Parameters
        ----------
        client : AsyncClient
            Test client fixture
        gateway : AsyncMock
            Contract gateway double
        mock_redis : AsyncMock
            Redis double
        admin_headers : dict
            Authorization header
        """
        gateway.add_to_whitelist.return_value = make_pending("updateWhitelist")

        response = await client.post("/v1/admin/whitelist", json={"address": BUYER}, headers=admin_headers)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["transaction_hash"] == TX_HASH
        assert data["block_number"] == 42
        assert data["method"] == "updateWhitelist"
        assert data["addresses"] == [BUYER]

        gateway.add_to_whitelist.assert_awaited_once_with([BUYER])
        mock_redis.delete.assert_awaited_once_with(f"whitelist:{BUYER}")

    @pytest.mark.asyncio
    async def test_remove_from_whitelist(self, client: AsyncClient, gateway, admin_headers):
        gateway.remove_from_whitelist.return_value = make_pending("updateWhitelist")

        response = await client.request(
            "DELETE", "/v1/admin/whitelist", json={"address": BUYER}, headers=admin_headers
        )
        assert response.status_code == 200
        gateway.remove_from_whitelist.assert_awaited_once_with([BUYER])

    @pytest.mark.asyncio
    async def test_batch_preserves_order(self, client: AsyncClient, gateway, admin_headers):
        gateway.remove_from_whitelist.return_value = make_pending("updateWhitelistBatch")
        payload = {"addresses": [OTHER, BUYER, OTHER], "status": False}

        response = await client.post("/v1/admin/whitelist/batch", json=payload, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["data"]["addresses"] == [OTHER, BUYER, OTHER]
        gateway.remove_from_whitelist.assert_awaited_once_with([OTHER, BUYER, OTHER])
        gateway.add_to_whitelist.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_batch_rejects_empty_list(self, client: AsyncClient, gateway, admin_headers):
        response = await client.post("/v1/admin/whitelist/batch", json={"addresses": []}, headers=admin_headers)
        assert response.status_code == 422
        gateway.add_to_whitelist.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_address(self, client: AsyncClient, gateway, admin_headers):
        response = await client.post("/v1/admin/whitelist", json={"address": "0xnope"}, headers=admin_headers)
        assert response.status_code == 422
        assert response.json()["errors"][0]["field"] == "address"
        gateway.add_to_whitelist.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_reverted_transaction(self, client: AsyncClient, gateway, mock_redis, admin_headers):
        gateway.add_to_whitelist.side_effect = TransactionRevertedException(transaction_hash=TX_HASH, block_number=42)

        response = await client.post("/v1/admin/whitelist", json={"address": BUYER}, headers=admin_headers)
        assert response.status_code == 409
        data = response.json()
        assert data["status"] == "error"
        assert data["details"]["transaction_hash"] == TX_HASH
        assert data["details"]["block_number"] == 42
        mock_redis.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_read_only_mode(self, client: AsyncClient, gateway, admin_headers):
        gateway.add_to_whitelist.side_effect = SigningKeyRequiredException("Private key not set, running in read-only mode")

        response = await client.post("/v1/admin/whitelist", json={"address": BUYER}, headers=admin_headers)
        assert response.status_code == 503

    @pytest.mark.asyncio
    async def test_pause_and_unpause(self, client: AsyncClient, gateway, admin_headers):
        gateway.pause_sale.return_value = make_pending("pause", contract=SALE_ADDRESS)
        gateway.unpause_sale.return_value = make_pending("unpause", contract=SALE_ADDRESS)

        paused = await client.post("/v1/admin/sale/pause", headers=admin_headers)
        resumed = await client.post("/v1/admin/sale/unpause", headers=admin_headers)

        assert paused.status_code == 200
        assert paused.json()["data"]["method"] == "pause"
        assert resumed.json()["data"]["method"] == "unpause"
        assert paused.json()["data"]["contract_address"] == SALE_ADDRESS

    @pytest.mark.asyncio
    async def test_placeholders(self, client: AsyncClient, admin_headers):
        assert (await client.get("/v1/admin/users", headers=admin_headers)).status_code == 200
        assert (await client.put("/v1/admin/sale/config", headers=admin_headers)).status_code == 200
        assert (await client.get("/v1/analytics/overview")).status_code == 200


class TestStreamPurchaseEventsUseCase:
    """
    Watcher lifetime of the purchase event stream.
    """

    @pytest.mark.asyncio
    async def test_closing_stream_cancels_watcher(self, gateway):
        event = PurchaseEventEntity(
            buyer=BUYER,
            token_amount=1,
            paid_amount=1,
            timestamp=1700000000,
            transaction_hash=TX_HASH,
            block_number=1
        )
        watcher = FakeWatcher([event, event])
        gateway.watch_purchase_events.return_value = watcher

        stream = await StreamPurchaseEventsUseCase(gateway, logging.getLogger("tests"))()
        assert (await stream.__anext__()).startswith("event: purchase\n")
        await stream.aclose()

        assert watcher.cancelled

    @pytest.mark.asyncio
    async def test_failure_after_subscribing_cancels_watcher(self, gateway):
        watcher = FakeWatcher([])
        gateway.watch_purchase_events.return_value = watcher
        logger = MagicMock()
        logger.info.side_effect = RuntimeError("log sink closed")

        with pytest.raises(RuntimeError):
            await StreamPurchaseEventsUseCase(gateway, logger)()

        assert watcher.cancelled


class FakeWatcher:
    """Yields the given events, then ends."""

    def __init__(self, events):
        self.events = list(events)
        self.skipped = 0
        self.cancelled = False

    def __aiter__(self):
        return self

    async def __anext__(self):
        if not self.events:
            raise StopAsyncIteration
        return self.events.pop(0)

    async def cancel(self):
        self.cancelled = True
