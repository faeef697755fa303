"""API tests for transfer endpoints, backed by the in-memory store."""

import pytest
from httpx import AsyncClient

from src.api.dependencies import (
    get_cancel_transfer_use_case,
    get_create_transfer_use_case,
    get_decide_transfer_use_case,
    get_movements,
    get_record_return_use_case,
    get_transfers,
)
from src.api.main import app
from src.application.use_cases import (
    CancelTransferUseCase,
    CreateTransferUseCase,
    DecideTransferUseCase,
    RecordTransferReturnUseCase,
)


@pytest.fixture
async def transfer_client(async_client: AsyncClient, backend, stock_settings):
    kwargs = {"uow_factory": backend.unit_of_work, "settings": stock_settings}
    stores = backend.stores()
    app.dependency_overrides[get_create_transfer_use_case] = lambda: CreateTransferUseCase(**kwargs)
    app.dependency_overrides[get_decide_transfer_use_case] = lambda: DecideTransferUseCase(**kwargs)
    app.dependency_overrides[get_record_return_use_case] = (
        lambda: RecordTransferReturnUseCase(**kwargs)
    )
    app.dependency_overrides[get_cancel_transfer_use_case] = lambda: CancelTransferUseCase(**kwargs)
    app.dependency_overrides[get_transfers] = lambda: stores.transfers
    app.dependency_overrides[get_movements] = lambda: stores.movements
    return async_client


async def _create(client: AsyncClient, body: dict) -> dict:
    response = await client.post("/api/transfers", json=body)
    assert response.status_code == 201, response.text
    return response.json()


class TestCreateTransferAPI:
    async def test_create_returns_201(self, transfer_client, backend, sample_transfer_data):
        backend.set_stock("A", "P1", 10)
        backend.set_stock("A", "P2", 5)

        data = await _create(transfer_client, sample_transfer_data)

        assert data["status"] == "pending"
        assert data["version"] == 1
        assert [i["product_id"] for i in data["items"]] == ["P1", "P2"]
        assert backend.quantity("A", "P1") == 10

    async def test_insufficient_stock_returns_409_with_shortages(
        self, transfer_client, backend, sample_transfer_data
    ):
        backend.set_stock("A", "P1", 4)
        backend.set_stock("A", "P2", 5)

        response = await transfer_client.post("/api/transfers", json=sample_transfer_data)

        assert response.status_code == 409
        data = response.json()
        assert data["error_code"] == "INSUFFICIENT_STOCK"
        assert data["hint"]
        assert data["path"] == "/api/transfers"
        shortages = data["details"]["shortages"]
        assert len(shortages) == 1
        assert shortages[0]["product_id"] == "P1"
        assert shortages[0]["shortfall"] == 6
        assert backend.state.transfers == {}

    async def test_unknown_branch_returns_404(
        self, transfer_client, backend, sample_transfer_data
    ):
        sample_transfer_data["destination_branch_id"] = "Z"

        response = await transfer_client.post("/api/transfers", json=sample_transfer_data)

        assert response.status_code == 404
        assert response.json()["error_code"] == "BRANCH_NOT_FOUND"

    async def test_same_branch_returns_422(self, transfer_client, sample_transfer_data):
        sample_transfer_data["destination_branch_id"] = "A"

        response = await transfer_client.post("/api/transfers", json=sample_transfer_data)

        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    async def test_missing_requesting_user_returns_422(
        self, transfer_client, sample_transfer_data
    ):
        del sample_transfer_data["requesting_user_id"]

        response = await transfer_client.post("/api/transfers", json=sample_transfer_data)

        assert response.status_code == 422
        assert "requesting_user_id" in response.json()["detail"]

    async def test_missing_items_returns_422(self, transfer_client, sample_transfer_data):
        sample_transfer_data["items"] = []

        response = await transfer_client.post("/api/transfers", json=sample_transfer_data)

        assert response.status_code == 422
        assert "items" in response.json()["detail"]


class TestTransferLifecycleAPI:
    async def test_approve_then_cancel(self, transfer_client, backend, sample_transfer_data):
        backend.set_stock("A", "P1", 10)
        backend.set_stock("A", "P2", 5)
        transfer = await _create(transfer_client, sample_transfer_data)

        response = await transfer_client.put(
            f"/api/transfers/{transfer['id']}/decision",
            json={"decision": "approved", "deciding_user_id": "boss"},
        )
        assert response.status_code == 200
        decided = response.json()
        assert decided["transfer"]["status"] == "approved"
        assert len(decided["movements"]) == 4
        assert decided["notification"]["recipient_user_id"] == "u1"
        assert backend.quantity("B", "P1") == 10

        movements = await transfer_client.get(f"/api/transfers/{transfer['id']}/movements")
        assert len(movements.json()) == 4

        response = await transfer_client.post(
            f"/api/transfers/{transfer['id']}/cancel",
            json={"reason": "wrong branch", "cancelling_user_id": "boss"},
        )
        assert response.status_code == 200
        assert response.json()["transfer"]["status"] == "cancelled"
        assert backend.quantity("A", "P1") == 10
        assert backend.quantity("B", "P1") == 0

    async def test_reject(self, transfer_client, backend, sample_transfer_data):
        backend.set_stock("A", "P1", 10)
        backend.set_stock("A", "P2", 5)
        transfer = await _create(transfer_client, sample_transfer_data)

        response = await transfer_client.put(
            f"/api/transfers/{transfer['id']}/decision",
            json={"decision": "rejected", "rejection_reason": "Not needed"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["transfer"]["status"] == "rejected"
        assert data["movements"] == []
        assert data["notification"]["priority"] == "medium"

    async def test_invalid_decision_value(self, transfer_client):
        response = await transfer_client.put(
            "/api/transfers/t1/decision", json={"decision": "maybe"}
        )
        assert response.status_code == 422

    async def test_cancel_pending_returns_409_with_status(
        self, transfer_client, backend, sample_transfer_data
    ):
        backend.set_stock("A", "P1", 10)
        backend.set_stock("A", "P2", 5)
        transfer = await _create(transfer_client, sample_transfer_data)

        response = await transfer_client.post(
            f"/api/transfers/{transfer['id']}/cancel", json={"reason": "oops"}
        )

        assert response.status_code == 409
        data = response.json()
        assert data["error_code"] == "INVALID_STATE_TRANSITION"
        assert data["details"]["current_status"] == "pending"

    async def test_returns_capped_then_nothing_to_return(
        self, transfer_client, backend, sample_transfer_data
    ):
        backend.set_stock("A", "P1", 10)
        backend.set_stock("A", "P2", 5)
        transfer = await _create(transfer_client, sample_transfer_data)
        await transfer_client.put(
            f"/api/transfers/{transfer['id']}/decision", json={"decision": "approved"}
        )
        url = f"/api/transfers/{transfer['id']}/returns"

        first = await transfer_client.post(url, json={"returns": [{"product_id": "P1", "quantity": 3}]})
        second = await transfer_client.post(url, json={"returns": [{"product_id": "P1", "quantity": 8}]})
        third = await transfer_client.post(url, json={"returns": [{"product_id": "P1", "quantity": 1}]})

        assert first.json()["applied"] == {"P1": 3}
        assert second.json()["applied"] == {"P1": 7}
        assert second.json()["transfer"]["returned_quantities"]["P1"] == 10
        assert third.status_code == 409
        assert third.json()["error_code"] == "NOTHING_TO_RETURN"

    async def test_return_of_unknown_product_returns_400(
        self, transfer_client, backend, sample_transfer_data
    ):
        backend.set_stock("A", "P1", 10)
        backend.set_stock("A", "P2", 5)
        transfer = await _create(transfer_client, sample_transfer_data)
        await transfer_client.put(
            f"/api/transfers/{transfer['id']}/decision", json={"decision": "approved"}
        )

        response = await transfer_client.post(
            f"/api/transfers/{transfer['id']}/returns",
            json={"returns": [{"product_id": "X", "quantity": 1}]},
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    async def test_persistence_failure_returns_503(
        self, transfer_client, backend, sample_transfer_data
    ):
        backend.set_stock("A", "P1", 10)
        backend.set_stock("A", "P2", 5)
        transfer = await _create(transfer_client, sample_transfer_data)
        backend.fail_on_append = 1

        response = await transfer_client.put(
            f"/api/transfers/{transfer['id']}/decision", json={"decision": "approved"}
        )

        assert response.status_code == 503
        data = response.json()
        assert data["error_code"] == "PERSISTENCE_FAILURE"
        assert data["details"]["retryable"] is True
        assert backend.quantity("A", "P1") == 10


class TestTransferQueriesAPI:
    async def test_get_unknown_transfer_returns_404(self, transfer_client):
        response = await transfer_client.get("/api/transfers/missing")

        assert response.status_code == 404
        data = response.json()
        assert data["error_code"] == "TRANSFER_NOT_FOUND"
        assert data["details"] == {"transfer_id": "missing"}

    async def test_list_and_pending(self, transfer_client, backend, sample_transfer_data):
        backend.set_stock("A", "P1", 10)
        backend.set_stock("A", "P2", 5)
        transfer = await _create(transfer_client, sample_transfer_data)

        listed = await transfer_client.get("/api/transfers", params={"status": "pending"})
        pending = await transfer_client.get("/api/transfers/pending")
        fetched = await transfer_client.get(f"/api/transfers/{transfer['id']}")

        assert listed.json()["total"] == 1
        assert pending.json()["transfers"][0]["id"] == transfer["id"]
        assert fetched.json()["reason"] == "Restock branch B"

    async def test_branch_transfers_by_direction(
        self, transfer_client, backend, sample_transfer_data
    ):
        backend.set_stock("A", "P1", 10)
        backend.set_stock("A", "P2", 5)
        await _create(transfer_client, sample_transfer_data)

        at_a = await transfer_client.get("/api/transfers/branch/A")
        into_b = await transfer_client.get(
            "/api/transfers/branch/B", params={"direction": "incoming"}
        )
        bad = await transfer_client.get(
            "/api/transfers/branch/B", params={"direction": "sideways"}
        )

        assert len(at_a.json()["outgoing"]) == 1
        assert at_a.json()["incoming"] == []
        assert len(into_b.json()["incoming"]) == 1
        assert bad.status_code == 422
