"""
API tests: request/response shapes and the error-kind to status mapping.
"""
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from planledger.database import get_db
from planledger.main import app
from helpers import ACTOR

HEADERS = {"X-User-Id": ACTOR}


@pytest_asyncio.fixture
async def client(db):
    async def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


async def create_current_scenario(client, name="FY2025"):
    response = await client.post(
        "/api/scenarios",
        json={"name": name, "start_date": "2025-01-01", "end_date": "2025-12-31"},
        headers=HEADERS,
    )
    assert response.status_code == 201
    scenario_id = response.json()["id"]
    response = await client.post(f"/api/scenarios/{scenario_id}/activate", headers=HEADERS)
    assert response.status_code == 200
    return scenario_id


async def create_node(client, scenario_id, parent_id, title, node_type, service_id=None):
    payload = {"scenario_id": scenario_id, "parent_id": parent_id, "title": title, "node_type": node_type}
    if service_id:
        payload["service_id"] = service_id
    return await client.post("/api/nodes", json=payload, headers=HEADERS)


# =============================================================================
# Happy paths
# =============================================================================

class TestPlanningFlow:

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    @pytest.mark.asyncio
    async def test_tree_entries_and_rollover(self, client):
        response = await client.post(
            "/api/catalog/services", json={"name": "Consulting", "slug": "consulting"}, headers=HEADERS
        )
        assert response.status_code == 201
        service_id = response.json()["id"]

        response = await client.post(
            "/api/catalog/account-items",
            json={"name": "Rent", "code": "6100", "account_type": "selling_general_admin"},
            headers=HEADERS,
        )
        assert response.status_code == 201
        account_id = response.json()["id"]

        scenario_id = await create_current_scenario(client)
        initiative = (await create_node(client, scenario_id, None, "I", "initiative")).json()
        project = (await create_node(client, scenario_id, initiative["id"], "P", "project")).json()
        response = await create_node(client, scenario_id, project["id"], "J", "job", service_id)
        assert response.status_code == 201
        job = response.json()
        assert job["created_by"] == ACTOR

        cell = {
            "node_id": job["id"],
            "account_item_id": account_id,
            "target_month": "2025-01-01",
            "entry_category": "plan",
            "amount": "1000.00",
        }
        response = await client.put("/api/entries", json=cell, headers=HEADERS)
        assert response.status_code == 200
        entry_id = response.json()["id"]

        response = await client.put("/api/entries", json={**cell, "amount": "1200.00"}, headers=HEADERS)
        assert response.status_code == 200
        assert response.json()["id"] == entry_id
        assert Decimal(response.json()["amount"]) == Decimal("1200")

        response = await client.get(f"/api/entries/{entry_id}/history")
        assert sorted(h["change_type"] for h in response.json()) == ["create", "update"]

        response = await client.get("/api/entries", params={"node_id": job["id"], "entry_category": "plan"})
        assert [e["id"] for e in response.json()] == [entry_id]

        response = await client.post(
            f"/api/scenarios/{scenario_id}/rollover",
            json={"name": "FY2026", "start_date": "2026-01-01", "end_date": "2026-12-31"},
            headers=HEADERS,
        )
        assert response.status_code == 201
        new_scenario = response.json()
        assert new_scenario["is_current"] is True

        response = await client.get("/api/nodes", params={"scenario_id": new_scenario["id"]})
        lineages = {n["lineage_id"] for n in response.json()}
        assert job["lineage_id"] in lineages

        response = await client.get(f"/api/entries/by-scenario/{new_scenario['id']}")
        assert [Decimal(e["amount"]) for e in response.json()] == [Decimal("1200")]

        response = await client.get(f"/api/scenarios/{scenario_id}")
        assert response.json()["is_current"] is False

    @pytest.mark.asyncio
    async def test_patch_and_delete_node(self, client):
        scenario_id = await create_current_scenario(client)
        node = (await create_node(client, scenario_id, None, "Growth", "initiative")).json()

        response = await client.patch(f"/api/nodes/{node['id']}", json={"display_order": 7}, headers=HEADERS)
        assert response.status_code == 200
        assert response.json()["display_order"] == 7
        assert response.json()["title"] == "Growth"

        response = await client.delete(f"/api/nodes/{node['id']}", headers=HEADERS)
        assert response.status_code == 204
        response = await client.get("/api/nodes", params={"scenario_id": scenario_id})
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_list_nodes_without_scenario_returns_recent(self, client):
        scenario_id = await create_current_scenario(client)
        first = (await create_node(client, scenario_id, None, "Growth", "initiative")).json()
        second = (await create_node(client, scenario_id, None, "Retention", "initiative")).json()

        response = await client.get("/api/nodes")
        assert response.status_code == 200
        assert [n["id"] for n in response.json()] == [second["id"], first["id"]]


# =============================================================================
# Error mapping
# =============================================================================

class TestErrorMapping:

    @pytest.mark.asyncio
    async def test_missing_actor_header(self, client):
        response = await client.post(
            "/api/scenarios", json={"name": "x", "start_date": "2025-01-01", "end_date": "2025-12-31"}
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_not_found(self, client):
        response = await client.get("/api/scenarios/scn_missing")
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_invalid_hierarchy(self, client):
        scenario_id = await create_current_scenario(client)
        response = await create_node(client, scenario_id, None, "Loose", "project")
        assert response.status_code == 422
        assert response.json()["error"] == "invalid_hierarchy"

    @pytest.mark.asyncio
    async def test_read_only_scenario(self, client):
        first_id = await create_current_scenario(client, "FY2025")
        await create_current_scenario(client, "FY2026")

        response = await create_node(client, first_id, None, "Late", "initiative")
        assert response.status_code == 409
        assert response.json()["error"] == "read_only_scenario"

    @pytest.mark.asyncio
    async def test_non_empty_node(self, client):
        scenario_id = await create_current_scenario(client)
        parent = (await create_node(client, scenario_id, None, "Growth", "initiative")).json()
        await create_node(client, scenario_id, parent["id"], "Platform", "project")

        response = await client.delete(f"/api/nodes/{parent['id']}", headers=HEADERS)
        assert response.status_code == 409
        assert response.json()["error"] == "non_empty_node"

    @pytest.mark.asyncio
    async def test_request_body_validation(self, client):
        response = await client.post(
            "/api/scenarios", json={"name": "", "start_date": "2025-01-01", "end_date": "2025-12-31"},
            headers=HEADERS,
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_domain_validation(self, client):
        response = await client.post(
            "/api/scenarios", json={"name": "Backwards", "start_date": "2025-12-31", "end_date": "2025-01-01"},
            headers=HEADERS,
        )
        assert response.status_code == 422
        assert response.json()["error"] == "validation_error"
