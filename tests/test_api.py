# Tests de rutas API - Verifican endpoints y respuestas HTTP
# Ejecutar con: pytest tests/test_api.py -v

import pytest
from unittest.mock import patch
from fastapi.testclient import TestClient

from insightpilot.adapters.factory import DependencyContainer
from insightpilot.adapters.inbound.dependencies import AppDependencies
from insightpilot.adapters.outbound.store import MemoryStore
from insightpilot.core.services.translator import RuleBasedTranslator


@pytest.fixture
def api_client(adapter_factory):
    """Cliente de API con store en memoria y driver falso"""
    container = DependencyContainer(
        store=MemoryStore(),
        adapter_factory=adapter_factory,
        translator_factory=lambda key: RuleBasedTranslator(default_table="users"),
    )
    AppDependencies._instance = AppDependencies(container)

    from insightpilot.adapters.inbound.api import app

    yield TestClient(app)
    AppDependencies.reset()


@pytest.fixture
def connection_id(api_client, profile_fields):
    response = api_client.post("/connections", json=profile_fields)
    assert response.status_code == 201
    return response.json()["data"]["id"]


# TESTS DE ENDPOINTS BÁSICOS

@pytest.mark.unit
class TestHealthEndpoints:
    """Tests de endpoints de salud"""

    def test_root_returns_ok(self, api_client):
        """GET / debe retornar status ok"""
        response = api_client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert "version" in data

    def test_health_endpoint(self, api_client, connection_id):
        """GET /health debe retornar estado del store y contadores"""
        response = api_client.get("/health")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["store"] is True
        assert data["connections"] == 1

    def test_metrics_prometheus(self, api_client):
        response = api_client.get("/metrics/prometheus")
        assert response.status_code == 200
        assert "insightpilot_active_sessions" in response.text


@pytest.mark.unit
class TestConnectionEndpoints:
    """CRUD y prueba de conexiones"""

    def test_create_never_returns_secret(self, api_client, connection_id):
        response = api_client.get("/connections")
        assert response.status_code == 200
        items = response.json()["data"]
        assert [c["id"] for c in items] == [connection_id]
        assert "secret" not in items[0]
        assert "s3cr3t" not in response.text

    def test_invalid_profile_is_422(self, api_client, profile_fields):
        response = api_client.post("/connections", json={**profile_fields, "host": ""})
        assert response.status_code == 422
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "VALIDATION_ERROR"

    def test_unknown_connection_is_404(self, api_client):
        response = api_client.get("/connections/no-existe")
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    def test_patch_resets_status(self, api_client, connection_id):
        api_client.post(f"/connections/{connection_id}/test")
        response = api_client.patch(f"/connections/{connection_id}", json={"host": "otro"})
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["host"] == "otro"
        assert data["status"] == "disconnected"

    def test_probe_success(self, api_client, connection_id):
        response = api_client.post(f"/connections/{connection_id}/test")
        assert response.status_code == 200
        assert response.json()["data"] == {
            "id": connection_id,
            "success": True,
            "status": "connected",
        }

    def test_probe_failure(self, api_client, adapter_factory, connection_id):
        adapter_factory.reachable = False
        response = api_client.post(f"/connections/{connection_id}/test")
        assert response.json()["data"]["status"] == "disconnected"

    def test_connection_deleted_while_testing(self, api_client, connection_id):
        deps = AppDependencies.get_instance()

        async def test_then_delete(profile_id):
            deps.registry.delete(profile_id)
            return True

        with patch.object(deps.probe, "test", new=test_then_delete):
            response = api_client.post(f"/connections/{connection_id}/test")
        assert response.status_code == 200
        assert response.json()["data"] == {
            "id": connection_id,
            "success": False,
            "status": "disconnected",
        }

    def test_list_tables(self, api_client, connection_id):
        api_client.post(f"/connections/{connection_id}/test")
        response = api_client.get(f"/connections/{connection_id}/tables")
        assert response.status_code == 200
        assert response.json()["data"] == {
            "id": connection_id,
            "tables": ["public.orders", "public.users"],
        }

    def test_list_tables_requires_connected(self, api_client, connection_id):
        response = api_client.get(f"/connections/{connection_id}/tables")
        assert response.status_code == 409
        assert response.json()["error"]["code"] == "NO_ACTIVE_CONNECTION"

    def test_cancel_without_probe(self, api_client, connection_id):
        response = api_client.delete(f"/connections/{connection_id}/test")
        assert response.json() == {"cancelled": False}

    def test_delete_is_idempotent(self, api_client, connection_id):
        assert api_client.delete(f"/connections/{connection_id}").status_code == 200
        assert api_client.delete(f"/connections/{connection_id}").status_code == 200
        assert api_client.get("/connections").json()["data"] == []


@pytest.mark.unit
class TestSessionEndpoints:
    """Sesiones, consultas y exportación"""

    def test_ask_and_export(self, api_client, connection_id):
        api_client.post(f"/connections/{connection_id}/test")
        session_id = api_client.post("/sessions").json()["data"]["session_id"]

        response = api_client.post(
            f"/sessions/{session_id}/ask",
            json={"connection_id": connection_id, "query": "list all"},
        )
        assert response.status_code == 200
        turn = response.json()["data"]
        assert turn["query"] == "SELECT * FROM users LIMIT 10;"
        assert turn["result"]["row_count"] == 2
        assert turn["error"] is None

        turns = api_client.get(f"/sessions/{session_id}/turns").json()["data"]
        assert [t["id"] for t in turns] == [turn["id"]]

        export = api_client.get(f"/sessions/{session_id}/turns/{turn['id']}/export")
        assert export.status_code == 200
        assert export.headers["content-type"].startswith("text/csv")
        assert export.text == 'id,name\n"1","Ana"\n"2","Luis"\n'

    def test_export_invalid_delimiter(self, api_client, connection_id):
        api_client.post(f"/connections/{connection_id}/test")
        session_id = api_client.post("/sessions").json()["data"]["session_id"]
        turn = api_client.post(
            f"/sessions/{session_id}/ask",
            json={"connection_id": connection_id, "query": "list"},
        ).json()["data"]
        response = api_client.get(
            f"/sessions/{session_id}/turns/{turn['id']}/export", params={"delimiter": ";;"}
        )
        assert response.status_code == 422

    def test_ask_without_active_connection(self, api_client, connection_id):
        session_id = api_client.post("/sessions").json()["data"]["session_id"]
        response = api_client.post(
            f"/sessions/{session_id}/ask",
            json={"connection_id": connection_id, "query": "list"},
        )
        assert response.status_code == 409
        assert response.json()["error"]["code"] == "NO_ACTIVE_CONNECTION"

    def test_driver_error_is_in_turn(self, api_client, adapter_factory, connection_id):
        api_client.post(f"/connections/{connection_id}/test")
        adapter_factory.result = {"error": "permission denied"}
        session_id = api_client.post("/sessions").json()["data"]["session_id"]
        response = api_client.post(
            f"/sessions/{session_id}/ask",
            json={"connection_id": connection_id, "query": "list"},
        )
        assert response.status_code == 200
        turn = response.json()["data"]
        assert turn["error"]["code"] == "BACKEND_EXECUTION_ERROR"
        assert turn["result"] is None

        export = api_client.get(f"/sessions/{session_id}/turns/{turn['id']}/export")
        assert export.status_code == 404
        assert export.json()["error"]["code"] == "NOTHING_TO_EXPORT"

    def test_empty_query_rejected(self, api_client, connection_id):
        session_id = api_client.post("/sessions").json()["data"]["session_id"]
        response = api_client.post(
            f"/sessions/{session_id}/ask",
            json={"connection_id": connection_id, "query": ""},
        )
        assert response.status_code == 422

    def test_unknown_session(self, api_client):
        assert api_client.get("/sessions/nope/turns").status_code == 404
        assert api_client.delete("/sessions/nope").status_code == 200


@pytest.mark.unit
class TestSettingsEndpoints:
    def test_api_key_never_returned(self, api_client):
        assert api_client.get("/settings/api-key").json()["data"] == {"configured": False}
        response = api_client.put("/settings/api-key", json={"api_key": "sk-test"})
        assert response.json()["data"] == {"configured": True}
        assert "sk-test" not in api_client.get("/settings/api-key").text
