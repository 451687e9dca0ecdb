# tests/api/test_resolvers_api.py
from __future__ import annotations

from fastapi.testclient import TestClient

from switchboard.core.cache.memory import MemoryCache
from switchboard.core.config import Settings
from switchboard.core.datasources.models import DatasourceProfile
from switchboard.core.datasources.registry import DatasourceRegistry
from switchboard.core.datasources.transport import TransportResponse
from switchboard.core.errors import TransportError
from switchboard.main import create_app


class RoutedTransport:
    def __init__(self, routes: dict[str, object]):
        self.routes = routes
        self.calls: list[dict] = []

    async def send(self, **kwargs):
        self.calls.append(kwargs)
        if kwargs["url"] not in self.routes:
            raise TransportError("Request failed with status code 404", status=404)
        return TransportResponse(status=200, data=self.routes[kwargs["url"]], headers={})


def create_test_client(routes: dict[str, object], cache=None):
    registry = DatasourceRegistry()
    registry.register(
        "USER_SERVICE",
        DatasourceProfile(name="USER_SERVICE", base_address="http://users", retry_budget=1),
    )
    registry.register(
        "POST_SERVICE",
        DatasourceProfile(name="POST_SERVICE", base_address="http://posts", retry_budget=1),
    )
    transport = RoutedTransport(routes)
    app = create_app(
        Settings(log_level="WARNING", cache_ttl_seconds=120),
        registry=registry,
        transport=transport,
        cache=cache if cache is not None else MemoryCache(),
    )
    return TestClient(app), transport


class TestHealth:
    def test_health(self):
        client, _ = create_test_client({})

        resp = client.get("/health")

        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}


class TestExecuteResolver:
    def test_missing_type(self):
        client, _ = create_test_client({})

        resp = client.post("/api/resolvers", json={"datasource": "USER_SERVICE"})

        assert resp.status_code == 400
        assert "type field is required" in resp.json()["detail"]

    def test_unknown_type(self):
        client, _ = create_test_client({})

        resp = client.post("/api/resolvers", json={"type": "graph"})

        assert resp.status_code == 400
        assert resp.json()["detail"]["error"] == "unsupported_resolver_type"

    def test_invalid_definition(self):
        client, transport = create_test_client({})

        resp = client.post(
            "/api/resolvers",
            json={"type": "unit", "datasource": "USER_SERVICE", "path": "/u", "method": "POST"},
        )

        assert resp.status_code == 400
        assert resp.json()["detail"]["error"] == "configuration_error"
        assert transport.calls == []

    def test_unit_success_and_cache(self):
        client, transport = create_test_client({"http://users/users/1": {"id": 1}})
        body = {
            "type": "unit",
            "datasource": "user_service",
            "path": "/users/1",
            "isToBeCached": True,
            "cachingKeys": "users:1",
        }

        first = client.post("/api/resolvers", json=body)
        second = client.post("/api/resolvers", json=body)

        assert first.status_code == 200
        assert first.json()["status"] == "success"
        assert first.json()["data"] == {"id": 1}
        assert first.json()["meta"]["fromCache"] is False
        assert first.json()["meta"]["cached"] is True
        assert first.json()["meta"]["cacheKey"] == "users:1"

        assert second.json()["meta"]["fromCache"] is True
        assert second.json()["data"] == {"id": 1}
        assert len(transport.calls) == 1

    def test_unit_failure_is_500(self):
        client, _ = create_test_client({})

        resp = client.post(
            "/api/resolvers",
            json={"type": "unit", "datasource": "USER_SERVICE", "path": "/missing"},
        )

        assert resp.status_code == 500
        assert resp.json()["status"] == "error"
        assert "failed after 1 attempts" in resp.json()["message"]

    def test_pipeline_with_explicit_input(self):
        client, transport = create_test_client(
            {
                "http://users/users/7": {"id": 7},
                'http://posts/posts?userId={"id":7}': [{"id": 1}],
            }
        )

        resp = client.post(
            "/api/resolvers",
            json={
                "type": "pipeline",
                "steps": [
                    {"name": "getUser", "datasource": "USER_SERVICE", "path": "/users/$input.userId"},
                    {"name": "getPosts", "datasource": "POST_SERVICE", "path": "/posts?userId=$prev.id"},
                ],
                "input": {"userId": 7},
            },
        )

        assert resp.status_code == 200
        data = resp.json()
        assert data["data"] == [{"id": 1}]
        assert [s["name"] for s in data["steps"]] == ["getUser", "getPosts"]
        assert data["meta"]["type"] == "pipeline"

    def test_body_is_input_when_input_absent(self):
        client, transport = create_test_client({"http://users/users/42": {"id": 42}})

        resp = client.post(
            "/api/resolvers",
            json={
                "type": "pipeline",
                "userId": 42,
                "steps": [
                    {"name": "getUser", "datasource": "USER_SERVICE", "path": "/users/$input.userId"},
                ],
            },
        )

        assert resp.status_code == 200
        assert transport.calls[0]["url"] == "http://users/users/42"

    def test_pipeline_fail_fast_is_500_with_steps(self):
        client, _ = create_test_client({"http://users/a": 1})

        resp = client.post(
            "/api/resolvers",
            json={
                "type": "pipeline",
                "steps": [
                    {"name": "a", "datasource": "USER_SERVICE", "path": "/a"},
                    {"name": "b", "datasource": "POST_SERVICE", "path": "/b"},
                ],
            },
        )

        assert resp.status_code == 500
        body = resp.json()
        assert body["message"].startswith("Pipeline failed at step 'b'")
        assert [s["ok"] for s in body["steps"]] == [True, False]


class TestTestResolver:
    def test_top_level_cache_disabled(self):
        cache = MemoryCache()
        client, transport = create_test_client({"http://users/u": {"id": 1}}, cache=cache)
        body = {
            "type": "unit",
            "datasource": "USER_SERVICE",
            "path": "/u",
            "isCached": True,
            "cacheKey": "u",
        }

        client.post("/api/resolvers/test", json=body)
        resp = client.post("/api/resolvers/test", json=body)

        assert resp.status_code == 200
        assert resp.json()["meta"]["message"] == "Test execution (caching disabled)"
        assert len(transport.calls) == 2
        assert len(cache) == 0

    def test_pipeline_chain_in_meta(self):
        client, _ = create_test_client({"http://users/a": 1})

        resp = client.post(
            "/api/resolvers/test",
            json={
                "type": "pipeline",
                "steps": [{"name": "a", "datasource": "USER_SERVICE", "path": "/a"}],
            },
        )

        assert resp.status_code == 200
        assert resp.json()["meta"]["resolverChain"][0]["name"] == "a"


def test_docs():
    client, _ = create_test_client({})

    resp = client.get("/api/resolvers/docs")

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert set(data["resolverTypes"]) == {"unit", "pipeline"}
    assert "$prev" in data["resolverTypes"]["pipeline"]["variableSupport"]
