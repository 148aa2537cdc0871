"""Integration tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from flowgo.dsl.api import app


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.mark.integration
class TestDslApi:
    """Test the conversion endpoints end to end."""

    def test_root_and_health(self, client: TestClient):
        assert client.get("/health").json() == {"status": "healthy"}
        assert set(client.get("/").json()["endpoints"]) == {"dslToGraph", "graphToDsl", "normalize"}

    def test_dsl_to_graph(self, client: TestClient, sample_dsl: str):
        response = client.post("/dslToGraph", json={"dsl": sample_dsl})

        assert response.status_code == 200
        body = response.json()
        assert len(body["graph"]["nodes"]) == 12
        assert len(body["graph"]["edges"]) == 12
        assert body["layout"]["nodeWidth"] > 0

    def test_dsl_to_graph_syntax_error(self, client: TestClient):
        response = client.post("/dslToGraph", json={"dsl": "action Foo by Human { outputs [x]; }"})

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["position"] == 30
        assert detail["message"].startswith("Failed to parse DSL: ")
        assert "[[]" in detail["context"]

    def test_graph_round_trip(self, client: TestClient, linear_dsl: str):
        graph = client.post("/dslToGraph", json={"dsl": linear_dsl}).json()["graph"]

        response = client.post("/graphToDsl", json={"graph": graph})

        assert response.status_code == 200
        assert "  B(x: x);\n" in response.json()["dsl"]

    def test_graph_to_dsl_rejects_malformed_graph(self, client: TestClient):
        response = client.post("/graphToDsl", json={"graph": {"nodes": [{"id": "n"}]}})
        assert response.status_code == 422

    def test_normalize(self, client: TestClient):
        response = client.post("/normalize", json={"dsl": "entity   E{a:Int;} // note"})

        assert response.status_code == 200
        assert response.json() == {"dsl": "entity E {\n  a: Int;\n}\n\n"}
