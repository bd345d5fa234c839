from fastapi.testclient import TestClient

from tests.helpers.asserts import assert_error


class TestUtilityEndpoints:
    def test_health_check(self, client: TestClient):
        response = client.get("/utility/health")

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "healthy"
        assert response.headers.get("X-Request-ID")

    def test_request_id_is_echoed(self, client: TestClient):
        response = client.get("/utility/health", headers={"X-Request-ID": "trace-123"})
        assert response.headers["X-Request-ID"] == "trace-123"

    def test_unknown_route_uses_error_envelope(self, client: TestClient):
        response = client.get("/does-not-exist")

        error = assert_error(response, 404, "NOT_FOUND")
        assert error["message"] == "Not Found"
