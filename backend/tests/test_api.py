"""
Test API

Endpoint tests using FastAPI's TestClient.
"""

import pytest
from fastapi.testclient import TestClient

from main import app


@pytest.fixture
def client():
    with TestClient(app) as client:
        yield client
        client.post("/api/v1/clear-cache")


@pytest.fixture
def session_id(client, orders_csv):
    response = client.post(
        "/api/v1/upload",
        files={"file": ("orders.csv", orders_csv, "text/csv")},
    )
    assert response.status_code == 200
    return response.json()["sessionId"]


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestUpload:
    def test_upload_csv(self, client, orders_csv):
        response = client.post(
            "/api/v1/upload",
            files={"file": ("orders.csv", orders_csv, "text/csv")},
        )
        data = response.json()

        assert response.status_code == 200
        assert data["rowCount"] == 40
        assert data["columnCount"] == 6
        assert data["columns"][0] == "order_id"

    def test_upload_json(self, client):
        response = client.post(
            "/api/v1/upload",
            files={"file": ("rows.json", b'[{"a": 1}, {"a": 2}]', "application/json")},
        )

        assert response.status_code == 200
        assert response.json()["rowCount"] == 2

    def test_unsupported_file_type(self, client):
        response = client.post(
            "/api/v1/upload",
            files={"file": ("data.txt", b"a,b\n1,2\n", "text/plain")},
        )
        assert response.status_code == 400

    def test_malformed_json(self, client):
        response = client.post(
            "/api/v1/upload",
            files={"file": ("rows.json", b"{oops", "application/json")},
        )
        assert response.status_code == 400

    def test_header_only_csv(self, client):
        response = client.post(
            "/api/v1/upload",
            files={"file": ("empty.csv", b"a,b\n", "text/csv")},
        )

        assert response.status_code == 422
        assert response.json()["detail"] == "No data to analyze"


class TestSessions:
    def test_get_session(self, client, session_id):
        response = client.get(f"/api/v1/sessions/{session_id}")
        data = response.json()

        assert response.status_code == 200
        assert data["filename"] == "orders.csv"
        assert data["status"] == "ready"

    def test_list_sessions(self, client, session_id):
        data = client.get("/api/v1/sessions").json()
        assert session_id in [s["sessionId"] for s in data["sessions"]]

    def test_delete_session(self, client, session_id):
        assert client.delete(f"/api/v1/sessions/{session_id}").status_code == 200
        assert client.get(f"/api/v1/sessions/{session_id}").status_code == 404
        assert client.delete(f"/api/v1/sessions/{session_id}").status_code == 404

    def test_unknown_session(self, client):
        assert client.get("/api/v1/sessions/nope").status_code == 404


class TestReports:
    def test_report(self, client, session_id):
        response = client.get(f"/api/v1/reports/{session_id}")
        data = response.json()

        assert response.status_code == 200
        assert data["sessionId"] == session_id
        assert data["cached"] is False

        report = data["report"]
        assert report["summary"]["pattern"] == "ecommerce_orders"
        assert report["summary"]["rowCount"] == 40
        assert report["dataQuality"]["completeness"] == 100.0
        assert report["fieldAnalyses"]["amount"]["type"] == "currency"
        assert report["fieldAnalyses"]["order_id"]["uniqueRatio"] == "100.0"
        # Fields without a value are omitted
        assert "min" not in report["fieldAnalyses"]["order_id"]
        assert report["visualizationRecommendations"][0]["type"] == "timeSeries"

    def test_second_request_is_cached(self, client, session_id):
        client.get(f"/api/v1/reports/{session_id}")
        data = client.get(f"/api/v1/reports/{session_id}").json()

        assert data["cached"] is True

    def test_unknown_session(self, client):
        assert client.get("/api/v1/reports/nope").status_code == 404

    def test_analyze_inline_rows(self, client, sales_rows):
        response = client.post("/api/v1/analyze", json={"rows": sales_rows})
        data = response.json()

        assert response.status_code == 200
        assert data["summary"]["pattern"] == "sales_data"
        assert "Average transaction value: $20.25" in [i["text"] for i in data["insights"]]

    def test_analyze_empty_rows(self, client):
        response = client.post("/api/v1/analyze", json={"rows": []})

        assert response.status_code == 422
        assert response.json()["detail"] == "No data to analyze"


class TestCharts:
    def test_pie_chart(self, client, session_id):
        response = client.get(f"/api/v1/charts/{session_id}/pie")
        data = response.json()

        assert response.status_code == 200
        assert data["chartType"] == "pie"
        assert data["bindings"] == {"categoryField": "product_category"}
        assert data["data"][0] == {"name": "Electronics", "value": 20, "percentage": "50.0"}
        assert data["colors"] == ["#667eea", "#764ba2", "#f093fb"]

    def test_histogram_chart(self, client, session_id):
        data = client.get(f"/api/v1/charts/{session_id}/histogram").json()

        assert len(data["data"]) == 10
        assert sum(b["count"] for b in data["data"]) == 40

    def test_chart_not_recommended(self, client, session_id):
        assert client.get(f"/api/v1/charts/{session_id}/scatter").status_code == 404

    def test_unknown_chart_type(self, client, session_id):
        assert client.get(f"/api/v1/charts/{session_id}/radar").status_code == 400


class TestOpenAPI:
    def test_error_responses_are_documented(self, client):
        schema = client.get("/openapi.json").json()

        assert "ErrorResponse" in schema["components"]["schemas"]
        upload = schema["paths"]["/api/v1/upload"]["post"]["responses"]
        assert "413" in upload
        assert upload["413"]["content"]["application/json"]["schema"] == {
            "$ref": "#/components/schemas/ErrorResponse"
        }
