"""HTTP surface over the analysis service."""

from __future__ import annotations

from dataclasses import replace

import pytest
from fastapi.testclient import TestClient

from app import create_app
from config import get_config

TOKEN = "test-admin-token"


@pytest.fixture
def client(service):
    config = replace(get_config(), ADMIN_TOKEN=TOKEN, ALLOWED_ORIGINS=["*"])
    with TestClient(create_app(service=service, config=config)) as test_client:
        yield test_client


def test_analyze_returns_scored_record(client: TestClient) -> None:
    response = client.post("/api/analyze", json={"text": "The service was excellent and very helpful!"})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["polarity"] == 0.35
    assert data["sentiment"] == "positive"
    assert data["wordCount"] == 7
    assert set(data) == {"id", "text", "polarity", "sentiment", "subjectivity", "wordCount", "timestamp"}


@pytest.mark.parametrize("payload", [{"text": "   "}, {"text": 12}, {}])
def test_analyze_rejects_invalid_text(client: TestClient, payload) -> None:
    response = client.post("/api/analyze", json=payload)

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid text input"


def test_batch_analysis(client: TestClient) -> None:
    response = client.post("/api/analyze/batch", json={"texts": ["awful horrible", "", "excellent great"]})

    assert response.status_code == 200
    body = response.json()
    assert [item["text"] for item in body["data"]] == ["awful horrible", "excellent great"]
    assert body["summary"] == {"total": 2, "positive": 1, "negative": 1, "neutral": 0}


def test_batch_without_texts_is_rejected(client: TestClient) -> None:
    assert client.post("/api/analyze/batch", json={"texts": []}).status_code == 400
    assert client.post("/api/analyze/batch", json={}).status_code == 400


def test_history_pagination(client: TestClient) -> None:
    client.post("/api/analyze/batch", json={"texts": [f"note {i}" for i in range(12)]})

    response = client.get("/api/history", params={"page": 2, "limit": 5})

    body = response.json()
    assert [item["text"] for item in body["data"]] == [f"note {i}" for i in range(6, 1, -1)]
    assert body["pagination"] == {"page": 2, "limit": 5, "total": 12, "totalPages": 3}


def test_history_rejects_zero_limit(client: TestClient) -> None:
    assert client.get("/api/history", params={"limit": 0}).status_code == 400


def test_history_rejects_non_integer_paging(client: TestClient) -> None:
    response = client.get("/api/history", params={"page": "abc"})

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request parameters"


def test_stats_include_distribution(client: TestClient) -> None:
    client.post("/api/analyze/batch", json={"texts": ["excellent great", "terrible waste"]})

    data = client.get("/api/stats").json()["data"]

    assert data["totalAnalysis"] == 2
    assert data["averagePolarity"] == 0.0
    assert data["distribution"] == {"positive": 50.0, "negative": 50.0, "neutral": 0.0}


def test_search(client: TestClient) -> None:
    client.post("/api/analyze/batch", json={"texts": ["Delivery was broken", "Delivery was great and good"]})

    body = client.get("/api/search", params={"q": "delivery", "sentiment": "positive"}).json()

    assert [item["text"] for item in body["data"]] == ["Delivery was great and good"]
    assert body["summary"] == {"total": 1, "query": "delivery", "sentimentFilter": "positive"}


def test_export(client: TestClient) -> None:
    client.post("/api/analyze", json={"text": "good and great"})

    data = client.get("/api/export").json()["data"]

    assert data["metadata"]["totalRecords"] == 1
    assert data["statistics"]["positive"] == 1
    assert data["analyses"][0]["text"] == "good and great"


def test_clear_requires_bearer_token(client: TestClient) -> None:
    client.post("/api/analyze", json={"text": "good and great"})

    assert client.delete("/api/history").status_code == 401
    assert client.delete("/api/history", headers={"Authorization": "Bearer wrong"}).status_code == 401
    assert client.get("/api/health").json()["historySize"] == 1

    response = client.delete("/api/history", headers={"Authorization": f"Bearer {TOKEN}"})

    assert response.status_code == 200
    assert response.json()["data"]["success"] is True
    assert client.get("/api/stats").json()["data"]["totalAnalysis"] == 0


def test_metrics_endpoint(client: TestClient) -> None:
    client.post("/api/analyze", json={"text": "good and great"})

    response = client.get("/metrics")

    assert response.status_code == 200
    assert "sentiment_analyses_total" in response.text
    assert "sentiment_http_requests_total" in response.text
