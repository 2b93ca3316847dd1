# -*- coding: utf-8 -*-
"""
Tests for the REST API.

Exercises every endpoint through FastAPI's TestClient, including the
stateless override round trip (store out, store back in).
"""

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Add api directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "api"))

from index import app


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


class TestHealthAndInfo:
    """Tests for the informational endpoints."""

    def test_health(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_info_lists_endpoints(self, client):
        response = client.get("/api/info")

        assert response.status_code == 200
        assert "POST /api/overrides" in response.json()["endpoints"]


class TestClassifyEndpoint:
    """Tests for POST /api/classify."""

    def test_classify(self, client):
        response = client.post("/api/classify", json={"keyword": "buy running shoes"})

        assert response.status_code == 200
        assert response.json() == {"intent": "Transactional", "stage": "transactional"}

    def test_classify_with_ranking_url(self, client):
        response = client.post("/api/classify", json={
            "keyword": "how to tie running shoes",
            "ranking_url": "/blog/how-to-tie-shoes",
        })

        assert response.json()["intent"] == "Educational"

    def test_keyword_required(self, client):
        response = client.post("/api/classify", json={})

        assert response.status_code == 422


class TestResolveEndpoint:
    """Tests for POST /api/resolve."""

    def test_resolve_with_store_and_ai(self, client):
        response = client.post("/api/resolve", json={
            "keywords": ["best running shoes", "trail socks", "acme shoes"],
            "site_url": "https://acme.com",
            "override_store": {"exactOverrides": {"best running shoes": "Transactional"}},
            "ai_intents": {"trail socks": "Local"},
        })

        assert response.status_code == 200
        intents = response.json()["intents"]
        assert intents["best running shoes"] == {"intent": "Transactional", "source": "override"}
        assert intents["trail socks"] == {"intent": "Local", "source": "ai"}
        assert intents["acme shoes"] == {"intent": "Branded", "source": "auto"}


class TestAlertsEndpoint:
    """Tests for POST /api/alerts."""

    def test_alerts(self, client):
        response = client.post("/api/alerts", json={
            "metrics": [
                {"keyword": "buy running shoes", "position": 12.4},
                {"keyword": "how to tie running shoes", "position": 12.0},
            ],
            "historical": {
                "buy running shoes": {"period1": 4.0, "period2": 6.0, "period3": 9.5},
                "how to tie running shoes": {"period1": 1.0, "period2": 3.0, "period3": 12.0},
            },
        })

        assert response.status_code == 200
        data = response.json()
        assert data["alerts"]["buy running shoes"] == ["fire", "smoking", "hot"]
        assert data["alerts"]["how to tie running shoes"] == []
        assert data["counts"] == {"fire": 1, "smoking": 1, "hot": 1}


class TestRankEndpoint:
    """Tests for POST /api/rank."""

    def test_rank(self, client, sample_checklists):
        response = client.post("/api/rank", json={
            "checklists": {
                "buy running shoes": sample_checklists["buy running shoes"]["checklist"],
                "best running shoes": sample_checklists["best running shoes"],
                "running shoes near me": None,
            },
            "metrics": [
                {"keyword": "buy running shoes", "position": 12.4},
                {"keyword": "best running shoes", "position": 2.1},
            ],
            "volumes": {"buy running shoes": 12000, "best running shoes": 6000},
        })

        assert response.status_code == 200
        data = response.json()
        assert len(data["ranked_items"]) == 4
        assert data["deprioritized_count"] == 1
        assert data["ranked_items"][-1]["keyword"] == "buy running shoes"
        assert data["ranked_items"][-1]["is_primary"] is False
        conflict = data["conflicts"][0]
        assert (conflict["page"], conflict["category"]) == ("/pricing", "title-tag")
        assert conflict["items"][0]["keyword"] == "best running shoes"
        assert conflict["items"][0]["keyword_value"] == 140


class TestOverridesEndpoint:
    """Tests for POST /api/overrides."""

    def test_record_override_round_trip(self, client):
        first = client.post("/api/overrides", json={
            "keyword": "best running shoes",
            "intent": "Transactional",
            "all_site_keywords": ["best running shoes", "best running shoes for men", "trail socks"],
        })

        assert first.status_code == 200
        data = first.json()
        assert data["affected"] == {"best running shoes for men": "Transactional"}
        assert data["override_store"]["learnedRules"][0]["source"] == "best running shoes"

        resolved = client.post("/api/resolve", json={
            "keywords": ["best running shoes for women"],
            "override_store": data["override_store"],
        })

        assert resolved.json()["intents"]["best running shoes for women"] == {
            "intent": "Transactional",
            "source": "learned",
        }

    def test_unknown_intent(self, client):
        response = client.post("/api/overrides", json={"keyword": "trail socks", "intent": "Commercial"})

        assert response.status_code == 400
        assert "Unknown intent" in response.json()["detail"]


class TestMalformedStore:
    """Tests for override stores with the wrong shape."""

    @pytest.mark.parametrize("store", [
        {"exactOverrides": ["trail shoes"]},
        {"learnedRules": "trail shoes"},
    ])
    def test_resolve_rejects_malformed_store(self, client, store):
        response = client.post("/api/resolve", json={"keywords": ["trail shoes"], "override_store": store})

        assert response.status_code == 400
        assert "Malformed override store" in response.json()["detail"]

    def test_override_rejects_malformed_store(self, client):
        response = client.post("/api/overrides", json={
            "keyword": "trail shoes",
            "intent": "Product",
            "override_store": {"exactOverrides": ["trail shoes"]},
        })

        assert response.status_code == 400

    def test_bad_rule_entries_are_skipped(self, client):
        response = client.post("/api/resolve", json={
            "keywords": ["trail shoes"],
            "override_store": {"learnedRules": ["x"]},
        })

        assert response.status_code == 200
        assert response.json()["intents"]["trail shoes"]["source"] == "auto"
