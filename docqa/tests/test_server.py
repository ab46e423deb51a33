"""
Tests for the DocQA HTTP surface

Runs the FastAPI app with injected mock components via TestClient.
"""

import pytest
from unittest.mock import Mock

from fastapi.testclient import TestClient

HEADERS = {"X-User-Email": "asha@example.com"}


@pytest.fixture
def components():
    from docqa.common.config import DocQAConfig
    from docqa.common.vector_index import InMemoryVectorIndex

    return {
        "orchestrator": Mock(),
        "searcher": Mock(),
        "index": InMemoryVectorIndex(),
        "config": DocQAConfig(),
    }


@pytest.fixture
def client(components):
    from docqa.server import create_app

    app = create_app(**components)
    with TestClient(app) as test_client:
        yield test_client


class TestAnswers:
    def test_success_payload(self, client, components):
        from docqa.common.schemas import Success

        components["orchestrator"].answer.return_value = Success(
            answer="ABCDE1234F (from IDENTITY_DOCUMENT)", route="FIELD_LOOKUP",
        )

        response = client.get("/ai/answers", params={"query": "What is my PAN number?"}, headers=HEADERS)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Answer generated successfully"
        assert body["data"] == {
            "query": "What is my PAN number?",
            "answer": "ABCDE1234F (from IDENTITY_DOCUMENT)",
            "route_type": "FIELD_LOOKUP",
            "sources_count": 0,
            "type": "precise_answer",
        }
        assert "timestamp" in body
        components["orchestrator"].answer.assert_called_once_with("What is my PAN number?", "asha@example.com")

    def test_not_found_payload(self, client, components):
        from docqa.common.schemas import NotFound

        components["orchestrator"].answer.return_value = NotFound("I couldn't find any documents to answer your question.")

        body = client.get("/ai/answers", params={"query": "q"}, headers=HEADERS).json()

        assert body["message"] == "I couldn't find any documents to answer your question."
        assert body["data"]["status"] == "NOT_FOUND"
        assert body["data"]["type"] == "no_answer"

    def test_missing_identity_is_401(self, client, components):
        response = client.get("/ai/answers", params={"query": "q"})

        assert response.status_code == 401
        components["orchestrator"].answer.assert_not_called()

    def test_blank_query_is_400(self, client):
        response = client.get("/ai/answers", params={"query": "   "}, headers=HEADERS)
        assert response.status_code == 400

    def test_missing_query_is_422(self, client):
        assert client.get("/ai/answers", headers=HEADERS).status_code == 422


class TestSearch:
    def test_default_max_results(self, client, components):
        from docqa.common.schemas import SimilarityMatch

        components["searcher"].search.return_value = [
            SimilarityMatch(document_id="marks", score=0.9, document_type="EDUCATION_DOCUMENT"),
        ]

        body = client.get("/ai/search", params={"query": "marks"}, headers=HEADERS).json()

        components["searcher"].search.assert_called_once_with("marks", "asha@example.com", 5)
        assert body["message"] == "Search completed successfully"
        assert body["data"][0]["document_id"] == "marks"
        assert body["data"][0]["score"] == 0.9

    def test_explicit_max_results(self, client, components):
        components["searcher"].search.return_value = []

        client.get("/ai/search", params={"query": "marks", "maxResults": 2}, headers=HEADERS)

        assert components["searcher"].search.call_args.args[2] == 2


class TestHealth:
    def test_health_reports_index(self, client):
        body = client.get("/health").json()

        assert body["status"] == "healthy"
        assert body["initialized"] is True
        assert body["similarity_index"]["status"] == "up"
        assert body["similarity_index"]["vector_store"] == "memory"

    def test_index_failure_reported_down(self, components):
        from docqa.server import create_app

        broken = Mock()
        broken.test_connection.side_effect = RuntimeError("dns failure")
        components["index"] = broken

        with TestClient(create_app(**components)) as test_client:
            body = test_client.get("/health").json()

        assert body["similarity_index"] == {"status": "down", "error": "dns failure"}
