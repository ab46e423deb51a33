"""
Tests for similarity index backends

Pinecone requests are served by an httpx MockTransport.
"""

import json

import httpx
import pytest


def _pinecone(handler, **kwargs):
    from docqa.common.vector_index import PineconeIndex

    client = httpx.Client(transport=httpx.MockTransport(handler))
    return PineconeIndex(
        base_url="https://smartdocs-abc.svc.pinecone.io/",
        api_key="pc-key",
        index_name="smartdocs",
        client=client,
        **kwargs,
    )


class TestPineconeIndex:
    def test_query_payload_and_parsing(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["api_key"] = request.headers.get("Api-Key")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"matches": [
                {"id": "doc-1", "score": 0.91, "metadata": {"document_type": "EDUCATION_DOCUMENT"}},
                {"id": "doc-2", "score": 0.52, "metadata": {"document_type": "Tax Invoice"}},
                {"score": 0.1, "metadata": {}},
            ]})

        matches = _pinecone(handler).search([0.1, 0.2], "asha@example.com", 3)

        assert seen["url"] == "https://smartdocs-abc.svc.pinecone.io/query"
        assert seen["api_key"] == "pc-key"
        assert seen["body"] == {
            "vector": [0.1, 0.2],
            "topK": 3,
            "includeMetadata": True,
            "includeValues": False,
            "filter": {"user_email": "asha@example.com"},
        }
        assert [(m.document_id, m.document_type) for m in matches] == [
            ("doc-1", "EDUCATION_DOCUMENT"),
            ("doc-2", "FINANCIAL_BILL"),
        ]
        assert all(m.text is None for m in matches)

    def test_http_error_raises_typed_error(self):
        from docqa.common.vector_index import VectorIndexError

        index = _pinecone(lambda request: httpx.Response(503, json={"message": "unavailable"}))

        with pytest.raises(VectorIndexError, match="503"):
            index.search([0.1], "u", 3)

    def test_transport_error_raises_typed_error(self):
        from docqa.common.vector_index import VectorIndexError

        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(VectorIndexError):
            _pinecone(handler).search([0.1], "u", 3)

    def test_unconfigured_index_raises(self):
        from docqa.common.vector_index import PineconeIndex, VectorIndexError

        index = PineconeIndex(base_url="", api_key="")
        assert not index.is_available
        with pytest.raises(VectorIndexError):
            index.search([0.1], "u", 3)

    def test_health_stats(self):
        def handler(request):
            assert request.url.path == "/describe_index_stats"
            return httpx.Response(200, json={"dimension": 3072, "totalVectorCount": 42})

        index = _pinecone(handler)

        assert index.test_connection() is True
        stats = index.get_stats()
        assert stats["total_vectors"] == 42
        assert stats["index_name"] == "smartdocs"

    def test_connection_failure_reported(self):
        index = _pinecone(lambda request: httpx.Response(401))
        assert index.test_connection() is False


class TestInMemoryVectorIndex:
    def test_ranks_by_cosine_within_user(self):
        from docqa.common.vector_index import InMemoryVectorIndex

        index = InMemoryVectorIndex()
        index.add("near", "u", [1.0, 0.0], "Marksheet")
        index.add("far", "u", [0.0, 1.0], "Invoice")
        index.add("mid", "u", [1.0, 1.0])
        index.add("foreign", "other", [1.0, 0.0])

        matches = index.search([1.0, 0.0], "u", 2)

        assert [m.document_id for m in matches] == ["near", "mid"]
        assert matches[0].score == pytest.approx(1.0)
        assert matches[0].document_type == "EDUCATION_DOCUMENT"

    def test_unknown_user_returns_empty(self):
        from docqa.common.vector_index import InMemoryVectorIndex

        index = InMemoryVectorIndex()
        index.add("a", "u", [1.0])
        assert index.search([1.0], "nobody", 3) == []
