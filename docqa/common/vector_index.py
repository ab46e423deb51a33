"""
Similarity Index

Ranked nearest-neighbour search over document embeddings, filtered to one
user. Vectors are written by the ingestion pipeline; this module only reads.

- PineconeIndex: Pinecone data-plane REST API over httpx
- InMemoryVectorIndex: numpy cosine search, for local runs and tests
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from .embedding_service import batch_cosine_similarity
from .schemas import DocumentType, SimilarityMatch

logger = logging.getLogger("docqa.common.vector_index")


class VectorIndexError(Exception):
    """Similarity index request failed"""
    pass


class PineconeIndex:
    """
    Client for a single Pinecone index.

    Each vector carries ``user_email`` and ``document_type`` metadata; queries
    always filter on ``user_email``.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        index_name: str = "",
        dimensions: int = 3072,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ):
        """
        Initialize Pinecone client.

        Args:
            base_url: Index host URL (https://<index>-<project>.svc.<env>.pinecone.io)
            api_key: Pinecone API key
            index_name: Index name, reported in stats
            dimensions: Embedding dimensions, reported in stats
            timeout: Per-request timeout in seconds
            client: Pre-built httpx client (tests inject a MockTransport here)
        """
        self._base_url = (base_url or "").rstrip("/")
        self._api_key = api_key
        self.index_name = index_name
        self.dimensions = dimensions
        self._client = client or httpx.Client(timeout=httpx.Timeout(timeout))

    @property
    def is_available(self) -> bool:
        return bool(self._base_url and self._api_key)

    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        if not self.is_available:
            raise VectorIndexError("Pinecone base URL or API key not configured")
        try:
            response = self._client.post(
                f"{self._base_url}{path}",
                json=payload,
                headers={"Api-Key": self._api_key, "Content-Type": "application/json"},
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise VectorIndexError(
                f"Pinecone {path} returned {e.response.status_code}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise VectorIndexError(f"Pinecone {path} failed: {e}") from e

    def search(self, vector: List[float], user: str, topk: int) -> List[SimilarityMatch]:
        """
        Query the index for the ``topk`` nearest vectors owned by ``user``.

        Raises:
            VectorIndexError: transport, HTTP or payload failure
        """
        payload = {
            "vector": list(vector),
            "topK": topk,
            "includeMetadata": True,
            "includeValues": False,
            "filter": {"user_email": user},
        }
        result = self._post("/query", payload)
        matches = self.parse_matches(result)
        logger.info("Pinecone returned %d matches (topK=%d)", len(matches), topk)
        return matches

    @staticmethod
    def parse_matches(result: Dict[str, Any]) -> List[SimilarityMatch]:
        """Convert a Pinecone query response into SimilarityMatch objects."""
        parsed = []
        for match in result.get("matches") or []:
            doc_id = match.get("id")
            if not doc_id:
                continue
            metadata = match.get("metadata") or {}
            parsed.append(SimilarityMatch(
                document_id=str(doc_id),
                score=float(match.get("score", 0.0)),
                document_type=DocumentType.from_label(metadata.get("document_type")).value,
            ))
        return parsed

    def test_connection(self) -> bool:
        """True when describe_index_stats succeeds."""
        try:
            self._post("/describe_index_stats", {})
            return True
        except VectorIndexError as e:
            logger.error("Pinecone connection failed: %s", e)
            return False

    def get_stats(self) -> Dict[str, Any]:
        """Index statistics for the health endpoint."""
        result = self._post("/describe_index_stats", {})
        return {
            "vector_store": "pinecone",
            "index_name": self.index_name,
            "dimensions": result.get("dimension", self.dimensions),
            "total_vectors": result.get("totalVectorCount", 0),
            "status": "connected",
        }

    def close(self) -> None:
        self._client.close()


class InMemoryVectorIndex:
    """
    Cosine-similarity index held in process memory.

    Entries are (document_id, user_email, document_type, vector).
    """

    def __init__(self):
        self._entries: List[Dict[str, Any]] = []

    @property
    def is_available(self) -> bool:
        return True

    def add(self, document_id: str, user: str, vector: List[float], document_type: str = "OTHER") -> None:
        self._entries.append({
            "document_id": document_id,
            "user_email": user,
            "document_type": DocumentType.from_label(document_type).value,
            "vector": list(vector),
        })

    def search(self, vector: List[float], user: str, topk: int) -> List[SimilarityMatch]:
        candidates = [e for e in self._entries if e["user_email"] == user]
        if not candidates or topk <= 0:
            return []

        scores = batch_cosine_similarity(vector, [e["vector"] for e in candidates])
        ranked = sorted(zip(candidates, scores), key=lambda pair: pair[1], reverse=True)

        return [
            SimilarityMatch(
                document_id=entry["document_id"],
                score=score,
                document_type=entry["document_type"],
            )
            for entry, score in ranked[:topk]
        ]

    def test_connection(self) -> bool:
        return True

    def get_stats(self) -> Dict[str, Any]:
        return {
            "vector_store": "memory",
            "total_vectors": len(self._entries),
            "status": "connected",
        }

    def close(self) -> None:
        pass
