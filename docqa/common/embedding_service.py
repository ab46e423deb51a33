"""
Embedding Service

Turns question text into a fixed-length vector for similarity search.

Modes:
- google: Gemini embeddings (gemini-embedding-001, 3072 dims)
- openai: OpenAI embeddings API
- femb:   on-device fastembed (no external API calls)
"""

import logging
from typing import List, Optional
import numpy as np

logger = logging.getLogger("docqa.common.embedding_service")

SUPPORTED_MODES = ("google", "openai", "femb")


class EmbeddingError(Exception):
    """Embedding backend failed or is unavailable"""
    pass


class EmbeddingService:
    """
    Provider-selectable embedding generator.

    A missing API key (or missing optional package) leaves the service
    unavailable; calls then raise EmbeddingError.
    """

    def __init__(
        self,
        mode: str = "google",
        model: str = "models/gemini-embedding-001",
        api_key: Optional[str] = None,
        dimensions: Optional[int] = None,
    ):
        self.mode = (mode or "google").lower()
        self.model = model
        self.dimensions = dimensions
        self._client = None

        if self.mode not in SUPPORTED_MODES:
            raise ValueError(f"Unsupported embedding provider: {self.mode}")

        if self.mode == "femb":
            try:
                from fastembed import TextEmbedding

                self._client = TextEmbedding(model_name=model)
                logger.info("Initialized fastembed with model=%s", model)
            except ImportError:
                logger.warning("fastembed package not installed")
            except Exception as e:
                logger.warning("Failed to initialize fastembed: %s", e)
            return

        if not api_key:
            logger.info("%s API key not provided, embedding service unavailable", self.mode)
            return

        if self.mode == "google":
            try:
                import google.generativeai as genai

                genai.configure(api_key=api_key)
                self._client = genai
            except ImportError:
                logger.warning("google-generativeai package not installed")
            except Exception as e:
                logger.warning("Failed to initialize Gemini embeddings: %s", e)
            return

        if self.mode == "openai":
            try:
                from openai import OpenAI

                self._client = OpenAI(api_key=api_key)
            except ImportError:
                logger.warning("openai package not installed")
            except Exception as e:
                logger.warning("Failed to initialize OpenAI embeddings: %s", e)

    @property
    def is_available(self) -> bool:
        """Check if embedding service is available"""
        return self._client is not None

    def embed(self, texts: List[str]) -> List[List[float]]:
        """
        Generate embeddings for a list of texts.

        Args:
            texts: List of strings to embed

        Returns:
            List of embedding vectors

        Raises:
            EmbeddingError: backend unavailable or the provider call failed
        """
        if not self.is_available:
            raise EmbeddingError(f"Embedding provider {self.mode} is not available")

        if not texts:
            return []

        try:
            if self.mode == "google":
                vectors = []
                for text in texts:
                    kwargs = {"model": self.model, "content": text, "task_type": "retrieval_query"}
                    if self.dimensions:
                        kwargs["output_dimensionality"] = self.dimensions
                    result = self._client.embed_content(**kwargs)
                    vectors.append(list(result["embedding"]))
                return vectors

            if self.mode == "openai":
                response = self._client.embeddings.create(model=self.model, input=texts)
                return [list(item.embedding) for item in response.data]

            embeddings = list(self._client.embed(texts))
            return [np.asarray(e, dtype=float).tolist() for e in embeddings]
        except Exception as e:
            raise EmbeddingError(f"{self.mode} embedding failed: {e}") from e

    def embed_single(self, text: str) -> List[float]:
        """
        Generate embedding for a single text.

        Args:
            text: String to embed

        Returns:
            Embedding vector
        """
        if not text or not text.strip():
            raise EmbeddingError("Cannot embed empty text")

        embeddings = self.embed([text])
        if not embeddings or not embeddings[0]:
            raise EmbeddingError("Embedding provider returned no vector")
        return embeddings[0]


def batch_cosine_similarity(
    query_vec: List[float],
    vectors: List[List[float]]
) -> List[float]:
    """
    Compute cosine similarity between a query and multiple vectors.

    Vectors are L2-normalized here, so callers may pass raw provider output.

    Args:
        query_vec: Query embedding vector
        vectors: List of embedding vectors to compare against

    Returns:
        List of similarity scores clamped to [0, 1]
    """
    if not vectors:
        return []

    query = np.asarray(query_vec, dtype=float)
    matrix = np.asarray(vectors, dtype=float)

    if matrix.shape[1] != query.shape[0]:
        raise ValueError(f"Vector dimension mismatch: {matrix.shape[1]} vs {query.shape[0]}")

    query_norm = np.linalg.norm(query)
    row_norms = np.linalg.norm(matrix, axis=1)
    denom = row_norms * query_norm
    denom[denom == 0] = 1.0

    similarities = np.dot(matrix, query) / denom

    # Clamp to valid range (numerical precision issues)
    similarities = np.clip(similarities, 0.0, 1.0)

    return similarities.tolist()
