"""Tests for EmbeddingService provider selection and cosine helpers."""

import pytest
from unittest.mock import Mock


class TestEmbeddingService:
    def test_unsupported_mode_raises(self):
        from docqa.common.embedding_service import EmbeddingService

        with pytest.raises(ValueError, match="Unsupported"):
            EmbeddingService(mode="sbert")

    def test_missing_key_unavailable(self, caplog):
        import logging
        from docqa.common.embedding_service import EmbeddingError, EmbeddingService

        with caplog.at_level(logging.INFO, logger="docqa.common.embedding_service"):
            service = EmbeddingService(mode="google")

        assert not service.is_available
        assert "API key not provided" in caplog.text
        with pytest.raises(EmbeddingError):
            service.embed_single("What subjects did I study?")

    def test_google_embed_single(self):
        from docqa.common.embedding_service import EmbeddingService

        service = EmbeddingService(mode="google", dimensions=3072)
        service._client = Mock()
        service._client.embed_content.return_value = {"embedding": [0.1, 0.2]}

        assert service.embed_single("hello") == [0.1, 0.2]
        kwargs = service._client.embed_content.call_args.kwargs
        assert kwargs["model"] == "models/gemini-embedding-001"
        assert kwargs["output_dimensionality"] == 3072

    def test_openai_embed(self):
        from docqa.common.embedding_service import EmbeddingService

        service = EmbeddingService(mode="openai", model="text-embedding-3-small")
        service._client = Mock()
        service._client.embeddings.create.return_value = Mock(data=[Mock(embedding=[1.0, 0.0])])

        assert service.embed(["a"]) == [[1.0, 0.0]]

    def test_provider_error_wrapped(self):
        from docqa.common.embedding_service import EmbeddingError, EmbeddingService

        service = EmbeddingService(mode="openai")
        service._client = Mock()
        service._client.embeddings.create.side_effect = RuntimeError("429")

        with pytest.raises(EmbeddingError, match="429"):
            service.embed_single("q")

    def test_empty_text_rejected(self):
        from docqa.common.embedding_service import EmbeddingError, EmbeddingService

        service = EmbeddingService(mode="openai")
        service._client = Mock()
        with pytest.raises(EmbeddingError):
            service.embed_single("   ")


class TestBatchCosineSimilarity:
    def test_normalizes_and_clamps(self):
        from docqa.common.embedding_service import batch_cosine_similarity

        scores = batch_cosine_similarity([2.0, 0.0], [[1.0, 0.0], [0.0, 3.0], [-1.0, 0.0]])
        assert scores == pytest.approx([1.0, 0.0, 0.0])

    def test_zero_vector_safe(self):
        from docqa.common.embedding_service import batch_cosine_similarity

        assert batch_cosine_similarity([1.0, 0.0], [[0.0, 0.0]]) == [0.0]

    def test_dimension_mismatch(self):
        from docqa.common.embedding_service import batch_cosine_similarity

        with pytest.raises(ValueError):
            batch_cosine_similarity([1.0, 0.0], [[1.0, 0.0, 0.0]])

    def test_empty(self):
        from docqa.common.embedding_service import batch_cosine_similarity

        assert batch_cosine_similarity([1.0], []) == []
