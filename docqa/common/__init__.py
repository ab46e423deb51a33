"""
DocQA Common Module

Shared infrastructure: configuration, provider clients, similarity index
and document stores.
"""

from .config import DocQAConfig, load_config
from .embedding_service import EmbeddingService, EmbeddingError
from .llm_client import LLMClient
from .stores import CorpusStore, FieldStore, InMemoryCorpusStore, InMemoryFieldStore, load_snapshot
from .vector_index import InMemoryVectorIndex, PineconeIndex, VectorIndexError

__all__ = [
    "DocQAConfig",
    "load_config",
    "EmbeddingService",
    "EmbeddingError",
    "LLMClient",
    "CorpusStore",
    "FieldStore",
    "InMemoryCorpusStore",
    "InMemoryFieldStore",
    "load_snapshot",
    "InMemoryVectorIndex",
    "PineconeIndex",
    "VectorIndexError",
]
