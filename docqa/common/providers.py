"""
Backend selection.

Every pluggable backend (generation, routing, embedding, similarity index,
stores) is chosen exactly once from a DocQAConfig and handed to the
orchestrator. Unknown provider names fail fast with ValueError; missing
credentials produce an unavailable backend instead.
"""

import logging
from pathlib import Path

from .config import DocQAConfig
from .embedding_service import EmbeddingService
from .llm_client import LLMClient, SUPPORTED_PROVIDERS
from .stores import load_snapshot
from .vector_index import InMemoryVectorIndex, PineconeIndex

logger = logging.getLogger("docqa.common.providers")


def _api_key_for(config: DocQAConfig, provider: str) -> str:
    return getattr(config.llm, f"{provider}_api_key", "")


def build_llm_client(config: DocQAConfig, for_router: bool = False) -> LLMClient:
    """Generation client, or the routing client when ``for_router`` is set."""
    provider = (config.llm.router_provider if for_router else config.llm.provider).lower()
    if provider not in SUPPORTED_PROVIDERS:
        raise ValueError(f"Unsupported text generation provider: {provider}")

    model = config.router_model() if for_router else config.generation_model()
    base_url = config.llm.groq_base_url if provider == "groq" else None
    client = LLMClient(
        provider=provider,
        model=model,
        api_key=_api_key_for(config, provider),
        base_url=base_url,
    )
    logger.info(
        "%s client: provider=%s model=%s available=%s",
        "Routing" if for_router else "Generation", provider, model, client.is_available,
    )
    return client


def build_embedding_service(config: DocQAConfig) -> EmbeddingService:
    provider = config.embedding.provider.lower()
    api_key = ""
    if provider == "google":
        api_key = config.llm.google_api_key
    elif provider == "openai":
        api_key = config.llm.openai_api_key
    return EmbeddingService(
        mode=provider,
        model=config.embedding.model,
        api_key=api_key,
        dimensions=config.embedding.dimensions if provider == "google" else None,
    )


def build_vector_index(config: DocQAConfig):
    provider = config.index.provider.lower()
    if provider == "pinecone":
        return PineconeIndex(
            base_url=config.index.base_url,
            api_key=config.index.api_key,
            index_name=config.index.index_name,
            dimensions=config.embedding.dimensions,
            timeout=config.index.timeout,
        )
    if provider == "memory":
        return InMemoryVectorIndex()
    raise ValueError(f"Unsupported similarity index provider: {provider}")


def build_orchestrator(config: DocQAConfig, index=None):
    """
    Wire a ready-to-use AnswerOrchestrator from configuration.

    Args:
        config: Loaded configuration
        index: Pre-built similarity index (built from config when omitted)

    Returns:
        (orchestrator, searcher, index) so callers can reuse the search path
        and close the index on shutdown
    """
    # Imported here: retriever depends on common, not the other way round
    from ..retriever import (
        AnswerOrchestrator,
        ContextAssembler,
        FieldLookup,
        QueryRouter,
        Searcher,
        Synthesizer,
    )

    fields, corpus = load_snapshot(Path(config.store.snapshot_path))
    index = index if index is not None else build_vector_index(config)

    router = QueryRouter(
        llm_client=build_llm_client(config, for_router=True),
        max_tokens=config.qna.router_max_tokens,
        temperature=config.qna.router_temperature,
        timeout=config.qna.timeout,
    )
    synthesizer = Synthesizer(
        llm_client=build_llm_client(config),
        max_tokens=config.qna.generation_max_tokens,
        temperature=config.qna.generation_temperature,
        timeout=config.qna.timeout,
    )
    searcher = Searcher(
        embedding_service=build_embedding_service(config),
        index=index,
        default_topk=config.qna.similarity_topk,
    )

    orchestrator = AnswerOrchestrator(
        router=router,
        field_lookup=FieldLookup(fields),
        searcher=searcher,
        corpus=corpus,
        synthesizer=synthesizer,
        assembler=ContextAssembler(max_chars=config.qna.max_context_chars),
        similarity_topk=config.qna.similarity_topk,
    )
    return orchestrator, searcher, index
