"""
DocQA

Question answering over a user's private document corpus.

Each question is classified once and answered through exactly one route:
- FIELD_LOOKUP: exact/fuzzy lookup of extracted key-value fields (no LLM call)
- SIMILARITY: vector search over document embeddings, then grounded generation
- AGGREGATE: full-text aggregation across completed documents, then generation

Usage:
    from docqa.common import load_config
    from docqa.common.providers import build_orchestrator
    from docqa.retriever import AnswerOrchestrator
"""

__version__ = "0.1.0"
