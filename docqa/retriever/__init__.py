"""
Retriever - Hybrid Question Answering

Routes each question to the cheapest path that can answer it.

Key Components:
- QueryRouter: LLM classification into FIELD_LOOKUP / SIMILARITY / AGGREGATE
- FieldLookup: Answers straight from extracted field records
- Searcher: Embedding similarity search + document text lookup
- ContextAssembler: Budget-bounded evidence text
- Synthesizer: Grounded generation with normalized "not found" handling
- AnswerOrchestrator: Ties the above together into one AnswerOutcome

Pipeline:
1. Classify the question (one cheap LLM call)
2. Look up fields, search similar documents, or gather completed documents
3. Assemble evidence under the character budget
4. Generate and post-process the answer
"""

from .context import ContextAssembler, EvidenceContext, normalize_whitespace
from .field_lookup import FieldLookup, format_field_answer
from .orchestrator import AnswerOrchestrator
from .query_router import QueryRouter, Route, RouteDecision
from .searcher import Searcher
from .synthesizer import Synthesizer

__all__ = [
    "ContextAssembler",
    "EvidenceContext",
    "normalize_whitespace",
    "FieldLookup",
    "format_field_answer",
    "AnswerOrchestrator",
    "QueryRouter",
    "Route",
    "RouteDecision",
    "Searcher",
    "Synthesizer",
]
