"""
Answer Orchestrator

Hybrid question answering over one user's documents:

    question -> QueryRouter -> route
      FIELD_LOOKUP : field records -> formatted answer (no LLM)
                     nothing found -> SIMILARITY with the same question
      SIMILARITY   : index top-K -> attach text -> context -> LLM
      AGGREGATE    : completed documents (type hints, else all) -> context -> LLM

``answer()`` always returns one AnswerOutcome variant and never raises.
NOT_FOUND means no candidate evidence existed; NO_ANSWER means candidates
existed but none had usable text.
"""

import logging
from typing import List, Optional

from ..common.schemas import (
    AnswerOutcome,
    CorpusDocument,
    Error,
    NoAnswer,
    NotFound,
    Success,
)
from ..common.stores import CorpusStore
from .context import ContextAssembler
from .field_lookup import FieldLookup, format_field_answer
from .query_router import QueryRouter, Route, RouteDecision
from .searcher import Searcher
from .synthesizer import Synthesizer, build_aggregate_prompt, build_similarity_prompt

logger = logging.getLogger("docqa.retriever.orchestrator")

SIMILARITY_NOT_FOUND = "I couldn't find any documents to answer your question."
SIMILARITY_NO_ANSWER = "I found matching documents but couldn't retrieve their content."
AGGREGATE_NOT_FOUND = (
    "I don't have any processed documents to answer your question. "
    "Please upload and process some documents first."
)
AGGREGATE_NO_ANSWER = "Found matching documents but couldn't retrieve their content."
PIPELINE_ERROR = "An error occurred while processing your question."


class AnswerOrchestrator:
    """
    Routes each question to one answering path and normalizes the result.

    All collaborators are injected once at construction; no per-request state
    is kept on the instance.
    """

    def __init__(
        self,
        router: QueryRouter,
        field_lookup: FieldLookup,
        searcher: Searcher,
        corpus: CorpusStore,
        synthesizer: Synthesizer,
        assembler: Optional[ContextAssembler] = None,
        similarity_topk: int = 3,
    ):
        self._router = router
        self._field_lookup = field_lookup
        self._searcher = searcher
        self._corpus = corpus
        self._synthesizer = synthesizer
        self._assembler = assembler or ContextAssembler()
        self._topk = similarity_topk

    def answer(self, question: str, user: str) -> AnswerOutcome:
        """
        Answer a question against the user's documents.

        Args:
            question: Natural-language question
            user: Owning user identity (every lookup is scoped to it)

        Returns:
            Success, NotFound, NoAnswer or Error
        """
        logger.info("Question: %s [user=%s]", question, user)
        try:
            decision = self._router.classify(question)
            return self._dispatch(decision, question, user)
        except Exception as e:
            logger.error("Pipeline failed: %s", e, exc_info=True)
            return Error(PIPELINE_ERROR)

    def _dispatch(self, decision: RouteDecision, question: str, user: str) -> AnswerOutcome:
        if decision.route == Route.FIELD_LOOKUP:
            return self._answer_field_lookup(question, user, decision.fields)
        if decision.route == Route.AGGREGATE:
            return self._answer_aggregate(question, user, decision.document_types)
        return self._answer_similarity(question, user)

    # =========================================================================
    # Routes
    # =========================================================================

    def _answer_field_lookup(self, question: str, user: str, hints: List[str]) -> AnswerOutcome:
        logger.info("-> FIELD_LOOKUP: field record lookup (no LLM)")
        records = self._field_lookup.lookup(hints, question, user)

        if not records:
            logger.info("No field match, falling back to SIMILARITY")
            return self._answer_similarity(question, user)

        return Success(answer=format_field_answer(records), route=Route.FIELD_LOOKUP.value)

    def _answer_similarity(self, question: str, user: str) -> AnswerOutcome:
        logger.info("-> SIMILARITY: vector search + grounded generation")
        matches = self._searcher.search(question, user, self._topk)
        if not matches:
            return NotFound(SIMILARITY_NOT_FOUND)

        with_text = self._searcher.attach_text(matches, self._corpus, user)
        # Labels keep the similarity rank even when a higher match was dropped
        kept = {id(m) for m in with_text}
        context = self._assembler.build(
            [(f"Document {i} ({m.document_type})", m.text)
             for i, m in enumerate(matches, 1) if id(m) in kept],
            source_ids=[m.document_id for m in with_text],
        )
        if context.is_empty:
            return NoAnswer(SIMILARITY_NO_ANSWER)

        logger.info("Built context from %d documents (%d chars)", len(context.sections), len(context))
        answer = self._synthesizer.invoke(build_similarity_prompt(question, context.text))
        return Success(answer=answer, route=Route.SIMILARITY.value, sources=list(matches))

    def _answer_aggregate(
        self,
        question: str,
        user: str,
        document_types: Optional[List[str]],
    ) -> AnswerOutcome:
        logger.info("-> AGGREGATE: full-text aggregation across documents")
        documents = self._resolve_candidates(user, document_types)
        if not documents:
            return NotFound(AGGREGATE_NOT_FOUND)

        logger.info("Found %d candidate documents", len(documents))
        usable = []
        for doc in documents:
            if doc.has_text:
                usable.append(doc)
            else:
                logger.warning("Document %s has no extracted text, skipping", doc.id)

        context = self._assembler.build(
            [(f"{doc.document_type or 'Unknown'} (file: {doc.original_filename})", doc.extracted_text)
             for doc in usable],
            source_ids=[doc.id for doc in usable],
        )
        if context.is_empty:
            return NoAnswer(AGGREGATE_NO_ANSWER)

        logger.info("Built context from %d documents (%d chars)", len(context.sections), len(context))
        answer = self._synthesizer.invoke(build_aggregate_prompt(question, context.text))
        return Success(answer=answer, route=Route.AGGREGATE.value)

    def _resolve_candidates(
        self,
        user: str,
        document_types: Optional[List[str]],
    ) -> List[CorpusDocument]:
        """Type-filtered completed documents; hints never starve the answer."""
        if document_types:
            logger.info("Document type filter: %s", document_types)
            documents = self._corpus.find_completed_by_types(user, document_types)
            if documents:
                return documents
            logger.warning("No documents matched type filter, falling back to all completed documents")
        else:
            logger.info("No type hint, loading all completed documents")
        return self._corpus.find_completed(user)
