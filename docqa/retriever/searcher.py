"""
Searcher

Similarity search over the user's documents:
1. Embed the question
2. Query the similarity index (filtered to the user) for the top-K documents
3. Attach each hit's full extracted text from the corpus store

Backend failures never escape: a failed embedding or index call yields no
matches, and a failed text lookup drops only that match.
"""

import logging
from typing import List, Optional

from ..common.schemas import SimilarityMatch
from ..common.stores import CorpusStore

logger = logging.getLogger("docqa.retriever.searcher")


class Searcher:
    """
    Searches a user's documents by embedding similarity.

    Both dependencies are duck-typed: ``embedding_service.embed_single(text)``
    and ``index.search(vector, user, topk)``.
    """

    def __init__(self, embedding_service, index, default_topk: int = 3):
        """
        Initialize searcher.

        Args:
            embedding_service: For embedding questions
            index: Similarity index (PineconeIndex or InMemoryVectorIndex)
            default_topk: Number of matches when the caller passes none
        """
        self._embedding = embedding_service
        self._index = index
        self._default_topk = default_topk

    def search(self, question: str, user: str, topk: Optional[int] = None) -> List[SimilarityMatch]:
        """
        Find the documents most similar to a question.

        Args:
            question: Natural-language question
            user: Owning user; only their vectors are searched
            topk: Number of matches (default from config)

        Returns:
            Matches sorted by descending score, text not yet attached
        """
        topk = topk or self._default_topk

        try:
            vector = self._embedding.embed_single(question)
            matches = self._index.search(vector, user, topk)
        except Exception as e:
            logger.error("Similarity search failed: %s", e)
            return []

        matches = sorted(matches, key=lambda m: m.score, reverse=True)[:topk]
        for match in matches:
            logger.info("   %s", match.summary)
        logger.info("Found %d similar documents", len(matches))
        return matches

    def attach_text(
        self,
        matches: List[SimilarityMatch],
        corpus: CorpusStore,
        user: Optional[str] = None,
    ) -> List[SimilarityMatch]:
        """
        Fetch and attach each match's extracted text, best-effort.

        A lookup that raises, finds nothing, belongs to another user, or has
        blank text is logged and skipped. Order follows the input ranking.

        Returns:
            Matches that now carry text
        """
        enriched = []
        for match in matches:
            try:
                document = corpus.find_by_id(match.document_id)
            except Exception as e:
                logger.warning("Failed to fetch document %s: %s", match.document_id, e)
                continue

            if document is None:
                logger.warning("Document %s not found in corpus", match.document_id)
                continue
            if user is not None and document.user_email != user:
                logger.warning("Document %s is not owned by the requesting user", match.document_id)
                continue
            if not document.has_text:
                logger.warning("Document %s has no extracted text, skipping", match.document_id)
                continue

            match.text = document.extracted_text
            enriched.append(match)

        return enriched
