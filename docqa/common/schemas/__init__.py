"""
DocQA Schemas

Document records read from the stores and the answer outcome union.
"""

from .documents import (
    CorpusDocument,
    DocumentType,
    FieldKind,
    FieldRecord,
    ProcessingStatus,
    SimilarityMatch,
)
from .outcome import (
    AnswerOutcome,
    Error,
    NoAnswer,
    NotFound,
    OutcomeStatus,
    Success,
)

__all__ = [
    "CorpusDocument",
    "DocumentType",
    "FieldKind",
    "FieldRecord",
    "ProcessingStatus",
    "SimilarityMatch",
    "AnswerOutcome",
    "Error",
    "NoAnswer",
    "NotFound",
    "OutcomeStatus",
    "Success",
]
