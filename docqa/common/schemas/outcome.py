"""
Answer Outcome

The single value the answer orchestrator returns. Exactly one of four
variants; callers switch on ``status`` (or ``isinstance``) and never see
intermediate pipeline state.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Union

from .documents import SimilarityMatch


class OutcomeStatus(str, Enum):
    SUCCESS = "SUCCESS"
    NOT_FOUND = "NOT_FOUND"
    NO_ANSWER = "NO_ANSWER"
    ERROR = "ERROR"


@dataclass(frozen=True)
class Success:
    """An answer was produced; ``sources`` holds ranked evidence (SIMILARITY only)"""
    answer: str
    route: str
    sources: List[SimilarityMatch] = field(default_factory=list)
    status: OutcomeStatus = field(default=OutcomeStatus.SUCCESS, init=False)

    @property
    def evidence_count(self) -> int:
        return len(self.sources)


@dataclass(frozen=True)
class NotFound:
    """No candidate evidence existed at all"""
    message: str
    status: OutcomeStatus = field(default=OutcomeStatus.NOT_FOUND, init=False)


@dataclass(frozen=True)
class NoAnswer:
    """Candidates existed but none carried usable text"""
    message: str
    status: OutcomeStatus = field(default=OutcomeStatus.NO_ANSWER, init=False)


@dataclass(frozen=True)
class Error:
    """Unexpected failure; message is generic and safe to show"""
    message: str
    status: OutcomeStatus = field(default=OutcomeStatus.ERROR, init=False)


AnswerOutcome = Union[Success, NotFound, NoAnswer, Error]
