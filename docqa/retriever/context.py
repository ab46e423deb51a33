"""
Context Assembler

Builds the bounded evidence text handed to the generation model.

Sections are appended greedily in the order given (relevance order is the
caller's job). A section that would push the total past the character
budget stops assembly: it and every later section are dropped whole, so no
section is ever cut mid-text.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

logger = logging.getLogger("docqa.retriever.context")

DEFAULT_MAX_CHARS = 8000

_SPACES_RE = re.compile(r"[ \t]+")
_BLANK_LINES_RE = re.compile(r"\n{3,}")


def normalize_whitespace(text: Optional[str]) -> str:
    """Collapse space/tab runs to one space and 3+ newlines to two, then trim."""
    if not text:
        return ""
    text = _SPACES_RE.sub(" ", text)
    text = _BLANK_LINES_RE.sub("\n\n", text)
    return text.strip()


def render_section(label: str, body: str) -> str:
    return f"=== {label} ===\n{body}\n\n"


@dataclass
class EvidenceSection:
    """One included piece of evidence"""
    label: str
    text: str
    source_id: Optional[str] = None

    @property
    def rendered(self) -> str:
        return render_section(self.label, self.text)


@dataclass
class EvidenceContext:
    """Ordered, budget-bounded evidence"""
    sections: List[EvidenceSection] = field(default_factory=list)
    max_chars: int = DEFAULT_MAX_CHARS
    dropped: int = 0  # sections not included because the budget was reached

    @property
    def text(self) -> str:
        return "".join(section.rendered for section in self.sections)

    @property
    def is_empty(self) -> bool:
        return not self.sections

    @property
    def truncated(self) -> bool:
        return self.dropped > 0

    def __len__(self) -> int:
        return sum(len(section.rendered) for section in self.sections)


class ContextAssembler:
    """Greedy, order-preserving context builder under a character budget."""

    def __init__(self, max_chars: int = DEFAULT_MAX_CHARS):
        if max_chars <= 0:
            raise ValueError("max_chars must be positive")
        self.max_chars = max_chars

    def build(
        self,
        sections: Iterable[Tuple[str, Optional[str]]],
        source_ids: Optional[Iterable[Optional[str]]] = None,
    ) -> EvidenceContext:
        """
        Assemble evidence from ``(label, raw_text)`` pairs.

        Args:
            sections: Candidate sections in relevance order
            source_ids: Optional identifiers parallel to ``sections``

        Returns:
            EvidenceContext whose rendered length never exceeds ``max_chars``.
            Sections whose text is blank after normalization are skipped.
        """
        candidates = list(sections)
        ids = list(source_ids) if source_ids is not None else [None] * len(candidates)
        if len(ids) != len(candidates):
            raise ValueError("source_ids must be parallel to sections")

        context = EvidenceContext(max_chars=self.max_chars)
        used = 0

        for index, ((label, raw_text), source_id) in enumerate(zip(candidates, ids)):
            body = normalize_whitespace(raw_text)
            if not body:
                logger.debug("Skipping blank section %s", label)
                continue

            section = EvidenceSection(label=label, text=body, source_id=source_id)
            size = len(section.rendered)
            if used + size > self.max_chars:
                context.dropped = sum(
                    1 for _, text in candidates[index:] if normalize_whitespace(text)
                )
                logger.warning(
                    "Context budget reached after %d sections (%d chars, limit %d). %d section(s) skipped.",
                    len(context.sections), used, self.max_chars, context.dropped,
                )
                break

            context.sections.append(section)
            used += size

        return context
