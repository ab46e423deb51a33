"""
Field Lookup

Answers direct lookups ("What is my PAN number?") straight from extracted
field records, with no generation call.

Lookup order per field hint: exact field name, then field names containing
the hint. If nothing matched for any hint, a last-resort heuristic searches
field *values* for the question's final word (only when longer than two
characters). This heuristic misses multi-word values and is not expected to
work for every phrasing.
"""

import logging
import re
from typing import List, Optional, Sequence

from ..common.schemas import FieldRecord
from ..common.stores import FieldStore

logger = logging.getLogger("docqa.retriever.field_lookup")

_PUNCTUATION_RE = re.compile(r"[?!.]")
MIN_VALUE_TERM_LENGTH = 3


def last_word(question: str) -> Optional[str]:
    """Final whitespace-delimited token of the question with ?!. removed."""
    words = _PUNCTUATION_RE.sub("", question or "").split()
    return words[-1] if words else None


def format_field_answer(records: Sequence[FieldRecord]) -> str:
    """
    Render field records as answer text.

    One record:   "<value> (from <type>)"
    Several:      "- <name>: <value> (from <type>)" per line
    """
    if len(records) == 1:
        record = records[0]
        return f"{record.field_value} (from {record.document_type})"

    return "\n".join(
        f"- {r.field_name}: {r.field_value} (from {r.document_type})" for r in records
    )


class FieldLookup:
    """Field-record lookup scoped to one user."""

    def __init__(self, field_store: FieldStore):
        self._store = field_store

    def lookup(self, hints: Sequence[str], question: str, user: str) -> List[FieldRecord]:
        """
        Collect field records for the hints, falling back to a value search.

        Args:
            hints: Canonical field names from the router, in order
            question: Original question (used by the value-search fallback)
            user: Owning user

        Returns:
            Matching records in hint order; empty when nothing matched
        """
        results: List[FieldRecord] = []

        for hint in hints:
            logger.info("Searching fields by name hint: '%s'", hint)
            matches = self._store.find_by_field_name(user, hint)
            if not matches:
                # Fuzzy: "name" matches "person_name", "mother_name"
                matches = self._store.find_by_field_name_containing(user, hint)
            results.extend(matches)

        if not results:
            term = last_word(question)
            if term and len(term) >= MIN_VALUE_TERM_LENGTH:
                logger.info("No field name match, searching values for '%s'", term)
                results = list(self._store.search_by_value(user, term))

        logger.info("Field lookup found %d record(s)", len(results))
        return results
