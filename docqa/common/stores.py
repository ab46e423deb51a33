"""
Document Stores

Read-only query surfaces over what ingestion has persisted:
- FieldStore: extracted key/value field records
- CorpusStore: whole documents with their extracted text

Every query is scoped to one user. Concrete backends subclass the abstract
stores; the in-memory implementations are loaded from a JSON snapshot
(~/.docqa/corpus.json by default).
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from .schemas import CorpusDocument, FieldRecord

logger = logging.getLogger("docqa.common.stores")


class FieldStore(ABC):
    """
    Abstract query surface over extracted field records.

    Each method must implement case-insensitive matching scoped to ``user``.
    """

    @abstractmethod
    def find_by_field_name(self, user: str, name: str) -> List[FieldRecord]:
        """Records whose field name equals ``name`` (case-insensitive)."""
        pass

    @abstractmethod
    def find_by_field_name_containing(self, user: str, name: str) -> List[FieldRecord]:
        """Records whose field name contains ``name`` (case-insensitive)."""
        pass

    @abstractmethod
    def search_by_value(self, user: str, term: str) -> List[FieldRecord]:
        """Records whose field value contains ``term`` (case-insensitive)."""
        pass


class CorpusStore(ABC):
    """Abstract query surface over whole documents."""

    @abstractmethod
    def find_by_id(self, document_id: str) -> Optional[CorpusDocument]:
        pass

    @abstractmethod
    def find_completed(self, user: str) -> List[CorpusDocument]:
        """All COMPLETED documents of ``user``."""
        pass

    @abstractmethod
    def find_completed_by_types(self, user: str, types: Sequence[str]) -> List[CorpusDocument]:
        """COMPLETED documents of ``user`` whose type is one of ``types``."""
        pass


class InMemoryFieldStore(FieldStore):
    """Field store over an in-process list of records."""

    def __init__(self, records: Optional[Iterable[FieldRecord]] = None):
        self._records: List[FieldRecord] = list(records or [])

    def add(self, record: FieldRecord) -> None:
        self._records.append(record)

    def __len__(self) -> int:
        return len(self._records)

    def _for_user(self, user: str) -> List[FieldRecord]:
        return [r for r in self._records if r.user_email == user]

    def find_by_field_name(self, user: str, name: str) -> List[FieldRecord]:
        wanted = name.lower()
        return [r for r in self._for_user(user) if r.field_name.lower() == wanted]

    def find_by_field_name_containing(self, user: str, name: str) -> List[FieldRecord]:
        wanted = name.lower()
        return [r for r in self._for_user(user) if wanted in r.field_name.lower()]

    def search_by_value(self, user: str, term: str) -> List[FieldRecord]:
        wanted = term.lower()
        return [r for r in self._for_user(user) if wanted in r.field_value.lower()]


class InMemoryCorpusStore(CorpusStore):
    """Corpus store over an in-process list of documents (insertion order kept)."""

    def __init__(self, documents: Optional[Iterable[CorpusDocument]] = None):
        self._documents: List[CorpusDocument] = list(documents or [])

    def add(self, document: CorpusDocument) -> None:
        self._documents.append(document)

    def __len__(self) -> int:
        return len(self._documents)

    def find_by_id(self, document_id: str) -> Optional[CorpusDocument]:
        for doc in self._documents:
            if doc.id == document_id:
                return doc
        return None

    def find_completed(self, user: str) -> List[CorpusDocument]:
        return [d for d in self._documents if d.user_email == user and d.is_completed]

    def find_completed_by_types(self, user: str, types: Sequence[str]) -> List[CorpusDocument]:
        wanted = {t.upper() for t in types}
        return [
            d for d in self.find_completed(user)
            if d.document_type and d.document_type.upper() in wanted
        ]


def load_snapshot(path: Path) -> Tuple[InMemoryFieldStore, InMemoryCorpusStore]:
    """
    Load both in-memory stores from a JSON snapshot.

    Format: ``{"documents": [CorpusDocument...], "fields": [FieldRecord...]}``.
    A missing file yields empty stores. Invalid entries are logged and skipped.
    """
    path = Path(path).expanduser()
    fields = InMemoryFieldStore()
    corpus = InMemoryCorpusStore()

    if not path.exists():
        logger.info("No corpus snapshot at %s, starting with empty stores", path)
        return fields, corpus

    try:
        with open(path) as f:
            data = json.load(f)
    except (json.JSONDecodeError, IOError) as e:
        logger.warning("Failed to load corpus snapshot %s: %s", path, e)
        return fields, corpus

    for item in data.get("documents", []):
        try:
            corpus.add(CorpusDocument.model_validate(item))
        except ValidationError as e:
            logger.warning("Skipping invalid document in snapshot: %s", e)

    for item in data.get("fields", []):
        try:
            fields.add(FieldRecord.model_validate(item))
        except ValidationError as e:
            logger.warning("Skipping invalid field record in snapshot: %s", e)

    logger.info("Loaded snapshot: %d documents, %d field records", len(corpus), len(fields))
    return fields, corpus
