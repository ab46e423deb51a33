"""
Document Schemas

Read-only views of what the ingestion pipeline produces: whole documents with
their extracted text, and per-field key/value records extracted from them
(entity-attribute-value layout, so no fixed schema per document type).
"""

from typing import Optional
from pydantic import BaseModel, Field, field_validator
from enum import Enum


# ============================================================================
# Enums
# ============================================================================

class ProcessingStatus(str, Enum):
    """Ingestion lifecycle of an uploaded document"""
    UPLOADED = "UPLOADED"
    QUEUED = "QUEUED"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    ARCHIVED = "ARCHIVED"


class FieldKind(str, Enum):
    """Value kind of an extracted field"""
    PERSON = "PERSON"
    DATE = "DATE"
    ID_NUMBER = "ID_NUMBER"
    AMOUNT = "AMOUNT"
    ORGANIZATION = "ORGANIZATION"
    LOCATION = "LOCATION"
    TEXT = "TEXT"


# Keyword families checked in order; first hit wins.
_TYPE_KEYWORDS = (
    ("IDENTITY_DOCUMENT", (
        "aadhaar", "aadhar", "pan card", "pan ", "passport", "driving license",
        "driving licence", "voter id", "election card", "identity", "id card", "ration card",
    )),
    ("EDUCATION_DOCUMENT", (
        "marksheet", "mark sheet", "report card", "certificate", "degree", "diploma",
        "transcript", "education", "academic",
    )),
    ("LEGAL_DOCUMENT", (
        "contract", "agreement", "insurance", "policy", "will", "affidavit",
        "power of attorney", "rental", "lease", "legal", "nda", "mou",
    )),
    ("GOVERNMENT_DOCUMENT", (
        "tax return", "itr", "form 16", "form16", "property tax", "gst filing",
        "registration certificate", "govt", "government", "challan", "tds", "income tax",
    )),
    ("MEDICAL_DOCUMENT", (
        "medical", "prescription", "lab report", "pathology", "discharge", "diagnosis",
        "health", "doctor", "hospital", "clinical",
    )),
    ("FINANCIAL_BILL", (
        "invoice", "receipt", "bill", "utility", "electricity", "water", "phone",
        "mobile", "recharge", "grocery", "purchase", "order",
    )),
    ("BANK_STATEMENT", (
        "bank statement", "passbook", "account statement", "bank",
    )),
    ("SALARY_SLIP", (
        "salary", "pay slip", "payslip", "pay stub", "wage", "compensation",
    )),
)


class DocumentType(str, Enum):
    """Closed document-type taxonomy shared by ingestion and routing"""
    IDENTITY_DOCUMENT = "IDENTITY_DOCUMENT"
    EDUCATION_DOCUMENT = "EDUCATION_DOCUMENT"
    FINANCIAL_BILL = "FINANCIAL_BILL"
    BANK_STATEMENT = "BANK_STATEMENT"
    SALARY_SLIP = "SALARY_SLIP"
    LEGAL_DOCUMENT = "LEGAL_DOCUMENT"
    GOVERNMENT_DOCUMENT = "GOVERNMENT_DOCUMENT"
    MEDICAL_DOCUMENT = "MEDICAL_DOCUMENT"
    OTHER = "OTHER"

    @classmethod
    def from_label(cls, raw: Optional[str]) -> "DocumentType":
        """
        Normalize a free-text document type label into the taxonomy.

        "Aadhar Card" -> IDENTITY_DOCUMENT, "Tax Invoice" -> FINANCIAL_BILL,
        "Rental Agreement" -> LEGAL_DOCUMENT, "Income Tax Return" -> GOVERNMENT_DOCUMENT.
        """
        if raw is None or not raw.strip():
            return cls.OTHER

        upper = raw.strip().upper()
        if upper in cls.__members__:
            return cls[upper]

        normalized = raw.strip().lower().replace("-", " ").replace("_", " ")
        for name, keywords in _TYPE_KEYWORDS:
            if any(keyword in normalized for keyword in keywords):
                return cls[name]
        return cls.OTHER


# ============================================================================
# Records
# ============================================================================

class FieldRecord(BaseModel):
    """One extracted key/value field of a document"""
    document_id: str
    user_email: str
    document_type: str = DocumentType.OTHER.value
    field_name: str
    field_value: str
    field_type: FieldKind = FieldKind.TEXT
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)

    @field_validator("document_type", mode="before")
    @classmethod
    def _normalize_type(cls, v):
        return DocumentType.from_label(v).value if v is not None else DocumentType.OTHER.value

    @field_validator("field_value", mode="before")
    @classmethod
    def _stringify_value(cls, v):
        # Numeric and boolean values arrive unquoted; field_type carries the kind
        if isinstance(v, (int, float, bool)):
            return str(v)
        return v


class CorpusDocument(BaseModel):
    """A whole document with its extracted text"""
    id: str
    user_email: str
    original_filename: str = ""
    document_type: Optional[str] = None
    processing_status: ProcessingStatus = ProcessingStatus.UPLOADED
    extracted_text: str = ""
    confidence_score: Optional[float] = None

    @field_validator("document_type", mode="before")
    @classmethod
    def _normalize_type(cls, v):
        return DocumentType.from_label(v).value if v else None

    @field_validator("original_filename", "extracted_text", mode="before")
    @classmethod
    def _null_to_empty(cls, v):
        return "" if v is None else v

    @property
    def is_completed(self) -> bool:
        return self.processing_status == ProcessingStatus.COMPLETED

    @property
    def has_text(self) -> bool:
        return bool(self.extracted_text and self.extracted_text.strip())


class SimilarityMatch(BaseModel):
    """A ranked hit from the similarity index; text is attached after lookup"""
    document_id: str
    score: float
    document_type: str = DocumentType.OTHER.value
    text: Optional[str] = None

    @property
    def summary(self) -> str:
        """Short summary for logs"""
        return f"{self.document_type} ({self.score * 100:.1f}%)"
