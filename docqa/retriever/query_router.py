"""
Query Router

Classifies a question into exactly one answering route with a single cheap
LLM call (small model, temperature 0, ~150 output tokens):

- FIELD_LOOKUP: a value stored as an extracted field ("What is my PAN number?")
- SIMILARITY: needs reading one document's content ("Summarize my marksheet")
- AGGREGATE: compares or totals across documents ("How much did I spend on food?")

Any failure (client unavailable, provider error, malformed or unknown output)
falls back to SIMILARITY, which can attempt an answer from any indexed content.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from ..common.llm_utils import clean_string_list, parse_llm_json, strip_code_fences
from ..common.schemas import DocumentType

logger = logging.getLogger("docqa.retriever.query_router")


class Route(str, Enum):
    """Answering route for a question"""
    FIELD_LOOKUP = "FIELD_LOOKUP"
    SIMILARITY = "SIMILARITY"
    AGGREGATE = "AGGREGATE"


# Category names the prompt teaches the model, plus the route names themselves.
_ROUTE_ALIASES = {
    "FACTUAL": Route.FIELD_LOOKUP,
    "FIELD_LOOKUP": Route.FIELD_LOOKUP,
    "SEMANTIC": Route.SIMILARITY,
    "SIMILARITY": Route.SIMILARITY,
    "CROSS_DOCUMENT": Route.AGGREGATE,
    "AGGREGATE": Route.AGGREGATE,
}


# Canonical field names per document family, as written by the extractor.
CANONICAL_FIELDS = {
    "Identity": [
        "person_name", "father_name", "mother_name", "guardian_name", "date_of_birth",
        "gender", "id_number", "address", "phone", "email", "issue_date", "expiry_date",
    ],
    "Education": [
        "person_name", "roll_number", "institution_name", "exam_name", "year", "result",
        "total_marks", "marks_obtained", "percentage", "grade", "subjects",
    ],
    "Financial": [
        "provider_name", "customer_name", "invoice_number", "bill_date", "total_amount",
        "tax_amount", "net_amount", "payment_status",
    ],
    "Bank": [
        "bank_name", "account_holder", "account_number", "opening_balance", "closing_balance",
    ],
    "Salary": [
        "employee_name", "employer_name", "designation", "basic_salary", "net_salary",
        "gross_salary",
    ],
    "Legal": [
        "party_name_1", "party_name_2", "document_title", "effective_date", "expiry_date",
        "policy_number", "premium_amount",
    ],
    "Government": [
        "person_name", "assessment_year", "total_income", "tax_paid", "refund_amount",
        "form_type", "registration_number",
    ],
    "Medical": [
        "patient_name", "doctor_name", "hospital_name", "diagnosis", "prescription",
        "lab_test_name", "lab_result",
    ],
}


def _render_field_registry() -> str:
    return "\n".join(f"{family}: {', '.join(names)}" for family, names in CANONICAL_FIELDS.items())


ROUTING_PROMPT = """You are a query classifier for a document management system. Classify the user's question into exactly ONE category and extract the field name(s) and document types if applicable.

Categories:
- FACTUAL: Direct data lookup for specific piece(s) of information stored as structured metadata (e.g., a name, ID number, date, phone number, address, roll number). These are questions where the answer is one or more values that can be looked up directly from a single document without calculation.
  Examples: "What is my PAN number?", "What is my mother's name?", "What are my parent's names?"

- SEMANTIC: Questions that require reading and understanding the full document content of a specific document. This includes summaries, explanations, sentiments or details that cannot be answered by metadata fields.
  Examples: "Summarize my marksheet", "What subjects did I study?", "Explain the terms in my invoice"

- CROSS_DOCUMENT: Questions that compare, correlate, or AGGREGATE information (such as sums, totals, averages, counts, or total spending) across multiple documents. If the user asks for a total or aggregate, it MUST be CROSS_DOCUMENT.
  Examples: "Is my name the same on my Aadhaar and PAN?", "Compare my two invoices", "Show all my documents", "How much did I spend on food in total?", "What is my total expenditure across all bills?"

For FACTUAL queries, extract the EXACT field names from this canonical list:
{field_registry}

Examples of field mapping:
"What is my name?" -> fields: ["person_name"]
"What are my parent's names?" -> fields: ["father_name", "mother_name"]
"What is my PAN number?" -> fields: ["id_number"]
"What is my Aadhaar number?" -> fields: ["id_number"]
"When was I born?" -> fields: ["date_of_birth"]
"What is my roll number?" -> fields: ["roll_number"]
"What is my salary?" -> fields: ["net_salary"]
"Where do I live?" -> fields: ["address"]
"What is my phone number?" -> fields: ["phone"]
"What is my percentage?" -> fields: ["percentage"]
"What marks did I get?" -> fields: ["marks_obtained", "total_marks"]

For CROSS_DOCUMENT queries, also extract which document types from the user's query are likely relevant. Use EXACTLY these enum names: {document_types}. Return null if all document types are relevant.
A question like "How much did I spend on food?" -> document_types: ["FINANCIAL_BILL"]
A question like "Is my name same on Aadhaar and PAN?" -> document_types: ["IDENTITY_DOCUMENT"]
A question like "Compare my marksheet and salary slip" -> document_types: ["EDUCATION_DOCUMENT", "SALARY_SLIP"]
A question like "Show me all my documents" -> document_types: null

Respond with ONLY a JSON object, no other text:
{{"type": "FACTUAL|SEMANTIC|CROSS_DOCUMENT", "fields": ["field1"] or null, "document_types": ["ENUM_NAME"] or null}}

User question: {question}
"""


@dataclass
class RouteDecision:
    """Routing result for one question"""
    route: Route
    fields: List[str] = field(default_factory=list)  # only read for FIELD_LOOKUP
    document_types: Optional[List[str]] = None  # only read for AGGREGATE; None = no filter
    @classmethod
    def fallback(cls) -> "RouteDecision":
        return cls(route=Route.SIMILARITY)


class QueryRouter:
    """
    LLM-based question classifier.

    Uses a small, fast model to pick the route and extract field-name and
    document-type hints. Exactly one call per question, no retries.
    """

    def __init__(
        self,
        llm_client=None,
        max_tokens: int = 150,
        temperature: float = 0.0,
        timeout: float = 30.0,
    ):
        """
        Initialize router.

        Args:
            llm_client: LLMClient (or compatible) for the routing model
            max_tokens: Output token ceiling for the classification call
            temperature: Sampling temperature (0 for deterministic routing)
            timeout: Per-call timeout in seconds
        """
        self._llm = llm_client
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._timeout = timeout

    @property
    def is_available(self) -> bool:
        return self._llm is not None and self._llm.is_available

    def build_prompt(self, question: str) -> str:
        return ROUTING_PROMPT.format(
            field_registry=_render_field_registry(),
            document_types=", ".join(t.value for t in DocumentType),
            question=question,
        )

    def classify(self, question: str) -> RouteDecision:
        """
        Classify a question. Never raises.

        Args:
            question: The user's natural-language question

        Returns:
            RouteDecision; SIMILARITY with no hints on any failure
        """
        if not self.is_available:
            logger.info("Routing LLM unavailable, defaulting to SIMILARITY")
            return RouteDecision.fallback()

        try:
            raw = self._llm.generate(
                self.build_prompt(question),
                max_tokens=self._max_tokens,
                temperature=self._temperature,
                timeout=self._timeout,
            )
        except Exception as e:
            logger.error("Routing LLM failed, defaulting to SIMILARITY: %s", e)
            return RouteDecision.fallback()

        decision = self._parse_response(raw)
        logger.info(
            "Routing result: route=%s, fields=%s, document_types=%s",
            decision.route.value, decision.fields, decision.document_types,
        )
        return decision

    def _parse_response(self, raw: str) -> RouteDecision:
        """Parse the classifier's JSON object into a RouteDecision."""
        logger.debug("Routing LLM raw response: %s", raw)
        data = parse_llm_json(strip_code_fences(raw or ""))
        if not data:
            logger.warning("Routing LLM returned no JSON object, defaulting to SIMILARITY")
            return RouteDecision.fallback()

        type_value = data.get("type")
        type_str = str(type_value).strip().upper() if type_value is not None else ""
        route = _ROUTE_ALIASES.get(type_str)
        if route is None:
            logger.warning("Routing LLM returned unknown type '%s', defaulting to SIMILARITY", type_str)
            return RouteDecision.fallback()

        fields = clean_string_list(data.get("fields"))
        if not fields:
            # Legacy singular key
            legacy = data.get("field")
            if isinstance(legacy, str):
                fields = clean_string_list(legacy)

        raw_types = data.get("document_types")
        document_types = []
        if isinstance(raw_types, list):
            document_types = [t.upper() for t in clean_string_list(raw_types)]

        return RouteDecision(
            route=route,
            fields=fields,
            document_types=document_types or None,
        )
