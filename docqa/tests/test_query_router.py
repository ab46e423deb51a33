"""
Tests for QueryRouter

Tests route classification, hint parsing and the SIMILARITY fallback.
"""

import json
import pytest
from unittest.mock import Mock


@pytest.fixture
def mock_llm():
    llm = Mock()
    llm.is_available = True
    return llm


@pytest.fixture
def router(mock_llm):
    from docqa.retriever.query_router import QueryRouter
    return QueryRouter(llm_client=mock_llm)


class TestClassify:
    def test_factual_maps_to_field_lookup(self, router, mock_llm):
        from docqa.retriever.query_router import Route

        mock_llm.generate.return_value = json.dumps(
            {"type": "FACTUAL", "fields": ["id_number"], "document_types": None}
        )
        decision = router.classify("What is my PAN number?")

        assert decision.route == Route.FIELD_LOOKUP
        assert decision.fields == ["id_number"]
        assert decision.document_types is None

    def test_semantic_maps_to_similarity(self, router, mock_llm):
        from docqa.retriever.query_router import Route

        mock_llm.generate.return_value = '{"type": "SEMANTIC", "fields": null, "document_types": null}'
        decision = router.classify("Summarize my marksheet")

        assert decision.route == Route.SIMILARITY
        assert decision.fields == []

    def test_cross_document_with_type_hints(self, router, mock_llm):
        from docqa.retriever.query_router import Route

        mock_llm.generate.return_value = (
            '```json\n{"type": "cross_document", "fields": null, '
            '"document_types": ["financial_bill", "", "null"]}\n```'
        )
        decision = router.classify("How much did I spend on food in total?")

        assert decision.route == Route.AGGREGATE
        assert decision.document_types == ["FINANCIAL_BILL"]

    def test_route_names_accepted_directly(self, router, mock_llm):
        from docqa.retriever.query_router import Route

        mock_llm.generate.return_value = '{"type": "AGGREGATE"}'
        assert router.classify("Compare my invoices").route == Route.AGGREGATE

    def test_empty_document_types_means_no_filter(self, router, mock_llm):
        mock_llm.generate.return_value = '{"type": "CROSS_DOCUMENT", "document_types": ["null", " "]}'
        decision = router.classify("Show all my documents")
        assert decision.document_types is None

    def test_scalar_document_types_ignored(self, router, mock_llm):
        mock_llm.generate.return_value = '{"type": "CROSS_DOCUMENT", "document_types": "FINANCIAL_BILL"}'
        decision = router.classify("How much did I spend on bills?")
        assert decision.document_types is None

    def test_unknown_type_hint_kept_upper_cased(self, router, mock_llm):
        mock_llm.generate.return_value = '{"type": "CROSS_DOCUMENT", "document_types": ["pan card"]}'
        decision = router.classify("Show my PAN card")
        assert decision.document_types == ["PAN CARD"]

    def test_scalar_fields_accepted(self, router, mock_llm):
        mock_llm.generate.return_value = '{"type": "FACTUAL", "fields": "date_of_birth"}'
        assert router.classify("When was I born?").fields == ["date_of_birth"]

    def test_legacy_field_key_used_when_fields_missing(self, router, mock_llm):
        mock_llm.generate.return_value = '{"type": "FACTUAL", "field": "phone"}'
        assert router.classify("What is my phone number?").fields == ["phone"]

    def test_legacy_field_key_ignored_when_fields_present(self, router, mock_llm):
        mock_llm.generate.return_value = '{"type": "FACTUAL", "fields": ["address"], "field": "phone"}'
        assert router.classify("Where do I live?").fields == ["address"]

    def test_single_call_with_low_randomness(self, router, mock_llm):
        mock_llm.generate.return_value = '{"type": "SEMANTIC"}'
        router.classify("Explain my invoice")

        assert mock_llm.generate.call_count == 1
        kwargs = mock_llm.generate.call_args.kwargs
        assert kwargs["temperature"] == 0.0
        assert kwargs["max_tokens"] == 150


class TestFallback:
    def _assert_fallback(self, decision):
        from docqa.retriever.query_router import Route
        assert decision.route == Route.SIMILARITY
        assert decision.fields == []
        assert decision.document_types is None

    def test_unknown_type(self, router, mock_llm):
        mock_llm.generate.return_value = '{"type": "WEATHER", "fields": ["x"]}'
        self._assert_fallback(router.classify("Is it raining?"))

    def test_missing_type(self, router, mock_llm):
        mock_llm.generate.return_value = '{"fields": ["id_number"]}'
        self._assert_fallback(router.classify("What is my PAN number?"))

    def test_malformed_output(self, router, mock_llm):
        mock_llm.generate.return_value = "I think this is a factual question."
        self._assert_fallback(router.classify("What is my PAN number?"))

    def test_backend_error(self, router, mock_llm, caplog):
        import logging
        mock_llm.generate.side_effect = TimeoutError("timed out")

        with caplog.at_level(logging.ERROR, logger="docqa.retriever.query_router"):
            decision = router.classify("What is my PAN number?")

        self._assert_fallback(decision)
        assert "defaulting to SIMILARITY" in caplog.text

    def test_unavailable_client(self):
        from docqa.retriever.query_router import QueryRouter
        llm = Mock()
        llm.is_available = False

        decision = QueryRouter(llm_client=llm).classify("anything")

        self._assert_fallback(decision)
        llm.generate.assert_not_called()

    def test_no_client(self):
        from docqa.retriever.query_router import QueryRouter
        self._assert_fallback(QueryRouter().classify("anything"))


class TestPrompt:
    def test_prompt_contains_registry_and_taxonomy(self, router):
        prompt = router.build_prompt("What is my roll number?")

        assert "User question: What is my roll number?" in prompt
        assert "roll_number" in prompt
        assert "premium_amount" in prompt
        assert "GOVERNMENT_DOCUMENT" in prompt
        assert '{"type": "FACTUAL|SEMANTIC|CROSS_DOCUMENT"' in prompt
