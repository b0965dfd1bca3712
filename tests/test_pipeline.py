"""
Tests for the PDF pipeline orchestrator.

The PDF library is faked where a real PDF would be needed; everything after
text extraction runs for real.

Run: pytest tests/ -v
"""

from __future__ import annotations

import pytest
from factories import SAMPLE_MLS_TEXT

from mls_validator import pipeline
from mls_validator.config import Settings, get_settings
from mls_validator.exceptions import PDFProcessingError
from mls_validator.models import MLSReport
from mls_validator.pipeline import (
    EMPTY_PDF,
    NO_LISTINGS,
    NO_TEXT,
    UNKNOWN_ERROR,
    MLSPipeline,
    extract_pdf_text,
    retry_processing,
    validate_pdf_content,
)


class _FakePage:
    def __init__(self, text):
        self._text = text

    def extract_text(self):
        return self._text


class _FakePDF:
    def __init__(self, *texts):
        self.pages = [_FakePage(t) for t in texts]

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False


def _fake_pdfplumber(monkeypatch, *texts):
    monkeypatch.setattr(pipeline.pdfplumber, "open", lambda stream: _FakePDF(*texts))


def _counting_extractor(monkeypatch, result=None, error=None):
    """Replace the extractor with one that records how often it was called."""
    calls = []

    def fake(text, settings=None):
        calls.append(text)
        if error is not None:
            raise error
        return result or MLSReport(mls_number="UNKNOWN")

    monkeypatch.setattr(pipeline, "extract_mls_data", fake)
    return calls


# ═══════════════════════════════════════════════════════════════════════
# CONTENT SNIFFING
# ═══════════════════════════════════════════════════════════════════════


class TestValidatePdfContent:
    @pytest.mark.parametrize(
        "text",
        [
            "MLS# 12345",
            "MLS Number: 998877",
            "List Price: $500,000",
            "1,500 sqft",
            "Square Feet: 2000",
            "3 beds",
            "Bedrooms: 4",
            "2.5 baths",
        ],
    )
    def test_mls_indicators(self, text):
        assert validate_pdf_content(text)

    @pytest.mark.parametrize("text", ["", "Quarterly newsletter", "Call 555-0100"])
    def test_non_mls_text(self, text):
        assert not validate_pdf_content(text)


# ═══════════════════════════════════════════════════════════════════════
# PDF TEXT EXTRACTION
# ═══════════════════════════════════════════════════════════════════════


class TestExtractPdfText:
    def test_empty_bytes(self):
        with pytest.raises(PDFProcessingError, match="Empty PDF"):
            extract_pdf_text(b"")

    def test_pages_joined(self, monkeypatch):
        _fake_pdfplumber(monkeypatch, "MLS# 1", None, "3 beds")
        assert extract_pdf_text(b"%PDF-1.4") == "MLS# 1\n\n3 beds"

    def test_pdf_without_text_layer(self, monkeypatch):
        _fake_pdfplumber(monkeypatch, None, "  ")
        with pytest.raises(PDFProcessingError) as exc_info:
            extract_pdf_text(b"%PDF-1.4")
        assert exc_info.value.message == NO_TEXT
        assert exc_info.value.details == {"pages": 2}


# ═══════════════════════════════════════════════════════════════════════
# RETRY LOOP
# ═══════════════════════════════════════════════════════════════════════


class TestRetryProcessing:
    def test_success_on_first_attempt(self):
        report = retry_processing(SAMPLE_MLS_TEXT)
        assert report is not None
        assert len(report.listings) == 2

    def test_non_mls_text_never_extracted(self, monkeypatch):
        calls = _counting_extractor(monkeypatch)
        assert retry_processing("Quarterly newsletter") is None
        assert calls == []

    def test_gives_up_after_default_attempts(self, monkeypatch):
        calls = _counting_extractor(monkeypatch)
        assert retry_processing("MLS# 1") is None
        assert len(calls) == 3

    def test_explicit_attempt_count(self, monkeypatch):
        calls = _counting_extractor(monkeypatch)
        retry_processing("MLS# 1", max_attempts=5)
        assert len(calls) == 5

    def test_attempts_from_environment(self, monkeypatch):
        monkeypatch.setenv("MLS_MAX_ATTEMPTS", "2")
        get_settings.cache_clear()
        calls = _counting_extractor(monkeypatch)
        retry_processing("MLS# 1")
        assert len(calls) == 2

    def test_extractor_errors_are_retried(self, monkeypatch):
        calls = _counting_extractor(monkeypatch, error=ValueError("boom"))
        assert retry_processing("MLS# 1", settings=Settings(max_attempts=4)) is None
        assert len(calls) == 4


# ═══════════════════════════════════════════════════════════════════════
# ORCHESTRATOR
# ═══════════════════════════════════════════════════════════════════════


class TestMLSPipeline:
    def test_text_to_report(self):
        result = MLSPipeline().process_text(SAMPLE_MLS_TEXT)
        assert result.success
        assert result.error is None
        assert result.raw_text == SAMPLE_MLS_TEXT
        assert len(result.data.active_listings) == 1
        assert len(result.data.closed_listings) == 1

    def test_findings_are_advisory(self):
        # Placeholder forecast confidences are zero; the report still succeeds.
        result = MLSPipeline().process_text(SAMPLE_MLS_TEXT)
        assert result.success
        assert "INVALID_CONFIDENCE" in {f.code for f in result.findings}

    def test_injected_text_extractor(self):
        result = MLSPipeline(text_extractor=lambda data: SAMPLE_MLS_TEXT).process_pdf(b"%PDF")
        assert result.success
        assert result.data.mls_number == "1001"

    def test_pdf_through_pdfplumber(self, monkeypatch):
        _fake_pdfplumber(monkeypatch, *SAMPLE_MLS_TEXT.split("\n\n"))
        result = MLSPipeline().process_pdf(b"%PDF-1.4")
        assert result.success
        assert len(result.data.listings) == 2

    def test_settings_flow_into_extraction(self):
        result = MLSPipeline(Settings(market_city="Frisco")).process_text(SAMPLE_MLS_TEXT)
        assert result.data.address.city == "Frisco"

    def test_empty_pdf(self):
        result = MLSPipeline().process_pdf(b"")
        assert not result.success
        assert result.error == EMPTY_PDF
        assert result.raw_text is None
        assert result.data is None

    def test_no_listings_keeps_raw_text(self):
        result = MLSPipeline().process_text("Quarterly newsletter")
        assert not result.success
        assert result.error == NO_LISTINGS
        assert result.raw_text == "Quarterly newsletter"

    def test_extractor_failure_message_surfaced(self):
        def broken(data):
            raise ValueError("Failed to parse PDF")

        result = MLSPipeline(text_extractor=broken).process_pdf(b"%PDF")
        assert not result.success
        assert result.error == "Failed to parse PDF"

    def test_messageless_failure(self):
        def broken(data):
            raise RuntimeError()

        result = MLSPipeline(text_extractor=broken).process_pdf(b"%PDF")
        assert result.error == UNKNOWN_ERROR

    def test_extraction_failure_becomes_result(self, monkeypatch):
        _counting_extractor(monkeypatch, error=KeyError("bedrooms"))
        result = MLSPipeline().process_text(SAMPLE_MLS_TEXT)
        assert not result.success
        assert result.error == "bedrooms"

    def test_garbage_bytes_never_raise(self):
        result = MLSPipeline().process_pdf(b"definitely not a pdf")
        assert not result.success
        assert result.error

    def test_result_serializes_to_camel_case(self):
        payload = MLSPipeline().process_text(SAMPLE_MLS_TEXT).model_dump(by_alias=True)
        assert payload["rawText"] == SAMPLE_MLS_TEXT
        assert payload["data"]["activeListings"][0]["mlsNumber"] == "1001"
