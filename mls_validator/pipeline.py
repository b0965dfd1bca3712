"""
PDF pipeline — orchestrates the full workflow from uploaded bytes to a report.

Flow:
  ┌──────────┐
  │ PDF bytes│
  └────┬─────┘
       │
  ┌────▼─────┐
  │ pdfplumb │   ← Binary → text (first failure point)
  └────┬─────┘
       │
  ┌────▼─────┐
  │ Extract  │   ← Line recognizers → listings → statistics
  └────┬─────┘
       │
  ┌────▼─────┐
  │ Validate │   ← Collect-all rule findings (advisory)
  └────┬─────┘
       │
  ┌────▼─────┐
  │  Result  │   ← success + data + raw text, or failure + error
  └──────────┘

Design principles:
  - Exceptions stop here: every failure becomes a ProcessingResult.
  - The raw text is kept on "no listings" failures for diagnostics.
  - Extraction is deterministic; retries only bound the failure path.
"""

from __future__ import annotations

import io
import logging
import re
from collections.abc import Callable

import pdfplumber

from .config import Settings, get_settings
from .exceptions import PDFProcessingError
from .extractor_regex import extract_mls_data
from .models import MLSReport, ProcessingResult
from .rules import validate_all

logger = logging.getLogger(__name__)

EMPTY_PDF = "Empty PDF"
NO_TEXT = "Failed to extract text from PDF"
NO_LISTINGS = "No listings found in PDF"
UNKNOWN_ERROR = "Unknown error during PDF processing"

# Any one of these marks text as plausibly coming from an MLS report.
MLS_INDICATORS: tuple[re.Pattern[str], ...] = (
    re.compile(r"MLS\s*(?:#|Number:?\s*)\s*\d+", re.IGNORECASE),
    re.compile(r"(?:list(?:ing)?\s*price|price\s*:)\s*\$?[\d,]+", re.IGNORECASE),
    re.compile(
        r"(?:\d[\d,]*\s*(?:sq(?:uare)?\s*f(?:ee)?t|sf)|sq(?:uare)?\s*f(?:ee)?t\s*:\s*[\d,]+)",
        re.IGNORECASE,
    ),
    re.compile(r"(?:\d+\s*(?:bed(?:room)?s?|br)|bed(?:room)?s?\s*:\s*\d+)", re.IGNORECASE),
    re.compile(
        r"(?:\d+(?:\.\d+)?\s*(?:bath(?:room)?s?|ba)|bath(?:room)?s?\s*:\s*\d+(?:\.\d+)?)",
        re.IGNORECASE,
    ),
)


def validate_pdf_content(text: str) -> bool:
    """Cheap sniff: does this text look like an MLS report at all?"""
    return any(pattern.search(text) for pattern in MLS_INDICATORS)


def extract_pdf_text(data: bytes) -> str:
    """Concatenate the text of every page of a PDF.

    Raises:
        PDFProcessingError: "Empty PDF" for empty input, or when no page
            yields any text (e.g. a scanned PDF without a text layer).
    """
    if not data:
        raise PDFProcessingError(EMPTY_PDF)

    with pdfplumber.open(io.BytesIO(data)) as pdf:
        pages = [page.extract_text() or "" for page in pdf.pages]

    text = "\n".join(pages)
    if not text.strip():
        raise PDFProcessingError(NO_TEXT, details={"pages": len(pages)})
    return text


def retry_processing(
    text: str, max_attempts: int | None = None, settings: Settings | None = None
) -> MLSReport | None:
    """Extract a report with at least one listing, or give up after ``max_attempts``.

    Text without any MLS indicator is rejected before the first attempt.
    """
    settings = settings or get_settings()
    attempts = max_attempts if max_attempts is not None else settings.max_attempts

    if not validate_pdf_content(text):
        logger.info("Text has no MLS indicators; skipping extraction")
        return None

    last_error: Exception | None = None
    for attempt in range(1, attempts + 1):
        try:
            report = extract_mls_data(text, settings)
        except Exception as exc:
            last_error = exc
            logger.debug("Extraction attempt %d failed: %s", attempt, exc)
            continue
        if report.active_listings or report.closed_listings:
            return report
        logger.debug("Extraction attempt %d found no listings", attempt)

    if last_error is not None:
        logger.error("Failed to process after %d attempts: %s", attempts, last_error)
    else:
        logger.warning("No listings found after %d attempts", attempts)
    return None


class MLSPipeline:
    """Orchestrates PDF → text → report → findings.

    Usage:
        pipeline = MLSPipeline()
        result = pipeline.process_pdf(pdf_bytes)
        if result.success:
            report = result.data
            for finding in result.findings:
                print(finding)
    """

    def __init__(
        self,
        settings: Settings | None = None,
        text_extractor: Callable[[bytes], str] | None = None,
    ):
        self.settings = settings or get_settings()
        self.text_extractor = text_extractor or extract_pdf_text

    def process_pdf(self, data: bytes) -> ProcessingResult:
        """Turn PDF bytes into a ProcessingResult; never raises."""
        logger.info("Extracting text from %d byte PDF...", len(data))
        try:
            raw_text = self.text_extractor(data)
        except Exception as exc:
            return self._failure(exc)
        return self.process_text(raw_text)

    def process_text(self, raw_text: str) -> ProcessingResult:
        """Turn already-extracted report text into a ProcessingResult; never raises."""
        logger.info("Starting MLS extraction...")
        try:
            report = extract_mls_data(raw_text, self.settings)
        except Exception as exc:
            return self._failure(exc)

        if not report.active_listings and not report.closed_listings:
            logger.warning("No listings found in %d characters of text", len(raw_text))
            return ProcessingResult.fail(NO_LISTINGS, raw_text=raw_text)

        findings = validate_all(report)
        logger.info("Report %s: %d finding(s)", report.mls_number, len(findings))
        return ProcessingResult.ok(report, raw_text, findings)

    def _failure(self, exc: Exception) -> ProcessingResult:
        # KeyError wraps its message in quotes under str().
        message = exc.args[0] if exc.args and isinstance(exc.args[0], str) else str(exc)
        if message == EMPTY_PDF:
            return ProcessingResult.fail(EMPTY_PDF)
        logger.error("PDF processing failed: %s", message or type(exc).__name__)
        return ProcessingResult.fail(message or UNKNOWN_ERROR)
