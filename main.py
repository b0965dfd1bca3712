#!/usr/bin/env python3
"""
MLS Report Validator — Entry Point
===================================

Demonstrates the full pipeline on a sample MLS report text: extraction,
statistics, rule findings and (when price history is present) forecasts.

Usage:
    python main.py                          # Built-in sample text
    python main.py report.pdf               # A real MLS PDF
    MLS_MARKET_CITY=Frisco python main.py   # Override the default market city
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from mls_validator.forecast import build_market_predictions
from mls_validator.models import Severity
from mls_validator.pipeline import MLSPipeline

load_dotenv()


# ─── Sample Report Text (as it comes out of a PDF) ──────────────────

SAMPLE_MLS_TEXT = """\
MLS# 12345
123 Main St, Plano
List Price: $500,000
4 beds
2.5 baths
2,500 sqft

MLS# 12346
456 Oak Avenue
List Price: $450,000
Sold Price: $445,000
3 bedrooms
2 baths
2,000 sqft
"""


# ─── ANSI Color Constants ───────────────────────────────────────────

_RED = "\033[91m"
_YELLOW = "\033[93m"
_GREEN = "\033[92m"
_CYAN = "\033[96m"
_DIM = "\033[2m"
_BOLD = "\033[1m"
_RESET = "\033[0m"
_WIDTH = 72


# ─── Pretty Printer Helpers ─────────────────────────────────────────


def _print_listings(report) -> None:
    """Print one line per extracted listing."""
    for label, listings in (("Active", report.active_listings), ("Closed", report.closed_listings)):
        for p in listings:
            sold = f"  sold ${p.sold_price:,.0f}" if p.sold_price is not None else ""
            print(
                f"  {label:<7}MLS#{p.mls_number:<8} {p.address or '—':<22} "
                f"${p.list_price:,.0f}{sold}  {p.sqft:,} sqft"
            )


def _print_statistics(stats) -> None:
    print(f"  Avg list:    ${stats.average_list_price:,.0f}")
    print(f"  Avg sold:    ${stats.average_sold_price:,.0f}")
    print(f"  $/sqft:      {stats.price_per_square_foot:,.0f}")
    print(f"  Absorption:  {stats.absorption_rate:.1f}%")
    print(f"  Supply:      {stats.months_of_supply:.1f} months")
    print(f"  List→sold:   {stats.list_to_sold_ratio:.3f}")


def _print_findings_group(findings, color: str, label: str) -> None:
    """Print a categorized group of findings (errors or warnings)."""
    if not findings:
        return
    print(f"\n  {color}{_BOLD}{label} ({len(findings)}){_RESET}")
    for f in findings:
        print(f"    {color}[{f.code}]{_RESET} {_DIM}{f.field}{_RESET}")
        print(f"    {f.message}")
    print()


# ─── Pretty Printer ─────────────────────────────────────────────────


def print_result(result) -> int:
    """Pretty-print the processing result with ANSI color codes.

    Returns:
        0 if the report extracted cleanly with no rule errors, 1 otherwise.
    """
    print(f"\n{'=' * _WIDTH}")
    print(f"{_BOLD}{_CYAN}  MLS REPORT{_RESET}")
    print(f"{'=' * _WIDTH}")

    if not result.success:
        print(f"  {_RED}{_BOLD}PROCESSING FAILED  --  {result.error}{_RESET}")
        print(f"{'=' * _WIDTH}\n")
        return 1

    report = result.data
    print(f"  Report:      {report.mls_number}")
    print(f"  Location:    {report.address.city}, {report.address.state}")
    print(f"{'─' * _WIDTH}")
    _print_listings(report)
    print(f"{'─' * _WIDTH}")
    _print_statistics(report.statistics)
    print(f"{'─' * _WIDTH}")

    errors = [f for f in result.findings if f.severity == Severity.ERROR]
    warnings = [f for f in result.findings if f.severity == Severity.WARNING]
    _print_findings_group(errors, _RED, "ERRORS")
    _print_findings_group(warnings, _YELLOW, "WARNINGS")

    predictions = build_market_predictions(report.market_trends)
    if predictions:
        for p in predictions.predictions:
            print(f"  {p.date}:  ${p.price:,.0f}  ({p.confidence:.0%} confidence)")

    print(f"{'=' * _WIDTH}")
    if errors:
        print(f"  {_RED}{_BOLD}REPORT FAILED  --  {len(errors)} error(s) found{_RESET}")
    else:
        print(f"  {_GREEN}{_BOLD}REPORT PASSED ALL CHECKS{_RESET}")
    print(f"{'=' * _WIDTH}\n")

    return 1 if errors else 0


# ─── Main ────────────────────────────────────────────────────────────


def main():
    """Run the pipeline on a PDF given on the command line, or on the sample text."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    pipeline = MLSPipeline()
    if len(sys.argv) > 1:
        result = pipeline.process_pdf(Path(sys.argv[1]).read_bytes())
    else:
        result = pipeline.process_text(SAMPLE_MLS_TEXT)

    sys.exit(print_result(result))


if __name__ == "__main__":
    main()
