#!/usr/bin/env python3
"""
Owner Resolver — Entry Point
============================

Resolves the owners of one property from a scraped JSON source document.

Usage:
    python main.py                                  # Built-in sample document
    python main.py parcel.json                      # JSON to stdout
    python main.py parcel.json --summary            # Coloured human summary
    python main.py parcel.json --profile roll_format
    OWNER_RESOLVER_LLM_CLASSIFIER=1 OPENAI_API_KEY=sk-... python main.py parcel.json

Exit codes:
    0  resolved (possibly with invalid owner strings)
    1  hard error: missing property id or malformed source
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys

from dotenv import load_dotenv
from pydantic import ValidationError

from owner_resolver.config import SOURCE_PROFILES, load_config
from owner_resolver.exceptions import OwnerResolutionError
from owner_resolver.models import Company, OwnershipReport
from owner_resolver.pipeline import OwnerResolutionPipeline
from owner_resolver.sources import JsonCandidateSource

load_dotenv()


# ─── Sample Document, Ugly on Purpose ────────────────────────────────

SAMPLE_DOCUMENT = {
    "property_id": "12-34-56-7890-0010",
    "current_owners": [
        "SMITH JOHN A & MARY B  ET AL",
        "C/O SMITH JOHN A",
        "123 MAIN ST",
    ],
    "transactions": [
        {"date": "03/15/2019", "grantee": "SMITH JOHN A & MARY B"},
        {"date": "07/01/2004", "grantee": "SUNSHINE HOLDINGS AND LAND LLC"},
        {"date": "", "grantee": "DOE, JANE (DECEASED)"},
        {"date": "11/30/1998", "grantee": "MARY A"},
    ],
}


# ─── ANSI Color Constants ───────────────────────────────────────────

_RED = "\033[91m"
_GREEN = "\033[92m"
_CYAN = "\033[96m"
_DIM = "\033[2m"
_BOLD = "\033[1m"
_RESET = "\033[0m"
_WIDTH = 72


# ─── Pretty Printer ─────────────────────────────────────────────────


def _describe(owner) -> str:
    if isinstance(owner, Company):
        return f"{_CYAN}[company]{_RESET} {owner.name}"
    parts = [owner.prefix_name, owner.first_name, owner.middle_name, owner.last_name, owner.suffix_name]
    return f"{_GREEN}[person]{_RESET}  {' '.join(p for p in parts if p)}"


def print_summary(report: OwnershipReport) -> None:
    """Pretty-print the ownership timeline with ANSI color codes."""
    print(f"\n{'=' * _WIDTH}")
    print(f"{_BOLD}{_CYAN}  OWNERSHIP TIMELINE{_RESET}")
    print(f"{'=' * _WIDTH}")
    print(f"  Property:    {report.property_id}")
    print(f"{'─' * _WIDTH}")

    for key, owners in report.owners_by_date.items():
        print(f"  {_BOLD}{key}{_RESET}")
        if not owners:
            print(f"    {_DIM}(no owners){_RESET}")
        for owner in owners:
            print(f"    {_describe(owner)}")

    if report.invalid_owners:
        print(f"{'─' * _WIDTH}")
        print(f"  {_RED}{_BOLD}INVALID ({len(report.invalid_owners)}){_RESET}")
        for entry in report.invalid_owners:
            print(f"    [{entry.reason.value}] {entry.raw}")

    print(f"{'=' * _WIDTH}\n")


# ─── Main ────────────────────────────────────────────────────────────


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Resolve property owners from a JSON source document.")
    parser.add_argument("input", nargs="?", help="JSON source document (default: built-in sample)")
    parser.add_argument("--profile", choices=sorted(SOURCE_PROFILES), help="source profile")
    parser.add_argument("--config", help="JSON file overriding resolver tables")
    parser.add_argument("--summary", action="store_true", help="print a human summary instead of JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def _report_error(error: dict) -> int:
    print(json.dumps(error, indent=2), file=sys.stderr)
    return 1


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config, args.profile)
    except KeyError as e:
        return _report_error({"type": "error", "message": e.args[0], "path": "profile"})
    except (json.JSONDecodeError, ValidationError) as e:
        return _report_error({
            "type": "error",
            "message": f"Invalid resolver config: {e}",
            "path": args.config or os.environ.get("OWNER_RESOLVER_CONFIG"),
        })
    except OSError as e:
        return _report_error({"type": "error", "message": str(e), "path": e.filename})

    try:
        source = (
            JsonCandidateSource.from_file(args.input)
            if args.input
            else JsonCandidateSource(SAMPLE_DOCUMENT)
        )
        report = OwnerResolutionPipeline(config).run(source)
    except OwnerResolutionError as e:
        return _report_error(e.to_error_object())
    except OSError as e:
        return _report_error({"type": "error", "message": str(e), "path": e.filename})

    if args.summary:
        print_summary(report)
    else:
        print(json.dumps(report.to_output(), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
