"""
Main resolution pipeline — orchestrates one property run.

Flow (per candidate string):
  ┌───────────────┐
  │ Raw candidate │   "SMITH JOHN A & MARY B ET AL"
  └───────┬───────┘
   ┌──────▼──────┐
   │ Normalizer  │   ← strip noise and role tokens
   └──────┬──────┘
   ┌──────▼──────┐
   │  Splitter   │   ← companies stay whole, the rest splits on & / AND / ; /
   └──────┬──────┘
   ┌──────▼──────┐
   │ Classifier  │   ← Company | Person | Unclassified
   └──────┬──────┘
   ┌──────▼──────┐
   │ Name Parser │   ← first/middle/last, shared surname inference
   └──────┬──────┘
   ┌──────▼──────┐
   │ Validators  │   ← strict shape grammar, reason codes
   └──────┬──────┘
   ┌──────▼──────┐
   │  Timeline   │   ← dedup per date bucket, ordering, current fallback
   └─────────────┘

Design principles:
  - Soft failures never raise: every non-empty fragment ends up as a Company,
    a Person, or an ``invalid_owners`` entry with a reason.
  - Hard failures (no property id, malformed source) raise and abort the run.
  - All state is local to one ``run``; the pipeline itself only holds the
    immutable config and the compiled tables.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from .classifier import KeywordClassifier, OwnerClassifier, looks_like_address_or_noise
from .classifier_llm import build_classifier
from .collector import InvalidOwnerCollector
from .config import ResolverConfig
from .models import (
    Classification,
    Company,
    HistoricalTransaction,
    InvalidReason,
    NameOrder,
    OwnerCandidate,
    OwnershipReport,
    Person,
)
from .name_parser import ParseFailure, PersonNameParser, resolve_name_order
from .normalizer import collapse_whitespace, normalize_text, title_case_words
from .sources import CandidateSource
from .splitter import build_separator_pattern, split_joint_owners
from .timeline import CURRENT_KEY, OwnershipTimeline
from .validators import build_person

logger = logging.getLogger(__name__)


class OwnerResolutionPipeline:
    """Turns raw ownership strings into a deduplicated ownership timeline.

    Usage:
        pipeline = OwnerResolutionPipeline()
        report = pipeline.run(JsonCandidateSource(document))
        print(json.dumps(report.to_output(), indent=2))
    """

    def __init__(
        self,
        config: ResolverConfig | None = None,
        classifier: OwnerClassifier | None = None,
    ):
        self.config = config or ResolverConfig()
        self.classifier = classifier or build_classifier(self.config)
        self.parser = PersonNameParser(self.config)
        self._keywords = KeywordClassifier(self.config)
        self._separator_re = build_separator_pattern(self.config.extra_separators)

    def run(self, source: CandidateSource) -> OwnershipReport:
        """Resolve every owner the source knows about.

        Raises:
            OwnerResolutionError: The source cannot identify the property or is
                structurally broken.
        """
        property_id = source.get_property_identifier()
        return self.resolve(
            property_id,
            source.get_current_owner_candidates(),
            source.get_historical_transactions(),
        )

    def resolve(
        self,
        property_id: str,
        current_candidates: Sequence[str],
        transactions: Sequence[HistoricalTransaction] = (),
    ) -> OwnershipReport:
        collector = InvalidOwnerCollector()
        timeline = OwnershipTimeline()

        # ── Step 1: Current owners ──────────────────────────────────
        logger.info(
            "Property %s: resolving %d current owner candidate(s)",
            property_id, len(current_candidates),
        )
        current: list[Person | Company] = []
        for raw in current_candidates:
            current.extend(self.resolve_candidate(raw, collector))
        timeline.add(CURRENT_KEY, current)

        # ── Step 2: Historical grantees ─────────────────────────────
        logger.info(
            "Property %s: resolving %d historical transaction(s)",
            property_id, len(transactions),
        )
        for transaction in transactions:
            candidate = OwnerCandidate(
                raw_text=transaction.grantee_raw, source_date=transaction.raw_date
            )
            owners = self.resolve_candidate(candidate, collector)
            if not owners:
                continue
            timeline.add(timeline.assign_date_key(candidate.source_date), owners)

        # ── Step 3: Compile report ──────────────────────────────────
        report = OwnershipReport(
            property_id=property_id,
            owners_by_date=timeline.to_dict(),
            invalid_owners=collector.entries,
        )
        logger.info(
            "Property %s: %d date bucket(s), %d invalid owner string(s)",
            property_id, len(report.owners_by_date), len(report.invalid_owners),
        )
        return report

    # ─── Candidate Resolution ───────────────────────────────────────

    def resolve_candidate(
        self, candidate: OwnerCandidate | str, collector: InvalidOwnerCollector
    ) -> list[Person | Company]:
        """Resolve one raw ownership string into zero or more owners."""
        raw = candidate.raw_text if isinstance(candidate, OwnerCandidate) else candidate
        if not raw or not raw.strip():
            return []

        text = normalize_text(raw)
        if not text:
            collector.add(collapse_whitespace(raw), InvalidReason.EMPTY)
            return []

        fragments = split_joint_owners(text, self.classifier, self._separator_re)
        return self.resolve_group(fragments, collector)

    def resolve_group(
        self, fragments: Sequence[str], collector: InvalidOwnerCollector
    ) -> list[Person | Company]:
        """Resolve the fragments of one joint-owner string, in source order.

        Person fragments that lack a surname ("JOHN" in "JOHN & MARY SMITH")
        get a second attempt with the surname of a sibling: the nearest parsed
        person before them, else the nearest after them. A company ends the
        search in either direction.
        """
        results: list[Person | Company | None] = [None] * len(fragments)
        pending: dict[int, InvalidReason] = {}
        orders: dict[int, NameOrder] = {}
        follows_bare_given_name = False

        # ── Pass 1: classify and parse independently ────────────────
        for i, fragment in enumerate(fragments):
            # A company keyword outranks an address shape: "123 OCEAN DRIVE LLC".
            if looks_like_address_or_noise(fragment) and not (
                self._keywords.is_company_keyword_match(fragment)
            ):
                collector.add(fragment, InvalidReason.ADDRESS_OR_NOISE)
                continue

            verdict = self.classifier.classify(fragment)
            if verdict is Classification.COMPANY:
                results[i] = Company(name=title_case_words(fragment))
                continue
            if verdict is Classification.UNCLASSIFIED:
                collector.add(fragment, InvalidReason.UNCLASSIFIED)
                continue

            orders[i] = resolve_name_order(
                self.config.name_order, fragment, follows_bare_given_name
            )
            if _is_bare_given_name(fragment):
                follows_bare_given_name = True

            outcome = self._parse_person(fragment, None, orders[i])
            if isinstance(outcome, Person):
                results[i] = outcome
            else:
                pending[i] = outcome

        # ── Pass 2: shared surname inference ────────────────────────
        for i, reason in pending.items():
            if reason is InvalidReason.INSUFFICIENT_NAME_PARTS:
                surname = _sibling_surname(results, i)
                if surname is not None:
                    outcome = self._parse_person(fragments[i], surname, orders[i])
                    if isinstance(outcome, Person):
                        logger.debug("'%s' inherited surname '%s'", fragments[i], surname)
                        results[i] = outcome
                        continue
                    reason = outcome
            collector.add(fragments[i], reason)

        return [owner for owner in results if owner is not None]

    def _parse_person(
        self, fragment: str, inferred_surname: str | None, order: NameOrder
    ) -> Person | InvalidReason:
        parsed = self.parser.parse(fragment, inferred_surname, order)
        if isinstance(parsed, ParseFailure):
            return parsed.reason
        return build_person(parsed, self.config)


# ─── Internal Helpers ────────────────────────────────────────────────


def _is_bare_given_name(fragment: str) -> bool:
    tokens = fragment.split()
    return len(tokens) == 1 and "," not in fragment and tokens[0].isalpha()


def _sibling_surname(results: Sequence[Person | Company | None], index: int) -> str | None:
    # Roll format carries the surname forward ("SMITH JOHN & MARY"); a trailing
    # shared surname ("JOHN & MARY SMITH") is only used when nothing precedes.
    for neighbours in (reversed(results[:index]), results[index + 1:]):
        for owner in neighbours:
            if isinstance(owner, Company):
                break
            if isinstance(owner, Person):
                return owner.last_name
    return None
