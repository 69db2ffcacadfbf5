"""
Person name parsing — one owner fragment in, first/middle/last out.

Two shapes are understood:

  Comma form     "LAST [SUFFIX], [PREFIX] FIRST [MIDDLE...] [SUFFIX]"
  No-comma form  tokens in the source's configured order:
                   last_first  "SMITH JOHN A"   (assessment rolls)
                   first_last  "John A Smith"   (free text)

Philosophy: it's better to reject a fragment than to guess. A two-token
fragment ending in a lone initial ("MARY A") is a first name plus middle
initial with the surname missing. It is rejected unless a sibling owner in the
same joint group supplies the surname.

The parser only splits and title-cases. Shape checks happen in
``validators.py``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional, Union

from .config import ResolverConfig
from .models import InvalidReason, NameOrder
from .normalizer import collapse_whitespace, title_case_name

logger = logging.getLogger(__name__)

# Roman numerals past the table and ordinals: dropped, never kept as a name.
# A lone "V" or "X" is left alone, it is far more often a middle initial.
_SUFFIX_LIKE_RE = re.compile(r"^(?:VI{1,3}|IX|\d+(?:ST|ND|RD|TH))$", re.IGNORECASE)


# ─── Result Types ────────────────────────────────────────────────────


@dataclass(frozen=True)
class ParsedName:
    """Name fields after splitting and title-casing, not yet validated."""

    first_name: str
    last_name: str
    middle_name: Optional[str] = None
    prefix_name: Optional[str] = None
    suffix_name: Optional[str] = None


@dataclass(frozen=True)
class ParseFailure:
    """Why a fragment could not be split into name parts."""

    reason: InvalidReason
    detail: str = ""


ParseResult = Union[ParsedName, ParseFailure]


# ─── Ordering ────────────────────────────────────────────────────────


def resolve_name_order(
    configured: NameOrder, fragment: str, follows_bare_given_name: bool = False
) -> NameOrder:
    """Turn the configured order into a concrete one for this fragment.

    Only ``auto_conservative`` looks at the fragment: mixed-case text reads
    first-last; all-caps text reads last-first (roll format) unless an earlier
    owner in the same joint group was a bare given name, as in
    "JOHN & MARY SMITH", where the shared surname trails.
    """
    if configured is not NameOrder.AUTO_CONSERVATIVE:
        return configured
    if fragment != fragment.upper():
        return NameOrder.FIRST_LAST
    if follows_bare_given_name:
        return NameOrder.FIRST_LAST
    return NameOrder.LAST_FIRST


# ─── Parser ──────────────────────────────────────────────────────────


class PersonNameParser:
    """Split person-name fragments using the configured prefix/suffix tables.

    Usage:
        parser = PersonNameParser(ResolverConfig(name_order=NameOrder.LAST_FIRST))
        parser.parse("SMITH JOHN A")
        # ParsedName(first_name='John', last_name='Smith', middle_name='A')
    """

    def __init__(self, config: ResolverConfig | None = None):
        self.config = config or ResolverConfig()

    def parse(
        self,
        fragment: str,
        inferred_surname: str | None = None,
        order: NameOrder | None = None,
    ) -> ParseResult:
        """Parse one normalized, already-split owner fragment.

        Args:
            fragment: A single owner's name.
            inferred_surname: Last name borrowed from a sibling fragment of the
                same joint-owner group. Only used when the fragment itself is
                missing a surname.
            order: Concrete token order; defaults to the configured one.
        """
        s = collapse_whitespace(fragment)
        if not s:
            return ParseFailure(InvalidReason.EMPTY)

        order = resolve_name_order(order or self.config.name_order, s)

        if "," in s:
            return self._parse_comma_form(s)
        return self._parse_plain_form(s, inferred_surname, order)

    # ─── Comma Form ──────────────────────────────────────────────────

    def _parse_comma_form(self, s: str) -> ParseResult:
        left, right = s.split(",", 1)

        left_tokens, suffix = self.extract_suffix(left.split())
        right_tokens, prefix = self.extract_prefix(right.replace(",", " ").split())
        right_tokens, right_suffix = self.extract_suffix(right_tokens)
        suffix = suffix or right_suffix

        if not left_tokens or not right_tokens:
            return ParseFailure(
                InvalidReason.COULD_NOT_PARSE_PERSON,
                "comma form needs a surname before and a given name after the comma",
            )

        return self._build(
            first=right_tokens[0],
            last=" ".join(left_tokens),
            middle=right_tokens[1:],
            prefix=prefix,
            suffix=suffix,
        )

    # ─── No-Comma Form ───────────────────────────────────────────────

    def _parse_plain_form(
        self, s: str, inferred_surname: str | None, order: NameOrder
    ) -> ParseResult:
        tokens, prefix = self.extract_prefix(s.split())
        tokens, suffix = self.extract_suffix(tokens)

        # Roll format sometimes writes the suffix right after the surname.
        if suffix is None and order is NameOrder.LAST_FIRST and len(tokens) >= 3:
            display = self.config.suffixes.get(_token_key(tokens[1]))
            if display is not None:
                suffix = display
                tokens = [tokens[0]] + tokens[2:]

        if len(tokens) == 1:
            if inferred_surname:
                return self._build(
                    first=tokens[0], last=inferred_surname, prefix=prefix, suffix=suffix
                )
            return ParseFailure(
                InvalidReason.INSUFFICIENT_NAME_PARTS, "single token and no shared surname"
            )

        if len(tokens) == 2 and _is_initial(tokens[1]):
            if inferred_surname:
                return self._build(
                    first=tokens[0],
                    last=inferred_surname,
                    middle=tokens[1:],
                    prefix=prefix,
                    suffix=suffix,
                )
            return ParseFailure(
                InvalidReason.INSUFFICIENT_NAME_PARTS,
                "trailing initial cannot be a surname",
            )

        if order is NameOrder.LAST_FIRST:
            last, first, middle = tokens[0], tokens[1], tokens[2:]
        else:
            first, last, middle = tokens[0], tokens[-1], tokens[1:-1]

        if _is_initial(last):
            return ParseFailure(
                InvalidReason.INSUFFICIENT_NAME_PARTS, "single-letter surname"
            )

        return self._build(first=first, last=last, middle=middle, prefix=prefix, suffix=suffix)

    # ─── Prefix / Suffix Extraction ──────────────────────────────────

    def extract_prefix(self, tokens: list[str]) -> tuple[list[str], str | None]:
        """Pop a leading honorific ("DR", "MRS.") if a name remains after it."""
        if len(tokens) > 1:
            display = self.config.prefixes.get(_token_key(tokens[0]))
            if display is not None:
                return tokens[1:], display
        return tokens, None

    def extract_suffix(self, tokens: list[str]) -> tuple[list[str], str | None]:
        """Pop trailing suffix tokens, keeping at least one name token.

        Known suffixes map to their display form. When several trail the name
        ("JR MD") the one nearest the name is kept. Unknown suffix-like tokens
        (ordinals, higher roman numerals) are dropped.
        """
        remaining = list(tokens)
        suffix: str | None = None
        while len(remaining) > 1:
            key = _token_key(remaining[-1])
            display = self.config.suffixes.get(key)
            if display is not None:
                suffix = display
            elif _SUFFIX_LIKE_RE.match(key):
                logger.debug("Dropping unrecognized suffix-like token '%s'", remaining[-1])
            else:
                break
            remaining.pop()
        return remaining, suffix

    # ─── Assembly ────────────────────────────────────────────────────

    def _build(
        self,
        first: str,
        last: str,
        middle: list[str] | None = None,
        prefix: str | None = None,
        suffix: str | None = None,
    ) -> ParsedName:
        middle_text = title_case_name(" ".join(middle or []))
        return ParsedName(
            first_name=title_case_name(first),
            last_name=title_case_name(last),
            middle_name=middle_text or None,
            prefix_name=prefix,
            suffix_name=suffix,
        )


# ─── Internal Helpers ────────────────────────────────────────────────


def _token_key(token: str) -> str:
    return token.upper().replace(".", "").strip(",")


def _is_initial(token: str) -> bool:
    letters = token.strip(".,")
    return len(letters) == 1 and letters.isalpha()
