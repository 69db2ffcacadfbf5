"""
Text normalization for raw ownership strings.

Everything here is a total, side-effect-free string function. Garbage in gives
an empty string out, never an exception. An empty result means "no owner".

The cleanup step is repeated until the text stops changing, which makes
``normalize_text`` idempotent even when removing one role token exposes another
("ESTATE OF ESTATE OF ...").
"""

from __future__ import annotations

import re

# ─── Patterns ────────────────────────────────────────────────────────

_WHITESPACE_RE = re.compile(r"\s+")
_BRACKETED_RE = re.compile(r"\([^()]*\)|\[[^\[\]]*\]")
# Scrapes sometimes cut a parenthetical off mid-way: drop the dangling tail.
_DANGLING_BRACKET_RE = re.compile(r"[(\[][^)\]]*$")
_MARKER_RE = re.compile(r"^[%#@]+|\*+")
_ATTENTION_RE = re.compile(r"^(?:ATTN|ATTENTION)\b\s*:?\s*", re.IGNORECASE)
_COMMA_RE = re.compile(r"\s*,\s*")
_EDGE_SEPARATORS = " &;/,-"

# Removed where they stand; the rest of the string is kept.
_INLINE_ROLE_RE = re.compile(
    r"(?<![A-Za-z])(?:"
    r"C\s*/\s*O|CARE\s+OF"
    r"|ESTATE\s+OF|EST\s+OF"
    r"|MR\.?\s*(?:&|AND)\s*MRS\.?"
    r"|DECEASED|DEC'D"
    r"|ET\s*AL|ET\s+UX|ET\s+VIR|JTWROS"
    r")(?![A-Za-z])",
    re.IGNORECASE,
)

# Removed together with whatever follows, up to the next joint-owner separator.
# Only applies after some leading text, so a string that *starts* with a role
# word ("TRUSTEES OF THE X TRUST") is left for the classifier.
_TRUNCATING_ROLE_RE = re.compile(
    r"(?<=[^\s&;/])\s+(?:"
    r"AS\s+(?:SUCCESSOR\s+)?(?:TRUSTEES?|CO-?TRUSTEES?|GUARDIAN|ADMINISTRAT(?:OR|RIX)"
    r"|EXECUT(?:OR|RIX)|PERSONAL\s+REPRESENTATIVE|AGENT|ATTORNEY|REPRESENTATIVE"
    r"|CONSERVATOR|CUSTODIAN|NOMINEE)"
    r"|SUCCESSOR\s+TRUSTEES?|CO-?TRUSTEES?|TRUSTEES?|TTEES?|TR"
    r"|ET\s*AL|ET\s+UX|ET\s+VIR"
    r"|JTWROS|JT\s*/\s*RS|JT\s+W\s*/\s*RS|JT\s+WROS"
    r"|L\s*/\s*E|LIFE\s+ESTATE|H\s*&\s*W|H\s*/\s*W"
    r"|TENANTS?\s+IN\s+COMMON|TIC|CUSTODIAN"
    r")(?![A-Za-z])[^&;/]*?(?=\s*(?:&|;|/|\bAND\b|$))",
    re.IGNORECASE,
)

_NAME_SEPARATOR_RUN_RE = re.compile(r"[ \-',.]+")
_SEGMENT_START_RE = re.compile(r"(^|[ \-',.])([a-z])")
NAME_SEPARATORS = " -',."


# ─── Public API ──────────────────────────────────────────────────────


def collapse_whitespace(text: str | None) -> str:
    """Trim and collapse every whitespace run (NBSP included) to one space."""
    return _WHITESPACE_RE.sub(" ", text or "").strip()


def normalize_text(text: str | None) -> str:
    """Clean a raw ownership string down to the names it contains.

    Example:
        "  SMITH JOHN A  TRUSTEE (DECEASED) & DOE, JANE ET AL "
        → "SMITH JOHN A & DOE, JANE"
    """
    current = collapse_whitespace(text)
    while True:
        cleaned = _normalize_once(current)
        if cleaned == current:
            return cleaned
        current = cleaned


def title_case_name(text: str | None) -> str:
    """Title-case a name field.

    The first letter of each separator-delimited segment is upper-cased and
    the rest lower-cased. Runs of separators collapse to their first character
    and separators never lead or trail. Characters outside the name alphabet
    are kept as-is so validation can reject them.

    Example:
        "O' BRIEN-SMITH" → "O'Brien-Smith"
    """
    s = collapse_whitespace(text).lower()
    s = _NAME_SEPARATOR_RUN_RE.sub(lambda m: m.group(0)[0], s)
    s = s.strip(NAME_SEPARATORS)
    return _SEGMENT_START_RE.sub(lambda m: m.group(1) + m.group(2).upper(), s)


def title_case_words(text: str | None) -> str:
    """Display form for company names: each whitespace word capitalised.

    Example:
        "SMITH AND JONES PROPERTIES LLC" → "Smith And Jones Properties Llc"
    """
    return " ".join(w[:1].upper() + w[1:].lower() for w in collapse_whitespace(text).split(" ") if w)


# ─── Internal Helpers ────────────────────────────────────────────────


def _normalize_once(text: str) -> str:
    s = text.replace("&amp;", "&")
    s = _BRACKETED_RE.sub(" ", s)
    s = _DANGLING_BRACKET_RE.sub(" ", s)
    s = _MARKER_RE.sub(" ", s)
    s = collapse_whitespace(s)
    s = _ATTENTION_RE.sub("", s)
    s = _TRUNCATING_ROLE_RE.sub("", s)
    s = _INLINE_ROLE_RE.sub(" ", s)
    s = _COMMA_RE.sub(", ", s)
    s = collapse_whitespace(s)
    return s.strip(_EDGE_SEPARATORS)
