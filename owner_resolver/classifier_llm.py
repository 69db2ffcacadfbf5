"""
LLM-assisted owner classification using OpenAI structured output.

The LLM is a second opinion for fragments the keyword table cannot place —
"MOUNTAIN VIEW ACRES" reads like an entity, yet carries no legal suffix. It
never overrides a keyword COMPANY verdict, and it never parses names: whatever
it says, the fragment still goes through the deterministic parser and the
shape validators.

Design:
  - Opt-in: OWNER_RESOLVER_LLM_CLASSIFIER=1 plus OPENAI_API_KEY
  - JSON mode enforced (structured output, not free text)
  - Graceful fallback: no key, no package, or any failure → keyword verdict
"""

from __future__ import annotations

import json
import logging
import os

from .classifier import KeywordClassifier, OwnerClassifier
from .config import ResolverConfig
from .models import Classification

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-5"


# ─── System Prompt ───────────────────────────────────────────────────

SYSTEM_PROMPT = """\
You classify owner-of-record strings taken from county property records.

Decide whether the string names a company/entity (corporation, trust, church,
government body, association...) or a natural person, or neither (an address,
a legal description, a fragment of boilerplate).

CRITICAL RULES:
1. Judge ONLY the string given. Do not correct spelling.
2. Joint owners have already been split apart; the string names one owner.
3. If unsure, answer "unclassified".

Return a JSON object with exactly one key:
{"classification": "company" | "person" | "unclassified"}
"""


def classify_with_llm(text: str, model: str = DEFAULT_MODEL) -> Classification | None:
    """Ask the LLM to classify one fragment.

    Returns:
        The LLM's verdict, or None if the LLM is unavailable or fails.
        Failure is NOT an error — callers fall back to the keyword verdict.
    """
    api_key = os.environ.get("OPENAI_API_KEY")
    if not api_key:
        logger.info("No OPENAI_API_KEY set — skipping LLM classification")
        return None

    try:
        from openai import OpenAI

        client = OpenAI(api_key=api_key)

        response = client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": f"Classify this owner string:\n\n{text}"},
            ],
            response_format={"type": "json_object"},
        )

        content = response.choices[0].message.content
        if content is None:
            logger.error("LLM returned empty content")
            return None
        verdict = json.loads(content).get("classification")
        return Classification(verdict)

    except ImportError:
        logger.warning("openai package not installed — pip install openai")
        return None
    except Exception as e:
        logger.error("LLM classification failed for '%s': %s", text, e)
        return None


class LLMOwnerClassifier:
    """Keyword classifier with an LLM second opinion for non-company verdicts."""

    def __init__(
        self,
        config: ResolverConfig | None = None,
        base: KeywordClassifier | None = None,
        model: str = DEFAULT_MODEL,
    ):
        self.base = base or KeywordClassifier(config)
        self.model = model

    def classify(self, text: str) -> Classification:
        verdict = self.base.classify(text)
        if verdict is Classification.COMPANY:
            return verdict

        llm_verdict = classify_with_llm(text, self.model)
        if llm_verdict is None:
            return verdict
        if llm_verdict is not verdict:
            logger.info(
                "LLM reclassified '%s': keyword=%s, llm=%s",
                text, verdict.value, llm_verdict.value,
            )
        return llm_verdict


def build_classifier(config: ResolverConfig) -> OwnerClassifier:
    """Pick the classifier strategy from the environment."""
    flag = os.environ.get("OWNER_RESOLVER_LLM_CLASSIFIER", "").strip().lower()
    if flag in {"1", "true", "yes"}:
        logger.info("Using LLM-assisted owner classification")
        return LLMOwnerClassifier(config)
    return KeywordClassifier(config)
