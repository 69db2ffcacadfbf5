"""Pytest configuration — ensures the project root is importable."""

import sys
from pathlib import Path
from unittest.mock import patch

import pytest

sys.path.insert(0, str(Path(__file__).parent))


@pytest.fixture(autouse=True)
def _no_llm_calls():
    """Prevent real LLM API calls during tests — keeps the suite fast and free."""
    with patch("owner_resolver.classifier_llm.classify_with_llm", return_value=None):
        yield


@pytest.fixture(autouse=True)
def _clean_resolver_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """A developer's shell or .env must not change what the suite resolves."""
    for name in (
        "OWNER_RESOLVER_PROFILE",
        "OWNER_RESOLVER_CONFIG",
        "OWNER_RESOLVER_NAME_ORDER",
        "OWNER_RESOLVER_LLM_CLASSIFIER",
    ):
        monkeypatch.delenv(name, raising=False)
