"""
End-to-end tests: raw source documents in, ownership reports out.

Covers the joint-owner examples, the timeline contract, hard errors, the
source profiles and the optional LLM classifier (always mocked).

Run: pytest tests/ -v
"""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest
from pydantic import ValidationError

import main
from owner_resolver.classifier import KeywordClassifier
from owner_resolver.classifier_llm import LLMOwnerClassifier, build_classifier, classify_with_llm
from owner_resolver.config import load_config
from owner_resolver.exceptions import MalformedSourceError, MissingPropertyIdentifierError
from owner_resolver.models import (
    Classification,
    Company,
    InvalidReason,
    NameOrder,
    Person,
)
from owner_resolver.pipeline import OwnerResolutionPipeline
from owner_resolver.sources import JsonCandidateSource


# ─── Helpers ─────────────────────────────────────────────────────────


def _run(document: dict, config=None, classifier=None):
    pipeline = OwnerResolutionPipeline(config, classifier)
    return pipeline.run(JsonCandidateSource(document))


def _current(*candidates: str, config=None) -> list:
    report = _run({"property_id": "1", "current_owners": list(candidates)}, config)
    return report.owners_by_date["current"]


def _invalid(*candidates: str, config=None) -> list[tuple[str, InvalidReason]]:
    report = _run({"property_id": "1", "current_owners": list(candidates)}, config)
    return [(e.raw, e.reason) for e in report.invalid_owners]


def _person(first: str, last: str, middle: str | None = None, **extra) -> Person:
    return Person(first_name=first, last_name=last, middle_name=middle, **extra)


# ═══════════════════════════════════════════════════════════════════════
# JOINT OWNERS AND NAME SHAPES
# ═══════════════════════════════════════════════════════════════════════


class TestJointOwners:
    """The classic examples from real assessment rolls."""

    @pytest.mark.parametrize(
        "order", [NameOrder.AUTO_CONSERVATIVE, NameOrder.FIRST_LAST]
    )
    def test_shared_trailing_surname(self, order):
        config = load_config().model_copy(update={"name_order": order})
        assert _current("JOHN & MARY SMITH", config=config) == [
            _person("John", "Smith"),
            _person("Mary", "Smith"),
        ]

    def test_mixed_case_shared_surname(self):
        assert _current("John & Mary Smith") == [
            _person("John", "Smith"),
            _person("Mary", "Smith"),
        ]

    def test_shared_leading_surname(self):
        assert _current("SMITH JOHN & MARY") == [
            _person("John", "Smith"),
            _person("Mary", "Smith"),
        ]

    def test_trailing_initial_borrows_sibling_surname(self):
        assert _current("SMITH JOHN A & MARY B ET AL") == [
            _person("John", "Smith", "A"),
            _person("Mary", "Smith", "B"),
        ]

    def test_company_with_and_is_one_owner(self):
        assert _current("SMITH AND JONES PROPERTIES LLC") == [
            Company(name="Smith And Jones Properties Llc")
        ]

    def test_comma_form(self):
        assert _current("DOE, JANE A") == [_person("Jane", "Doe", "A")]

    @pytest.mark.parametrize("order", [NameOrder.LAST_FIRST, NameOrder.AUTO_CONSERVATIVE])
    def test_comma_form_with_suffix(self, order):
        config = load_config().model_copy(update={"name_order": order})
        assert _current("SMITH JR, JOHN", config=config) == [
            _person("John", "Smith", suffix_name="Jr.")
        ]

    def test_lone_first_and_initial_is_rejected(self):
        assert _current("MARY A") == []
        assert _invalid("MARY A") == [("MARY A", InvalidReason.INSUFFICIENT_NAME_PARTS)]

    def test_semicolon_separates_owners(self):
        assert _current("SMITH JOHN; DOE JANE") == [
            _person("John", "Smith"),
            _person("Jane", "Doe"),
        ]

    def test_roll_format_surname_carries_forward(self):
        config = load_config(profile="roll_format")
        assert _current("SMITH JOHN & MARY & DOE JANE", config=config) == [
            _person("John", "Smith"),
            _person("Mary", "Smith"),
            _person("Jane", "Doe"),
        ]

    def test_list_separator_splits_around_company(self):
        config = load_config(profile="roll_format")
        text = "SMITH JOHN; ACME HOLDINGS LLC; MARY"
        assert _current(text, config=config) == [
            _person("John", "Smith"),
            Company(name="Acme Holdings Llc"),
        ]
        # A company ends the surname search.
        assert _invalid(text, config=config) == [
            ("MARY", InvalidReason.INSUFFICIENT_NAME_PARTS)
        ]


# ═══════════════════════════════════════════════════════════════════════
# SOFT FAILURES
# ═══════════════════════════════════════════════════════════════════════


class TestSoftFailures:
    """Every non-empty candidate becomes an owner or an invalid entry — never an exception."""

    def test_address_line(self):
        assert _invalid("123 MAIN ST") == [("123 MAIN ST", InvalidReason.ADDRESS_OR_NOISE)]

    def test_company_named_after_its_address(self):
        assert _current("123 OCEAN DRIVE LLC") == [Company(name="123 Ocean Drive Llc")]
        assert _invalid("123 OCEAN DRIVE LLC") == []

    def test_role_only_string_is_empty(self):
        assert _invalid("(DECEASED)") == [("(DECEASED)", InvalidReason.EMPTY)]

    def test_no_letters_is_unclassified(self):
        assert _invalid("??") == [("??", InvalidReason.UNCLASSIFIED)]

    def test_digit_in_name_fails_shape(self):
        assert _invalid("SMITH J0HN") == [
            ("SMITH J0HN", InvalidReason.FIRST_NAME_PATTERN_MISMATCH)
        ]

    def test_blank_candidates_are_ignored(self):
        assert _current("", "   ") == []
        assert _invalid("", "   ") == []

    def test_every_candidate_is_accounted_for(self):
        candidates = [
            "SMITH JOHN",
            "ACME HOLDINGS LLC",
            "MARY A",
            "123 MAIN ST",
            "??",
            "ET AL",
        ]
        report = _run({"property_id": "1", "current_owners": candidates})
        assert len(report.current_owners) + len(report.invalid_owners) == len(candidates)

    def test_same_owner_twice_is_deduplicated(self):
        assert _current("SMITH JOHN A", "C/O SMITH JOHN A") == [_person("John", "Smith", "A")]

    def test_same_invalid_string_recorded_once(self):
        assert _invalid("MARY A", "MARY A") == [
            ("MARY A", InvalidReason.INSUFFICIENT_NAME_PARTS)
        ]


# ═══════════════════════════════════════════════════════════════════════
# TIMELINE
# ═══════════════════════════════════════════════════════════════════════


class TestTimeline:
    def test_key_order(self):
        report = _run({
            "property_id": "1",
            "current_owners": ["SMITH JOHN"],
            "transactions": [
                {"date": "05/01/2020", "grantee": "DOE JANE"},
                {"date": "bogus", "grantee": "LEE ANN"},
                {"date": "01/01/1999", "grantee": "ACME HOLDINGS LLC"},
            ],
        })
        assert list(report.owners_by_date) == [
            "1999-01-01",
            "2020-05-01",
            "unknown_date_1",
            "current",
        ]

    def test_transaction_without_owners_gets_no_bucket(self):
        report = _run({
            "property_id": "1",
            "transactions": [
                {"date": "bogus", "grantee": "MARY A"},
                {"date": "also bogus", "grantee": "DOE, JANE"},
            ],
        })
        assert list(report.owners_by_date) == ["unknown_date_1", "current"]
        assert report.owners_by_date["unknown_date_1"] == [_person("Jane", "Doe")]

    def test_current_falls_back_to_latest_transaction(self):
        report = _run({
            "property_id": "1",
            "current_owners": ["(DECEASED)"],
            "transactions": [
                {"date": "2001-06-01", "grantee": "DOE JANE"},
                {"date": "2019-06-01", "grantee": "SMITH JOHN"},
            ],
        })
        assert report.current_owners == [_person("John", "Smith")]

    def test_same_date_transactions_merge(self):
        report = _run({
            "property_id": "1",
            "transactions": [
                {"date": "03/15/2019", "grantee": "SMITH JOHN"},
                {"date": "2019-03-15", "grantee": "SMITH JOHN & MARY"},
            ],
        })
        assert report.owners_by_date["2019-03-15"] == [
            _person("John", "Smith"),
            _person("Mary", "Smith"),
        ]

    def test_runs_are_isolated(self):
        pipeline = OwnerResolutionPipeline()
        first = pipeline.run(JsonCandidateSource({
            "property_id": "1",
            "current_owners": ["MARY A"],
            "transactions": [{"date": "?", "grantee": "SMITH JOHN"}],
        }))
        second = pipeline.run(JsonCandidateSource({
            "property_id": "2",
            "transactions": [{"date": "?", "grantee": "DOE JANE"}],
        }))
        assert len(first.invalid_owners) == 1
        assert second.invalid_owners == []
        assert list(second.owners_by_date) == ["unknown_date_1", "current"]


# ═══════════════════════════════════════════════════════════════════════
# OUTPUT DOCUMENT
# ═══════════════════════════════════════════════════════════════════════


class TestOutputDocument:
    def test_shape(self):
        report = _run({
            "property_id": "12-34",
            "current_owners": ["SMITH JR, JOHN", "ACME HOLDINGS LLC", "MARY A"],
        })
        assert report.to_output() == {
            "property_12-34": {
                "owners_by_date": {
                    "current": [
                        {
                            "type": "person",
                            "first_name": "John",
                            "last_name": "Smith",
                            "middle_name": None,
                            "suffix_name": "Jr.",
                        },
                        {"type": "company", "name": "Acme Holdings Llc"},
                    ],
                },
            },
            "invalid_owners": [{"raw": "MARY A", "reason": "insufficient_name_parts"}],
        }

    def test_output_is_json_serializable(self):
        report = _run({"property_id": 7, "current_owners": ["Dr John Smith"]})
        data = json.loads(json.dumps(report.to_output()))
        assert data["property_7"]["owners_by_date"]["current"][0]["prefix_name"] == "Dr."


# ═══════════════════════════════════════════════════════════════════════
# HARD ERRORS
# ═══════════════════════════════════════════════════════════════════════


class TestHardErrors:
    @pytest.mark.parametrize("property_id", [None, "", "   "])
    def test_missing_property_id(self, property_id):
        with pytest.raises(MissingPropertyIdentifierError) as exc:
            _run({"property_id": property_id, "current_owners": ["SMITH JOHN"]})
        assert exc.value.to_error_object() == {
            "type": "error",
            "message": "Source document has no property identifier",
            "path": "property_id",
        }

    def test_transaction_without_grantee(self):
        with pytest.raises(MalformedSourceError) as exc:
            JsonCandidateSource({"property_id": "1", "transactions": [{"date": "x"}]})
        assert exc.value.path == "transactions.0.grantee"
        assert exc.value.code == "MALFORMED_SOURCE"

    def test_owners_not_a_list(self):
        with pytest.raises(MalformedSourceError) as exc:
            JsonCandidateSource({"property_id": "1", "current_owners": "SMITH JOHN"})
        assert exc.value.path == "current_owners"

    def test_invalid_json_file(self, tmp_path):
        path = tmp_path / "parcel.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(MalformedSourceError) as exc:
            JsonCandidateSource.from_file(path)
        assert exc.value.path == str(path)


# ═══════════════════════════════════════════════════════════════════════
# CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════


class TestConfiguration:
    def test_default_profile(self):
        assert load_config().name_order is NameOrder.AUTO_CONSERVATIVE

    def test_named_profile(self):
        assert load_config(profile="roll_format").name_order is NameOrder.LAST_FIRST

    def test_unknown_profile(self):
        with pytest.raises(KeyError):
            load_config(profile="nope")

    def test_profile_from_env(self, monkeypatch):
        monkeypatch.setenv("OWNER_RESOLVER_PROFILE", "free_text")
        assert load_config().name_order is NameOrder.FIRST_LAST

    def test_name_order_env_wins(self, monkeypatch):
        monkeypatch.setenv("OWNER_RESOLVER_NAME_ORDER", "last_first")
        assert load_config(profile="free_text").name_order is NameOrder.LAST_FIRST

    def test_override_file(self, tmp_path):
        path = tmp_path / "resolver.json"
        path.write_text(json.dumps({"company_keywords": ["ACRES"]}), encoding="utf-8")
        config = load_config(path)
        assert config.company_keywords == ("ACRES",)
        assert _current("MOUNTAIN VIEW ACRES", config=config) == [
            Company(name="Mountain View Acres")
        ]

    def test_bad_override_value(self, tmp_path):
        path = tmp_path / "resolver.json"
        path.write_text(json.dumps({"name_order": "sideways"}), encoding="utf-8")
        with pytest.raises(ValidationError):
            load_config(path)

    def test_config_is_frozen(self):
        with pytest.raises(ValidationError):
            load_config().name_order = NameOrder.LAST_FIRST

    def test_digit_company_profile(self):
        assert _invalid("LOT 7") == [("LOT 7", InvalidReason.FIRST_NAME_PATTERN_MISMATCH)]
        config = load_config(profile="roll_format_digit_company")
        assert _current("LOT 7", config=config) == [Company(name="Lot 7")]


# ═══════════════════════════════════════════════════════════════════════
# LLM CLASSIFIER (MOCKED)
# ═══════════════════════════════════════════════════════════════════════


class TestLLMClassifier:
    def test_no_api_key_returns_none(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        assert classify_with_llm("MOUNTAIN VIEW ACRES") is None

    def test_keyword_classifier_by_default(self):
        assert isinstance(build_classifier(load_config()), KeywordClassifier)

    def test_env_flag_enables_llm(self, monkeypatch):
        monkeypatch.setenv("OWNER_RESOLVER_LLM_CLASSIFIER", "1")
        assert isinstance(build_classifier(load_config()), LLMOwnerClassifier)

    def test_llm_verdict_used_for_non_companies(self):
        with patch(
            "owner_resolver.classifier_llm.classify_with_llm",
            return_value=Classification.COMPANY,
        ):
            report = _run(
                {"property_id": "1", "current_owners": ["MOUNTAIN VIEW ACRES"]},
                classifier=LLMOwnerClassifier(),
            )
        assert report.current_owners == [Company(name="Mountain View Acres")]

    def test_keyword_company_never_consults_llm(self):
        with patch("owner_resolver.classifier_llm.classify_with_llm") as mock_llm:
            verdict = LLMOwnerClassifier().classify("ACME HOLDINGS LLC")
        assert verdict is Classification.COMPANY
        mock_llm.assert_not_called()

    def test_llm_failure_falls_back_to_keywords(self):
        assert LLMOwnerClassifier().classify("SMITH JOHN") is Classification.PERSON


# ═══════════════════════════════════════════════════════════════════════
# CLI
# ═══════════════════════════════════════════════════════════════════════


class TestCommandLine:
    def test_sample_document(self, capsys):
        assert main.main([]) == 0
        data = json.loads(capsys.readouterr().out)
        timeline = data["property_12-34-56-7890-0010"]["owners_by_date"]
        assert list(timeline) == ["2004-07-01", "2019-03-15", "unknown_date_1", "current"]
        assert timeline["current"] == [
            {"type": "person", "first_name": "John", "last_name": "Smith", "middle_name": "A"},
            {"type": "person", "first_name": "Mary", "last_name": "Smith", "middle_name": "B"},
        ]
        assert {"raw": "123 MAIN ST", "reason": "address_or_noise"} in data["invalid_owners"]

    def test_missing_property_id_exit_code(self, tmp_path, capsys):
        path = tmp_path / "parcel.json"
        path.write_text(json.dumps({"current_owners": ["SMITH JOHN"]}), encoding="utf-8")
        assert main.main([str(path)]) == 1
        error = json.loads(capsys.readouterr().err)
        assert error["type"] == "error"
        assert error["path"] == "property_id"

    def test_missing_file_exit_code(self, tmp_path, capsys):
        assert main.main([str(tmp_path / "nope.json")]) == 1
        assert json.loads(capsys.readouterr().err)["type"] == "error"

    def test_summary_output(self, capsys):
        assert main.main(["--summary"]) == 0
        assert "OWNERSHIP TIMELINE" in capsys.readouterr().out

    def test_unknown_profile_from_env(self, monkeypatch, capsys):
        monkeypatch.setenv("OWNER_RESOLVER_PROFILE", "nope")
        assert main.main([]) == 1
        error = json.loads(capsys.readouterr().err)
        assert error["type"] == "error"
        assert error["path"] == "profile"
        assert "nope" in error["message"]

    def test_config_file_not_json(self, tmp_path, capsys):
        path = tmp_path / "resolver.json"
        path.write_text("{not json", encoding="utf-8")
        assert main.main(["--config", str(path)]) == 1
        error = json.loads(capsys.readouterr().err)
        assert error["path"] == str(path)
        assert error["message"].startswith("Invalid resolver config")

    def test_config_file_bad_value(self, tmp_path, capsys):
        path = tmp_path / "resolver.json"
        path.write_text(json.dumps({"name_order": "sideways"}), encoding="utf-8")
        assert main.main(["--config", str(path)]) == 1
        assert json.loads(capsys.readouterr().err)["path"] == str(path)
