"""Tests for rule table loading."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path

import pytest

from patternlint.rules import (
    LifecyclePolicy,
    RulesError,
    SanitizationRuleSet,
    SimilarityPolicy,
    load_rules,
    load_sanitization_rules,
    load_schema,
)


def _write_json(path: Path, data: object) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")


class TestBundledDefaults:
    """Tests for falling back to bundled rule files."""

    def test_load_rules_without_rule_files(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test every table falls back to the bundled default."""
        with caplog.at_level(logging.INFO, logger="patternlint.rules"):
            rules = load_rules(tmp_path)

        assert rules.schema.source == "bundled:pattern.schema.json"
        assert rules.lifecycle.min_body_chars == 400
        assert rules.lifecycle.required_sections("troubleshooting")[0] == "Context"
        assert rules.similarity == SimilarityPolicy(min_tag_overlap=3, title_ratio_threshold=0.7)
        assert {rule.name for rule in rules.sanitization.block} >= {
            "aws_access_key_id",
            "generic_secret_assignment",
        }
        assert "not found, using bundled" in caplog.text

    def test_catalog_files_take_precedence(self, tmp_path: Path) -> None:
        """Test rule files under the catalog root override the defaults."""
        _write_json(
            tmp_path / "rules" / "gatekeeper.json",
            {
                "similarity_triggers_consolidate": {
                    "same_domain_and_tag_overlap": {"min_tag_overlap": 2},
                    "or_title_levenshtein_ratio": 0.9,
                }
            },
        )

        rules = load_rules(tmp_path)

        assert rules.similarity.min_tag_overlap == 2
        assert rules.similarity.title_ratio_threshold == 0.9


class TestLifecyclePolicy:
    """Tests for LifecyclePolicy.from_dict."""

    def test_unknown_type_has_no_sections(self) -> None:
        """Test types without an entry require no sections."""
        policy = LifecyclePolicy.from_dict(
            {"validated_requirements": {"required_sections_by_type": {"other": ["Context"]}}}
        )
        assert policy.required_sections("other") == ("Context",)
        assert policy.required_sections("howto") == ()
        assert policy.required_sections(None) == ()

    def test_negative_min_body_chars(self) -> None:
        """Test a negative minimum length is rejected."""
        with pytest.raises(RulesError, match="min_body_chars"):
            LifecyclePolicy.from_dict({"validated_requirements": {"min_body_chars": -1}})


class TestSanitizationRuleSet:
    """Tests for SanitizationRuleSet.from_dict."""

    def test_flags_translated(self) -> None:
        """Test JavaScript-style flags map to Python regex flags."""
        rule_set = SanitizationRuleSet.from_dict(
            {"block": [{"name": "host", "regex": "corp\\.example", "flags": "gi"}]}
        )
        rule = rule_set.block[0]
        assert rule.pattern.flags & re.IGNORECASE
        assert rule.matches("see CORP.EXAMPLE for details")
        assert rule_set.warn == ()

    def test_unsupported_flag(self) -> None:
        """Test an unknown flag letter is a rule error."""
        with pytest.raises(RulesError, match="Unsupported regex flag 'y'"):
            SanitizationRuleSet.from_dict({"warn": [{"name": "x", "regex": "a", "flags": "y"}]})

    def test_invalid_regex(self) -> None:
        """Test a regex that does not compile is a rule error."""
        with pytest.raises(RulesError, match="Invalid regex"):
            SanitizationRuleSet.from_dict({"block": [{"name": "x", "regex": "("}]})

    def test_missing_name(self) -> None:
        """Test each rule needs a name and regex."""
        with pytest.raises(RulesError, match="needs 'name' and 'regex'"):
            SanitizationRuleSet.from_dict({"block": [{"regex": "a"}]})

    def test_load_sanitization_rules_reports_source(self, tmp_path: Path) -> None:
        """Test errors name the offending rule file."""
        path = tmp_path / "rules" / "sanitization.json"
        _write_json(path, {"block": [{"name": "x", "regex": "["}]})
        with pytest.raises(RulesError, match="sanitization.json"):
            load_sanitization_rules(tmp_path)


class TestSimilarityPolicy:
    """Tests for SimilarityPolicy.from_dict."""

    def test_defaults_when_empty(self) -> None:
        """Test missing thresholds use the defaults."""
        policy = SimilarityPolicy.from_dict({})
        assert policy.min_tag_overlap == 3
        assert policy.title_ratio_threshold == 0.7

    @pytest.mark.parametrize("ratio", [1.5, -0.1, "high", True])
    def test_invalid_ratio(self, ratio: object) -> None:
        """Test the title ratio must be a number in [0, 1]."""
        with pytest.raises(RulesError):
            SimilarityPolicy.from_dict(
                {"similarity_triggers_consolidate": {"or_title_levenshtein_ratio": ratio}}
            )


class TestLoadSchema:
    """Tests for load_schema."""

    def test_invalid_json(self, tmp_path: Path) -> None:
        """Test a schema file that is not JSON is a rule error."""
        path = tmp_path / "schema.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(RulesError, match="Invalid JSON"):
            load_schema(path)

    def test_invalid_schema(self, tmp_path: Path) -> None:
        """Test a document that is not a valid JSON Schema is rejected."""
        path = tmp_path / "schema.json"
        _write_json(path, {"type": "no-such-type"})
        with pytest.raises(RulesError, match="Invalid JSON Schema"):
            load_schema(path)

    def test_non_object(self, tmp_path: Path) -> None:
        """Test a rule file must hold an object."""
        path = tmp_path / "schema.json"
        _write_json(path, ["a"])
        with pytest.raises(RulesError, match="must contain a JSON object"):
            load_schema(path)
