"""Declarative rule tables for catalog validation.

Four rule files drive the engine, all read from the catalog root:

- ``schema/pattern.schema.json``: JSON Schema for the metadata header
- ``rules/lifecycle.json``: requirements for validated records
- ``rules/sanitization.json``: named block/warn regex detectors
- ``rules/gatekeeper.json``: similarity thresholds

A missing file falls back to the default bundled in ``patternlint.data``.
Tables are loaded once, frozen, and passed explicitly to each validator.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any

import jsonschema
from jsonschema.validators import validator_for

logger = logging.getLogger(__name__)

LIFECYCLE_FILE = "lifecycle.json"
SANITIZATION_FILE = "sanitization.json"
GATEKEEPER_FILE = "gatekeeper.json"
SCHEMA_FILE = "pattern.schema.json"

DEFAULT_MIN_TAG_OVERLAP = 3
DEFAULT_TITLE_RATIO_THRESHOLD = 0.70

# JavaScript-style regex flag letters used by rule files
_REGEX_FLAGS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "g": 0,
    "u": 0,
}


class RulesError(Exception):
    """Raised when a rule file is missing, malformed, or inconsistent."""


# -----------------------------------------------------------------------------
# Rule Tables
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class SchemaDefinition:
    """JSON Schema document for pattern metadata headers.

    Attributes:
        document: The parsed JSON Schema.
        source: Where the schema was loaded from (path or bundled name).
    """

    document: dict[str, Any]
    source: str = "bundled"


@dataclass(frozen=True)
class LifecyclePolicy:
    """Requirements enforced on records with ``status: validated``.

    Attributes:
        required_sections_by_type: Level-2 headings required per record type.
        min_body_chars: Minimum trimmed body length.
        required_front_matter_fields: Header fields that must be non-empty.
    """

    required_sections_by_type: dict[str, tuple[str, ...]] = field(default_factory=dict)
    min_body_chars: int = 0
    required_front_matter_fields: tuple[str, ...] = ()

    def required_sections(self, pattern_type: str | None) -> tuple[str, ...]:
        """Return required section headings for a record type."""
        if pattern_type is None:
            return ()
        return self.required_sections_by_type.get(pattern_type, ())

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LifecyclePolicy:
        """Build a policy from the ``lifecycle.json`` layout.

        Raises:
            RulesError: If the layout is malformed.
        """
        requirements = data.get("validated_requirements") or {}
        if not isinstance(requirements, dict):
            raise RulesError("validated_requirements must be an object")

        sections = requirements.get("required_sections_by_type") or {}
        if not isinstance(sections, dict) or not all(
            isinstance(v, list) and all(isinstance(s, str) for s in v) for v in sections.values()
        ):
            raise RulesError("required_sections_by_type must map types to lists of headings")

        min_chars = requirements.get("min_body_chars", 0)
        if not isinstance(min_chars, int) or isinstance(min_chars, bool) or min_chars < 0:
            raise RulesError("min_body_chars must be a non-negative integer")

        fields = requirements.get("required_front_matter_fields") or []
        if not isinstance(fields, list) or not all(isinstance(f, str) for f in fields):
            raise RulesError("required_front_matter_fields must be a list of field names")

        return cls(
            required_sections_by_type={k: tuple(v) for k, v in sections.items()},
            min_body_chars=min_chars,
            required_front_matter_fields=tuple(fields),
        )


@dataclass(frozen=True)
class SanitizationRule:
    """A named regex detector.

    Attributes:
        name: Rule name reported on a match.
        pattern: Compiled regular expression.
    """

    name: str
    pattern: re.Pattern[str]

    def matches(self, text: str) -> bool:
        """Check whether the rule matches anywhere in the text."""
        return self.pattern.search(text) is not None


def _compile_flags(flags: str, rule_name: str) -> int:
    compiled = 0
    for letter in flags:
        if letter not in _REGEX_FLAGS:
            raise RulesError(f"Unsupported regex flag '{letter}' in rule '{rule_name}'")
        compiled |= _REGEX_FLAGS[letter]
    return compiled


def _compile_rule(entry: Any, group: str) -> SanitizationRule:
    if not isinstance(entry, dict) or "name" not in entry or "regex" not in entry:
        raise RulesError(f"Each {group} rule needs 'name' and 'regex': {entry!r}")

    name = str(entry["name"])
    flags = _compile_flags(str(entry.get("flags") or ""), name)
    try:
        pattern = re.compile(str(entry["regex"]), flags)
    except re.error as e:
        raise RulesError(f"Invalid regex in {group} rule '{name}': {e}") from e

    return SanitizationRule(name=name, pattern=pattern)


@dataclass(frozen=True)
class SanitizationRuleSet:
    """Block and warn detectors for secrets, internal references and PII.

    Attributes:
        block: Rules whose match is a hard failure.
        warn: Rules whose match is reported only.
    """

    block: tuple[SanitizationRule, ...] = ()
    warn: tuple[SanitizationRule, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SanitizationRuleSet:
        """Build a rule set from the ``sanitization.json`` layout.

        Raises:
            RulesError: If a rule is malformed or its regex does not compile.
        """
        groups: dict[str, tuple[SanitizationRule, ...]] = {}
        for group in ("block", "warn"):
            entries = data.get(group) or []
            if not isinstance(entries, list):
                raise RulesError(f"'{group}' must be a list of rules")
            groups[group] = tuple(_compile_rule(entry, group) for entry in entries)
        return cls(block=groups["block"], warn=groups["warn"])


@dataclass(frozen=True)
class SimilarityPolicy:
    """Thresholds for near-duplicate detection.

    Attributes:
        min_tag_overlap: Shared tags needed (within one domain) to flag a pair.
        title_ratio_threshold: Title similarity ratio that flags a pair alone.
    """

    min_tag_overlap: int = DEFAULT_MIN_TAG_OVERLAP
    title_ratio_threshold: float = DEFAULT_TITLE_RATIO_THRESHOLD

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SimilarityPolicy:
        """Build a policy from the ``gatekeeper.json`` layout.

        Raises:
            RulesError: If a threshold has the wrong type or range.
        """
        triggers = data.get("similarity_triggers_consolidate") or {}
        if not isinstance(triggers, dict):
            raise RulesError("similarity_triggers_consolidate must be an object")
        overlap_rule = triggers.get("same_domain_and_tag_overlap") or {}
        if not isinstance(overlap_rule, dict):
            raise RulesError("same_domain_and_tag_overlap must be an object")
        min_overlap = overlap_rule.get("min_tag_overlap", DEFAULT_MIN_TAG_OVERLAP)
        threshold = triggers.get("or_title_levenshtein_ratio", DEFAULT_TITLE_RATIO_THRESHOLD)

        if not isinstance(min_overlap, int) or isinstance(min_overlap, bool) or min_overlap < 0:
            raise RulesError("min_tag_overlap must be a non-negative integer")
        if isinstance(threshold, bool) or not isinstance(threshold, (int, float)):
            raise RulesError("or_title_levenshtein_ratio must be a number")
        if not 0 <= threshold <= 1:
            raise RulesError("or_title_levenshtein_ratio must be between 0 and 1")

        return cls(min_tag_overlap=min_overlap, title_ratio_threshold=float(threshold))


@dataclass(frozen=True)
class RuleSet:
    """All rule tables for one engine run."""

    schema: SchemaDefinition
    lifecycle: LifecyclePolicy
    sanitization: SanitizationRuleSet
    similarity: SimilarityPolicy


# -----------------------------------------------------------------------------
# Loading
# -----------------------------------------------------------------------------


def read_bundled(name: str) -> str:
    """Read a default rule file bundled with the package.

    Raises:
        RulesError: If the resource is missing.
    """
    try:
        return resources.files("patternlint.data").joinpath(name).read_text(encoding="utf-8")
    except (FileNotFoundError, ModuleNotFoundError) as e:
        raise RulesError(f"Bundled rule file not found: {name}") from e


def _load_json(path: Path, bundled_name: str) -> tuple[dict[str, Any], str]:
    """Load a rule file, falling back to the bundled default.

    Returns:
        Tuple of (parsed object, source description).

    Raises:
        RulesError: If the file cannot be read or is not a JSON object.
    """
    if path.is_file():
        source = str(path)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise RulesError(f"Cannot read rule file {path}: {e}") from e
    else:
        logger.info("Rule file %s not found, using bundled %s", path, bundled_name)
        source = f"bundled:{bundled_name}"
        text = read_bundled(bundled_name)

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise RulesError(f"Invalid JSON in {source}: {e}") from e

    if not isinstance(data, dict):
        raise RulesError(f"Rule file {source} must contain a JSON object")

    return data, source


def load_schema(path: Path) -> SchemaDefinition:
    """Load and check the metadata JSON Schema.

    Raises:
        RulesError: If the file is unreadable or not a valid JSON Schema.
    """
    document, source = _load_json(path, SCHEMA_FILE)
    validator_class = validator_for(document, default=jsonschema.Draft202012Validator)
    try:
        validator_class.check_schema(document)
    except jsonschema.SchemaError as e:
        raise RulesError(f"Invalid JSON Schema in {source}: {e.message}") from e
    return SchemaDefinition(document=document, source=source)


def _wrap(source: str, error: RulesError) -> RulesError:
    return RulesError(f"{source}: {error}")


def load_rules(
    root: Path,
    schema_path: str = f"schema/{SCHEMA_FILE}",
    rules_dir: str = "rules",
) -> RuleSet:
    """Load every rule table for a catalog root.

    Args:
        root: Catalog root directory.
        schema_path: Schema file path relative to the root.
        rules_dir: Rules directory relative to the root.

    Returns:
        Frozen RuleSet.

    Raises:
        RulesError: If any rule file is malformed.
    """
    rules_path = root / rules_dir
    schema = load_schema(root / schema_path)

    lifecycle_data, lifecycle_source = _load_json(rules_path / LIFECYCLE_FILE, LIFECYCLE_FILE)
    sanitization_data, sanitization_source = _load_json(
        rules_path / SANITIZATION_FILE, SANITIZATION_FILE
    )
    gatekeeper_data, gatekeeper_source = _load_json(rules_path / GATEKEEPER_FILE, GATEKEEPER_FILE)

    try:
        lifecycle = LifecyclePolicy.from_dict(lifecycle_data)
    except RulesError as e:
        raise _wrap(lifecycle_source, e) from e
    try:
        sanitization = SanitizationRuleSet.from_dict(sanitization_data)
    except RulesError as e:
        raise _wrap(sanitization_source, e) from e
    try:
        similarity = SimilarityPolicy.from_dict(gatekeeper_data)
    except RulesError as e:
        raise _wrap(gatekeeper_source, e) from e

    logger.debug(
        "Loaded rules: %d block, %d warn sanitization rules; schema from %s",
        len(sanitization.block),
        len(sanitization.warn),
        schema.source,
    )

    return RuleSet(
        schema=schema,
        lifecycle=lifecycle,
        sanitization=sanitization,
        similarity=similarity,
    )


def load_sanitization_rules(root: Path, rules_dir: str = "rules") -> SanitizationRuleSet:
    """Load only the sanitization rules (for the standalone scan).

    Raises:
        RulesError: If the rule file is malformed.
    """
    data, source = _load_json(root / rules_dir / SANITIZATION_FILE, SANITIZATION_FILE)
    try:
        return SanitizationRuleSet.from_dict(data)
    except RulesError as e:
        raise _wrap(source, e) from e
