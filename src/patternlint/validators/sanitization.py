"""Sanitization scanning for secrets, internal references and PII.

The scanner works on raw document text (header and body together) and does
not depend on the front matter parser, so it also runs over files whose
header is broken.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from patternlint.catalog import PatternRecord
from patternlint.rules import SanitizationRule, SanitizationRuleSet
from patternlint.validators.base import (
    BaseValidator,
    ValidationIssue,
    ValidatorResult,
    result_from_issues,
)


@dataclass
class ScanResult:
    """Names of the rules that matched a document.

    Attributes:
        blocked: Block rules that matched (publication must stop).
        warned: Warn rules that matched (reported only).
    """

    blocked: list[str] = field(default_factory=list)
    warned: list[str] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not self.blocked and not self.warned


def first_match_line(rule: SanitizationRule, text: str) -> int | None:
    """Return the 1-based line of a rule's first match, if any."""
    match = rule.pattern.search(text)
    if match is None:
        return None
    return text.count("\n", 0, match.start()) + 1


class SanitizationScanner:
    """Runs block and warn rules over raw text.

    Each rule is evaluated independently; one document can trip several
    block and warn rules at once.
    """

    def __init__(self, rule_set: SanitizationRuleSet) -> None:
        self.rule_set = rule_set

    def scan(self, text: str) -> ScanResult:
        """Scan text against every rule.

        Args:
            text: Raw document text.

        Returns:
            ScanResult listing matching rule names in rule-file order.
        """
        return ScanResult(
            blocked=[rule.name for rule in self.rule_set.block if rule.matches(text)],
            warned=[rule.name for rule in self.rule_set.warn if rule.matches(text)],
        )


class SanitizationValidator(BaseValidator):
    """Reports sanitization matches for every record.

    Checks:
    - sanitize_block: a block rule matched (error)
    - sanitize_warn: a warn rule matched (warning)
    """

    name = "sanitization-scanner"

    def validate(self) -> ValidatorResult:
        scanner = SanitizationScanner(self.rules.sanitization)
        issues: list[ValidationIssue] = []

        for record in self.catalog:
            issues.extend(scan_record(scanner, record))

        return result_from_issues(self.name, issues, len(self.catalog))


def scan_record(scanner: SanitizationScanner, record: PatternRecord) -> list[ValidationIssue]:
    """Turn a record's scan result into issues."""
    result = scanner.scan(record.raw)
    if result.is_clean:
        return []

    block_rules = {rule.name: rule for rule in scanner.rule_set.block}
    warn_rules = {rule.name: rule for rule in scanner.rule_set.warn}
    issues: list[ValidationIssue] = []

    for name in result.blocked:
        issues.append(
            ValidationIssue.for_record(
                record,
                "sanitize_block",
                "error",
                f"Blocked content detected by rule '{name}'",
                line=first_match_line(block_rules[name], record.raw),
            )
        )
    for name in result.warned:
        issues.append(
            ValidationIssue.for_record(
                record,
                "sanitize_warn",
                "warning",
                f"Possible sensitive content detected by rule '{name}'",
                line=first_match_line(warn_rules[name], record.raw),
            )
        )

    return issues
