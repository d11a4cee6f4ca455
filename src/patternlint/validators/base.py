"""Base validator classes and models for the pattern validation framework.

Provides core abstractions for implementing validators that check pattern
records against the declarative rule tables.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Literal

from patternlint.catalog import Catalog, PatternRecord
from patternlint.rules import RuleSet

Severity = Literal["error", "warning", "info"]


@dataclass
class ValidationIssue:
    """A single finding attributed to one pattern record.

    Attributes:
        file: Record path relative to the catalog root.
        check: Name of the check that produced the issue (e.g., "schema").
        severity: "error" fails the run; "warning" and "info" are advisory.
        message: Human-readable description of the issue.
        pattern_id: Record id, when the record has one.
        line: Optional line number within the file.
    """

    file: str
    check: str
    severity: Severity
    message: str
    pattern_id: str | None = None
    line: int | None = None

    @classmethod
    def for_record(
        cls,
        record: PatternRecord,
        check: str,
        severity: Severity,
        message: str,
        line: int | None = None,
    ) -> ValidationIssue:
        """Create an issue attributed to a record."""
        return cls(
            file=record.rel_path,
            check=check,
            severity=severity,
            message=message,
            pattern_id=record.id,
            line=line,
        )

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON output."""
        return {
            "file": self.file,
            "id": self.pattern_id,
            "check": self.check,
            "severity": self.severity,
            "message": self.message,
            "line": self.line,
        }


@dataclass
class ValidatorResult:
    """Result of a single validator run.

    Attributes:
        name: Name of the validator (e.g., "schema-validator").
        status: Overall status ("pass" or "fail").
        issues: List of validation issues found.
        records_checked: Number of records examined.
    """

    name: str
    status: Literal["pass", "fail"]
    issues: list[ValidationIssue]
    records_checked: int


def result_from_issues(
    name: str, issues: list[ValidationIssue], records_checked: int
) -> ValidatorResult:
    """Build a result that fails when any issue is an error."""
    has_errors = any(issue.severity == "error" for issue in issues)
    status: Literal["pass", "fail"] = "fail" if has_errors else "pass"
    return ValidatorResult(
        name=name,
        status=status,
        issues=issues,
        records_checked=records_checked,
    )


class BaseValidator(ABC):
    """Abstract base class for all validators.

    Attributes:
        catalog: The fully loaded catalog under validation.
        rules: Rule tables for this run.
    """

    name: str = "validator"

    def __init__(self, catalog: Catalog, rules: RuleSet) -> None:
        """Initialize validator.

        Args:
            catalog: The fully loaded catalog.
            rules: Rule tables for this run.
        """
        self.catalog = catalog
        self.rules = rules

    @abstractmethod
    def validate(self) -> ValidatorResult:
        """Run validation checks.

        Must be implemented by subclasses to perform specific validation logic.

        Returns:
            ValidatorResult containing the validation outcome and any issues found.
        """
