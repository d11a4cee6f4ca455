"""Validation runner for orchestrating all validators.

Provides a unified interface to run validators over one loaded catalog and
aggregate their results. Validators run sequentially, in declaration order,
so reports are stable between runs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal

from patternlint.catalog import Catalog
from patternlint.rules import RuleSet
from patternlint.validators.base import BaseValidator, ValidationIssue, ValidatorResult
from patternlint.validators.lifecycle_auditor import LifecycleAuditor
from patternlint.validators.sanitization import SanitizationValidator
from patternlint.validators.schema_validator import SchemaValidator
from patternlint.validators.similarity import SimilarityDetector

logger = logging.getLogger(__name__)


@dataclass
class AggregatedResult:
    """Aggregated results from running multiple validators.

    Attributes:
        status: Overall status ("pass" if all validators pass, "fail" otherwise).
        validators_run: Number of validators executed.
        total_issues: Total number of issues across all validators.
        errors: Number of error-severity issues.
        warnings: Number of warning-severity issues.
        infos: Number of info-severity issues.
        results: Individual results from each validator.
        all_issues: Flattened list of all issues from all validators.
    """

    status: Literal["pass", "fail"]
    validators_run: int
    total_issues: int
    errors: int
    warnings: int
    infos: int
    results: list[ValidatorResult]
    all_issues: list[ValidationIssue]

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON output."""
        return {
            "status": self.status,
            "validators_run": self.validators_run,
            "summary": {
                "total_issues": self.total_issues,
                "errors": self.errors,
                "warnings": self.warnings,
                "infos": self.infos,
            },
            "validators": [
                {
                    "name": result.name,
                    "status": result.status,
                    "records_checked": result.records_checked,
                    "issue_count": len(result.issues),
                }
                for result in self.results
            ],
            "issues": [issue.to_dict() for issue in self.all_issues],
        }


class ValidationRunner:
    """Orchestrates running validators over a loaded catalog.

    Supports:
    - Running the full ``validate`` pipeline
    - Running specific validators by name (``sanitize-scan`` runs one)
    """

    # Available validator classes
    VALIDATORS: dict[str, type[BaseValidator]] = {
        "schema": SchemaValidator,
        "sanitization": SanitizationValidator,
        "lifecycle": LifecycleAuditor,
        "similarity": SimilarityDetector,
    }

    # Pipeline order for ``validate``
    DEFAULT_VALIDATORS = ["schema", "sanitization", "lifecycle", "similarity"]

    def __init__(self, catalog: Catalog, rules: RuleSet) -> None:
        """Initialize validation runner.

        Args:
            catalog: The fully loaded catalog.
            rules: Rule tables for this run.
        """
        self.catalog = catalog
        self.rules = rules

    def run_all(self) -> AggregatedResult:
        """Run every validator in pipeline order."""
        return self.run_validators(self.DEFAULT_VALIDATORS)

    def run_validators(self, validator_names: list[str]) -> AggregatedResult:
        """Run specific validators by name.

        Unknown names are skipped.

        Args:
            validator_names: List of validator names to run.

        Returns:
            AggregatedResult with combined outcomes.
        """
        valid_names = [name for name in validator_names if name in self.VALIDATORS]
        for name in validator_names:
            if name not in self.VALIDATORS:
                logger.warning("Unknown validator skipped: %s", name)

        results = [self._run_one(name) for name in valid_names]
        return self.aggregate(results)

    def _run_one(self, name: str) -> ValidatorResult:
        """Run one validator, converting a crash into an error result."""
        logger.debug("Running validator %s over %d records", name, len(self.catalog))
        try:
            validator = self.VALIDATORS[name](self.catalog, self.rules)
            return validator.validate()
        except Exception as e:
            logger.exception("Validator %s failed", name)
            return ValidatorResult(
                name=name,
                status="fail",
                issues=[
                    ValidationIssue(
                        file="",
                        check="validator_error",
                        severity="error",
                        message=f"Validator failed: {e!s}",
                    )
                ],
                records_checked=0,
            )

    @staticmethod
    def aggregate(results: list[ValidatorResult]) -> AggregatedResult:
        """Aggregate results from multiple validators.

        Args:
            results: List of validator results.

        Returns:
            AggregatedResult with combined statistics.
        """
        all_issues: list[ValidationIssue] = []
        for result in results:
            all_issues.extend(result.issues)

        errors = sum(1 for issue in all_issues if issue.severity == "error")
        warnings = sum(1 for issue in all_issues if issue.severity == "warning")
        infos = sum(1 for issue in all_issues if issue.severity == "info")

        status: Literal["pass", "fail"] = (
            "fail" if any(r.status == "fail" for r in results) else "pass"
        )

        return AggregatedResult(
            status=status,
            validators_run=len(results),
            total_issues=len(all_issues),
            errors=errors,
            warnings=warnings,
            infos=infos,
            results=results,
            all_issues=all_issues,
        )
