"""Lifecycle and structural auditing for pattern records.

Records move through ``draft -> validated -> deprecated``. The state is
observed on every run and never enforced; only ``validated`` records are
held to the structural requirements of the lifecycle policy.
"""

from __future__ import annotations

from patternlint.catalog import PatternRecord
from patternlint.validators.base import (
    BaseValidator,
    ValidationIssue,
    ValidatorResult,
    result_from_issues,
)
from patternlint.validators.markdown_parser import MarkdownParser

STATUS_VALIDATED = "validated"
STATUS_DEPRECATED = "deprecated"


class LifecycleAuditor(BaseValidator):
    """Audits structure of validated records and hygiene of deprecated ones.

    Checks for validated records (errors):
    - missing_section: a required level-2 heading for the record type is absent
    - body_too_short: trimmed body is shorter than the policy minimum
    - missing_field: a required header field is absent or empty

    Checks for any record (warnings):
    - missing_deprecated_date: deprecated record without ``deprecated_date``
    - unresolved_superseded_by: ``superseded_by`` names an unknown id
    """

    name = "lifecycle-auditor"

    def validate(self) -> ValidatorResult:
        issues: list[ValidationIssue] = []

        for record in self.catalog:
            if record.status == STATUS_VALIDATED:
                issues.extend(self.check_structure(record))
            issues.extend(self._check_deprecation(record))

        return result_from_issues(self.name, issues, len(self.catalog))

    def check_structure(self, record: PatternRecord) -> list[ValidationIssue]:
        """Return one issue per structural requirement the record misses."""
        policy = self.rules.lifecycle
        issues: list[ValidationIssue] = []

        for heading in policy.required_sections(record.type):
            if not MarkdownParser.has_section(record.body, heading):
                issues.append(
                    ValidationIssue.for_record(
                        record,
                        "missing_section",
                        "error",
                        f"Missing required section '## {heading}' for type '{record.type}'",
                    )
                )

        length = MarkdownParser.body_length(record.body)
        if length < policy.min_body_chars:
            issues.append(
                ValidationIssue.for_record(
                    record,
                    "body_too_short",
                    "error",
                    f"Body is {length} characters, minimum is {policy.min_body_chars}",
                )
            )

        for field_name in policy.required_front_matter_fields:
            if not record.has_value(field_name):
                issues.append(
                    ValidationIssue.for_record(
                        record,
                        "missing_field",
                        "error",
                        f"Validated pattern requires non-empty '{field_name}'",
                    )
                )

        return issues

    def _check_deprecation(self, record: PatternRecord) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []

        if record.status == STATUS_DEPRECATED and record.deprecated_date is None:
            issues.append(
                ValidationIssue.for_record(
                    record,
                    "missing_deprecated_date",
                    "warning",
                    "Deprecated pattern has no 'deprecated_date'",
                )
            )

        successor = record.superseded_by
        if successor is not None and successor not in self.catalog:
            issues.append(
                ValidationIssue.for_record(
                    record,
                    "unresolved_superseded_by",
                    "warning",
                    f"superseded_by references unknown pattern '{successor}'",
                )
            )

        return issues
