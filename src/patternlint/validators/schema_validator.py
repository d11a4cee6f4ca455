"""Schema validator for pattern metadata headers.

Checks every header against the catalog's JSON Schema, and reports the
catalog-level problems that make a header unusable: unparseable front
matter and ids shared by more than one record.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import jsonschema
from jsonschema.validators import validator_for

from patternlint.catalog import Catalog, PatternRecord
from patternlint.rules import RuleSet, SchemaDefinition
from patternlint.validators.base import (
    BaseValidator,
    ValidationIssue,
    ValidatorResult,
    result_from_issues,
)


@dataclass(frozen=True)
class SchemaError:
    """One schema violation.

    Attributes:
        path: JSON path of the offending value ("$" for the header itself).
        message: Validator message.
    """

    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


def _json_path(error: jsonschema.ValidationError) -> str:
    path = "$"
    for part in error.absolute_path:
        path += f"[{part}]" if isinstance(part, int) else f".{part}"
    return path


class SchemaChecker:
    """Applies a JSON Schema document to parsed headers."""

    def __init__(self, schema: SchemaDefinition) -> None:
        validator_class = validator_for(schema.document, default=jsonschema.Draft202012Validator)
        self._validator = validator_class(schema.document)

    def check_header(self, header: dict[str, Any]) -> list[SchemaError]:
        """Validate a header and collect every violation.

        Never raises for header content. Errors are ordered by JSON path so
        output is stable between runs.
        """
        errors = [
            SchemaError(path=_json_path(error), message=error.message)
            for error in self._validator.iter_errors(header)
        ]
        return sorted(errors, key=lambda error: (error.path, error.message))


class SchemaValidator(BaseValidator):
    """Validates headers, front matter syntax and id uniqueness.

    Checks:
    - front_matter: the header could not be parsed
    - schema: the header violates the JSON Schema
    - duplicate_id: another record carries the same id
    """

    name = "schema-validator"

    def __init__(self, catalog: Catalog, rules: RuleSet) -> None:
        super().__init__(catalog, rules)
        self.checker = SchemaChecker(rules.schema)

    def validate(self) -> ValidatorResult:
        issues: list[ValidationIssue] = []

        for record in self.catalog:
            issues.extend(self._check_record(record))

        issues.extend(self._check_duplicate_ids())

        return result_from_issues(self.name, issues, len(self.catalog))

    def _check_record(self, record: PatternRecord) -> list[ValidationIssue]:
        if record.parse_error is not None:
            return [
                ValidationIssue.for_record(
                    record,
                    "front_matter",
                    "error",
                    f"Cannot parse front matter: {record.parse_error.reason}",
                    line=record.parse_error.line,
                )
            ]

        return [
            ValidationIssue.for_record(record, "schema", "error", str(error))
            for error in self.checker.check_header(record.header)
        ]

    def _check_duplicate_ids(self) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []

        for record_id, records in sorted(self.catalog.duplicate_ids().items()):
            paths = [record.rel_path for record in records]
            for record in records:
                others = ", ".join(path for path in paths if path != record.rel_path)
                issues.append(
                    ValidationIssue.for_record(
                        record,
                        "duplicate_id",
                        "error",
                        f"Duplicate id '{record_id}' also used by: {others}",
                    )
                )

        return issues
