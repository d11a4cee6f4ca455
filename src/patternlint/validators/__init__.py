"""Validation framework for pattern catalogs.

Provides validators for checking metadata, sanitization, structure and
duplication across every record in a catalog.
"""

from __future__ import annotations

from patternlint.validators.base import (
    BaseValidator,
    Severity,
    ValidationIssue,
    ValidatorResult,
)
from patternlint.validators.lifecycle_auditor import LifecycleAuditor
from patternlint.validators.runner import AggregatedResult, ValidationRunner
from patternlint.validators.sanitization import (
    SanitizationScanner,
    SanitizationValidator,
    ScanResult,
)
from patternlint.validators.schema_validator import SchemaChecker, SchemaError, SchemaValidator
from patternlint.validators.similarity import SimilarityDetector

__all__ = [
    # Base types
    "BaseValidator",
    "Severity",
    "ValidationIssue",
    "ValidatorResult",
    # Validators
    "LifecycleAuditor",
    "SanitizationScanner",
    "SanitizationValidator",
    "ScanResult",
    "SchemaChecker",
    "SchemaError",
    "SchemaValidator",
    "SimilarityDetector",
    # Runner
    "AggregatedResult",
    "ValidationRunner",
]
