"""Staleness auditing for validated pattern records.

Flags three independent conditions across the whole catalog:

- Overdue reviews: validated records whose ``review_by`` date has passed
  (the only blocking condition)
- Stale verification: validated records whose ``last_verified`` date is
  older than a threshold
- Deprecated references: records whose ``related`` list points at a
  deprecated record

Dates are compared as calendar dates; malformed dates are treated as absent.
This module depends only on the standard library so the standalone auditor
and the full engine share the exact same rules.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from patternlint.catalog import PatternRecord
from patternlint.dates import days_since, is_before

DEFAULT_MAX_LAST_VERIFIED_DAYS = 90


@dataclass(frozen=True)
class OverdueReview:
    """A validated record past its review deadline."""

    id: str
    file: str
    review_by: str
    maintainers: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "review_by": self.review_by,
            "maintainers": list(self.maintainers),
            "file": self.file,
        }


@dataclass(frozen=True)
class StaleVerification:
    """A validated record whose last verification is too old."""

    id: str
    file: str
    last_verified: str
    days: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "last_verified": self.last_verified,
            "days": self.days,
            "file": self.file,
        }


@dataclass(frozen=True)
class DeprecatedReference:
    """A record that lists a deprecated record in ``related``."""

    id: str
    file: str
    references: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "references": self.references, "file": self.file}


@dataclass
class StalenessReport:
    """Outcome of a staleness audit.

    Attributes:
        today: Reference date the audit ran against.
        max_last_verified_days: Threshold used for stale verification.
        overdue: Blocking overdue reviews.
        stale_verification: Advisory last-verified warnings.
        deprecated_refs: Advisory references to deprecated records.
    """

    today: date
    max_last_verified_days: int
    overdue: list[OverdueReview] = field(default_factory=list)
    stale_verification: list[StaleVerification] = field(default_factory=list)
    deprecated_refs: list[DeprecatedReference] = field(default_factory=list)

    @property
    def blocking(self) -> bool:
        """True when any review is overdue."""
        return bool(self.overdue)

    def to_dict(self, generated_at: str) -> dict[str, Any]:
        """Serialize the report for JSON output.

        Args:
            generated_at: ISO timestamp of report generation.
        """
        return {
            "generated_at": generated_at,
            "today": self.today.isoformat(),
            "maxLastVerifiedDays": self.max_last_verified_days,
            "overdue": [entry.to_dict() for entry in self.overdue],
            "staleVerification": [entry.to_dict() for entry in self.stale_verification],
            "deprecatedRefs": [entry.to_dict() for entry in self.deprecated_refs],
        }


class StalenessAuditor:
    """Audits a loaded catalog for overdue and stale records.

    Records without an ``id`` are skipped by every check, since neither
    parser variant can attribute findings to them.
    """

    def __init__(self, max_last_verified_days: int = DEFAULT_MAX_LAST_VERIFIED_DAYS) -> None:
        """Initialize the auditor.

        Args:
            max_last_verified_days: Days after which ``last_verified`` is stale.

        Raises:
            ValueError: If the threshold is negative.
        """
        if max_last_verified_days < 0:
            raise ValueError("max_last_verified_days must be a non-negative integer")
        self.max_last_verified_days = max_last_verified_days

    def audit(self, records: Iterable[PatternRecord], today: date) -> StalenessReport:
        """Run all staleness checks.

        Args:
            records: Every record in the catalog (the whole corpus is needed
                to resolve deprecated references).
            today: Reference date.

        Returns:
            StalenessReport with the three finding lists.
        """
        identified = [record for record in records if record.id is not None]
        deprecated_ids = {record.id for record in identified if record.status == "deprecated"}

        report = StalenessReport(today=today, max_last_verified_days=self.max_last_verified_days)

        for record in identified:
            if record.status == "validated":
                self._check_review(record, today, report)
                self._check_verification(record, today, report)
            self._check_related(record, deprecated_ids, report)

        return report

    def _check_review(self, record: PatternRecord, today: date, report: StalenessReport) -> None:
        review_by = record.review_by
        if review_by is not None and is_before(review_by, today):
            report.overdue.append(
                OverdueReview(
                    id=record.label,
                    file=record.rel_path,
                    review_by=review_by,
                    maintainers=record.maintainers,
                )
            )

    def _check_verification(
        self, record: PatternRecord, today: date, report: StalenessReport
    ) -> None:
        last_verified = record.last_verified
        if last_verified is None:
            return
        age = days_since(last_verified, today)
        if age is not None and age > self.max_last_verified_days:
            report.stale_verification.append(
                StaleVerification(
                    id=record.label,
                    file=record.rel_path,
                    last_verified=last_verified,
                    days=age,
                )
            )

    def _check_related(
        self, record: PatternRecord, deprecated_ids: set[str | None], report: StalenessReport
    ) -> None:
        seen: set[str] = set()
        for related_id in record.related:
            if related_id in seen or related_id not in deprecated_ids:
                continue
            seen.add(related_id)
            report.deprecated_refs.append(
                DeprecatedReference(id=record.label, file=record.rel_path, references=related_id)
            )


def _render_section(title: str, lines: list[str]) -> list[str]:
    out = [f"## {title}"]
    out.extend(lines if lines else ["- None ✅"])
    out.append("")
    return out


def render_markdown(report: StalenessReport, catalog_label: str) -> str:
    """Render a staleness report as Markdown.

    Args:
        report: Audit outcome.
        catalog_label: Catalog path shown in the report header.

    Returns:
        Markdown text ending with a newline.
    """
    lines = [
        "# Pattern Staleness Report",
        "",
        f"- Date: {report.today.isoformat()}",
        f"- Catalog: {catalog_label}",
        f"- last_verified warning threshold: {report.max_last_verified_days}d",
        "",
    ]
    lines += _render_section(
        "Overdue reviews (BLOCKING)",
        [f"- **{e.id}** - review_by={e.review_by} - `{e.file}`" for e in report.overdue],
    )
    lines += _render_section(
        "last_verified warnings",
        [
            f"- **{e.id}** - last_verified={e.last_verified} ({e.days}d) - `{e.file}`"
            for e in report.stale_verification
        ],
    )
    lines += _render_section(
        "References to deprecated patterns",
        [
            f"- **{e.id}** - references deprecated={e.references} - `{e.file}`"
            for e in report.deprecated_refs
        ],
    )
    return "\n".join(lines)
