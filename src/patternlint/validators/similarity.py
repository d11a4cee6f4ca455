"""Near-duplicate detection across the catalog.

Two records are likely duplicates when they share a domain and enough tags,
or when their titles are close by edit distance. Findings are advisory: the
detector only produces warnings.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from itertools import combinations

from patternlint.catalog import PatternRecord
from patternlint.rules import SimilarityPolicy
from patternlint.validators.base import (
    BaseValidator,
    ValidationIssue,
    ValidatorResult,
    result_from_issues,
)

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_title(title: str | None) -> str:
    """Lowercase, drop punctuation, and collapse whitespace."""
    text = _NON_ALNUM.sub("", (title or "").lower())
    return _WHITESPACE.sub(" ", text).strip()


def edit_distance(a: str, b: str) -> int:
    """Levenshtein distance with unit insert, delete and substitute costs."""
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            cost = 0 if char_a == char_b else 1
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]


def title_ratio(a: str | None, b: str | None) -> float:
    """Similarity of two titles in [0, 1] after normalization.

    Two empty titles are a perfect match; exactly one empty title is no match.
    """
    left = normalize_title(a)
    right = normalize_title(b)
    if not left and not right:
        return 1.0
    if not left or not right:
        return 0.0
    return 1 - edit_distance(left, right) / max(len(left), len(right))


@dataclass(frozen=True)
class PairMetrics:
    """Symmetric similarity measures for two records."""

    same_domain: bool
    tag_overlap: int
    title_ratio: float

    def is_similar(self, policy: SimilarityPolicy) -> bool:
        """Apply the consolidation trigger from the gatekeeper policy."""
        by_tags = self.same_domain and self.tag_overlap >= policy.min_tag_overlap
        return by_tags or self.title_ratio >= policy.title_ratio_threshold


def compare(a: PatternRecord, b: PatternRecord) -> PairMetrics:
    """Compute pair metrics. Records without a domain never share one."""
    return PairMetrics(
        same_domain=a.domain is not None and a.domain == b.domain,
        tag_overlap=len(set(a.tags) & set(b.tags)),
        title_ratio=title_ratio(a.title, b.title),
    )


class SimilarityDetector(BaseValidator):
    """Flags pairs of records that look like duplicates.

    Checks:
    - similarity: pair meets the consolidation trigger (warning)

    Every unordered pair of records with ids is compared once.
    """

    name = "similarity-detector"

    def validate(self) -> ValidatorResult:
        policy = self.rules.similarity
        issues: list[ValidationIssue] = []
        candidates = self.catalog.with_ids()

        for a, b in combinations(candidates, 2):
            metrics = compare(a, b)
            if metrics.is_similar(policy):
                issues.append(
                    ValidationIssue.for_record(
                        a,
                        "similarity",
                        "warning",
                        f"Similar to '{b.id}' ({b.rel_path}): "
                        f"domain_match={str(metrics.same_domain).lower()} "
                        f"tag_overlap={metrics.tag_overlap} "
                        f"title_ratio={metrics.title_ratio:.2f}",
                    )
                )

        return result_from_issues(self.name, issues, len(candidates))
