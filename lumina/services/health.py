"""
Dataset health score.

Five sub-scores (completeness, uniqueness, consistency, header quality,
anomalies), each an integer in [0, 100], combined with fixed weights into
one 0-100 score. Issue detection and recommendations run over the same
column profiles.
"""
import logging
import math
import re
from typing import List, Optional, Sequence

from lumina.core.errors import (
    IssueCodes,
    RecommendationCodes,
    get_issue_message,
    get_recommendation,
)
from lumina.core.performance import track_performance
from lumina.core.schemas import (
    ColumnProfile,
    DuplicationIssue,
    HealthIssue,
    HealthIssues,
    HealthScoreBreakdown,
    HealthScoreResult,
)

logger = logging.getLogger(__name__)

WEIGHTS = {
    "completeness": 0.30,
    "uniqueness": 0.20,
    "consistency": 0.20,
    "header_quality": 0.15,
    "anomaly_score": 0.15,
}

GENERIC_HEADER_NAMES = ("column", "col", "field", "data", "value", "item")
_SPECIAL_CHAR = re.compile(r"[^a-zA-Z0-9\s]")
_UPPERCASE = re.compile(r"[A-Z]")

MISSING_DATA_THRESHOLD = 0.8
TYPE_ISSUE_THRESHOLD = 0.7
LOW_UNIQUENESS_RATIO = 0.1
DUPLICATION_MIN_ROWS = 10
HIGH_ANOMALY_RATIO = 0.1


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (Python's round() is banker's)."""
    return int(math.floor(value + 0.5))


def _clamp_score(value: float) -> int:
    return max(0, min(100, round_half_up(value)))


def calculate_completeness(column_profiles: Sequence[ColumnProfile]) -> int:
    """Mean per-column completeness, as a percentage."""
    if not column_profiles:
        return 0
    total = sum(col.quality.completeness for col in column_profiles)
    return _clamp_score(total / len(column_profiles) * 100)


def _uniqueness_step(ratio: float) -> float:
    if ratio > 0.95:
        return 100  # probably an identifier
    if ratio > 0.5:
        return 80
    if ratio > 0.1:
        return 60
    return max(20, ratio * 200)


def calculate_uniqueness(column_profiles: Sequence[ColumnProfile], total_rows: int) -> int:
    if not column_profiles or total_rows <= 0:
        return 0
    scores = [_uniqueness_step(col.unique_values / total_rows) for col in column_profiles]
    return _clamp_score(sum(scores) / len(scores))


def calculate_consistency(column_profiles: Sequence[ColumnProfile]) -> int:
    if not column_profiles:
        return 0
    total = sum(col.quality.consistency for col in column_profiles)
    return _clamp_score(total / len(column_profiles) * 100)


def _has_generic_name(header: str) -> bool:
    header_lower = header.lower().strip()
    return any(name in header_lower for name in GENERIC_HEADER_NAMES)


def is_bad_header(header: str) -> bool:
    """Empty, one character long, or built on a generic name like 'col'."""
    return len(header) < 2 or _has_generic_name(header)


def header_penalty(header: str) -> int:
    """Points one header costs the header-quality score."""
    penalty = 0
    if len(header) == 0:
        penalty += 20
    elif len(header) < 2:
        penalty += 10

    if _has_generic_name(header):
        penalty += 5

    if len(_SPECIAL_CHAR.findall(header)) > 3:
        penalty += 5

    # snake_case or camelCase expected when a header has spaces
    if " " in header and "_" not in header and not _UPPERCASE.search(header):
        penalty += 3

    return penalty


def calculate_header_quality(headers: Sequence[str]) -> int:
    """Start at 100, subtract per-header penalties, clamp to [0, 100]."""
    if not headers:
        return 0
    score = 100 - sum(header_penalty(header) for header in headers)
    return max(0, min(100, score))


def _outlier_ratio(col: ColumnProfile) -> float:
    if col.outliers is None:
        return 0.0
    return col.outliers.count / (col.unique_values or 1)


def _anomaly_step(col: ColumnProfile) -> float:
    if col.outliers is None or col.outliers.count == 0:
        return 100
    ratio = _outlier_ratio(col)
    if ratio < 0.01:
        return 90
    if ratio < 0.05:
        return 75
    if ratio < 0.1:
        return 60
    return max(20, 100 - ratio * 500)


def calculate_anomaly_score(column_profiles: Sequence[ColumnProfile]) -> int:
    """Higher means fewer anomalies."""
    if not column_profiles:
        return 0
    scores = [_anomaly_step(col) for col in column_profiles]
    return _clamp_score(sum(scores) / len(scores))


def weighted_score(breakdown: dict) -> int:
    return _clamp_score(sum(breakdown[key] * weight for key, weight in WEIGHTS.items()))


def _missing_data_issue(column_profiles: Sequence[ColumnProfile]) -> Optional[HealthIssue]:
    affected = [col for col in column_profiles if col.quality.completeness < MISSING_DATA_THRESHOLD]
    if not affected:
        return None

    if any(col.quality.completeness < 0.5 for col in affected):
        severity = "high"
    elif any(col.quality.completeness < 0.7 for col in affected):
        severity = "medium"
    else:
        severity = "low"

    return HealthIssue(
        severity=severity,
        message=get_issue_message(IssueCodes.MISSING_DATA, count=len(affected)),
        affected_columns=[col.name for col in affected],
    )


def _anomaly_issue(column_profiles: Sequence[ColumnProfile]) -> Optional[HealthIssue]:
    affected = [col for col in column_profiles if col.outliers is not None and col.outliers.count > 0]
    if not affected:
        return None

    severity = "high" if any(_outlier_ratio(col) > HIGH_ANOMALY_RATIO for col in affected) else "medium"
    return HealthIssue(
        severity=severity,
        message=get_issue_message(IssueCodes.ANOMALIES, count=len(affected)),
        affected_columns=[col.name for col in affected],
    )


def _bad_header_issue(headers: Sequence[str]) -> Optional[HealthIssue]:
    bad_headers = [header for header in headers if is_bad_header(header)]
    if not bad_headers:
        return None

    return HealthIssue(
        severity="high" if len(bad_headers) > len(headers) * 0.3 else "medium",
        message=get_issue_message(IssueCodes.BAD_HEADERS, count=len(bad_headers)),
        examples=bad_headers[:5],
    )


def _type_issue(column_profiles: Sequence[ColumnProfile]) -> Optional[HealthIssue]:
    affected = [col for col in column_profiles if col.quality.consistency < TYPE_ISSUE_THRESHOLD]
    if not affected:
        return None

    return HealthIssue(
        severity="high" if any(col.quality.consistency < 0.5 for col in affected) else "medium",
        message=get_issue_message(IssueCodes.TYPE_ISSUES, count=len(affected)),
        affected_columns=[col.name for col in affected],
    )


def _duplication_issue(column_profiles: Sequence[ColumnProfile], total_rows: int) -> Optional[DuplicationIssue]:
    """
    Estimate row duplication from the first low-cardinality column.

    A column with fewer than 10% distinct values over more than 10 rows
    suggests repeated rows; full row comparison happens elsewhere.
    """
    if total_rows <= DUPLICATION_MIN_ROWS:
        return None

    low_uniqueness = [
        col for col in column_profiles
        if col.unique_values / total_rows < LOW_UNIQUENESS_RATIO
    ]
    if not low_uniqueness:
        return None

    percentage = (1 - low_uniqueness[0].unique_values / total_rows) * 100
    if percentage > 50:
        severity = "high"
    elif percentage > 20:
        severity = "medium"
    else:
        severity = "low"

    return DuplicationIssue(
        severity=severity,
        message=get_issue_message(IssueCodes.DUPLICATION, percentage=percentage),
        duplicate_percentage=round_half_up(percentage),
    )


def identify_issues(
    column_profiles: Sequence[ColumnProfile],
    total_rows: int,
    headers: Sequence[str],
) -> HealthIssues:
    """Structured data-quality findings, independent of the numeric score."""
    missing = _missing_data_issue(column_profiles)
    anomalies = _anomaly_issue(column_profiles)
    bad_headers = _bad_header_issue(headers)
    type_issues = _type_issue(column_profiles)

    return HealthIssues(
        missing_data=[missing] if missing else [],
        anomalies=[anomalies] if anomalies else [],
        bad_headers=[bad_headers] if bad_headers else [],
        type_issues=[type_issues] if type_issues else [],
        duplication=_duplication_issue(column_profiles, total_rows),
    )


def generate_recommendations(breakdown: HealthScoreBreakdown, issues: HealthIssues) -> List[str]:
    """Fixed-order recommendations, always ending with an overall verdict."""
    codes = []
    if breakdown.completeness < 80:
        codes.append(RecommendationCodes.FILL_MISSING)
    if breakdown.consistency < 80:
        codes.append(RecommendationCodes.STANDARDIZE_TYPES)
    if breakdown.header_quality < 80:
        codes.append(RecommendationCodes.IMPROVE_HEADERS)
    if breakdown.anomaly_score < 70:
        codes.append(RecommendationCodes.HANDLE_OUTLIERS)
    if issues.duplication is not None and issues.duplication.severity != "low":
        codes.append(RecommendationCodes.REMOVE_DUPLICATES)

    if breakdown.overall >= 90:
        codes.append(RecommendationCodes.VERDICT_EXCELLENT)
    elif breakdown.overall >= 70:
        codes.append(RecommendationCodes.VERDICT_GOOD)
    else:
        codes.append(RecommendationCodes.VERDICT_POOR)

    return [get_recommendation(code) for code in codes]


@track_performance("health_score")
def calculate_health_score(
    column_profiles: Sequence[ColumnProfile],
    total_rows: int,
    headers: Sequence[str],
) -> HealthScoreResult:
    """
    Score a dataset's health from its column profiles and header names.

    Args:
        column_profiles: One profile per column
        total_rows: Number of data rows
        headers: Original header list

    Returns:
        HealthScoreResult with score, breakdown, issues and recommendations.
        An empty column list scores 0 everywhere.
    """
    if not column_profiles:
        breakdown = HealthScoreBreakdown(
            completeness=0, uniqueness=0, consistency=0,
            header_quality=0, anomaly_score=0, overall=0,
        )
    else:
        parts = {
            "completeness": calculate_completeness(column_profiles),
            "uniqueness": calculate_uniqueness(column_profiles, total_rows),
            "consistency": calculate_consistency(column_profiles),
            "header_quality": calculate_header_quality(headers),
            "anomaly_score": calculate_anomaly_score(column_profiles),
        }
        breakdown = HealthScoreBreakdown(overall=weighted_score(parts), **parts)

    issues = identify_issues(column_profiles, total_rows, headers)
    recommendations = generate_recommendations(breakdown, issues)

    logger.info(
        f"Health score {breakdown.overall}/100 for {len(column_profiles)} columns",
        extra={'health_score': breakdown.overall}
    )

    return HealthScoreResult(
        score=breakdown.overall,
        breakdown=breakdown,
        issues=issues,
        recommendations=recommendations,
    )
