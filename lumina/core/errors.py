"""
Error type and the message catalog for data-quality findings.

Analysis never raises on bad data: problems are reported as issues and
recommendations built from the messages below.
"""
from typing import Dict


class LuminaError(Exception):
    """Raised for invalid configuration, never for bad input data."""


# Issue codes
class IssueCodes:
    MISSING_DATA = "MISSING_DATA"
    ANOMALIES = "ANOMALIES"
    BAD_HEADERS = "BAD_HEADERS"
    TYPE_ISSUES = "TYPE_ISSUES"
    DUPLICATION = "DUPLICATION"


ISSUE_MESSAGES: Dict[str, str] = {
    IssueCodes.MISSING_DATA: "{count} column(s) have significant missing data",
    IssueCodes.ANOMALIES: "{count} column(s) contain outliers",
    IssueCodes.BAD_HEADERS: "{count} header(s) need better naming",
    IssueCodes.TYPE_ISSUES: "{count} column(s) have inconsistent data types",
    IssueCodes.DUPLICATION: "Potential duplicate rows detected ({percentage:.1f}% estimated)",
}


# Recommendation keys, in the order they are emitted
class RecommendationCodes:
    FILL_MISSING = "FILL_MISSING"
    STANDARDIZE_TYPES = "STANDARDIZE_TYPES"
    IMPROVE_HEADERS = "IMPROVE_HEADERS"
    HANDLE_OUTLIERS = "HANDLE_OUTLIERS"
    REMOVE_DUPLICATES = "REMOVE_DUPLICATES"
    VERDICT_EXCELLENT = "VERDICT_EXCELLENT"
    VERDICT_GOOD = "VERDICT_GOOD"
    VERDICT_POOR = "VERDICT_POOR"


RECOMMENDATION_MESSAGES: Dict[str, str] = {
    RecommendationCodes.FILL_MISSING: "Consider filling missing values or removing columns with high null rates",
    RecommendationCodes.STANDARDIZE_TYPES: "Review columns with mixed data types and standardize formats",
    RecommendationCodes.IMPROVE_HEADERS: "Improve column headers with descriptive, consistent naming",
    RecommendationCodes.HANDLE_OUTLIERS: "Investigate and handle outliers in numeric columns",
    RecommendationCodes.REMOVE_DUPLICATES: "Remove duplicate rows to improve data quality",
    RecommendationCodes.VERDICT_EXCELLENT: "Dataset quality is excellent! Ready for analysis.",
    RecommendationCodes.VERDICT_GOOD: "Dataset quality is good with minor improvements needed.",
    RecommendationCodes.VERDICT_POOR: "Dataset needs significant quality improvements before analysis.",
}


def get_issue_message(issue_code: str, **params) -> str:
    """
    Format the message for an issue code.

    Args:
        issue_code: One of the IssueCodes constants
        **params: Values for the message placeholders

    Returns:
        The formatted message
    """
    template = ISSUE_MESSAGES.get(issue_code)
    if template is None:
        raise LuminaError(f"Unknown issue code: {issue_code}")
    return template.format(**params)


def get_recommendation(code: str) -> str:
    """Look up a recommendation string by code."""
    return RECOMMENDATION_MESSAGES[code]
