import logging
import math
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Mapping, Optional, Sequence

import numpy as np

from lumina.core.performance import track_performance
from lumina.core.schemas import (
    CategoryCount,
    ColumnProfile,
    ColumnQuality,
    DateRange,
    OutlierSummary,
)
from lumina.services.type_inference import (
    ClassifiedColumn,
    classify_values,
    infer_classified_type,
    parse_timestamp,
    to_number,
    value_key,
)

logger = logging.getLogger(__name__)

IQR_MIN_VALUES = 4
IQR_FENCE = 1.5
ZSCORE_MIN_VALUES = 3
ZSCORE_THRESHOLD = 3.0
TOP_CATEGORY_LIMIT = 10
MS_PER_DAY = 1000 * 60 * 60 * 24


def detect_outliers_iqr(values: Sequence[float]) -> List[float]:
    """
    Values outside [Q1 - 1.5*IQR, Q3 + 1.5*IQR].

    Quartiles are read from the sorted array at floor(n * 0.25) and
    floor(n * 0.75). Outliers keep their input order.
    """
    if len(values) < IQR_MIN_VALUES:
        return []

    ordered = np.sort(np.asarray(values, dtype=float))
    q1 = ordered[int(math.floor(len(ordered) * 0.25))]
    q3 = ordered[int(math.floor(len(ordered) * 0.75))]
    iqr = q3 - q1
    lower_bound = q1 - IQR_FENCE * iqr
    upper_bound = q3 + IQR_FENCE * iqr

    return [v for v in values if v < lower_bound or v > upper_bound]


def detect_outliers_zscore(values: Sequence[float]) -> List[float]:
    """Values more than 3 population standard deviations from the mean."""
    if len(values) < ZSCORE_MIN_VALUES:
        return []

    array = np.asarray(values, dtype=float)
    mean = float(array.mean())
    std_dev = float(array.std())
    if std_dev == 0:
        return []

    return [v for v in values if abs((v - mean) / std_dev) > ZSCORE_THRESHOLD]


def _category_value(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    return value_key(value)


def calculate_top_categories(values: Sequence[Any], limit: int = TOP_CATEGORY_LIMIT) -> List[CategoryCount]:
    """
    Frequency table over non-null values, most frequent first.

    Ties keep first-encountered order: counts are collected in an
    insertion-ordered dict and ``sorted`` is stable.
    """
    counts: Dict[Any, int] = {}
    for value in values:
        key = _category_value(value)
        counts[key] = counts.get(key, 0) + 1

    total = len(values)
    if total == 0:
        return []

    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)[:limit]
    return [
        CategoryCount(value=value, count=count, percentage=(count / total) * 100)
        for value, count in ranked
    ]


def _numeric_stats(column: ClassifiedColumn) -> Dict[str, Any]:
    numbers = [n for n in (to_number(v) for v in column.values) if n is not None]
    if not numbers:
        return {}

    array = np.asarray(numbers, dtype=float)
    stats: Dict[str, Any] = {
        "min": float(array.min()),
        "max": float(array.max()),
        "mean": float(array.mean()),
        "median": float(np.median(array)),
        "standard_deviation": float(array.std()),  # population (ddof=0)
    }

    # IQR is primary; z-score only runs when IQR finds nothing
    outlier_values = detect_outliers_iqr(numbers)
    method = "iqr"
    if not outlier_values:
        outlier_values = detect_outliers_zscore(numbers)
        method = "zscore"
    if outlier_values:
        stats["outliers"] = OutlierSummary(count=len(outlier_values), values=outlier_values, method=method)

    stats["consistency"] = len(numbers) / column.non_null_count
    return stats


def _date_stats(column: ClassifiedColumn) -> Dict[str, Any]:
    timestamps = [ts for ts in (parse_timestamp(v) for v in column.values) if ts is not None]
    if not timestamps:
        return {}

    earliest = min(timestamps)
    latest = max(timestamps)
    span_ms = (latest - earliest).total_seconds() * 1000
    date_range = DateRange(
        min=earliest.isoformat(),
        max=latest.isoformat(),
        span_days=int(math.ceil(span_ms / MS_PER_DAY)),
    )
    return {"date_range": date_range, "min": date_range.min, "max": date_range.max}


def _category_stats(column: ClassifiedColumn) -> Dict[str, Any]:
    stats: Dict[str, Any] = {}
    top_categories = calculate_top_categories(column.values)
    if top_categories:
        stats["top_categories"] = top_categories
        stats["mode"] = top_categories[0].value

    if column.non_null_count:
        string_count = sum(1 for v in column.values if isinstance(v, str))
        stats["consistency"] = string_count / column.non_null_count
    return stats


def profile_column(name: str, values: Sequence[Any]) -> ColumnProfile:
    """
    Profile one column: inferred type, per-type statistics, outliers and
    the completeness/consistency/uniqueness triple.

    Never raises; an empty or all-null column yields a profile with no
    statistics and completeness 0.
    """
    column = classify_values(values)
    inferred_type = infer_classified_type(column)

    non_null = column.non_null_count
    unique_values = len({value_key(v) for v in column.values})
    completeness = non_null / column.total if column.total else 0.0
    uniqueness = unique_values / non_null if non_null else 0.0

    if inferred_type == "numeric":
        stats = _numeric_stats(column)
    elif inferred_type == "date":
        stats = _date_stats(column)
    elif inferred_type in ("category", "text"):
        stats = _category_stats(column)
    else:
        # boolean columns are fully consistent; mixed columns keep the default
        stats = {}

    consistency = stats.pop("consistency", 1.0)

    return ColumnProfile(
        name=name,
        inferred_type=inferred_type,
        unique_values=unique_values,
        null_count=column.null_count,
        quality=ColumnQuality(
            completeness=completeness,
            consistency=consistency,
            uniqueness=uniqueness,
        ),
        **stats,
    )


def column_values(header: str, rows: Sequence[Mapping[str, Any]]) -> List[Any]:
    """Values of one column; a row missing the key contributes a null."""
    return [row.get(header) for row in rows]


@track_performance("profile_dataset")
def profile_dataset(
    headers: Sequence[str],
    rows: Sequence[Mapping[str, Any]],
    workers: Optional[int] = None,
) -> List[ColumnProfile]:
    """
    Profile every column of a dataset.

    Args:
        headers: Column names, in output order
        rows: Row mappings keyed by header
        workers: Thread count; columns are independent so any value > 1
            profiles them concurrently

    Returns:
        One ColumnProfile per header, in header order
    """
    if workers and workers > 1 and len(headers) > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            profiles = list(executor.map(
                lambda header: profile_column(header, column_values(header, rows)),
                headers,
            ))
    else:
        profiles = [profile_column(header, column_values(header, rows)) for header in headers]

    logger.debug(
        f"Profiled {len(profiles)} columns over {len(rows)} rows",
        extra={'columns': len(profiles), 'rows': len(rows)}
    )
    return profiles
