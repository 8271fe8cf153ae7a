"""
Chart data generator.

Turns chart recommendations into plotting-ready data: projected rows,
grouped averages, category counts or histogram bins, each paired with a
fixed color palette.
"""
import logging
import math
from typing import Any, Dict, List, Mapping, Optional, Sequence

from lumina.core.config import get_settings
from lumina.core.performance import track_performance
from lumina.core.schemas import ChartData, ChartRecommendation, ColumnProfile
from lumina.services.inference import recommend_charts
from lumina.services.type_inference import is_null, to_native, to_number, value_key

logger = logging.getLogger(__name__)

# Default palettes, one per chart type
CHART_PALETTES: Dict[str, List[str]] = {
    'line': ['#3b82f6', '#8b5cf6', '#ec4899'],
    'bar': ['#3b82f6', '#10b981', '#f59e0b', '#ef4444'],
    'pie': ['#3b82f6', '#10b981', '#f59e0b', '#ef4444', '#8b5cf6', '#ec4899'],
    'scatter': ['#3b82f6'],
    'histogram': ['#3b82f6'],
}

MAX_HISTOGRAM_BINS = 10
UNKNOWN_LABEL = "Unknown"
FALLBACK_TOP_VALUES = 10
FALLBACK_SCAN_ROWS = 1000


def get_default_colors(chart_type: str) -> List[str]:
    """Palette for a chart type (a copy, so callers can't mutate the default)."""
    return list(CHART_PALETTES.get(chart_type, ['#3b82f6']))


def _group_label(value: Any) -> str:
    return UNKNOWN_LABEL if is_null(value) else value_key(value)


def _primary_y(recommendation: ChartRecommendation) -> str:
    y_axis = recommendation.y_axis
    return y_axis[0] if isinstance(y_axis, list) else y_axis


def _has_column(rows: Sequence[Mapping[str, Any]], column: str) -> bool:
    """A column exists when any row carries the key; rows missing it hold nulls."""
    return any(column in row for row in rows)


def _project_rows(recommendation: ChartRecommendation, rows: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """Line/scatter: keep referenced columns, drop points missing x or y."""
    x_axis = recommendation.x_axis
    y_axis = _primary_y(recommendation)
    points = []
    for row in rows:
        point = {col: to_native(row.get(col)) for col in recommendation.columns}
        if is_null(point.get(x_axis)) or is_null(point.get(y_axis)):
            continue
        points.append(point)
    return points


def _average_by_group(recommendation: ChartRecommendation, rows: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """Bar: mean of y per x group, groups in first-seen order."""
    x_axis = recommendation.x_axis
    y_axis = _primary_y(recommendation)
    grouped: Dict[str, List[float]] = {}
    for row in rows:
        number = to_number(row.get(y_axis))
        if number is None:
            continue
        grouped.setdefault(_group_label(row.get(x_axis)), []).append(number)

    return [
        {x_axis: key, y_axis: sum(values) / len(values)}
        for key, values in grouped.items()
    ]


def _count_by_group(x_axis: str, rows: Sequence[Mapping[str, Any]], count_key: str) -> List[Dict[str, Any]]:
    counts: Dict[str, int] = {}
    for row in rows:
        key = _group_label(row.get(x_axis))
        counts[key] = counts.get(key, 0) + 1
    return [{x_axis: key, count_key: count} for key, count in counts.items()]


def _histogram_bins(x_axis: str, rows: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """
    Equal-width bins over [min, max]: min(10, ceil(sqrt(n))) of them.

    Labels are "lo-hi" to one decimal; the max value falls in the last bin.
    A constant column yields one bin labelled with the value.
    """
    values = [n for n in (to_number(row.get(x_axis)) for row in rows) if n is not None]
    if not values:
        return []

    low = min(values)
    high = max(values)
    if low == high:
        return [{x_axis: value_key(low), 'frequency': len(values)}]

    bin_count = min(MAX_HISTOGRAM_BINS, int(math.ceil(math.sqrt(len(values)))))
    bin_width = (high - low) / bin_count
    frequencies = [0] * bin_count
    for value in values:
        index = min(int(math.floor((value - low) / bin_width)), bin_count - 1)
        frequencies[index] += 1

    return [
        {
            x_axis: f"{low + i * bin_width:.1f}-{low + (i + 1) * bin_width:.1f}",
            'frequency': frequencies[i],
        }
        for i in range(bin_count)
    ]


def generate_chart_data(
    recommendation: ChartRecommendation,
    rows: Sequence[Mapping[str, Any]],
) -> Optional[ChartData]:
    """
    Materialize one recommendation into chart data.

    Args:
        recommendation: The chart to build
        rows: Dataset rows keyed by header

    Returns:
        ChartData, or None when there are no rows, a referenced column is
        missing from the data, or no usable points remain
    """
    chart_type = recommendation.chart_type
    title = recommendation.title
    x_axis = recommendation.x_axis

    if not rows:
        logger.warning(f"Cannot generate chart '{title}': no data rows provided")
        return None

    if not _has_column(rows, x_axis):
        logger.warning(f"Cannot generate chart '{title}': column '{x_axis}' not found in data")
        return None

    if chart_type in ("line", "scatter", "bar"):
        y_key = _primary_y(recommendation)
        if not _has_column(rows, y_key):
            logger.warning(f"Cannot generate chart '{title}': column '{y_key}' not found in data")
            return None

    if chart_type in ("line", "scatter"):
        data = _project_rows(recommendation, rows)
        y_axis = _primary_y(recommendation)
    elif chart_type == "bar":
        data = _average_by_group(recommendation, rows)
        y_axis = _primary_y(recommendation)
    elif chart_type == "pie":
        data = _count_by_group(x_axis, rows, 'value')
        y_axis = 'value'
    else:
        data = _histogram_bins(x_axis, rows)
        y_axis = 'frequency'

    if not data:
        logger.warning(f"Cannot generate {chart_type} chart '{title}': no valid data points")
        return None

    return ChartData(
        chart_type=chart_type,
        title=title,
        x_axis=x_axis,
        y_axis=y_axis,
        data=data,
        colors=get_default_colors(chart_type),
    )


def sample_rows(rows: Sequence[Mapping[str, Any]], max_rows: int) -> List[Mapping[str, Any]]:
    """
    Evenly strided sample of at most ``max_rows`` rows, plus the last row.

    Charts don't need every row of a large dataset.
    """
    if len(rows) <= max_rows:
        return list(rows)

    step = len(rows) // max_rows
    sampled = list(rows[::step][:max_rows])
    sampled.append(rows[-1])
    logger.info(f"Sampling {len(sampled)} rows from {len(rows)} for chart generation")
    return sampled


def _top_values_chart(column: ColumnProfile, rows: Sequence[Mapping[str, Any]]) -> Optional[ChartData]:
    counts = _count_by_group(column.name, rows[:FALLBACK_SCAN_ROWS], 'count')
    ranked = sorted(counts, key=lambda entry: entry['count'], reverse=True)[:FALLBACK_TOP_VALUES]
    if not ranked:
        return None
    return ChartData(
        chart_type="bar",
        title=f"Top Values in {column.name}",
        x_axis=column.name,
        y_axis='count',
        data=ranked,
        colors=get_default_colors("bar"),
    )


@track_performance("generate_charts")
def generate_charts(
    column_profiles: Sequence[ColumnProfile],
    rows: Sequence[Mapping[str, Any]],
    recommendations: Optional[Sequence[ChartRecommendation]] = None,
    max_rows: Optional[int] = None,
) -> List[ChartData]:
    """
    Recommend and materialize charts for a dataset.

    Failed materializations are dropped. When nothing survives, a
    "Top Values" bar chart of the first column is produced instead.
    """
    if not column_profiles or not rows:
        logger.warning("Cannot generate charts: no columns or no rows")
        return []

    if max_rows is None:
        max_rows = get_settings().max_chart_rows
    chart_rows = sample_rows(rows, max_rows)

    if recommendations is None:
        recommendations = recommend_charts(column_profiles)

    charts = []
    for idx, recommendation in enumerate(recommendations):
        chart = generate_chart_data(recommendation, chart_rows)
        if chart is None:
            logger.warning(f"Failed to generate chart {idx + 1}: {recommendation.title}")
            continue
        charts.append(chart)

    if not charts:
        logger.warning("No chart could be generated, falling back to top values of the first column")
        fallback = _top_values_chart(column_profiles[0], chart_rows)
        if fallback is not None:
            charts.append(fallback)

    logger.info(f"Generated {len(charts)} charts from {len(recommendations)} recommendations")
    return charts
