"""
Chart recommendation service.

This module maps column profiles to chart recommendations using a fixed
rule table. Priorities are literals per rule; candidates are ranked by
priority and capped.
"""
import logging
from typing import List, Sequence

from lumina.core.performance import track_performance
from lumina.core.schemas import ColumnProfile, ChartRecommendation

logger = logging.getLogger(__name__)

MAX_RECOMMENDATIONS = 5
BAR_MAX_CATEGORIES = 20
PIE_MAX_CATEGORIES = 10


@track_performance("recommend_charts")
def recommend_charts(column_profiles: Sequence[ColumnProfile]) -> List[ChartRecommendation]:
    """
    Recommend charts from column profiles.

    Rules (priority in brackets):
    - DATE x NUMERIC = line [5]
    - CATEGORY (<= 20 distinct) x NUMERIC = bar [5]
    - NUMERIC pair = scatter [4]
    - CATEGORY (<= 10 distinct) = pie [3]
    - NUMERIC = histogram [3]

    Args:
        column_profiles: Profiles of every column

    Returns:
        At most 5 recommendations, priority descending; equal priorities
        keep generation order
    """
    date_cols = [c for c in column_profiles if c.inferred_type == "date"]
    numeric_cols = [c for c in column_profiles if c.inferred_type == "numeric"]
    category_cols = [c for c in column_profiles if c.inferred_type == "category"]

    logger.debug(
        f"Chart rules over {len(date_cols)} date, {len(numeric_cols)} numeric, "
        f"{len(category_cols)} category columns"
    )

    candidates: List[ChartRecommendation] = []

    # 1. Rule: DATE + NUMERIC = LINE
    for date_col in date_cols:
        for num_col in numeric_cols:
            candidates.append(ChartRecommendation(
                chart_type="line",
                title=f"{num_col.name} Over Time",
                description=f"Shows {num_col.name} trends over {date_col.name}",
                x_axis=date_col.name,
                y_axis=num_col.name,
                columns=[date_col.name, num_col.name],
                priority=5,
                reasoning="Time series data with numeric values - perfect for line chart",
            ))

    # 2. Rule: CATEGORY + NUMERIC = BAR (reasonable cardinality only)
    for cat_col in category_cols:
        if cat_col.unique_values > BAR_MAX_CATEGORIES:
            continue
        for num_col in numeric_cols:
            candidates.append(ChartRecommendation(
                chart_type="bar",
                title=f"{num_col.name} by {cat_col.name}",
                description=f"Compares {num_col.name} across {cat_col.name} categories",
                x_axis=cat_col.name,
                y_axis=num_col.name,
                columns=[cat_col.name, num_col.name],
                priority=5,
                reasoning="Categorical data with numeric values - ideal for bar chart",
            ))

    # 3. Rule: NUMERIC + NUMERIC = SCATTER (unordered pairs)
    for i in range(len(numeric_cols)):
        col_x = numeric_cols[i]
        for j in range(i + 1, len(numeric_cols)):
            col_y = numeric_cols[j]
            candidates.append(ChartRecommendation(
                chart_type="scatter",
                title=f"{col_x.name} vs {col_y.name}",
                description=f"Relationship between {col_x.name} and {col_y.name}",
                x_axis=col_x.name,
                y_axis=col_y.name,
                columns=[col_x.name, col_y.name],
                priority=4,
                reasoning="Two numeric variables - good for correlation analysis",
            ))

    # 4. Rule: LOW-CARDINALITY CATEGORY = PIE
    for cat_col in category_cols:
        if cat_col.unique_values <= PIE_MAX_CATEGORIES and cat_col.top_categories:
            candidates.append(ChartRecommendation(
                chart_type="pie",
                title=f"Distribution of {cat_col.name}",
                description=f"Shows the distribution across {cat_col.name} categories",
                x_axis=cat_col.name,
                y_axis="count",
                columns=[cat_col.name],
                priority=3,
                reasoning="Low cardinality category - suitable for pie chart",
            ))

    # 5. Rule: SINGLE NUMERIC = HISTOGRAM
    for num_col in numeric_cols:
        candidates.append(ChartRecommendation(
            chart_type="histogram",
            title=f"Distribution of {num_col.name}",
            description=f"Shows the frequency distribution of {num_col.name}",
            x_axis=num_col.name,
            y_axis="frequency",
            columns=[num_col.name],
            priority=3,
            reasoning="Single numeric column - histogram shows distribution",
        ))

    # Sort by priority DESC (stable)
    candidates.sort(key=lambda c: c.priority, reverse=True)

    result = candidates[:MAX_RECOMMENDATIONS]
    logger.info(f"Recommended {len(result)} charts from {len(candidates)} candidates")

    return result
