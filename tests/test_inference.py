"""
Unit tests for chart recommendation rules.
"""
import pytest
from lumina.core.schemas import CategoryCount, ColumnProfile, ColumnQuality
from lumina.services.inference import MAX_RECOMMENDATIONS, recommend_charts


def column(name, inferred_type, unique_values=5, with_categories=True):
    """Profile stub carrying only what the rules look at."""
    top_categories = None
    if inferred_type == "category" and with_categories:
        top_categories = [CategoryCount(value="apple", count=3, percentage=60.0)]
    return ColumnProfile(
        name=name,
        inferred_type=inferred_type,
        unique_values=unique_values,
        null_count=0,
        quality=ColumnQuality(completeness=1.0, consistency=1.0, uniqueness=1.0),
        top_categories=top_categories,
    )


@pytest.mark.unit
def test_date_and_numeric_gives_line_first():
    """One date and one numeric column: a priority-5 line chart leads."""
    recs = recommend_charts([column("order_date", "date"), column("amount", "numeric")])

    assert recs[0].chart_type == "line"
    assert recs[0].priority == 5
    assert recs[0].title == "amount Over Time"
    assert recs[0].x_axis == "order_date"
    assert recs[0].y_axis == "amount"
    assert [r.chart_type for r in recs].count("line") == 1
    assert not any(r.chart_type in ("bar", "pie") for r in recs)


@pytest.mark.unit
def test_category_and_numeric_gives_bar_and_pie():
    """A small category plus a numeric column yields bar, pie and histogram."""
    recs = recommend_charts([column("region", "category", unique_values=4), column("sales", "numeric")])

    assert [r.chart_type for r in recs] == ["bar", "pie", "histogram"]
    assert recs[0].title == "sales by region"
    assert recs[1].y_axis == "count"
    assert recs[2].y_axis == "frequency"


@pytest.mark.unit
def test_high_cardinality_category_skips_bar_and_pie():
    """Over 20 distinct values: no bar; over 10: no pie."""
    recs = recommend_charts([column("store", "category", unique_values=25), column("sales", "numeric")])
    assert [r.chart_type for r in recs] == ["histogram"]

    recs = recommend_charts([column("store", "category", unique_values=15), column("sales", "numeric")])
    assert [r.chart_type for r in recs] == ["bar", "histogram"]


@pytest.mark.unit
def test_pie_requires_top_categories():
    """A category column without a frequency table gets no pie."""
    recs = recommend_charts([column("region", "category", with_categories=False)])
    assert recs == []


@pytest.mark.unit
def test_scatter_over_unordered_pairs():
    """Three numeric columns give three scatter pairs."""
    recs = recommend_charts([column("a", "numeric"), column("b", "numeric"), column("c", "numeric")])
    scatters = [r for r in recs if r.chart_type == "scatter"]

    assert [(r.x_axis, r.y_axis) for r in scatters] == [("a", "b"), ("a", "c"), ("b", "c")]
    assert scatters[0].title == "a vs b"


@pytest.mark.unit
def test_capped_at_five_and_sorted():
    """Never more than five, priority descending, ties in rule order."""
    profiles = [
        column("when", "date"),
        column("region", "category", unique_values=3),
        column("x", "numeric"),
        column("y", "numeric"),
    ]
    recs = recommend_charts(profiles)

    assert len(recs) == MAX_RECOMMENDATIONS
    priorities = [r.priority for r in recs]
    assert priorities == sorted(priorities, reverse=True)
    assert [r.chart_type for r in recs] == ["line", "line", "bar", "bar", "scatter"]


@pytest.mark.unit
def test_no_fallback_for_text_only():
    """Text and boolean columns produce no recommendations."""
    assert recommend_charts([column("notes", "text"), column("flag", "boolean")]) == []
    assert recommend_charts([]) == []


@pytest.mark.unit
def test_recommendations_are_deterministic():
    """Same profiles, same recommendations."""
    profiles = [column("when", "date"), column("x", "numeric"), column("y", "numeric")]
    first = [r.model_dump() for r in recommend_charts(profiles)]
    second = [r.model_dump() for r in recommend_charts(profiles)]
    assert first == second
