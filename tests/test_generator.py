"""
Unit tests for chart data generation.
"""
import pytest
from lumina.core.schemas import ChartRecommendation
from lumina.services.generator import (
    generate_chart_data,
    generate_charts,
    get_default_colors,
    sample_rows,
)
from lumina.services.profiler import profile_dataset


def rec(chart_type, x_axis, y_axis, columns=None):
    return ChartRecommendation(
        chart_type=chart_type,
        title=f"{chart_type} of {x_axis}",
        description="test chart",
        x_axis=x_axis,
        y_axis=y_axis,
        columns=columns or [x_axis],
        priority=3,
        reasoning="test",
    )


@pytest.fixture
def fruit_rows():
    """Sales of three fruits."""
    return [
        {"fruit": "apple", "price": 10},
        {"fruit": "banana", "price": 4},
        {"fruit": "apple", "price": 20},
        {"fruit": "cherry", "price": "n/a"},
        {"fruit": None, "price": 6},
        {"fruit": "banana", "price": 8},
    ]


@pytest.mark.unit
def test_bar_averages_by_group(fruit_rows):
    """Bar data is the mean y per x group, in first-seen order."""
    chart = generate_chart_data(rec("bar", "fruit", "price", ["fruit", "price"]), fruit_rows)

    assert chart.y_axis == "price"
    assert chart.data == [
        {"fruit": "apple", "price": 15.0},
        {"fruit": "banana", "price": 6.0},
        {"fruit": "Unknown", "price": 6.0},
    ]
    assert chart.colors == get_default_colors("bar")


@pytest.mark.unit
def test_pie_counts_by_group(fruit_rows):
    """Pie data counts rows per x value."""
    chart = generate_chart_data(rec("pie", "fruit", "count"), fruit_rows)

    assert chart.y_axis == "value"
    assert chart.data == [
        {"fruit": "apple", "value": 2},
        {"fruit": "banana", "value": 2},
        {"fruit": "cherry", "value": 1},
        {"fruit": "Unknown", "value": 1},
    ]


@pytest.mark.unit
def test_line_drops_points_missing_x_or_y():
    """Line/scatter keep the referenced columns and skip incomplete points."""
    rows = [
        {"day": "2024-01-01", "sales": 5, "extra": "x"},
        {"day": None, "sales": 6, "extra": "y"},
        {"day": "2024-01-03", "sales": None, "extra": "z"},
        {"day": "2024-01-04", "sales": 7, "extra": "w"},
    ]
    chart = generate_chart_data(rec("line", "day", "sales", ["day", "sales"]), rows)

    assert chart.data == [
        {"day": "2024-01-01", "sales": 5},
        {"day": "2024-01-04", "sales": 7},
    ]


@pytest.mark.unit
def test_histogram_bins():
    """Sixteen values make four equal-width bins covering [min, max]."""
    rows = [{"score": v} for v in range(0, 16)]
    chart = generate_chart_data(rec("histogram", "score", "frequency"), rows)

    assert chart.y_axis == "frequency"
    assert [d["score"] for d in chart.data] == ["0.0-3.8", "3.8-7.5", "7.5-11.2", "11.2-15.0"]
    assert [d["frequency"] for d in chart.data] == [4, 4, 4, 4]
    assert sum(d["frequency"] for d in chart.data) == 16


@pytest.mark.unit
def test_histogram_bin_count_capped_at_ten():
    """Large columns still get at most ten bins."""
    rows = [{"score": v} for v in range(500)]
    chart = generate_chart_data(rec("histogram", "score", "frequency"), rows)
    assert len(chart.data) == 10


@pytest.mark.unit
def test_histogram_constant_column():
    """A constant column yields a single bin."""
    rows = [{"score": 7} for _ in range(5)]
    chart = generate_chart_data(rec("histogram", "score", "frequency"), rows)
    assert chart.data == [{"score": "7", "frequency": 5}]


@pytest.mark.unit
def test_no_rows_returns_none():
    """Nothing to plot without rows."""
    assert generate_chart_data(rec("pie", "fruit", "count"), []) is None


@pytest.mark.unit
def test_missing_column_returns_none(fruit_rows):
    """A referenced column absent from the data yields None."""
    assert generate_chart_data(rec("pie", "color", "count"), fruit_rows) is None
    assert generate_chart_data(rec("bar", "fruit", "weight", ["fruit", "weight"]), fruit_rows) is None


@pytest.mark.unit
def test_no_valid_points_returns_none():
    """All-null numbers give no histogram."""
    rows = [{"score": None}, {"score": "apple"}]
    assert generate_chart_data(rec("histogram", "score", "frequency"), rows) is None


@pytest.mark.unit
def test_default_colors_are_copies():
    """Mutating a returned palette leaves the default alone."""
    colors = get_default_colors("pie")
    colors.append("#000000")
    assert "#000000" not in get_default_colors("pie")
    assert len(get_default_colors("pie")) == 6


@pytest.mark.unit
def test_sample_rows():
    """Large inputs are strided down and keep the last row."""
    rows = [{"i": i} for i in range(1000)]
    sampled = sample_rows(rows, 100)

    assert len(sampled) == 101
    assert sampled[0] == {"i": 0}
    assert sampled[-1] == {"i": 999}
    assert sample_rows(rows[:50], 100) == rows[:50]


@pytest.mark.unit
def test_generate_charts_end_to_end():
    """Recommendations for a category/numeric dataset become chart data."""
    headers = ["fruit", "price"]
    rows = [{"fruit": ["apple", "banana", "cherry"][i % 3], "price": i} for i in range(30)]
    profiles = profile_dataset(headers, rows)

    charts = generate_charts(profiles, rows)

    assert [c.chart_type for c in charts] == ["bar", "pie", "histogram"]


@pytest.mark.unit
def test_generate_charts_top_values_fallback():
    """Text-only data falls back to a top-values bar chart."""
    headers = ["note"]
    rows = [{"note": f"remark {chr(97 + i % 26)}{i}"} for i in range(20)]
    rows.append({"note": "remark a0"})
    profiles = profile_dataset(headers, rows)

    charts = generate_charts(profiles, rows)

    assert len(charts) == 1
    assert charts[0].title == "Top Values in note"
    assert charts[0].y_axis == "count"
    assert charts[0].data[0] == {"note": "remark a0", "count": 2}
    assert len(charts[0].data) == 10


@pytest.mark.unit
def test_generate_charts_without_rows():
    """No rows means no charts."""
    profiles = profile_dataset(["fruit"], [{"fruit": "apple"}])
    assert generate_charts(profiles, []) == []


@pytest.mark.unit
def test_incomplete_first_row_keeps_chart():
    """A key missing from the first row is a null there, not a missing column."""
    rows = [{"region": "East"}] + [{"region": "West", "sales": i} for i in range(20)]
    chart = generate_chart_data(rec("bar", "region", "sales", ["region", "sales"]), rows)

    assert chart is not None
    assert chart.data == [{"region": "West", "sales": 9.5}]


@pytest.mark.unit
def test_incomplete_first_row_line_chart():
    """Line points are drawn from the rows that carry both keys."""
    rows = [{"day": "2024-01-01"}, {"day": "2024-01-02", "sales": 4}]
    chart = generate_chart_data(rec("line", "day", "sales", ["day", "sales"]), rows)

    assert chart.data == [{"day": "2024-01-02", "sales": 4}]
