"""
Unit tests for dataset classification.
"""
import pytest
from lumina.core.cache import ClassificationCache
from lumina.core.schemas import DatasetClassification
from lumina.services.classifier import classify_by_heuristics, classify_dataset


@pytest.fixture
def ai_result():
    return DatasetClassification(
        type="marketing",
        confidence=0.95,
        reasoning="Campaign metrics",
        indicators=["clicks"],
    )


@pytest.mark.unit
def test_no_keywords_is_general():
    """Headers with no keywords classify as general at 0.5."""
    result = classify_by_heuristics(["alpha", "beta"])

    assert result.type == "general"
    assert result.confidence == 0.5
    assert result.indicators == []


@pytest.mark.unit
def test_inventory_headers():
    """Inventory keywords win and matching headers become indicators."""
    result = classify_by_heuristics(["sku", "warehouse", "quantity", "colour"])

    assert result.type == "inventory"
    assert result.indicators == ["sku", "warehouse", "quantity"]
    assert 0 < result.confidence <= 0.8


@pytest.mark.unit
def test_confidence_capped():
    """Even an unambiguous match never exceeds 0.8."""
    result = classify_by_heuristics(["stock", "warehouse"])
    assert result.confidence == 0.8


@pytest.mark.unit
def test_tie_goes_to_first_type():
    """'revenue' scores finance and sales equally; finance is listed first."""
    result = classify_by_heuristics(["revenue"])
    assert result.type == "finance"
    assert result.confidence == 0.5


@pytest.mark.unit
def test_ai_classifier_used_when_unsure(ai_result):
    """The AI result replaces a low-confidence heuristic."""
    calls = []

    def fake_ai(headers, sample):
        calls.append((list(headers), len(sample)))
        return ai_result

    rows = [{"clicks": i} for i in range(50)]
    result = classify_dataset(["clicks"], rows, ai_classifier=fake_ai)

    assert result == ai_result
    assert calls == [(["clicks"], 20)]


@pytest.mark.unit
def test_ai_failure_falls_back_to_heuristic():
    """A failing AI classifier is logged and the heuristic stands."""
    def broken_ai(headers, sample):
        raise RuntimeError("service unavailable")

    result = classify_dataset(["stock", "warehouse"], [], ai_classifier=broken_ai)

    assert result.type == "inventory"
    assert result.confidence == 0.8


@pytest.mark.unit
def test_cache_short_circuits(ai_result):
    """A cached result is returned without calling the AI again."""
    cache = ClassificationCache()
    calls = []

    def fake_ai(headers, sample):
        calls.append(headers)
        return ai_result

    first = classify_dataset(["clicks"], [], ai_classifier=fake_ai, cache=cache)
    second = classify_dataset(["clicks"], [], ai_classifier=fake_ai, cache=cache)

    assert first == second == ai_result
    assert len(calls) == 1
    assert len(cache) == 1


@pytest.mark.unit
def test_heuristic_is_pure():
    """Without a cache nothing is remembered between calls."""
    assert classify_dataset(["sku"], []) == classify_dataset(["sku"], [])


@pytest.mark.unit
def test_ai_failure_is_not_cached(ai_result):
    """After a failed AI call the next call tries the AI again."""
    cache = ClassificationCache()
    outcomes = [RuntimeError("timeout"), ai_result]

    def flaky_ai(headers, sample):
        outcome = outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    first = classify_dataset(["clicks"], [], ai_classifier=flaky_ai, cache=cache)
    assert first.type == "marketing"
    assert first.confidence == 0.8
    assert len(cache) == 0

    second = classify_dataset(["clicks"], [], ai_classifier=flaky_ai, cache=cache)
    assert second == ai_result
    assert len(cache) == 1
