"""
Dataset type classification.

Header keywords give a fast heuristic label. An AI-backed classifier,
supplied by the caller, is consulted only when the heuristic is unsure,
and the heuristic result is the fallback whenever that call fails.
"""
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from lumina.core.cache import ClassificationCache, generate_headers_cache_key
from lumina.core.schemas import DatasetClassification

logger = logging.getLogger(__name__)

# Keyword lists in tie-break order: the first max-scoring type wins
DATASET_KEYWORDS: Dict[str, List[str]] = {
    "finance": [
        "revenue", "profit", "loss", "expense", "income", "balance", "cash",
        "payment", "invoice", "transaction", "account", "financial", "cost",
        "price", "amount", "currency", "dollar", "usd", "eur",
    ],
    "sales": [
        "sale", "customer", "client", "order", "purchase", "deal",
        "opportunity", "lead", "prospect", "quota", "commission", "revenue",
        "closed", "won", "lost",
    ],
    "inventory": [
        "stock", "inventory", "quantity", "warehouse", "supply", "product",
        "item", "sku", "barcode", "location", "reorder", "level", "units",
    ],
    "marketing": [
        "campaign", "ad", "advertisement", "impression", "click", "conversion",
        "ctr", "cpc", "cpm", "audience", "segment", "channel", "source",
        "medium", "referral", "email", "social",
    ],
    "operations": [
        "task", "project", "employee", "staff", "work", "hours", "time",
        "duration", "efficiency", "productivity", "resource", "capacity",
        "utilization", "kpi", "metric",
    ],
}

HEURISTIC_MAX_CONFIDENCE = 0.8
GENERAL_CONFIDENCE = 0.5
AI_SAMPLE_ROWS = 20

AIClassifier = Callable[[Sequence[str], Sequence[Mapping[str, Any]]], DatasetClassification]


def classify_by_heuristics(headers: Sequence[str]) -> DatasetClassification:
    """
    Classify a dataset from its header names alone.

    Each keyword found anywhere in the joined, lowercased headers adds one
    point to its type; a header can count toward several types. Confidence
    is the winner's share of all points, capped at 0.8.
    """
    header_string = " ".join(h.lower() for h in headers)

    scores = {
        dataset_type: sum(1 for keyword in keywords if keyword in header_string)
        for dataset_type, keywords in DATASET_KEYWORDS.items()
    }
    max_score = max(scores.values())
    total_score = sum(scores.values())

    if max_score == 0:
        return DatasetClassification(
            type="general",
            confidence=GENERAL_CONFIDENCE,
            reasoning="No clear indicators found in column names",
            indicators=[],
        )

    dataset_type = next(t for t, score in scores.items() if score == max_score)
    all_keywords = [k for keywords in DATASET_KEYWORDS.values() for k in keywords]
    indicators = [h for h in headers if any(k in h.lower() for k in all_keywords)]

    return DatasetClassification(
        type=dataset_type,
        confidence=min(max_score / total_score, HEURISTIC_MAX_CONFIDENCE),
        reasoning=f"Classified based on {max_score} matching keyword(s) in column names",
        indicators=indicators,
    )


def classify_dataset(
    headers: Sequence[str],
    rows: Sequence[Mapping[str, Any]],
    ai_classifier: Optional[AIClassifier] = None,
    cache: Optional[ClassificationCache] = None,
) -> DatasetClassification:
    """
    Classify a dataset, preferring the heuristic when it is confident.

    Args:
        headers: Column names
        rows: Dataset rows; the first 20 are handed to ``ai_classifier``
        ai_classifier: Optional callable ``(headers, sample_rows)`` wrapping
            a remote model. Its failures are logged and absorbed.
        cache: Optional keyed store for results, owned by the caller

    Returns:
        The heuristic result when its confidence exceeds 0.8 or no AI
        result is available, otherwise the AI result
    """
    cache_key = generate_headers_cache_key(headers) if cache is not None else None
    if cache is not None:
        cached = cache.get(cache_key)
        if cached is not None:
            return cached

    result = classify_by_heuristics(headers)
    cacheable = True

    if result.confidence <= HEURISTIC_MAX_CONFIDENCE and ai_classifier is not None:
        try:
            result = ai_classifier(headers, list(rows[:AI_SAMPLE_ROWS]))
        except Exception as e:
            # not cached, so the next call retries the AI
            logger.warning(f"AI classification failed, using heuristic: {e}")
            cacheable = False

    if cache is not None and cacheable:
        cache.set(cache_key, result)
    return result
