"""
End-to-end dataset analysis.

profile -> health score -> chart recommendations -> chart data ->
classification, over one immutable snapshot of headers and rows.
"""
import uuid
from typing import Any, Mapping, Optional, Sequence

from lumina.core.cache import ClassificationCache
from lumina.core.config import Settings, get_settings
from lumina.core.logging import run_logger
from lumina.core.performance import track_performance
from lumina.core.schemas import DatasetAnalysis
from lumina.services.classifier import AIClassifier, classify_dataset
from lumina.services.generator import generate_charts
from lumina.services.health import calculate_health_score
from lumina.services.inference import recommend_charts
from lumina.services.profiler import profile_dataset


@track_performance("analyze_dataset")
def analyze_dataset(
    headers: Sequence[str],
    rows: Sequence[Mapping[str, Any]],
    settings: Optional[Settings] = None,
    ai_classifier: Optional[AIClassifier] = None,
    classification_cache: Optional[ClassificationCache] = None,
    run_id: Optional[str] = None,
) -> DatasetAnalysis:
    """
    Analyze a dataset.

    Args:
        headers: Column names from the ingestion step
        rows: Row mappings; a missing key counts as null
        settings: Overrides the environment-derived settings
        ai_classifier: Optional remote classifier, see ``classify_dataset``
        classification_cache: Optional caller-owned classification store
        run_id: Identifier stamped on log records (random if omitted)

    Returns:
        DatasetAnalysis bundling profiles, health, recommendations, chart
        data and classification
    """
    settings = settings or get_settings()
    log = run_logger(__name__, run_id or uuid.uuid4().hex[:12])
    log.info(f"Analyzing dataset: {len(rows)} rows x {len(headers)} columns")

    workers = settings.profile_workers if settings.parallel_profiling else None
    if workers:
        log.debug(f"Profiling columns on {workers} threads")
    columns = profile_dataset(headers, rows, workers=workers)
    health = calculate_health_score(columns, len(rows), headers)
    recommendations = recommend_charts(columns)
    charts = generate_charts(columns, rows, recommendations=recommendations, max_rows=settings.max_chart_rows)
    classification = classify_dataset(headers, rows, ai_classifier=ai_classifier, cache=classification_cache)

    log.info(
        f"Analysis complete: health {health.score}/100, {len(charts)} charts, "
        f"classified as {classification.type} ({classification.confidence:.2f})"
    )

    return DatasetAnalysis(
        row_count=len(rows),
        col_count=len(headers),
        columns=columns,
        health=health,
        recommendations=recommendations,
        charts=charts,
        classification=classification,
    )
