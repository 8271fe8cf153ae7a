from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Any, Dict, Union, Literal

InferredType = Literal["numeric", "date", "category", "text", "boolean", "mixed"]
ChartType = Literal["line", "bar", "pie", "scatter", "histogram"]
DatasetType = Literal["finance", "sales", "inventory", "marketing", "operations", "general"]
Severity = Literal["low", "medium", "high"]


class FrozenModel(BaseModel):
    """Base for analysis results: immutable once built."""
    model_config = ConfigDict(frozen=True)


class ColumnQuality(FrozenModel):
    completeness: float = Field(ge=0.0, le=1.0)
    consistency: float = Field(ge=0.0, le=1.0)
    uniqueness: float = Field(ge=0.0, le=1.0)


class OutlierSummary(FrozenModel):
    count: int
    values: List[float]
    method: Literal["iqr", "zscore"]


class CategoryCount(FrozenModel):
    value: Union[int, float, str]
    count: int
    percentage: float


class DateRange(FrozenModel):
    min: str  # ISO-8601
    max: str
    span_days: int = Field(ge=0)


class ColumnProfile(FrozenModel):
    name: str
    inferred_type: InferredType
    unique_values: int = Field(ge=0)
    null_count: int = Field(ge=0)
    quality: ColumnQuality
    min: Optional[Union[float, str]] = None  # float for numeric, ISO string for date
    max: Optional[Union[float, str]] = None
    mean: Optional[float] = None
    median: Optional[float] = None
    standard_deviation: Optional[float] = None
    date_range: Optional[DateRange] = None
    top_categories: Optional[List[CategoryCount]] = None
    mode: Optional[Union[int, float, str]] = None
    outliers: Optional[OutlierSummary] = None


class HealthScoreBreakdown(FrozenModel):
    completeness: int = Field(ge=0, le=100)
    uniqueness: int = Field(ge=0, le=100)
    consistency: int = Field(ge=0, le=100)
    header_quality: int = Field(ge=0, le=100)
    anomaly_score: int = Field(ge=0, le=100)  # higher means fewer anomalies
    overall: int = Field(ge=0, le=100)


class HealthIssue(FrozenModel):
    severity: Severity
    message: str
    affected_columns: Optional[List[str]] = None
    examples: Optional[List[str]] = None


class DuplicationIssue(FrozenModel):
    severity: Severity
    message: str
    duplicate_percentage: int


class HealthIssues(FrozenModel):
    missing_data: List[HealthIssue] = []
    anomalies: List[HealthIssue] = []
    bad_headers: List[HealthIssue] = []
    type_issues: List[HealthIssue] = []
    duplication: Optional[DuplicationIssue] = None


class HealthScoreResult(FrozenModel):
    score: int = Field(ge=0, le=100)
    breakdown: HealthScoreBreakdown
    issues: HealthIssues
    recommendations: List[str]


class ChartRecommendation(FrozenModel):
    chart_type: ChartType
    title: str
    description: str
    x_axis: str
    y_axis: Union[str, List[str]]
    columns: List[str]
    priority: int = Field(ge=1, le=5)
    reasoning: str


class ChartData(FrozenModel):
    chart_type: ChartType
    title: str
    x_axis: str
    y_axis: str
    data: List[Dict[str, Any]]
    colors: List[str]


class DatasetClassification(FrozenModel):
    type: DatasetType
    confidence: float = Field(ge=0.0, le=1.0)
    reasoning: str
    indicators: List[str]


class DatasetAnalysis(FrozenModel):
    row_count: int
    col_count: int
    columns: List[ColumnProfile]
    health: HealthScoreResult
    recommendations: List[ChartRecommendation]
    charts: List[ChartData]
    classification: DatasetClassification
