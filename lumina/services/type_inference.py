"""
Column type inference.

Every cell is classified exactly once into a closed set of kinds
(``CellKind``). A column takes the type held by at least 90% of its
non-null cells; low-cardinality string columns become ``category``.
"""
import math
import re
import warnings
from datetime import date, datetime
from enum import Enum
from typing import Any, List, NamedTuple, Optional, Sequence, Set

import numpy as np
import pandas as pd
from dateutil import parser as dateparser

from lumina.core.schemas import InferredType

MAJORITY_THRESHOLD = 0.9
CATEGORY_MAX_UNIQUE_RATIO = 0.5
CATEGORY_MIN_VALUES = 10  # a category needs strictly more non-null values than this

BOOLEAN_LITERALS = frozenset({"true", "false", "TRUE", "FALSE", "1", "0", "yes", "no"})

# (pattern, strptime format); None means ISO-8601 parsing
DATE_PATTERNS = [
    (re.compile(r"^\d{4}-\d{2}-\d{2}$"), "%Y-%m-%d"),
    (re.compile(r"^\d{2}/\d{2}/\d{4}$"), "%m/%d/%Y"),
    (re.compile(r"^\d{2}-\d{2}-\d{4}$"), "%m-%d-%Y"),
    (re.compile(r"^\d{4}/\d{2}/\d{2}$"), "%Y/%m/%d"),
    (re.compile(r"^\d{1,2}/\d{1,2}/\d{4}$"), "%m/%d/%Y"),
    (re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}"), None),
]

RELATIVE_DATE_WORDS = frozenset({"now", "today", "tomorrow", "yesterday"})
_DIGIT = re.compile(r"\d")
# Two defaults differing in year, month and day: a missing field shows up as a mismatch
_DEFAULT_A = datetime(2001, 1, 1)
_DEFAULT_B = datetime(2002, 2, 2)


class CellKind(str, Enum):
    NULL = "null"
    BOOLEAN = "boolean"
    NUMERIC = "numeric"
    DATE = "date"
    STRING = "string"


class ClassifiedColumn(NamedTuple):
    """A column's cells resolved to kinds. ``values`` holds non-null cells only."""
    total: int
    values: List[Any]
    kinds: List[CellKind]

    @property
    def null_count(self) -> int:
        return self.total - len(self.values)

    @property
    def non_null_count(self) -> int:
        return len(self.values)


def to_native(value: Any) -> Any:
    """Unwrap numpy scalars into plain Python values."""
    if isinstance(value, np.generic) and not isinstance(value, np.datetime64):
        return value.item()
    return value


def is_null(value: Any) -> bool:
    """None, empty string, NaN and NaT are nulls."""
    if value is None or value is pd.NaT:
        return True
    if isinstance(value, np.datetime64):
        return bool(np.isnat(value))
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (float, np.floating)):
        return math.isnan(value)
    return False


def to_number(value: Any) -> Optional[float]:
    """Finite float for a cell, or None when it does not parse."""
    if isinstance(value, (bool, np.bool_)):
        return float(value)
    if isinstance(value, (int, float, np.integer, np.floating)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _parse_date_string(text: str) -> Any:
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        for pattern, fmt in DATE_PATTERNS:
            if pattern.match(text):
                parsed = pd.to_datetime(text, format=fmt or "ISO8601", errors="coerce")
                if not pd.isna(parsed):
                    return parsed
                break
        if not _is_complete_date_text(text):
            return pd.NaT
        return pd.to_datetime(text, errors="coerce")


def _is_complete_date_text(text: str) -> bool:
    """
    Free-form text counts as a date only when it names year, month and day.

    Bare month names ("Jan") and relative keywords ("now", "today") are
    rejected: their parsed value would depend on defaults or the clock.
    """
    if not _DIGIT.search(text) or text.lower() in RELATIVE_DATE_WORDS:
        return False
    try:
        first = dateparser.parse(text, default=_DEFAULT_A)
        second = dateparser.parse(text, default=_DEFAULT_B)
    except (ValueError, OverflowError):
        return False
    return first == second


def parse_timestamp(value: Any) -> Optional[pd.Timestamp]:
    """
    Parse a cell into a naive UTC timestamp.

    Native datetimes pass through; strings go through the fixed date
    patterns first, then a generic parse. Anything else is None.
    """
    if isinstance(value, (pd.Timestamp, datetime, date, np.datetime64)):
        try:
            parsed = pd.Timestamp(value)
        except (ValueError, OverflowError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        parsed = _parse_date_string(text)
    else:
        return None

    if pd.isna(parsed):
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.tz_convert("UTC").tz_localize(None)
    return parsed


def value_key(value: Any) -> str:
    """Canonical text for a cell, used for distinct counts and grouping."""
    value = to_native(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def classify_cell(value: Any) -> CellKind:
    """Classify one cell: boolean, then numeric, then date, else string."""
    if is_null(value):
        return CellKind.NULL
    if isinstance(value, (bool, np.bool_)) or (isinstance(value, str) and value in BOOLEAN_LITERALS):
        return CellKind.BOOLEAN
    if to_number(value) is not None:
        return CellKind.NUMERIC
    if parse_timestamp(value) is not None:
        return CellKind.DATE
    return CellKind.STRING


def classify_values(values: Sequence[Any]) -> ClassifiedColumn:
    kept: List[Any] = []
    kinds: List[CellKind] = []
    for value in values:
        kind = classify_cell(value)
        if kind is CellKind.NULL:
            continue
        kept.append(to_native(value))
        kinds.append(kind)
    return ClassifiedColumn(total=len(values), values=kept, kinds=kinds)


def infer_classified_type(column: ClassifiedColumn) -> InferredType:
    total = column.non_null_count
    if total == 0:
        return "text"

    counts = {kind: 0 for kind in CellKind}
    unique_strings: Set[str] = set()
    for value, kind in zip(column.values, column.kinds):
        counts[kind] += 1
        if kind is CellKind.STRING and isinstance(value, str):
            unique_strings.add(value.lower().strip())

    string_ratio = counts[CellKind.STRING] / total
    is_category = (
        string_ratio >= MAJORITY_THRESHOLD
        and len(unique_strings) / total < CATEGORY_MAX_UNIQUE_RATIO
        and total > CATEGORY_MIN_VALUES
    )

    if counts[CellKind.NUMERIC] / total >= MAJORITY_THRESHOLD:
        return "numeric"
    if counts[CellKind.DATE] / total >= MAJORITY_THRESHOLD:
        return "date"
    if counts[CellKind.BOOLEAN] / total >= MAJORITY_THRESHOLD:
        return "boolean"
    if is_category:
        return "category"
    if string_ratio >= MAJORITY_THRESHOLD:
        return "text"
    return "mixed"


def infer_column_type(values: Sequence[Any]) -> InferredType:
    """
    Infer a column's type from its raw cell values.

    Args:
        values: Raw cells, nulls included

    Returns:
        One of numeric, date, category, text, boolean, mixed
    """
    return infer_classified_type(classify_values(values))
