"""Nutrient thresholds and per-nutrient level classification."""

import math
from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType

UNAVAILABLE = "unknown"


class NutrientLevel(StrEnum):
    """Qualitative bucket for one nutrient's concentration."""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class NutrientThreshold:
    """Closed `[low, high]` band of grams per 100g considered normal."""

    low: float
    high: float

    def __post_init__(self) -> None:
        if not self.low < self.high:
            raise ValueError(f"Threshold low {self.low} must be below {self.high}")


NUTRIENT_THRESHOLDS: Mapping[str, NutrientThreshold] = MappingProxyType(
    {
        "proteins": NutrientThreshold(low=5, high=20),
        "sodium": NutrientThreshold(low=0.1, high=0.6),
        "energy-kcal": NutrientThreshold(low=50, high=200),
        "saturated-fat": NutrientThreshold(low=1.5, high=5),
        "fat": NutrientThreshold(low=3, high=20),
        "sugars": NutrientThreshold(low=5, high=20),
    }
)


def coerce_amount(value: object) -> float | None:
    """Return a usable grams value, or None when the value is unavailable.

    Booleans, non-finite numbers (including integers too large for a float),
    negative numbers and anything that is not a number or a numeric string are
    treated as unavailable.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int | float):
        try:
            amount = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        try:
            amount = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(amount) or amount < 0:
        return None
    return amount


def classify(nutrient_key: str, value: object) -> NutrientLevel:
    """Classify a grams-per-100g value against the nutrient's thresholds."""
    threshold = NUTRIENT_THRESHOLDS.get(nutrient_key)
    if threshold is None:
        return NutrientLevel.UNKNOWN
    amount = coerce_amount(value)
    if amount is None:
        return NutrientLevel.UNKNOWN
    if amount < threshold.low:
        return NutrientLevel.LOW
    if amount > threshold.high:
        return NutrientLevel.HIGH
    return NutrientLevel.NORMAL
