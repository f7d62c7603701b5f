"""Tests for nutrient level classification."""

import math

import pytest

from nutriscan.domain.nutrients import (
    NUTRIENT_THRESHOLDS,
    NutrientLevel,
    NutrientThreshold,
    classify,
    coerce_amount,
)


def test_thresholds_are_ordered() -> None:
    for threshold in NUTRIENT_THRESHOLDS.values():
        assert threshold.low < threshold.high


def test_threshold_table_is_read_only() -> None:
    with pytest.raises(TypeError):
        NUTRIENT_THRESHOLDS["fiber"] = NutrientThreshold(1, 2)  # type: ignore[index]


def test_threshold_rejects_inverted_band() -> None:
    with pytest.raises(ValueError):
        NutrientThreshold(low=5, high=5)


@pytest.mark.parametrize("nutrient_key", sorted(NUTRIENT_THRESHOLDS))
def test_classify_bands_and_boundaries(nutrient_key: str) -> None:
    threshold = NUTRIENT_THRESHOLDS[nutrient_key]
    below = threshold.low / 2
    middle = (threshold.low + threshold.high) / 2

    assert classify(nutrient_key, below) is NutrientLevel.LOW
    assert classify(nutrient_key, threshold.low) is NutrientLevel.NORMAL
    assert classify(nutrient_key, middle) is NutrientLevel.NORMAL
    assert classify(nutrient_key, threshold.high) is NutrientLevel.NORMAL
    assert classify(nutrient_key, threshold.high + 0.001) is NutrientLevel.HIGH


def test_classify_scenario_values() -> None:
    assert classify("sugars", 3) is NutrientLevel.LOW
    assert classify("sodium", 0.05) is NutrientLevel.LOW
    assert classify("saturated-fat", 0.5) is NutrientLevel.LOW
    assert classify("proteins", 25) is NutrientLevel.HIGH
    assert classify("energy-kcal", 40) is NutrientLevel.LOW
    assert classify("fat", 0) is NutrientLevel.LOW


def test_classify_unrecognized_key_is_unknown() -> None:
    assert classify("fiber", 3) is NutrientLevel.UNKNOWN
    assert classify("", 3) is NutrientLevel.UNKNOWN


@pytest.mark.parametrize(
    "value",
    ["unknown", None, "", "n/a", math.nan, math.inf, -1, 10**400, True, [], {}],
)
def test_classify_unavailable_values_are_unknown(value: object) -> None:
    assert classify("sugars", value) is NutrientLevel.UNKNOWN


def test_classify_accepts_numeric_strings() -> None:
    assert classify("sugars", "25.5") is NutrientLevel.HIGH


def test_coerce_amount_keeps_zero() -> None:
    assert coerce_amount(0) == 0.0
    assert coerce_amount("unknown") is None
