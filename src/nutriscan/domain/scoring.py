"""Score aggregation and health categories."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType

from nutriscan.domain.additives import score_additives
from nutriscan.domain.nutrients import NUTRIENT_THRESHOLDS, NutrientLevel, classify
from nutriscan.domain.products import ProductRecord


class Category(StrEnum):
    """Health category labels.

    The first five members are ordered by increasing desirability. `UNKNOWN`
    and `ERROR` are outcomes for products that could not be scored and have
    no rank.
    """

    BAD = "Bad"
    POOR = "Poor"
    AVERAGE = "Average"
    GOOD = "Good"
    EXCELLENT = "Excellent"
    UNKNOWN = "Unknown"
    ERROR = "Error"

    @property
    def rank(self) -> int | None:
        """Position in the desirability ordering, None for sentinels."""
        try:
            return RANKED_CATEGORIES.index(self)
        except ValueError:
            return None

    @property
    def is_sentinel(self) -> bool:
        """Return True for outcomes outside the ordering."""
        return self.rank is None


RANKED_CATEGORIES: tuple[Category, ...] = (
    Category.BAD,
    Category.POOR,
    Category.AVERAGE,
    Category.GOOD,
    Category.EXCELLENT,
)

NUTRIENT_WEIGHTS: Mapping[str, Mapping[NutrientLevel, int]] = MappingProxyType(
    {
        "proteins": MappingProxyType({NutrientLevel.LOW: -1, NutrientLevel.HIGH: 2}),
        "sugars": MappingProxyType({NutrientLevel.LOW: 1, NutrientLevel.HIGH: -2}),
        "sodium": MappingProxyType({NutrientLevel.LOW: 1, NutrientLevel.HIGH: -2}),
        "saturated-fat": MappingProxyType(
            {NutrientLevel.LOW: 1, NutrientLevel.HIGH: -2}
        ),
        "energy-kcal": MappingProxyType(
            {NutrientLevel.LOW: 1, NutrientLevel.HIGH: -1}
        ),
    }
)


def nutrient_weight(nutrient_key: str, level: NutrientLevel) -> int:
    """Signed contribution of one nutrient level to the score."""
    return NUTRIENT_WEIGHTS.get(nutrient_key, {}).get(level, 0)


def aggregate(levels: Mapping[str, NutrientLevel], additive_penalty: int) -> int:
    """Combine nutrient levels and the additive penalty into one score."""
    return additive_penalty + sum(
        nutrient_weight(nutrient_key, level) for nutrient_key, level in levels.items()
    )


@dataclass(frozen=True)
class BandTable:
    """Score bands as `(minimum score, category)` pairs, highest first.

    Scores below the last minimum fall into `floor`, so every integer maps to
    exactly one category.
    """

    bands: tuple[tuple[int, Category], ...]
    floor: Category

    def __post_init__(self) -> None:
        minimums = [minimum for minimum, _ in self.bands]
        ranks = [category.rank for _, category in self.bands] + [self.floor.rank]
        if any(rank is None for rank in ranks):
            raise ValueError("Band tables may only use ranked categories")
        if minimums != sorted(set(minimums), reverse=True):
            raise ValueError("Band minimums must be strictly descending")
        if ranks != sorted(set(ranks), reverse=True):
            raise ValueError("Band categories must be strictly descending")

    def categorize(self, score: int) -> Category:
        """Return the category whose band contains `score`."""
        for minimum, category in self.bands:
            if score >= minimum:
                return category
        return self.floor


# Detail view bands.
CANONICAL_BANDS = BandTable(
    bands=(
        (10, Category.EXCELLENT),
        (5, Category.GOOD),
        (0, Category.AVERAGE),
        (-5, Category.POOR),
    ),
    floor=Category.BAD,
)

# Narrower bands used by the product list; kept for comparison, never the default.
COMPACT_BANDS = BandTable(
    bands=(
        (3, Category.GOOD),
        (0, Category.AVERAGE),
        (-3, Category.POOR),
    ),
    floor=Category.BAD,
)


def categorize(score: int, bands: BandTable = CANONICAL_BANDS) -> Category:
    """Map an aggregate score to its health category."""
    return bands.categorize(score)


CATEGORY_COLORS: Mapping[Category, str] = MappingProxyType(
    {
        Category.EXCELLENT: "#5bb450",
        Category.GOOD: "#ffd700",
        Category.AVERAGE: "#ccc",
        Category.POOR: "#ff6347",
        Category.BAD: "#8b0000",
    }
)
_DEFAULT_COLOR = "#ccc"


def category_color(category: Category | str) -> str:
    """Badge color for a category label, grey when the label is not ranked."""
    try:
        resolved = Category(category)
    except ValueError:
        return _DEFAULT_COLOR
    return CATEGORY_COLORS.get(resolved, _DEFAULT_COLOR)


@dataclass(frozen=True)
class ScoredProduct:
    """Outcome of scoring one product record."""

    product_id: str
    levels: Mapping[str, NutrientLevel]
    additive_penalty: int
    score: int
    category: Category
    positives: tuple[str, ...]
    negatives: tuple[str, ...]


def nutrient_levels(record: ProductRecord) -> dict[str, NutrientLevel]:
    """Classify every nutrient the record reports, in threshold-table order."""
    return {
        nutrient_key: classify(nutrient_key, record.nutrients[nutrient_key].per_100g)
        for nutrient_key in NUTRIENT_THRESHOLDS
        if nutrient_key in record.nutrients
    }


def split_contributions(
    levels: Mapping[str, NutrientLevel],
) -> tuple[tuple[str, ...], tuple[str, ...]]:
    """Return nutrients that raised and lowered the score, in table order."""
    ordered = _table_order(levels)
    positives = tuple(key for key in ordered if nutrient_weight(key, levels[key]) > 0)
    negatives = tuple(key for key in ordered if nutrient_weight(key, levels[key]) < 0)
    return positives, negatives


def score_levels(
    product_id: str,
    levels: Mapping[str, NutrientLevel],
    additive_codes: Iterable[object] = (),
    bands: BandTable = CANONICAL_BANDS,
) -> ScoredProduct:
    """Score already-classified nutrient levels plus additive tags."""
    penalty = score_additives(additive_codes)
    score = aggregate(levels, penalty)
    positives, negatives = split_contributions(levels)
    return ScoredProduct(
        product_id=product_id,
        levels=MappingProxyType(dict(levels)),
        additive_penalty=penalty,
        score=score,
        category=categorize(score, bands),
        positives=positives,
        negatives=negatives,
    )


def score_product(
    record: ProductRecord, bands: BandTable = CANONICAL_BANDS
) -> ScoredProduct:
    """Classify, aggregate and categorize a product record."""
    return score_levels(
        record.product_id,
        nutrient_levels(record),
        record.additives_tags,
        bands,
    )


def _table_order(levels: Mapping[str, NutrientLevel]) -> list[str]:
    known = [key for key in NUTRIENT_THRESHOLDS if key in levels]
    return known + sorted(key for key in levels if key not in NUTRIENT_THRESHOLDS)
