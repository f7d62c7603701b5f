"""Product report models returned to the UI layer."""

from collections.abc import Mapping
from dataclasses import dataclass

from nutriscan.domain.nutrients import NutrientLevel
from nutriscan.domain.products import Amount
from nutriscan.domain.scoring import Category, ScoredProduct

DEFAULT_PRODUCT_TITLE = "Product Name Not Available"
UNKNOWN_ADDITIVE_NAME = "Unknown"


@dataclass(frozen=True)
class NutrientReport:
    """Per-serving amount and per-100g level for one nutrient."""

    serving: Amount
    level: NutrientLevel


@dataclass(frozen=True)
class ProductReport:
    """Everything the product detail view shows for a barcode."""

    barcode: str
    title: str
    image_url: str | None
    brand_owner: str | None
    ingredients: str
    additives: tuple[str, ...]
    nutrients: Mapping[str, NutrientReport]
    scored: ScoredProduct
    color: str

    @property
    def category(self) -> Category:
        return self.scored.category


@dataclass(frozen=True)
class ScoreOutcome:
    """Category for a barcode; `scored` is None for sentinel categories."""

    barcode: str
    category: Category
    scored: ScoredProduct | None = None
    reason: str | None = None
