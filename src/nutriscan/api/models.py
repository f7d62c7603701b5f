"""Pydantic response models for the HTTP API."""

from pydantic import BaseModel

from nutriscan.domain.reports import ProductReport, ScoreOutcome
from nutriscan.domain.scoring import ScoredProduct


class ScoreBreakdown(BaseModel):
    """Scoring detail for one product."""

    product_id: str
    levels: dict[str, str]
    additive_penalty: int
    score: int
    category: str
    positives: list[str]
    negatives: list[str]

    @classmethod
    def from_scored(cls, scored: ScoredProduct) -> "ScoreBreakdown":
        return cls(
            product_id=scored.product_id,
            levels={key: str(level) for key, level in scored.levels.items()},
            additive_penalty=scored.additive_penalty,
            score=scored.score,
            category=str(scored.category),
            positives=list(scored.positives),
            negatives=list(scored.negatives),
        )


class ScoreResponse(BaseModel):
    """Category outcome for a barcode."""

    barcode: str
    category: str
    color: str
    breakdown: ScoreBreakdown | None = None
    reason: str | None = None


class NutrientEntry(BaseModel):
    """Serving amount and level for a nutrient."""

    serving: float | str
    level: str


class ProductResponse(BaseModel):
    """Product detail payload."""

    barcode: str
    category: str
    color: str
    title: str | None = None
    image_url: str | None = None
    brand_owner: str | None = None
    ingredients: str = ""
    additives: list[str] = []
    nutrients: dict[str, NutrientEntry] = {}
    breakdown: ScoreBreakdown | None = None
    reason: str | None = None

    @classmethod
    def from_report(cls, report: ProductReport) -> "ProductResponse":
        return cls(
            barcode=report.barcode,
            category=str(report.category),
            color=report.color,
            title=report.title,
            image_url=report.image_url,
            brand_owner=report.brand_owner,
            ingredients=report.ingredients,
            additives=list(report.additives),
            nutrients={
                key: NutrientEntry(serving=entry.serving, level=str(entry.level))
                for key, entry in report.nutrients.items()
            },
            breakdown=ScoreBreakdown.from_scored(report.scored),
        )


class FavoriteState(BaseModel):
    """Favorite flag for one product."""

    product_id: str
    favorite: bool


class FavoritesList(BaseModel):
    """Favorited product ids in insertion order."""

    favorites: list[str]


def score_response(outcome: ScoreOutcome, color: str) -> ScoreResponse:
    """Convert a score outcome into its response model."""
    return ScoreResponse(
        barcode=outcome.barcode,
        category=str(outcome.category),
        color=color,
        breakdown=(
            ScoreBreakdown.from_scored(outcome.scored) if outcome.scored else None
        ),
        reason=outcome.reason,
    )
