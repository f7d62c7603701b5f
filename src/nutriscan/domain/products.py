"""Product records ingested from the product data source."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from nutriscan.domain.errors import MalformedRecord
from nutriscan.domain.nutrients import NUTRIENT_THRESHOLDS, UNAVAILABLE, coerce_amount

Amount = float | str


@dataclass(frozen=True)
class NutrientValue:
    """Measured amounts for one nutrient; `UNAVAILABLE` marks a missing value."""

    per_100g: Amount = UNAVAILABLE
    per_serving: Amount = UNAVAILABLE


@dataclass(frozen=True)
class ProductRecord:
    """Normalized product record consumed by the scoring engine.

    `nutrients` only holds recognized nutrients the source reported at least
    one amount for; nutrients the source never measured are absent.
    """

    product_id: str
    product_name: str | None = None
    image_url: str | None = None
    brand_owner: str | None = None
    ingredients: tuple[str, ...] = ()
    additives_tags: tuple[str, ...] = ()
    nutrients: Mapping[str, NutrientValue] = field(
        default_factory=lambda: MappingProxyType({})
    )


def parse_product_record(
    payload: Mapping[str, object], barcode: str | None = None
) -> ProductRecord:
    """Build a `ProductRecord` from a raw Open Food Facts product object."""
    if not isinstance(payload, Mapping):
        raise MalformedRecord("Product payload is not an object")
    product_id = _identity(payload, barcode)
    nutriments = payload.get("nutriments")
    if nutriments is None:
        nutriments = {}
    if not isinstance(nutriments, Mapping):
        raise MalformedRecord(f"Product {product_id} has malformed nutriments")

    return ProductRecord(
        product_id=product_id,
        product_name=_optional_text(payload.get("product_name")),
        image_url=_optional_text(payload.get("image_url")),
        brand_owner=_optional_text(payload.get("brand_owner")),
        ingredients=_ingredient_texts(payload.get("ingredients")),
        additives_tags=tuple(
            tag
            for tag in _as_list(payload.get("additives_tags"))
            if isinstance(tag, str)
        ),
        nutrients=MappingProxyType(_extract_nutrients(nutriments)),
    )


def _identity(payload: Mapping[str, object], barcode: str | None) -> str:
    for candidate in (payload.get("code"), payload.get("_id"), barcode):
        if isinstance(candidate, int) and not isinstance(candidate, bool):
            candidate = str(candidate)
        if isinstance(candidate, str) and candidate.strip():
            return candidate.strip()
    raise MalformedRecord("Product record has no identifier")


def _extract_nutrients(nutriments: Mapping[str, object]) -> dict[str, NutrientValue]:
    values: dict[str, NutrientValue] = {}
    for nutrient in NUTRIENT_THRESHOLDS:
        per_100g = _amount(nutriments.get(f"{nutrient}_100g"))
        per_serving = _amount(nutriments.get(f"{nutrient}_serving"))
        if per_100g == UNAVAILABLE and per_serving == UNAVAILABLE:
            continue
        values[nutrient] = NutrientValue(per_100g=per_100g, per_serving=per_serving)
    return values


def _amount(raw: object) -> Amount:
    amount = coerce_amount(raw)
    return UNAVAILABLE if amount is None else amount


def _ingredient_texts(raw: object) -> tuple[str, ...]:
    texts: list[str] = []
    for ingredient in _as_list(raw):
        if isinstance(ingredient, Mapping):
            text = ingredient.get("text")
            if isinstance(text, str) and text:
                texts.append(text)
        elif isinstance(ingredient, str) and ingredient:
            texts.append(ingredient)
    return tuple(texts)


def _as_list(raw: object) -> list[object]:
    return list(raw) if isinstance(raw, list | tuple) else []


def _optional_text(raw: object) -> str | None:
    if isinstance(raw, str) and raw.strip():
        return raw
    return None
