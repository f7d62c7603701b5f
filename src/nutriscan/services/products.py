"""Product lookup and scoring service backed by Open Food Facts."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from types import MappingProxyType

import httpx

from nutriscan.adapters.openfoodfacts_client import OpenFoodFactsClient
from nutriscan.domain.additives import normalize_additive_code
from nutriscan.domain.errors import MalformedRecord, UnavailableData
from nutriscan.domain.nutrients import classify
from nutriscan.domain.products import ProductRecord, parse_product_record
from nutriscan.domain.reports import (
    DEFAULT_PRODUCT_TITLE,
    UNKNOWN_ADDITIVE_NAME,
    NutrientReport,
    ProductReport,
    ScoreOutcome,
)
from nutriscan.domain.scoring import Category, category_color, score_product
from nutriscan.services.cache import Cache

_ADDITIVES_CACHE_KEY = "off:additives"

_logger = logging.getLogger(__name__)


@dataclass
class ProductService:
    """Fetches product records and turns them into scored reports."""

    client: OpenFoodFactsClient
    cache: Cache
    product_ttl_seconds: int = 3600
    additive_ttl_seconds: int = 86400
    debug: bool = False

    async def fetch_record(self, barcode: str) -> ProductRecord | None:
        """Return the parsed product record, or None when the barcode is unknown.

        Raises UnavailableData when the source cannot be reached and
        MalformedRecord when the product cannot be parsed.
        """
        cache_key = f"off:product:{barcode}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, ProductRecord):
            return cached

        try:
            payload = await self.client.get_product(barcode)
        except (httpx.HTTPError, ValueError) as exc:
            _logger.warning("Product lookup failed: barcode=%s error=%s", barcode, exc)
            raise UnavailableData(f"Product {barcode} could not be fetched") from exc
        if payload is None:
            if self.debug:
                _logger.info("Product not found: barcode=%s", barcode)
            return None

        record = parse_product_record(payload, barcode=barcode)
        self.cache.set(cache_key, record, ttl_seconds=self.product_ttl_seconds)
        return record

    async def additive_names(self, additive_codes: Iterable[str]) -> list[str]:
        """Resolve additive tags to display names.

        Tags missing from the taxonomy resolve to "Unknown"; an unreachable
        taxonomy yields no names at all.
        """
        codes = list(additive_codes)
        if not codes:
            return []
        try:
            names = await self._additive_taxonomy()
        except UnavailableData:
            return []
        return [
            names.get(normalize_additive_code(code), UNKNOWN_ADDITIVE_NAME)
            for code in codes
        ]

    async def build_report(self, barcode: str) -> ProductReport | None:
        """Build the detail report for a barcode, None when not found."""
        record = await self.fetch_record(barcode)
        if record is None:
            return None
        scored = score_product(record)
        nutrients = {
            nutrient_key: NutrientReport(
                serving=value.per_serving,
                level=classify(nutrient_key, value.per_100g),
            )
            for nutrient_key, value in record.nutrients.items()
        }
        return ProductReport(
            barcode=barcode,
            title=record.product_name or DEFAULT_PRODUCT_TITLE,
            image_url=record.image_url,
            brand_owner=record.brand_owner,
            ingredients=", ".join(record.ingredients),
            additives=tuple(await self.additive_names(record.additives_tags)),
            nutrients=MappingProxyType(nutrients),
            scored=scored,
            color=category_color(scored.category),
        )

    async def score_barcode(self, barcode: str) -> ScoreOutcome:
        """Score a barcode, degrading to a sentinel category instead of raising."""
        try:
            record = await self.fetch_record(barcode)
        except UnavailableData as exc:
            return ScoreOutcome(barcode, Category.UNKNOWN, reason=str(exc))
        except MalformedRecord as exc:
            _logger.warning("Malformed product: barcode=%s error=%s", barcode, exc)
            return ScoreOutcome(barcode, Category.ERROR, reason=str(exc))
        if record is None:
            return ScoreOutcome(barcode, Category.UNKNOWN, reason="Product not found")
        scored = score_product(record)
        if self.debug:
            _logger.info(
                "Product scored: barcode=%s score=%s category=%s",
                barcode,
                scored.score,
                scored.category,
            )
        return ScoreOutcome(barcode, scored.category, scored=scored)

    async def _additive_taxonomy(self) -> dict[str, str]:
        cached = self.cache.get(_ADDITIVES_CACHE_KEY)
        if isinstance(cached, dict):
            return cached
        try:
            entries = await self.client.list_additives()
        except (httpx.HTTPError, ValueError) as exc:
            _logger.warning("Additive taxonomy lookup failed: %s", exc)
            raise UnavailableData("Additive taxonomy could not be fetched") from exc
        names: dict[str, str] = {}
        for entry in entries:
            additive_id = entry.get("id")
            name = entry.get("name")
            if isinstance(additive_id, str) and isinstance(name, str):
                names[normalize_additive_code(additive_id)] = name
        self.cache.set(
            _ADDITIVES_CACHE_KEY, names, ttl_seconds=self.additive_ttl_seconds
        )
        return names
