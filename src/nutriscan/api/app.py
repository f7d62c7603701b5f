"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from nutriscan.api.models import (
    FavoritesList,
    FavoriteState,
    ProductResponse,
    ScoreResponse,
    score_response,
)
from nutriscan.app_logging import configure_logging
from nutriscan.containers import AppContainer
from nutriscan.domain.errors import MalformedRecord, StorageFailure, UnavailableData
from nutriscan.domain.scoring import Category, category_color


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            await app.state.container.favorites_store.load()
        except StorageFailure:
            logger.exception("Failed to hydrate favorites at startup")
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(StorageFailure)
    async def storage_failure_handler(
        request: Request, exc: StorageFailure
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": str(exc)},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/products/{barcode}")
    async def product_detail(barcode: str, request: Request) -> ProductResponse:
        """Return the scored product report for a barcode."""
        state_container: AppContainer = request.app.state.container
        try:
            report = await state_container.product_service.build_report(barcode)
        except UnavailableData as exc:
            return _sentinel_product(barcode, Category.UNKNOWN, str(exc))
        except MalformedRecord as exc:
            logger.warning("Malformed product: barcode=%s error=%s", barcode, exc)
            return _sentinel_product(barcode, Category.ERROR, str(exc))
        if report is None:
            return _sentinel_product(barcode, Category.UNKNOWN, "Product not found")
        return ProductResponse.from_report(report)

    @app.get("/products/{barcode}/score")
    async def product_score(barcode: str, request: Request) -> ScoreResponse:
        """Return only the category outcome for a barcode."""
        state_container: AppContainer = request.app.state.container
        outcome = await state_container.product_service.score_barcode(barcode)
        return score_response(outcome, category_color(outcome.category))

    @app.get("/favorites")
    async def list_favorites(request: Request) -> FavoritesList:
        """Return favorited product ids."""
        state_container: AppContainer = request.app.state.container
        favorites = await state_container.favorites_store.list_favorites()
        return FavoritesList(favorites=favorites)

    @app.get("/favorites/{product_id}")
    async def favorite_state(product_id: str, request: Request) -> FavoriteState:
        """Return whether a product is a favorite."""
        state_container: AppContainer = request.app.state.container
        favorite = await state_container.favorites_store.is_favorite(product_id)
        return FavoriteState(product_id=product_id, favorite=favorite)

    @app.post("/favorites/{product_id}/toggle")
    async def toggle_favorite(product_id: str, request: Request) -> FavoriteState:
        """Flip a product's favorite flag."""
        state_container: AppContainer = request.app.state.container
        favorite = await state_container.favorites_store.toggle(product_id)
        return FavoriteState(product_id=product_id, favorite=favorite)

    return app


def _sentinel_product(barcode: str, category: Category, reason: str) -> ProductResponse:
    return ProductResponse(
        barcode=barcode,
        category=str(category),
        color=category_color(category),
        reason=reason,
    )
