"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nutriscan.adapters.openfoodfacts_client import HttpxOpenFoodFactsClient
from nutriscan.adapters.supabase_storage import SupabaseKeyValueStorage
from nutriscan.config import Settings
from nutriscan.services.cache import InMemoryCache
from nutriscan.services.favorites import FavoritesStore
from nutriscan.services.products import ProductService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    product_service: ProductService
    favorites_store: FavoritesStore
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    storage = SupabaseKeyValueStorage(
        supabase_client, table=resolved_settings.storage_table
    )
    favorites_store = FavoritesStore(
        storage=storage,
        storage_key=resolved_settings.favorites_storage_key,
        timeout_seconds=resolved_settings.storage_timeout_seconds,
    )
    off_client = HttpxOpenFoodFactsClient.create(
        base_url=resolved_settings.openfoodfacts_base_url,
        timeout_seconds=resolved_settings.http_timeout_seconds,
    )
    product_service = ProductService(
        client=off_client,
        cache=InMemoryCache(),
        product_ttl_seconds=resolved_settings.product_cache_ttl_seconds,
        additive_ttl_seconds=resolved_settings.additive_cache_ttl_seconds,
        debug=resolved_settings.debug,
    )

    async def close_resources() -> None:
        await off_client.close()

    return AppContainer(
        settings=resolved_settings,
        product_service=product_service,
        favorites_store=favorites_store,
        close_resources=close_resources,
    )
