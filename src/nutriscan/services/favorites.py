"""Favorites store with serialized read-modify-write toggles."""

import asyncio
import logging
from collections.abc import Awaitable
from dataclasses import dataclass, field
from typing import Protocol, TypeVar

from nutriscan.domain.errors import StorageFailure
from nutriscan.domain.favorites import FavoritesSet

DEFAULT_STORAGE_KEY = "favsList"

_logger = logging.getLogger(__name__)

_T = TypeVar("_T")


class KeyValueStorage(Protocol):
    """Persistence interface for string values stored under named keys."""

    async def get_item(self, key: str) -> str | None:
        """Return the stored value for `key`, if any."""

    async def set_item(self, key: str, value: str) -> None:
        """Store `value` under `key`, replacing any previous value."""


@dataclass
class FavoritesStore:
    """Single owner of the persisted favorites set.

    Every operation runs under one lock covering the whole set, so a toggle
    reads, flips and persists before any other toggle or read starts. The
    in-memory view only changes after a write succeeds. A storage call that
    times out is waited for, and the set re-read, before the next operation.
    """

    storage: KeyValueStorage
    storage_key: str = DEFAULT_STORAGE_KEY
    timeout_seconds: float = 5.0
    _favorites: FavoritesSet | None = field(default=None, init=False, repr=False)
    _last_removal: tuple[str, int] | None = field(
        default=None, init=False, repr=False
    )
    _pending: "asyncio.Future[object] | None" = field(
        default=None, init=False, repr=False
    )
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)

    async def load(self) -> list[str]:
        """Read the persisted set and replace the in-memory view."""
        async with self._lock:
            await self._settle_pending()
            self._favorites = await self._read()
            self._last_removal = None
            return list(self._favorites.ids)

    async def is_favorite(self, product_id: str) -> bool:
        """Return True when the product is in the favorites set."""
        favorites = await self._snapshot()
        return product_id in favorites

    async def list_favorites(self) -> list[str]:
        """Return favorited ids in the order they were added."""
        favorites = await self._snapshot()
        return list(favorites.ids)

    async def toggle(self, product_id: str) -> bool:
        """Flip membership for a product and return its new state.

        The update keeps running if the caller stops waiting for it.
        """
        if not product_id:
            raise ValueError("product_id must be a non-empty string")
        task = asyncio.ensure_future(self._toggle(product_id))
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            task.add_done_callback(_log_abandoned_toggle)
            raise

    async def _toggle(self, product_id: str) -> bool:
        async with self._lock:
            current = await self._loaded()
            if product_id in current:
                removal: tuple[str, int] | None = (
                    product_id,
                    current.index(product_id),
                )
                updated = current.without(product_id)
            else:
                removal = None
                position = None
                if self._last_removal and self._last_removal[0] == product_id:
                    position = self._last_removal[1]
                updated = current.with_id(product_id, position)

            await self._write(updated)
            self._favorites = updated
            self._last_removal = removal
            favorite = product_id in updated
            _logger.info(
                "Favorite toggled: product_id=%s favorite=%s", product_id, favorite
            )
            return favorite

    async def _snapshot(self) -> FavoritesSet:
        async with self._lock:
            return await self._loaded()

    async def _loaded(self) -> FavoritesSet:
        # Caller holds the lock.
        await self._settle_pending()
        if self._favorites is None:
            self._favorites = await self._read()
        return self._favorites

    async def _read(self) -> FavoritesSet:
        raw = await self._call(self.storage.get_item(self.storage_key), action="read")
        try:
            return FavoritesSet.parse(raw)
        except ValueError as exc:
            _logger.exception("Stored favorites under %s are corrupt", self.storage_key)
            raise StorageFailure("Stored favorites are corrupt") from exc

    async def _write(self, favorites: FavoritesSet) -> None:
        await self._call(
            self.storage.set_item(self.storage_key, favorites.serialize()),
            action="write",
        )

    async def _settle_pending(self) -> None:
        """Wait for a storage call that outlived its timeout.

        The view was dropped when the call timed out, so the next read sees
        whatever that call left in storage.
        """
        pending, self._pending = self._pending, None
        if pending is None:
            return
        done, _ = await asyncio.wait({pending}, timeout=self.timeout_seconds)
        if not done:
            self._pending = pending
            raise StorageFailure("A previous favorites update is still running")

    async def _call(self, operation: Awaitable[_T], *, action: str) -> _T:
        task = asyncio.ensure_future(operation)
        try:
            return await asyncio.wait_for(
                asyncio.shield(task), timeout=self.timeout_seconds
            )
        except TimeoutError as exc:
            # Storage calls may run in worker threads that cannot be
            # cancelled; keep the task so later operations wait for it.
            task.add_done_callback(_log_late_failure)
            self._pending = task
            self._favorites = None
            self._last_removal = None
            _logger.warning(
                "Favorites %s timed out after %ss", action, self.timeout_seconds
            )
            raise StorageFailure(f"Favorites {action} timed out") from exc
        except asyncio.CancelledError:
            task.add_done_callback(_log_late_failure)
            raise
        except StorageFailure:
            raise
        except Exception as exc:
            _logger.exception("Favorites %s failed", action)
            raise StorageFailure(f"Favorites {action} failed") from exc


def _log_late_failure(task: "asyncio.Future[object]") -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        _logger.warning("Timed-out favorites storage call failed: %s", exc)


def _log_abandoned_toggle(task: "asyncio.Future[bool]") -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        _logger.warning("Abandoned favorites toggle failed: %s", exc)
