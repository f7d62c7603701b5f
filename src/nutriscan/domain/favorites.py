"""Favorites set model and its persisted encoding."""

import json
from dataclasses import dataclass


@dataclass(frozen=True)
class FavoritesSet:
    """Ordered, duplicate-free set of favorited product ids.

    The favorite flag for an id and the ordered list are both read from
    `ids`, so they cannot disagree.
    """

    ids: tuple[str, ...] = ()

    def __contains__(self, product_id: object) -> bool:
        return product_id in self.ids

    def __len__(self) -> int:
        return len(self.ids)

    def index(self, product_id: str) -> int:
        """Position of a favorited id."""
        return self.ids.index(product_id)

    def with_id(self, product_id: str, position: int | None = None) -> "FavoritesSet":
        """Return a copy with `product_id` added, appended unless positioned."""
        if product_id in self.ids:
            return self
        if position is None or not 0 <= position <= len(self.ids):
            position = len(self.ids)
        ids = list(self.ids)
        ids.insert(position, product_id)
        return FavoritesSet(tuple(ids))

    def without(self, product_id: str) -> "FavoritesSet":
        """Return a copy with `product_id` removed."""
        return FavoritesSet(tuple(item for item in self.ids if item != product_id))

    def serialize(self) -> str:
        """Encode as a compact JSON array."""
        return json.dumps(list(self.ids), separators=(",", ":"))

    @classmethod
    def parse(cls, raw: str | None) -> "FavoritesSet":
        """Decode a stored JSON array, dropping repeated ids.

        Raises ValueError when the payload is not a JSON array of strings.
        """
        if raw is None or not raw.strip():
            return cls()
        decoded = json.loads(raw)
        if not isinstance(decoded, list) or not all(
            isinstance(item, str) for item in decoded
        ):
            raise ValueError("Favorites payload must be a JSON array of strings")
        return cls(tuple(dict.fromkeys(decoded)))
