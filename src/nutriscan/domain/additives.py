"""Additive risk table and penalty scoring."""

from collections.abc import Iterable, Mapping
from types import MappingProxyType

_LANGUAGE_PREFIX = "en:"

ADDITIVE_RISKS: Mapping[str, int] = MappingProxyType(
    {
        # Colourings and sweeteners with the strongest concerns.
        "e102": -2,
        "e110": -2,
        "e129": -2,
        "e951": -2,
        "e120": -1,
        "e122": -1,
        "e211": -1,
        "e220": -1,
        "e250": -1,
        "e621": -1,
    }
)


def normalize_additive_code(code: str) -> str:
    """Lower-case a tag and drop its `en:` taxonomy prefix."""
    return code.strip().lower().removeprefix(_LANGUAGE_PREFIX)


def additive_penalty(code: object) -> int:
    """Return the penalty for a single additive tag."""
    if not isinstance(code, str):
        return 0
    return ADDITIVE_RISKS.get(normalize_additive_code(code), 0)


def score_additives(codes: Iterable[object]) -> int:
    """Sum penalties over every tag, counting repeats each time."""
    return sum(additive_penalty(code) for code in codes)
