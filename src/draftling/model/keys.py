"""Random block key generation."""

from __future__ import annotations

import secrets
from functools import partial
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..services.settings import Settings

__all__ = ["generate_random_key", "resolve_key_factory", "DEFAULT_KEY_LENGTH"]

DEFAULT_KEY_LENGTH = 5
# Keys stay reserved for the life of the process so no two blocks ever share one.
_SEEN_KEYS: set[str] = set()
_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


def generate_random_key(length: int = DEFAULT_KEY_LENGTH) -> str:
    """Return a short random key that this process has not handed out before."""

    if length < 1:
        raise ValueError("Key length must be at least 1")
    while True:
        key = "".join(secrets.choice(_ALPHABET) for _ in range(length))
        if key not in _SEEN_KEYS:
            _SEEN_KEYS.add(key)
            return key


def resolve_key_factory(
    key_factory: Callable[[], str] | None = None,
    settings: Settings | None = None,
) -> Callable[[], str]:
    """Pick the block key generator: explicit factory, then settings, then the default."""

    if key_factory is not None:
        return key_factory
    if settings is not None:
        return partial(generate_random_key, settings.block_key_length)
    return generate_random_key
