"""Pydantic schemas for the persisted user preference blob."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

RECENTLY_VIEWED_LIMIT = 20


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"


def _dedupe(ids: list[str]) -> list[str]:
    """Drop repeated identifiers while keeping the first occurrence."""

    seen: set[str] = set()
    unique: list[str] = []
    for product_id in ids:
        if product_id in seen:
            continue
        seen.add(product_id)
        unique.append(product_id)
    return unique


class PreferenceState(BaseModel):
    """Favorites, recently viewed history and theme for the local profile.

    Both id lists are ordered most-recent-first. Validation collapses
    duplicates so that a hand-edited or stale blob still yields a state that
    honours the store's invariants.
    """

    model_config = ConfigDict(frozen=True)

    favorites: tuple[str, ...] = Field(default_factory=tuple)
    recently_viewed: tuple[str, ...] = Field(default_factory=tuple)
    theme: Theme = Theme.SYSTEM

    @field_validator("favorites", "recently_viewed", mode="before")
    @classmethod
    def _normalize_ids(cls, value: object) -> object:
        if isinstance(value, (list, tuple)):
            if not all(isinstance(item, str) and item for item in value):
                raise ValueError("Product identifiers must be non-empty strings")
            return tuple(_dedupe(list(value)))
        return value


__all__ = [
    "PreferenceState",
    "RECENTLY_VIEWED_LIMIT",
    "Theme",
]
