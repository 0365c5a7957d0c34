"""Durable favorites, recently viewed history and theme for the local profile."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable

from pydantic import ValidationError

from marketplace.schemas.preferences import RECENTLY_VIEWED_LIMIT, PreferenceState, Theme
from marketplace.storage import DurableStore, preferences_key

logger = logging.getLogger(__name__)

PreferenceListener = Callable[[PreferenceState], None]


class InvalidPreferenceBlob(ValueError):
    """Raised when the durable blob cannot be decoded into a preference state."""


def decode_preference_blob(blob: str) -> PreferenceState:
    """Parse a persisted blob, raising :class:`InvalidPreferenceBlob` on bad data."""

    try:
        payload = json.loads(blob)
    except (json.JSONDecodeError, RecursionError) as exc:
        raise InvalidPreferenceBlob(f"Preference blob is not valid JSON: {exc}") from exc

    if not isinstance(payload, dict):
        raise InvalidPreferenceBlob("Preference blob must be a JSON object")

    try:
        return PreferenceState.model_validate(payload)
    except ValidationError as exc:
        raise InvalidPreferenceBlob(f"Preference blob has an invalid shape: {exc}") from exc


def encode_preference_state(state: PreferenceState) -> str:
    return json.dumps(state.model_dump(mode="json"))


def _require_id(product_id: str) -> str:
    if not isinstance(product_id, str) or not product_id:
        raise ValueError("product_id must be a non-empty string")
    return product_id


class PreferenceStore:
    """Keep :class:`PreferenceState` in memory and mirror it to a durable store.

    The store hydrates once on construction. Every mutation builds the next
    state, writes the full snapshot, and only then swaps it in, so a failed
    write leaves the in-memory state untouched and the error propagates.
    Nothing is written until the first mutation.
    """

    def __init__(
        self,
        storage: DurableStore,
        *,
        key: str | None = None,
        recently_viewed_limit: int = RECENTLY_VIEWED_LIMIT,
    ) -> None:
        if recently_viewed_limit < 1:
            raise ValueError("recently_viewed_limit must be positive")
        self._storage = storage
        self._key = key or preferences_key()
        self._recently_viewed_limit = recently_viewed_limit
        self._listeners: list[PreferenceListener] = []
        self._state = self._hydrate()
        self._favorite_ids: set[str] = set(self._state.favorites)

    @property
    def key(self) -> str:
        return self._key

    @property
    def state(self) -> PreferenceState:
        return self._state

    @property
    def favorites(self) -> tuple[str, ...]:
        return self._state.favorites

    @property
    def recently_viewed(self) -> tuple[str, ...]:
        return self._state.recently_viewed

    @property
    def theme(self) -> Theme:
        return self._state.theme

    def snapshot(self) -> PreferenceState:
        """Return the current state; it is frozen, so sharing it is safe."""

        return self._state

    def _hydrate(self) -> PreferenceState:
        blob = self._storage.read(self._key)
        if blob is None:
            logger.debug("No stored preferences under %s; using defaults", self._key)
            return PreferenceState()

        try:
            state = decode_preference_blob(blob)
        except InvalidPreferenceBlob as exc:
            logger.warning("Discarding stored preferences under %s: %s", self._key, exc)
            return PreferenceState()

        if len(state.recently_viewed) > self._recently_viewed_limit:
            state = state.model_copy(
                update={"recently_viewed": state.recently_viewed[: self._recently_viewed_limit]}
            )
        logger.debug(
            "Hydrated preferences: %d favorites, %d recently viewed",
            len(state.favorites),
            len(state.recently_viewed),
        )
        return state

    def _commit(self, state: PreferenceState) -> None:
        self._storage.write(self._key, encode_preference_state(state))
        self._state = state
        self._favorite_ids = set(state.favorites)
        for listener in list(self._listeners):
            listener(state)

    # -- Favorites ----------------------------------------------------------------

    def is_favorite(self, product_id: str) -> bool:
        return product_id in self._favorite_ids

    def add_to_favorites(self, product_id: str) -> None:
        _require_id(product_id)
        if product_id in self._favorite_ids:
            return
        self._commit(
            self._state.model_copy(
                update={"favorites": (product_id, *self._state.favorites)}
            )
        )

    def remove_from_favorites(self, product_id: str) -> None:
        if product_id not in self._favorite_ids:
            return
        remaining = tuple(fid for fid in self._state.favorites if fid != product_id)
        self._commit(self._state.model_copy(update={"favorites": remaining}))

    def toggle_favorite(self, product_id: str) -> bool:
        """Flip membership and return whether ``product_id`` is now a favorite."""

        if self.is_favorite(product_id):
            self.remove_from_favorites(product_id)
            return False
        self.add_to_favorites(product_id)
        return True

    # -- History ----------------------------------------------------------------

    def add_to_recently_viewed(self, product_id: str) -> None:
        """Move ``product_id`` to the front of the history, keeping it bounded."""

        _require_id(product_id)
        others = tuple(vid for vid in self._state.recently_viewed if vid != product_id)
        history = (product_id, *others)[: self._recently_viewed_limit]
        self._commit(self._state.model_copy(update={"recently_viewed": history}))

    # -- Theme ----------------------------------------------------------------

    def set_theme(self, theme: Theme | str) -> None:
        self._commit(self._state.model_copy(update={"theme": Theme(theme)}))

    # -- Observers ----------------------------------------------------------------

    def subscribe(self, listener: PreferenceListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe


__all__ = [
    "InvalidPreferenceBlob",
    "PreferenceListener",
    "PreferenceStore",
    "decode_preference_blob",
    "encode_preference_state",
]
