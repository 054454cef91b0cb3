"""Resolution of food mentions to per-serving catalog entries."""

import logging
import re
from dataclasses import dataclass
from typing import Protocol

from meal_journal.domain.meals import CatalogEntry, FoodMention, MealItem, Serving
from meal_journal.domain.nutrients import scale
from meal_journal.services.cache import CatalogCache
from meal_journal.services.estimator import EstimationUnavailableError, EstimatorChain

_logger = logging.getLogger(__name__)

DEFAULT_SERVING_GRAMS = 100.0
HISTORY_SOURCE = "history"
HISTORY_FALLBACK_SOURCE = "history_fallback"


class HistoryRepository(Protocol):
    """Read access to previously logged meal items."""

    def find_latest_item_by_name(self, name: str) -> MealItem | None:
        """Return the most recent item whose name matches, case-insensitively."""


def lookup_key(mention: FoodMention) -> str:
    """Return the cache key for a mention: brand and food, lowercased."""
    return f"{(mention.brand or '').strip()} {mention.food.strip()}".strip().lower()


def display_name(mention: FoodMention) -> str:
    """Return the human-readable name for a mention."""
    return " ".join(part.strip() for part in (mention.brand, mention.food) if part)


def food_id_for(key: str) -> str:
    return "food-" + re.sub(r"\s+", "-", key)


def entry_from_history(item: MealItem, key: str) -> CatalogEntry:
    """Rebuild a per-serving entry from a logged, quantity-scaled item.

    Items logged from a fallback estimate keep the marker so they are
    re-estimated on the next lookup.
    """
    quantity = item.quantity if item.quantity > 0 else 1.0
    return CatalogEntry(
        id=item.food_id or food_id_for(key),
        name=item.name,
        serving=Serving(
            unit=item.unit or "serving",
            grams=item.grams / quantity if item.grams else DEFAULT_SERVING_GRAMS,
        ),
        nutrients=scale(item.nutrients, 1 / quantity),
        source=HISTORY_FALLBACK_SOURCE if "fallback" in item.source else HISTORY_SOURCE,
    )


@dataclass
class FoodResolver:
    """Looks foods up in cache, then history, then asks the estimators."""

    cache: CatalogCache
    history: HistoryRepository
    estimator: EstimatorChain
    force_refresh: bool = False

    async def resolve(
        self, mention: FoodMention, force_refresh: bool | None = None
    ) -> CatalogEntry:
        """Return the catalog entry for a mention, estimating when needed.

        Entries whose source marks them as fallback estimates are re-estimated
        on every lookup until a real estimate replaces them.
        """
        forced = self.force_refresh if force_refresh is None else force_refresh
        key = lookup_key(mention)
        name = display_name(mention)
        current = None if forced else self._lookup(key, name)
        if current is not None and not current.is_fallback:
            return current

        try:
            estimate = await self.estimator.estimate(name)
        except EstimationUnavailableError as exc:
            if current is not None:
                _logger.warning("Keeping %s entry for %r: %s", current.source, key, exc)
                return current
            _logger.warning("No estimate for %r, using fallback: %s", key, exc)
            estimate = self.estimator.fallback_estimate()

        entry = CatalogEntry(
            id=current.id if current else food_id_for(key),
            name=name,
            serving=Serving(
                unit=mention.unit or (current.serving.unit if current else "serving"),
                grams=current.serving.grams if current else DEFAULT_SERVING_GRAMS,
            ),
            nutrients=estimate.nutrients,
            source=estimate.source,
        )
        self.cache.set(key, entry)
        return entry

    def _lookup(self, key: str, name: str) -> CatalogEntry | None:
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        try:
            item = self.history.find_latest_item_by_name(name)
        except Exception:
            _logger.exception("History lookup failed for %r", name)
            return None
        if item is None:
            return None
        entry = entry_from_history(item, key)
        self.cache.set(key, entry)
        return entry
