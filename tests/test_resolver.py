"""Tests for catalog, history and estimator resolution."""

import asyncio
from dataclasses import replace
from datetime import UTC, datetime

from meal_journal.domain.meals import CatalogEntry, FoodMention, Serving
from meal_journal.domain.nutrients import NutrientVector
from meal_journal.services.cache import InMemoryCatalogCache, seed_catalog
from meal_journal.services.estimator import (
    FALLBACK_NUTRIENTS,
    EstimatorChain,
    LlmNutrientEstimator,
)
from meal_journal.services.resolver import FoodResolver, display_name, lookup_key
from tests.conftest import (
    NUTRITION_JSON,
    FakeTextClient,
    InMemoryMealLogRepository,
    make_meal,
)


def _resolver(
    client: FakeTextClient,
    repository: InMemoryMealLogRepository | None = None,
    cache: InMemoryCatalogCache | None = None,
    force_refresh: bool = False,
) -> FoodResolver:
    return FoodResolver(
        cache=cache if cache is not None else InMemoryCatalogCache(seed_catalog()),
        history=repository or InMemoryMealLogRepository(),
        estimator=EstimatorChain([LlmNutrientEstimator(client=client)]),
        force_refresh=force_refresh,
    )


def test_lookup_key_and_display_name() -> None:
    mention = FoodMention(food="Latte ", brand="Starbucks")

    assert lookup_key(mention) == "starbucks latte"
    assert display_name(mention) == "Starbucks Latte"
    assert lookup_key(FoodMention(food="Egg")) == "egg"


def test_seeded_catalog_entry_skips_estimator() -> None:
    client = FakeTextClient(responses=[NUTRITION_JSON])

    entry = asyncio.run(_resolver(client).resolve(FoodMention(food="egg")))

    assert entry.id == "food-egg"
    assert entry.source == "catalog"
    assert entry.nutrients.calories == 72
    assert client.prompts == []


def test_repeated_resolution_estimates_once() -> None:
    client = FakeTextClient(responses=[NUTRITION_JSON])
    resolver = _resolver(client)

    first = asyncio.run(resolver.resolve(FoodMention(food="quinoa salad")))
    second = asyncio.run(resolver.resolve(FoodMention(food="Quinoa Salad")))

    assert len(client.prompts) == 1
    assert first.id == "food-quinoa-salad"
    assert first.serving == Serving(unit="serving", grams=100)
    assert second == first


def test_fallback_entries_are_refreshed() -> None:
    client = FakeTextClient(responses=[NUTRITION_JSON])
    cache = InMemoryCatalogCache()
    cache.set(
        "kale chips",
        CatalogEntry(
            id="food-kale-chips",
            name="kale chips",
            serving=Serving(unit="bag", grams=28),
            nutrients=FALLBACK_NUTRIENTS,
            source="llm_ollama_llama3_fallback_error",
        ),
    )

    entry = asyncio.run(
        _resolver(client, cache=cache).resolve(FoodMention(food="kale chips"))
    )

    assert len(client.prompts) == 1
    assert entry.source == "llm_fake_test"
    assert entry.id == "food-kale-chips"
    assert entry.serving.grams == 28
    assert cache.get("kale chips") == entry


def test_force_refresh_bypasses_cache() -> None:
    client = FakeTextClient(responses=[NUTRITION_JSON])

    entry = asyncio.run(
        _resolver(client, force_refresh=True).resolve(FoodMention(food="egg"))
    )

    assert len(client.prompts) == 1
    assert entry.source == "llm_fake_test"
    assert entry.serving.grams == 100


def test_explicit_force_refresh_overrides_default() -> None:
    client = FakeTextClient(responses=[NUTRITION_JSON])
    resolver = _resolver(client, force_refresh=True)

    entry = asyncio.run(resolver.resolve(FoodMention(food="egg"), force_refresh=False))

    assert entry.source == "catalog"
    assert client.prompts == []


def test_history_entry_is_divided_by_quantity() -> None:
    repository = InMemoryMealLogRepository()
    meal = make_meal(
        datetime(2024, 3, 9, 12, tzinfo=UTC),
        calories=240,
        protein_g=8,
        name="Oat milk",
        quantity=2,
        grams=480,
    )
    repository.save_meal(meal)
    client = FakeTextClient(responses=[NUTRITION_JSON])
    cache = InMemoryCatalogCache()

    entry = asyncio.run(
        _resolver(client, repository, cache).resolve(FoodMention(food="oat milk"))
    )

    assert client.prompts == []
    assert entry.source == "history"
    assert entry.id == "food-Oat milk"
    assert entry.nutrients == NutrientVector(calories=120, protein_g=4)
    assert entry.serving == Serving(unit="serving", grams=240)
    assert cache.get("oat milk") == entry


def test_history_failure_is_treated_as_miss() -> None:
    repository = InMemoryMealLogRepository(fail_history=True)
    client = FakeTextClient(responses=[NUTRITION_JSON])

    entry = asyncio.run(
        _resolver(client, repository).resolve(FoodMention(food="granola"))
    )

    assert entry.source == "llm_fake_test"


def test_unavailable_estimator_keeps_prior_entry() -> None:
    prior = CatalogEntry(
        id="food-kale-chips",
        name="kale chips",
        serving=Serving(unit="bag", grams=28),
        nutrients=FALLBACK_NUTRIENTS,
        source="llm_ollama_llama3_fallback_error",
    )
    cache = InMemoryCatalogCache({"kale chips": prior})
    client = FakeTextClient(error=RuntimeError("offline"))

    entry = asyncio.run(
        _resolver(client, cache=cache).resolve(FoodMention(food="kale chips"))
    )

    assert entry == prior


def test_unavailable_estimator_caches_fallback_entry() -> None:
    cache = InMemoryCatalogCache()
    client = FakeTextClient(error=RuntimeError("offline"))

    entry = asyncio.run(
        _resolver(client, cache=cache).resolve(FoodMention(food="dragon fruit"))
    )

    assert entry.is_fallback
    assert entry.source == "llm_fake_test_fallback_error"
    assert entry.nutrients == FALLBACK_NUTRIENTS
    assert cache.get("dragon fruit") == entry


def test_history_fallback_item_is_re_estimated() -> None:
    repository = InMemoryMealLogRepository()
    meal = make_meal(datetime(2024, 3, 9, 12, tzinfo=UTC), calories=150, name="kale")
    degraded = replace(meal.items[0], source="llm_ollama_llama3_fallback_error")
    repository.save_meal(replace(meal, items=[degraded]))
    client = FakeTextClient(responses=[NUTRITION_JSON])
    cache = InMemoryCatalogCache()

    entry = asyncio.run(
        _resolver(client, repository, cache).resolve(FoodMention(food="kale"))
    )

    assert len(client.prompts) == 1
    assert entry.source == "llm_fake_test"
    assert entry.id == "food-kale"
    assert entry.nutrients.calories == 200
    assert cache.get("kale") == entry
