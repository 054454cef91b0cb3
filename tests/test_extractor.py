"""Tests for food mention extraction."""

import asyncio
import json

from meal_journal.domain.meals import FoodMention
from meal_journal.services.extractor import (
    FoodExtractor,
    build_extraction_prompt,
    extract_heuristically,
    normalize_mention,
    parse_phrase,
    split_phrases,
)
from tests.conftest import FakeTextClient


def test_prompt_contains_examples_and_text() -> None:
    prompt = build_extraction_prompt("  a bowl of ramen ")

    assert '"a bowl of ramen"' in prompt
    assert "Starbucks" in prompt
    assert "JSON array" in prompt


def test_model_extraction_normalizes_items() -> None:
    client = FakeTextClient(
        responses=[
            "```json\n"
            + json.dumps(
                [
                    {
                        "food": "latte",
                        "brand": "Starbucks",
                        "quantity": 1,
                        "unit": "serving",
                    },
                    {
                        "name": "croissant",
                        "brand": None,
                        "quantity": -2,
                        "serving": "piece",
                    },
                    {"food": "", "quantity": 1},
                    "not an object",
                ]
            )
            + "\n```"
        ]
    )
    extractor = FoodExtractor(client=client)

    mentions = asyncio.run(
        extractor.extract("I had a large Starbucks latte and a croissant")
    )

    assert mentions == [
        FoodMention(food="latte", brand="Starbucks", quantity=1, unit="serving"),
        FoodMention(food="croissant", brand=None, quantity=1, unit="piece"),
    ]


def test_model_failure_falls_back_to_heuristics() -> None:
    extractor = FoodExtractor(client=FakeTextClient(error=RuntimeError("offline")))

    mentions = asyncio.run(extractor.extract("I ate egg and toast for breakfast"))

    assert [mention.food for mention in mentions] == ["egg", "toast"]


def test_empty_model_result_falls_back_to_heuristics() -> None:
    extractor = FoodExtractor(client=FakeTextClient(responses=["[]"]))

    mentions = asyncio.run(extractor.extract("banana"))

    assert mentions == [FoodMention(food="banana")]


def test_model_timeout_falls_back_to_heuristics() -> None:
    client = FakeTextClient(responses=["[]"], delay_seconds=0.5)
    extractor = FoodExtractor(client=client, timeout_seconds=0.01)

    mentions = asyncio.run(extractor.extract("apple"))

    assert mentions == [FoodMention(food="apple")]


def test_extractor_without_client_uses_heuristics() -> None:
    mentions = asyncio.run(FoodExtractor(client=None).extract("tea; biscuits"))

    assert [mention.food for mention in mentions] == ["tea", "biscuits"]


def test_blank_text_yields_nothing() -> None:
    assert asyncio.run(FoodExtractor(client=None).extract("   ")) == []
    assert extract_heuristically(" , ; ") == []


def test_split_phrases_removes_framing() -> None:
    phrases = split_phrases(
        "This morning I had oatmeal with berries, coffee and juice."
    )

    assert phrases == ["oatmeal", "berries", "coffee", "juice"]


def test_heuristic_reads_quantities_and_units() -> None:
    mentions = extract_heuristically(
        "2 cups of cooked brown rice with 5 oz grilled chicken"
    )

    assert mentions == [
        FoodMention(food="cooked brown rice", quantity=2, unit="cups"),
        FoodMention(food="grilled chicken", quantity=5, unit="oz"),
    ]


def test_heuristic_reads_bare_counts() -> None:
    assert parse_phrase("3 eggs") == FoodMention(food="eggs", quantity=3)
    assert parse_phrase("a croissant") == FoodMention(food="croissant")


def test_heuristic_reads_brands() -> None:
    assert parse_phrase("latte from Blue Bottle") == FoodMention(
        food="latte", brand="Blue Bottle"
    )
    assert parse_phrase("Starbucks vanilla latte") == FoodMention(
        food="vanilla latte", brand="Starbucks"
    )
    assert parse_phrase("Greek yogurt") == FoodMention(food="Greek yogurt")


def test_normalize_mention() -> None:
    assert normalize_mention({"food": " kiwi ", "brand": "null"}) == FoodMention(
        food="kiwi"
    )
    assert normalize_mention({"food": "milk", "quantity": "1.5", "unit": "cup"}) == (
        FoodMention(food="milk", quantity=1.5, unit="cup")
    )
    assert normalize_mention({"brand": "Acme"}) is None
    assert normalize_mention(["egg"]) is None


def test_deeply_nested_model_output_falls_back_to_heuristics() -> None:
    client = FakeTextClient(responses=["[" * 100000 + "]" * 100000])
    extractor = FoodExtractor(client=client)

    mentions = asyncio.run(extractor.extract("egg and toast"))

    assert [mention.food for mention in mentions] == ["egg", "toast"]
