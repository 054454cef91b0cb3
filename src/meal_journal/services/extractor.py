"""Food mention extraction from free-text meal descriptions."""

import asyncio
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass

from meal_journal.domain.meals import FoodMention
from meal_journal.domain.nutrients import to_number
from meal_journal.services.llm_parsing import parse_json_array
from meal_journal.services.text_generation import TextGenerationClient

_logger = logging.getLogger(__name__)

_FRAMING_RE = re.compile(
    r"\b(i\s+ate|i\s+had|i\s+drank|for\s+breakfast|for\s+lunch|for\s+dinner"
    r"|for\s+snack|today|this\s+morning|this\s+evening)\b",
    re.IGNORECASE,
)
_PHRASE_SPLIT_RE = re.compile(r"[,;]")
_AND_SPLIT_RE = re.compile(r"\s+\band\b\s+", re.IGNORECASE)
_WITH_SPLIT_RE = re.compile(r"\s+\bwith\b\s+", re.IGNORECASE)
_QUANTITY_UNIT_RE = re.compile(
    r"\b(\d+(?:\.\d+)?)\s*(cups?|tbsp|tablespoons?|tsp|teaspoons?|slices?|oz"
    r"|ounces?|g|grams?|ml|bottles?|cans?|pack|pieces?|servings?)\b",
    re.IGNORECASE,
)
_LEADING_NUMBER_RE = re.compile(r"^(\d+(?:\.\d+)?)\s+(?=\S)")
_LEADING_FILLER_RE = re.compile(r"^(?:of|a|an|some)\b\s*", re.IGNORECASE)
_FROM_BRAND_RE = re.compile(r"\bfrom\s+([A-Za-z0-9'’\-\s]+)$", re.IGNORECASE)
_MIN_WORDS_FOR_LEADING_BRAND = 3

EXTRACTION_PROMPT = """You extract foods from a meal description.
Return ONLY a JSON array. Each element has the keys "food", "brand", "quantity" \
and "unit". Use null for an unknown brand, 1 for an unknown quantity and \
"serving" for an unknown unit.

Example: "I had a large Starbucks latte and a croissant"
[{"food":"latte","brand":"Starbucks","quantity":1,"unit":"serving"},\
{"food":"croissant","brand":null,"quantity":1,"unit":"serving"}]

Example: "2 cups of cooked brown rice with 5 oz grilled chicken"
[{"food":"cooked brown rice","brand":null,"quantity":2,"unit":"cup"},\
{"food":"grilled chicken","brand":null,"quantity":5,"unit":"oz"}]

Meal: "{text}"
"""


def build_extraction_prompt(text: str) -> str:
    """Build the few-shot extraction prompt for a meal description."""
    return EXTRACTION_PROMPT.replace("{text}", text.strip())


def normalize_mention(raw: object) -> FoodMention | None:
    """Coerce one model-produced item into a FoodMention, or None if unusable."""
    if not isinstance(raw, Mapping):
        return None
    food = str(raw.get("food") or raw.get("name") or "").strip()
    if not food:
        return None
    brand_raw = raw.get("brand")
    brand = str(brand_raw).strip() if brand_raw else ""
    if brand.lower() in {"", "null", "none"}:
        brand = ""
    quantity = to_number(raw.get("quantity"))
    unit = str(raw.get("unit") or raw.get("serving") or "serving").strip()
    return FoodMention(
        food=food,
        brand=brand or None,
        quantity=quantity if quantity is not None and quantity > 0 else 1.0,
        unit=unit or "serving",
    )


def split_phrases(text: str) -> list[str]:
    """Split a description into candidate food phrases."""
    stripped = _FRAMING_RE.sub(" ", text)
    phrases: list[str] = []
    for chunk in _PHRASE_SPLIT_RE.split(stripped):
        for part in _AND_SPLIT_RE.split(chunk):
            phrases.extend(_WITH_SPLIT_RE.split(part))
    cleaned = (" ".join(phrase.split()).strip(" .!?") for phrase in phrases)
    return [phrase for phrase in cleaned if phrase]


def parse_phrase(phrase: str) -> FoodMention | None:
    """Read quantity, unit and brand out of a single phrase."""
    quantity = 1.0
    unit = "serving"
    food = phrase
    match = _QUANTITY_UNIT_RE.search(food)
    if match:
        quantity = float(match.group(1))
        unit = match.group(2).lower()
        food = food[: match.start()] + food[match.end() :]
    else:
        number = _LEADING_NUMBER_RE.match(food)
        if number:
            quantity = float(number.group(1))
            food = food[number.end() :]
    food = _LEADING_FILLER_RE.sub("", " ".join(food.split()))

    brand: str | None = None
    from_brand = _FROM_BRAND_RE.search(food)
    if from_brand:
        brand = from_brand.group(1).strip() or None
        food = food[: from_brand.start()].strip()
    else:
        words = food.split()
        if len(words) >= _MIN_WORDS_FOR_LEADING_BRAND and words[0][:1].isupper():
            brand = words[0]
            food = " ".join(words[1:])

    food = food.strip()
    if not food:
        return None
    return FoodMention(
        food=food, brand=brand, quantity=quantity if quantity > 0 else 1.0, unit=unit
    )


def extract_heuristically(text: str) -> list[FoodMention]:
    """Split and parse a description without a model."""
    mentions = (parse_phrase(phrase) for phrase in split_phrases(text))
    return [mention for mention in mentions if mention is not None]


@dataclass
class FoodExtractor:
    """Turns a meal description into food mentions.

    A model is asked first; when it is unavailable or yields nothing usable the
    text is split heuristically instead.
    """

    client: TextGenerationClient | None
    timeout_seconds: float = 30.0
    temperature: float = 0.2

    async def extract(self, text: str) -> list[FoodMention]:
        """Return every food mentioned in the text, possibly empty."""
        mentions = await self.extract_with_model(text)
        if mentions:
            return mentions
        fallback = extract_heuristically(text)
        _logger.info("Heuristic extraction found %s mentions", len(fallback))
        return fallback

    async def extract_with_model(self, text: str) -> list[FoodMention]:
        """Return model-extracted mentions, or an empty list on any failure."""
        if self.client is None or not text.strip():
            return []
        try:
            raw = await asyncio.wait_for(
                self.client.generate(
                    build_extraction_prompt(text), temperature=self.temperature
                ),
                timeout=self.timeout_seconds,
            )
            items = parse_json_array(raw or "")
        except Exception as exc:
            _logger.warning("Model extraction failed: %s", exc)
            return []
        if items is None:
            _logger.warning("Model extraction returned no JSON array")
            return []
        mentions = (normalize_mention(item) for item in items)
        return [mention for mention in mentions if mention is not None]
