"""Nutrient estimation backed by text-generation models."""

import asyncio
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from meal_journal.domain.nutrients import NUTRIENT_KEYS, NutrientVector, to_number
from meal_journal.services.llm_parsing import (
    has_numeric_value,
    merge_outcomes,
    parse_loose,
    parse_strict,
)
from meal_journal.services.text_generation import TextGenerationClient

_logger = logging.getLogger(__name__)

LABEL_KEYS: tuple[str, ...] = (
    "calories",
    "protein_g",
    "total_carbs_g",
    "fiber_g",
    "sugars_g",
    "total_fat_g",
    "saturated_fat_g",
    "trans_fat_g",
    "cholesterol_mg",
    "sodium_mg",
    "vitamin_d_mcg",
    "calcium_mg",
    "iron_mg",
    "potassium_mg",
)
ESTIMATE_KEYS: tuple[str, ...] = (*LABEL_KEYS, "carbs_g", "fat_g")

# Label-style keys take precedence over canonical ones.
_KEY_SOURCES: dict[str, tuple[str, ...]] = {
    "carbs_g": ("total_carbs_g", "carbs_g"),
    "fat_g": ("total_fat_g", "fat_g"),
}

DEFAULT_MAXIMUM = 2000.0
NUTRIENT_MAXIMA: dict[str, float] = {
    "cholesterol_mg": 1000.0,
    "sodium_mg": 10000.0,
    "vitamin_d_mcg": 200.0,
    "calcium_mg": 5000.0,
    "iron_mg": 100.0,
    "potassium_mg": 10000.0,
}

# Used per key when a response parsed but left that key out.
MISSING_VALUE_DEFAULTS = NutrientVector(
    calories=150,
    protein_g=20,
    carbs_g=0,
    fat_g=8,
    fiber_g=0,
    sugars_g=0,
    saturated_fat_g=1,
    trans_fat_g=0,
    cholesterol_mg=50,
    sodium_mg=60,
    vitamin_d_mcg=0,
    calcium_mg=20,
    iron_mg=0.5,
    potassium_mg=300,
)

FALLBACK_NUTRIENTS = NutrientVector(
    calories=150,
    protein_g=5,
    carbs_g=20,
    fat_g=5,
    fiber_g=2,
    sugars_g=5,
    saturated_fat_g=1,
    trans_fat_g=0,
    cholesterol_mg=10,
    sodium_mg=100,
    vitamin_d_mcg=0,
    calcium_mg=50,
    iron_mg=1,
    potassium_mg=200,
)


class EstimationError(Exception):
    """A backend failed to produce an estimate."""


class EstimationUnavailableError(EstimationError):
    """Every configured backend failed."""


@dataclass(frozen=True)
class NutrientEstimate:
    """Per-serving nutrients tagged with where they came from."""

    nutrients: NutrientVector
    source: str

    @property
    def is_fallback(self) -> bool:
        return "fallback" in self.source


def build_nutrition_prompt(name: str) -> str:
    """Build the per-serving nutrition label prompt for a food name."""
    return (
        "Extract nutrition label values for a single typical serving of: "
        f'"{name}". If the name includes a quantity (e.g., "2 servings" or '
        '"2 cups"), keep values per ONE serving only. Return JSON only with these '
        f"exact keys (per serving): {', '.join(LABEL_KEYS)}. No text, only JSON."
    )


def clamp(value: object, maximum: float) -> float:
    """Clamp to ``[0, maximum]``; non-numeric and non-finite values become 0."""
    number = to_number(value)
    if number is None or number < 0:
        return 0.0
    return min(number, maximum)


def clamp_nutrients(values: Mapping[str, object]) -> NutrientVector:
    """Build a clamped vector, filling absent or non-numeric keys from defaults."""
    resolved: dict[str, float] = {}
    for key in NUTRIENT_KEYS:
        number = None
        for source_key in _KEY_SOURCES.get(key, (key,)):
            number = to_number(values.get(source_key))
            if number is not None:
                break
        if number is None:
            number = getattr(MISSING_VALUE_DEFAULTS, key)
        resolved[key] = clamp(number, NUTRIENT_MAXIMA.get(key, DEFAULT_MAXIMUM))
    return NutrientVector(**resolved)


@dataclass
class LlmNutrientEstimator:
    """Estimates per-serving nutrients from a single model backend."""

    client: TextGenerationClient
    timeout_seconds: float = 30.0
    temperature: float = 0.2
    max_tokens: int | None = None
    enabled: bool = True

    @property
    def source(self) -> str:
        return f"llm_{self.client.provider}_{self.client.model}"

    async def estimate(self, name: str) -> NutrientEstimate:
        """Estimate nutrients, degrading to the fallback vector on any failure."""
        try:
            return await self.attempt(name)
        except Exception as exc:
            _logger.warning("Estimate for %r failed, using fallback: %s", name, exc)
            return self.fallback_estimate("error")

    async def attempt(self, name: str) -> NutrientEstimate:
        """Estimate nutrients, raising EstimationError when the backend fails."""
        if not self.enabled:
            return self.fallback_estimate("disabled")
        prompt = build_nutrition_prompt(name)
        try:
            raw = await asyncio.wait_for(
                self.client.generate(
                    prompt, temperature=self.temperature, max_tokens=self.max_tokens
                ),
                timeout=self.timeout_seconds,
            )
        except TimeoutError as exc:
            raise EstimationError(
                f"{self.source} timed out after {self.timeout_seconds}s"
            ) from exc
        except Exception as exc:
            raise EstimationError(f"{self.source} failed: {exc}") from exc
        return self._from_output(raw or "")

    def fallback_estimate(self, reason: str) -> NutrientEstimate:
        return NutrientEstimate(
            nutrients=FALLBACK_NUTRIENTS, source=f"{self.source}_fallback_{reason}"
        )

    def _from_output(self, raw: str) -> NutrientEstimate:
        merged = merge_outcomes(parse_loose(raw, ESTIMATE_KEYS), parse_strict(raw))
        if not has_numeric_value(merged, ESTIMATE_KEYS):
            _logger.warning("No nutrient values in %s output", self.source)
            return self.fallback_estimate("parse")
        return NutrientEstimate(nutrients=clamp_nutrients(merged), source=self.source)


async def try_in_order(
    estimators: Sequence[LlmNutrientEstimator], name: str
) -> NutrientEstimate:
    """Return the first successful estimate, trying backends in order."""
    failures: list[str] = []
    for estimator in estimators:
        try:
            return await estimator.attempt(name)
        except EstimationError as exc:
            _logger.warning(
                "Estimator %s failed for %r: %s", estimator.source, name, exc
            )
            failures.append(str(exc))
    raise EstimationUnavailableError("; ".join(failures) or "no estimators configured")


@dataclass
class EstimatorChain:
    """Ordered list of estimators; the first success wins."""

    estimators: list[LlmNutrientEstimator] = field(default_factory=list)

    async def estimate(self, name: str) -> NutrientEstimate:
        """Estimate nutrients or raise EstimationUnavailableError."""
        return await try_in_order(self.estimators, name)

    def fallback_estimate(self) -> NutrientEstimate:
        """Return the degraded estimate tagged for the primary backend."""
        if self.estimators:
            return self.estimators[0].fallback_estimate("error")
        return NutrientEstimate(
            nutrients=FALLBACK_NUTRIENTS, source="llm_fallback_error"
        )
