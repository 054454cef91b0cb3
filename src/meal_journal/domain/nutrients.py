"""Nutrient vector model and arithmetic."""

import math
from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass, fields


@dataclass(frozen=True)
class NutrientVector:
    """Fixed set of nutrient magnitudes for one serving or a running total."""

    calories: float = 0.0
    protein_g: float = 0.0
    carbs_g: float = 0.0
    fat_g: float = 0.0
    fiber_g: float = 0.0
    sugars_g: float = 0.0
    saturated_fat_g: float = 0.0
    trans_fat_g: float = 0.0
    cholesterol_mg: float = 0.0
    sodium_mg: float = 0.0
    vitamin_d_mcg: float = 0.0
    calcium_mg: float = 0.0
    iron_mg: float = 0.0
    potassium_mg: float = 0.0

    def to_dict(self) -> dict[str, float]:
        """Return the vector as a plain mapping keyed by nutrient name."""
        return asdict(self)


NUTRIENT_KEYS: tuple[str, ...] = tuple(item.name for item in fields(NutrientVector))

ZERO_NUTRIENTS = NutrientVector()

# Label-style names accepted as aliases for the canonical keys.
_ALIASES = {"carbs_g": "total_carbs_g", "fat_g": "total_fat_g"}


def to_number(value: object) -> float | None:
    """Coerce a loosely typed value to a finite float, or None."""
    if isinstance(value, bool) or not isinstance(value, int | float | str):
        return None
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (ValueError, OverflowError):
        return None
    if not math.isfinite(number):
        return None
    return number


def normalize(raw: Mapping[str, object] | NutrientVector | None) -> NutrientVector:
    """Build a complete vector, defaulting missing or invalid values to 0."""
    if isinstance(raw, NutrientVector):
        return raw
    source = raw or {}
    values: dict[str, float] = {}
    for key in NUTRIENT_KEYS:
        value = source.get(key)
        if value is None and key in _ALIASES:
            value = source.get(_ALIASES[key])
        number = to_number(value)
        values[key] = number if number is not None and number > 0 else 0.0
    return NutrientVector(**values)


def scale(vector: NutrientVector, factor: float) -> NutrientVector:
    """Multiply every nutrient by a factor."""
    return NutrientVector(
        **{key: getattr(vector, key) * factor for key in NUTRIENT_KEYS}
    )


def accumulate(left: NutrientVector, right: NutrientVector) -> NutrientVector:
    """Add two vectors key by key."""
    return NutrientVector(
        **{key: getattr(left, key) + getattr(right, key) for key in NUTRIENT_KEYS}
    )


def total_of(vectors: Iterable[NutrientVector]) -> NutrientVector:
    """Sum a sequence of vectors, starting from zero."""
    total = ZERO_NUTRIENTS
    for vector in vectors:
        total = accumulate(total, vector)
    return total
