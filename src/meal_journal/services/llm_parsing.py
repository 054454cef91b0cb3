"""Defensive parsing of free-text model output.

Models wrap JSON in code fences, add prose around it, or stop mid-object. The
helpers here try a fixed list of strict strategies in order and, separately, a
loose per-key scan. Callers merge the two outcomes so that whatever could be
salvaged is kept.
"""

import json
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from meal_journal.domain.nutrients import to_number

_LEADING_FENCE_RE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_TRAILING_FENCE_RE = re.compile(r"\s*```$")
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")
_NON_FINITE_RE = re.compile(r"\b-?(?:NaN|Infinity)\b", re.IGNORECASE)


@dataclass(frozen=True)
class StrictParse:
    """A JSON object recovered from the output."""

    values: dict[str, object]


@dataclass(frozen=True)
class LooseParse:
    """Numeric values salvaged key by key."""

    values: dict[str, float]


@dataclass(frozen=True)
class ParseFailed:
    reason: str


ParseOutcome = StrictParse | LooseParse | ParseFailed


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code fence, if any."""
    cleaned = _LEADING_FENCE_RE.sub("", text.strip())
    return _TRAILING_FENCE_RE.sub("", cleaned).strip()


def iter_object_candidates(text: str) -> list[str]:
    """Return balanced ``{...}`` blocks, ignoring braces inside strings."""
    candidates: list[str] = []
    in_str = False
    escaped = False
    depth = 0
    start_idx: int | None = None

    for i, ch in enumerate(text):
        if in_str:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_str = False
            continue

        if ch == '"':
            in_str = True
            continue

        if ch == "{":
            if depth == 0:
                start_idx = i
            depth += 1
            continue

        if ch == "}" and depth > 0:
            depth -= 1
            if depth == 0 and start_idx is not None:
                candidates.append(text[start_idx : i + 1])
                start_idx = None

    return candidates


def _sanitize(text: str) -> str:
    cleaned = text.replace("“", '"').replace("”", '"')
    cleaned = _TRAILING_COMMA_RE.sub(r"\1", cleaned)
    return _NON_FINITE_RE.sub("null", cleaned)


def _load_object(candidate: str) -> dict[str, object] | None:
    for attempt in (candidate, _sanitize(candidate)):
        try:
            parsed = json.loads(attempt)
        except (ValueError, RecursionError):
            continue
        if isinstance(parsed, dict):
            return parsed
    return None


def _first_balanced_object(text: str) -> dict[str, object] | None:
    for candidate in iter_object_candidates(text):
        parsed = _load_object(candidate)
        if parsed is not None:
            return parsed
    return None


def _truncate_to_last_brace(text: str) -> dict[str, object] | None:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return _load_object(text[start : end + 1])


STRICT_STRATEGIES: tuple[Callable[[str], dict[str, object] | None], ...] = (
    _first_balanced_object,
    _truncate_to_last_brace,
)


def parse_strict(text: str) -> StrictParse | ParseFailed:
    """Recover the first JSON object from model output."""
    cleaned = strip_code_fences(text)
    if not cleaned:
        return ParseFailed("empty_output")
    for strategy in STRICT_STRATEGIES:
        values = strategy(cleaned)
        if values is not None:
            return StrictParse(values)
    return ParseFailed("no_json_object")


def parse_loose(text: str, keys: Iterable[str]) -> LooseParse | ParseFailed:
    """Scan for ``"key": number`` pairs without requiring valid JSON."""
    values: dict[str, float] = {}
    for key in keys:
        pattern = re.compile(
            rf"(?<![A-Za-z0-9_])[\"']?{re.escape(key)}[\"']?\s*:\s*(-?\d+(?:\.\d+)?)",
            re.IGNORECASE,
        )
        match = pattern.search(text)
        if match:
            values[key] = float(match.group(1))
    if not values:
        return ParseFailed("no_numeric_values")
    return LooseParse(values)


def merge_outcomes(loose: ParseOutcome, strict: ParseOutcome) -> dict[str, object]:
    """Combine both outcomes; strict values win on key collisions."""
    merged: dict[str, object] = {}
    if isinstance(loose, LooseParse):
        merged.update(loose.values)
    if isinstance(strict, StrictParse):
        merged.update(
            {key: value for key, value in strict.values.items() if value is not None}
        )
    return merged


def has_numeric_value(values: dict[str, object], keys: Iterable[str]) -> bool:
    """Whether any of the keys maps to a usable number."""
    return any(to_number(values.get(key)) is not None for key in keys)


def parse_json_array(text: str) -> list[object] | None:
    """Recover a JSON array from model output, or None."""
    cleaned = strip_code_fences(text)
    start = cleaned.find("[")
    end = cleaned.rfind("]")
    attempts = [cleaned]
    if start != -1 and end > start:
        attempts.append(cleaned[start : end + 1])
    for attempt in attempts:
        try:
            parsed = json.loads(attempt)
        except (ValueError, RecursionError):
            continue
        if isinstance(parsed, list):
            return parsed
    return None
