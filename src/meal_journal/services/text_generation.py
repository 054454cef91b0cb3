"""Text-generation backend interface and health probing."""

import asyncio
from dataclasses import dataclass
from typing import Protocol


class TextGenerationClient(Protocol):
    """Interface for a prompt-in, text-out model backend."""

    provider: str
    model: str

    async def generate(
        self, prompt: str, *, temperature: float, max_tokens: int | None = None
    ) -> str:
        """Return the raw completion text for a prompt."""

    async def count_models(self) -> int:
        """Return how many models the backend reports as available."""


@dataclass(frozen=True)
class BackendHealth:
    provider: str
    model: str
    models: int


@dataclass
class LlmHealthService:
    """Probes the primary text-generation backend."""

    client: TextGenerationClient | None
    timeout_seconds: float = 5.0

    async def check(self) -> BackendHealth:
        """Return backend details or raise if it cannot be reached in time."""
        if self.client is None:
            raise RuntimeError("No text-generation backend configured")
        models = await asyncio.wait_for(
            self.client.count_models(), timeout=self.timeout_seconds
        )
        return BackendHealth(
            provider=self.client.provider, model=self.client.model, models=models
        )
