"""Ollama HTTP client for local text generation."""

from dataclasses import dataclass
from urllib.parse import urlparse

import httpx

from meal_journal.services.text_generation import TextGenerationClient

REQUEST_TIMEOUT_SECONDS = 60


@dataclass
class HttpxOllamaClient(TextGenerationClient):
    """HTTPX-backed client for the Ollama generate API."""

    host: str
    model: str
    http_client: httpx.AsyncClient
    provider: str = "ollama"

    @classmethod
    def create(cls, host: str, model: str) -> "HttpxOllamaClient":
        """Create an Ollama client with a managed httpx session."""
        parsed = urlparse(host)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise ValueError(f"Invalid Ollama host: {host!r}")
        return cls(
            host=host.rstrip("/"), model=model, http_client=httpx.AsyncClient()
        )

    async def generate(
        self, prompt: str, *, temperature: float, max_tokens: int | None = None
    ) -> str:
        """Run a non-streaming generation and return the response text."""
        options: dict[str, object] = {"temperature": temperature}
        if max_tokens:
            options["num_predict"] = max_tokens
        response = await self.http_client.post(
            f"{self.host}/api/generate",
            json={
                "model": self.model,
                "prompt": prompt,
                "stream": False,
                "options": options,
            },
            timeout=REQUEST_TIMEOUT_SECONDS,
        )
        response.raise_for_status()
        payload = response.json()
        return str(payload.get("response") or "")

    async def count_models(self) -> int:
        """Return the number of locally pulled models."""
        response = await self.http_client.get(f"{self.host}/api/tags", timeout=10)
        response.raise_for_status()
        return len(response.json().get("models") or [])

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
