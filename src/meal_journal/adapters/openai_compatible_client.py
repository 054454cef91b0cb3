"""Chat-completions client for OpenAI-compatible hosted models."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from meal_journal.services.text_generation import TextGenerationClient


@dataclass
class OpenAICompatibleClient(TextGenerationClient):
    """Text generation over an OpenAI-compatible chat completions API."""

    client: AsyncOpenAI
    model: str
    provider: str = "groq"

    @classmethod
    def create(
        cls, api_key: str, base_url: str, model: str, provider: str = "groq"
    ) -> "OpenAICompatibleClient":
        """Create a client for a hosted OpenAI-compatible endpoint."""
        return cls(
            client=AsyncOpenAI(api_key=api_key, base_url=base_url),
            model=model,
            provider=provider,
        )

    async def generate(
        self, prompt: str, *, temperature: float, max_tokens: int | None = None
    ) -> str:
        """Run a single-turn chat completion and return the message text."""
        request_payload: dict[str, object] = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
        }
        if max_tokens:
            request_payload["max_tokens"] = max_tokens

        response = await self.client.chat.completions.create(**request_payload)
        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise RuntimeError(f"{self.provider} returned an empty response")
        return content

    async def count_models(self) -> int:
        """Return the number of models the endpoint lists."""
        page = await self.client.models.list()
        return len(page.data)

    async def close(self) -> None:
        await self.client.close()
