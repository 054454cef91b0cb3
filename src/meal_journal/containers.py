"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from meal_journal.adapters.ollama_client import HttpxOllamaClient
from meal_journal.adapters.openai_compatible_client import OpenAICompatibleClient
from meal_journal.adapters.supabase_meal_log_repository import (
    SupabaseMealLogRepository,
)
from meal_journal.adapters.supabase_profile_repository import SupabaseProfileRepository
from meal_journal.adapters.supabase_stats_repository import SupabaseStatsRepository
from meal_journal.adapters.supabase_token_verifier import (
    SupabaseTokenVerifier,
    TokenVerifier,
)
from meal_journal.config import Settings, resolve_force_refresh
from meal_journal.services.cache import InMemoryCatalogCache, seed_catalog
from meal_journal.services.estimator import EstimatorChain, LlmNutrientEstimator
from meal_journal.services.extractor import FoodExtractor
from meal_journal.services.meals import MealLogService
from meal_journal.services.profiles import ProfileService
from meal_journal.services.resolver import FoodResolver
from meal_journal.services.stats import StatsService
from meal_journal.services.text_generation import LlmHealthService

OLLAMA_TEMPERATURE = 0.2
GROQ_TEMPERATURE = 0.1
GROQ_MAX_TOKENS = 400


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    token_verifier: TokenVerifier
    meal_log_service: MealLogService
    stats_service: StatsService
    profile_service: ProfileService
    llm_health_service: LlmHealthService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    meal_log_repository = SupabaseMealLogRepository(supabase_client)
    stats_repository = SupabaseStatsRepository(supabase_client)

    ollama_client = HttpxOllamaClient.create(
        resolved_settings.ollama_host, resolved_settings.ollama_model
    )
    enabled = not resolved_settings.skip_llm
    estimators = [
        LlmNutrientEstimator(
            client=ollama_client,
            timeout_seconds=resolved_settings.llm_timeout_seconds,
            temperature=OLLAMA_TEMPERATURE,
            enabled=enabled,
        )
    ]
    groq_client: OpenAICompatibleClient | None = None
    if resolved_settings.groq_api_key:
        groq_client = OpenAICompatibleClient.create(
            api_key=resolved_settings.groq_api_key,
            base_url=resolved_settings.groq_base_url,
            model=resolved_settings.groq_model,
        )
        estimators.append(
            LlmNutrientEstimator(
                client=groq_client,
                timeout_seconds=resolved_settings.llm_timeout_seconds,
                temperature=GROQ_TEMPERATURE,
                max_tokens=GROQ_MAX_TOKENS,
                enabled=enabled,
            )
        )

    stats_service = StatsService(stats_repository)
    resolver = FoodResolver(
        cache=InMemoryCatalogCache(seed_catalog()),
        history=meal_log_repository,
        estimator=EstimatorChain(estimators),
        force_refresh=resolve_force_refresh(resolved_settings),
    )
    extractor = FoodExtractor(
        client=ollama_client if enabled else None,
        timeout_seconds=resolved_settings.llm_timeout_seconds,
    )
    meal_log_service = MealLogService(
        extractor=extractor,
        resolver=resolver,
        repository=meal_log_repository,
        stats_service=stats_service,
    )
    llm_health_service = LlmHealthService(
        client=ollama_client,
        timeout_seconds=resolved_settings.llm_health_timeout_seconds,
    )

    async def close_resources() -> None:
        await ollama_client.close()
        if groq_client is not None:
            await groq_client.close()

    return AppContainer(
        settings=resolved_settings,
        token_verifier=SupabaseTokenVerifier(supabase_client),
        meal_log_service=meal_log_service,
        stats_service=stats_service,
        profile_service=ProfileService(SupabaseProfileRepository(supabase_client)),
        llm_health_service=llm_health_service,
        close_resources=close_resources,
    )
