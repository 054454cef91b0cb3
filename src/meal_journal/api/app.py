"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from meal_journal.api.meals import router as meals_router
from meal_journal.api.profiles import router as profiles_router
from meal_journal.app_logging import configure_logging
from meal_journal.config import resolve_force_refresh
from meal_journal.containers import AppContainer
from meal_journal.domain.errors import InvalidRequestError, MealJournalError


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        settings = app.state.container.settings
        logger.info(
            "Starting meal journal (environment=%s, groq=%s, skip_llm=%s, "
            "force_refresh=%s)",
            settings.environment,
            bool(settings.groq_api_key),
            settings.skip_llm,
            resolve_force_refresh(settings),
        )
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(meals_router)
    app.include_router(profiles_router)

    @app.exception_handler(MealJournalError)
    async def handle_domain_error(
        _request: Request, exc: MealJournalError
    ) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": exc.code})

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.info("Rejected request to %s: %s", request.url.path, exc.errors())
        return JSONResponse(
            status_code=InvalidRequestError.status_code,
            content={"error": InvalidRequestError.code},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s", request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"error": "server_error"})

    @app.get("/health")
    @app.get("/api/health")
    async def health() -> dict[str, object]:
        """Simple health check endpoint."""
        return {"ok": True, "ts": datetime.now(tz=UTC).isoformat()}

    @app.get("/api/health/llm", response_model=None)
    async def llm_health(request: Request) -> dict[str, object] | JSONResponse:
        """Report whether the primary text-generation backend responds."""
        state_container: AppContainer = request.app.state.container
        try:
            backend = await state_container.llm_health_service.check()
        except Exception:
            logger.exception("LLM health check failed")
            return JSONResponse(
                status_code=503, content={"ok": False, "error": "llm_unavailable"}
            )
        return {
            "ok": True,
            "provider": backend.provider,
            "model": backend.model,
            "models": backend.models,
        }

    return app
