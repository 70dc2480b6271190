from __future__ import annotations

import logging
import os

from fastapi import FastAPI

from app.config import load_env_files


def _validate_env() -> None:
    """
    Validate required environment variables at startup.

    Raises RuntimeError listing every missing or invalid variable so the
    operator can fix all problems in one restart cycle.

    Rules:
    - No empty-string values are accepted.
    - LLM API key check is skipped only when LLM_ADAPTER=mock.
    """

    load_env_files()

    errors: list[str] = []

    adapter = os.getenv("LLM_ADAPTER", "openai").strip().lower()
    if adapter not in {"openai", "mock"}:
        errors.append(
            f"LLM_ADAPTER='{adapter}' is not valid. Allowed values: ['mock', 'openai']."
        )

    if adapter != "mock":
        api_keys = [
            os.getenv(name, "").strip()
            for name in ("LLM_API_KEY", "GEMINI_API_KEY", "OPENAI_API_KEY")
        ]
        if not any(api_keys):
            errors.append(
                "LLM API key is not set. Provide LLM_API_KEY, GEMINI_API_KEY or "
                "OPENAI_API_KEY. Empty strings are not permitted."
            )

    if errors:
        raise RuntimeError(
            "Startup validation failed - missing or invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="TableInsight API",
        version="1.0.0",
    )

    from app.api.routers import date_range_router, summary_router

    application.include_router(summary_router)
    application.include_router(date_range_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    logging.getLogger(__name__).info("TableInsight API configured")
    return application


app = create_app()
