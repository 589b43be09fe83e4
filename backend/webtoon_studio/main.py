"""FastAPI application entry point."""
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from webtoon_studio.core.config import get_settings
from webtoon_studio.core.logging import setup_logging

# Setup logging
logger = setup_logging("main")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Initialize services at startup, clean up at shutdown."""
    settings = get_settings()
    try:
        from google.cloud import firestore

        from webtoon_studio.services.artifacts import ArtifactStore
        from webtoon_studio.services.characters import (
            CharacterReferenceLoader,
            CharacterRepository,
        )
        from webtoon_studio.services.generation import GenerationService
        from webtoon_studio.services.provider import ImageProviderClient
        from webtoon_studio.services.records import RecordStore

        artifact_store = ArtifactStore(settings.uploads_dir, settings.uploads_url_prefix)
        app.state.artifact_store = artifact_store

        db = firestore.Client(project=settings.gcp_project_id or None)
        character_repository = CharacterRepository(db, settings.characters_collection)
        provider = ImageProviderClient(
            api_key=settings.google_generative_ai_api_key,
            model=settings.image_model,
            timeout_seconds=settings.provider_timeout_seconds,
            aspect_ratio=settings.image_aspect_ratio,
            image_size=settings.image_size,
        )
        app.state.character_repository = character_repository
        app.state.generation_service = GenerationService(
            loader=CharacterReferenceLoader(character_repository, artifact_store),
            provider=provider,
            artifacts=artifact_store,
            records=RecordStore(
                db,
                scenarios_collection=settings.scenarios_collection,
                generations_collection=settings.generations_collection,
            ),
            placeholder_delay_seconds=settings.placeholder_delay_seconds,
            history_limit=settings.history_limit,
        )
        if not provider.configured:
            logger.info("No Gemini API key configured; placeholder images only")
        logger.info("Services initialized successfully")
    except Exception as exc:
        logger.error(
            "Service initialization failed, running in degraded mode",
            exc_info=True,
            extra={"error_type": type(exc).__name__},
        )
        # Continue without services; endpoints return 503 until fixed

    yield


# Create FastAPI app
app = FastAPI(
    title="Webtoon Studio",
    description="Scenario-to-image generation with character references",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS configuration
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=[f"http://localhost:{settings.frontend_port}"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
from webtoon_studio.api.characters import router as characters_router  # noqa: E402
from webtoon_studio.api.generate import router as generate_router  # noqa: E402
from webtoon_studio.api.uploads import router as uploads_router  # noqa: E402

app.include_router(generate_router)
app.include_router(characters_router)
app.include_router(uploads_router)

# Serve stored artifacts (generated images and uploads)
_uploads_dir = Path(settings.uploads_dir)
_uploads_dir.mkdir(parents=True, exist_ok=True)
app.mount(settings.uploads_url_prefix, StaticFiles(directory=str(_uploads_dir)), name="uploads")


@app.get("/health")
async def health_check(request: Request) -> dict:
    """Health check endpoint.

    Always returns HTTP 200; check ``services`` for actual status.
    """
    svc = getattr(request.app.state, "generation_service", None)
    provider_ok = svc is not None and svc.provider.configured

    logger.info("Health check requested")
    return {
        "status": "ok",
        "version": app.version,
        "services": {
            "generation": "ok" if svc is not None else "unavailable",
            "provider": "ok" if provider_ok else "disabled",
        },
    }
