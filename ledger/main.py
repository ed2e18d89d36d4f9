"""Lighthouse Ledger FastAPI application."""

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ledger.api.assessment import router as assessment_router
from ledger.api.entries import router as entries_router
from ledger.api.evidence import router as evidence_router
from ledger.api.health import router as health_router
from ledger.api.transcripts import router as transcripts_router
from ledger.api.verify import router as verify_router
from ledger.auth.middleware import IdentityResolver, SupabaseIdentityProvider
from ledger.config import Settings, settings as default_settings
from ledger.database import create_engine_from_settings, create_session_maker
from ledger.engine.ai import ModelClient, OpenAIChatClient
from ledger.engine.transcripts import TranscriptFetcher, YouTubeCaptionSource
from ledger.errors import register_exception_handlers
from ledger.storage.objects import SupabaseStorage

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    engine=None,
    storage=None,
    identity_provider=None,
    model_client: ModelClient | None = None,
    transcripts=None,
    captions=None,
) -> FastAPI:
    """
    Build the app. Clients not passed in are constructed in the lifespan from
    settings and closed on shutdown.
    """
    settings = settings or default_settings
    logging.getLogger().setLevel(settings.log_level.upper())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        own_engine = engine is None
        db_engine = engine if engine is not None else create_engine_from_settings(settings)
        http = httpx.AsyncClient(timeout=settings.http_timeout_seconds)

        app.state.settings = settings
        app.state.engine = db_engine
        app.state.session_maker = create_session_maker(db_engine)
        app.state.storage = storage or SupabaseStorage(
            http,
            base_url=settings.supabase_url,
            service_key=settings.supabase_service_role_key,
            bucket=settings.evidence_bucket,
        )
        app.state.identity = IdentityResolver(
            identity_provider
            or SupabaseIdentityProvider(
                http, base_url=settings.supabase_url, api_key=settings.supabase_service_role_key
            ),
            guest_mode_enabled=settings.guest_mode_enabled,
            guest_user_id=settings.guest_user_id,
        )
        app.state.model_client = model_client or OpenAIChatClient(
            http,
            api_key=settings.ai_api_key,
            model=settings.ai_model_name,
            base_url=settings.ai_base_url,
            temperature=settings.ai_temperature,
        )
        app.state.captions = captions or YouTubeCaptionSource()
        app.state.transcripts = transcripts or TranscriptFetcher(
            http,
            api_url=settings.transcript_api_url,
            api_key=settings.transcript_api_key,
            max_length=settings.max_transcript_length,
            captions=app.state.captions,
        )
        if settings.guest_mode_enabled and not settings.guest_user_id:
            logger.warning("Guest mode is on but GUEST_USER_ID is not set")
        try:
            yield
        finally:
            await http.aclose()
            if own_engine:
                await db_engine.dispose()

    app = FastAPI(
        title="Lighthouse Ledger",
        description="Records learning evidence and issues AI-reviewed verification records",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.include_router(health_router, tags=["Health"])
    app.include_router(entries_router, prefix="/api", tags=["Entries"])
    app.include_router(evidence_router, prefix="/api", tags=["Evidence"])
    app.include_router(assessment_router, prefix="/api", tags=["Assessment"])
    app.include_router(verify_router, prefix="/api", tags=["Verification"])
    app.include_router(transcripts_router, prefix="/api", tags=["Transcripts"])

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {"service": "Lighthouse Ledger", "version": "0.1.0", "docs": "/docs"}

    return app


app = create_app()
