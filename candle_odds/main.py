from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from candle_odds.analysis.profiles import EngineProfile, resolve_profile
from candle_odds.analysis.service import AnalysisService
from candle_odds.api.router import api_router
from candle_odds.candles.dataset import Dataset, load_dataset
from candle_odds.core.middleware import RequestLogMiddleware
from candle_odds.core.settings import settings
from candle_odds.utils.logger import configure_logging


def _profile_from_settings() -> EngineProfile:
    return resolve_profile(
        settings.ENGINE_PROFILE,
        min_length=settings.SEQUENCE_MIN_LENGTH,
        max_length=settings.SEQUENCE_MAX_LENGTH,
    )


def create_app(dataset: Dataset | None = None, profile: EngineProfile | None = None) -> FastAPI:
    """Build the API.

    With no dataset, candles are loaded from DATA_DIR during startup; any
    ingestion error aborts startup so the service never answers on a partial
    schema. Passing a dataset skips loading (tests, embedding).
    """

    configure_logging()
    engine_profile = profile or _profile_from_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "analysis", None) is None:
            ds = load_dataset(
                settings.DATA_DIR,
                interval_seconds=settings.BASE_INTERVAL_SECONDS,
                widths=settings.timeframe_widths(),
            )
            app.state.analysis = AnalysisService(ds, engine_profile)
        logger.info(
            "Serving {n} base candle(s) with engine profile {p}",
            n=len(app.state.analysis.dataset.base),
            p=engine_profile.name,
        )
        yield

    app = FastAPI(
        title="Candle Sequence Odds",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.analysis = AnalysisService(dataset, engine_profile) if dataset is not None else None

    # CORS: permissive by default for local frontend integration.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(RequestLogMiddleware)

    app.include_router(api_router)

    @app.get("/health")
    def health() -> dict:
        return {
            "status": "ok",
            "env": settings.APP_ENV,
            "dataset_loaded": app.state.analysis is not None,
        }

    return app


app = create_app()
