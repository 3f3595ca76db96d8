"""FastAPI application for Trophy Mint."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from trophy_mint.achievements import AchievementAggregator
from trophy_mint.cache import CacheStore
from trophy_mint.config import Settings, get_settings
from trophy_mint.errors import ProfileUnreadable, TrophyMintError
from trophy_mint.steam import SteamClient
from trophy_mint.storage import MintLedger
from trophy_mint.web.routes import achievements, library, metadata, session

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    steam: SteamClient | None = None,
    cache: CacheStore | None = None,
    ledger: MintLedger | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Resources not passed in are built from ``settings``. Without a Steam API
    key the Steam-backed routes answer with a configuration error.
    """
    settings = settings or get_settings()

    if steam is None and settings.steam_api_key:
        steam = SteamClient(settings.steam_api_key, timeout=settings.http_timeout_seconds)
    if cache is None:
        cache = CacheStore(settings.redis_url, default_ttl=settings.cache_ttl_seconds)
    if ledger is None:
        ledger = MintLedger(settings.data_dir)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await cache.close()
        if steam is not None:
            await steam.close()

    app = FastAPI(
        title="Trophy Mint",
        description="Steam achievement rarity and on-chain achievement tokens",
        lifespan=lifespan,
    )

    # Shared resources for the route dependencies
    app.state.settings = settings
    app.state.cache = cache
    app.state.steam = steam
    app.state.ledger = ledger
    app.state.aggregator = (
        AchievementAggregator(steam, cache, ttl_seconds=settings.cache_ttl_seconds)
        if steam is not None
        else None
    )

    @app.exception_handler(TrophyMintError)
    async def trophy_mint_error_handler(request: Request, exc: TrophyMintError):
        if isinstance(exc, ProfileUnreadable):
            logger.info("%s %s: %s", request.method, request.url.path, exc.message)
        elif exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse({"message": exc.message}, status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("Error processing %s %s", request.method, request.url.path)
        return JSONResponse({"message": "An internal server error occurred."}, status_code=500)

    app.include_router(achievements.router)
    app.include_router(library.router)
    app.include_router(metadata.router)
    app.include_router(session.router)

    return app
