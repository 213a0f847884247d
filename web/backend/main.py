import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from aurora_music.core.config import WebConfig, load_config
from aurora_music.core.database import init_database
from aurora_music.core.output import setup_logging_from_config

from web.backend.deps import session_registry


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = load_config()
    setup_logging_from_config(config.logging)
    init_database()
    session_registry.default_volume = config.player.default_volume
    logger.info("Aurora Music API started")
    yield
    session_registry.clear()
    logger.info("Aurora Music API stopped")


app = FastAPI(title="Aurora Music API", version="1.0.0", lifespan=lifespan)

# CORS: Allow environment override for production
allowed_origins_env = os.getenv("ALLOWED_ORIGINS", "")
allowed_origins = (
    [origin.strip() for origin in allowed_origins_env.split(",") if origin.strip()]
    if allowed_origins_env
    else WebConfig().allowed_origins  # Dev default
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
from web.backend.routers import genres, live, player, playlists, songs, stats, users

app.include_router(player.router, prefix="/api", tags=["player"])
app.include_router(songs.router, prefix="/api", tags=["songs"])
app.include_router(genres.router, prefix="/api", tags=["genres"])
app.include_router(playlists.router, prefix="/api", tags=["playlists"])
app.include_router(stats.router, prefix="/api", tags=["stats"])
app.include_router(users.router, prefix="/api", tags=["users"])
app.include_router(live.router)


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
