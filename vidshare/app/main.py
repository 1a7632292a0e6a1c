# vidshare/app/main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared_lib.utils import setup_logging
from vidshare.app.config import get_settings
from vidshare.app.responses import register_exception_handlers

# Import API routes
from vidshare.app.api import (
    comments, dashboard, healthcheck, likes, playlists, subscriptions, tweets, users, videos
)

settings = get_settings()
setup_logging(settings.LOG_LEVEL)

app = FastAPI(
    title=settings.APP_NAME,
    description="Video sharing platform API: videos, comments, likes, subscriptions, playlists and tweets.",
    version=settings.VERSION,
    docs_url="/api/docs" if settings.DEBUG else None,
    redoc_url="/api/redoc" if settings.DEBUG else None,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# API routes
app.include_router(healthcheck.router)
app.include_router(users.router)
app.include_router(videos.router)
app.include_router(comments.router)
app.include_router(likes.router)
app.include_router(subscriptions.router)
app.include_router(playlists.router)
app.include_router(tweets.router)
app.include_router(dashboard.router)
