#!/usr/bin/env python3
"""
Development server runner for the VidShare API.
"""

import asyncio
import logging

import uvicorn
from dotenv import load_dotenv

logger = logging.getLogger(__name__)


async def prepare_database():
    from vidshare.app.db import engine, init_models

    await init_models()
    # The server runs on its own event loop
    await engine.dispose()


if __name__ == "__main__":
    load_dotenv()

    from vidshare.app.main import app

    asyncio.run(prepare_database())

    logger.info("API docs: http://localhost:8000/api/docs (DEBUG only)")
    logger.info("Health check: http://localhost:8000/api/v1/healthcheck/")

    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        log_level="info"
    )
