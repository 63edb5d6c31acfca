"""FunnelScope — FastAPI Application Entry Point.

Platform metrics layer for the funnel-health dashboard.
"""

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from funnelscope.api.platform_routes import router as platform_router
from funnelscope.config import settings
from funnelscope.core.logging import get_logger
from funnelscope.database import get_store

logger = get_logger("main")

IS_SERVERLESS = bool(
    os.environ.get("VERCEL") or os.environ.get("AWS_LAMBDA_FUNCTION_NAME")
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    logger.info("🚀 FunnelScope starting up...")
    logger.info(f"🌍 Environment: {'SERVERLESS' if IS_SERVERLESS else 'LOCAL'}")
    store = get_store()
    if store.test_connection():
        try:
            store.init_db()
        except Exception as e:
            logger.error(f"❌ Table creation failed: {e}")
    else:
        logger.error("❌ Database NOT connected — endpoints will fail")
    yield
    logger.info("FunnelScope shut down")


app = FastAPI(
    title="FunnelScope",
    description="Pull email, storefront, analytics and ad metrics into one normalized record per platform.",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(platform_router)


@app.get("/health", tags=["System"])
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "funnelscope",
        "version": "1.0.0",
    }
