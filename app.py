"""Main FastAPI application for the plugin update service."""

import logging
import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env
load_dotenv('.env')

# Configure logging BEFORE importing any modules that use logger
log_level = os.getenv('LOG_LEVEL', 'INFO')
logging.basicConfig(
    level=getattr(logging, log_level.upper()),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Import after logging is configured
from fastapi import FastAPI
from api.routers import plugins_router, updates_router

# Create FastAPI app
app = FastAPI(
    title="Plugin Update Service",
    description="Host for self-hosted plugins that update from their GitHub repositories",
    version="1.0.0"
)

app.include_router(plugins_router)  # /api/plugins endpoints
app.include_router(updates_router)  # /api/updates endpoints


@app.get("/")
async def root():
    return {"message": "Plugin Update Service API", "docs": "/docs"}


@app.on_event("startup")
async def startup_event():
    """Application startup event."""
    from api.dependencies import get_plugin_manager

    logger.info("Starting Plugin Update Service")
    logger.info(f"Working directory: {Path.cwd()}")

    await get_plugin_manager().load_all()


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown event."""
    from api.dependencies import get_plugin_manager

    await get_plugin_manager().stop_all()
    logger.info("Shutting down Plugin Update Service")


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", "9090"))
    uvicorn.run("app:app", host="0.0.0.0", port=port, reload=True)
