"""
Main FastAPI application for the Club Grouping Engine.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import routes
from app.core.config import CORS_ORIGINS
from app.core.logging_config import setup_logging

setup_logging()

app = FastAPI(
    title="Club Grouping API",
    description="API for generating weekly tee groups from partner and tee time preferences",
    version="1.0.0"
)

# Enable CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(routes.router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Club Grouping API",
        "version": "1.0.0",
        "endpoints": {
            "preview": "/api/groupings/preview",
            "generate": "/api/schedules/{schedule_id}/groupings",
            "settings": "/api/settings",
            "health": "/api/health"
        }
    }
