"""
Main FastAPI application
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ohmage.config import settings
from ohmage.database.connection import init_database, dispose_database
from ohmage.routes import health, campaigns, surveys, data_points, visualization, mobility


logging.basicConfig(level=settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await dispose_database()


# Create FastAPI app
app = FastAPI(
    title="ohmage",
    description="Campaign, survey response and mobility API for ohmage participatory sensing clients",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS,
)

# Initialize database
init_database()


# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(campaigns.router, tags=["Campaigns"])
app.include_router(surveys.router, tags=["Surveys"])
app.include_router(data_points.router, tags=["Data points"])
app.include_router(visualization.router, tags=["Visualization"])
app.include_router(mobility.router, tags=["Mobility"])
