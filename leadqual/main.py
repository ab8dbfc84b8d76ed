"""
Lead Qualification Backend - FastAPI Application
Main entry point with all routes configured.
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from sqlalchemy.exc import SQLAlchemyError

from leadqual.config import settings
from leadqual.database import init_db
from leadqual.core.exceptions import (
    LeadQualException,
    lead_qual_exception_handler,
    database_exception_handler,
)

from leadqual.api import enrichment

# Import models to ensure they are registered with SQLModel
from leadqual.models import (
    User, Organization,
    Lead, Contact, IcpProfile,
    LeadScore
)

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    await init_db()
    yield


app = FastAPI(
    title="Lead Qualification API",
    description="Lead enrichment and scoring for multi-tenant sales teams",
    version="1.0.0",
    lifespan=lifespan
)

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(LeadQualException, lead_qual_exception_handler)
app.add_exception_handler(SQLAlchemyError, database_exception_handler)

app.include_router(enrichment.router)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "message": "Lead Qualification API is running",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health")
async def health():
    """Detailed health check."""
    return {
        "status": "healthy",
        "version": "1.0.0"
    }
