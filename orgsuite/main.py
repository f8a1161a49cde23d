"""
OrgSuite FastAPI application.

Main FastAPI application entry point.
"""

import logging
from contextlib import asynccontextmanager

import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from orgsuite.api import (
    academics_router,
    activity_router,
    auth_router,
    communications_router,
    crm_router,
    finance_router,
    hr_router,
    inventory_router,
    odontology_router,
    organizations_router,
    payroll_router,
    public_router,
    reports_router,
    settings_router,
    users_router,
)
from orgsuite.config.settings import get_settings
from orgsuite.database import close_db, init_db
from orgsuite.exceptions import OrgSuiteError

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

if settings.sentry_dsn:
    sentry_sdk.init(dsn=settings.sentry_dsn, environment=settings.environment)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    logger.info(f"Starting {settings.service_name} v{settings.service_version}")
    logger.info(f"Environment: {settings.environment}")

    if settings.auto_create_schema:
        await init_db()
        logger.info("Database schema created")

    yield

    # Shutdown
    logger.info("Shutting down...")
    await close_db()


# Create FastAPI app
app = FastAPI(
    title="OrgSuite",
    description="Multi-tenant institutional management API",
    version=settings.service_version,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Platform routers
app.include_router(auth_router)
app.include_router(organizations_router)
app.include_router(users_router)
app.include_router(activity_router)
app.include_router(settings_router)
app.include_router(public_router)

# Feature module routers
app.include_router(academics_router)
app.include_router(hr_router)
app.include_router(payroll_router)
app.include_router(finance_router)
app.include_router(inventory_router)
app.include_router(reports_router)
app.include_router(crm_router)
app.include_router(communications_router)
app.include_router(odontology_router)


@app.exception_handler(OrgSuiteError)
async def domain_exception_handler(request: Request, exc: OrgSuiteError):
    """Map domain errors raised by services to their HTTP status."""
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unhandled errors"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_server_error",
            "message": "An unexpected error occurred. Please try again later.",
        },
    )


@app.get("/")
async def root():
    """Root endpoint with service information"""
    return {
        "service": settings.service_name,
        "version": settings.service_version,
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "service": settings.service_name, "version": settings.service_version}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("orgsuite.main:app", host="0.0.0.0", port=8000, log_level=settings.log_level.lower())
