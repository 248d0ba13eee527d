"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from portal.api.v1 import batches, employees, enrollment, reports
from portal.core.config import settings
from portal.core.logging import get_logger, setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle hooks."""
    setup_logging(settings.LOG_LEVEL or ("DEBUG" if settings.APP_ENV == "development" else "INFO"))
    logger = get_logger("startup")
    logger.info("Application starting", env=settings.APP_ENV)
    yield
    logger.info("Application shutting down")


app = FastAPI(
    title="Employee Benefits Enrollment API",
    description="Employee health-insurance enrollment with pro-rata parental premiums",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

API_PREFIX = "/api/v1"
app.include_router(enrollment.router, prefix=API_PREFIX)
app.include_router(employees.router, prefix=API_PREFIX)
app.include_router(batches.router, prefix=API_PREFIX)
app.include_router(reports.router, prefix=API_PREFIX)


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, str]:
    """Public health-check endpoint."""
    return {"status": "ok", "env": settings.APP_ENV}
