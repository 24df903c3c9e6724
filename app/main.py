"""
FastAPI Application Entry Point

This module initializes the FastAPI application with:
- CORS configuration
- Route registration
- Uploaded asset serving
- Health check endpoints
- Error handlers
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from app.core.config import settings
from app.core.exceptions import AppError
from app.db.database import check_db_connection
from app.api.v1.router import api_router

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


# ============================================================
# Application Lifespan Events
# ============================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: check the database connection.
    """
    logger.info(f"Starting {settings.PROJECT_NAME}...")
    logger.info(f"Debug mode: {settings.DEBUG}")

    if await check_db_connection():
        logger.info("Database connection established successfully")
    else:
        logger.warning("Database connection check failed")

    if settings.PASSWORD_RESET_ECHO_CODE:
        logger.warning(
            "PASSWORD_RESET_ECHO_CODE is enabled: reset codes are returned "
            "in the forgot-password response"
        )

    yield

    logger.info(f"Shutting down {settings.PROJECT_NAME}...")


# ============================================================
# Create FastAPI Application
# ============================================================
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="""
    Movie streaming catalog API

    Features:
    - Registration, login (JWT) and password reset with one-time codes
    - Profile pictures, movie posters and videos
    - Admin management of users and movies
    """,
    version="1.0.0",
    openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# ----------------------------------------------------
# Middleware Configuration
# ----------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.DEBUG else settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


# ----------------------------------------------------
# Health Check Endpoints
# ----------------------------------------------------
@app.get("/", tags=["Health"])
async def root():
    """Root endpoint with API information."""
    return {
        "name": settings.PROJECT_NAME,
        "version": "1.0.0",
        "status": "running",
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for monitoring."""
    db_healthy = await check_db_connection()
    return JSONResponse(
        status_code=200 if db_healthy else 503,
        content={
            "status": "healthy" if db_healthy else "unhealthy",
            "database": "connected" if db_healthy else "disconnected",
        }
    )


# ============================================================
# Routes
# ============================================================
app.include_router(
    api_router,
    prefix=settings.API_V1_PREFIX
)

# Read-only access to uploaded assets: /uploads/{slot}/{reference}
app.mount(
    "/uploads",
    StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False),
    name="uploads",
)


# ----------------------------------------------------
# Exception Handlers
# ----------------------------------------------------
@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Expected failures: structured message plus a stable error code."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.error_code}
    )


@app.exception_handler(Exception)
async def internal_error_handler(request: Request, exc: Exception):
    """Anything unexpected: log it, tell the client nothing."""
    logger.exception(f"Internal server error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )
