"""
Module: main.py
Description: FastAPI application entry point for the action log collector.

Initializes the FastAPI application with the collector routes and error
handlers. The collector is the primary endpoint DeliveryQueue posts to.
"""

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from actionlog.config.settings import settings
from actionlog.handlers.actions import router as actions_router
from actionlog.utils.logger import get_logger

logger = get_logger(__name__)

app = FastAPI(
    title=f"{settings.app_name} Collector",
    description="Collector for user action logs shipped by the delivery queue",
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.include_router(actions_router)


@app.get("/health")
async def health_check():
    """Health check endpoint, also used as the connectivity probe."""
    logger.debug("Health check requested")

    return {
        "status": "ok",
        "message": "Action log collector is healthy",
        "version": settings.app_version,
        "environment": settings.stage
    }


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Log HTTP exceptions and return structured error responses."""
    logger.warning(
        "HTTP exception occurred",
        status_code=exc.status_code,
        detail=exc.detail,
        path=request.url.path,
        method=request.method
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "code": exc.status_code,
                "message": exc.detail,
                "type": "http_exception"
            }
        }
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unhandled errors."""
    logger.error(
        "Unhandled exception occurred",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        method=request.method
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": 500,
                "message": "Failed to log action",
                "type": "internal_error"
            }
        }
    )
