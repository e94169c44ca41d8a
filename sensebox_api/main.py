"""
senseBox fleet API - FastAPI Application
Main entry point for the API server
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn
import structlog
from contextlib import asynccontextmanager

from sensebox_api.api.routes import boxes, health
from sensebox_api.core.config import settings
from sensebox_api.core.errors import BoxApiError, StoreError

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info("Starting senseBox API")
    # Startup
    yield
    # Shutdown
    logger.info("Shutting down senseBox API")

# Create FastAPI application
app = FastAPI(
    title="senseBox API",
    description="Fleet management API for senseBoxes and their sensors",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, prefix="/api/v1", tags=["health"])
app.include_router(boxes.router, prefix="/api/v1", tags=["boxes"])

@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "senseBox API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/v1/health"
    }

@app.exception_handler(BoxApiError)
async def box_api_exception_handler(request: Request, exc: BoxApiError):
    """Map engine errors to HTTP responses"""
    if isinstance(exc, StoreError):
        # detail holds the database message, keep it out of the response
        logger.error("Store error", path=request.url.path, error=exc.message, detail=exc.detail)
    else:
        logger.info("Request rejected", path=request.url.path, error=exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"code": type(exc).__name__, "message": exc.message}
    )

@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler"""
    logger.error("Unhandled exception", exc_info=exc, path=request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )

if __name__ == "__main__":
    uvicorn.run(
        "sensebox_api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )
