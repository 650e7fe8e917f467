"""
FastAPI Main Entry

PodBridge Feed Pipeline - feed ingestion and federation API service.
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from podbridge.config import APP_NAME, APP_VERSION, API_HOST, API_PORT, CORS_ORIGINS, configure_logging
from podbridge.exceptions import AlreadyTerminal, AuthorizationError


# ==================== Create FastAPI App ====================
app = FastAPI(
    title=APP_NAME,
    version=APP_VERSION,
    description="""
    PodBridge Feed Pipeline API

    Turns external podcast/RSS feeds into show posts and fans local posts
    out to connected external accounts.

    ## Features
    * **Feed import**: Register feed URLs or OPML lists and ingest them immediately
    * **Scheduled polling**: Re-ingest every registered feed (secret-protected)
    * **Shows**: Canonical-routed show pages, post timelines and RSS re-export
    * **Posts**: Author posts with federation fan-out and delivery status
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    contact={
        "name": "PodBridge",
    },
)


# ==================== Configure CORS ====================
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS if CORS_ORIGINS else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ==================== Import and Register Routers ====================
from podbridge.api import feeds, poll, shows, posts

app.include_router(feeds.router, prefix="/api/v1", tags=["feeds"])
app.include_router(poll.router, prefix="/api/v1", tags=["poll"])
app.include_router(shows.router, prefix="/api/v1", tags=["shows"])
app.include_router(posts.router, prefix="/api/v1", tags=["posts"])


# ==================== Root Endpoint ====================
@app.get("/", tags=["Root"])
async def root():
    """API root"""
    return {
        "name": APP_NAME,
        "version": APP_VERSION,
        "status": "running",
        "docs": "/docs",
        "redoc": "/redoc",
    }


# ==================== Health Check ====================
@app.get("/health", tags=["Root"])
async def health_check():
    """Health check"""
    return {
        "status": "healthy",
        "service": APP_NAME,
        "version": APP_VERSION,
    }


# ==================== Global Exception Handlers ====================
@app.exception_handler(AuthorizationError)
async def authorization_error_handler(request, exc):
    """Rejected poll trigger"""
    return JSONResponse(
        status_code=401,
        content={
            "detail": "Unauthorized",
            "error_type": "authorization_error",
        },
        headers={"WWW-Authenticate": "Bearer"},
    )


@app.exception_handler(AlreadyTerminal)
async def already_terminal_handler(request, exc):
    """Federation target already resolved"""
    return JSONResponse(
        status_code=409,
        content={
            "detail": str(exc),
            "error_type": "already_terminal",
        },
    )


@app.exception_handler(SQLAlchemyError)
async def sqlalchemy_exception_handler(request, exc):
    """Database error"""
    logger.error(f"Database error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Database error occurred",
            "error_type": "database_error",
            "message": str(exc) if app.debug else "Internal database error",
        },
    )


@app.exception_handler(ValueError)
async def value_error_handler(request, exc):
    """Invalid value (unknown resource, alias chain, ...)"""
    return JSONResponse(
        status_code=400,
        content={
            "detail": str(exc),
            "error_type": "value_error",
        },
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc):
    """Unhandled error"""
    logger.exception(f"Unhandled error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error_type": "internal_error",
            "message": str(exc) if app.debug else "An unexpected error occurred",
        },
    )


# ==================== Startup Event ====================
@app.on_event("startup")
async def startup_event():
    """Configure logging and make sure the schema exists"""
    from podbridge.database import create_tables

    configure_logging()
    create_tables()
    logger.info(f"{APP_NAME} API v{APP_VERSION} listening on http://{API_HOST}:{API_PORT} (docs: /docs)")


# ==================== Run Server (Development) ====================
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "podbridge.main:app",
        host=API_HOST,
        port=API_PORT,
        reload=True,
        log_level="info",
    )
