"""
FastAPI application entry point.
"""
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pathlib import Path
import sys
from loguru import logger

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from core.config import Config
from lib.logging_setup import setup_logging

SERVICE_NAME = "Google News Link Resolver API"
VERSION = "0.1.0"


def create_app(config: Config = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    config = config or Config()
    logging_config = config.get_logging_config()
    setup_logging(
        enable_console=True,
        console_level=logging_config['console_level'],
        file_level=logging_config['file_level'],
        log_file=logging_config['file'],
    )
    logger.info("Initializing FastAPI application...")

    from app.routes import extract

    app = FastAPI(
        title=SERVICE_NAME,
        description="Resolve Google News links to the publisher's article URL",
        version=VERSION,
    )

    cors_config = config.get_cors_config()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_config['allowed_origins'],
        allow_credentials=cors_config['allow_credentials'],
        allow_methods=cors_config['allow_methods'],
        allow_headers=cors_config['allow_headers'],
    )

    @app.exception_handler(RequestValidationError)
    async def invalid_body_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Invalid request body for {request.url.path}: {exc.errors()}")
        return JSONResponse(status_code=400, content={"message": "Invalid request body"})

    app.include_router(extract.router, prefix="/api/extract", tags=["extract"])

    @app.get("/")
    async def root():
        return {"message": SERVICE_NAME, "version": VERSION}

    @app.get("/health")
    async def health():
        """Health check endpoint - responds without touching the browser."""
        return {
            "status": "healthy",
            "service": SERVICE_NAME,
            "version": VERSION
        }

    @app.get("/api/health")
    async def api_health():
        return {
            "status": "healthy",
            "service": SERVICE_NAME,
            "version": VERSION,
            "endpoint": "/api/health"
        }

    logger.info("FastAPI application initialized successfully")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    backend_config = Config().get_backend_config()
    uvicorn.run(app, host=backend_config['host'], port=backend_config['port'])
