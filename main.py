"""
EventSeat - FastAPI Backend
Main application entry point
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from eventseat.core.config import settings
from eventseat.api import routes_events, routes_guests, routes_public
from eventseat.services.repositories import GuestStore, build_store
from eventseat.utils.responses import error_response

# Configure logging
logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger(__name__)

def _describe_validation_error(exc: RequestValidationError) -> str:
    first = exc.errors()[0]
    location = [str(part) for part in first.get("loc", ()) if part != "body"]
    field = ".".join(location)
    message = first.get("msg", "Invalid request")
    return f"Invalid value for '{field}': {message}" if field else message

def create_app(store: Optional[GuestStore] = None) -> FastAPI:
    """Build the application; ``store`` defaults to the backend named in settings"""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan management"""
        if getattr(app.state, "store", None) is None:
            app.state.store = build_store(settings)
        logger.info("Store ready: %s", type(app.state.store).__name__)
        yield
        logger.info("Application shutdown")

    app = FastAPI(
        title="EventSeat",
        description="Event seating lookup: events, guests, name search and bulk import",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.store = store

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return error_response(str(exc.detail), status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        if any(error.get("type") == "json_invalid" for error in exc.errors()):
            logger.warning("Malformed JSON body on %s %s", request.method, request.url.path)
            return error_response("Failed to parse request body", status_code=500)
        return error_response(_describe_validation_error(exc), status_code=400)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return error_response("Internal server error", status_code=500)

    # Include routers
    app.include_router(routes_public.router, tags=["public"])
    app.include_router(routes_events.router, tags=["events"])
    app.include_router(routes_guests.router, tags=["guests"])

    return app

app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="127.0.0.1",
        port=8000,
        reload=True
    )
