"""
crudbase - FastAPI Application Entry Point

This module initializes the FastAPI application with all middleware,
routes, exception handlers and lifecycle event handlers.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from crudbase.api.errors import register_exception_handlers
from crudbase.api.v1 import example
from crudbase.core.config import settings
from crudbase.core.database import init_db, close_db
from crudbase.core.logging_config import setup_logging
from crudbase.middleware.request_id import RequestIDMiddleware
from crudbase.middleware.logging import LoggingMiddleware


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Startup:
        - Set up structured logging
        - Create missing tables

    Shutdown:
        - Close database connections
    """
    setup_logging(level=settings.log_level, json_format=settings.log_json)
    await init_db()

    yield

    await close_db()


app = FastAPI(
    title=settings.project_name,
    version="0.1.0",
    description="Generic CRUD data-access layer with transaction-scoped repositories",
    openapi_url=f"{settings.api_v1_prefix}/openapi.json",
    openapi_tags=[
        {"name": example.TAG, "description": "Example endpoints"},
    ],
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


# Middleware is executed in reverse order of registration
# (last registered = first executed)

# Logging middleware (runs after RequestID to access request_id)
app.add_middleware(LoggingMiddleware)

# Request ID middleware (first to run - sets correlation ID)
app.add_middleware(RequestIDMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(example.router)
