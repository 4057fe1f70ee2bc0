"""
Main application entry point for the Contacts API.

This module initializes the FastAPI application, configures logging and
CORS, registers the error envelope handlers, initializes the rate limiter
with a Redis backend, and includes routers for authentication, users,
contacts and addresses.

Modules:
- FastAPI: Web framework
- CORSMiddleware: Middleware for handling CORS
- redis.asyncio: Async Redis client
- app.database: Database engine
- app.models: SQLAlchemy models
- app.errors: Error envelope handlers
- app.auth, app.users, app.contacts, app.addresses: Routers
- app.core: Application settings
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
import redis.asyncio as redis
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.database import engine
from app import models, contacts, addresses
from app.auth import router as auth_router, start_rate_limiter, stop_rate_limiter
from app.users import router as users_router
from app.core import configure_logging, get_settings
from app.errors import http_exception_handler, validation_exception_handler

settings = get_settings()
configure_logging(settings.LOG_LEVEL)

# Create tables (for development only)
models.Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Initialize the rate limiter with the Redis backend on startup.

    When rate limiting is disabled or Redis is unreachable the limiter
    stays uninitialized and the rate limit dependency lets requests through.
    """
    redis_client = None
    if settings.RATE_LIMIT_ENABLED:
        redis_client = redis.from_url(
            settings.REDIS_URL, encoding="utf-8", decode_responses=True
        )
        if not await start_rate_limiter(redis_client):
            await redis_client.aclose()
            redis_client = None
    yield
    if redis_client is not None:
        stop_rate_limiter()
        await redis_client.aclose()


# Initialize FastAPI application
app = FastAPI(title="Contacts API", lifespan=lifespan)

# Configure CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)

# Include routers for application areas
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(contacts.router)
app.include_router(addresses.router)


@app.get("/")
def root():
    """
    Root endpoint for the API.

    Returns a simple JSON message directing users to the Swagger UI.

    Returns:
        dict: JSON message with information about the API
    """
    return {"msg": "Contacts API. Visit /docs for Swagger UI"}
