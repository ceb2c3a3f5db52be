import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from newsdesk.config import settings
from newsdesk.errors import register_exception_handlers
from newsdesk.logging_config import setup_logging
from newsdesk.middleware import TimingMiddleware
from newsdesk.routers import admin, articles, auth, categories, comments, users

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info("Newsdesk API starting (env=%s)", settings.APP_ENV)
    yield
    logger.info("Newsdesk API shutting down")

app = FastAPI(
    title="Newsdesk API",
    description="News publishing backend: articles, categories, threaded comments and an admin dashboard",
    version="1.0.0",
    lifespan=lifespan,
)

register_exception_handlers(app)

# Middleware
app.add_middleware(TimingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    # Credentialed (cookie) requests are only allowed for explicit origins.
    allow_credentials="*" not in settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(auth.router)
app.include_router(articles.router)
app.include_router(categories.router)
app.include_router(comments.router)
app.include_router(users.router)
app.include_router(admin.router)

@app.get("/health")
async def health():
    return {"status": "healthy", "version": "1.0.0"}
