"""FastAPI main application."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stylist.agent.registry import agent_registry
from stylist.api.routes import cart, chat, errors, health, products, sessions, transcripts, whatsapp
from stylist.api.middleware import RateLimitMiddleware, LoggingMiddleware
from stylist.database.db import init_db
from stylist.analytics.logger import logger
from stylist.utils.config import settings


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting application...")

    try:
        init_db()
        logger.info("Database initialized")
    except Exception as e:
        logger.error(f"Error initializing database: {e}")

    logger.info("Application startup complete")

    yield

    logger.info("Shutting down application...")
    agent_registry.close()


app = FastAPI(
    title="Omnichannel Stylist API",
    description="Conversational shopping across web chat, WhatsApp and in-store kiosk hand-off",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
cors_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()] or ["*"]
if settings.production_mode and "*" in cors_origins:
    logger.warning("CORS is set to allow all origins in production. Consider restricting this.")
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Rate limiting middleware
app.add_middleware(RateLimitMiddleware, calls=settings.rate_limit_per_minute, period=60)

# Logging middleware
app.add_middleware(LoggingMiddleware)

# Include routers
app.include_router(sessions.router)
app.include_router(products.router)
app.include_router(chat.router)
app.include_router(whatsapp.router)
app.include_router(cart.router)
app.include_router(health.router)
app.include_router(errors.router)
# Catch-all channel path; keep last
app.include_router(transcripts.router)


@app.get("/")
async def root():
    """API info."""
    return {"message": "Omnichannel Stylist API", "version": "1.0.0", "docs": "/docs"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("stylist.api.main:app", host=settings.api_host, port=settings.api_port, reload=True)
