"""
leadbridge — FastAPI Service

Turns CRM stage changes into hashed server-side conversion events for
imported ad leads.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from leadbridge.config import settings
from leadbridge.db.session import dispose_db, init_db
from leadbridge.logging import RequestLoggingMiddleware, configure_logging
from leadbridge.routes import imports, webhook

configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create/extend the leads table on startup, release the pool on shutdown."""
    await init_db()
    yield
    await dispose_db()


app = FastAPI(
    title="leadbridge",
    description="CRM stage changes to Meta Conversions API events, plus bulk lead import.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(webhook.router)
app.include_router(imports.router)


@app.get("/", tags=["health"])
async def root():
    return {"status": "ok", "message": "Server is up and responding."}


@app.get("/health", tags=["health"])
async def health():
    """Health check for load balancers and container orchestration."""
    return {"status": "ok"}
