"""
FastAPI application for TubeChat.
"""

import asyncio
import time
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tubechat.config import config
from tubechat.api.routes import router
from tubechat.core.caption_source import YouTubeCaptionSource
from tubechat.core.chat_client import ChatClient
from tubechat.core.orchestrator import VideoOrchestrator
from tubechat.core.session_store import VideoSessionStore
from tubechat.utils.logger import logging

# FastAPI application
app = FastAPI(
    title=config.APP_NAME,
    version=config.APP_VERSION,
    description="An API for summarizing YouTube videos and chatting about their transcripts",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def build_orchestrator() -> VideoOrchestrator:
    """Create the session store and collaborators for this process."""
    store = VideoSessionStore(
        absolute_ttl=config.SESSION_ABSOLUTE_TTL,
        sliding_ttl=config.SESSION_SLIDING_TTL,
    )
    return VideoOrchestrator(
        store=store,
        caption_source=YouTubeCaptionSource(),
        chat_client=ChatClient(),
    )


async def sweep_expired_sessions(store: VideoSessionStore, interval: float):
    """Periodically evict expired sessions."""
    while True:
        await asyncio.sleep(interval)
        store.purge_expired()


@app.on_event("startup")
async def startup_event():
    """Initialize components on application startup."""
    if getattr(app.state, "orchestrator", None) is None:
        app.state.orchestrator = build_orchestrator()

    app.state.sweeper = asyncio.create_task(
        sweep_expired_sessions(app.state.orchestrator.store, config.SESSION_SWEEP_INTERVAL)
    )
    logging.info(f"{config.APP_NAME} started with settings: {config.get_settings()}")


@app.on_event("shutdown")
async def shutdown_event():
    """Stop the sweeper and drop all cached sessions."""
    sweeper = getattr(app.state, "sweeper", None)
    if sweeper is not None:
        sweeper.cancel()
        try:
            await sweeper
        except asyncio.CancelledError:
            pass
        app.state.sweeper = None

    orchestrator = getattr(app.state, "orchestrator", None)
    if orchestrator is not None:
        orchestrator.store.clear()
        app.state.orchestrator = None
    logging.info(f"{config.APP_NAME} stopped")


@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """Middleware to add processing time header to responses."""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    return response


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unhandled exceptions."""
    logging.error(f"Unhandled error on {request.url.path}: {str(exc)}")
    return JSONResponse(
        status_code=500,
        content={"detail": f"An unexpected error occurred: {str(exc)}"},
    )


# Include API router
app.include_router(router)


# Root
@app.get("/")
async def root():
    """Root endpoint returning basic API information."""
    return {
        "name": config.APP_NAME,
        "version": config.APP_VERSION,
        "description": "YouTube video summary and Q&A API",
    }
