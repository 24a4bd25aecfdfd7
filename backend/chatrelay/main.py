"""
ChatRelay - Main FastAPI Application
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .api import auth_router, sessions_router, share_router
from .core.errors import ChatRelayError, StorageUnavailable
from .core.logging_config import setup_logging
from .core.message_relay import MessageRelay
from .core.session_manager import SessionManager
from .llm import GenerationClient, create_llm_provider_from_settings
from .middleware import RequestLoggingMiddleware
from .storage import LocalStorage, SessionRepository, StorageError, UserStorage

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build storage, provider and services; expose them on app.state."""
    setup_logging(settings)

    storage = LocalStorage(settings.local_storage_path)
    repository = SessionRepository(storage)
    session_manager = SessionManager(
        repository,
        default_title=settings.default_session_title,
        public_base_url=settings.app_url,
    )
    generation_client = GenerationClient(create_llm_provider_from_settings(settings))

    app.state.user_storage = UserStorage(storage)
    app.state.session_manager = session_manager
    app.state.message_relay = MessageRelay(session_manager, generation_client)

    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Storage path: {settings.local_storage_path}")
    logger.info(
        f"LLM provider: {settings.llm_provider} "
        f"({'echo mode' if generation_client.echo_mode else 'configured'})"
    )
    yield
    logger.info(f"Shutting down {settings.app_name}")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Multi-session chat relay to a text-generation provider, with public share links",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

if settings.log_api_requests:
    app.add_middleware(RequestLoggingMiddleware)

app.include_router(auth_router)
app.include_router(sessions_router)
app.include_router(share_router)


@app.exception_handler(ChatRelayError)
async def chat_relay_error_handler(request: Request, exc: ChatRelayError):
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload(), headers=headers)


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    logger.error(f"Storage failure on {request.url.path}: {exc}")
    error = StorageUnavailable()
    return JSONResponse(status_code=error.status_code, content=error.to_payload())


@app.get("/ping")
async def ping():
    return {"ok": True}


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "storage": settings.storage_type,
        "version": settings.app_version,
        "provider": settings.llm_provider if settings.provider_api_key else "echo",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "chatrelay.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )
