"""
Smart Campus Chatbot API - Main Server
Features:
- Campus assistant backed by Google Gemini when a key is configured
- Keyword fallback responses when AI is unavailable or failing
- Optional JWT identity echoed back to the client
- Log Anonymization
"""
import asyncio
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from smart_campus.api import chatbot
from smart_campus.api.chatbot import invalid_request_response, reply_to_response
from smart_campus.config import Config
from smart_campus.core.errors import InternalFailure
from smart_campus.engines.ai_engine_async import build_capability
from smart_campus.engines.chat_engine import ChatResponder
from smart_campus.engines.monitoring import record_error, start_cleanup_task
from smart_campus.utils import logging_utils

# Setup Logging
logger = logging_utils.get_logger()


def build_chat_responder() -> ChatResponder:
    """Resolve AI capability once for the process and wire the responder."""
    capability = build_capability(
        api_key=Config.GEMINI_API_KEY,
        model_name=Config.GEMINI_MODEL,
        enabled=Config.AI_ENABLED,
    )
    return ChatResponder(
        capability,
        production=Config.is_production(),
        timeout=Config.AI_TIMEOUT_SECONDS,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    cleanup_task = asyncio.create_task(start_cleanup_task(Config.METRICS_CLEANUP_INTERVAL_SECONDS))
    try:
        yield
    finally:
        cleanup_task.cancel()
        try:
            await cleanup_task
        except asyncio.CancelledError:
            pass


async def unhandled_error_response(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=True)
    await record_error(type(exc).__name__, str(exc))
    responder: ChatResponder = request.app.state.chat_responder
    reply = responder.apology_reply(InternalFailure(str(exc), cause=exc))
    return reply_to_response(reply)


def create_app(chat_responder: Optional[ChatResponder] = None) -> FastAPI:
    app = FastAPI(title="Smart Campus Chatbot API", version="1.0.0", lifespan=lifespan)
    app.state.chat_responder = chat_responder or build_chat_responder()

    # Registered before CORS so CORS wraps it and the apology carries CORS headers.
    @app.middleware("http")
    async def apology_on_unhandled_error(request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            return await unhandled_error_response(request, exc)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=Config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(chatbot.router, prefix="/api", tags=["chatbot"])

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        if request.url.path.rstrip("/").endswith("/chatbot"):
            return invalid_request_response()
        return JSONResponse(status_code=422, content={"detail": jsonable_encoder(exc.errors())})

    @app.get("/health")
    def health_check():
        responder: ChatResponder = app.state.chat_responder
        return {
            "status": "ok",
            "service": "smart-campus-chatbot",
            "env": Config.APP_ENV,
            "ai_enabled": responder.ai_enabled,
        }

    mode = "Gemini AI" if app.state.chat_responder.ai_enabled else "fallback responses"
    logger.info(f"Smart Campus Chatbot ready ({mode})")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=Config.HOST, port=Config.PORT, reload=not Config.is_production())
