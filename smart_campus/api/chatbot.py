"""
Smart Campus Chatbot API

POST /api/chatbot         - answer a campus question (optional auth)
GET  /api/chatbot/status  - AI capability and recent metrics
"""

from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from smart_campus.api.dependencies import get_chat_responder, get_current_user_optional
from smart_campus.core.errors import InvalidRequest
from smart_campus.engines.chat_engine import ChatReply, ChatRequest, ChatResponder, Identity
from smart_campus.engines.monitoring import Monitor, get_dashboard_data
from smart_campus.schemas import (
    ChatbotErrorResponse,
    ChatbotRequest,
    ChatbotResponse,
    ChatbotStatusResponse,
)
from smart_campus.utils.logging_utils import log_audit

router = APIRouter()

SERVICE_UNAVAILABLE = "Chatbot service temporarily unavailable"


def invalid_request_response(exc: InvalidRequest = None) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"message": exc.message if exc else "Message is required"},
    )


def reply_to_response(reply: ChatReply) -> JSONResponse:
    """Serialize a reply into the HTTP contract the web and mobile clients expect."""
    if reply.failed:
        body = ChatbotErrorResponse(
            message=reply.message,
            timestamp=reply.timestamp,
            error=SERVICE_UNAVAILABLE,
            details=reply.error_info.detail,
        )
        return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))

    body = ChatbotResponse(
        message=reply.message,
        timestamp=reply.timestamp,
        source=reply.source,
        user=reply.identity.to_dict() if reply.identity else None,
    )
    return JSONResponse(status_code=200, content=body.model_dump())


@router.post("/chatbot", responses={400: {"description": "Message is required"}, 500: {"model": ChatbotErrorResponse}})
async def send_message(
    body: ChatbotRequest,
    user: Optional[Identity] = Depends(get_current_user_optional),
    responder: ChatResponder = Depends(get_chat_responder),
):
    async with Monitor.request("chatbot") as monitor:
        try:
            reply = await responder.resolve(ChatRequest(message=body.message, identity=user))
        except InvalidRequest as e:
            return invalid_request_response(e)

        await monitor.record_source(reply.source)

    if user:
        log_audit("chatbot_message", user.id, f"source={reply.source}")
    return reply_to_response(reply)


@router.get("/chatbot/status", response_model=ChatbotStatusResponse)
async def chatbot_status(responder: ChatResponder = Depends(get_chat_responder)):
    capability = responder.capability
    return ChatbotStatusResponse(
        ai_enabled=responder.ai_enabled,
        model=capability.model_name,
        reason=capability.reason,
        stats=await get_dashboard_data(hours=1),
    )
