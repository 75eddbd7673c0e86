"""
AI assistant endpoint.

Stateless chat: the client keeps the conversation and sends it back whole.
"""

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from eti.api.v1.session import get_session
from eti.core.errors import AnalysisError, ConfigurationError
from eti.schemas import ChatTurn
from eti.services import gemini_gateway
from eti.services.session import SessionState

logger = logging.getLogger("assistant")

router = APIRouter()

CONNECTION_TROUBLE_REPLY = "I'm having trouble connecting. Please try again."


class ChatRequest(BaseModel):
    message: str
    history: list[ChatTurn] = []


class ChatResponse(BaseModel):
    reply: str
    degraded: bool = False


@router.post("/chat", response_model=ChatResponse)
async def chat(data: ChatRequest, _state: SessionState = Depends(get_session)):
    """One assistant turn. Upstream failures come back as an apology, not an error."""
    try:
        reply = gemini_gateway.chat(data.message, data.history)
    except (AnalysisError, ConfigurationError) as e:
        logger.warning("Assistant degraded: %s", e)
        return ChatResponse(reply=CONNECTION_TROUBLE_REPLY, degraded=True)
    return ChatResponse(reply=reply)
