from pydantic import BaseModel, ConfigDict
from typing import Any, Dict, Optional

class ChatbotRequest(BaseModel):
    # Validated by the chat engine so a missing message maps to the 400 contract.
    message: Optional[Any] = None

    model_config = ConfigDict(extra="ignore")

class ChatbotUser(BaseModel):
    id: str
    name: str
    role: Optional[str] = None

class ChatbotResponse(BaseModel):
    message: str
    timestamp: str
    source: str
    user: Optional[ChatbotUser] = None

class ChatbotErrorResponse(BaseModel):
    message: str
    timestamp: str
    error: str = "Chatbot service temporarily unavailable"
    details: Optional[str] = None

class ChatbotStatusResponse(BaseModel):
    ai_enabled: bool
    model: Optional[str] = None
    reason: str = ""
    stats: Dict[str, Any] = {}
