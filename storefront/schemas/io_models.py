"""Pydantic models for chat API I/O and agent contracts."""
from pydantic import BaseModel, Field
from typing import Any, List, Optional


class AgentResult(BaseModel):
    agent: str
    intent: str
    context: str = ""
    search_terms: Optional[str] = None
    # ProductOut records, or plain labels for the categories intent
    items: List[Any] = Field(default_factory=list)


class ChatRequest(BaseModel):
    # Left untyped so a non-text message still gets a canned reply
    message: Optional[Any] = None


class ChatResponse(BaseModel):
    reply: str


class ChatHealth(BaseModel):
    status: str
    ai_provider: str
    available_providers: List[str]
