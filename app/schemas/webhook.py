"""Voice platform webhook event schemas"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict


class ConversationAnalysis(BaseModel):
    model_config = ConfigDict(extra="allow")

    data_collection_results: Optional[Dict[str, Any]] = None


class WebhookEventData(BaseModel):
    model_config = ConfigDict(extra="allow")

    agent_id: Optional[str] = None
    conversation_id: Optional[str] = None
    status: Optional[str] = None
    analysis: Optional[ConversationAnalysis] = None


class WebhookEvent(BaseModel):
    """Signed event posted by the voice platform"""
    model_config = ConfigDict(extra="allow")

    type: str
    event_timestamp: Optional[int] = None
    data: WebhookEventData
