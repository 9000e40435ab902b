# artifind/models.py
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ChatRequest(ApiModel):
    message: str = ""
    session_id: Optional[str] = None
    context: Dict[str, Any] = Field(default_factory=dict)


class ChatMessage(ApiModel):
    id: str
    role: str
    content: str
    timestamp: datetime
    suggestions: List[str] = Field(default_factory=list)
    # Front-end actions such as {"type": "filter", "category": "Pottery", "label": ...}
    actions: List[Dict[str, Any]] = Field(default_factory=list)


class ChatReply(ApiModel):
    message: ChatMessage
    session_id: str
    conversation_length: int


class ChatHistory(ApiModel):
    messages: List[ChatMessage]
    session_id: str
    total_messages: int


class TagSuggestionRequest(ApiModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    materials: List[str] = Field(default_factory=list)


class TagSuggestion(ApiModel):
    tags: List[str]
    confidence: float
    generated_at: datetime


class SearchEnhancementRequest(ApiModel):
    query: str = ""
    context: Dict[str, Any] = Field(default_factory=dict)


class SearchEnhancement(ApiModel):
    original_query: str
    synonyms: List[str] = Field(default_factory=list)
    related_terms: List[str] = Field(default_factory=list)
    categories: List[str] = Field(default_factory=list)
    suggested_filters: Dict[str, Any] = Field(default_factory=dict)


class DescriptionRequest(ApiModel):
    product_type: Optional[str] = None
    materials: List[str] = Field(default_factory=list)
    style: Optional[str] = None
    user_prompt: Optional[str] = None


class GeneratedDescription(ApiModel):
    title: str
    description: str
    tags: List[str]
    category: str
    generated_at: datetime
