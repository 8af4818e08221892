"""
Request/response models for the librarian API.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict, Any
from datetime import datetime


class RecommendRequest(BaseModel):
    message: str = Field(..., min_length=3, max_length=500)

    @field_validator('message')
    @classmethod
    def message_must_not_be_blank(cls, v):
        if not v.strip():
            raise ValueError('Message is required')
        return v


class BookResult(BaseModel):
    id: int
    title: str
    author: str
    genre: str
    description: str
    status: str
    similarity: Optional[float] = None


class RecommendData(BaseModel):
    response: str
    books: List[BookResult]
    is_book_request: bool
    ai_powered: bool = True
    used_fallback: bool = False


class RecommendResponse(BaseModel):
    success: bool = True
    data: RecommendData


class StatusData(BaseModel):
    is_initialized: bool
    uses_real_embeddings: bool
    book_count: int
    embedding_count: int
    has_embeddings: bool
    embedding_provider: str
    state: str
    store: Dict[str, Any]


class StatusResponse(BaseModel):
    success: bool = True
    data: StatusData


class RefreshResponse(BaseModel):
    success: bool = True
    message: str


class HistoryData(BaseModel):
    history: List[Dict[str, Any]] = []


class HistoryResponse(BaseModel):
    success: bool = True
    data: HistoryData


class HealthResponse(BaseModel):
    status: str
    version: str
    db_health: bool
    book_count: int


class ValidationFieldError(BaseModel):
    field: str
    message: str


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    error: Optional[str] = None
    errors: Optional[List[ValidationFieldError]] = None
    timestamp: datetime = None

    def __init__(self, **data):
        super().__init__(timestamp=datetime.now(), **data)
