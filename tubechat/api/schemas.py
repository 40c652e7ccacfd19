from datetime import datetime
from typing import List

from pydantic import BaseModel, Field

from tubechat.models.schemas import Role, VideoMetadata


class AnalyzeRequest(BaseModel):
    """Model for requesting video analysis."""
    video_url: str = Field(..., min_length=1)


class AskQuestionRequest(BaseModel):
    """Model for question requests."""
    video_id: str = Field(..., min_length=1)
    question: str = Field(..., min_length=1)


class VideoResponse(BaseModel):
    """Model for analysis responses."""
    video_id: str
    metadata: VideoMetadata
    summary: str
    cached: bool = False


class MessageResponse(BaseModel):
    """Model for one conversation message."""
    role: Role
    content: str
    timestamp: datetime


class HistoryResponse(BaseModel):
    """Model for conversation history responses."""
    video_id: str
    messages: List[MessageResponse] = []
