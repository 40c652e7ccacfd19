"""
Data models for the TubeChat application.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, List, Tuple
from pydantic import BaseModel, Field, field_validator

from tubechat.config import config


class Role(str, Enum):
    """Author of a conversation message."""
    USER = "user"
    ASSISTANT = "assistant"


class CaptionCue(BaseModel):
    """One timestamped caption as returned by the caption source."""
    text: str
    start: float
    duration: float = 0.0

    model_config = {"frozen": True}

    @property
    def end(self) -> float:
        return self.start + self.duration


class TranscriptChunk(BaseModel):
    """A bounded, overlapping span of transcript text."""
    text: str
    start_time: float
    end_time: float
    index: int

    model_config = {"frozen": True}


class VideoMetadata(BaseModel):
    """Basic information about a video."""
    title: str
    channel: str
    duration: float = 0.0

    model_config = {"frozen": True}


class ConversationMessage(BaseModel):
    """A single question or answer in a video's conversation history."""
    role: Role
    content: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = {"frozen": True}

    @classmethod
    def user(cls, content: str) -> "ConversationMessage":
        return cls(role=Role.USER, content=content)

    @classmethod
    def assistant(cls, content: str) -> "ConversationMessage":
        return cls(role=Role.ASSISTANT, content=content)


class VideoSession(BaseModel):
    """
    Cached per-video state.

    Sessions are immutable; updates go through ``model_copy`` so a reader
    never observes a half-applied change.
    """
    video_id: str
    metadata: VideoMetadata
    chunks: Tuple[TranscriptChunk, ...] = ()
    summary: Optional[str] = None
    conversation_history: Tuple[ConversationMessage, ...] = ()

    model_config = {"frozen": True}

    @property
    def transcript_text(self) -> str:
        """All chunk texts joined with a single space."""
        return " ".join(chunk.text for chunk in self.chunks)

    def with_summary(self, summary: str) -> "VideoSession":
        return self.model_copy(update={"summary": summary})

    def with_message(self, message: ConversationMessage) -> "VideoSession":
        return self.model_copy(
            update={"conversation_history": self.conversation_history + (message,)}
        )


class CaptionTrack(BaseModel):
    """Everything the caption source returns for one video."""
    video_id: str
    metadata: VideoMetadata
    captions: List[CaptionCue]
    language: Optional[str] = None


class ChunkingConfig(BaseModel):
    """Configuration for transcript chunking."""
    chunk_size_tokens: int = config.CHUNK_SIZE_TOKENS
    chunk_overlap_tokens: int = config.CHUNK_OVERLAP_TOKENS
    chars_per_token: int = config.CHARS_PER_TOKEN

    @field_validator('chunk_size_tokens', 'chars_per_token')
    def validate_positive(cls, v):
        if v <= 0:
            raise ValueError('must be a positive integer')
        return v

    @field_validator('chunk_overlap_tokens')
    def validate_overlap(cls, v):
        if v < 0:
            raise ValueError('overlap cannot be negative')
        return v

    @property
    def chunk_size_chars(self) -> int:
        return self.chunk_size_tokens * self.chars_per_token

    @property
    def chunk_overlap_chars(self) -> int:
        return self.chunk_overlap_tokens * self.chars_per_token


class AnalysisResult(BaseModel):
    """Outcome of analyzing a video."""
    video_id: str
    metadata: VideoMetadata
    summary: str
    cached: bool = False
