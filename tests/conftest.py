"""
Configuration for pytest tests.
"""

import asyncio
import os

import pytest

# Must be set before tubechat.config is imported
os.environ.setdefault("GROQ_API_KEY", "test_api_key")
os.environ.setdefault("ENVIRONMENT", "development")

from tubechat.core.chunker import TranscriptChunker
from tubechat.core.orchestrator import VideoOrchestrator
from tubechat.core.session_store import VideoSessionStore
from tubechat.models.schemas import (
    CaptionCue,
    CaptionTrack,
    ChunkingConfig,
    TranscriptChunk,
    VideoMetadata,
    VideoSession,
)

TEST_VIDEO_ID = "dQw4w9WgXcQ"
TEST_VIDEO_URL = f"https://www.youtube.com/watch?v={TEST_VIDEO_ID}"


class FakeClock:
    """Manually advanced replacement for time.monotonic."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeChatClient:
    """Chat client returning canned replies."""

    def __init__(self, summary="This is a summary of the video.", fragments=("The video ", "is about ", "testing.")):
        self.summary = summary
        self.fragments = list(fragments)
        self.fail_after = None
        self.complete_error = None
        self.complete_calls = []
        self.stream_calls = []
        self.stream_finished = False
        self.stream_closed = False

    async def complete(self, messages):
        self.complete_calls.append(messages)
        if self.complete_error is not None:
            raise self.complete_error
        return self.summary

    async def stream(self, messages):
        self.stream_calls.append(messages)
        try:
            for i, fragment in enumerate(self.fragments):
                if self.fail_after is not None and i == self.fail_after:
                    raise RuntimeError("model overloaded")
                await asyncio.sleep(0)
                yield fragment
            self.stream_finished = True
        finally:
            self.stream_closed = True


class FakeCaptionSource:
    """Caption source serving a fixed track or raising a fixed error."""

    def __init__(self, track: CaptionTrack, error: Exception = None):
        self.track = track
        self.error = error
        self.calls = []

    async def fetch_captions(self, video_url):
        self.calls.append(video_url)
        if self.error is not None:
            raise self.error
        return self.track


def make_captions(texts, step: float = 2.0):
    """Build consecutive captions of ``step`` seconds each."""
    return [CaptionCue(text=text, start=i * step, duration=step) for i, text in enumerate(texts)]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return VideoSessionStore(absolute_ttl=24 * 3600, sliding_ttl=4 * 3600, clock=clock)


@pytest.fixture
def metadata():
    return VideoMetadata(title="Test Video", channel="Test Channel", duration=125.0)


@pytest.fixture
def session(metadata):
    """A cached session without summary or history."""
    return VideoSession(
        video_id=TEST_VIDEO_ID,
        metadata=metadata,
        chunks=(
            TranscriptChunk(text="Hello and welcome to the test.", start_time=0.0, end_time=4.0, index=0),
            TranscriptChunk(text="Today we talk about testing.", start_time=4.0, end_time=8.0, index=1),
        ),
    )


@pytest.fixture
def caption_track(metadata):
    return CaptionTrack(
        video_id=TEST_VIDEO_ID,
        metadata=metadata,
        captions=make_captions(["Hello and welcome", "to the test.", "Today we talk", "about testing."]),
        language="en",
    )


@pytest.fixture
def chat_client():
    return FakeChatClient()


@pytest.fixture
def caption_source(caption_track):
    return FakeCaptionSource(caption_track)


@pytest.fixture
def orchestrator(store, caption_source, chat_client):
    chunker = TranscriptChunker(ChunkingConfig(chunk_size_tokens=30, chunk_overlap_tokens=10, chars_per_token=1))
    return VideoOrchestrator(
        store=store,
        caption_source=caption_source,
        chat_client=chat_client,
        chunker=chunker,
        history_window=10,
    )
