"""
API routes for the TubeChat application.
"""

from typing import AsyncIterator

from fastapi import APIRouter, Depends, HTTPException, Path, Request
from fastapi.responses import StreamingResponse

from tubechat.api.schemas import (
    AnalyzeRequest,
    AskQuestionRequest,
    HistoryResponse,
    MessageResponse,
    VideoResponse,
)
from tubechat.core.orchestrator import VideoOrchestrator
from tubechat.utils.error_handling import (
    InvalidInputError,
    NoCaptionsError,
    TubeChatError,
    UpstreamServiceError,
    VideoUnavailableError,
)
from tubechat.utils.logger import logging

router = APIRouter(prefix="/api/youtube", tags=["youtube"])

STATUS_CODES = {
    InvalidInputError: 400,
    VideoUnavailableError: 404,
    NoCaptionsError: 422,
    UpstreamServiceError: 502,
}


def get_orchestrator(request: Request) -> VideoOrchestrator:
    """Return the orchestrator created at application startup."""
    return request.app.state.orchestrator


def status_code_for(error: TubeChatError) -> int:
    for error_type, status_code in STATUS_CODES.items():
        if isinstance(error, error_type):
            return status_code
    return 500


def format_sse(data: str) -> str:
    """Format one server-sent event; every line of ``data`` gets its own field."""
    lines = data.split("\n")
    return "".join(f"data: {line}\n" for line in lines) + "\n"


@router.post("/analyze", response_model=VideoResponse)
async def analyze_video(
    request: AnalyzeRequest,
    orchestrator: VideoOrchestrator = Depends(get_orchestrator),
):
    """
    Analyze a YouTube video by URL.

    - If the video has been analyzed before, returns the cached result
    - Otherwise fetches captions, chunks them and generates a summary
    """
    logging.debug(f"Processing video analysis request for URL: {request.video_url}")
    try:
        result = await orchestrator.analyze(request.video_url)
    except TubeChatError as e:
        raise HTTPException(status_code=status_code_for(e), detail=e.message)

    return VideoResponse(
        video_id=result.video_id,
        metadata=result.metadata,
        summary=result.summary,
        cached=result.cached,
    )


@router.post("/ask")
async def ask_question(
    request: AskQuestionRequest,
    orchestrator: VideoOrchestrator = Depends(get_orchestrator),
):
    """Stream an answer about an analyzed video as server-sent events."""
    logging.debug(f"Processing question request for VideoId: {request.video_id}")

    async def event_stream() -> AsyncIterator[str]:
        answer = orchestrator.ask_question(request.video_id, request.question)
        try:
            async for fragment in answer:
                yield format_sse(fragment)
            yield format_sse("[DONE]")
        finally:
            # Closing the answer on disconnect keeps partial text out of history
            await answer.aclose()

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
    )


@router.get("/{video_id}/history", response_model=HistoryResponse)
async def get_history(
    video_id: str = Path(..., description="YouTube video ID"),
    orchestrator: VideoOrchestrator = Depends(get_orchestrator),
):
    """Get the conversation history of an analyzed video."""
    history = await orchestrator.history(video_id)
    if history is None:
        raise HTTPException(status_code=404, detail="Video not found or not yet analyzed")

    return HistoryResponse(
        video_id=video_id,
        messages=[
            MessageResponse(role=msg.role, content=msg.content, timestamp=msg.timestamp)
            for msg in history
        ],
    )
