"""
Request orchestration: analysis and streamed question answering.
"""

import asyncio
import traceback
from typing import AsyncIterator, List, Optional, Tuple

from tubechat.config import config
from tubechat.core.caption_source import INVALID_URL_MESSAGE
from tubechat.core.chunker import TranscriptChunker
from tubechat.core.prompts import build_question_messages
from tubechat.core.session_store import VideoSessionStore
from tubechat.core.summarizer import TranscriptSummarizer
from tubechat.models.schemas import AnalysisResult, ConversationMessage, VideoSession
from tubechat.utils.error_handling import (
    InvalidInputError,
    TubeChatError,
    UpstreamServiceError,
    log_diagnostic_info,
    user_message,
)
from tubechat.utils.helpers import extract_video_id
from tubechat.utils.logger import logging

# Returned in place of a fragment when the answer is cancelled
_CANCELLED = object()


class CollectingStream:
    """
    Async iterator that forwards every item of ``source`` and keeps a copy.

    ``completed`` turns true only once the source is exhausted, so callers can
    tell a full answer from one that was cut short.
    """

    def __init__(self, source: AsyncIterator[str]):
        self._source = source
        self._parts: List[str] = []
        self.completed = False

    def __aiter__(self):
        return self

    async def __anext__(self) -> str:
        try:
            item = await self._source.__anext__()
        except StopAsyncIteration:
            self.completed = True
            raise
        self._parts.append(item)
        return item

    @property
    def text(self) -> str:
        return "".join(self._parts)

    async def aclose(self):
        aclose = getattr(self._source, "aclose", None)
        if aclose is not None:
            await aclose()


class VideoOrchestrator:
    """Coordinates the caption source, session store and chat model."""

    def __init__(
        self,
        store: VideoSessionStore,
        caption_source,
        chat_client,
        chunker: Optional[TranscriptChunker] = None,
        summarizer: Optional[TranscriptSummarizer] = None,
        history_window: int = config.HISTORY_WINDOW,
    ):
        """
        Wire the orchestrator to its collaborators.

        Args:
            store: Session cache shared by all requests
            caption_source: Object with ``async fetch_captions(video_url)``
            chat_client: Object with ``async complete(messages)`` and ``stream(messages)``
            chunker: Transcript chunker (default configuration if None)
            summarizer: Summary generator (built on ``chat_client`` if None)
            history_window: Number of recent messages included in answer prompts
        """
        self.store = store
        self.caption_source = caption_source
        self.chat_client = chat_client
        self.chunker = chunker or TranscriptChunker()
        self.summarizer = summarizer or TranscriptSummarizer(chat_client)
        self.history_window = history_window

    async def analyze(self, video_url: str) -> AnalysisResult:
        """
        Analyze a video, reusing the cached session when there is one.

        Args:
            video_url: YouTube video URL

        Returns:
            AnalysisResult with metadata and summary

        Raises:
            InvalidInputError: If the URL is not a YouTube video link
            VideoUnavailableError: If the video cannot be accessed
            NoCaptionsError: If the video has no captions
            UpstreamServiceError: If the caption source or chat model fails
        """
        video_id = extract_video_id(video_url)
        if not video_id:
            logging.error(f"Invalid YouTube URL format: {video_url}")
            raise InvalidInputError(INVALID_URL_MESSAGE)

        logging.info(f"Starting video analysis for VideoId: {video_id}")

        try:
            session = await self.store.get(video_id)
            cached = session is not None

            if cached and session.summary:
                logging.info(f"Video found in cache for VideoId: {video_id}")
                return AnalysisResult(
                    video_id=video_id,
                    metadata=session.metadata,
                    summary=session.summary,
                    cached=True,
                )

            if not cached:
                track = await self.caption_source.fetch_captions(video_url)
                if track.video_id != video_id:
                    logging.warning(
                        f"Caption source returned VideoId: {track.video_id} for VideoId: {video_id}; "
                        f"caching under {video_id}"
                    )
                chunks = self.chunker.chunk(track.captions)
                session = VideoSession(video_id=video_id, metadata=track.metadata, chunks=tuple(chunks))
                await self.store.put(session)
                logging.info(f"Created new video session for video: {video_id} with {len(chunks)} chunks")
            else:
                logging.info(f"Cached session for VideoId: {video_id} has no summary, generating one")

            summary = await self.summarizer.summarize(session)
            await self.store.update_summary(video_id, summary)
        except TubeChatError as e:
            logging.warning(f"Video analysis failed for VideoId: {video_id}: {e.message}")
            raise
        except Exception as e:
            logging.error(f"Failed to analyze video for VideoId: {video_id}: {str(e)}")
            logging.error(traceback.format_exc())
            raise UpstreamServiceError(f"Failed to analyze video: {str(e)}", video_id=video_id) from e

        logging.info(f"Video analysis completed for VideoId: {video_id}")
        return AnalysisResult(
            video_id=video_id,
            metadata=session.metadata,
            summary=summary,
            cached=cached,
        )

    async def ask_question(
        self,
        video_id: str,
        question: str,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> AsyncIterator[str]:
        """
        Stream an answer to a question about an analyzed video.

        Failures are yielded as a single ``"Error: ..."`` fragment instead of
        being raised, since the caller may already be streaming a response.
        The complete answer is saved as an assistant message once the model
        finishes. Answers stopped by ``cancel_event``, task cancellation or
        the consumer closing the iterator are not saved.

        Args:
            video_id: ID of an analyzed video
            question: User question
            cancel_event: Optional event that stops the answer when set

        Yields:
            Answer text fragments
        """
        logging.info(f"Processing question for VideoId: {video_id}")

        try:
            video_exists = await self.store.exists(video_id)
        except Exception as e:
            logging.error(f"Failed to check if video exists for VideoId: {video_id}: {str(e)}")
            yield f"Error: Failed to check video existence - {user_message(e)}"
            return

        if not video_exists:
            message = f"Video must be analyzed before asking questions. VideoId: {video_id}"
            logging.warning(message)
            yield f"Error: {message}"
            return

        if not question or not question.strip():
            yield "Error: Please provide a question about the video."
            return

        if cancel_event is not None and cancel_event.is_set():
            logging.info(f"Question for VideoId: {video_id} cancelled before it was recorded")
            return

        try:
            session = await self.store.add_conversation_message(video_id, ConversationMessage.user(question))
            logging.debug(f"Added user question to conversation history for VideoId: {video_id}")
        except Exception as e:
            logging.error(f"Failed to add user question to conversation history for VideoId: {video_id}: {str(e)}")
            yield f"Error: Failed to save question - {user_message(e)}"
            return

        history = self._recent_history(session)
        log_diagnostic_info({
            "video_id": video_id,
            "history_messages": len(history),
            "transcript_length": len(session.transcript_text),
        })

        stream = None
        cancelled = False
        try:
            messages = build_question_messages(session, question, history)
            if cancel_event is not None and cancel_event.is_set():
                cancelled = True
            else:
                stream = CollectingStream(self.chat_client.stream(messages))

            while not cancelled:
                try:
                    fragment = await self._next_fragment(stream, cancel_event)
                except StopAsyncIteration:
                    break
                if fragment is _CANCELLED:
                    cancelled = True
                elif fragment:
                    yield fragment
        except (asyncio.CancelledError, GeneratorExit):
            logging.info(f"Answer stream cancelled for VideoId: {video_id}; partial answer not saved")
            raise
        except Exception as e:
            logging.error(f"Failed to stream answer for VideoId: {video_id}: {str(e)}")
            logging.error(traceback.format_exc())
            yield f"Error: Failed to process question - {user_message(e)}"
            return
        finally:
            if stream is not None and not stream.completed:
                await stream.aclose()

        if cancelled:
            logging.info(f"Answer stream cancelled for VideoId: {video_id}; partial answer not saved")
            return

        try:
            await self.store.add_conversation_message(video_id, ConversationMessage.assistant(stream.text))
            logging.info(f"Completed question processing for VideoId: {video_id}")
        except Exception as e:
            # The answer was already streamed, so this is only logged
            logging.error(f"Failed to save conversation history for VideoId: {video_id}: {str(e)}")

    async def history(self, video_id: str) -> Optional[Tuple[ConversationMessage, ...]]:
        """Return the conversation history of a cached video, or None."""
        session = await self.store.get(video_id)
        if session is None:
            return None
        return session.conversation_history

    async def _next_fragment(self, stream: CollectingStream, cancel_event: Optional[asyncio.Event]):
        """
        Wait for the next fragment of ``stream`` or for ``cancel_event``.

        Returns ``_CANCELLED`` if the event is set first and raises
        StopAsyncIteration once the stream is exhausted. The pending read is
        cancelled and awaited, so the stream can be closed right after.
        """
        if cancel_event is None:
            return await stream.__anext__()

        next_fragment = asyncio.ensure_future(stream.__anext__())
        cancel_wait = asyncio.ensure_future(cancel_event.wait())
        try:
            await asyncio.wait({next_fragment, cancel_wait}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            pending = [task for task in (next_fragment, cancel_wait) if not task.done()]
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.wait(pending)

        if cancel_event.is_set():
            return _CANCELLED
        return next_fragment.result()

    def _recent_history(self, session: VideoSession) -> Tuple[ConversationMessage, ...]:
        # The last message is the question being answered
        previous = session.conversation_history[:-1]
        if self.history_window <= 0:
            return ()
        return previous[-self.history_window:]
