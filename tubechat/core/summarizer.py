"""
Module for summarizing video transcripts using LLM models.
"""

from tubechat.core.chat_client import ChatClient
from tubechat.core.prompts import build_summary_messages
from tubechat.models.schemas import VideoSession
from tubechat.utils.logger import logging


class TranscriptSummarizer:
    """Class to handle transcript summarization operations."""

    def __init__(self, chat_client: ChatClient):
        """
        Initialize the summarizer.

        Args:
            chat_client: Chat model used to write the summary
        """
        self.chat_client = chat_client

    async def summarize(self, session: VideoSession) -> str:
        """
        Summarize the transcript of a cached video session.

        Args:
            session: Session holding metadata and transcript chunks

        Returns:
            Summary text
        """
        logging.info(f"Generating summary for video: {session.video_id} ({len(session.chunks)} chunks)")
        messages = build_summary_messages(session)
        summary = await self.chat_client.complete(messages)
        return summary.strip()
