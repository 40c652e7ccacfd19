"""
TubeChat: summarize YouTube videos and chat with their transcripts.

This application fetches a video's captions, splits them into overlapping
chunks, asks an LLM for a summary and answers follow-up questions while
keeping per-video conversation history in memory.
"""

from tubechat.config import config

__version__ = config.APP_VERSION
