from typing import List, Sequence

from langchain_core.messages import BaseMessage
from langchain_core.prompts import ChatPromptTemplate

from tubechat.models.schemas import ConversationMessage, VideoSession
from tubechat.utils.helpers import format_duration

summary_template = """
    Please provide a comprehensive summary of the following YouTube video transcript.

    The video title is: "{title}"
    The channel is: "{channel}"

    Transcript:
    {transcript}

    Please provide a well-structured summary that captures the main points,
    key insights, and overall message of the video.
    """

question_template = """
    You are an AI assistant helping answer questions about a YouTube video.

    Video Information:
    Title: "{title}"
    Channel: "{channel}"
    Duration: {duration}

    {summary_section}{history_section}Video Transcript:
    {transcript}

    User Question: {question}

    Please provide a helpful and accurate answer based on the video content.
    If the information is not available in the transcript, please indicate that clearly.
    """

SUMMARY_PROMPT = ChatPromptTemplate.from_messages([("human", summary_template)])
QUESTION_PROMPT = ChatPromptTemplate.from_messages([("human", question_template)])


def build_summary_messages(session: VideoSession) -> List[BaseMessage]:
    return SUMMARY_PROMPT.format_messages(
        title=session.metadata.title,
        channel=session.metadata.channel,
        transcript=session.transcript_text,
    )


def build_question_messages(
    session: VideoSession,
    question: str,
    history: Sequence[ConversationMessage],
) -> List[BaseMessage]:
    """Build the answer prompt; ``history`` should already be trimmed to the recent window."""
    summary_section = f"Video Summary: {session.summary}\n\n" if session.summary else ""

    history_section = ""
    if history:
        lines = "\n".join(f"{msg.role.value}: {msg.content}" for msg in history)
        history_section = f"Previous conversation:\n{lines}\n\n"

    return QUESTION_PROMPT.format_messages(
        title=session.metadata.title,
        channel=session.metadata.channel,
        duration=format_duration(session.metadata.duration),
        summary_section=summary_section,
        history_section=history_section,
        transcript=session.transcript_text,
        question=question,
    )
