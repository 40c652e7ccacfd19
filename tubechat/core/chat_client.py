"""
Chat model access through LangChain.
"""

import os
from typing import AsyncIterator, List, Optional

from langchain.chat_models import init_chat_model
from langchain_core.messages import BaseMessage

from tubechat.config import config
from tubechat.utils.logger import logging


def _content_text(content) -> str:
    """Flatten message content, which some providers return as a list of parts."""
    if isinstance(content, str):
        return content
    parts = []
    for part in content or []:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type") == "text":
            parts.append(part.get("text", ""))
    return "".join(parts)


class ChatClient:
    """Thin async wrapper around a LangChain chat model."""

    def __init__(
        self,
        model: str = config.DEFAULT_CHAT_MODEL,
        model_provider: str = config.MODEL_PROVIDER,
        temperature: float = config.TEMPERATURE,
        api_key: Optional[str] = None,
    ):
        """
        Initialize the chat model.

        Args:
            model: Model name
            model_provider: LangChain provider name (e.g. "groq", "openai")
            temperature: Sampling temperature
            api_key: Groq API key (if None, will try to get from environment)
        """
        if model_provider == "groq":
            api_key = api_key or os.getenv("GROQ_API_KEY")
            if not api_key:
                raise ValueError("Groq API key is required. Set it in .env file or pass directly.")
            os.environ["GROQ_API_KEY"] = api_key

        logging.info(f"Initializing chat model {model} from {model_provider}")
        self.llm = init_chat_model(
            model=model,
            model_provider=model_provider,
            temperature=temperature,
        )

    async def complete(self, messages: List[BaseMessage]) -> str:
        """Return the model's full reply to ``messages``."""
        response = await self.llm.ainvoke(messages)
        return _content_text(response.content)

    async def stream(self, messages: List[BaseMessage]) -> AsyncIterator[str]:
        """Yield the model's reply to ``messages`` as it is generated."""
        async for chunk in self.llm.astream(messages):
            yield _content_text(chunk.content)
