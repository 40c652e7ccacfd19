"""
Configuration settings for the TubeChat application.
"""

import os
from typing import Dict, Any, List
from pathlib import Path
from dotenv import load_dotenv


# Ensure environment variables are loaded
load_dotenv()


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value else default


def _env_list(name: str, default: List[str]) -> List[str]:
    value = os.getenv(name)
    if not value:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]


class Config:
    """Base configuration class."""

    # Application info
    APP_NAME = "TubeChat"
    APP_VERSION = "0.2.0"

    BASE_DIR = Path(__file__).resolve().parent.parent.absolute()

    # API keys
    GROQ_API_KEY = os.getenv("GROQ_API_KEY")

    # Chat model
    MODEL_PROVIDER = os.getenv("MODEL_PROVIDER", "groq")
    DEFAULT_CHAT_MODEL = os.getenv("CHAT_MODEL", "llama-3.3-70b-versatile")
    TEMPERATURE = float(os.getenv("TEMPERATURE", "0.0"))

    # Transcript chunking (1 token is roughly 4 characters)
    CHUNK_SIZE_TOKENS = _env_int("CHUNK_SIZE_TOKENS", 2000)
    CHUNK_OVERLAP_TOKENS = _env_int("CHUNK_OVERLAP_TOKENS", 200)
    CHARS_PER_TOKEN = _env_int("CHARS_PER_TOKEN", 4)

    # Session cache
    SESSION_ABSOLUTE_TTL = _env_int("SESSION_ABSOLUTE_TTL_SECONDS", 24 * 60 * 60)
    SESSION_SLIDING_TTL = _env_int("SESSION_SLIDING_TTL_SECONDS", 4 * 60 * 60)
    SESSION_SWEEP_INTERVAL = _env_int("SESSION_SWEEP_INTERVAL_SECONDS", 300)

    # Question answering
    HISTORY_WINDOW = _env_int("HISTORY_WINDOW", 10)
    CAPTION_LANGUAGES = _env_list("CAPTION_LANGUAGES", ["en"])

    DEBUG = False
    LOG_LEVEL = "INFO"

    @classmethod
    def initialize(cls):
        """Initialize the application configuration."""
        # Validate required environment variables
        if cls.MODEL_PROVIDER == "groq" and not cls.GROQ_API_KEY:
            print("WARNING: GROQ_API_KEY environment variable not set.")
            print("Please set it in the .env file or environment variables.")

    @classmethod
    def get_settings(cls) -> Dict[str, Any]:
        """Get the non-secret runtime settings."""
        return {
            "model_provider": cls.MODEL_PROVIDER,
            "chat_model": cls.DEFAULT_CHAT_MODEL,
            "chunk_size_tokens": cls.CHUNK_SIZE_TOKENS,
            "chunk_overlap_tokens": cls.CHUNK_OVERLAP_TOKENS,
            "session_absolute_ttl": cls.SESSION_ABSOLUTE_TTL,
            "session_sliding_ttl": cls.SESSION_SLIDING_TTL,
            "history_window": cls.HISTORY_WINDOW,
        }


class DevelopmentConfig(Config):
    """Development configuration."""

    DEBUG = True
    LOG_LEVEL = "DEBUG"


class ProductionConfig(Config):
    """Production configuration."""

    DEBUG = False
    LOG_LEVEL = "INFO"


# Determine which configuration to use based on environment
def get_config():
    """Get the appropriate configuration based on environment."""
    env = os.getenv("ENVIRONMENT", "development").lower()
    if env == "production":
        return ProductionConfig
    else:
        return DevelopmentConfig


# Create a config instance
config = get_config()
config.initialize()
