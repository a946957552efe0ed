"""Global settings and configuration."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load from project root
_env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(_env_path)


@dataclass
class Config:
    """Application-wide configuration."""

    # Chat completion endpoint (OpenAI-compatible)
    # Store the key in environment variable or .env file: OPENAI_API_KEY
    # NEVER hardcode secret keys in source code!
    OPENAI_API_KEY: str = os.environ.get("OPENAI_API_KEY", "")
    AI_BASE_URL: str = "https://api.openai.com/v1"
    AI_MODEL: str = "gpt-4o-mini"

    # Sampling
    CHAT_TEMPERATURE: float = 0.7
    INTEGRATION_TEMPERATURE: float = 0.2

    # Retry policy: additional attempts after the first one
    RETRIES: int = 2
    CHAT_RETRY_DELAY: float = 1.5
    INTEGRATION_RETRY_DELAY: float = 2.0

    # Timeouts (seconds)
    TIMEOUT: int = 30
    INTEGRATION_TIMEOUT: int = 60
    INTEGRATION_RESOURCE_TIMEOUT: int = 90

    # UI feedback durations (seconds)
    SUCCESS_TOAST_SECONDS: float = 1.5
    ERROR_TOAST_SECONDS: float = 3.0

    # Cross-platform paths using pathlib
    # BASE_DIR is the project root (parent of autoanki/)
    BASE_DIR: Path = Path(__file__).parent.parent.parent.resolve()

    DATA_DIR: str = str(BASE_DIR / "data")
    DECKS_FILE: str = str(BASE_DIR / "data" / "decks.json")
    OUTPUT_DIR: str = str(BASE_DIR / "data" / "output")
    LOG_FILE: str = str(BASE_DIR / "data" / "logs" / "autoanki.log")
