"""
Credentials and model defaults for the generation providers.

Values come from the process environment, seeded from the first .env file
found. The config.toml "model" override is applied later, in ProviderFactory.
"""

import os
import logging
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

ENV_SEARCH_PATHS = [
    Path(__file__).parent.parent.parent / ".env",  # source checkout
    Path.cwd() / ".env",
    Path.home() / ".config" / "cmdgen" / ".env",
]

DEFAULT_TIMEOUT = 30


def _load_env() -> Optional[Path]:
    """Load the first existing .env; variables already set are kept."""
    for env_path in ENV_SEARCH_PATHS:
        if env_path.exists():
            load_dotenv(dotenv_path=env_path)
            logger.debug("Loaded .env from %s", env_path)
            return env_path
    logger.debug("No .env file found, using the process environment")
    return None


def _timeout() -> int:
    raw = os.getenv("CMDGEN_TIMEOUT")
    if raw is None:
        return DEFAULT_TIMEOUT
    try:
        value = int(raw)
    except ValueError:
        value = 0
    if value < 1:
        print(f"cmdgen: CMDGEN_TIMEOUT must be a positive integer, using {DEFAULT_TIMEOUT}", file=sys.stderr)
        return DEFAULT_TIMEOUT
    return value


ENV_FILE = _load_env()

ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY")
GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY")
GROQ_API_KEY = os.getenv("GROQ_API_KEY")

ANTHROPIC_MODEL = os.getenv("CMDGEN_ANTHROPIC_MODEL", "claude-haiku-4-5-20251001")
GEMINI_MODEL = os.getenv("CMDGEN_GEMINI_MODEL", "gemini-2.5-flash-lite")
GROQ_MODEL = os.getenv("CMDGEN_GROQ_MODEL", "llama-3.3-70b-versatile")

# Seconds, per provider request
HTTP_TIMEOUT = _timeout()
