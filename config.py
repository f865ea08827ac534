"""
Configuration settings for the interview simulator.

Everything is read from the environment (or a local .env file). API keys for
the generation services are looked up where they are used and never stored in
source.
"""

from dotenv import load_dotenv
load_dotenv()          # must run before os.getenv(...)
import logging
import os
from typing import Optional

# Generation service: "gemini" or "openai"
AI_SERVICE = os.getenv("AI_SERVICE", "gemini").lower()

GEMINI_PRIMARY_MODEL = os.getenv("GEMINI_PRIMARY_MODEL", "models/gemini-3-flash-preview")
GEMINI_FALLBACK_MODEL = os.getenv("GEMINI_FALLBACK_MODEL", "models/gemini-flash-latest")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")

# Answers are short spoken replies; a high temperature keeps them varied.
MAX_RESPONSE_TOKENS = int(os.getenv("MAX_RESPONSE_TOKENS", "500"))
RESPONSE_TEMPERATURE = float(os.getenv("RESPONSE_TEMPERATURE", "0.9"))
GENERATION_TIMEOUT = float(os.getenv("GENERATION_TIMEOUT", "30"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Speech
VOSK_MODEL_PATH = os.getenv("VOSK_MODEL_PATH", "vosk_model")
VOSK_MODEL_URL = os.getenv(
    "VOSK_MODEL_URL", "https://alphacephei.com/vosk/models/vosk-model-small-en-us-0.15.zip"
)
AZURE_SPEECH_KEY = os.getenv("AZURE_SPEECH_KEY")
AZURE_SPEECH_REGION = os.getenv("AZURE_SPEECH_REGION")
AZURE_SPEECH_VOICE = os.getenv("AZURE_SPEECH_VOICE", "en-US-JennyNeural")


def configure_logging(level: Optional[str] = None) -> None:
    """Set up root logging once and quiet the PDF libraries."""
    logging.basicConfig(
        level=level or LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("pdfplumber").setLevel(logging.ERROR)
    logging.getLogger("pdfminer").setLevel(logging.ERROR)
