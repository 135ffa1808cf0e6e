from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class LLMConfig:
    api_key: str = os.getenv("GROQ_API_KEY", "")
    model: str = os.getenv("GROQ_MODEL", "llama-3.3-70b-versatile")
    timeout: float = 10.0
    max_tokens: int = 256
    temperature: float = 0.1
    # Truncate recipe text sent to the model
    max_instruction_chars: int = 1500
    enabled: bool = True
    # Use the offline ingredient-table calculator when Groq is unavailable or fails
    offline_fallback: bool = os.getenv("SMART_MENU_OFFLINE_CALORIES", "1") != "0"


DEFAULT_LLM_CONFIG = LLMConfig()
