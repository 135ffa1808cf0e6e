from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class PipelineConfig:
    repeat_avoidance_days: int = 3
    min_dish_score: float = 1
    fallback_score: float = 5
    emergency_score: float = 1
    estimate_calories: bool = os.getenv("SMART_MENU_ESTIMATE_CALORIES", "1") != "0"


DEFAULT_PIPELINE_CONFIG = PipelineConfig()
