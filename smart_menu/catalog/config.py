from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class CatalogConfig:
    base_url: str = os.getenv("MEALDB_BASE_URL", "https://www.themealdb.com/api/json/v1/1")
    request_timeout: float = float(os.getenv("MEALDB_TIMEOUT", "10"))
    max_dishes_per_key: int = 25


DEFAULT_CATALOG_CONFIG = CatalogConfig()
