"""Runtime configuration for the Weight Distribution Editor."""
from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EditorSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="WEIGHT_EDITOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_env: str = "local"
    log_level: str = "INFO"

    page_title: str = "Creatives"
    item_label: str = "Creative"
    initial_weights: List[int] = [50, 25, 21, 4]

    # Warning shown when |total - 100| exceeds this
    deviation_tolerance: int = 1
    repair_proportional_rounding: bool = True
    random_seed: Optional[int] = None

    @field_validator("initial_weights")
    @classmethod
    def _check_initial_weights(cls, value: List[int]) -> List[int]:
        if not value:
            raise ValueError("initial_weights needs at least one entry")
        if any(w < 0 or w > 100 for w in value):
            raise ValueError("initial_weights entries must be within 0..100")
        return value

    @field_validator("deviation_tolerance")
    @classmethod
    def _check_tolerance(cls, value: int) -> int:
        if value < 0:
            raise ValueError("deviation_tolerance must be non-negative")
        return value


@lru_cache
def get_settings() -> EditorSettings:
    return EditorSettings()
