"""Configuration from environment variables."""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """PatternWatch configuration loaded from environment variables."""

    # Validator heuristics
    patternwatch_max_group_depth: int = 5
    patternwatch_max_text_length: int = 5000

    # Analyzer output bounds
    patternwatch_max_message_length: int = 300
    patternwatch_max_code_examples: int = 5

    # Quality assessment
    patternwatch_quality_suggestion_threshold: float = 0.6
    patternwatch_min_trigger_literals: int = 4

    # Conflict detection
    patternwatch_overlap_probe_limit: int = 8

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton."""
    return Settings()
