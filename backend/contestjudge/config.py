from __future__ import annotations
import os
from typing import Literal
from pydantic import BaseModel

CompletionQuorum = Literal["any_judge", "all_judges"]

class Settings(BaseModel):
    environment: str = os.getenv("ENVIRONMENT", "dev")
    app_name: str = os.getenv("APP_NAME", "contestjudge-api")
    app_display_name: str = os.getenv("APP_DISPLAY_NAME", "Contest Judging")
    app_version: str = os.getenv("APP_VERSION", "0.1.0")
    git_sha: str = os.getenv("GIT_SHA", "dev")
    cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
    database_url: str = os.getenv("DATABASE_URL", "postgresql+asyncpg://postgres:postgres@db:5432/contestjudge_dev")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Judging rules
    # any_judge: a submission is JUDGED once the scoring judge covered every criterion
    # all_judges: every judge assigned to the contest must have covered every criterion
    completion_quorum: CompletionQuorum = os.getenv("COMPLETION_QUORUM", "any_judge")  # type: ignore[assignment]
    criteria_weight_min: float = float(os.getenv("CRITERIA_WEIGHT_MIN", "0.1"))
    criteria_weight_max: float = float(os.getenv("CRITERIA_WEIGHT_MAX", "10"))
    criteria_default_max_score: int = int(os.getenv("CRITERIA_DEFAULT_MAX_SCORE", "100"))

settings = Settings()
