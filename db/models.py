"""
db/models.py
Normalized activity records.

The repository builds these from raw Supabase rows; nothing downstream
ever sees a raw row. All models are frozen — records are immutable once created.
"""

from datetime import datetime, timezone
import json
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _as_utc(value: datetime) -> datetime:
    # legacy rows carry naive timestamps; they were always written in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class ProgressEntry(_Record):
    """One dated observation of a user's competency in a named skill."""
    skill: str
    level: str = ""
    score: float = Field(..., ge=0, le=100, allow_inf_nan=False)
    date: datetime

    @field_validator("date")
    @classmethod
    def ensure_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)


class Simulation(_Record):
    """One completed assessment attempt."""
    simulation_type: str
    score: float = Field(..., ge=0, le=100, allow_inf_nan=False)
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def ensure_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)


class SkillPassport(_Record):
    id:               Optional[str] = None
    title:            Optional[str] = None
    content:          Any = None
    confidence_score: float = 0
    created_at:       datetime

    @field_validator("created_at")
    @classmethod
    def ensure_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)


class ActivitySnapshot(_Record):
    """The three per-user collections the confidence score is computed from."""
    progress:    tuple[ProgressEntry, ...] = ()
    simulations: tuple[Simulation, ...] = ()
    passports:   tuple[SkillPassport, ...] = ()

    @property
    def total_activities(self) -> int:
        return len(self.progress) + len(self.simulations) + len(self.passports)


class ScoreComponents(_Record):
    consistency: float
    trend:       float
    depth:       float
    volume:      float


class ConfidenceResult(_Record):
    """
    Outcome of a confidence computation.
    status="unavailable" means the inputs could not be fetched — the score is
    unknown, not zero.
    """
    user_id:          str
    status:           Literal["computed", "unavailable"]
    confidence_score: Optional[int] = None
    components:       Optional[ScoreComponents] = None
    error:            Optional[str] = None


class Achievement(_Record):
    id:          str
    title:       str
    description: str
    icon:        str
    earned:      bool
    progress:    float
    rarity:      Literal["common", "rare", "epic", "legendary"]


class AnalyticsEvent(_Record):
    id:         Optional[str] = None
    event_type: str
    data:       Any = None
    created_at: Optional[datetime] = None


class AnalyticsProfile(_Record):
    """
    Signup questionnaire answers. The JSON columns were stored as text by the
    first web release, so string values are decoded on read.
    """
    id:                      Optional[str] = None
    demographics:            Any = None
    professional_background: Any = None
    career_goals:            Any = None
    learning_preferences:    Any = None
    discovery_source:        Optional[str] = None
    marketing_consent:       bool = False
    updated_at:              Optional[datetime] = None

    @field_validator(
        "demographics", "professional_background", "career_goals", "learning_preferences",
        mode="before",
    )
    @classmethod
    def decode_json_text(cls, value: Any) -> Any:
        if isinstance(value, str):
            return json.loads(value) if value else {}
        return {} if value is None else value
