"""
db/repository.py
Per-user activity data access over Supabase.

Tables:
  progress_tracking        skill progress entries     (ordered by date DESC)
  simulations              completed assessments      (ordered by created_at DESC)
  skill_passports          issued passports           (ordered by created_at DESC)
  portfolios               portfolio records          (count only)
  analytics                product analytics events   (ordered by created_at DESC)
  user_analytics_profiles  signup questionnaire       (one row per user)

Rows are normalized into db.models records here, at the boundary.
Rows written by the legacy backend keep their fields under data_json —
every read falls back to row["data_json"][field] when the column is empty.

Any fetch/parse failure is raised as DataUnavailableError.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional, TypeVar

import httpx
from postgrest.exceptions import APIError
from pydantic import ValidationError
from supabase import Client

from db.models import AnalyticsEvent, AnalyticsProfile, ProgressEntry, Simulation, SkillPassport

logger = logging.getLogger(__name__)

T = TypeVar("T")

_PROGRESS_FIELDS = ("skill", "level", "score", "date")
_SIMULATION_FIELDS = ("simulation_type", "score", "created_at")
_PASSPORT_FIELDS = ("id", "title", "content", "confidence_score", "created_at")
_PROFILE_FIELDS = (
    "demographics", "professional_background", "career_goals",
    "learning_preferences", "discovery_source", "marketing_consent",
)

DEFAULT_EVENT_LIMIT = 50


class DataUnavailableError(Exception):
    """Raised when a user's activity cannot be fetched or parsed."""
    pass


def _field(row: dict, name: str) -> Any:
    value = row.get(name)
    if value is None:
        legacy = row.get("data_json") or {}
        if isinstance(legacy, dict):
            value = legacy.get(name)
    return value


def _normalize(row: dict, fields: tuple[str, ...]) -> dict:
    data = {}
    for name in fields:
        value = _field(row, name)
        if value is not None:
            data[name] = value
    return data


def normalize_progress(row: dict) -> ProgressEntry:
    data = _normalize(row, _PROGRESS_FIELDS)
    if "date" not in data:
        created = _field(row, "created_at")
        if created is not None:
            data["date"] = created
    return ProgressEntry(**data)


def normalize_simulation(row: dict) -> Simulation:
    return Simulation(**_normalize(row, _SIMULATION_FIELDS))


def normalize_passport(row: dict) -> SkillPassport:
    data = _normalize(row, _PASSPORT_FIELDS)
    if "id" in data:
        data["id"] = str(data["id"])
    return SkillPassport(**data)


def normalize_event(row: dict) -> AnalyticsEvent:
    data = _normalize(row, ("id", "event_type", "data", "created_at"))
    if "id" in data:
        data["id"] = str(data["id"])
    return AnalyticsEvent(**data)


def normalize_profile(row: dict) -> AnalyticsProfile:
    data = _normalize(row, ("id", "updated_at") + _PROFILE_FIELDS)
    if "id" in data:
        data["id"] = str(data["id"])
    return AnalyticsProfile(**data)


class ActivityRepository:
    """Reads and records one user's activity. The client is always injected."""

    def __init__(self, client: Client) -> None:
        self.client = client

    # ── Reads ────────────────────────────────────────────────────────────

    def _fetch(
        self,
        table: str,
        user_id: str,
        order_by: str,
        normalize: Callable[[dict], T],
    ) -> list[T]:
        try:
            result = (
                self.client.table(table)
                .select("*")
                .eq("user_id", user_id)
                .order(order_by, desc=True)
                .execute()
            )
            return [normalize(row) for row in (result.data or [])]
        except (APIError, httpx.HTTPError, ValidationError) as exc:
            logger.warning("fetch %s failed for user %s: %s", table, user_id, exc)
            raise DataUnavailableError(f"{table}: {exc}") from exc

    def fetch_progress(self, user_id: str) -> list[ProgressEntry]:
        return self._fetch("progress_tracking", user_id, "date", normalize_progress)

    def fetch_simulations(self, user_id: str) -> list[Simulation]:
        return self._fetch("simulations", user_id, "created_at", normalize_simulation)

    def fetch_passports(self, user_id: str) -> list[SkillPassport]:
        return self._fetch("skill_passports", user_id, "created_at", normalize_passport)

    def fetch_portfolio_count(self, user_id: str) -> int:
        try:
            result = (
                self.client.table("portfolios")
                .select("id", count="exact")
                .eq("user_id", user_id)
                .execute()
            )
        except (APIError, httpx.HTTPError) as exc:
            raise DataUnavailableError(f"portfolios: {exc}") from exc
        if result.count is not None:
            return result.count
        return len(result.data or [])

    def fetch_analytics_events(
        self,
        user_id: str,
        event_type: Optional[str] = None,
        limit: int = DEFAULT_EVENT_LIMIT,
    ) -> list[AnalyticsEvent]:
        """Newest first, optionally narrowed to one event_type."""
        try:
            query = self.client.table("analytics").select("*").eq("user_id", user_id)
            if event_type:
                query = query.eq("event_type", event_type)
            result = query.order("created_at", desc=True).limit(limit).execute()
            return [normalize_event(row) for row in (result.data or [])]
        except (APIError, httpx.HTTPError, ValidationError) as exc:
            logger.warning("fetch analytics failed for user %s: %s", user_id, exc)
            raise DataUnavailableError(f"analytics: {exc}") from exc

    def get_analytics_profile(self, user_id: str) -> Optional[AnalyticsProfile]:
        try:
            result = (
                self.client.table("user_analytics_profiles")
                .select("*")
                .eq("user_id", user_id)
                .limit(1)
                .execute()
            )
            if not result.data:
                return None
            return normalize_profile(result.data[0])
        except (APIError, httpx.HTTPError, ValidationError) as exc:
            logger.warning("fetch analytics profile failed for user %s: %s", user_id, exc)
            raise DataUnavailableError(f"user_analytics_profiles: {exc}") from exc

    # ── Writes ───────────────────────────────────────────────────────────

    def _insert(self, table: str, row: dict) -> dict:
        try:
            result = self.client.table(table).insert(row).execute()
        except (APIError, httpx.HTTPError) as exc:
            logger.warning("insert into %s failed: %s", table, exc)
            raise DataUnavailableError(f"{table}: {exc}") from exc
        if not result.data:
            raise DataUnavailableError(f"{table}: insert returned no row")
        return result.data[0]

    def add_progress_entry(
        self, user_id: str, skill: str, level: str, score: float
    ) -> ProgressEntry:
        row = self._insert("progress_tracking", {
            "user_id": user_id,
            "skill":   skill,
            "level":   level,
            "score":   score,
        })
        return normalize_progress(row)

    def create_simulation(
        self, user_id: str, simulation_type: str, results: Any, score: float
    ) -> Simulation:
        row = self._insert("simulations", {
            "user_id":         user_id,
            "simulation_type": simulation_type,
            "results":         results,
            "score":           score,
        })
        return normalize_simulation(row)

    def create_skill_passport(
        self, user_id: str, title: str, content: Any, confidence_score: int
    ) -> SkillPassport:
        row = self._insert("skill_passports", {
            "user_id":          user_id,
            "title":            title,
            "content":          content,
            "confidence_score": confidence_score,
        })
        return normalize_passport(row)

    def log_analytics_event(
        self, user_id: Optional[str], event_type: str, data: dict
    ) -> dict:
        return self._insert("analytics", {
            "user_id":    user_id,
            "event_type": event_type,
            "data":       data,
        })

    def save_analytics_profile(self, user_id: str, profile: dict) -> AnalyticsProfile:
        """
        Upsert by user: an existing row is updated in place (updated_at bumped),
        otherwise a new row is inserted. Only questionnaire fields are written.
        """
        row = {name: profile[name] for name in _PROFILE_FIELDS if name in profile}
        existing = self.get_analytics_profile(user_id)
        if existing is None:
            return normalize_profile(
                self._insert("user_analytics_profiles", {"user_id": user_id, **row})
            )

        row["updated_at"] = datetime.now(timezone.utc).isoformat()
        try:
            result = (
                self.client.table("user_analytics_profiles")
                .update(row)
                .eq("id", existing.id)
                .execute()
            )
        except (APIError, httpx.HTTPError) as exc:
            logger.warning("update user_analytics_profiles failed: %s", exc)
            raise DataUnavailableError(f"user_analytics_profiles: {exc}") from exc
        if not result.data:
            raise DataUnavailableError("user_analytics_profiles: update returned no row")
        return normalize_profile(result.data[0])
