"""
agents/agent_activity.py
Activity recording — progress entries, simulation results, analytics events,
the analytics questionnaire profile.

Single-row inserts. Activity records are immutable once written; only the
analytics profile has an update path (one row per user).
"""

import asyncio
import time
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from db.repository import ActivityRepository
from log_utils.agent_logger import log_start, log_end, log_fail, new_run_id


async def _record(agent_name: str, user_id: str, key: str, insert: Callable[[], Any]) -> dict:
    run_id = new_run_id()
    start  = time.time()
    await log_start(agent_name, user_id, run_id)

    def _ms() -> int:
        return int((time.time() - start) * 1000)

    try:
        record = await asyncio.to_thread(insert)
        if hasattr(record, "model_dump"):
            record = record.model_dump(mode="json")
        await log_end(run_id, 1, _ms())
        return {"status": "success", "duration_ms": _ms(), "records_processed": 1,
                "error": None, key: record}
    except Exception as exc:
        await log_fail(run_id, str(exc), _ms())
        return {"status": "failed", "duration_ms": _ms(),
                "records_processed": 0, "error": str(exc)[:500], key: None}


async def record_progress(
    user_id: str, skill: str, level: str, score: float, repository: ActivityRepository,
) -> dict:
    return await _record(
        "agent_activity_progress", user_id, "progress",
        lambda: repository.add_progress_entry(user_id, skill, level, score),
    )


async def record_simulation(
    user_id: str, simulation_type: str, results: Any, score: float,
    repository: ActivityRepository,
) -> dict:
    return await _record(
        "agent_activity_simulation", user_id, "simulation",
        lambda: repository.create_simulation(user_id, simulation_type, results, score),
    )


async def record_analytics_event(
    user_id: str, event_type: str, data: dict, repository: ActivityRepository,
    user_agent: Optional[str] = None, ip_address: Optional[str] = None,
) -> dict:
    """Event data is enriched with server timestamp, session id and client info."""
    enriched = {
        **data,
        "timestamp":  datetime.now(timezone.utc).isoformat(),
        "session_id": data.get("sessionId"),
        "user_agent": user_agent,
        "ip_address": ip_address or "unknown",
    }
    return await _record(
        "agent_activity_analytics", user_id, "event",
        lambda: repository.log_analytics_event(user_id, event_type, enriched),
    )


async def save_analytics_profile(
    user_id: str, profile: dict, repository: ActivityRepository,
) -> dict:
    """Questionnaire answers; a second submission updates the user's existing row."""
    return await _record(
        "agent_activity_profile", user_id, "profile",
        lambda: repository.save_analytics_profile(user_id, profile),
    )
