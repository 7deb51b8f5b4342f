"""
agents/agent_history.py
History reads for the web app's profile, passport and analytics pages.

  list_passports / list_progress / list_simulations   newest first, whole history
  list_analytics_events                                newest first, capped (default 50)
  get_analytics_profile                                questionnaire row or None

Reads never raise: a DataUnavailableError comes back as status "failed".
"""

import asyncio
import time
from typing import Any, Callable, Optional

from db.repository import DEFAULT_EVENT_LIMIT, ActivityRepository
from log_utils.agent_logger import log_start, log_end, log_fail, new_run_id


def _dump(value: Any) -> Any:
    if hasattr(value, "model_dump"):
        return value.model_dump(mode="json")
    return value


async def _read(agent_name: str, user_id: str, key: str, fetch: Callable[[], Any]) -> dict:
    run_id = new_run_id()
    start  = time.time()
    await log_start(agent_name, user_id, run_id)

    def _ms() -> int:
        return int((time.time() - start) * 1000)

    try:
        found = await asyncio.to_thread(fetch)
        if isinstance(found, list):
            records = [_dump(item) for item in found]
            count   = len(records)
        else:
            records = _dump(found)
            count   = 0 if found is None else 1
        await log_end(run_id, count, _ms())
        return {"status": "success", "duration_ms": _ms(), "records_processed": count,
                "error": None, key: records}
    except Exception as exc:
        await log_fail(run_id, str(exc), _ms())
        return {"status": "failed", "duration_ms": _ms(),
                "records_processed": 0, "error": str(exc)[:500], key: None}


async def list_passports(user_id: str, repository: ActivityRepository) -> dict:
    return await _read(
        "agent_history_passports", user_id, "skill_passports",
        lambda: repository.fetch_passports(user_id),
    )


async def list_progress(user_id: str, repository: ActivityRepository) -> dict:
    return await _read(
        "agent_history_progress", user_id, "progress",
        lambda: repository.fetch_progress(user_id),
    )


async def list_simulations(user_id: str, repository: ActivityRepository) -> dict:
    return await _read(
        "agent_history_simulations", user_id, "simulations",
        lambda: repository.fetch_simulations(user_id),
    )


async def list_analytics_events(
    user_id: str,
    repository: ActivityRepository,
    event_type: Optional[str] = None,
    limit: int = DEFAULT_EVENT_LIMIT,
) -> dict:
    return await _read(
        "agent_history_analytics", user_id, "events",
        lambda: repository.fetch_analytics_events(user_id, event_type, limit),
    )


async def get_analytics_profile(user_id: str, repository: ActivityRepository) -> dict:
    """profile is None when the user never completed the questionnaire."""
    return await _read(
        "agent_history_profile", user_id, "profile",
        lambda: repository.get_analytics_profile(user_id),
    )
