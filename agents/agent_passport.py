"""
agents/agent_passport.py
Passport Agent — create a skill passport stamped with the user's Confidence Score™.

Input: user_id, title, content (already-generated passport body), optional confidence_score.
When no score is supplied it is computed from the user's activity.
If the score cannot be computed the passport is NOT created (status "skipped") —
a passport must never carry a 0 that only means "fetch failed".

Output: the inserted skill_passports row.
"""

import asyncio
import time
from typing import Any, Optional

from db.repository import ActivityRepository
from log_utils.agent_logger import log_start, log_end, log_fail, log_skip, new_run_id
from skills.confidence_scorer import ConfidenceScoreEngine


async def run(
    user_id: str,
    title: str,
    content: Any,
    engine: ConfidenceScoreEngine,
    repository: ActivityRepository,
    confidence_score: Optional[int] = None,
) -> dict:
    """Full Passport Agent execution."""
    run_id = new_run_id()
    start  = time.time()
    await log_start("agent_passport", user_id, run_id)

    def _ms() -> int:
        return int((time.time() - start) * 1000)

    try:
        if confidence_score is None:
            result = await engine.compute(user_id)
            if result.status == "unavailable":
                await log_skip(run_id, f"data_unavailable: {result.error}")
                return {"status": "skipped", "duration_ms": _ms(), "records_processed": 0,
                        "error": "Confidence score unavailable, passport not created",
                        "passport": None}
            confidence_score = result.confidence_score

        passport = await asyncio.to_thread(
            repository.create_skill_passport, user_id, title, content, confidence_score
        )

        await log_end(run_id, 1, _ms())
        return {"status": "success", "duration_ms": _ms(), "records_processed": 1,
                "error": None, "passport": passport.model_dump(mode="json")}

    except Exception as exc:
        await log_fail(run_id, str(exc), _ms())
        return {"status": "failed", "duration_ms": _ms(),
                "records_processed": 0, "error": str(exc)[:500], "passport": None}
