"""
agents/agent_confidence.py
Confidence Agent — on-demand Confidence Score™ for one user.

Read-only: the score is returned to the caller (dashboard / analytics pages),
never written back. Passports persist their own copy via agent_passport.

Unavailable activity data → status "skipped" with confidence_score None.
"""

import time

from log_utils.agent_logger import log_start, log_end, log_fail, log_skip, new_run_id
from skills.confidence_scorer import ConfidenceScoreEngine


async def run(user_id: str, engine: ConfidenceScoreEngine) -> dict:
    """Full Confidence Agent execution."""
    run_id = new_run_id()
    start  = time.time()
    await log_start("agent_confidence", user_id, run_id)

    def _ms() -> int:
        return int((time.time() - start) * 1000)

    try:
        result = await engine.compute(user_id)

        if result.status == "unavailable":
            await log_skip(run_id, f"data_unavailable: {result.error}")
            return {"status": "skipped", "duration_ms": _ms(), "records_processed": 0,
                    "error": "Activity data unavailable", "confidence_score": None,
                    "score_components": None}

        await log_end(run_id, 1, _ms())
        return {"status": "success", "duration_ms": _ms(), "records_processed": 1,
                "error": None,
                "confidence_score": result.confidence_score,
                "score_components": result.components.model_dump()}

    except Exception as exc:
        await log_fail(run_id, str(exc), _ms())
        return {"status": "failed", "duration_ms": _ms(),
                "records_processed": 0, "error": str(exc)[:500],
                "confidence_score": None, "score_components": None}
