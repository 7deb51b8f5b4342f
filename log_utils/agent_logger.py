"""
log_utils/agent_logger.py
agent_logs lifecycle rows — one row per agent run.

  log_start  → INSERT status='started'
  log_end    → UPDATE status='completed', expires_at = now + 3 days
  log_skip   → UPDATE status='skipped',   expires_at = now + 3 days
  log_fail   → UPDATE status='failed',    expires_at = now + 30 days

Error messages are scrubbed of tokens/keys and capped at 500 chars before writing.
Supabase calls run in a worker thread so the event loop never blocks.
A failed log write is reported via logging and never breaks the calling agent.
"""

import asyncio
import logging
import re
import uuid
from datetime import datetime, timezone, timedelta

from db.client import get_supabase

logger = logging.getLogger(__name__)

_MAX_ERROR_CHARS = 500

_SECRET_PATTERNS = [
    re.compile(r"Bearer\s+\S+"),
    re.compile(r"eyJ[A-Za-z0-9_\-]{10,}(?:\.[A-Za-z0-9_\-]+)*"),  # JWT
    re.compile(r"sk-[A-Za-z0-9]{16,}"),
    re.compile(r"service_role\S*"),
]


def _now() -> datetime:
    return datetime.now(timezone.utc)


def new_run_id() -> str:
    return str(uuid.uuid4())


def scrub(message: str) -> str:
    for pattern in _SECRET_PATTERNS:
        message = pattern.sub("[REDACTED]", message)
    return message[:_MAX_ERROR_CHARS]


async def _update(run_id: str, row: dict) -> None:
    try:
        await asyncio.to_thread(
            get_supabase().table("agent_logs").update(row).eq("id", run_id).execute
        )
    except Exception:
        logger.exception("agent_logs update failed for run %s", run_id)


async def log_start(agent_name: str, user_id: str, run_id: str) -> None:
    row = {
        "id":         run_id,
        "agent_name": agent_name,
        "user_id":    user_id,
        "status":     "started",
        "started_at": _now().isoformat(),
    }
    try:
        await asyncio.to_thread(get_supabase().table("agent_logs").insert(row).execute)
    except Exception:
        logger.exception("agent_logs insert failed for %s run %s", agent_name, run_id)


async def log_end(run_id: str, records_processed: int, duration_ms: int) -> None:
    await _update(run_id, {
        "status":            "completed",
        "records_processed": records_processed,
        "duration_ms":       duration_ms,
        "completed_at":      _now().isoformat(),
        "expires_at":        (_now() + timedelta(days=3)).isoformat(),
    })


async def log_skip(run_id: str, reason: str) -> None:
    await _update(run_id, {
        "status":        "skipped",
        "error_message": scrub(reason),
        "completed_at":  _now().isoformat(),
        "expires_at":    (_now() + timedelta(days=3)).isoformat(),
    })


async def log_fail(run_id: str, error: str, duration_ms: int) -> None:
    logger.warning("run %s failed: %s", run_id, scrub(error))
    await _update(run_id, {
        "status":        "failed",
        "error_message": scrub(error),
        "duration_ms":   duration_ms,
        "completed_at":  _now().isoformat(),
        "expires_at":    (_now() + timedelta(days=30)).isoformat(),
    })
