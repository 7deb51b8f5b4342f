"""
flow/dashboard_flow.py
CrewAI DashboardFlow — everything the dashboard shows for one user, in one pass.

Execution order:
  1. @start → load activity snapshot (progress, simulations, passports in parallel)
              + portfolio count
  2. @listen(load) → Confidence Score™ over the snapshot
  3. @listen(score) → achievements + activity counts → self.summary

A failed snapshot makes the score "unavailable" (not 0) and shows default achievements.
A failed portfolio count only affects portfolio-pro — it degrades to 0.
"""

import asyncio
import logging
from typing import Optional

from crewai.flow.flow import Flow, start, listen

from db.models import ActivitySnapshot, ConfidenceResult
from db.repository import ActivityRepository, DataUnavailableError
from skills.achievements import compute_achievements, default_achievements
from skills.confidence_scorer import ConfidenceScoreEngine

logger = logging.getLogger(__name__)


class DashboardFlow(Flow):
    """
    Usage:
        flow = DashboardFlow()
        flow.user_id = "uuid-here"
        flow.repository = ActivityRepository(get_supabase())
        await flow.kickoff_async()
        flow.summary
    """

    # State: set before kickoff
    user_id:    str = ""
    repository: Optional[ActivityRepository] = None

    # Internal state set by steps
    snapshot:        Optional[ActivitySnapshot] = None
    portfolio_count: int = 0
    summary:         dict = {}

    @start()
    async def load_activity(self) -> Optional[ActivitySnapshot]:
        """Step 1: snapshot + portfolio count, fetched concurrently."""
        engine = ConfidenceScoreEngine(self.repository)
        snapshot, portfolios = await asyncio.gather(
            engine.load_snapshot(self.user_id),
            asyncio.to_thread(self.repository.fetch_portfolio_count, self.user_id),
            return_exceptions=True,
        )

        if isinstance(portfolios, DataUnavailableError):
            logger.warning("portfolio count unavailable for %s: %s", self.user_id, portfolios)
            portfolios = 0
        elif isinstance(portfolios, BaseException):
            raise portfolios
        self.portfolio_count = portfolios

        if isinstance(snapshot, DataUnavailableError):
            logger.warning("activity unavailable for %s: %s", self.user_id, snapshot)
            self.snapshot = None
        elif isinstance(snapshot, BaseException):
            raise snapshot
        else:
            self.snapshot = snapshot
        return self.snapshot

    @listen(load_activity)
    async def score_confidence(self, snapshot: Optional[ActivitySnapshot]) -> ConfidenceResult:
        """Step 2: pure scoring — no I/O."""
        if snapshot is None:
            return ConfidenceResult(
                user_id=self.user_id,
                status="unavailable",
                error="Activity data unavailable",
            )
        return ConfidenceScoreEngine(self.repository).score_snapshot(self.user_id, snapshot)

    @listen(score_confidence)
    async def build_summary(self, result: ConfidenceResult) -> dict:
        """Step 3: achievements and counts next to the score."""
        snapshot = self.snapshot
        if snapshot is None:
            achievements = default_achievements()
            counts = None
        else:
            achievements = compute_achievements(
                passport_count=len(snapshot.passports),
                simulation_count=len(snapshot.simulations),
                portfolio_count=self.portfolio_count,
                confidence_score=result.confidence_score,
            )
            counts = {
                "progress_entries": len(snapshot.progress),
                "simulations":      len(snapshot.simulations),
                "skill_passports":  len(snapshot.passports),
                "portfolios":       self.portfolio_count,
            }

        self.summary = {
            "user_id":          self.user_id,
            "status":           result.status,
            "confidence_score": result.confidence_score,
            "score_components": result.components.model_dump() if result.components else None,
            "achievements":     [a.model_dump() for a in achievements],
            "activity_counts":  counts,
        }
        return self.summary


async def run_dashboard_flow(user_id: str, repository: ActivityRepository) -> dict:
    """Convenience wrapper called by the dashboard router."""
    flow = DashboardFlow()
    flow.user_id    = user_id
    flow.repository = repository
    await flow.kickoff_async()
    return flow.summary
