"""
skills/confidence_scorer.py
Confidence Score™ — 4-factor 0–100 score over a user's recorded activity.

Weights:
  Consistency   25%   100 − 2σ of progress scores          (<3 entries → 30)
  Trend         30%   50 + 10 × OLS slope, date-ordered    (<3 entries → 25)
  Depth         25%   unique skills + simulation types + passports, each capped
  Volume        20%   step function over total activity count

Pure arithmetic — no LLM calls, no writes.
The only I/O is ConfidenceScoreEngine.load_snapshot(), via the injected repository.
"""

import asyncio
import logging
import math
from typing import Sequence

import numpy as np

from db.models import (
    ActivitySnapshot,
    ConfidenceResult,
    ProgressEntry,
    ScoreComponents,
    Simulation,
    SkillPassport,
)
from db.repository import ActivityRepository, DataUnavailableError

logger = logging.getLogger(__name__)

CONSISTENCY_WEIGHT = 0.25
TREND_WEIGHT       = 0.30
DEPTH_WEIGHT       = 0.25
VOLUME_WEIGHT      = 0.20

MIN_ENTRIES         = 3
CONSISTENCY_DEFAULT = 30.0
TREND_DEFAULT       = 25.0

# (points per item, cap)
SKILL_POINTS      = (8, 40)
SIMULATION_POINTS = (15, 30)
PASSPORT_POINTS   = (6, 30)

# (minimum total activities, score), first match wins
VOLUME_STEPS = ((20, 100.0), (15, 80.0), (10, 60.0), (5, 40.0), (3, 20.0))
VOLUME_FLOOR = 10.0


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def consistency_score(progress: Sequence[ProgressEntry]) -> float:
    """Lower spread of progress scores = higher consistency."""
    if len(progress) < MIN_ENTRIES:
        return CONSISTENCY_DEFAULT
    std_dev = float(np.std([p.score for p in progress]))  # population σ (ddof=0)
    return max(0.0, 100.0 - std_dev * 2)


def trend_score(progress: Sequence[ProgressEntry]) -> float:
    """Least-squares slope of score against chronological position, centred on 50."""
    if len(progress) < MIN_ENTRIES:
        return TREND_DEFAULT
    ordered = sorted(progress, key=lambda p: p.date)
    positions = np.arange(len(ordered), dtype=float)
    scores = np.array([p.score for p in ordered], dtype=float)
    slope = float(np.polyfit(positions, scores, 1)[0])
    return _clamp(50.0 + slope * 10)


def depth_score(
    progress: Sequence[ProgressEntry],
    simulations: Sequence[Simulation],
    passports: Sequence[SkillPassport],
) -> float:
    """Breadth of verified competency areas; each category capped independently."""
    unique_skills    = len({p.skill for p in progress})
    simulation_types = len({s.simulation_type for s in simulations})
    passport_count   = len(passports)

    depth  = min(SKILL_POINTS[1], unique_skills * SKILL_POINTS[0])
    depth += min(SIMULATION_POINTS[1], simulation_types * SIMULATION_POINTS[0])
    depth += min(PASSPORT_POINTS[1], passport_count * PASSPORT_POINTS[0])
    return float(depth)


def volume_score(total_activities: int) -> float:
    for threshold, score in VOLUME_STEPS:
        if total_activities >= threshold:
            return score
    return VOLUME_FLOOR


def score_components(snapshot: ActivitySnapshot) -> ScoreComponents:
    return ScoreComponents(
        consistency=consistency_score(snapshot.progress),
        trend=trend_score(snapshot.progress),
        depth=depth_score(snapshot.progress, snapshot.simulations, snapshot.passports),
        volume=volume_score(snapshot.total_activities),
    )


def combine(components: ScoreComponents) -> int:
    """Weighted sum of the four factors, clamped to 0–100 and rounded half-up."""
    weighted = (
        components.consistency * CONSISTENCY_WEIGHT
        + components.trend * TREND_WEIGHT
        + components.depth * DEPTH_WEIGHT
        + components.volume * VOLUME_WEIGHT
    )
    return _round_half_up(_clamp(weighted))


def compute_confidence_score(snapshot: ActivitySnapshot) -> int:
    return combine(score_components(snapshot))


class ConfidenceScoreEngine:
    """
    Computes a user's confidence score from the repository's three collections.

    Usage:
        engine = ConfidenceScoreEngine(ActivityRepository(get_supabase()))
        result = await engine.compute(user_id)     # ConfidenceResult
        score  = await engine.compute_score(user_id)  # int, 0 when unavailable
    """

    def __init__(self, repository: ActivityRepository) -> None:
        self.repository = repository

    async def load_snapshot(self, user_id: str) -> ActivitySnapshot:
        """
        Fetch progress, simulations and passports concurrently.
        The Supabase client is synchronous — each fetch runs in a worker thread.
        Raises DataUnavailableError if any of the three fails, whatever the cause.
        """
        try:
            progress, simulations, passports = await asyncio.gather(
                asyncio.to_thread(self.repository.fetch_progress, user_id),
                asyncio.to_thread(self.repository.fetch_simulations, user_id),
                asyncio.to_thread(self.repository.fetch_passports, user_id),
            )
        except DataUnavailableError:
            raise
        except Exception as exc:
            logger.warning("activity load failed for %s: %r", user_id, exc)
            raise DataUnavailableError(f"activity load failed: {exc!r}") from exc
        return ActivitySnapshot(
            progress=tuple(progress),
            simulations=tuple(simulations),
            passports=tuple(passports),
        )

    def score_snapshot(self, user_id: str, snapshot: ActivitySnapshot) -> ConfidenceResult:
        components = score_components(snapshot)
        score = combine(components)
        logger.debug(
            "confidence score for %s: %d (consistency=%.2f trend=%.2f depth=%.2f volume=%.2f)",
            user_id, score, components.consistency, components.trend,
            components.depth, components.volume,
        )
        return ConfidenceResult(
            user_id=user_id,
            status="computed",
            confidence_score=score,
            components=components,
        )

    async def compute(self, user_id: str) -> ConfidenceResult:
        """Load + score. Unavailable inputs yield status="unavailable", never an exception."""
        try:
            snapshot = await self.load_snapshot(user_id)
        except DataUnavailableError as exc:
            logger.warning("confidence score unavailable for %s: %s", user_id, exc)
            return ConfidenceResult(
                user_id=user_id,
                status="unavailable",
                error=str(exc)[:500],
            )
        return self.score_snapshot(user_id, snapshot)

    async def compute_score(self, user_id: str) -> int:
        """Integer score in [0, 100]; 0 when the inputs could not be fetched."""
        result = await self.compute(user_id)
        return result.confidence_score if result.confidence_score is not None else 0
