"""
routers/dependencies.py
Request-scoped wiring: Supabase client → ActivityRepository → ConfidenceScoreEngine.

Tests swap these via app.dependency_overrides.
"""

from fastapi import Depends

from db.client import get_supabase
from db.repository import ActivityRepository
from skills.confidence_scorer import ConfidenceScoreEngine


def get_repository() -> ActivityRepository:
    return ActivityRepository(get_supabase())


def get_engine(repository: ActivityRepository = Depends(get_repository)) -> ConfidenceScoreEngine:
    return ConfidenceScoreEngine(repository)
