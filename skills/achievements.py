"""
skills/achievements.py
Dashboard achievements derived from activity counts and the confidence score.

  first-steps      common      any simulation or passport
  skill-master     rare        5 skill passports
  portfolio-pro    epic        3 portfolios
  confidence-king  legendary   confidence score >= 90

Pure — callers supply the counts.
"""

from typing import Optional

from db.models import Achievement

SKILL_MASTER_PASSPORTS  = 5
PORTFOLIO_PRO_PORTFOLIOS = 3
CONFIDENCE_KING_SCORE   = 90


def compute_achievements(
    passport_count: int,
    simulation_count: int,
    portfolio_count: int,
    confidence_score: Optional[int],
) -> list[Achievement]:
    """
    An unavailable confidence score (None) never earns confidence-king.
    Progress values are percentages 0–100.
    """
    started = simulation_count > 0 or passport_count > 0
    score = confidence_score or 0

    return [
        Achievement(
            id="first-steps",
            title="First Steps",
            description="Complete your first skill assessment",
            icon="🚀",
            earned=started,
            progress=100.0 if started else 0.0,
            rarity="common",
        ),
        Achievement(
            id="skill-master",
            title="Skill Master",
            description=f"Earn {SKILL_MASTER_PASSPORTS} skill passports",
            icon="🎯",
            earned=passport_count >= SKILL_MASTER_PASSPORTS,
            progress=min(100.0, passport_count / SKILL_MASTER_PASSPORTS * 100),
            rarity="rare",
        ),
        Achievement(
            id="portfolio-pro",
            title="Portfolio Pro",
            description=f"Build a portfolio with {PORTFOLIO_PRO_PORTFOLIOS}+ projects",
            icon="💼",
            earned=portfolio_count >= PORTFOLIO_PRO_PORTFOLIOS,
            progress=min(100.0, portfolio_count / PORTFOLIO_PRO_PORTFOLIOS * 100),
            rarity="epic",
        ),
        Achievement(
            id="confidence-king",
            title="Confidence King",
            description=f"Achieve {CONFIDENCE_KING_SCORE}%+ confidence score",
            icon="👑",
            earned=score >= CONFIDENCE_KING_SCORE,
            progress=float(score),
            rarity="legendary",
        ),
    ]


def default_achievements() -> list[Achievement]:
    """All four achievements, unearned — shown when activity cannot be loaded."""
    return compute_achievements(0, 0, 0, None)
