"""
routers/skill_passport.py
POST /api/agents/skill-passport

payload.confidence_score is optional — omitted means "compute it now".
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from db.repository import ActivityRepository
from middleware.auth import verify_agent_secret
from routers.dependencies import get_engine, get_repository
from skills.confidence_scorer import ConfidenceScoreEngine
import agents.agent_passport as agent_passport

router = APIRouter()


class PassportPayload(BaseModel):
    title:            str = Field(..., min_length=1)
    content:          Any = None
    confidence_score: Optional[int] = Field(None, ge=0, le=100)


class SkillPassportRequest(BaseModel):
    agent:   str
    user_id: str
    payload: PassportPayload


@router.post("/skill-passport", dependencies=[Depends(verify_agent_secret)])
async def skill_passport(
    req: SkillPassportRequest,
    engine: ConfidenceScoreEngine = Depends(get_engine),
    repository: ActivityRepository = Depends(get_repository),
):
    return await agent_passport.run(
        req.user_id,
        req.payload.title,
        req.payload.content,
        engine=engine,
        repository=repository,
        confidence_score=req.payload.confidence_score,
    )
