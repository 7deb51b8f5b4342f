"""
routers/confidence.py
POST /api/agents/confidence-score
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from middleware.auth import verify_agent_secret
from routers.dependencies import get_engine
from skills.confidence_scorer import ConfidenceScoreEngine
import agents.agent_confidence as agent_confidence

router = APIRouter()

class AgentRequest(BaseModel):
    agent:   str
    user_id: str
    payload: dict = {}

@router.post("/confidence-score", dependencies=[Depends(verify_agent_secret)])
async def confidence_score(
    req: AgentRequest,
    engine: ConfidenceScoreEngine = Depends(get_engine),
):
    return await agent_confidence.run(req.user_id, engine)
