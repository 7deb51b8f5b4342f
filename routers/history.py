"""
routers/history.py
POST /api/agents/skill-passports/list
POST /api/agents/progress/list
POST /api/agents/simulations/list
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from db.repository import ActivityRepository
from middleware.auth import verify_agent_secret
from routers.dependencies import get_repository
import agents.agent_history as agent_history

router = APIRouter()

class AgentRequest(BaseModel):
    agent:   str
    user_id: str
    payload: dict = {}

@router.post("/skill-passports/list", dependencies=[Depends(verify_agent_secret)])
async def skill_passports(
    req: AgentRequest,
    repository: ActivityRepository = Depends(get_repository),
):
    return await agent_history.list_passports(req.user_id, repository)

@router.post("/progress/list", dependencies=[Depends(verify_agent_secret)])
async def progress_history(
    req: AgentRequest,
    repository: ActivityRepository = Depends(get_repository),
):
    return await agent_history.list_progress(req.user_id, repository)

@router.post("/simulations/list", dependencies=[Depends(verify_agent_secret)])
async def simulations(
    req: AgentRequest,
    repository: ActivityRepository = Depends(get_repository),
):
    return await agent_history.list_simulations(req.user_id, repository)
