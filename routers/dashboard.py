"""
routers/dashboard.py
POST /api/agents/dashboard

Thin wrapper: runs DashboardFlow and returns its summary.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from db.repository import ActivityRepository
from flow.dashboard_flow import run_dashboard_flow
from middleware.auth import verify_agent_secret
from routers.dependencies import get_repository

router = APIRouter()

class DashboardRequest(BaseModel):
    agent:   str
    user_id: str
    payload: dict = {}

@router.post("/dashboard", dependencies=[Depends(verify_agent_secret)])
async def dashboard(
    req: DashboardRequest,
    repository: ActivityRepository = Depends(get_repository),
):
    return await run_dashboard_flow(req.user_id, repository)
