"""
routers/activity.py
POST /api/agents/progress
POST /api/agents/simulation
POST /api/agents/analytics-event
"""

from typing import Any

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from db.repository import ActivityRepository
from middleware.auth import verify_agent_secret
from routers.dependencies import get_repository
import agents.agent_activity as agent_activity

router = APIRouter()


class ProgressPayload(BaseModel):
    skill: str = Field(..., min_length=1)
    level: str = ""
    score: float = Field(..., ge=0, le=100)


class SimulationPayload(BaseModel):
    simulation_type: str = Field(..., min_length=1)
    results:         Any = None
    score:           float = Field(..., ge=0, le=100)


class AnalyticsPayload(BaseModel):
    event_type: str = Field(..., min_length=1)
    data:       dict = {}


class ProgressRequest(BaseModel):
    agent:   str
    user_id: str
    payload: ProgressPayload


class SimulationRequest(BaseModel):
    agent:   str
    user_id: str
    payload: SimulationPayload


class AnalyticsRequest(BaseModel):
    agent:   str
    user_id: str
    payload: AnalyticsPayload


@router.post("/progress", dependencies=[Depends(verify_agent_secret)])
async def progress(
    req: ProgressRequest,
    repository: ActivityRepository = Depends(get_repository),
):
    p = req.payload
    return await agent_activity.record_progress(req.user_id, p.skill, p.level, p.score, repository)


@router.post("/simulation", dependencies=[Depends(verify_agent_secret)])
async def simulation(
    req: SimulationRequest,
    repository: ActivityRepository = Depends(get_repository),
):
    p = req.payload
    return await agent_activity.record_simulation(
        req.user_id, p.simulation_type, p.results, p.score, repository
    )


@router.post("/analytics-event", dependencies=[Depends(verify_agent_secret)])
async def analytics_event(
    req: AnalyticsRequest,
    request: Request,
    repository: ActivityRepository = Depends(get_repository),
):
    # Server 1 forwards the browser's headers
    ip_address = (
        request.headers.get("x-forwarded-for")
        or request.headers.get("x-real-ip")
    )
    return await agent_activity.record_analytics_event(
        req.user_id,
        req.payload.event_type,
        req.payload.data,
        repository,
        user_agent=request.headers.get("user-agent"),
        ip_address=ip_address,
    )
