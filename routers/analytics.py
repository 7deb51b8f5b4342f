"""
routers/analytics.py
POST /api/agents/analytics-events        recent events, optional event_type filter
POST /api/agents/analytics-profile       store questionnaire answers (create or update)
POST /api/agents/analytics-profile/get   read them back; 404 when never submitted
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from db.repository import DEFAULT_EVENT_LIMIT, ActivityRepository
from middleware.auth import verify_agent_secret
from routers.dependencies import get_repository
import agents.agent_activity as agent_activity
import agents.agent_history as agent_history

router = APIRouter()


class EventQueryPayload(BaseModel):
    event_type: Optional[str] = None
    limit:      int = Field(DEFAULT_EVENT_LIMIT, ge=1, le=500)


class ProfilePayload(BaseModel):
    demographics:            dict[str, Any] = {}
    professional_background: dict[str, Any] = {}
    career_goals:            dict[str, Any] = {}
    learning_preferences:    dict[str, Any] = {}
    discovery_source:        Optional[str] = None
    marketing_consent:       bool = False


class EventQueryRequest(BaseModel):
    agent:   str
    user_id: str
    payload: EventQueryPayload = EventQueryPayload()


class ProfileRequest(BaseModel):
    agent:   str
    user_id: str
    payload: ProfilePayload


class AgentRequest(BaseModel):
    agent:   str
    user_id: str
    payload: dict = {}


@router.post("/analytics-events", dependencies=[Depends(verify_agent_secret)])
async def analytics_events(
    req: EventQueryRequest,
    repository: ActivityRepository = Depends(get_repository),
):
    p = req.payload
    return await agent_history.list_analytics_events(
        req.user_id, repository, event_type=p.event_type, limit=p.limit
    )


@router.post("/analytics-profile", dependencies=[Depends(verify_agent_secret)])
async def store_analytics_profile(
    req: ProfileRequest,
    repository: ActivityRepository = Depends(get_repository),
):
    return await agent_activity.save_analytics_profile(
        req.user_id, req.payload.model_dump(), repository
    )


@router.post("/analytics-profile/get", dependencies=[Depends(verify_agent_secret)])
async def analytics_profile(
    req: AgentRequest,
    repository: ActivityRepository = Depends(get_repository),
):
    result = await agent_history.get_analytics_profile(req.user_id, repository)
    if result["status"] == "success" and result["profile"] is None:
        return JSONResponse(status_code=404, content={**result, "error": "Profile not found"})
    return result
