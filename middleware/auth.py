"""
middleware/auth.py
FastAPI dependency: verify X-Agent-Secret header.

Applied via Depends(verify_agent_secret) on EVERY router endpoint.
Health endpoint is exempt.

Secret from Doppler: os.environ["AGENT_SECRET"], read per request.
Fails with HTTP 403 if header is absent or wrong value.
"""

import hmac
import os
from typing import Optional

from fastapi import Header, HTTPException


async def verify_agent_secret(
    x_agent_secret: Optional[str] = Header(None, alias="x-agent-secret"),
) -> None:
    """Raises HTTP 403 if X-Agent-Secret header is missing or incorrect."""
    expected = os.environ["AGENT_SECRET"]  # no default, Doppler must supply it
    if not x_agent_secret or not hmac.compare_digest(x_agent_secret, expected):
        raise HTTPException(status_code=403, detail="Forbidden")
