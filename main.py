"""
main.py — The 3rd Academy Intelligence Server
FastAPI application. Port 8002.

Hosts: Confidence Score™, skill passport creation, activity recording,
       activity history, analytics events and profile, dashboard summary (DashboardFlow).
Auth: X-Agent-Secret header on all /api/agents/* routes.
No JWT on this server — user auth lives in the web app (Supabase Auth).
No LLM calls here.

Run: doppler run -- uvicorn main:app --host 0.0.0.0 --port 8002
"""

import logging
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from routers import activity, analytics, confidence, dashboard, history, skill_passport

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("server")

app = FastAPI(
    title="The 3rd Academy — Intelligence Server",
    version="1.0.0",
    docs_url=None,   # disable Swagger in production
    redoc_url=None,
)

# Internal server: only the web app's API routes call us via X-Agent-Secret.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["POST", "GET"],
    allow_headers=["*"],
)


# ─── Global Exception Handler ─────────────────────────────────────────────────
@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all: log and return 500. Never leak stack traces to caller."""
    logger.error(
        "Unhandled exception on %s: %s: %s",
        request.url.path, type(exc).__name__, str(exc)[:200],
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content={"status": "failed", "error": f"{type(exc).__name__}: {str(exc)[:200]}"},
    )


# ─── Routers ──────────────────────────────────────────────────────────────────
app.include_router(confidence.router,     prefix="/api/agents")
app.include_router(skill_passport.router, prefix="/api/agents")
app.include_router(activity.router,       prefix="/api/agents")
app.include_router(dashboard.router,      prefix="/api/agents")
app.include_router(history.router,        prefix="/api/agents")
app.include_router(analytics.router,      prefix="/api/agents")


# ─── Health (no auth) ─────────────────────────────────────────────────────────
@app.get("/health")
async def health():
    return {"status": "ok", "server": "intelligence", "port": 8002}


# ─── Entry (for local dev without doppler wrapper) ────────────────────────────
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8002,
        reload=False,
    )
