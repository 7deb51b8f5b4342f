"""
db/client.py
Supabase client for the intelligence server.

Uses SUPABASE_SERVICE_KEY (Doppler key name) — server-side reads/writes bypass RLS.
This is the ONLY place the client is initialised and the ONLY place the key is read.
Everything else receives the client through ActivityRepository / routers.dependencies.

Built lazily on first use so importing the app never needs live credentials.
All secrets from Doppler via os.environ. No .env files. No defaults.
"""

import os
from functools import lru_cache

from supabase import create_client, Client


@lru_cache(maxsize=1)
def get_supabase() -> Client:
    """Return the process-wide Supabase client, creating it on first call."""
    return create_client(
        os.environ["SUPABASE_URL"],
        os.environ["SUPABASE_SERVICE_KEY"],  # Doppler key: SUPABASE_SERVICE_KEY
    )
