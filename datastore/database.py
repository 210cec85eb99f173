# datastore/database.py

from __future__ import annotations

import logging
from typing import Any, Dict, List, MutableMapping, Optional

import httpx
from postgrest.exceptions import APIError
from supabase import create_client, Client
import streamlit as st

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"


class DatastoreError(Exception):
    """A PostgREST request failed."""

    def __init__(self, message: str, code: Optional[str] = None, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details

    @property
    def is_unique_violation(self) -> bool:
        return self.code == UNIQUE_VIOLATION


def get_supabase_client(state: Optional[MutableMapping] = None, config=None) -> Client:
    """
    Returns a Supabase client cached for the current browser session.
    Uses the anon key so that row-level security applies to the signed-in
    user; the service key is only a fallback for single-tenant setups.
    """
    if state is None:
        state = st.session_state

    if "supabase_client" not in state:
        if config is None:
            from barberdesk.config import load_config

            config = load_config()
        key = config.supabase.anon_key or config.supabase.service_key
        state["supabase_client"] = create_client(config.supabase.url, key)

    return state["supabase_client"]


def execute(query) -> List[Dict[str, Any]]:
    try:
        response = query.execute()
    except APIError as e:
        logger.error(f"Supabase request failed ({e.code}): {e.message}")
        raise DatastoreError(e.message or "Supabase request failed", code=e.code, details=e.details) from e
    except httpx.HTTPError as e:
        logger.error(f"Supabase request did not complete: {e}")
        raise DatastoreError(str(e) or "Supabase request failed") from e

    if response is None:
        return []
    return response.data or []


def fetch_one(query) -> Optional[Dict[str, Any]]:
    rows = execute(query.limit(1))
    return rows[0] if rows else None
