from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import streamlit as st


class ConfigError(RuntimeError):
    pass


# ---------------------- DATA CLASSES ----------------------

@dataclass
class SupabaseConfig:
    url: str
    anon_key: str
    service_key: str = ""


@dataclass
class AppConfig:
    supabase: SupabaseConfig
    site_url: str = "http://localhost:8501"
    log_level: str = "INFO"


# ---------------------- LOADING ----------------------

def _section(secrets: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    try:
        if name in secrets:
            return secrets[name]
    except FileNotFoundError:
        # st.secrets raises when no secrets.toml exists at all
        pass
    return {}


def _value(section: Mapping[str, Any], key: str, env: str, default: str = "") -> str:
    value = section.get(key) if section else None
    if value in (None, ""):
        value = os.getenv(env, default)
    return str(value).strip()


def load_config(secrets: Optional[Mapping[str, Any]] = None) -> AppConfig:
    if secrets is None:
        secrets = st.secrets

    # --- Supabase ---
    supabase = _section(secrets, "supabase")
    supabase_cfg = SupabaseConfig(
        url=_value(supabase, "url", "SUPABASE_URL"),
        anon_key=_value(supabase, "anon_key", "SUPABASE_ANON_KEY"),
        service_key=_value(supabase, "service_key", "SUPABASE_SERVICE_KEY"),
    )
    if not supabase_cfg.url or not (supabase_cfg.anon_key or supabase_cfg.service_key):
        raise ConfigError("Supabase is not configured. Set [supabase] url and anon_key.")

    # --- App ---
    app = _section(secrets, "app")

    return AppConfig(
        supabase=supabase_cfg,
        site_url=_value(app, "site_url", "SITE_URL", "http://localhost:8501").rstrip("/"),
        log_level=_value(app, "log_level", "LOG_LEVEL", "INFO").upper(),
    )
