from __future__ import annotations

import logging
import os
import sys

# --- Add project root to sys.path ---
current_dir = os.path.dirname(os.path.abspath(__file__))
parent_dir = os.path.dirname(current_dir)
if parent_dir not in sys.path:
    sys.path.insert(0, parent_dir)

import streamlit as st

from barberdesk.config import ConfigError, load_config
from barberdesk.auth import current_user, sign_out
from barberdesk.tenant import init_tenant_state
from barberdesk.public_pages import (
    render_barbershop_home,
    render_barbershop_list,
    render_login,
    render_reset_password,
)
from barberdesk.admin_dashboard import render_attendance_page, render_schedules_page
from datastore.database import get_supabase_client

logger = logging.getLogger(__name__)

PUBLIC_MENU = ["Barbearias", "Entrar"]
ADMIN_MENU = ["Presença", "Horários de Trabalho"]


def configure_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # Reduce verbosity of the Supabase HTTP stack
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("hpack").setLevel(logging.WARNING)


def _init_app_state():
    init_tenant_state(st.session_state)
    if "auth_user" not in st.session_state:
        st.session_state.auth_user = None


def _is_recovery_link() -> bool:
    params = st.query_params
    return params.get("page") == "reset" or params.get("type") == "recovery" or "error_code" in params


def main():
    st.set_page_config(
        page_title="Barbearias - Agendamento Online",
        page_icon="💈",
        layout="wide",
        initial_sidebar_state="expanded",
    )

    try:
        cfg = load_config()
    except ConfigError as e:
        st.error(str(e))
        st.stop()

    configure_logging(cfg.log_level)
    _init_app_state()
    client = get_supabase_client(st.session_state, cfg)

    # --- Deep links ---
    if _is_recovery_link():
        render_reset_password(client)
        return

    slug = st.query_params.get("b")
    if slug:
        render_barbershop_home(client, slug)
        return

    # --- SIDEBAR NAVIGATION ---
    user = current_user(st.session_state)
    with st.sidebar:
        st.title("💈 Navegação")
        menu = st.radio("Ir para", PUBLIC_MENU + (ADMIN_MENU if user else []))
        st.divider()
        if user:
            st.caption(f"Sessão: {user.email}")
            if st.button("Sair"):
                sign_out(client, st.session_state)
                st.rerun()

    if menu == "Barbearias":
        render_barbershop_list(client)
    elif menu == "Entrar":
        render_login(client, cfg)
    elif menu == "Presença":
        render_attendance_page(client)
    else:
        render_schedules_page(client)


if __name__ == "__main__":
    main()
