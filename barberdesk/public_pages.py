import html
from datetime import date

import streamlit as st

from barberdesk.auth import (
    RECOVERY_PARAMS,
    RecoveryState,
    check_recovery_session,
    clear_session_caches,
    current_user,
    request_password_reset,
    reset_password,
    sign_in,
)
from barberdesk.tenant import (
    clear_barbershop,
    get_barbershop,
    get_tenant_error,
    list_active_barbershops,
    set_barbershop_by_slug,
)
from barberdesk.theme import apply_theme


def _initial(name: str) -> str:
    return (name or "?").strip()[:1].upper()


def _shop_avatar(logo_url, name: str, color: str) -> str:
    if logo_url:
        return (
            f'<img src="{html.escape(logo_url)}" alt="{html.escape(name)}" '
            f'style="width:64px;height:64px;border-radius:50%;object-fit:cover;'
            f'border:2px solid {html.escape(color)};"/>'
        )
    return (
        f'<div style="width:64px;height:64px;border-radius:50%;display:flex;'
        f"align-items:center;justify-content:center;font-size:1.75rem;font-weight:700;"
        f'background:{html.escape(color)}33;color:{html.escape(color)};">'
        f"{html.escape(_initial(name))}</div>"
    )


# --- DIRECTORY -------------------------------------------------------------

def render_barbershop_list(client):
    st.title("Escolha a sua Barbearia")
    st.caption("Selecione uma barbearia para agendar o seu horário")

    with st.spinner("A carregar..."):
        barbershops = list_active_barbershops(client)

    if not barbershops:
        st.subheader("Nenhuma barbearia disponível")
        st.info("Seja o primeiro a registrar sua barbearia!")
        return

    cols = st.columns(3)
    for i, shop in enumerate(barbershops):
        with cols[i % 3]:
            with st.container(border=True):
                st.markdown(
                    _shop_avatar(shop.logo_url, shop.name, shop.primary_color),
                    unsafe_allow_html=True,
                )
                st.markdown(f"**{shop.name}**")
                st.markdown(f"[Agendar horário →](?b={shop.slug})")

    st.divider()
    st.caption(f"© {date.today().year} Sistema de Agendamento. Todos os direitos reservados.")


# --- TENANT HOME -------------------------------------------------------------

def render_barbershop_home(client, slug: str):
    state = st.session_state
    current = get_barbershop(state)

    if current is None or current.slug != slug.strip().lower():
        with st.spinner("A carregar barbearia..."):
            set_barbershop_by_slug(state, client, slug)
        current = get_barbershop(state)

    error = get_tenant_error(state)
    if error or current is None:
        st.error(error or "Barbearia não encontrada")
        if st.button("Ver todas as barbearias"):
            clear_barbershop(state)
            st.query_params.clear()
            st.rerun()
        return

    apply_theme(current)

    c1, c2 = st.columns([1, 5])
    with c1:
        st.markdown(
            _shop_avatar(current.logo_url, current.name, current.primary_color),
            unsafe_allow_html=True,
        )
    with c2:
        st.title(current.name)

    if current.opening_time and current.closing_time:
        st.write(f"🕒 Aberto das {current.opening_time[:5]} às {current.closing_time[:5]}")
    if current.whatsapp_number:
        digits = "".join(ch for ch in current.whatsapp_number if ch.isdigit())
        st.link_button("💬 Falar pelo WhatsApp", f"https://wa.me/{digits}")

    if st.button("← Outras barbearias"):
        clear_barbershop(state)
        st.query_params.clear()
        st.rerun()


# --- SIGN IN -------------------------------------------------------------

def render_login(client, cfg):
    st.title("Entrar")

    user = current_user(st.session_state)
    if user is not None:
        st.success(f"Sessão iniciada como {user.email}")
        return

    with st.form("login_form"):
        email = st.text_input("Email")
        password = st.text_input("Senha", type="password")
        submitted = st.form_submit_button("Entrar", type="primary")

    if submitted:
        result = sign_in(client, st.session_state, email, password)
        if result.success:
            st.toast("Bem-vindo!")
            st.rerun()
        else:
            st.error(result.error)

    with st.expander("Esqueceu a senha?"):
        reset_email = st.text_input("Email da conta", key="reset_request_email")
        if st.button("Enviar link de recuperação"):
            result = request_password_reset(client, reset_email, f"{cfg.site_url}/?page=reset")
            if result.success:
                st.success("Enviámos um link de recuperação para o seu email.")
            else:
                st.error(result.error)


# --- PASSWORD RESET -------------------------------------------------------------

def render_reset_password(client):
    state = st.session_state

    if state.get("recovery_check") is None:
        with st.spinner("A validar link de recuperação..."):
            check = check_recovery_session(client.auth, st.query_params.to_dict())
        if check.clear_params:
            for key in RECOVERY_PARAMS:
                if key in st.query_params:
                    del st.query_params[key]
        state["recovery_check"] = check

    check = state["recovery_check"]

    if check.state in (RecoveryState.INVALID, RecoveryState.ERROR):
        st.title("Link Inválido ou Expirado")
        st.error(
            check.message
            or "O link de recuperação de senha é inválido ou já expirou. Solicite um novo link."
        )
        if st.button("Voltar ao Login"):
            state.pop("recovery_check", None)
            st.query_params.clear()
            st.rerun()
        return

    if state.get("reset_success"):
        st.title("Senha Atualizada com Sucesso!")
        st.success("Sua senha foi alterada com sucesso. Pode entrar novamente com a nova senha.")
        if st.button("Ir para Login", type="primary"):
            state.pop("reset_success", None)
            state.pop("recovery_check", None)
            st.query_params.clear()
            st.rerun()
        return

    st.title("Redefinir Senha")
    st.caption("Escolha uma nova senha para a sua conta.")

    with st.form("reset_password_form"):
        password = st.text_input("Nova senha", type="password")
        confirm = st.text_input("Confirmar senha", type="password")
        submitted = st.form_submit_button("Atualizar senha", type="primary")

    if submitted:
        result = reset_password(client, password, confirm)
        if result.success:
            state.pop("auth_user", None)
            clear_session_caches(state)
            state["reset_success"] = True
            st.toast("Senha atualizada!")
            st.rerun()
        else:
            st.error(result.error)
