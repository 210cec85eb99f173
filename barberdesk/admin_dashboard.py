from datetime import date, datetime, time

import streamlit as st
import plotly.express as px

from barberdesk.attendance import (
    AttendanceStatus,
    add_time_off,
    attendance_frame,
    count_statuses,
    fetch_active_barbers,
    format_long_date,
    format_weekday_date,
    load_attendance_day,
    mark_attendance,
    remove_time_off,
)
from barberdesk.auth import admin_barbershop, admin_barbershop_id, current_user
from barberdesk.badges import attendance_badge
from barberdesk.schedules import (
    DAYS_OF_WEEK,
    fetch_schedules,
    save_schedule,
    schedule_for_day,
    update_schedule,
    validate_day,
    weekly_hours_frame,
    work_days_summary,
)
from barberdesk.tenant import professionals_label
from barberdesk.theme import apply_theme
from datastore.database import DatastoreError


def _require_admin(client):
    """Returns (user, barbershop_id, barbershop) or None after showing a warning."""
    user = current_user(st.session_state)
    if user is None:
        st.warning("Entre com uma conta de administrador para ver esta página.")
        return None

    barbershop_id = admin_barbershop_id(client, st.session_state)
    if not barbershop_id:
        st.warning("A sua conta não administra nenhuma barbearia.")
        return None

    barbershop = admin_barbershop(client, st.session_state)
    apply_theme(barbershop)
    return user, barbershop_id, barbershop


def _queue_toast(result):
    # shown after st.rerun() by _show_queued_toast
    if result["success"]:
        st.session_state.pending_toast = (result["message"], "✅")
    else:
        st.session_state.pending_toast = (result["error"], "⚠️")


def _show_queued_toast():
    pending = st.session_state.pop("pending_toast", None)
    if pending:
        message, icon = pending
        st.toast(message, icon=icon)


# --- ATTENDANCE -------------------------------------------------------------

@st.dialog("Marcar Folga")
def _time_off_dialog(client, barbershop_id, barber):
    st.write(f"**{barber.name}**")
    off_date = st.date_input("Data da Folga", value=None, min_value=date.today(), format="DD/MM/YYYY")
    reason = st.text_input("Motivo (opcional)", placeholder="Ex: Consulta médica, viagem...")

    c1, c2 = st.columns(2)
    if c1.button("Cancelar", use_container_width=True):
        st.rerun()
    if c2.button("Marcar Folga", type="primary", disabled=off_date is None, use_container_width=True):
        result = add_time_off(client, barbershop_id, barber, off_date, reason)
        if result["success"]:
            _queue_toast(result)
            st.rerun()
        else:
            st.error(result["error"])


def render_attendance_page(client):
    admin = _require_admin(client)
    if admin is None:
        return
    user, barbershop_id, barbershop = admin
    label = professionals_label(barbershop.business_type if barbershop else None)

    st.title("Controle de Presença")
    st.caption(f"Gerencie a presença diária dos {label.lower()}")

    _show_queued_toast()

    selected = st.date_input("Data", value=date.today(), format="DD/MM/YYYY")

    # --- Fetch Data ---
    try:
        with st.spinner("A carregar..."):
            day = load_attendance_day(client, barbershop_id, selected)
    except DatastoreError as e:
        st.error(f"Erro ao carregar dados: {e.message}")
        return

    statuses = day.statuses()
    counts = count_statuses(day.barbers, statuses)

    # --- KPI Metrics ---
    col1, col2, col3 = st.columns(3)
    col1.metric("Presentes", counts["present"])
    col2.metric("Ausentes", counts["absent"])
    col3.metric("Pendentes", counts["pending"])

    st.divider()
    st.subheader(f"{label} - {format_weekday_date(selected)}")

    if not day.barbers:
        st.info("Nenhum profissional ativo encontrado.")
        return

    for barber in day.barbers:
        status = statuses[barber.id]
        with st.container(border=True):
            info, badge, actions = st.columns([4, 2, 3])
            with info:
                app_hint = "" if barber.has_app_access else " 📵"
                st.markdown(f"**{barber.name}**{app_hint}")
                st.caption(barber.specialty or "Sem especialidade")
            with badge:
                st.markdown(attendance_badge(status, show_icon=True), unsafe_allow_html=True)
            with actions:
                b1, b2, b3 = st.columns(3)
                if status != AttendanceStatus.TIME_OFF:
                    if b1.button(
                        "✅", key=f"present-{barber.id}", help="Presente",
                        type="primary" if status == AttendanceStatus.PRESENT else "secondary",
                    ):
                        _queue_toast(mark_attendance(
                            client, barbershop_id, barber.id, selected,
                            AttendanceStatus.PRESENT, user.id,
                        ))
                        st.rerun()
                    if b2.button(
                        "❌", key=f"absent-{barber.id}", help="Ausente",
                        type="primary" if status == AttendanceStatus.ABSENT else "secondary",
                    ):
                        _queue_toast(mark_attendance(
                            client, barbershop_id, barber.id, selected,
                            AttendanceStatus.ABSENT, user.id,
                        ))
                        st.rerun()
                if b3.button("🏖️", key=f"timeoff-{barber.id}", help="Marcar folga"):
                    _time_off_dialog(client, barbershop_id, barber)

    # --- Upcoming Time Offs ---
    if day.time_offs:
        st.subheader("Folgas Agendadas")
        for t in day.time_offs:
            c1, c2 = st.columns([5, 1])
            reason = f" - {t.reason}" if t.reason else ""
            c1.markdown(f"**{day.barber_name(t.barber_id) or '-'}**  \n{format_long_date(t.off_date)}{reason}")
            if c2.button("Remover", key=f"remove-{t.id}"):
                _queue_toast(remove_time_off(client, t.id))
                st.rerun()

    # --- Export ---
    st.divider()
    csv = attendance_frame(day.barbers, statuses).to_csv(index=False).encode("utf-8")
    st.download_button(
        "📥 Exportar presença (CSV)",
        csv,
        f"presenca_{selected.isoformat()}.csv",
        "text/csv",
        key="download-attendance",
    )


# --- SCHEDULES -------------------------------------------------------------

def _to_time(value: str):
    return datetime.strptime(value, "%H:%M").time() if value else None


def _to_str(value: time) -> str:
    return value.strftime("%H:%M") if value else ""


def _render_day_editor(barber_id: str, day: dict):
    drafts = st.session_state.schedule_drafts
    schedule = schedule_for_day(drafts, barber_id, day["value"])
    key = f"{barber_id}-{day['value']}"

    c1, c2 = st.columns([3, 2])
    c1.markdown(f"**{day['label']}**")
    working = c2.toggle(
        "Trabalha",
        value=schedule.is_working_day,
        key=f"working-{key}",
    )
    updates = {"is_working_day": working}

    if working:
        t1, t2, t3, t4 = st.columns(4)
        updates["start_time"] = _to_str(t1.time_input("🕒 Entrada", value=_to_time(schedule.start_time), key=f"start-{key}"))
        updates["end_time"] = _to_str(t2.time_input("🕒 Saída", value=_to_time(schedule.end_time), key=f"end-{key}"))
        updates["break_start"] = _to_str(t3.time_input("☕ Início Pausa", value=_to_time(schedule.break_start), key=f"bstart-{key}"))
        updates["break_end"] = _to_str(t4.time_input("☕ Fim Pausa", value=_to_time(schedule.break_end), key=f"bend-{key}"))

    st.session_state.schedule_drafts = update_schedule(drafts, barber_id, day["value"], **updates)

    error = validate_day(schedule_for_day(st.session_state.schedule_drafts, barber_id, day["value"]))
    if error:
        st.caption(f"⚠️ {error}")


def render_schedules_page(client):
    admin = _require_admin(client)
    if admin is None:
        return
    _user, barbershop_id, barbershop = admin
    label = professionals_label(barbershop.business_type if barbershop else None)

    st.title("Horários de Trabalho")
    st.caption(f"Configure os horários de cada {label.lower()}")

    try:
        with st.spinner("A carregar..."):
            barbers = fetch_active_barbers(client, barbershop_id)
            if "schedule_drafts" not in st.session_state:
                st.session_state.schedule_drafts = fetch_schedules(client, barbershop_id)
    except DatastoreError as e:
        st.error(f"Erro ao carregar dados: {e.message}")
        return

    if not barbers:
        st.info("Nenhum profissional ativo encontrado.")
        return

    for barber in barbers:
        summary = work_days_summary(st.session_state.schedule_drafts, barber.id)
        title = f"{barber.name} · {barber.specialty or 'Sem especialidade'} · {summary}"
        with st.expander(title):
            for day in DAYS_OF_WEEK:
                _render_day_editor(barber.id, day)
                st.divider()

            if st.button("💾 Salvar Horários", key=f"save-{barber.id}", type="primary", use_container_width=True):
                with st.spinner("Salvando..."):
                    result = save_schedule(client, st.session_state.schedule_drafts, barber.id, barbershop_id)
                if result["success"]:
                    st.toast("Horários salvos com sucesso!", icon="✅")
                else:
                    st.error(result["error"])
                    for day_value, message in result["errors"].items():
                        st.caption(f"{DAYS_OF_WEEK[day_value]['label']}: {message}")

    # --- Weekly overview ---
    st.divider()
    st.subheader("Horas semanais")
    frame = weekly_hours_frame(barbers, st.session_state.schedule_drafts)
    fig = px.bar(frame, x="Dia", y="Horas", color="Profissional", barmode="group")
    st.plotly_chart(fig, use_container_width=True)
