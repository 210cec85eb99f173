from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Dict, List, Optional

import pandas as pd

from datastore import models
from datastore.database import DatastoreError, execute

logger = logging.getLogger(__name__)

DAYS_OF_WEEK = [
    {"value": 0, "label": "Domingo", "short": "Dom"},
    {"value": 1, "label": "Segunda-feira", "short": "Seg"},
    {"value": 2, "label": "Terça-feira", "short": "Ter"},
    {"value": 3, "label": "Quarta-feira", "short": "Qua"},
    {"value": 4, "label": "Quinta-feira", "short": "Qui"},
    {"value": 5, "label": "Sexta-feira", "short": "Sex"},
    {"value": 6, "label": "Sábado", "short": "Sáb"},
]

DEFAULT_START = "09:00"
DEFAULT_END = "18:00"

# barber_id -> day_of_week -> DaySchedule
Schedules = Dict[str, Dict[int, "DaySchedule"]]


@dataclass(frozen=True)
class DaySchedule:
    is_working_day: bool = True
    start_time: str = DEFAULT_START
    end_time: str = DEFAULT_END
    break_start: str = ""
    break_end: str = ""

    @property
    def has_break(self) -> bool:
        return bool(self.break_start and self.break_end)


DEFAULT_SCHEDULE = DaySchedule()


def _hhmm(value: Optional[str]) -> str:
    # Postgres returns time columns as HH:MM:SS
    return value[:5] if value else ""


def _minutes(value: str) -> Optional[int]:
    try:
        parsed = datetime.strptime(value.strip(), "%H:%M")
    except (AttributeError, ValueError):
        return None
    return parsed.hour * 60 + parsed.minute


# ----------------- LOADING ------------------------

def fetch_schedules(client, barbershop_id: str) -> Schedules:
    rows = execute(
        client.table(models.SCHEDULES)
        .select("*")
        .eq("barbershop_id", barbershop_id)
    )

    schedules: Schedules = {}
    for r in rows:
        schedules.setdefault(r["barber_id"], {})[int(r["day_of_week"])] = DaySchedule(
            is_working_day=bool(r.get("is_working_day")),
            start_time=_hhmm(r.get("start_time")) or DEFAULT_START,
            end_time=_hhmm(r.get("end_time")) or DEFAULT_END,
            break_start=_hhmm(r.get("break_start")),
            break_end=_hhmm(r.get("break_end")),
        )
    return schedules


def schedule_for_day(schedules: Schedules, barber_id: str, day_of_week: int) -> DaySchedule:
    stored = schedules.get(barber_id, {}).get(day_of_week)
    if stored is not None:
        return stored
    # Sunday off by default
    return replace(DEFAULT_SCHEDULE, is_working_day=day_of_week != 0)


def update_schedule(schedules: Schedules, barber_id: str, day_of_week: int, **updates) -> Schedules:
    current = schedule_for_day(schedules, barber_id, day_of_week)
    barber_days = dict(schedules.get(barber_id, {}))
    barber_days[day_of_week] = replace(current, **updates)

    result = dict(schedules)
    result[barber_id] = barber_days
    return result


def work_days_summary(schedules: Schedules, barber_id: str) -> str:
    return ", ".join(
        d["short"] for d in DAYS_OF_WEEK
        if schedule_for_day(schedules, barber_id, d["value"]).is_working_day
    )


# ----------------- VALIDATION ------------------------

def validate_day(schedule: DaySchedule) -> Optional[str]:
    if not schedule.is_working_day:
        return None

    start = _minutes(schedule.start_time)
    end = _minutes(schedule.end_time)
    if start is None or end is None:
        return "Indique a hora de entrada e de saída."
    if end <= start:
        return "A saída deve ser depois da entrada."

    if not schedule.break_start and not schedule.break_end:
        return None
    b_start = _minutes(schedule.break_start)
    b_end = _minutes(schedule.break_end)
    if b_start is None or b_end is None:
        return "Indique o início e o fim da pausa."
    if b_end <= b_start:
        return "O fim da pausa deve ser depois do início."
    if b_start < start or b_end > end:
        return "A pausa deve estar dentro do horário de trabalho."
    return None


def validate_week(schedules: Schedules, barber_id: str) -> Dict[int, str]:
    errors = {}
    for d in DAYS_OF_WEEK:
        message = validate_day(schedule_for_day(schedules, barber_id, d["value"]))
        if message:
            errors[d["value"]] = message
    return errors


# ----------------- SAVING ------------------------

def build_schedule_rows(schedules: Schedules, barber_id: str, barbershop_id: str) -> List[Dict[str, Any]]:
    rows = []
    for d in DAYS_OF_WEEK:
        s = schedule_for_day(schedules, barber_id, d["value"])
        rows.append({
            "barber_id": barber_id,
            "barbershop_id": barbershop_id,
            "day_of_week": d["value"],
            "is_working_day": s.is_working_day,
            "start_time": s.start_time or None,
            "end_time": s.end_time or None,
            "break_start": s.break_start or None,
            "break_end": s.break_end or None,
        })
    return rows


def save_schedule(client, schedules: Schedules, barber_id: str, barbershop_id: str) -> Dict[str, Any]:
    errors = validate_week(schedules, barber_id)
    if errors:
        return {"success": False, "error": "Corrija os horários assinalados.", "errors": errors}

    try:
        execute(
            client.table(models.SCHEDULES).upsert(
                build_schedule_rows(schedules, barber_id, barbershop_id),
                on_conflict=models.SCHEDULE_CONFLICT,
                ignore_duplicates=False,
            )
        )
    except DatastoreError as e:
        logger.error(f"Error saving schedule for {barber_id}: {e.message}")
        return {"success": False, "error": "Não foi possível salvar os horários.", "errors": {}}

    logger.info(f"Saved weekly schedule for {barber_id}")
    return {"success": True, "error": None, "errors": {}}


# ----------------- OVERVIEW ------------------------

def worked_hours(schedule: DaySchedule) -> float:
    if not schedule.is_working_day or validate_day(schedule):
        return 0.0
    minutes = _minutes(schedule.end_time) - _minutes(schedule.start_time)
    if schedule.has_break:
        minutes -= _minutes(schedule.break_end) - _minutes(schedule.break_start)
    return round(minutes / 60, 2)


def weekly_hours_frame(barbers, schedules: Schedules) -> pd.DataFrame:
    records = [
        {
            "Profissional": b.name,
            "Dia": d["short"],
            "Horas": worked_hours(schedule_for_day(schedules, b.id, d["value"])),
        }
        for b in barbers
        for d in DAYS_OF_WEEK
    ]
    return pd.DataFrame(records, columns=["Profissional", "Dia", "Horas"])
