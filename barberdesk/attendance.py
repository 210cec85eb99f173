from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

import pandas as pd

from barberdesk.badges import status_label
from datastore import models
from datastore.database import DatastoreError, execute

logger = logging.getLogger(__name__)

MONTHS_PT = [
    "janeiro", "fevereiro", "março", "abril", "maio", "junho",
    "julho", "agosto", "setembro", "outubro", "novembro", "dezembro",
]
# date.weekday(): 0 = Monday
WEEKDAYS_PT = [
    "segunda-feira", "terça-feira", "quarta-feira", "quinta-feira",
    "sexta-feira", "sábado", "domingo",
]


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    PENDING = "pending"
    TIME_OFF = "time_off"


MARKABLE_STATUSES = (AttendanceStatus.PRESENT, AttendanceStatus.ABSENT)


@dataclass
class Barber:
    id: str
    name: str
    specialty: Optional[str] = None
    active: bool = True
    has_app_access: bool = False

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Barber":
        return cls(
            id=row["id"],
            name=row["name"],
            specialty=row.get("specialty"),
            active=bool(row.get("active", True)),
            has_app_access=bool(row.get("has_app_access", False)),
        )


@dataclass
class Attendance:
    id: str
    barber_id: str
    status: AttendanceStatus
    marked_at: Optional[str] = None


@dataclass
class TimeOff:
    id: str
    barber_id: str
    off_date: date
    reason: Optional[str] = None


@dataclass
class AttendanceDay:
    day: date
    barbers: List[Barber] = field(default_factory=list)
    attendances: Dict[str, Attendance] = field(default_factory=dict)
    time_offs: List[TimeOff] = field(default_factory=list)

    def status_of(self, barber_id: str) -> AttendanceStatus:
        return attendance_status(barber_id, self.day, self.attendances, self.time_offs)

    def statuses(self) -> Dict[str, AttendanceStatus]:
        return {b.id: self.status_of(b.id) for b in self.barbers}

    def barber_name(self, barber_id: str) -> Optional[str]:
        for b in self.barbers:
            if b.id == barber_id:
                return b.name
        return None


# --- FORMATTING -------------------------------------------------------------

def format_short_date(day: date) -> str:
    return day.strftime("%d/%m/%Y")


def format_long_date(day: date) -> str:
    return f"{day.day:02d} de {MONTHS_PT[day.month - 1]}"


def format_weekday_date(day: date) -> str:
    return f"{WEEKDAYS_PT[day.weekday()]}, {day.day} de {MONTHS_PT[day.month - 1]}"


def _parse_date(value) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


# --- QUERIES -------------------------------------------------------------

def fetch_active_barbers(client, barbershop_id: str) -> List[Barber]:
    rows = execute(
        client.table(models.BARBERS)
        .select("id, name, specialty, active, has_app_access")
        .eq("barbershop_id", barbershop_id)
        .eq("active", True)
        .order("name")
    )
    return [Barber.from_row(r) for r in rows]


def fetch_attendance_for_day(client, barbershop_id: str, day: date) -> Dict[str, Attendance]:
    rows = execute(
        client.table(models.ATTENDANCE)
        .select("*")
        .eq("barbershop_id", barbershop_id)
        .eq("attendance_date", day.isoformat())
    )
    return {
        r["barber_id"]: Attendance(
            id=r["id"],
            barber_id=r["barber_id"],
            status=_stored_status(r),
            marked_at=r.get("marked_at"),
        )
        for r in rows
    }


def _stored_status(row: Dict[str, Any]) -> AttendanceStatus:
    try:
        return AttendanceStatus(row.get("status") or "pending")
    except ValueError:
        logger.warning(f"Unknown attendance status {row.get('status')!r} in record {row.get('id')}")
        return AttendanceStatus.PENDING


def fetch_upcoming_time_off(client, barbershop_id: str, from_day: date) -> List[TimeOff]:
    rows = execute(
        client.table(models.TIME_OFF)
        .select("*")
        .eq("barbershop_id", barbershop_id)
        .gte("off_date", from_day.isoformat())
        .order("off_date")
    )
    return [
        TimeOff(
            id=r["id"],
            barber_id=r["barber_id"],
            off_date=_parse_date(r["off_date"]),
            reason=r.get("reason"),
        )
        for r in rows
    ]


def load_attendance_day(client, barbershop_id: str, day: date) -> AttendanceDay:
    return AttendanceDay(
        day=day,
        barbers=fetch_active_barbers(client, barbershop_id),
        attendances=fetch_attendance_for_day(client, barbershop_id, day),
        time_offs=fetch_upcoming_time_off(client, barbershop_id, day),
    )


# --- STATUS -------------------------------------------------------------

def attendance_status(
    barber_id: str,
    day: date,
    attendances: Dict[str, Attendance],
    time_offs: List[TimeOff],
) -> AttendanceStatus:
    if any(t.barber_id == barber_id and t.off_date == day for t in time_offs):
        return AttendanceStatus.TIME_OFF
    record = attendances.get(barber_id)
    return record.status if record else AttendanceStatus.PENDING


def count_statuses(barbers: List[Barber], statuses: Dict[str, AttendanceStatus]) -> Dict[str, int]:
    counts = {"present": 0, "absent": 0, "pending": 0}
    for b in barbers:
        status = statuses.get(b.id, AttendanceStatus.PENDING)
        if status.value in counts:
            counts[status.value] += 1
    return counts


def attendance_frame(barbers: List[Barber], statuses: Dict[str, AttendanceStatus]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "Profissional": b.name,
                "Especialidade": b.specialty or "Sem especialidade",
                "Estado": status_label(statuses.get(b.id, AttendanceStatus.PENDING)),
                "Acesso à app": "Sim" if b.has_app_access else "Não",
            }
            for b in barbers
        ],
        columns=["Profissional", "Especialidade", "Estado", "Acesso à app"],
    )


# --- MUTATIONS -------------------------------------------------------------

def mark_attendance(
    client,
    barbershop_id: str,
    barber_id: str,
    day: date,
    status,
    marked_by: Optional[str],
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    invalid = {"success": False, "error": "Estado de presença inválido.", "message": None}
    try:
        status = AttendanceStatus(status)
    except ValueError:
        return invalid
    if status not in MARKABLE_STATUSES:
        return invalid

    now = now or datetime.now(timezone.utc)

    try:
        execute(
            client.table(models.ATTENDANCE).upsert(
                {
                    "barber_id": barber_id,
                    "barbershop_id": barbershop_id,
                    "attendance_date": day.isoformat(),
                    "status": status.value,
                    "marked_by": marked_by,
                    "marked_at": now.isoformat(),
                },
                on_conflict=models.ATTENDANCE_CONFLICT,
            )
        )
    except DatastoreError as e:
        logger.error(f"Failed to mark {barber_id} as {status.value} on {day}: {e.message}")
        return {"success": False, "error": "Não foi possível marcar a presença.", "message": None}

    logger.info(f"Marked {barber_id} as {status.value} on {day}")
    if status == AttendanceStatus.PRESENT:
        return {"success": True, "error": None, "message": "Profissional marcado como presente."}
    return {"success": True, "error": None, "message": "Profissional marcado como ausente."}


def add_time_off(
    client,
    barbershop_id: str,
    barber: Barber,
    off_date: Optional[date],
    reason: Optional[str] = None,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    if off_date is None:
        return {"success": False, "error": "Selecione a data da folga.", "message": None}

    today = today or date.today()
    if off_date < today:
        return {"success": False, "error": "A data da folga não pode estar no passado.", "message": None}

    try:
        execute(
            client.table(models.TIME_OFF).insert(
                {
                    "barber_id": barber.id,
                    "barbershop_id": barbershop_id,
                    "off_date": off_date.isoformat(),
                    "reason": (reason or "").strip() or None,
                }
            )
        )
    except DatastoreError as e:
        if e.is_unique_violation:
            return {"success": False, "error": "Já existe uma folga marcada para esta data.", "message": None}
        logger.error(f"Failed to add time off for {barber.id} on {off_date}: {e.message}")
        return {"success": False, "error": "Não foi possível marcar a folga.", "message": None}

    return {
        "success": True,
        "error": None,
        "message": f"Folga de {barber.name} marcada para {format_short_date(off_date)}.",
    }


def remove_time_off(client, time_off_id: str) -> Dict[str, Any]:
    try:
        execute(client.table(models.TIME_OFF).delete().eq("id", time_off_id))
    except DatastoreError as e:
        logger.error(f"Failed to remove time off {time_off_id}: {e.message}")
        return {"success": False, "error": "Não foi possível remover a folga.", "message": None}

    return {"success": True, "error": None, "message": "A folga foi removida com sucesso."}
