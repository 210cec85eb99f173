from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import Any, Dict, List, MutableMapping, Optional

from datastore import models
from datastore.database import DatastoreError, execute, fetch_one

logger = logging.getLogger(__name__)

DEFAULT_BUSINESS_TYPE = "barbearia"

LOAD_ERROR = "Erro ao carregar barbearia"
NOT_FOUND_ERROR = "Barbearia não encontrada"


@dataclass
class Barbershop:
    id: str
    slug: str
    name: str
    primary_color: str
    secondary_color: str
    background_color: str
    text_color: str
    logo_url: Optional[str] = None
    whatsapp_number: Optional[str] = None
    opening_time: Optional[str] = None
    closing_time: Optional[str] = None
    active: bool = True
    business_type: str = DEFAULT_BUSINESS_TYPE

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Barbershop":
        # select('*') may return columns we do not mirror
        known = {f.name for f in fields(cls)}
        data = {k: v for k, v in row.items() if k in known}
        if not data.get("business_type"):
            data["business_type"] = DEFAULT_BUSINESS_TYPE
        return cls(**data)

    @property
    def professionals_label(self) -> str:
        return professionals_label(self.business_type)


@dataclass
class BarbershopPreview:
    id: str
    slug: str
    name: str
    primary_color: str
    logo_url: Optional[str] = None


@dataclass
class TenantLookup:
    barbershop: Optional[Barbershop] = None
    error: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.barbershop is not None


def professionals_label(business_type: Optional[str]) -> str:
    if (business_type or DEFAULT_BUSINESS_TYPE) == DEFAULT_BUSINESS_TYPE:
        return "Barbeiros"
    return "Profissionais"


# --- LOOKUPS ---------------------------------------------------------------

def resolve_barbershop_by_slug(client, slug: Optional[str]) -> TenantLookup:
    slug = (slug or "").strip().lower()
    if not slug:
        return TenantLookup(error=NOT_FOUND_ERROR)

    try:
        row = fetch_one(
            client.table(models.BARBERSHOPS)
            .select("*")
            .eq("slug", slug)
            .eq("active", True)
        )
    except DatastoreError as e:
        logger.error(f"Failed to load barbershop '{slug}': {e.message}")
        return TenantLookup(error=LOAD_ERROR)

    if row is None:
        logger.info(f"No active barbershop for slug '{slug}'")
        return TenantLookup(error=NOT_FOUND_ERROR)

    return TenantLookup(barbershop=Barbershop.from_row(row))


def fetch_barbershop_by_id(client, barbershop_id: Optional[str]) -> Optional[Barbershop]:
    if not barbershop_id:
        return None
    try:
        row = fetch_one(client.table(models.BARBERSHOPS).select("*").eq("id", barbershop_id))
    except DatastoreError as e:
        logger.error(f"Failed to load barbershop {barbershop_id}: {e.message}")
        return None
    return Barbershop.from_row(row) if row else None


def list_active_barbershops(client) -> List[BarbershopPreview]:
    try:
        rows = execute(
            client.table(models.BARBERSHOPS)
            .select("id, slug, name, logo_url, primary_color")
            .eq("active", True)
            .order("name")
        )
    except DatastoreError as e:
        logger.error(f"Failed to list barbershops: {e.message}")
        return []

    return [
        BarbershopPreview(
            id=r["id"],
            slug=r["slug"],
            name=r["name"],
            primary_color=r["primary_color"],
            logo_url=r.get("logo_url"),
        )
        for r in rows
    ]


# --- SESSION CONTEXT -------------------------------------------------------

def init_tenant_state(state: MutableMapping) -> None:
    state.setdefault("barbershop", None)
    state.setdefault("barbershop_error", None)
    state.setdefault("barbershop_loading", False)


def set_barbershop_by_slug(state: MutableMapping, client, slug: str) -> bool:
    init_tenant_state(state)
    state["barbershop_loading"] = True
    state["barbershop_error"] = None

    try:
        lookup = resolve_barbershop_by_slug(client, slug)
    finally:
        state["barbershop_loading"] = False

    if not lookup.found:
        state["barbershop_error"] = lookup.error
        return False

    state["barbershop"] = lookup.barbershop
    return True


def clear_barbershop(state: MutableMapping) -> None:
    state["barbershop"] = None
    state["barbershop_error"] = None


def get_barbershop(state: MutableMapping) -> Optional[Barbershop]:
    return state.get("barbershop")


def get_tenant_error(state: MutableMapping) -> Optional[str]:
    return state.get("barbershop_error")


def is_loading(state: MutableMapping) -> bool:
    return bool(state.get("barbershop_loading"))
