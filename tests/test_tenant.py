"""
Tests for tenant resolution and the session tenant context
"""
from barberdesk.tenant import (
    LOAD_ERROR,
    NOT_FOUND_ERROR,
    Barbershop,
    clear_barbershop,
    fetch_barbershop_by_id,
    get_barbershop,
    get_tenant_error,
    is_loading,
    list_active_barbershops,
    professionals_label,
    resolve_barbershop_by_slug,
    set_barbershop_by_slug,
)


def _shops(shop_row):
    return [
        shop_row,
        {**shop_row, "id": "shop-2", "slug": "alfa", "name": "Alfa Cortes", "logo_url": "https://x/logo.png"},
        {**shop_row, "id": "shop-3", "slug": "fechada", "name": "Fechada", "active": False},
    ]


def test_resolve_by_slug(supabase, shop_row):
    supabase.tables["barbershops"] = _shops(shop_row)

    lookup = resolve_barbershop_by_slug(supabase, "barbearia-central")

    assert lookup.found
    assert lookup.error is None
    assert lookup.barbershop.name == "Barbearia Central"
    assert lookup.barbershop.business_type == "barbearia"


def test_resolve_normalizes_slug(supabase, shop_row):
    supabase.tables["barbershops"] = _shops(shop_row)
    assert resolve_barbershop_by_slug(supabase, "  Barbearia-Central ").found


def test_resolve_ignores_inactive_tenants(supabase, shop_row):
    supabase.tables["barbershops"] = _shops(shop_row)

    lookup = resolve_barbershop_by_slug(supabase, "fechada")

    assert not lookup.found
    assert lookup.error == NOT_FOUND_ERROR


def test_resolve_empty_slug_does_not_query(supabase):
    lookup = resolve_barbershop_by_slug(supabase, "   ")
    assert lookup.error == NOT_FOUND_ERROR
    assert supabase.calls == []


def test_resolve_reports_load_errors(supabase):
    supabase.fail("barbershops")
    lookup = resolve_barbershop_by_slug(supabase, "barbearia-central")
    assert lookup.error == LOAD_ERROR


def test_from_row_ignores_unknown_columns(shop_row):
    shop = Barbershop.from_row({**shop_row, "business_type": "salao"})
    assert shop.business_type == "salao"
    assert shop.professionals_label == "Profissionais"
    assert not hasattr(shop, "created_at")


def test_professionals_label():
    assert professionals_label("barbearia") == "Barbeiros"
    assert professionals_label(None) == "Barbeiros"
    assert professionals_label("salao") == "Profissionais"


def test_fetch_barbershop_by_id(supabase, shop_row):
    supabase.tables["barbershops"] = _shops(shop_row)
    assert fetch_barbershop_by_id(supabase, "shop-2").slug == "alfa"
    assert fetch_barbershop_by_id(supabase, "missing") is None
    assert fetch_barbershop_by_id(supabase, None) is None


def test_list_active_barbershops(supabase, shop_row):
    supabase.tables["barbershops"] = _shops(shop_row)

    shops = list_active_barbershops(supabase)

    assert [s.name for s in shops] == ["Alfa Cortes", "Barbearia Central"]
    assert shops[0].logo_url == "https://x/logo.png"
    assert supabase.last_call().columns == "id, slug, name, logo_url, primary_color"


def test_list_active_barbershops_on_error_is_empty(supabase):
    supabase.fail("barbershops")
    assert list_active_barbershops(supabase) == []


def test_list_active_barbershops_when_offline_is_empty(supabase):
    supabase.disconnect("barbershops")
    assert list_active_barbershops(supabase) == []


def test_set_barbershop_by_slug(supabase, shop_row):
    supabase.tables["barbershops"] = _shops(shop_row)
    state = {}

    assert set_barbershop_by_slug(state, supabase, "alfa") is True

    assert get_barbershop(state).id == "shop-2"
    assert get_tenant_error(state) is None
    assert not is_loading(state)


def test_set_barbershop_by_slug_failure_keeps_current(supabase, shop_row):
    supabase.tables["barbershops"] = _shops(shop_row)
    state = {}
    set_barbershop_by_slug(state, supabase, "alfa")

    assert set_barbershop_by_slug(state, supabase, "nao-existe") is False

    assert get_tenant_error(state) == NOT_FOUND_ERROR
    assert get_barbershop(state).slug == "alfa"


def test_set_barbershop_by_slug_when_offline(supabase, shop_row):
    supabase.tables["barbershops"] = _shops(shop_row)
    state = {}
    set_barbershop_by_slug(state, supabase, "alfa")
    supabase.disconnect("barbershops")

    assert set_barbershop_by_slug(state, supabase, "barbearia-central") is False

    assert get_tenant_error(state) == LOAD_ERROR
    assert not is_loading(state)
    assert get_barbershop(state).slug == "alfa"


def test_clear_barbershop(supabase, shop_row):
    supabase.tables["barbershops"] = _shops(shop_row)
    state = {}
    set_barbershop_by_slug(state, supabase, "alfa")
    state["barbershop_error"] = "stale"

    clear_barbershop(state)

    assert get_barbershop(state) is None
    assert get_tenant_error(state) is None
