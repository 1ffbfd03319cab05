from datetime import datetime, timezone

from invoice import build_invoice, dashboard_stats, format_currency, invoice_number
from tests.factories import make_order


def test_empty_selection_gives_empty_invoice(orders, now):
    invoice = build_invoice(orders, set(), now)
    assert invoice.total_amount == 0
    assert invoice.item_count == 0
    assert invoice.orders == []


def test_totals_trust_stored_amounts(now):
    orders = [
        make_order("id1", amount=50, items=2),
        make_order("id2", amount=30, items=1),
        make_order("id3", amount=999, items=4),
    ]
    invoice = build_invoice(orders, {"id1", "id2"}, now)
    assert invoice.total_amount == 80
    assert invoice.item_count == 3
    assert [o.id for o in invoice.orders] == ["id1", "id2"]


def test_item_count_counts_lines_not_quantities(now):
    order = make_order("q", items=1)
    order = order.model_copy(update={"items": [order.items[0].model_copy(update={"quantity": 7})]})
    assert build_invoice([order], ["q"], now).item_count == 1


def test_unknown_ids_are_ignored(orders, now):
    invoice = build_invoice(orders, ["A100", "gone"], now)
    assert [o.id for o in invoice.orders] == ["A100"]


def test_invoice_number_is_prefix_plus_epoch_millis():
    moment = datetime(2025, 1, 1, tzinfo=timezone.utc)
    assert invoice_number(moment) == "INV-1735689600000"
    assert invoice_number(moment, prefix="BILL-") == "BILL-1735689600000"
    assert build_invoice([], [], moment).invoice_number == "INV-1735689600000"


def test_generated_date_defaults_to_now():
    before = datetime.now(timezone.utc)
    invoice = build_invoice([], [])
    assert invoice.generated_date >= before


def test_dashboard_stats(orders):
    stats = dashboard_stats(orders, orders[:1], selected=2)
    assert stats.total_orders == 3
    assert stats.total_revenue == 225.5
    assert stats.filtered == 1
    assert stats.selected == 2


def test_format_currency():
    assert format_currency(1234.5) == "$1,234.50"
    assert format_currency(0) == "$0.00"
    assert format_currency(-3) == "-$3.00"
