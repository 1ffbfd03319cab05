"""
Invoice aggregation over a set of selected orders.

Invoices are derived values: nothing here is persisted, and the invoice
number is only unique per process at millisecond resolution.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Collection, Iterable, Optional

from schemas import DashboardStats, Invoice, Order


def invoice_number(now: datetime, prefix: str = "INV-") -> str:
    return f"{prefix}{int(now.timestamp() * 1000)}"


def build_invoice(
    orders: Iterable[Order],
    selected_ids: Collection[str],
    now: Optional[datetime] = None,
    prefix: str = "INV-",
) -> Invoice:
    """Aggregate the selected orders into an invoice.

    An empty selection gives an empty invoice rather than an error. Totals
    trust each order's stored ``amount``; ``item_count`` counts line entries,
    not quantities.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    wanted = set(selected_ids)
    included = [o for o in orders if o.id in wanted]
    return Invoice(
        invoice_number=invoice_number(now, prefix),
        generated_date=now,
        orders=included,
        total_amount=sum(o.amount for o in included),
        item_count=sum(len(o.items) for o in included),
    )


def dashboard_stats(orders: Collection[Order], visible: Collection[Order], selected: int) -> DashboardStats:
    """Header counters of the invoice screen."""
    return DashboardStats(
        total_orders=len(orders),
        total_revenue=sum(o.amount for o in orders),
        selected=selected,
        filtered=len(visible),
    )


def format_currency(amount: float) -> str:
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"
