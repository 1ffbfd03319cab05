"""
OrderDesk: one dashboard view session over an order snapshot.

Holds the client, the selection and the current snapshot, and exposes the
actions the order and invoice screens offer.
"""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from app_logger import get_logger
from cart import CartStore, merge_order_into_cart
from errors import NotFound, StoreError
from invoice import build_invoice, dashboard_stats
from order_client import FetchResult, OrderClient, OrderSnapshot
from pipeline import project
from schemas import DashboardStats, Invoice, MergeReport, Order, Scope, ViewConfig
from selection import Selection

logger = get_logger("desk")


class OrderDesk:
    def __init__(self, client: OrderClient, scope: Scope = "mine", invoice_prefix: str = "INV-") -> None:
        self.client = client
        self.scope = scope
        self.invoice_prefix = invoice_prefix
        self.selection = Selection()
        self.snapshot: Optional[OrderSnapshot] = None
        self.last_error: Optional[StoreError] = None
        self._generation = 0
        self._closed = False

    @property
    def orders(self) -> List[Order]:
        return list(self.snapshot.orders) if self.snapshot else []

    async def refresh(self) -> FetchResult:
        """Fetch a new snapshot.

        Only the most recently started refresh may replace the snapshot; an
        older response arriving late, or any response after ``close``, is
        dropped. Failures keep the previous snapshot.
        """
        self._generation += 1
        generation = self._generation
        result = await self.client.fetch_orders(self.scope)

        if self._closed or generation != self._generation:
            logger.debug("Dropping superseded %s refresh #%d", self.scope, generation)
            return result

        if result.ok:
            self.snapshot = OrderSnapshot(orders=result.orders, scope=self.scope)
            self.last_error = None
            self.selection.retain(o.id for o in self.orders)
        else:
            self.last_error = result.error
        return result

    def close(self) -> None:
        self._closed = True

    def view(self, config: ViewConfig, now: Optional[datetime] = None) -> List[Order]:
        return project(self.orders, config, now)

    def toggle(self, order_id: str) -> bool:
        if order_id not in {o.id for o in self.orders}:
            raise NotFound(f"Order {order_id} is not loaded")
        return self.selection.toggle(order_id)

    def select(self, order_ids: List[str]) -> None:
        """Replace the selection with the given ids that are currently loaded."""
        self.selection.clear()
        present = {o.id for o in self.orders}
        for oid in order_ids:
            if oid in present and oid not in self.selection:
                self.selection.toggle(oid)

    def select_all_visible(self, config: ViewConfig, now: Optional[datetime] = None) -> None:
        self.selection.select_all(o.id for o in self.view(config, now))

    def invoice(self, now: Optional[datetime] = None) -> Invoice:
        return build_invoice(self.orders, self.selection.ids, now, self.invoice_prefix)

    def stats(self, config: ViewConfig, now: Optional[datetime] = None) -> DashboardStats:
        return dashboard_stats(self.orders, self.view(config, now), len(self.selection))

    def find(self, order_id: str) -> Order:
        for order in self.orders:
            if order.id == order_id:
                return order
        raise NotFound(f"Order {order_id} not found")

    def reorder(self, order_id: str, store: CartStore, owner: str) -> MergeReport:
        return merge_order_into_cart(store, owner, self.find(order_id))
