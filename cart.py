"""
Cart storage and the "add order to cart" bulk action.

A merge is staged on a copy of the owner's cart and committed with a single
``save``, so a failure part way through leaves the stored cart untouched.
"""
from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Dict, List, Optional, Protocol

from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from app_logger import get_logger
from errors import Conflict
from schemas import CartItem, MergeReport, Order

logger = get_logger("cart")


class CartStore(Protocol):
    def get(self, owner: str) -> List[CartItem]: ...

    def save(self, owner: str, items: List[CartItem]) -> None: ...


class InMemoryCartStore:
    def __init__(self) -> None:
        self._carts: Dict[str, List[CartItem]] = {}
        self._lock = threading.Lock()

    def get(self, owner: str) -> List[CartItem]:
        with self._lock:
            return [i.model_copy() for i in self._carts.get(owner, [])]

    def save(self, owner: str, items: List[CartItem]) -> None:
        with self._lock:
            self._carts[owner] = [i.model_copy() for i in items]


class MongoCartStore:
    """One document per owner in the ``cart`` collection: {_id, items, version, updated_at}.

    ``save`` only succeeds against the version this store last read for the
    owner, so two concurrent merges cannot silently overwrite each other: the
    loser gets ``Conflict`` and its cart write is not applied.
    """

    def __init__(self, collection: Collection) -> None:
        self.collection = collection
        # owner -> version seen by the last get(); None when no document existed
        self._versions: Dict[str, Optional[int]] = {}

    def get(self, owner: str) -> List[CartItem]:
        doc = self.collection.find_one({"_id": owner})
        self._versions[owner] = doc.get("version", 0) if doc else None
        if not doc:
            return []
        return [CartItem.model_validate(i) for i in doc.get("items", [])]

    def save(self, owner: str, items: List[CartItem]) -> None:
        if owner not in self._versions:
            self.get(owner)
        expected = self._versions[owner]
        doc = {
            "_id": owner,
            "items": [i.model_dump() for i in items],
            "version": (expected or 0) + 1,
            "updated_at": datetime.now(timezone.utc),
        }
        if expected is None:
            try:
                self.collection.insert_one(doc)
            except DuplicateKeyError as e:
                raise Conflict(f"Cart of {owner} was created concurrently", cause=e) from e
        else:
            # documents written before versioning have no version field
            if expected:
                query = {"_id": owner, "version": expected}
            else:
                query = {"_id": owner, "$or": [{"version": {"$exists": False}}, {"version": 0}]}
            result = self.collection.replace_one(query, doc)
            if result.matched_count == 0:
                raise Conflict(f"Cart of {owner} changed, try again")
        self._versions[owner] = doc["version"]


def merge_order_into_cart(store: CartStore, owner: str, order: Order) -> MergeReport:
    """Add every line of ``order`` to the owner's cart.

    Lines whose product is already in the cart get their quantity bumped by
    the ordered quantity; others are appended. Lines without a product
    reference cannot be matched and are skipped.
    """
    staged = store.get(owner)
    position = {item.id: n for n, item in enumerate(staged)}
    report = MergeReport()

    for line in order.items:
        if not line.product_ref:
            report.skipped += 1
            continue
        n = position.get(line.product_ref)
        if n is not None:
            current = staged[n]
            staged[n] = current.model_copy(update={"quantity": current.quantity + line.quantity})
            report.updated += 1
        else:
            position[line.product_ref] = len(staged)
            staged.append(
                CartItem(
                    id=line.product_ref,
                    name=line.name,
                    price=line.price,
                    quantity=line.quantity,
                    image=line.image,
                    description=line.description,
                    category=line.category,
                    brand=line.brand,
                )
            )
            report.added += 1

    if report.added or report.updated:
        store.save(owner, staged)
    logger.info(
        "Order %s merged into cart of %s: %d added, %d updated, %d skipped",
        order.id, owner, report.added, report.updated, report.skipped,
    )
    return report
