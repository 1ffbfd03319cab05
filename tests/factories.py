from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from schemas import Order

TZ = timezone(timedelta(hours=2))
NOW = datetime(2025, 3, 15, 12, 0, tzinfo=TZ)


def raw_order(oid: str, *, date: datetime = NOW, amount: float = 10.0, status: str = "pending", items: int = 1, **extra) -> Dict[str, Any]:
    """An order as the order API sends it: camelCase keys, epoch-ms date."""
    doc = {
        "_id": oid,
        "date": int(date.timestamp() * 1000),
        "amount": amount,
        "status": status,
        "paymentStatus": "pending",
        "paymentMethod": "cod",
        "items": [
            {"productId": f"p-{oid}-{n}", "name": f"Item {n}", "price": 5, "quantity": 1}
            for n in range(items)
        ],
    }
    doc.update(extra)
    return doc


def make_order(oid: str, **kwargs) -> Order:
    return Order.model_validate(raw_order(oid, **kwargs))
