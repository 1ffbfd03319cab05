"""
Filter-sort pipeline over an order snapshot.

``project`` is pure: the same orders, config and ``now`` always give the same
rows. Stages run search -> status -> date -> sort; the filters commute, the
sort always runs last.
"""
from __future__ import annotations

import calendar
from datetime import datetime, timedelta
from typing import Callable, Iterable, List, Optional

from schemas import DateFilter, Order, ViewConfig


def _local_now() -> datetime:
    return datetime.now().astimezone()


def month_before(moment: datetime) -> datetime:
    """Same wall-clock time one calendar month earlier, day clamped to the month's end."""
    year, month = (moment.year - 1, 12) if moment.month == 1 else (moment.year, moment.month - 1)
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def window_start(date_filter: DateFilter, now: datetime) -> Optional[datetime]:
    """Lower bound of the date window, or None for "all"."""
    if date_filter == "today":
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if date_filter == "week":
        return now - timedelta(days=7)
    if date_filter == "month":
        return month_before(now)
    return None


def _contains(value: Optional[str], needle: str) -> bool:
    return bool(value) and needle in value.lower()


def matches_search(order: Order, term: str) -> bool:
    if not term:
        return True
    needle = term.lower()
    customer = order.customer
    address = order.address
    return (
        _contains(order.id, needle)
        or (customer is not None and (_contains(customer.name, needle) or _contains(customer.email, needle)))
        or (address is not None and (_contains(address.first_name, needle) or _contains(address.last_name, needle)))
    )


_SORT_KEYS: dict[str, Callable[[Order], object]] = {
    "id": lambda o: o.id,
    "date": lambda o: o.date,
    "amount": lambda o: float(o.amount),
    "status": lambda o: o.status,
}


def sort_orders(orders: Iterable[Order], key: str, direction: str) -> List[Order]:
    # sorted() keeps ties in input order for reverse=True as well
    return sorted(orders, key=_SORT_KEYS[key], reverse=direction == "desc")


def project(orders: Iterable[Order], config: ViewConfig, now: Optional[datetime] = None) -> List[Order]:
    """Return the view-ready subset of ``orders`` for ``config``.

    ``now`` anchors the date window; when omitted the current local time is
    read on every call, so a window can move across a day boundary.
    """
    rows = [o for o in orders if matches_search(o, config.search_term)]

    if config.status_filter != "all":
        rows = [o for o in rows if o.status == config.status_filter]

    if config.date_filter != "all":
        if now is None:
            now = _local_now()
        elif now.tzinfo is None:
            now = now.astimezone()
        lower = window_start(config.date_filter, now)
        rows = [o for o in rows if lower <= o.date <= now]

    return sort_orders(rows, config.sort_key, config.sort_direction)
