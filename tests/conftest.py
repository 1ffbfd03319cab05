import os

# Settings are read at import time; keep tests off any real database
os.environ.pop("STOREFRONT_DATABASE_URL", None)

import pytest

from tests.factories import NOW, make_order


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def orders():
    return [
        make_order("A100", amount=100, status="pending", date=NOW.replace(hour=9),
                   userId={"_id": "u1", "name": "Ada Lovelace", "email": "ada@example.com"}),
        make_order("B200", amount=50, status="delivered", items=2, date=NOW.replace(day=10),
                   address={"firstName": "Grace", "lastName": "Hopper", "city": "Arlington"}),
        make_order("C300", amount=75.5, status="shipped", items=3, date=NOW.replace(month=1),
                   userId="u3"),
    ]
