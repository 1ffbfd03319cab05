import mongomock
import pytest

from cart import InMemoryCartStore, MongoCartStore, merge_order_into_cart
from errors import Conflict
from schemas import CartItem, MergeReport, Order
from tests.factories import make_order, raw_order


@pytest.fixture(params=["memory", "mongo"])
def store(request):
    if request.param == "memory":
        return InMemoryCartStore()
    return MongoCartStore(mongomock.MongoClient().storefront.cart)


def test_new_products_are_added(store):
    order = make_order("o1", items=2)
    report = merge_order_into_cart(store, "u1", order)

    assert (report.added, report.updated, report.skipped) == (2, 0, 0)
    cart = store.get("u1")
    assert [i.id for i in cart] == ["p-o1-0", "p-o1-1"]
    assert cart[0].name == "Item 0"
    assert cart[0].price == 5


def test_existing_products_get_quantity_bumped(store):
    store.save("u1", [CartItem(id="p-o1-0", name="Item 0", price=5, quantity=3)])
    order = make_order("o1", items=2)
    order = order.model_copy(update={"items": [order.items[0].model_copy(update={"quantity": 2}), order.items[1]]})

    report = merge_order_into_cart(store, "u1", order)

    assert (report.added, report.updated) == (1, 1)
    quantities = {i.id: i.quantity for i in store.get("u1")}
    assert quantities == {"p-o1-0": 5, "p-o1-1": 1}


def test_items_without_product_ref_are_skipped(store):
    order = make_order("o1", items=1)
    order = order.model_copy(update={"items": [order.items[0].model_copy(update={"product_ref": None})]})

    report = merge_order_into_cart(store, "u1", order)

    assert (report.added, report.updated, report.skipped) == (0, 0, 1)
    assert store.get("u1") == []


def test_carts_are_per_owner(store):
    merge_order_into_cart(store, "u1", make_order("o1"))
    assert store.get("u2") == []


def test_item_id_falls_back_to_line_id():
    doc = raw_order("o1")
    doc["items"] = [{"_id": "legacy", "name": "Old", "price": 1, "quantity": 1}]
    assert Order.model_validate(doc).items[0].product_ref == "legacy"


@pytest.mark.parametrize("product_id", [None, ""])
def test_null_product_id_falls_back_to_line_id(store, product_id):
    doc = raw_order("o1")
    doc["items"] = [{"productId": product_id, "_id": "legacy", "name": "Old", "price": 1, "quantity": 2}]

    report = merge_order_into_cart(store, "u1", Order.model_validate(doc))

    assert (report.added, report.skipped) == (1, 0)
    assert [(i.id, i.quantity) for i in store.get("u1")] == [("legacy", 2)]


class FailingStore(InMemoryCartStore):
    def save(self, owner, items):
        raise RuntimeError("disk full")


def test_failed_commit_leaves_cart_untouched():
    store = FailingStore()
    InMemoryCartStore.save(store, "u1", [CartItem(id="p-o1-0", quantity=1)])

    with pytest.raises(RuntimeError):
        merge_order_into_cart(store, "u1", make_order("o1", items=3))

    assert [(i.id, i.quantity) for i in store.get("u1")] == [("p-o1-0", 1)]


@pytest.mark.parametrize(
    "added, updated, message",
    [
        (2, 0, "2 items added to cart!"),
        (1, 0, "1 item added to cart!"),
        (0, 1, "1 item updated in cart!"),
        (1, 2, "1 new item added and 2 existing items updated in cart!"),
        (0, 0, "Nothing to add to cart"),
    ],
)
def test_merge_report_message(added, updated, message):
    assert MergeReport(added=added, updated=updated).message == message


def test_mongo_document_shape():
    collection = mongomock.MongoClient().storefront.cart
    MongoCartStore(collection).save("u1", [CartItem(id="p1", name="Tee", price=19.99, quantity=2)])
    doc = collection.find_one({"_id": "u1"})
    assert doc["items"][0]["id"] == "p1"
    assert doc["items"][0]["quantity"] == 2
    assert "updated_at" in doc


def test_mongo_concurrent_merges_do_not_overwrite_each_other():
    collection = mongomock.MongoClient().storefront.cart
    first, second = MongoCartStore(collection), MongoCartStore(collection)
    merge_order_into_cart(first, "u1", make_order("seed"))

    first.get("u1")
    second.get("u1")
    second.save("u1", [CartItem(id="from-second")])

    with pytest.raises(Conflict):
        first.save("u1", [CartItem(id="from-first")])
    assert [i.id for i in second.get("u1")] == ["from-second"]


def test_mongo_concurrent_first_carts_conflict():
    collection = mongomock.MongoClient().storefront.cart
    first, second = MongoCartStore(collection), MongoCartStore(collection)
    first.get("u1")
    second.get("u1")
    second.save("u1", [CartItem(id="a")])

    with pytest.raises(Conflict):
        first.save("u1", [CartItem(id="b")])


def test_mongo_cart_without_version_field_is_still_writable():
    collection = mongomock.MongoClient().storefront.cart
    collection.insert_one({"_id": "u1", "items": [{"id": "p1", "quantity": 1}]})
    store = MongoCartStore(collection)

    merge_order_into_cart(store, "u1", make_order("o1"))

    doc = collection.find_one({"_id": "u1"})
    assert doc["version"] == 1
    assert [i["id"] for i in doc["items"]] == ["p1", "p-o1-0"]
