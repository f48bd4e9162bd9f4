import sys
import os
import json

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
import pytest
from storefront.cart import CartStore, parse_quantity
from storefront.domain import CartEntry
from storefront.errors import StorageError
from storefront.storage import CART_SLOT, MemoryStore


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def cart(store):
    return CartStore(store)


def test_add_twice_merges_into_one_entry(cart):
    """Repeat add bumps quantity instead of appending"""
    cart.add(7)
    cart.add(7)
    assert cart.get() == (CartEntry(7, 2),)


def test_add_keeps_insertion_order(cart):
    cart.add(3)
    cart.add(1)
    cart.add(3)
    cart.add(2)
    assert [e.product_id for e in cart.get()] == [3, 1, 2]
    assert cart.count() == 4


def test_add_accepts_unknown_ids(cart):
    cart.add(99999)
    assert cart.get() == (CartEntry(99999, 1),)


def test_cart_slot_layout(store, cart):
    cart.add(5)
    cart.add(5)
    cart.add(6)
    assert json.loads(store.get(CART_SLOT)) == [{"id": 5, "qty": 2}, {"id": 6, "qty": 1}]


def test_cart_survives_new_store_instance(store, cart):
    cart.add(1)
    assert CartStore(store).get() == (CartEntry(1, 1),)


@pytest.mark.parametrize("raw", [0, -3, "0", "-3", "abc", "", None, 2.0 - 2.0])
def test_set_quantity_non_positive_or_invalid_becomes_one(cart, raw):
    cart.add(7)
    cart.add(7)
    cart.set_quantity(7, raw)
    assert cart.get() == (CartEntry(7, 1),)


def test_set_quantity_positive(cart):
    cart.add(7)
    cart.set_quantity(7, "12")
    assert cart.get() == (CartEntry(7, 12),)
    cart.set_quantity(7, 4)
    assert cart.get() == (CartEntry(7, 4),)


def test_set_quantity_absent_is_noop(store, cart):
    cart.add(1)
    before = store.snapshot()
    cart.set_quantity(2, 5)
    assert store.snapshot() == before


def test_remove(cart):
    cart.add(1)
    cart.add(2)
    cart.remove(1)
    assert cart.get() == (CartEntry(2, 1),)
    cart.remove(1)
    assert cart.get() == (CartEntry(2, 1),)


def test_clear(cart):
    cart.add(1)
    cart.add(2)
    cart.clear()
    assert cart.get() == ()
    assert cart.count() == 0


def test_observers_get_item_count(store):
    counts = []
    cart = CartStore(store, observers=(counts.append,))
    cart.add(1)
    cart.add(1)
    cart.add(2)
    cart.set_quantity(2, 5)
    cart.remove(1)
    cart.clear()
    assert counts == [1, 2, 3, 7, 5, 0]


def test_observers_not_called_on_noop(store):
    counts = []
    cart = CartStore(store)
    cart.subscribe(counts.append)
    cart.remove(1)
    cart.set_quantity(1, 3)
    assert counts == []


def test_empty_slot_reads_as_empty_cart():
    assert CartStore(MemoryStore({CART_SLOT: ""})).get() == ()


def test_corrupt_slot_raises():
    with pytest.raises(StorageError):
        CartStore(MemoryStore({CART_SLOT: "{not json"})).get()
    with pytest.raises(StorageError):
        CartStore(MemoryStore({CART_SLOT: '[{"id": 1}]'})).get()


@pytest.mark.parametrize(
    "raw",
    [
        '[{"id": 1, "qty": -5}]',
        '[{"id": 1, "qty": 0}]',
        '[{"id": 1, "qty": 1}, {"id": 1, "qty": 2}]',
        '{"id": 1, "qty": 1}',
    ],
)
def test_invalid_entries_in_slot_raise(raw):
    """Non-positive quantities and repeated ids are rejected on read"""
    with pytest.raises(StorageError):
        CartStore(MemoryStore({CART_SLOT: raw})).get()


def test_parse_quantity():
    assert parse_quantity("3") == 3
    assert parse_quantity(" 4 ") == 4
    assert parse_quantity("5 pcs") == 5
    assert parse_quantity("2.7") == 2
    assert parse_quantity("pcs 5") == 1
    assert parse_quantity(True) == 1
    assert parse_quantity(9) == 9
