from dataclasses import dataclass
from datetime import datetime
from functools import reduce
from typing import Callable, Tuple
import uuid

from .domain import Event

CART_CHANGED = "CART_CHANGED"
ORDER_CONFIRMED = "ORDER_CONFIRMED"

Handler = Callable[[Event, dict], dict]


@dataclass(frozen=True)
class EventBus:
    """
    Immutable event bus.
    Subscribers are pure functions (Event, state) -> new state.
    """

    subscribers: Tuple[Tuple[str, Handler], ...] = ()

    def subscribe(self, event_name: str, handler: Handler) -> "EventBus":
        """Returns a new bus with the handler added"""
        return EventBus(subscribers=self.subscribers + ((event_name, handler),))

    def publish(self, event: Event, state: dict) -> dict:
        """Folds every matching handler over the state, in subscription order"""
        handlers = tuple(h for name, h in self.subscribers if name == event.name)
        return reduce(lambda current, handler: handler(event, current), handlers, state)


def create_event(name: str, payload: dict) -> Event:
    return Event(
        id=str(uuid.uuid4()),
        ts=datetime.now().isoformat(),
        name=name,
        payload=payload,
    )


def handle_cart_changed(event: Event, state: dict) -> dict:
    """Keeps the cart badge count current"""
    return {
        **state,
        "cart_count": event.payload.get("count", 0),
        "last_event": event.name,
    }


def handle_order_confirmed(event: Event, state: dict) -> dict:
    return {
        **state,
        "last_order_id": event.payload.get("order_id"),
        "last_order_total": event.payload.get("total", 0),
        "last_event": event.name,
    }


def create_storefront_bus() -> EventBus:
    return (
        EventBus()
        .subscribe(CART_CHANGED, handle_cart_changed)
        .subscribe(ORDER_CONFIRMED, handle_order_confirmed)
    )


def initial_state(cart_count: int = 0) -> dict:
    return {
        "cart_count": cart_count,
        "last_order_id": None,
        "last_order_total": 0,
        "last_event": None,
    }
