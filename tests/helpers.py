"""Small builders shared by the test modules."""

from __future__ import annotations

from lineplan.models import Color, Machine, Order, Product, Schedule, ShopInstance
from lineplan.operations import insert_order

DARK = Product("dark", Color.DARK)
MILK = Product("milk", Color.MILK)
WHITE = Product("white", Color.WHITE)
DARK_NUTS = Product("dark_nuts", Color.DARK, allergens=True)
MILK_NUTS = Product("milk_nuts", Color.MILK, allergens=True)
WHITE_NUTS = Product("white_nuts", Color.WHITE, allergens=True)


def machine(machine_id: str, **times: int) -> Machine:
    return Machine(machine_id, dict(times), name=f"Machine {machine_id}")


def order(order_id: str, product: Product, quantity: int = 1, due: int = 0) -> Order:
    return Order(order_id=order_id, product=product, quantity=quantity, due=due)


def build(instance: ShopInstance, assignment: dict[str, list[str]]) -> Schedule:
    """Schedule with ``machine_id -> [order_id, ...]`` built through insert_order."""
    schedule = Schedule.empty(instance.machines)
    for machine_id, order_ids in assignment.items():
        for order_id in order_ids:
            schedule = insert_order(schedule, instance.order(order_id), machine_id)
    return schedule
