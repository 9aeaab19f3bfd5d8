import random
from typing import Dict, List

from .models import Color, Machine, Order, Product, ShopInstance

PRODUCTS: Dict[str, Product] = {
    "dark": Product("dark", Color.DARK, allergens=False),
    "milk": Product("milk", Color.MILK, allergens=False),
    "white": Product("white", Color.WHITE, allergens=False),
    "dark_nuts": Product("dark_nuts", Color.DARK, allergens=True),
    "milk_nuts": Product("milk_nuts", Color.MILK, allergens=True),
    "white_nuts": Product("white_nuts", Color.WHITE, allergens=True),
}

# Machine A cannot handle allergens; machine B handles everything.
MACHINE_A_TIMES = {"dark": 5, "milk": 4, "white": 3}
MACHINE_B_TIMES = {
    "dark": 4,
    "milk": 3,
    "white": 2,
    "dark_nuts": 8,
    "milk_nuts": 6,
    "white_nuts": 4,
}


def generate_machines(count_a: int = 5, count_b: int = 5) -> List[Machine]:
    machines = [
        Machine(f"A{i + 1}", dict(MACHINE_A_TIMES), name="Machine A") for i in range(count_a)
    ]
    machines += [
        Machine(f"B{i + 1}", dict(MACHINE_B_TIMES), name="Machine B") for i in range(count_b)
    ]
    return machines


def generate_instance(
    seed: int = 0,
    plain_orders: int = 150,
    allergen_orders: int = 50,
    machines_a: int = 5,
    machines_b: int = 5,
    max_quantity: int = 10,
    max_due: int = 1000,
) -> ShopInstance:
    """Generate a random plant like the chocolate-line demo.

    Allergen-free orders pick one of dark/milk/white, allergen orders one of
    the nut variants; quantities are uniform in ``[1, max_quantity]`` and due
    times in ``[1, max_due]``.
    """
    rng = random.Random(seed)
    plain = [PRODUCTS["dark"], PRODUCTS["milk"], PRODUCTS["white"]]
    nuts = [PRODUCTS["dark_nuts"], PRODUCTS["milk_nuts"], PRODUCTS["white_nuts"]]
    width = len(str(plain_orders + allergen_orders))
    orders: List[Order] = []
    for k in range(plain_orders + allergen_orders):
        product = rng.choice(plain if k < plain_orders else nuts)
        orders.append(
            Order(
                order_id=f"O{k + 1:0{width}d}",
                product=product,
                quantity=rng.randint(1, max_quantity),
                due=rng.randint(1, max_due),
            )
        )
    return ShopInstance(machines=tuple(generate_machines(machines_a, machines_b)), orders=tuple(orders))
