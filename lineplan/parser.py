"""Instance file loading and saving (YAML or JSON).

Document layout::

    products:
      - {id: dark, color: dark, allergens: false}
    machines:
      - {id: A1, name: Machine A, time_per_unit: {dark: 5}}
    orders:
      - {id: O1, product: dark, quantity: 3, due: 10}

Products referenced by machines or orders must be declared in ``products``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from .models import Color, Machine, Order, Product, ShopInstance


def _require(entry: dict, key: str, where: str) -> Any:
    if not isinstance(entry, dict) or key not in entry:
        raise ValueError(f"Missing '{key}' in {where}: {entry!r}")
    return entry[key]


def _as_int(value: Any, where: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Expected integer for {where}, got {value!r}")
    return value


def instance_from_dict(document: dict) -> ShopInstance:
    """Build a :class:`ShopInstance` from a parsed document.

    Raises:
        ValueError: On missing sections/keys, unknown colors or products,
            non-integer quantities, unit times or due times, or any invariant
            checked by ``ShopInstance`` itself.
    """
    if not isinstance(document, dict):
        raise ValueError("Instance document must be a mapping")
    products: dict[str, Product] = {}
    for entry in document.get("products") or []:
        product_id = str(_require(entry, "id", "product"))
        color_name = str(_require(entry, "color", f"product {product_id}")).lower()
        try:
            color = Color(color_name)
        except ValueError:
            raise ValueError(f"Unknown color {color_name!r} for product {product_id}") from None
        if product_id in products:
            raise ValueError(f"Duplicate product {product_id}")
        products[product_id] = Product(product_id, color, bool(entry.get("allergens", False)))

    machines: list[Machine] = []
    for entry in document.get("machines") or []:
        machine_id = str(_require(entry, "id", "machine"))
        times_raw = _require(entry, "time_per_unit", f"machine {machine_id}") or {}
        times: dict[str, int] = {}
        for product_id, unit_time in times_raw.items():
            if str(product_id) not in products:
                raise ValueError(f"Machine {machine_id} references unknown product {product_id}")
            times[str(product_id)] = _as_int(unit_time, f"unit time of {product_id} on {machine_id}")
        machines.append(Machine(machine_id, times, name=str(entry.get("name", machine_id))))

    orders: list[Order] = []
    for entry in document.get("orders") or []:
        order_id = str(_require(entry, "id", "order"))
        product_id = str(_require(entry, "product", f"order {order_id}"))
        if product_id not in products:
            raise ValueError(f"Order {order_id} references unknown product {product_id}")
        orders.append(
            Order(
                order_id=order_id,
                product=products[product_id],
                quantity=_as_int(_require(entry, "quantity", f"order {order_id}"), f"quantity of {order_id}"),
                due=_as_int(_require(entry, "due", f"order {order_id}"), f"due of {order_id}"),
            )
        )
    if not machines:
        raise ValueError("Instance declares no machines")
    return ShopInstance(machines=tuple(machines), orders=tuple(orders))


def instance_to_dict(instance: ShopInstance) -> dict:
    # only products referenced by orders are known; other capabilities are dropped
    products: dict[str, Product] = {}
    for order in instance.orders:
        products.setdefault(order.product.product_id, order.product)
    return {
        "products": [
            {"id": p.product_id, "color": p.color.value, "allergens": p.allergens}
            for p in products.values()
        ],
        "machines": [
            {
                "id": m.machine_id,
                "name": m.name,
                "time_per_unit": {
                    pid: t for pid, t in m.time_per_unit.items() if pid in products
                },
            }
            for m in instance.machines
        ],
        "orders": [
            {"id": o.order_id, "product": o.product.product_id, "quantity": o.quantity, "due": o.due}
            for o in instance.orders
        ],
    }


def load_instance(file_path: str | Path) -> ShopInstance:
    path = Path(file_path)
    with open(path, "r", encoding="utf-8") as f:
        text = f.read()
    if path.suffix in (".yml", ".yaml"):
        document = yaml.safe_load(text) or {}
    else:
        document = json.loads(text)
    return instance_from_dict(document)


def dump_instance(instance: ShopInstance, file_path: str | Path) -> None:
    path = Path(file_path)
    document = instance_to_dict(instance)
    with open(path, "w", encoding="utf-8") as f:
        if path.suffix in (".yml", ".yaml"):
            yaml.safe_dump(document, f, sort_keys=False)
        else:
            json.dump(document, f, ensure_ascii=False, indent=2)
