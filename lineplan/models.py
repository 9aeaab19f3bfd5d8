"""Core data structures for parallel-machine production planning.

This module defines:
    Color        -- product color category used for changeover decisions.
    Product      -- color plus allergen flag, shared by reference across orders.
    Machine      -- identity plus per-unit processing time for each product it can make.
    Order        -- product, quantity and due time on the shared timeline.
    ShopInstance -- immutable container with all machines and orders of one plant.
    Schedule     -- per-machine order sequences (persistent, structurally shared).
    OrderEntry / SwitchoverEntry -- detailed timeline rows derived from a Schedule.
    MachineScore / Score         -- multi-objective evaluation of a Schedule.

Identity: products, machines and orders compare and hash by their identifier
only, so they can be used as dictionary keys without relying on object
identity.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Mapping, Union

from .errors import InvalidPositionError


class Color(str, Enum):
    """Product color category. ``WHITE`` is the neutral color by default."""

    DARK = "dark"
    MILK = "milk"
    WHITE = "white"


@dataclass(frozen=True)
class Product:
    product_id: str
    color: Color = field(compare=False)
    allergens: bool = field(default=False, compare=False)


@dataclass(frozen=True)
class Machine:
    """Production machine.

    Attributes:
        machine_id: Unique identifier.
        time_per_unit: product_id -> processing time per unit. A product that
            is missing from the mapping cannot be processed on this machine.
        name: Display label (several machines may share a name).
    """

    machine_id: str
    time_per_unit: Mapping[str, int] = field(default_factory=dict, compare=False)
    name: str = field(default="", compare=False)

    def can_process(self, product: Product) -> bool:
        return product.product_id in self.time_per_unit

    def processing_time(self, order: "Order") -> int:
        return self.time_per_unit[order.product.product_id] * order.quantity


@dataclass(frozen=True)
class Order:
    order_id: str
    product: Product = field(compare=False)
    quantity: int = field(compare=False)
    due: int = field(compare=False)


@dataclass(frozen=True)
class ShopInstance:
    """Immutable representation of one planning problem.

    Attributes:
        machines: Machines in registration order (this order drives every
            enumeration in construction and search).
        orders: Orders in input order.
    """

    machines: tuple[Machine, ...]
    orders: tuple[Order, ...]
    _eligible: dict[str, tuple[Machine, ...]] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "machines", tuple(self.machines))
        object.__setattr__(self, "orders", tuple(self.orders))
        machine_ids = [m.machine_id for m in self.machines]
        if len(set(machine_ids)) != len(machine_ids):
            raise ValueError("Duplicate machine identifiers")
        order_ids = [o.order_id for o in self.orders]
        if len(set(order_ids)) != len(order_ids):
            raise ValueError("Duplicate order identifiers")
        for machine in self.machines:
            for product_id, unit_time in machine.time_per_unit.items():
                if unit_time <= 0:
                    raise ValueError(
                        f"Non-positive unit time {unit_time} for product "
                        f"{product_id} on machine {machine.machine_id}"
                    )
        for order in self.orders:
            if order.quantity <= 0:
                raise ValueError(f"Non-positive quantity for order {order.order_id}")
            if order.due < 0:
                raise ValueError(f"Negative due time for order {order.order_id}")
        eligible: dict[str, tuple[Machine, ...]] = {}
        for product in self.products:
            eligible[product.product_id] = tuple(
                m for m in self.machines if m.can_process(product)
            )
        object.__setattr__(self, "_eligible", eligible)

    @property
    def products(self) -> tuple[Product, ...]:
        """Distinct products referenced by orders, in first-seen order."""
        seen: dict[str, Product] = {}
        for order in self.orders:
            seen.setdefault(order.product.product_id, order.product)
        return tuple(seen.values())

    def eligible_machines(self, product: Product) -> tuple[Machine, ...]:
        cached = self._eligible.get(product.product_id)
        if cached is not None:
            return cached
        return tuple(m for m in self.machines if m.can_process(product))

    def machine(self, machine_id: str) -> Machine:
        for machine in self.machines:
            if machine.machine_id == machine_id:
                return machine
        raise KeyError(machine_id)

    def order(self, order_id: str) -> Order:
        for order in self.orders:
            if order.order_id == order_id:
                return order
        raise KeyError(order_id)


@dataclass(frozen=True)
class Schedule:
    """Assignment of orders to machines together with their processing order.

    ``queues[k]`` is the sequence of machine ``machines[k]``. Schedules are
    values: the mutation helpers in :mod:`lineplan.operations` return new
    schedules that share every untouched per-machine tuple with the source.
    """

    machines: tuple[Machine, ...]
    queues: tuple[tuple[Order, ...], ...]
    slots: Mapping[str, int] = field(repr=False, compare=False)

    @classmethod
    def empty(cls, machines: tuple[Machine, ...] | list[Machine]) -> "Schedule":
        machines = tuple(machines)
        slots = {m.machine_id: k for k, m in enumerate(machines)}
        return cls(machines=machines, queues=tuple(() for _ in machines), slots=slots)

    def slot(self, machine: Machine | str) -> int:
        machine_id = machine if isinstance(machine, str) else machine.machine_id
        try:
            return self.slots[machine_id]
        except KeyError:
            raise InvalidPositionError(f"Unknown machine: {machine_id}") from None

    def queue(self, machine: Machine | str) -> tuple[Order, ...]:
        return self.queues[self.slot(machine)]

    def items(self) -> Iterator[tuple[Machine, tuple[Order, ...]]]:
        return zip(self.machines, self.queues)

    def orders(self) -> Iterator[Order]:
        for queue in self.queues:
            yield from queue

    def order_count(self) -> int:
        return sum(len(q) for q in self.queues)

    def with_queue(self, machine: Machine | str, queue: tuple[Order, ...]) -> "Schedule":
        """Return a copy where only ``machine``'s sequence is replaced."""
        k = self.slot(machine)
        queues = self.queues[:k] + (queue,) + self.queues[k + 1 :]
        return Schedule(machines=self.machines, queues=queues, slots=self.slots)

    def as_ids(self) -> dict[str, list[str]]:
        """Plain ``machine_id -> [order_id, ...]`` view (logging, JSON, tests)."""
        return {
            m.machine_id: [o.order_id for o in q] for m, q in self.items()
        }


@dataclass(frozen=True)
class OrderEntry:
    """Processing of one order: duration and cumulative end time."""

    order: Order
    duration: int
    end: int


@dataclass(frozen=True)
class SwitchoverEntry:
    """Changeover between two consecutive orders on one machine."""

    duration: int
    end: int
    costly: bool


TimelineEntry = Union[OrderEntry, SwitchoverEntry]
Timeline = dict[str, list[TimelineEntry]]  # machine_id -> entries


@dataclass(frozen=True)
class MachineScore:
    tardiness: int = 0
    costly_switchovers: int = 0
    end_time: int = 0


@dataclass(frozen=True)
class Score:
    """Multi-objective evaluation of a schedule.

    Fields:
        total_tardiness: Sum over orders of max(0, completion - due).
        costly_switchovers: Number of costly switchovers.
        makespan: Maximum machine completion time.
        machines_at_makespan: Machines whose completion equals the makespan.
        machine_scores: Per-machine breakdown reused by incremental scoring.
    """

    total_tardiness: int
    costly_switchovers: int
    makespan: int
    machines_at_makespan: int
    machine_scores: Mapping[str, MachineScore] = field(repr=False)

    @classmethod
    def zero(cls, machines: tuple[Machine, ...] | list[Machine]) -> "Score":
        return cls(
            total_tardiness=0,
            costly_switchovers=0,
            makespan=0,
            machines_at_makespan=0,
            machine_scores={m.machine_id: MachineScore() for m in machines},
        )

    def summary(self) -> dict[str, int]:
        return {
            "total_tardiness": self.total_tardiness,
            "costly_switchovers": self.costly_switchovers,
            "makespan": self.makespan,
            "machines_at_makespan": self.machines_at_makespan,
        }
