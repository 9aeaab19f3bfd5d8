"""Named error conditions raised by the planning engine."""

from __future__ import annotations


class InvalidPositionError(IndexError):
    """Insert/remove index out of range or unknown machine (contract violation)."""


class InfeasibleOrderError(ValueError):
    """Order whose product cannot be processed by any machine."""

    def __init__(self, order_id: str, product_id: str) -> None:
        super().__init__(
            f"Order {order_id} is infeasible: no machine can process product {product_id}"
        )
        self.order_id = order_id
        self.product_id = product_id


class ScheduleIntegrityError(ValueError):
    """Schedule does not assign every order exactly once to an eligible machine."""
