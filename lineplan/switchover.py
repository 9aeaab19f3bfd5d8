"""Changeover cost between two consecutive orders on the same machine.

Two independent rules make a switchover costly:
    - a color change *into* the neutral color (residue of a darker run has
      to be flushed out);
    - a change from an allergen-bearing product to an allergen-free one
      (the line needs a cleaning step).
Either rule alone is enough; both together are still charged once.
"""

from __future__ import annotations

from dataclasses import dataclass

from .models import Color, Order

NORMAL_SWITCHOVER_DURATION = 5
COSTLY_SWITCHOVER_DURATION = 25


@dataclass(frozen=True)
class Switchover:
    duration: int
    costly: bool


@dataclass(frozen=True)
class SwitchoverPolicy:
    normal_duration: int = NORMAL_SWITCHOVER_DURATION
    costly_duration: int = COSTLY_SWITCHOVER_DURATION
    neutral_color: Color = Color.WHITE

    def __post_init__(self) -> None:
        if self.normal_duration < 0 or self.costly_duration < 0:
            raise ValueError("Switchover durations must be non-negative")


DEFAULT_POLICY = SwitchoverPolicy()


def is_costly(previous: Order, following: Order, policy: SwitchoverPolicy = DEFAULT_POLICY) -> bool:
    neutral = policy.neutral_color
    expensive_color_switch = (
        previous.product.color != neutral and following.product.color == neutral
    )
    switch_to_allergen_free = previous.product.allergens and not following.product.allergens
    return expensive_color_switch or switch_to_allergen_free


def switchover_between(
    previous: Order,
    following: Order,
    policy: SwitchoverPolicy = DEFAULT_POLICY,
) -> Switchover:
    """Return the switchover incurred when ``following`` runs right after ``previous``.

    Not symmetric: ``switchover_between(a, b)`` and ``switchover_between(b, a)``
    generally differ.
    """
    if is_costly(previous, following, policy):
        return Switchover(duration=policy.costly_duration, costly=True)
    return Switchover(duration=policy.normal_duration, costly=False)
