"""
Production Cascade Module

Advances every dimension and the root currency by one simulated time step.
Tiers are processed from 8 down to 1 and each tier's output is added to the
tier below immediately, so a lower tier produces from its already-updated
amount within the same tick.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Sequence
import logging

from .bignumber import BigNumber, Numeric, INFINITY
from .dimensions import DimensionArena, MultiplierSource, ALWAYS_UNLOCKED_TIERS


logger = logging.getLogger("antimatter.cascade")


@dataclass(frozen=True)
class TickResult:
    """Currency after the tick plus what changed during it"""
    currency: BigNumber
    unlocked_tiers: List[int] = field(default_factory=list)
    infinity_reached: bool = False
    advanced: bool = True


class ProductionCascade:
    """
    Runs production across the dimension arena.

    Once the currency reaches the INFINITY sentinel the cascade latches into
    its terminal state and every later tick is a no-op.
    """

    def __init__(self, dimensions: DimensionArena, sources: Iterable[MultiplierSource] = ()):
        self.dimensions = dimensions
        self.sources: Sequence[MultiplierSource] = list(sources)
        self.infinity_reached = False

    def tick(self, currency: Numeric, effective_dt: Numeric) -> TickResult:
        """
        Advance by `effective_dt` simulated seconds.

        Args:
            currency: Root currency before the tick
            effective_dt: Real delta time already scaled by tickspeed and boosts

        Returns:
            TickResult with the new currency, newly unlocked tiers and whether
            infinity was reached on this tick
        """
        currency = BigNumber.of(currency)
        if self.infinity_reached:
            return TickResult(currency=currency, infinity_reached=True, advanced=False)

        currency = self.produce(currency, effective_dt)
        unlocked = self.check_unlocks()

        if currency >= INFINITY:
            self.infinity_reached = True
            logger.warning("Infinity reached, production suspended")
            return TickResult(currency=INFINITY, unlocked_tiers=unlocked, infinity_reached=True)

        return TickResult(currency=currency, unlocked_tiers=unlocked)

    def produce(self, currency: BigNumber, effective_dt: Numeric) -> BigNumber:
        effective_dt = BigNumber.of(effective_dt)

        for dimension in self.dimensions.descending():
            if not dimension.unlocked or dimension.amount.is_zero():
                continue

            produced = dimension.production(self.sources) * effective_dt

            if dimension.tier == 1:
                currency = currency + produced
            else:
                lower = self.dimensions[dimension.tier - 1]
                lower.amount = lower.amount + produced

        return currency

    def check_unlocks(self) -> List[int]:
        """Run unlock checks for tiers 3-8 against their predecessor"""
        unlocked = []
        for tier in range(ALWAYS_UNLOCKED_TIERS + 1, len(self.dimensions) + 1):
            dimension = self.dimensions[tier]
            if dimension.check_unlock(self.dimensions[tier - 1]):
                unlocked.append(tier)
        return unlocked
