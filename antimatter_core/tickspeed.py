"""
Tickspeed Module

Tickspeed levels bought with antimatter speed up simulated time. Each level
multiplies elapsed time by the base speed (1.1 plus any prestige boost) and
costs ten times the previous one.
"""

from dataclasses import dataclass
import logging

from .bignumber import BigNumber, Numeric, ZERO, ONE
from .dimensions import PurchaseResult, DEFAULT_PURCHASE_CAP


logger = logging.getLogger("antimatter.tickspeed")

BASE_PRICE = BigNumber(100)
PRICE_MULTIPLIER = BigNumber(10)
BASE_SPEED = 1.1


@dataclass
class Tickspeed:
    """Tickspeed level and the milestone-gated bulk purchase switch"""
    level: int = 0
    bulk_buy_unlocked: bool = False
    purchase_cap: int = DEFAULT_PURCHASE_CAP

    def price_at(self, level: int) -> BigNumber:
        return BASE_PRICE * PRICE_MULTIPLIER.pow(level)

    def price(self) -> BigNumber:
        """Price of the next level"""
        return self.price_at(self.level)

    def multiplier(self, boost: float = 0.0) -> BigNumber:
        """
        Time multiplier for the current level.

        Args:
            boost: Additive bonus on the 1.1 base from prestige upgrades
        """
        if self.level == 0:
            return ONE
        return BigNumber(BASE_SPEED + boost).pow(self.level)

    def can_buy(self, currency: Numeric) -> bool:
        return BigNumber.of(currency) >= self.price()

    def buy(self, currency: Numeric) -> PurchaseResult:
        """Buy one level; the caller deducts `spent` from its currency"""
        if not self.can_buy(currency):
            return PurchaseResult()

        price = self.price()
        self.level += 1
        return PurchaseResult(count=1, spent=price)

    def max_affordable(self, currency: Numeric) -> int:
        currency = BigNumber.of(currency)
        total = ZERO
        count = 0

        while count < self.purchase_cap:
            next_cost = self.price_at(self.level + count)
            if total + next_cost > currency:
                break
            total = total + next_cost
            count += 1

        return count

    def bulk_cost(self, count: int) -> BigNumber:
        total = ZERO
        for offset in range(count):
            total = total + self.price_at(self.level + offset)
        return total

    def buy_max(self, currency: Numeric) -> PurchaseResult:
        """Buy every affordable level; only available once bulk buying is unlocked"""
        if not self.bulk_buy_unlocked:
            return PurchaseResult()

        count = self.max_affordable(currency)
        if count <= 0:
            return PurchaseResult()

        total = self.bulk_cost(count)
        self.level += count
        logger.debug(f"Bulk bought {count} tickspeed levels, new level {self.level}")
        return PurchaseResult(count=count, spent=total)

    def reset(self) -> None:
        """Prestige reset; the bulk unlock is a permanent milestone reward"""
        self.level = 0
