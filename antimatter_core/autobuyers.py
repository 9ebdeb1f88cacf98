"""
Auto-Buyer Module

Per-tier purchasers that fire on a fixed interval once unlocked by prestige
milestones. Unlocks and the speed upgrade survive prestige; the on/off
switches do not.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, List
import logging

from .dimensions import TIER_COUNT

if TYPE_CHECKING:
    from .prestige import PrestigeEngine
    from .simulation import GameSimulation


logger = logging.getLogger("antimatter.autobuyers")

BASE_INTERVAL = 1.0
INTERVAL_REDUCTION = 0.1
MIN_INTERVAL = 0.1
SPEED_UPGRADE_COSTS = (5, 10, 15, 25, 40, 60, 90, 130, 180, 250)
MAX_SPEED_LEVEL = len(SPEED_UPGRADE_COSTS)


class BuyMode(Enum):
    SINGLE = "single"
    BULK = "bulk"  # until the next set of 10


@dataclass
class AutoBuyerSlot:
    tier: int
    unlocked: bool = False
    enabled: bool = False
    mode: BuyMode = BuyMode.SINGLE


@dataclass
class AutoBuyers:
    """Auto-buyer slots for tiers 1..8 and their shared timer"""
    slots: List[AutoBuyerSlot] = field(default_factory=lambda: [AutoBuyerSlot(tier) for tier in range(1, TIER_COUNT + 1)])
    speed_upgrade_level: int = 0
    timer: float = 0.0

    def slot(self, tier: int) -> AutoBuyerSlot:
        if tier < 1 or tier > TIER_COUNT:
            raise ValueError(f"Auto-buyer tier must be between 1 and {TIER_COUNT}, got {tier}")
        return self.slots[tier - 1]

    def interval(self) -> float:
        return max(BASE_INTERVAL - self.speed_upgrade_level * INTERVAL_REDUCTION, MIN_INTERVAL)

    def unlock(self, tier: int) -> None:
        slot = self.slot(tier)
        if not slot.unlocked:
            slot.unlocked = True
            logger.info(f"Dimension {tier} auto-buyer unlocked")

    def set_enabled(self, tier: int, enabled: bool) -> bool:
        """Switch an unlocked auto-buyer on or off; False if still locked"""
        slot = self.slot(tier)
        if not slot.unlocked:
            return False
        slot.enabled = enabled
        return True

    def toggle(self, tier: int) -> bool:
        slot = self.slot(tier)
        return self.set_enabled(tier, not slot.enabled)

    def set_mode(self, tier: int, mode: BuyMode) -> None:
        self.slot(tier).mode = mode

    # Speed upgrade

    def speed_upgrade_cost(self) -> int:
        """Prestige points for the next speed level (0 once maxed)"""
        if self.speed_upgrade_level >= MAX_SPEED_LEVEL:
            return 0
        return SPEED_UPGRADE_COSTS[self.speed_upgrade_level]

    def can_upgrade_speed(self, prestige: 'PrestigeEngine') -> bool:
        if self.speed_upgrade_level >= MAX_SPEED_LEVEL:
            return False
        return prestige.points >= self.speed_upgrade_cost()

    def upgrade_speed(self, prestige: 'PrestigeEngine') -> bool:
        if not self.can_upgrade_speed(prestige):
            return False

        cost = self.speed_upgrade_cost()
        prestige.points -= cost
        self.speed_upgrade_level += 1
        logger.info(f"Auto-buyer speed level {self.speed_upgrade_level}, interval {self.interval():.1f}s")
        return True

    # Execution

    def update(self, delta_seconds: float, simulation: 'GameSimulation') -> int:
        """
        Advance the timer and fire every active auto-buyer when it elapses.

        Returns:
            Number of units bought this call
        """
        self.timer += delta_seconds
        if self.timer < self.interval():
            return 0

        self.timer = 0.0
        return self.execute(simulation)

    def execute(self, simulation: 'GameSimulation') -> int:
        bought = 0
        for slot in self.slots:
            if not slot.unlocked or not slot.enabled:
                continue
            if not simulation.dimensions[slot.tier].unlocked:
                continue

            if slot.mode == BuyMode.SINGLE:
                result = simulation.buy_dimension(slot.tier, 1)
            else:
                result = simulation.buy_dimension_until_next_set(slot.tier)
            bought += result.count

        return bought

    def reset(self) -> None:
        """Prestige reset: switch everything off, keep unlocks and speed"""
        for slot in self.slots:
            slot.enabled = False
        self.timer = 0.0
