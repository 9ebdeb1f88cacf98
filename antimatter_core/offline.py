"""
Offline Time Bank Module

Banks real elapsed time while the game is closed and lets the player spend it
as a temporary time multiplier. Banked time is stored after the efficiency
ratio is applied and is capped at the bank's maximum.

Upgrades to the cap and the efficiency ratio are paid in banked seconds.
"""

from dataclasses import dataclass
from enum import Enum
import logging


logger = logging.getLogger("antimatter.offline")

BASE_MAX_SECONDS = 86400.0  # 24 hours
BASE_EFFICIENCY = 0.5
MIN_BOOST_MULTIPLIER = 1.0
MAX_BOOST_MULTIPLIER = 20.0

MAX_TIME_STEP_SECONDS = 21600.0  # each level adds 6 hours of capacity
MAX_TIME_BASE_COST = 72000.0  # 20 hours
MAX_TIME_COST_INCREASE = 21600.0
EFFICIENCY_STEP = 0.05
EFFICIENCY_BASE_COST = 43200.0  # 12 hours
EFFICIENCY_COST_INCREASE = 21600.0
EFFICIENCY_MAX_LEVEL = 10


class OfflineBankState(Enum):
    """Boost lifecycle"""
    IDLE = "idle"
    BOOST_ACTIVE = "boost_active"


@dataclass
class OfflineBank:
    """
    Banked offline seconds and the boost that consumes them.

    While a boost runs, banked time drains at multiplier / efficiency seconds
    per real second and the boost's own countdown drains at one second per
    second; whichever reaches zero first ends the boost.
    """
    stored_seconds: float = 0.0
    base_max_seconds: float = BASE_MAX_SECONDS
    base_efficiency: float = BASE_EFFICIENCY
    max_time_upgrade_level: int = 0
    efficiency_upgrade_level: int = 0
    boost_active: bool = False
    boost_multiplier: float = 1.0
    boost_remaining_seconds: float = 0.0

    @property
    def state(self) -> OfflineBankState:
        return OfflineBankState.BOOST_ACTIVE if self.boost_active else OfflineBankState.IDLE

    @property
    def max_seconds(self) -> float:
        return self.base_max_seconds + self.max_time_upgrade_level * MAX_TIME_STEP_SECONDS

    @property
    def efficiency_ratio(self) -> float:
        return min(self.base_efficiency + self.efficiency_upgrade_level * EFFICIENCY_STEP, 1.0)

    def accumulate_offline_time(self, real_seconds: float) -> float:
        """
        Bank `real_seconds` of elapsed time at the current efficiency.

        Returns:
            Seconds actually added after the efficiency ratio and the cap
        """
        if real_seconds <= 0:
            return 0.0

        previous = self.stored_seconds
        self.stored_seconds = min(previous + real_seconds * self.efficiency_ratio, self.max_seconds)
        return max(self.stored_seconds - previous, 0.0)

    # Boost

    def boost_duration(self, multiplier: float) -> float:
        """Seconds a boost at `multiplier` would last if started now"""
        if multiplier <= 0:
            return 0.0
        return self.stored_seconds / multiplier

    def can_start_boost(self, multiplier: float) -> bool:
        if self.boost_active:
            return False
        if multiplier < MIN_BOOST_MULTIPLIER or multiplier > MAX_BOOST_MULTIPLIER:
            return False
        if self.stored_seconds <= 0:
            return False
        return self.boost_duration(multiplier) > 0

    def start_boost(self, multiplier: float) -> bool:
        if not self.can_start_boost(multiplier):
            return False

        self.boost_active = True
        self.boost_multiplier = multiplier
        self.boost_remaining_seconds = self.boost_duration(multiplier)

        logger.info(f"Boost x{multiplier} started, duration {self.boost_remaining_seconds / 60:.2f} min")
        return True

    def stop_boost(self) -> bool:
        if not self.boost_active:
            return False

        self.boost_active = False
        self.boost_multiplier = 1.0
        self.boost_remaining_seconds = 0.0

        logger.info("Boost stopped")
        return True

    def advance(self, delta_seconds: float) -> bool:
        """
        Consume banked time for one tick.

        Returns:
            True if the boost ran out during this tick
        """
        if not self.boost_active or delta_seconds <= 0:
            return False

        consumption_rate = self.boost_multiplier / self.efficiency_ratio
        self.stored_seconds -= consumption_rate * delta_seconds
        self.boost_remaining_seconds -= delta_seconds

        if self.stored_seconds <= 0 or self.boost_remaining_seconds <= 0:
            self.stored_seconds = max(0.0, self.stored_seconds)
            self.stop_boost()
            return True

        return False

    def active_multiplier(self) -> float:
        """Time multiplier the host applies to production this tick"""
        return self.boost_multiplier if self.boost_active else 1.0

    # Upgrades

    def max_time_upgrade_cost(self) -> float:
        return MAX_TIME_BASE_COST + self.max_time_upgrade_level * MAX_TIME_COST_INCREASE

    def efficiency_upgrade_cost(self) -> float:
        return EFFICIENCY_BASE_COST + self.efficiency_upgrade_level * EFFICIENCY_COST_INCREASE

    def can_upgrade_max_time(self) -> bool:
        return self.stored_seconds >= self.max_time_upgrade_cost()

    def can_upgrade_efficiency(self) -> bool:
        if self.efficiency_upgrade_level >= EFFICIENCY_MAX_LEVEL:
            return False
        return self.stored_seconds >= self.efficiency_upgrade_cost()

    def upgrade_max_time(self) -> bool:
        if not self.can_upgrade_max_time():
            return False

        cost = self.max_time_upgrade_cost()
        self.stored_seconds -= cost
        self.max_time_upgrade_level += 1

        logger.info(f"Max offline time upgraded to level {self.max_time_upgrade_level}, "
                    f"cap {self.max_seconds / 3600:.0f}h, cost {cost / 3600:.0f}h")
        return True

    def upgrade_efficiency(self) -> bool:
        if not self.can_upgrade_efficiency():
            return False

        cost = self.efficiency_upgrade_cost()
        self.stored_seconds -= cost
        self.efficiency_upgrade_level += 1

        logger.info(f"Offline efficiency upgraded to level {self.efficiency_upgrade_level}, "
                    f"ratio {self.efficiency_ratio:.0%}, cost {cost / 3600:.0f}h")
        return True

    def restore(self, stored_seconds: float, max_time_upgrade_level: int, efficiency_upgrade_level: int) -> None:
        """Load saved levels; the cap and ratio are derived from the levels"""
        self.max_time_upgrade_level = max(0, max_time_upgrade_level)
        self.efficiency_upgrade_level = max(0, min(efficiency_upgrade_level, EFFICIENCY_MAX_LEVEL))
        self.stored_seconds = max(0.0, min(stored_seconds, self.max_seconds))
        self.boost_active = False
        self.boost_multiplier = 1.0
        self.boost_remaining_seconds = 0.0
