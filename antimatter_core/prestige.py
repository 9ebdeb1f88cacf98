"""
Prestige Engine Module

Evaluates reset eligibility, pays out prestige points, resets the dimension
ledgers and keeps the permanent bookkeeping that survives a reset: points,
upgrade levels and milestone unlocks.

Upgrade effects are tagged variants chosen when the catalogue is built, so
production math never dispatches on upgrade id strings.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple, Union
import logging
import math

from .bignumber import BigNumber, Numeric, ONE
from .dimensions import DimensionArena, MultiplierSource, TIER_COUNT
from .tickspeed import Tickspeed

if TYPE_CHECKING:
    from .autobuyers import AutoBuyers


logger = logging.getLogger("antimatter.prestige")

DEFAULT_THRESHOLD = BigNumber(1e10)
POINTS_EXPONENT_STEP = 10  # one point per 10 orders of magnitude
UPGRADE_COST_GROWTH = 1.3
DEFAULT_MAX_LEVEL = 999


# Upgrade effect variants

@dataclass(frozen=True)
class TickspeedBoost:
    """Adds to the 1.1 tickspeed base"""
    per_level: float = 0.01

    def contribution(self, level: int) -> float:
        return self.per_level * level


@dataclass(frozen=True)
class DimensionMultiplier:
    """Doubles production of a single tier per level"""
    tier: int
    factor: float = 2.0

    def contribution(self, level: int) -> BigNumber:
        return BigNumber(self.factor).pow(level)


@dataclass(frozen=True)
class BulkBonus:
    """Adds to the per-set bulk multiplier (base 2)"""
    per_level: float = 0.05

    def contribution(self, level: int) -> float:
        return self.per_level * level


UpgradeEffect = Union[TickspeedBoost, DimensionMultiplier, BulkBonus]


@dataclass
class PrestigeUpgrade:
    """Permanent upgrade bought with prestige points"""
    id: str
    name: str
    description: str
    base_cost: int
    effect: UpgradeEffect
    max_level: int = DEFAULT_MAX_LEVEL
    level: int = 0

    def is_maxed(self) -> bool:
        return self.level >= self.max_level

    def next_cost(self) -> Optional[int]:
        """Points for the next level (30% more per level, floored); None once maxed"""
        if self.is_maxed():
            return None
        return math.floor(self.base_cost * UPGRADE_COST_GROWTH ** self.level)

    def can_afford(self, points: int) -> bool:
        cost = self.next_cost()
        return cost is not None and points >= cost

    def purchase(self) -> None:
        if not self.is_maxed():
            self.level += 1

    def current_effect(self):
        return self.effect.contribution(self.level)


# Milestone reward variants

@dataclass(frozen=True)
class AutoBuyerUnlock:
    """Unlocks the auto-buyers of the listed tiers"""
    tiers: Tuple[int, ...]

    def apply(self, autobuyers: 'AutoBuyers', tickspeed: Tickspeed) -> None:
        for tier in self.tiers:
            autobuyers.unlock(tier)


@dataclass(frozen=True)
class TickspeedBulkUnlock:
    """Allows buying every affordable tickspeed level at once"""

    def apply(self, autobuyers: 'AutoBuyers', tickspeed: Tickspeed) -> None:
        tickspeed.bulk_buy_unlocked = True


MilestoneReward = Union[AutoBuyerUnlock, TickspeedBulkUnlock]


@dataclass
class Milestone:
    """Permanent unlock earned by total prestige count"""
    id: str
    name: str
    required_prestiges: int
    reward: MilestoneReward
    unlocked: bool = False

    def progress(self, total_prestiges: int) -> float:
        """Completion ratio in [0, 1]"""
        if self.unlocked:
            return 1.0
        return min(total_prestiges / self.required_prestiges, 1.0)


@dataclass(frozen=True)
class PrestigeResult:
    """Outcome of a prestige attempt"""
    success: bool
    points_gained: int = 0
    total_prestiges: int = 0
    milestones_unlocked: List[Milestone] = field(default_factory=list)
    reason: str = ""

    def __bool__(self) -> bool:
        return self.success


def default_upgrades() -> List[PrestigeUpgrade]:
    """The upgrade catalogue: tickspeed boost, one multiplier per tier, bulk bonus"""
    upgrades = [
        PrestigeUpgrade(
            id="tickspeed_boost",
            name="Tickspeed Boost",
            description="+0.01 to the tickspeed base per level",
            base_cost=1,
            effect=TickspeedBoost(),
            max_level=10
        )
    ]

    for tier in range(1, TIER_COUNT + 1):
        upgrades.append(PrestigeUpgrade(
            id=f"dim{tier}_mult",
            name=f"Dimension {tier} Multiplier",
            description=f"x2 production for dimension {tier} per level",
            base_cost=tier,
            effect=DimensionMultiplier(tier)
        ))

    upgrades.append(PrestigeUpgrade(
        id="bulk_bonus",
        name="Bulk Bonus",
        description="+0.05 to the per-set production multiplier per level",
        base_cost=3,
        effect=BulkBonus(),
        max_level=20
    ))

    return upgrades


def default_milestones() -> List[Milestone]:
    return [
        Milestone("autobuyers_1_2", "Automation I", 1, AutoBuyerUnlock((1, 2))),
        Milestone("autobuyers_3_4", "Automation II", 2, AutoBuyerUnlock((3, 4))),
        Milestone("tickspeed_bulk", "Bulk Tickspeed", 5, TickspeedBulkUnlock()),
        Milestone("autobuyers_5_8", "Automation III", 10, AutoBuyerUnlock((5, 6, 7, 8))),
    ]


class PrestigeEngine(MultiplierSource):
    """
    Prestige points, permanent upgrades and milestones.

    Implements MultiplierSource so the dimension production formula can take
    the per-tier and bulk contributions without reaching for it globally.
    """

    def __init__(
        self,
        threshold: Numeric = DEFAULT_THRESHOLD,
        upgrades: Optional[List[PrestigeUpgrade]] = None,
        milestones: Optional[List[Milestone]] = None,
        points: int = 0,
        total_prestiges: int = 0
    ):
        self.threshold = BigNumber.of(threshold)
        self.points = points
        self.total_prestiges = total_prestiges
        self.upgrades: Dict[str, PrestigeUpgrade] = {
            upgrade.id: upgrade for upgrade in (upgrades if upgrades is not None else default_upgrades())
        }
        self.milestones: List[Milestone] = milestones if milestones is not None else default_milestones()

        # Group upgrades by effect variant once
        self._tier_upgrades: Dict[int, List[PrestigeUpgrade]] = {}
        self._bulk_upgrades: List[PrestigeUpgrade] = []
        self._tickspeed_upgrades: List[PrestigeUpgrade] = []
        for upgrade in self.upgrades.values():
            if isinstance(upgrade.effect, DimensionMultiplier):
                self._tier_upgrades.setdefault(upgrade.effect.tier, []).append(upgrade)
            elif isinstance(upgrade.effect, BulkBonus):
                self._bulk_upgrades.append(upgrade)
            elif isinstance(upgrade.effect, TickspeedBoost):
                self._tickspeed_upgrades.append(upgrade)

    # MultiplierSource

    def tier_multiplier(self, tier: int) -> BigNumber:
        result = ONE
        for upgrade in self._tier_upgrades.get(tier, []):
            result = result * upgrade.current_effect()
        return result

    def bulk_bonus(self) -> float:
        return sum(upgrade.current_effect() for upgrade in self._bulk_upgrades)

    def tickspeed_boost(self) -> float:
        return sum(upgrade.current_effect() for upgrade in self._tickspeed_upgrades)

    # Reset

    def can_prestige(self, currency: Numeric) -> bool:
        return BigNumber.of(currency) >= self.threshold

    def points_gained_if_prestiged_now(self, currency: Numeric) -> int:
        """floor(exponent / 10), never negative; 1e10 is worth exactly one point"""
        currency = BigNumber.of(currency)
        if not currency.is_positive():
            return 0
        return max(0, currency.exponent // POINTS_EXPONENT_STEP)

    def do_prestige(
        self,
        currency: Numeric,
        dimensions: DimensionArena,
        tickspeed: Tickspeed
    ) -> PrestigeResult:
        """
        Bank points and reset the run.

        Resets every dimension and the tickspeed level. Points, upgrade
        levels and milestones are untouched. The caller restores its root
        currency to the starting value when the result is successful.
        """
        if not self.can_prestige(currency):
            return PrestigeResult(
                success=False,
                total_prestiges=self.total_prestiges,
                reason=f"Currency below prestige threshold {self.threshold}"
            )

        gained = self.points_gained_if_prestiged_now(currency)
        self.points += gained
        self.total_prestiges += 1

        dimensions.reset_all()
        tickspeed.reset()

        unlocked = self.check_milestones()

        logger.info(f"Prestige #{self.total_prestiges}: +{gained} points (total {self.points})")

        return PrestigeResult(
            success=True,
            points_gained=gained,
            total_prestiges=self.total_prestiges,
            milestones_unlocked=unlocked
        )

    # Upgrades

    def get_upgrade(self, upgrade_id: str) -> PrestigeUpgrade:
        """
        Raises:
            KeyError: If the upgrade id is unknown
        """
        if upgrade_id not in self.upgrades:
            raise KeyError(f"Unknown prestige upgrade '{upgrade_id}'")
        return self.upgrades[upgrade_id]

    def can_buy_upgrade(self, upgrade_id: str) -> bool:
        upgrade = self.upgrades.get(upgrade_id)
        return upgrade is not None and upgrade.can_afford(self.points)

    def buy_upgrade(self, upgrade_id: str) -> bool:
        """Spend points on the next level; False when unaffordable or maxed"""
        if not self.can_buy_upgrade(upgrade_id):
            return False

        upgrade = self.upgrades[upgrade_id]
        cost = upgrade.next_cost()
        self.points -= cost
        upgrade.purchase()

        logger.info(f"Bought {upgrade_id} level {upgrade.level} for {cost} points")
        return True

    def upgrade_levels(self) -> Dict[str, int]:
        return {upgrade_id: upgrade.level for upgrade_id, upgrade in self.upgrades.items()}

    def set_upgrade_levels(self, levels: Dict[str, int]) -> None:
        """Restore saved levels; unknown ids are ignored, levels clamp to max"""
        for upgrade_id, level in levels.items():
            upgrade = self.upgrades.get(upgrade_id)
            if upgrade is None:
                logger.warning(f"Ignoring unknown prestige upgrade '{upgrade_id}' in save")
                continue
            upgrade.level = max(0, min(level, upgrade.max_level))

    # Milestones

    def check_milestones(self) -> List[Milestone]:
        """Unlock every milestone whose requirement is met; returns the new ones"""
        newly_unlocked = []
        for milestone in self.milestones:
            if not milestone.unlocked and self.total_prestiges >= milestone.required_prestiges:
                milestone.unlocked = True
                newly_unlocked.append(milestone)
                logger.info(f"Milestone '{milestone.id}' unlocked")
        return newly_unlocked

    def unlocked_milestones(self) -> List[Milestone]:
        return [milestone for milestone in self.milestones if milestone.unlocked]

    def is_milestone_unlocked(self, milestone_id: str) -> bool:
        return any(m.id == milestone_id and m.unlocked for m in self.milestones)
