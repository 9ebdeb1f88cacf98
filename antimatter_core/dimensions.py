"""
Dimension Ledger Module

Cost curve, production formula and purchase mutations for the eight
dimension tiers. Prices are always derived from the bought count and never
stored, so the ledger cannot drift out of sync with its own history.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional
import logging

from .bignumber import BigNumber, Numeric, ZERO, ONE, TEN


logger = logging.getLogger("antimatter.dimensions")

TIER_COUNT = 8
SET_SIZE = 10
UNLOCK_THRESHOLD = 40  # bought count of the previous tier
ALWAYS_UNLOCKED_TIERS = 2
BASE_BULK_MULTIPLIER = 2.0
DEFAULT_PURCHASE_CAP = 1000

# Per-tier base cost and price multiplier applied every completed set
BASE_COSTS = (1e1, 1e3, 1e10, 1e20, 1e35, 1e60, 1e80, 1e100)
COST_INCREASE_PER_10 = (1e3, 1e4, 1e5, 1e6, 1e7, 1e8, 1e9, 1e10)


class MultiplierSource(ABC):
    """Anything that contributes permanent production multipliers to a tier"""

    @abstractmethod
    def tier_multiplier(self, tier: int) -> BigNumber:
        """Multiplicative production factor for the given tier"""
        pass

    def bulk_bonus(self) -> float:
        """Additive bonus on the per-set bulk multiplier (default none)"""
        return 0.0


@dataclass(frozen=True)
class PurchaseResult:
    """Outcome of a purchase; falsy when nothing was bought"""
    count: int = 0
    spent: BigNumber = ZERO

    @property
    def success(self) -> bool:
        return self.count > 0

    def __bool__(self) -> bool:
        return self.success


@dataclass
class Dimension:
    """
    One dimension slot.

    The n-th unit's price depends only on how many units were bought before
    it: units come in sets of 10 that share a price, and each completed set
    multiplies the price by cost_increase_per_10.
    """
    tier: int
    base_cost: BigNumber
    cost_increase_per_10: BigNumber
    amount: BigNumber = ZERO
    bought: int = 0
    multiplier: BigNumber = ONE
    unlocked: bool = False
    purchase_cap: int = DEFAULT_PURCHASE_CAP

    def __post_init__(self):
        if self.tier < 1 or self.tier > TIER_COUNT:
            raise ValueError(f"Dimension tier must be between 1 and {TIER_COUNT}, got {self.tier}")
        if self.bought < 0:
            raise ValueError("Bought count cannot be negative")

    @classmethod
    def for_tier(cls, tier: int, purchase_cap: int = DEFAULT_PURCHASE_CAP) -> 'Dimension':
        """Create a fresh dimension from the per-tier cost table"""
        if tier < 1 or tier > TIER_COUNT:
            raise ValueError(f"Dimension tier must be between 1 and {TIER_COUNT}, got {tier}")
        return cls(
            tier=tier,
            base_cost=BigNumber(BASE_COSTS[tier - 1]),
            cost_increase_per_10=BigNumber(COST_INCREASE_PER_10[tier - 1]),
            unlocked=tier <= ALWAYS_UNLOCKED_TIERS,
            purchase_cap=purchase_cap
        )

    # Cost model

    def current_set(self) -> int:
        """Index of the set the next unit belongs to"""
        return self.bought // SET_SIZE

    def _unit_cost_at(self, bought: int) -> BigNumber:
        sets = bought // SET_SIZE
        return self.base_cost * self.cost_increase_per_10.pow(sets) / TEN

    def set_cost(self) -> BigNumber:
        """Price of a whole set at the current set index"""
        return self.base_cost * self.cost_increase_per_10.pow(self.current_set())

    def single_unit_cost(self) -> BigNumber:
        """Price of the next unit; constant within a set"""
        return self.set_cost() / TEN

    def remaining_until_next_set(self) -> int:
        return SET_SIZE - (self.bought % SET_SIZE)

    def cost_until_next_set(self) -> BigNumber:
        return self.single_unit_cost() * self.remaining_until_next_set()

    def cost_for_count(self, count: int) -> BigNumber:
        """Exact total price of the next `count` units, stepping across set boundaries"""
        if count <= 0:
            return ZERO

        total = ZERO
        for offset in range(count):
            total = total + self._unit_cost_at(self.bought + offset)
        return total

    def max_affordable(self, currency: Numeric) -> int:
        """How many units `currency` pays for, capped at the purchase cap"""
        currency = BigNumber.of(currency)
        if currency <= ZERO:
            return 0

        count = 0
        total = ZERO
        while count < self.purchase_cap:
            unit_cost = self._unit_cost_at(self.bought + count)
            if total + unit_cost > currency:
                break
            total = total + unit_cost
            count += 1

        return count

    # Purchases

    def buy(self, count: int = 1) -> None:
        """
        Add `count` units. The caller must already have deducted
        cost_for_count(count) from its currency.
        """
        if count <= 0:
            raise ValueError("Purchase count must be positive")
        self.amount = self.amount + count
        self.bought += count

    def buy_max(self, currency: Numeric) -> PurchaseResult:
        """Buy as many single units as `currency` affords"""
        remaining = BigNumber.of(currency)
        count = 0
        spent = ZERO

        while count < self.purchase_cap:
            unit_cost = self.single_unit_cost()
            if remaining < unit_cost:
                break

            spent = spent + unit_cost
            remaining = remaining - unit_cost
            self.bought += 1
            count += 1

        if count > 0:
            self.amount = self.amount + count

        return PurchaseResult(count=count, spent=spent)

    def buy_until_next_set(self, currency: Numeric) -> PurchaseResult:
        """Complete the current set at its constant price, else buy what is affordable"""
        currency = BigNumber.of(currency)
        remaining = self.remaining_until_next_set()
        total_cost = self.cost_until_next_set()

        if currency >= total_cost:
            self.amount = self.amount + remaining
            self.bought += remaining
            return PurchaseResult(count=remaining, spent=total_cost)

        return self.buy_max(currency)

    # Production

    def production(self, sources: Iterable[MultiplierSource] = ()) -> BigNumber:
        """
        Units of the tier below (or currency, for tier 1) produced per second.

        amount x multiplier x bulk^(bought // 10) x every source's tier factor,
        where bulk is 2 plus the sources' combined bulk bonus.
        """
        sources = list(sources)
        bulk_multiplier = BASE_BULK_MULTIPLIER + sum(source.bulk_bonus() for source in sources)
        bought_bonus = BigNumber(bulk_multiplier).pow(self.bought // SET_SIZE)

        result = self.amount * self.multiplier * bought_bonus
        if result.is_zero():
            return result
        for source in sources:
            result = result * source.tier_multiplier(self.tier)
        return result

    # Lifecycle

    def check_unlock(self, previous: Optional['Dimension']) -> bool:
        """Unlock once the previous tier has 40 purchases; returns True on the transition"""
        if self.unlocked or previous is None:
            return False

        if previous.bought >= UNLOCK_THRESHOLD:
            self.unlocked = True
            logger.info(f"Dimension {self.tier} unlocked")
            return True

        return False

    def reset(self) -> None:
        """Prestige reset: clear progress and re-lock tiers above 2"""
        self.amount = ZERO
        self.bought = 0
        self.multiplier = ONE
        if self.tier > ALWAYS_UNLOCKED_TIERS:
            self.unlocked = False

    def apply_permanent_multiplier(self, factor: Numeric) -> None:
        """Compound a permanent multiplier; only grows between resets"""
        factor = BigNumber.of(factor)
        if factor < ONE:
            raise ValueError("Permanent multiplier factor must be at least 1")
        self.multiplier = self.multiplier * factor


@dataclass
class DimensionArena:
    """Fixed set of eight dimension slots addressed by tier (1..8)"""
    slots: List[Dimension] = field(default_factory=list)

    def __post_init__(self):
        if not self.slots:
            self.slots = [Dimension.for_tier(tier) for tier in range(1, TIER_COUNT + 1)]
        if len(self.slots) != TIER_COUNT:
            raise ValueError(f"Arena must hold exactly {TIER_COUNT} dimensions")
        for index, dimension in enumerate(self.slots):
            if dimension.tier != index + 1:
                raise ValueError(f"Slot {index + 1} holds tier {dimension.tier}")

    @classmethod
    def create(cls, purchase_cap: int = DEFAULT_PURCHASE_CAP) -> 'DimensionArena':
        return cls([Dimension.for_tier(tier, purchase_cap) for tier in range(1, TIER_COUNT + 1)])

    def __getitem__(self, tier: int) -> Dimension:
        if not self.is_valid_tier(tier):
            raise ValueError(f"Dimension tier must be between 1 and {TIER_COUNT}, got {tier}")
        return self.slots[tier - 1]

    def get(self, tier: int) -> Optional[Dimension]:
        """Dimension for `tier`, or None when out of range"""
        if not self.is_valid_tier(tier):
            return None
        return self.slots[tier - 1]

    def __iter__(self) -> Iterator[Dimension]:
        return iter(self.slots)

    def __len__(self) -> int:
        return len(self.slots)

    def descending(self) -> Iterator[Dimension]:
        """Highest tier first"""
        return reversed(self.slots)

    @staticmethod
    def is_valid_tier(tier: int) -> bool:
        return isinstance(tier, int) and 1 <= tier <= TIER_COUNT

    def reset_all(self) -> None:
        for dimension in self.slots:
            dimension.reset()
