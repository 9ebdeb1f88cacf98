"""
Game Simulation Module

The simulation context: owns the root currency, the dimension arena and
every manager, and exposes the calls a host drives it with. There are no
module-level singletons, so independent simulations can run side by side.

All mutation happens inside tick() or a discrete action call. A host that
calls in from several threads must serialize those calls itself.
"""

from typing import Any, Dict, List, Optional
import logging

from .autobuyers import AutoBuyers, BuyMode
from .bignumber import BigNumber, ZERO
from .cascade import ProductionCascade, TickResult
from .config import AntimatterConfig, get_config
from .dimensions import Dimension, DimensionArena, PurchaseResult
from .events import EventDispatcher, GameEvent
from .logging_config import log_action
from .offline import OfflineBank
from .prestige import Milestone, PrestigeEngine, PrestigeResult
from .shop import Shop, ShopItem
from .tickspeed import Tickspeed


logger = logging.getLogger("antimatter.simulation")


class GameSimulation:
    """Single-writer context for one game"""

    def __init__(self, config: Optional[AntimatterConfig] = None, events: Optional[EventDispatcher] = None):
        self.config = config or get_config()
        self.events = events or EventDispatcher()
        self.starting_antimatter = BigNumber.of(self.config.starting_antimatter)
        self._build_components()

    def _build_components(self) -> None:
        cap = self.config.purchase_iteration_cap

        self.antimatter = self.starting_antimatter
        self.dimensions = DimensionArena.create(cap)
        self.tickspeed = Tickspeed(purchase_cap=cap)
        self.prestige = PrestigeEngine(threshold=BigNumber.of(self.config.prestige_threshold))
        self.shop = Shop(premium_currency=self.config.shop_starting_premium_currency)
        self.offline = OfflineBank(
            base_max_seconds=self.config.offline_base_max_seconds,
            base_efficiency=self.config.offline_base_efficiency
        )
        self.autobuyers = AutoBuyers()
        self.cascade = ProductionCascade(self.dimensions, [self.prestige, self.shop])

    def replace_state(self, other: 'GameSimulation') -> None:
        """Adopt every component of `other`; events and config stay ours"""
        self.antimatter = other.antimatter
        self.dimensions = other.dimensions
        self.tickspeed = other.tickspeed
        self.prestige = other.prestige
        self.shop = other.shop
        self.offline = other.offline
        self.autobuyers = other.autobuyers
        self.cascade = other.cascade

    @property
    def infinity_reached(self) -> bool:
        return self.cascade.infinity_reached

    # Time

    def tickspeed_multiplier(self) -> BigNumber:
        return self.tickspeed.multiplier(self.prestige.tickspeed_boost())

    def effective_delta(self, delta_seconds: float) -> BigNumber:
        """Real seconds scaled by tickspeed and the active offline boost"""
        return BigNumber(delta_seconds) * self.tickspeed_multiplier() * self.offline.active_multiplier()

    def tick(self, delta_seconds: float) -> TickResult:
        """
        Advance the whole game by `delta_seconds` of real time.

        The offline boost multiplier in effect at the start of the tick
        applies to the full tick, then banked time is consumed. Auto-buyers
        run after production.
        """
        if self.infinity_reached or delta_seconds <= 0:
            return TickResult(currency=self.antimatter, infinity_reached=self.infinity_reached, advanced=False)

        effective_dt = self.effective_delta(delta_seconds)

        if self.offline.advance(delta_seconds):
            self.events.emit(GameEvent.BOOST_ENDED, stored_seconds=self.offline.stored_seconds)

        result = self.cascade.tick(self.antimatter, effective_dt)
        self.antimatter = result.currency

        for tier in result.unlocked_tiers:
            self.events.emit(GameEvent.DIMENSION_UNLOCKED, tier=tier)

        if result.infinity_reached:
            self.offline.stop_boost()
            self.events.emit(GameEvent.INFINITY_REACHED, antimatter=str(self.antimatter))
            return result

        self.autobuyers.update(delta_seconds, self)
        return result

    # Currency helpers

    def _spend(self, amount: BigNumber) -> None:
        remaining = self.antimatter - amount
        # Rounding in long purchase sums can leave a hair below zero
        self.antimatter = remaining if not remaining.is_negative() else ZERO

    def _frozen(self, action: str) -> bool:
        """True (and logged) once infinity is reached; state no longer changes"""
        if self.infinity_reached:
            logger.debug(f"{action} rejected: infinity reached")
            return True
        return False

    def _purchasable(self, tier: int, action: str) -> Optional[Dimension]:
        if self._frozen(action):
            return None

        dimension = self.dimensions.get(tier)
        if dimension is None:
            logger.debug(f"{action} rejected: no dimension tier {tier}")
            return None
        if not dimension.unlocked:
            logger.debug(f"{action} rejected: dimension {tier} is locked")
            return None
        return dimension

    def _log_purchase(self, action: str, tier: int, result: PurchaseResult) -> None:
        log_action(
            logger, "debug",
            f"Bought {result.count}x dimension {tier} for {result.spent}",
            action=action,
            resource=f"dimension:{tier}",
            extra={"count": result.count, "spent": str(result.spent), "antimatter": str(self.antimatter)}
        )

    # Dimension purchases

    def buy_dimension(self, tier: int, count: int = 1) -> PurchaseResult:
        """Buy exactly `count` units or nothing"""
        dimension = self._purchasable(tier, "buy_dimension")
        if dimension is None:
            return PurchaseResult()

        if count <= 0 or count > dimension.purchase_cap:
            logger.debug(f"buy_dimension rejected: invalid count {count}")
            return PurchaseResult()

        cost = dimension.cost_for_count(count)
        if self.antimatter < cost:
            logger.debug(f"buy_dimension rejected: {count}x dimension {tier} costs {cost}, have {self.antimatter}")
            return PurchaseResult()

        self._spend(cost)
        dimension.buy(count)

        result = PurchaseResult(count=count, spent=cost)
        self._log_purchase("buy_dimension", tier, result)
        return result

    def buy_max_dimension(self, tier: int) -> PurchaseResult:
        dimension = self._purchasable(tier, "buy_max_dimension")
        if dimension is None:
            return PurchaseResult()

        result = dimension.buy_max(self.antimatter)
        if result:
            self._spend(result.spent)
            self._log_purchase("buy_max_dimension", tier, result)
        return result

    def buy_dimension_until_next_set(self, tier: int) -> PurchaseResult:
        dimension = self._purchasable(tier, "buy_dimension_until_next_set")
        if dimension is None:
            return PurchaseResult()

        result = dimension.buy_until_next_set(self.antimatter)
        if result:
            self._spend(result.spent)
            self._log_purchase("buy_dimension_until_next_set", tier, result)
        return result

    # Tickspeed

    def buy_tickspeed(self) -> PurchaseResult:
        if self.infinity_reached:
            return PurchaseResult()

        result = self.tickspeed.buy(self.antimatter)
        if result:
            self._spend(result.spent)
        return result

    def buy_tickspeed_max(self) -> PurchaseResult:
        if self.infinity_reached:
            return PurchaseResult()

        result = self.tickspeed.buy_max(self.antimatter)
        if result:
            self._spend(result.spent)
        return result

    # Prestige

    def can_prestige(self) -> bool:
        return not self.infinity_reached and self.prestige.can_prestige(self.antimatter)

    def prestige_points_preview(self) -> int:
        return self.prestige.points_gained_if_prestiged_now(self.antimatter)

    def do_prestige(self) -> PrestigeResult:
        """
        Reset the run for prestige points.

        Dimensions, tickspeed level and currency reset; auto-buyers are
        switched off but stay unlocked. Upgrades, milestones, shop levels and
        offline upgrades are permanent.
        """
        if self.infinity_reached:
            return PrestigeResult(success=False, total_prestiges=self.prestige.total_prestiges,
                                  reason="Infinity reached")

        result = self.prestige.do_prestige(self.antimatter, self.dimensions, self.tickspeed)
        if not result:
            logger.debug(f"do_prestige rejected: {result.reason}")
            return result

        self.antimatter = self.starting_antimatter
        self.autobuyers.reset()
        self._apply_milestones(result.milestones_unlocked, announce=True)

        log_action(
            logger, "info",
            f"Prestige completed: +{result.points_gained} points",
            action="prestige",
            resource="prestige",
            extra={"points": self.prestige.points, "total_prestiges": result.total_prestiges}
        )
        self.events.emit(
            GameEvent.PRESTIGE_COMPLETED,
            points_gained=result.points_gained,
            points=self.prestige.points,
            total_prestiges=result.total_prestiges
        )
        return result

    def _apply_milestones(self, milestones: List[Milestone], announce: bool) -> None:
        for milestone in milestones:
            milestone.reward.apply(self.autobuyers, self.tickspeed)
            if announce:
                self.events.emit(GameEvent.MILESTONE_UNLOCKED, milestone_id=milestone.id,
                                 required_prestiges=milestone.required_prestiges)

    def refresh_milestones(self) -> List[Milestone]:
        """Unlock milestones earned so far and re-apply every unlocked reward (after a load)"""
        newly_unlocked = self.prestige.check_milestones()
        self._apply_milestones(self.prestige.unlocked_milestones(), announce=False)
        return newly_unlocked

    def buy_prestige_upgrade(self, upgrade_id: str) -> bool:
        if self._frozen("buy_prestige_upgrade"):
            return False
        if upgrade_id not in self.prestige.upgrades:
            logger.debug(f"buy_prestige_upgrade rejected: unknown upgrade '{upgrade_id}'")
            return False
        return self.prestige.buy_upgrade(upgrade_id)

    # Offline bank

    def start_offline_boost(self, multiplier: float) -> bool:
        if self.infinity_reached or not self.offline.start_boost(multiplier):
            return False

        self.events.emit(GameEvent.BOOST_STARTED, multiplier=multiplier,
                         duration_seconds=self.offline.boost_remaining_seconds)
        return True

    def stop_offline_boost(self) -> bool:
        if not self.offline.stop_boost():
            return False

        self.events.emit(GameEvent.BOOST_ENDED, stored_seconds=self.offline.stored_seconds)
        return True

    def accumulate_offline_time(self, seconds: float) -> float:
        if self._frozen("accumulate_offline_time"):
            return 0.0
        return self.offline.accumulate_offline_time(seconds)

    def process_offline_elapsed(self, elapsed_seconds: float) -> float:
        """
        Bank time that passed while the game was closed.

        Publishes OFFLINE_PROGRESS when the absence reaches the notification
        threshold (one minute by default).

        Returns:
            Seconds added to the bank
        """
        if elapsed_seconds <= 0 or self._frozen("process_offline_elapsed"):
            return 0.0

        accumulated = self.offline.accumulate_offline_time(elapsed_seconds)
        logger.info(f"Offline for {elapsed_seconds / 3600:.2f}h, banked {accumulated / 3600:.2f}h")

        if elapsed_seconds >= self.config.offline_notification_threshold_seconds:
            self.events.emit(
                GameEvent.OFFLINE_PROGRESS,
                elapsed_seconds=elapsed_seconds,
                accumulated_seconds=accumulated,
                stored_seconds=self.offline.stored_seconds
            )
        return accumulated

    def upgrade_offline_max_time(self) -> bool:
        if self._frozen("upgrade_offline_max_time"):
            return False
        return self.offline.upgrade_max_time()

    def upgrade_offline_efficiency(self) -> bool:
        if self._frozen("upgrade_offline_efficiency"):
            return False
        return self.offline.upgrade_efficiency()

    # Shop and auto-buyers

    def buy_shop_item(self, item: ShopItem) -> bool:
        if self._frozen("buy_shop_item"):
            return False
        return self.shop.buy_item(item)

    def set_autobuyer_enabled(self, tier: int, enabled: bool) -> bool:
        if not DimensionArena.is_valid_tier(tier) or self._frozen("set_autobuyer_enabled"):
            return False
        return self.autobuyers.set_enabled(tier, enabled)

    def set_autobuyer_mode(self, tier: int, mode: BuyMode) -> bool:
        if not DimensionArena.is_valid_tier(tier) or self._frozen("set_autobuyer_mode"):
            return False
        self.autobuyers.set_mode(tier, mode)
        return True

    def upgrade_autobuyer_speed(self) -> bool:
        if self._frozen("upgrade_autobuyer_speed"):
            return False
        return self.autobuyers.upgrade_speed(self.prestige)

    # Queries

    def summary(self) -> Dict[str, Any]:
        """Display-ready view of the current state"""
        return {
            "antimatter": str(self.antimatter),
            "infinity_reached": self.infinity_reached,
            "tickspeed": {
                "level": self.tickspeed.level,
                "multiplier": str(self.tickspeed_multiplier()),
                "price": str(self.tickspeed.price()),
                "bulk_buy_unlocked": self.tickspeed.bulk_buy_unlocked
            },
            "dimensions": [
                {
                    "tier": dimension.tier,
                    "amount": str(dimension.amount),
                    "bought": dimension.bought,
                    "unlocked": dimension.unlocked,
                    "unit_cost": str(dimension.single_unit_cost()),
                    "production": str(dimension.production(self.cascade.sources))
                }
                for dimension in self.dimensions
            ],
            "prestige": {
                "points": self.prestige.points,
                "total_prestiges": self.prestige.total_prestiges,
                "can_prestige": self.can_prestige(),
                "points_if_prestiged": self.prestige_points_preview(),
                "upgrades": self.prestige.upgrade_levels(),
                "milestones": [m.id for m in self.prestige.unlocked_milestones()]
            },
            "offline": {
                "state": self.offline.state.value,
                "stored_seconds": self.offline.stored_seconds,
                "max_seconds": self.offline.max_seconds,
                "efficiency_ratio": self.offline.efficiency_ratio,
                "boost_multiplier": self.offline.active_multiplier(),
                "boost_remaining_seconds": self.offline.boost_remaining_seconds
            },
            "shop": {
                "premium_currency": self.shop.premium_currency,
                "items": self.shop.levels_by_id()
            }
        }
