"""
Save Codec Module

Pydantic models for the persisted game state plus the JSON and base64
export/import paths. Where the JSON document ends up (a file, browser
storage, a clipboard) is the host's business.

Loading a save also banks the time that passed since it was written into
the offline time bank.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional
import base64
import binascii
import logging

from pydantic import BaseModel, Field, ValidationError, field_validator

from .autobuyers import BuyMode
from .bignumber import BigNumber, ONE
from .dimensions import TIER_COUNT
from .events import GameEvent
from .logging_config import log_action
from .simulation import GameSimulation


logger = logging.getLogger("antimatter.saves")

SAVE_VERSION = 1


class BigNumberModel(BaseModel):
    mantissa: float = 0.0
    exponent: int = 0

    def to_big_number(self) -> BigNumber:
        return BigNumber(self.mantissa, self.exponent)

    @classmethod
    def from_big_number(cls, value: BigNumber) -> 'BigNumberModel':
        return cls(mantissa=value.mantissa, exponent=value.exponent)


def _non_negative(value: BigNumberModel) -> BigNumberModel:
    if value.to_big_number().is_negative():
        raise ValueError("Amount cannot be negative")
    return value


class DimensionSave(BaseModel):
    tier: int = Field(..., ge=1, le=TIER_COUNT)
    amount: BigNumberModel
    bought: int = Field(0, ge=0)
    unlocked: bool = False
    multiplier: BigNumberModel = Field(default_factory=lambda: BigNumberModel(mantissa=1.0))

    @field_validator('amount')
    @classmethod
    def amount_not_negative(cls, value: BigNumberModel) -> BigNumberModel:
        return _non_negative(value)

    @field_validator('multiplier')
    @classmethod
    def multiplier_at_least_one(cls, value: BigNumberModel) -> BigNumberModel:
        if value.to_big_number() < ONE:
            raise ValueError("Multiplier must be at least 1")
        return value


class PrestigeSave(BaseModel):
    points: int = Field(0, ge=0)
    total_prestiges: int = Field(0, ge=0)
    upgrades: Dict[str, int] = Field(default_factory=dict)


class TickspeedSave(BaseModel):
    level: int = Field(0, ge=0)
    bulk_buy_unlocked: bool = False


class OfflineSave(BaseModel):
    stored_seconds: float = Field(0.0, ge=0)
    max_time_upgrade_level: int = Field(0, ge=0)
    efficiency_upgrade_level: int = Field(0, ge=0)


class ShopSave(BaseModel):
    premium_currency: int = Field(0, ge=0)
    items: Dict[str, int] = Field(default_factory=dict)


class AutoBuyerSave(BaseModel):
    unlocked: List[bool] = Field(default_factory=lambda: [False] * TIER_COUNT)
    enabled: List[bool] = Field(default_factory=lambda: [False] * TIER_COUNT)
    modes: List[BuyMode] = Field(default_factory=lambda: [BuyMode.SINGLE] * TIER_COUNT)
    speed_upgrade_level: int = Field(0, ge=0)

    @field_validator('unlocked', 'enabled', 'modes')
    @classmethod
    def one_entry_per_tier(cls, value):
        if len(value) != TIER_COUNT:
            raise ValueError(f"Expected {TIER_COUNT} entries, got {len(value)}")
        return value


class GameSaveData(BaseModel):
    """Everything needed to rebuild a simulation"""
    version: int = SAVE_VERSION
    antimatter: BigNumberModel
    dimensions: List[DimensionSave]
    prestige: PrestigeSave = Field(default_factory=PrestigeSave)
    tickspeed: TickspeedSave = Field(default_factory=TickspeedSave)
    offline: OfflineSave = Field(default_factory=OfflineSave)
    shop: ShopSave = Field(default_factory=ShopSave)
    autobuyers: AutoBuyerSave = Field(default_factory=AutoBuyerSave)
    infinity_reached: bool = False
    save_time: datetime

    @field_validator('antimatter')
    @classmethod
    def antimatter_not_negative(cls, value: BigNumberModel) -> BigNumberModel:
        return _non_negative(value)

    @field_validator('dimensions')
    @classmethod
    def tiers_in_order(cls, value: List[DimensionSave]) -> List[DimensionSave]:
        tiers = [dimension.tier for dimension in value]
        if tiers != list(range(1, TIER_COUNT + 1)):
            raise ValueError(f"Dimensions must list tiers 1..{TIER_COUNT} in order")
        return value

    @field_validator('save_time')
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


@dataclass(frozen=True)
class ImportResult:
    """Outcome of importing an export string"""
    success: bool
    reason: str = ""
    offline_seconds: float = 0.0

    def __bool__(self) -> bool:
        return self.success


# Encoding

def to_json(data: GameSaveData) -> str:
    return data.model_dump_json()


def from_json(text: str) -> GameSaveData:
    """
    Raises:
        ValueError: If the document is not a valid save
    """
    try:
        return GameSaveData.model_validate_json(text)
    except ValidationError as e:
        raise ValueError(f"Invalid save data ({e.error_count()} errors): {e.errors()[0]['msg']}") from e


def encode(data: GameSaveData) -> str:
    """Base64 of the UTF-8 JSON document"""
    return base64.b64encode(to_json(data).encode('utf-8')).decode('ascii')


def decode(text: str) -> GameSaveData:
    """
    Raises:
        ValueError: If the string is empty, not base64, not UTF-8 or not a valid save
    """
    if not text or not text.strip():
        raise ValueError("Save string is empty")

    try:
        raw = base64.b64decode(text.strip(), validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError("Save string is not valid base64") from e

    try:
        document = raw.decode('utf-8')
    except UnicodeDecodeError as e:
        raise ValueError("Save string does not contain UTF-8 text") from e

    return from_json(document)


# Snapshot / restore

def snapshot(simulation: GameSimulation, now: Optional[datetime] = None) -> GameSaveData:
    """Capture the simulation's persistent state"""
    slots = simulation.autobuyers.slots
    return GameSaveData(
        antimatter=BigNumberModel.from_big_number(simulation.antimatter),
        dimensions=[
            DimensionSave(
                tier=dimension.tier,
                amount=BigNumberModel.from_big_number(dimension.amount),
                bought=dimension.bought,
                unlocked=dimension.unlocked,
                multiplier=BigNumberModel.from_big_number(dimension.multiplier)
            )
            for dimension in simulation.dimensions
        ],
        prestige=PrestigeSave(
            points=simulation.prestige.points,
            total_prestiges=simulation.prestige.total_prestiges,
            upgrades=simulation.prestige.upgrade_levels()
        ),
        tickspeed=TickspeedSave(
            level=simulation.tickspeed.level,
            bulk_buy_unlocked=simulation.tickspeed.bulk_buy_unlocked
        ),
        offline=OfflineSave(
            stored_seconds=simulation.offline.stored_seconds,
            max_time_upgrade_level=simulation.offline.max_time_upgrade_level,
            efficiency_upgrade_level=simulation.offline.efficiency_upgrade_level
        ),
        shop=ShopSave(
            premium_currency=simulation.shop.premium_currency,
            items=simulation.shop.levels_by_id()
        ),
        autobuyers=AutoBuyerSave(
            unlocked=[slot.unlocked for slot in slots],
            enabled=[slot.enabled for slot in slots],
            modes=[slot.mode for slot in slots],
            speed_upgrade_level=simulation.autobuyers.speed_upgrade_level
        ),
        infinity_reached=simulation.infinity_reached,
        save_time=now or datetime.now(timezone.utc)
    )


def _apply(target: GameSimulation, data: GameSaveData) -> None:
    target.antimatter = data.antimatter.to_big_number()

    for saved, dimension in zip(data.dimensions, target.dimensions):
        dimension.amount = saved.amount.to_big_number()
        dimension.bought = saved.bought
        dimension.unlocked = saved.unlocked or dimension.unlocked
        dimension.multiplier = saved.multiplier.to_big_number()

    target.prestige.points = data.prestige.points
    target.prestige.total_prestiges = data.prestige.total_prestiges
    target.prestige.set_upgrade_levels(data.prestige.upgrades)

    target.tickspeed.level = data.tickspeed.level
    target.tickspeed.bulk_buy_unlocked = data.tickspeed.bulk_buy_unlocked

    target.offline.restore(
        data.offline.stored_seconds,
        data.offline.max_time_upgrade_level,
        data.offline.efficiency_upgrade_level
    )

    target.shop.premium_currency = data.shop.premium_currency
    target.shop.set_levels_by_id(data.shop.items)

    target.autobuyers.speed_upgrade_level = data.autobuyers.speed_upgrade_level
    for slot, unlocked, mode in zip(target.autobuyers.slots, data.autobuyers.unlocked, data.autobuyers.modes):
        slot.unlocked = unlocked
        slot.mode = mode

    target.cascade.infinity_reached = data.infinity_reached
    target.refresh_milestones()

    # Switches only stick on slots that are unlocked after the milestone refresh
    for slot, enabled in zip(target.autobuyers.slots, data.autobuyers.enabled):
        slot.enabled = enabled and slot.unlocked


def restore(simulation: GameSimulation, data: GameSaveData, now: Optional[datetime] = None) -> float:
    """
    Replace the simulation's state with `data`, then bank the time elapsed
    since the save was written.

    The state is built on a staging simulation first and swapped in whole,
    so a failure leaves the running game untouched.

    Returns:
        Seconds added to the offline bank
    """
    staged = GameSimulation(config=simulation.config)
    _apply(staged, data)
    simulation.replace_state(staged)

    now = now or datetime.now(timezone.utc)
    elapsed = (now - data.save_time).total_seconds()
    accumulated = simulation.process_offline_elapsed(elapsed)

    log_action(
        logger, "info",
        f"Save restored from {data.save_time.isoformat()}",
        action="restore_save",
        resource="save",
        extra={"elapsed_seconds": max(elapsed, 0.0), "offline_seconds": accumulated}
    )
    return accumulated


def export_save(simulation: GameSimulation, now: Optional[datetime] = None) -> str:
    """Encode the current state as a base64 export string"""
    return encode(snapshot(simulation, now))


def import_save(simulation: GameSimulation, text: str, now: Optional[datetime] = None) -> ImportResult:
    """
    Decode an export string and load it.

    On any decode or validation failure the running game is left as it
    was and the result carries the reason.
    """
    try:
        data = decode(text)
    except ValueError as e:
        logger.warning(f"Save import rejected: {e}")
        return ImportResult(success=False, reason=str(e))

    accumulated = restore(simulation, data, now)
    simulation.events.emit(GameEvent.SAVE_IMPORTED, save_time=data.save_time.isoformat(),
                           offline_seconds=accumulated)
    return ImportResult(success=True, offline_seconds=accumulated)
