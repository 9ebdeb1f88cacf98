"""
Premium Shop Module

Permanent production boosts bought with premium currency. Every level of an
item doubles production of the tiers it covers, stacking with prestige
multipliers.
"""

from enum import Enum
from typing import Dict, Optional
import logging

from .bignumber import BigNumber, ONE
from .dimensions import MultiplierSource


logger = logging.getLogger("antimatter.shop")

LEVEL_FACTOR = BigNumber(2)


class ShopItem(Enum):
    """Shop items with base price and the tier range they boost"""
    BOOST_DIM_1_TO_4 = ("boost_dim_1_to_4", 100, 1, 4)
    BOOST_DIM_5_TO_8 = ("boost_dim_5_to_8", 200, 5, 8)
    BOOST_ALL_DIMENSIONS = ("boost_all_dimensions", 500, 1, 8)

    def __init__(self, item_id: str, base_price: int, first_tier: int, last_tier: int):
        self.item_id = item_id
        self.base_price = base_price
        self.first_tier = first_tier
        self.last_tier = last_tier

    def covers(self, tier: int) -> bool:
        return self.first_tier <= tier <= self.last_tier

    @classmethod
    def from_id(cls, item_id: str) -> 'ShopItem':
        for item in cls:
            if item.item_id == item_id or item.name == item_id:
                return item
        raise ValueError(f"Unknown shop item '{item_id}'")


class Shop(MultiplierSource):
    """Premium currency wallet and purchased item levels"""

    def __init__(self, premium_currency: int = 0, item_levels: Optional[Dict[ShopItem, int]] = None):
        self.premium_currency = premium_currency
        self.item_levels: Dict[ShopItem, int] = {item: 0 for item in ShopItem}
        if item_levels:
            self.item_levels.update(item_levels)

    def item_level(self, item: ShopItem) -> int:
        return self.item_levels.get(item, 0)

    def item_price(self, item: ShopItem) -> int:
        """base + 100 * (n - 1) * n / 2 for the next level n"""
        next_level = self.item_level(item) + 1
        return item.base_price + 100 * (next_level - 1) * next_level // 2

    def buy_item(self, item: ShopItem) -> bool:
        price = self.item_price(item)
        if self.premium_currency < price:
            logger.debug(f"Cannot afford {item.item_id}: need {price}, have {self.premium_currency}")
            return False

        self.premium_currency -= price
        self.item_levels[item] = self.item_level(item) + 1
        logger.info(f"Purchased {item.item_id} level {self.item_levels[item]} for {price}")
        return True

    def tier_multiplier(self, tier: int) -> BigNumber:
        multiplier = ONE
        for item, level in self.item_levels.items():
            if level > 0 and item.covers(tier):
                multiplier = multiplier * LEVEL_FACTOR.pow(level)
        return multiplier

    def levels_by_id(self) -> Dict[str, int]:
        return {item.item_id: level for item, level in self.item_levels.items()}

    def set_levels_by_id(self, levels: Dict[str, int]) -> None:
        """Restore saved levels; unknown ids are skipped"""
        for item_id, level in levels.items():
            try:
                item = ShopItem.from_id(item_id)
            except ValueError:
                logger.warning(f"Ignoring unknown shop item '{item_id}' in save")
                continue
            self.item_levels[item] = max(0, level)
