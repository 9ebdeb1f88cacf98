"""
Test suite for the premium shop
"""

import pytest

from antimatter_core.bignumber import BigNumber, ONE
from antimatter_core.shop import Shop, ShopItem


class TestShopItem:
    """Test item metadata"""

    def test_coverage(self):
        assert ShopItem.BOOST_DIM_1_TO_4.covers(4)
        assert not ShopItem.BOOST_DIM_1_TO_4.covers(5)
        assert ShopItem.BOOST_ALL_DIMENSIONS.covers(8)

    def test_from_id(self):
        """Test lookup by id or enum name"""
        assert ShopItem.from_id("boost_dim_5_to_8") is ShopItem.BOOST_DIM_5_TO_8
        assert ShopItem.from_id("BOOST_ALL_DIMENSIONS") is ShopItem.BOOST_ALL_DIMENSIONS
        with pytest.raises(ValueError):
            ShopItem.from_id("golden_antimatter")


class TestShop:
    """Test purchases and multipliers"""

    def test_price_growth(self):
        """Test base + 100 x (n - 1) x n / 2"""
        shop = Shop(premium_currency=10000)
        prices = []
        for _ in range(4):
            prices.append(shop.item_price(ShopItem.BOOST_DIM_1_TO_4))
            shop.buy_item(ShopItem.BOOST_DIM_1_TO_4)
        assert prices == [100, 200, 400, 700]
        assert shop.premium_currency == 10000 - 1400

    def test_insufficient_currency(self):
        shop = Shop(premium_currency=150)
        assert not shop.buy_item(ShopItem.BOOST_DIM_5_TO_8)
        assert shop.premium_currency == 150
        assert shop.item_level(ShopItem.BOOST_DIM_5_TO_8) == 0

    def test_tier_multipliers(self):
        """Test x2 per level for every covering item"""
        shop = Shop(premium_currency=5000)
        shop.buy_item(ShopItem.BOOST_DIM_1_TO_4)
        shop.buy_item(ShopItem.BOOST_ALL_DIMENSIONS)
        shop.buy_item(ShopItem.BOOST_ALL_DIMENSIONS)

        assert shop.tier_multiplier(3) == BigNumber(8)
        assert shop.tier_multiplier(6) == BigNumber(4)
        assert Shop().tier_multiplier(1) == ONE
        assert shop.bulk_bonus() == 0.0

    def test_levels_by_id(self):
        """Test level export and restore"""
        shop = Shop()
        shop.set_levels_by_id({"boost_dim_5_to_8": 3, "retired_item": 2})
        levels = shop.levels_by_id()
        assert levels["boost_dim_5_to_8"] == 3
        assert levels["boost_dim_1_to_4"] == 0
        assert "retired_item" not in levels
