"""
Test suite for tickspeed levels
"""

import pytest

from antimatter_core.bignumber import BigNumber, ONE
from antimatter_core.tickspeed import Tickspeed


class TestTickspeed:
    """Test tickspeed pricing, multipliers and purchases"""

    def test_prices(self):
        """Test 100 x 10^level"""
        tickspeed = Tickspeed()
        assert tickspeed.price() == BigNumber(100)
        assert tickspeed.price_at(3) == BigNumber(1e5)

    def test_multiplier(self):
        """Test (1.1 + boost)^level, exactly 1 at level 0"""
        assert Tickspeed().multiplier() == ONE
        assert Tickspeed().multiplier(boost=0.5) == ONE
        assert Tickspeed(level=2).multiplier().to_float() == pytest.approx(1.21)
        assert Tickspeed(level=2).multiplier(boost=0.1).to_float() == pytest.approx(1.44)

    def test_buy(self):
        """Test single purchases report their spend"""
        tickspeed = Tickspeed()
        assert not tickspeed.buy(BigNumber(99))

        result = tickspeed.buy(BigNumber(150))
        assert result.count == 1
        assert result.spent == BigNumber(100)
        assert tickspeed.level == 1
        assert tickspeed.price() == BigNumber(1000)

    def test_buy_max_requires_unlock(self):
        tickspeed = Tickspeed()
        assert not tickspeed.buy_max(BigNumber(1e10))
        assert tickspeed.level == 0

    def test_buy_max(self):
        """Test bulk buying every affordable level"""
        tickspeed = Tickspeed(bulk_buy_unlocked=True)
        assert tickspeed.max_affordable(BigNumber(1e5)) == 3

        result = tickspeed.buy_max(BigNumber(1e5))
        assert result.count == 3
        assert result.spent.to_float() == pytest.approx(11100)
        assert tickspeed.level == 3

    def test_bulk_cap(self):
        tickspeed = Tickspeed(bulk_buy_unlocked=True, purchase_cap=4)
        assert tickspeed.max_affordable(BigNumber(1, 300)) == 4

    def test_reset_keeps_bulk_unlock(self):
        tickspeed = Tickspeed(level=7, bulk_buy_unlocked=True)
        tickspeed.reset()
        assert tickspeed.level == 0
        assert tickspeed.bulk_buy_unlocked
