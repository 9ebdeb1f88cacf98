"""
Test suite for the production cascade

Tests tier ordering within a tick, unlock checks and the infinity latch.
"""

import pytest

from antimatter_core.bignumber import BigNumber, INFINITY
from antimatter_core.cascade import ProductionCascade
from antimatter_core.dimensions import DimensionArena


@pytest.fixture
def arena():
    return DimensionArena.create()


class TestProduction:
    """Test one tick of production"""

    def test_higher_tier_feeds_lower_within_tick(self, arena):
        """Test tier 1 produces from the amount tier 2 just added"""
        arena[1].amount = BigNumber(1)
        arena[2].amount = BigNumber(1)
        cascade = ProductionCascade(arena)

        result = cascade.tick(BigNumber(10), 1.0)

        assert arena[1].amount == BigNumber(2)
        # 10 + tier 1 production from the updated amount of 2
        assert result.currency == BigNumber(12)
        assert result.advanced

    def test_effective_delta_scales_output(self, arena):
        arena[1].amount = BigNumber(3)
        cascade = ProductionCascade(arena)

        result = cascade.tick(0, BigNumber(2.5))

        assert result.currency.to_float() == pytest.approx(7.5)

    def test_locked_tiers_do_not_produce(self, arena):
        """Test a locked tier with units is skipped"""
        arena[3].amount = BigNumber(100)
        cascade = ProductionCascade(arena)

        cascade.tick(0, 1.0)

        assert arena[2].amount.is_zero()

    def test_full_chain(self, arena):
        """Test every unlocked tier cascades down in one tick"""
        for dimension in arena:
            dimension.unlocked = True
            dimension.amount = BigNumber(1)
        cascade = ProductionCascade(arena)

        result = cascade.tick(0, 1.0)

        # Tier k ends the tick with 9 - k units; tier 1 then produces 8
        assert arena[1].amount == BigNumber(8)
        assert result.currency == BigNumber(8)


class TestUnlocks:
    """Test unlock checks run after production"""

    def test_unlock_reported(self, arena):
        arena[2].bought = 40
        cascade = ProductionCascade(arena)

        result = cascade.tick(0, 1.0)

        assert result.unlocked_tiers == [3]
        assert arena[3].unlocked

        again = cascade.tick(0, 1.0)
        assert again.unlocked_tiers == []


class TestInfinity:
    """Test the terminal infinity state"""

    def test_latches_at_infinity(self, arena):
        """Test reaching INFINITY stops every later tick"""
        arena[1].amount = BigNumber(1e300)
        cascade = ProductionCascade(arena)

        result = cascade.tick(BigNumber(1.7, 308), BigNumber(1e10))

        assert result.infinity_reached
        assert result.currency == INFINITY
        assert cascade.infinity_reached

        amount_before = arena[1].amount
        arena[2].amount = BigNumber(5)
        later = cascade.tick(result.currency, 1.0)

        assert not later.advanced
        assert later.infinity_reached
        assert arena[1].amount == amount_before
