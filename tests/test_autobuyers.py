"""
Test suite for auto-buyers

Tests unlock gating, the speed upgrade and purchases on the interval
through a real simulation.
"""

import pytest

from antimatter_core.autobuyers import AutoBuyers, BuyMode, MAX_SPEED_LEVEL
from antimatter_core.bignumber import BigNumber
from antimatter_core.config import AntimatterConfig
from antimatter_core.prestige import PrestigeEngine
from antimatter_core.simulation import GameSimulation


@pytest.fixture
def simulation():
    return GameSimulation(config=AntimatterConfig())


class TestAutoBuyerSettings:
    """Test switches and speed upgrades"""

    def test_locked_cannot_enable(self):
        autobuyers = AutoBuyers()
        assert not autobuyers.set_enabled(1, True)
        assert not autobuyers.slot(1).enabled

        autobuyers.unlock(1)
        assert autobuyers.set_enabled(1, True)
        assert autobuyers.toggle(1)
        assert not autobuyers.slot(1).enabled

    def test_invalid_tier(self):
        with pytest.raises(ValueError):
            AutoBuyers().slot(9)

    def test_interval(self):
        """Test 1s base, -0.1s per level, floor of 0.1s"""
        autobuyers = AutoBuyers()
        assert autobuyers.interval() == 1.0
        autobuyers.speed_upgrade_level = 5
        assert autobuyers.interval() == pytest.approx(0.5)
        autobuyers.speed_upgrade_level = MAX_SPEED_LEVEL
        assert autobuyers.interval() == pytest.approx(0.1)

    def test_speed_upgrade(self):
        """Test speed levels are paid in prestige points"""
        autobuyers = AutoBuyers()
        prestige = PrestigeEngine(points=15)

        assert autobuyers.upgrade_speed(prestige)
        assert autobuyers.upgrade_speed(prestige)
        assert prestige.points == 0
        assert autobuyers.speed_upgrade_level == 2
        assert not autobuyers.upgrade_speed(prestige)

    def test_speed_upgrade_maxed(self):
        autobuyers = AutoBuyers(speed_upgrade_level=MAX_SPEED_LEVEL)
        assert autobuyers.speed_upgrade_cost() == 0
        assert not autobuyers.can_upgrade_speed(PrestigeEngine(points=10000))

    def test_reset_keeps_unlocks(self):
        autobuyers = AutoBuyers(speed_upgrade_level=3)
        autobuyers.unlock(2)
        autobuyers.set_enabled(2, True)

        autobuyers.reset()

        assert autobuyers.slot(2).unlocked
        assert not autobuyers.slot(2).enabled
        assert autobuyers.speed_upgrade_level == 3


class TestAutoBuyerExecution:
    """Test purchases made through the simulation"""

    def test_single_mode_buys_on_interval(self, simulation):
        simulation.autobuyers.unlock(1)
        simulation.set_autobuyer_enabled(1, True)

        simulation.tick(0.5)
        assert simulation.dimensions[1].bought == 0

        simulation.tick(0.5)
        assert simulation.dimensions[1].bought == 1
        assert simulation.antimatter == BigNumber(9)

    def test_bulk_mode_completes_set(self, simulation):
        simulation.autobuyers.unlock(1)
        simulation.set_autobuyer_enabled(1, True)
        simulation.set_autobuyer_mode(1, BuyMode.BULK)

        simulation.tick(1.0)

        assert simulation.dimensions[1].bought == 10
        assert simulation.antimatter.is_zero()

    def test_skips_locked_dimensions(self, simulation):
        simulation.autobuyers.unlock(3)
        simulation.set_autobuyer_enabled(3, True)
        simulation.antimatter = BigNumber(1e20)

        assert simulation.autobuyers.execute(simulation) == 0
        assert simulation.dimensions[3].bought == 0

    def test_disabled_does_nothing(self, simulation):
        simulation.autobuyers.unlock(1)
        simulation.tick(5.0)
        assert simulation.dimensions[1].bought == 0
