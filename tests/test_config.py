"""
Tests for configuration and structured logging
"""

import json
import logging

from antimatter_core.bignumber import BigNumber
from antimatter_core.config import AntimatterConfig, get_config, reload_config
from antimatter_core.logging_config import JSONFormatter, setup_logging, log_action
from antimatter_core.simulation import GameSimulation


class TestConfig:
    """Test environment-driven settings"""

    def test_defaults(self):
        settings = AntimatterConfig()
        assert settings.starting_antimatter == "10"
        assert settings.prestige_threshold == "1e10"
        assert settings.purchase_iteration_cap == 1000
        assert settings.offline_base_efficiency == 0.5

    def test_env_override(self, monkeypatch):
        """Test ANTIMATTER_ prefixed variables override defaults"""
        monkeypatch.setenv("ANTIMATTER_STARTING_ANTIMATTER", "1e3")
        monkeypatch.setenv("ANTIMATTER_OFFLINE_BASE_MAX_SECONDS", "3600")

        settings = AntimatterConfig()

        assert settings.starting_antimatter == "1e3"
        assert settings.offline_base_max_seconds == 3600.0

    def test_reload_config(self, monkeypatch):
        """Test reloading replaces the global settings new simulations pick up"""
        monkeypatch.setenv("ANTIMATTER_STARTING_ANTIMATTER", "42")
        try:
            reloaded = reload_config()

            assert get_config() is reloaded
            assert GameSimulation().antimatter == BigNumber(42)
        finally:
            monkeypatch.delenv("ANTIMATTER_STARTING_ANTIMATTER")
            reload_config()

        assert GameSimulation().antimatter == BigNumber(10)

    def test_simulation_uses_config(self, monkeypatch):
        monkeypatch.setenv("ANTIMATTER_STARTING_ANTIMATTER", "250")
        monkeypatch.setenv("ANTIMATTER_PRESTIGE_THRESHOLD", "1e5")

        simulation = GameSimulation(config=AntimatterConfig())

        assert simulation.antimatter == BigNumber(250)
        assert simulation.prestige.threshold == BigNumber(1e5)


class TestLogging:
    """Test the JSON formatter and structured action logging"""

    def test_json_formatter(self):
        record = logging.LogRecord("antimatter.test", logging.INFO, __file__, 1, "hello", (), None)
        record.action = "buy_dimension"

        entry = json.loads(JSONFormatter().format(record))

        assert entry["message"] == "hello"
        assert entry["level"] == "INFO"
        assert entry["action"] == "buy_dimension"
        assert "resource" not in entry

    def test_log_action(self, tmp_path):
        """Test structured fields reach the log file"""
        log_file = tmp_path / "antimatter.log"
        logger = setup_logging("DEBUG", logger_name="antimatter.test_log", log_file=str(log_file))

        log_action(logger, "info", "Bought", action="buy_dimension", resource="dimension:1", extra={"count": 2})
        for handler in logger.handlers:
            handler.flush()

        entry = json.loads(log_file.read_text().strip())
        assert entry["resource"] == "dimension:1"
        assert entry["extra"] == {"count": 2}

    def test_text_format(self, tmp_path):
        log_file = tmp_path / "plain.log"
        logger = setup_logging("INFO", logger_name="antimatter.test_text", log_format="text", log_file=str(log_file))

        logger.info("plain line")
        for handler in logger.handlers:
            handler.flush()

        assert "plain line" in log_file.read_text()
        assert "INFO" in log_file.read_text()
