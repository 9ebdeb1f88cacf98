"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class AntimatterConfig(BaseSettings):
    """Antimatter simulation engine configuration"""
    
    # Economy configuration
    starting_antimatter: str = "10"  # BigNumber string, restored on prestige
    prestige_threshold: str = "1e10"
    purchase_iteration_cap: int = 1000  # Max units simulated per bulk purchase
    
    # Offline bank configuration
    offline_base_max_seconds: float = 86400.0  # 24 hours
    offline_base_efficiency: float = 0.5
    offline_notification_threshold_seconds: float = 60.0
    
    # Shop configuration
    shop_starting_premium_currency: int = 1000
    
    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8091
    
    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text
    log_file: Optional[str] = None  # If None, logs to stdout
    
    class Config:
        env_prefix = "ANTIMATTER_"
        env_file = ".env"
        case_sensitive = False


# Global configuration instance
config = AntimatterConfig()


def get_config() -> AntimatterConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> AntimatterConfig:
    """Reload configuration from environment"""
    global config
    config = AntimatterConfig()
    return config
