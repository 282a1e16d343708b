"""
System configuration package.

Exports:
    - AnalyticsConfig: Complete analytics configuration model
    - load_config: Load configuration from YAML (or defaults)
    - LoggerFactory: Factory for creating configured loggers
    - LoggingConfig: Logging configuration model
"""

from qanalytics.system.config import AnalyticsConfig, DividendConfig, RiskConfig, WithholdingRates, load_config
from qanalytics.system.log_system import LoggerFactory, LoggingConfig

__all__ = [
    "AnalyticsConfig",
    "RiskConfig",
    "DividendConfig",
    "WithholdingRates",
    "load_config",
    "LoggerFactory",
    "LoggingConfig",
]
