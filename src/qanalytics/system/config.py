"""Analytics configuration.

Holds the documented default parameters used across the calculators
(risk-free rate, VaR z-score bands, ratio sentinel, dividend withholding
rates) so applications can override them from a single YAML file.

Calculators never read this module's state implicitly: every default here is
also the default value of the corresponding function parameter, and callers
pass overridden values explicitly.

Example YAML:

    risk:
      risk_free_rate: "0.04"
      confidence_level: "0.99"
      sortino_target: "0.005"
    dividend:
      min_holding_period_days: 61
      withholding:
        qualified: "0.15"
        ordinary: "0.24"
    logging:
      level: DEBUG
"""

from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from qanalytics.system.log_system import LoggingConfig


class ZScoreBand(BaseModel):
    """Confidence threshold and the normal z-score used at or above it."""

    model_config = ConfigDict(frozen=True)

    min_confidence: Decimal
    z_score: Decimal


DEFAULT_Z_SCORE_BANDS: tuple[ZScoreBand, ...] = (
    ZScoreBand(min_confidence=Decimal("0.99"), z_score=Decimal("2.326")),
    ZScoreBand(min_confidence=Decimal("0.975"), z_score=Decimal("1.960")),
    ZScoreBand(min_confidence=Decimal("0.95"), z_score=Decimal("1.645")),
    ZScoreBand(min_confidence=Decimal("0.90"), z_score=Decimal("1.282")),
)
DEFAULT_Z_SCORE = Decimal("1.645")

DEFAULT_RISK_FREE_RATE = Decimal("0.045")
DEFAULT_CONFIDENCE_LEVEL = Decimal("0.95")
DEFAULT_STERLING_THRESHOLD = Decimal("0.10")
DEFAULT_SORTINO_TARGET = Decimal("0")
RATIO_SENTINEL = Decimal("999.99")
STERLING_EPSILON = Decimal("0.001")
MIN_QUALIFIED_HOLDING_DAYS = 61


class WithholdingRates(BaseModel):
    """Default tax withholding rate per dividend tax status."""

    model_config = ConfigDict(frozen=True)

    qualified: Decimal = Decimal("0.15")
    ordinary: Decimal = Decimal("0.24")
    return_of_capital: Decimal = Decimal("0")

    @field_validator("qualified", "ordinary", "return_of_capital")
    @classmethod
    def validate_rate(cls, v: Decimal) -> Decimal:
        if v < 0 or v > 1:
            raise ValueError(f"Withholding rate must be between 0 and 1, got {v}")
        return v


class RiskConfig(BaseModel):
    """Risk metric parameters."""

    model_config = ConfigDict(frozen=True)

    risk_free_rate: Decimal = DEFAULT_RISK_FREE_RATE
    confidence_level: Decimal = DEFAULT_CONFIDENCE_LEVEL
    sterling_threshold: Decimal = DEFAULT_STERLING_THRESHOLD
    sortino_target: Decimal = DEFAULT_SORTINO_TARGET  # Minimum acceptable per-period return
    ratio_sentinel: Decimal = RATIO_SENTINEL
    sterling_epsilon: Decimal = STERLING_EPSILON
    z_score_bands: tuple[ZScoreBand, ...] = DEFAULT_Z_SCORE_BANDS
    default_z_score: Decimal = DEFAULT_Z_SCORE

    @field_validator("risk_free_rate", "sterling_threshold")
    @classmethod
    def validate_unit_interval(cls, v: Decimal) -> Decimal:
        if v < 0 or v > 1:
            raise ValueError(f"Value must be between 0 and 1, got {v}")
        return v

    @field_validator("confidence_level")
    @classmethod
    def validate_confidence(cls, v: Decimal) -> Decimal:
        if v <= 0 or v >= 1:
            raise ValueError(f"Confidence level must be strictly between 0 and 1, got {v}")
        return v

    @field_validator("z_score_bands")
    @classmethod
    def sort_bands(cls, v: tuple[ZScoreBand, ...]) -> tuple[ZScoreBand, ...]:
        # Lookup walks bands from highest confidence down.
        return tuple(sorted(v, key=lambda band: band.min_confidence, reverse=True))


class DividendConfig(BaseModel):
    """Dividend classification and withholding parameters."""

    model_config = ConfigDict(frozen=True)

    withholding: WithholdingRates = Field(default_factory=WithholdingRates)
    min_holding_period_days: int = MIN_QUALIFIED_HOLDING_DAYS
    round_to_penny: bool = False

    @field_validator("min_holding_period_days")
    @classmethod
    def validate_holding_days(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"Minimum holding period cannot be negative, got {v}")
        return v


class AnalyticsConfig(BaseModel):
    """Complete analytics configuration."""

    model_config = ConfigDict(frozen=True)

    risk: RiskConfig = Field(default_factory=RiskConfig)
    dividend: DividendConfig = Field(default_factory=DividendConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, path: str | Path) -> "AnalyticsConfig":
        """Load configuration from a YAML file.

        Missing sections fall back to their defaults.

        Args:
            path: Path to YAML configuration file

        Returns:
            Validated AnalyticsConfig

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the YAML root is not a mapping
            pydantic.ValidationError: If a value is out of range
        """
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path) as f:
            data: Any = yaml.safe_load(f)

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"Configuration file must contain a mapping: {config_path}")

        return cls.model_validate(data)


def load_config(path: str | Path | None = None) -> AnalyticsConfig:
    """Load configuration from ``path``, or return defaults when no path is given."""
    if path is None:
        return AnalyticsConfig()
    return AnalyticsConfig.load(path)
