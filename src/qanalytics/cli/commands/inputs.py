"""YAML input documents for CLI commands.

Numbers are read through ``str`` before becoming Decimals so YAML floats
such as ``0.1`` keep their written value. Quoting numbers in the file
("0.1") avoids float parsing altogether.
"""

from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from qanalytics.system import AnalyticsConfig, LoggerFactory, load_config


def setup_command(config_path: str | None) -> AnalyticsConfig:
    """Load analytics configuration and configure logging from it."""
    config = load_config(config_path)
    LoggerFactory.configure(config.logging)
    return config


def load_document(path: str | Path) -> dict[str, Any]:
    """
    Load a YAML mapping from disk.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the document is not a mapping
        yaml.YAMLError: If YAML parsing fails
    """
    doc_path = Path(path)
    if not doc_path.exists():
        raise FileNotFoundError(f"Input file not found: {doc_path}")

    with open(doc_path) as f:
        data = yaml.safe_load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Input file must contain a mapping: {doc_path}")
    return data


def to_decimal(raw: Any, field: str) -> Decimal:
    """Convert a scalar YAML value to Decimal."""
    if isinstance(raw, bool) or raw is None:
        raise ValueError(f"{field}: expected a number, got {raw!r}")
    try:
        return Decimal(str(raw))
    except InvalidOperation as e:
        raise ValueError(f"{field}: not a decimal number: {raw!r}") from e


def to_decimal_series(raw: Any, field: str) -> list[Decimal]:
    """Convert a YAML list to a list of Decimals."""
    if not isinstance(raw, list):
        raise ValueError(f"{field}: expected a list of numbers")
    return [to_decimal(item, f"{field}[{index}]") for index, item in enumerate(raw)]


def optional_series(data: dict[str, Any], field: str) -> list[Decimal] | None:
    """Decimal series for ``field``, or None when the key is absent."""
    if field not in data or data[field] is None:
        return None
    return to_decimal_series(data[field], field)
