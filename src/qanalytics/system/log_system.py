"""Centralized logging configuration for QAnalytics."""

import inspect
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Callable, Literal

import structlog
from pydantic import BaseModel, Field

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LoggingConfig(BaseModel):
    """Configuration for logging system.

    Logging Levels Guide:

    INFO:
    - Corporate action batches applied (transaction and adjustment counts)
    - CLI report generation

    DEBUG:
    - Every computed metric with its headline value
    - Rejected inputs with their error kind

    WARNING:
    - Batches that failed part way through

    Timestamp Format Options:
    - "iso": 2025-10-22T20:50:07.288824Z (full ISO format)
    - "compact": 251022-205007.28 (YYMMDD-HHMMSS.ms) - recommended
    - "time": 20:50:07.28 (time only, good for same-day logs)
    - "short": 1022T205007 (MMDDTHHMMSS, very compact)
    """

    level: LogLevel = Field(
        default="WARNING",
        description="Minimum log level (DEBUG shows every calculation)",
    )
    format: Literal["console", "json"] = Field(
        default="console",
        description="Output format: console, or json",
    )
    timestamp_format: Literal["iso", "compact", "time", "short"] = Field(
        default="compact",
        description="Timestamp format for console output",
    )
    enable_file: bool = Field(
        default=False,
        description="Enable JSON logging to file",
    )
    file_path: Path | None = Field(
        default=None,
        description="Path to log file (uses logs/qanalytics.log if None)",
    )
    file_level: LogLevel = Field(
        default="INFO",
        description="Minimum log level for file output",
    )
    file_rotation: bool = Field(
        default=True,
        description="Enable log file rotation (when file gets too large)",
    )
    max_file_size_mb: int = Field(
        default=10,
        description="Maximum log file size in MB before rotation",
    )
    backup_count: int = Field(
        default=3,
        description="Number of rotated log files to keep",
    )


class LoggerFactory:
    """
    Factory for creating and configuring structured loggers.

    Call configure() once at application startup, then use get_logger()
    to get logger instances throughout the codebase. get_logger() never
    configures anything: until the application calls configure(), loggers
    follow the host's own structlog and stdlib logging setup.

    Example:
        # At startup
        LoggerFactory.configure(LoggingConfig(level="DEBUG"))

        # In modules
        logger = LoggerFactory.get_logger()
        logger.debug("risk_metrics.sharpe_ratio.calculated", sharpe_ratio="1.2345")
    """

    _config: LoggingConfig | None = None
    _configured: bool = False

    @classmethod
    def configure(cls, config: LoggingConfig | None = None) -> None:
        """
        Configure the logging system.

        Args:
            config: LoggingConfig instance. If None, uses default configuration.
        """
        if config is None:
            config = LoggingConfig()

        cls._config = config

        processors = cls._build_common_processors(config.timestamp_format)

        console_handler = logging.StreamHandler(stream=sys.stderr)
        console_handler.setLevel(getattr(logging, config.level))
        console_processor: Any
        if config.format == "console":
            console_processor = cls._custom_console_renderer()
        else:
            console_processor = structlog.processors.JSONRenderer()
        console_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=console_processor,
                foreign_pre_chain=processors,
            )
        )

        handlers: list[logging.Handler] = [console_handler]
        root_level = getattr(logging, config.level)

        if config.enable_file:
            file_handler = cls._configure_file_logging(config, processors)
            handlers.append(file_handler)
            root_level = min(root_level, getattr(logging, config.file_level))

        logging.basicConfig(level=root_level, handlers=handlers, force=True)

        configured_processors = list(processors)
        configured_processors.append(structlog.processors.format_exc_info)
        configured_processors.append(structlog.stdlib.ProcessorFormatter.wrap_for_formatter)

        structlog.configure(
            processors=configured_processors,
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )

        cls._configured = True

    @classmethod
    def _build_common_processors(cls, timestamp_format: str) -> list[Any]:
        """Processors shared by both structlog and stdlib handlers before rendering."""
        return [
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            cls._get_timestamper(timestamp_format),
            structlog.processors.StackInfoRenderer(),
        ]

    @staticmethod
    def _get_timestamper(fmt: str) -> Any:
        """Get timestamper for the configured format, stored under 'log_timestamp'."""

        def add_timestamp_processor(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
            now = datetime.now(timezone.utc)
            ms = now.microsecond // 10000

            if fmt == "compact":
                event_dict["log_timestamp"] = now.strftime(f"%y%m%d-%H%M%S.{ms:02d}")
            elif fmt == "time":
                event_dict["log_timestamp"] = now.strftime(f"%H:%M:%S.{ms:02d}")
            elif fmt == "short":
                event_dict["log_timestamp"] = now.strftime("%m%dT%H%M%S")
            else:
                event_dict["log_timestamp"] = now.isoformat()

            return event_dict

        return add_timestamp_processor

    @staticmethod
    def _custom_console_renderer() -> Callable[[Any, str, dict[str, Any]], str]:
        """Console renderer: timestamp, colored component, event and context."""

        def renderer(logger: Any, name: str, event_dict: dict[str, Any]) -> str:
            timestamp = event_dict.pop("log_timestamp", "")
            level = event_dict.pop("level", "info").upper()
            event = event_dict.pop("event", "")
            event_dict.pop("logger", None)
            return _AnalyticsLogFormatters.format_log(event, event_dict, level, timestamp)

        return renderer

    @classmethod
    def _configure_file_logging(cls, config: LoggingConfig, pre_chain: list[Any]) -> logging.Handler:
        """Configure JSON file output for logging."""
        file_path = config.file_path or Path("logs/qanalytics.log")
        file_path.parent.mkdir(parents=True, exist_ok=True)

        handler: logging.Handler
        if config.file_rotation:
            handler = RotatingFileHandler(
                filename=str(file_path),
                maxBytes=config.max_file_size_mb * 1024 * 1024,
                backupCount=config.backup_count,
                encoding="utf-8",
            )
        else:
            handler = logging.FileHandler(filename=str(file_path), encoding="utf-8")

        handler.setLevel(getattr(logging, config.file_level))
        handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=structlog.processors.JSONRenderer(),
                foreign_pre_chain=pre_chain,
            )
        )

        return handler

    @classmethod
    def get_logger(cls, name: str | None = None):
        """
        Get a logger instance.

        Calculators call this at import time, so it must not touch logging
        configuration; structlog resolves the logger lazily on first use.

        Args:
            name: Optional logger name. If None, uses the calling module's __name__.

        Returns:
            Lazy structlog logger proxy.
        """
        if name is None:
            frame = inspect.currentframe()
            if frame and frame.f_back:
                name = frame.f_back.f_globals.get("__name__", "qanalytics")
            else:
                name = "qanalytics"

        return structlog.get_logger(name)

    @classmethod
    def get_config(cls) -> LoggingConfig:
        """Get current logging configuration."""
        if cls._config is None:
            return LoggingConfig()
        return cls._config

    @classmethod
    def is_configured(cls) -> bool:
        """Check if logging has been configured."""
        return cls._configured

    @classmethod
    def reset(cls) -> None:
        """Reset logging configuration (mainly for testing)."""
        root_logger = logging.getLogger()
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)
            handler.close()
        root_logger.setLevel(logging.NOTSET)
        cls._config = None
        cls._configured = False
        structlog.reset_defaults()


class _AnalyticsLogFormatters:
    """Console formatters keyed on the event name prefix."""

    CYAN = "\033[36m"
    MAGENTA = "\033[35m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    RED = "\033[31m"
    DIM = "\033[2m"
    BOLD = "\033[1m"
    RESET = "\033[0m"

    LEVEL_COLORS = {
        "DEBUG": CYAN,
        "INFO": GREEN,
        "WARNING": YELLOW,
        "ERROR": RED,
        "CRITICAL": MAGENTA,
    }

    COMPONENTS = {
        "risk_metrics": "Risk",
        "beta": "Beta",
        "drawdown": "Drawdown",
        "correlation": "Correlation",
        "covariance": "Covariance",
        "stock_split": "Split",
        "merger": "Merger",
        "dividend": "Dividend",
        "corporate_action": "Corporate Action",
        "cli": "CLI",
    }

    @classmethod
    def format_log(cls, event: str, event_dict: dict[str, Any], level: str, timestamp: str) -> str:
        """Format a log line as ``timestamp | Component | Message | key=value ...``."""
        color = cls.LEVEL_COLORS.get(level, cls.RESET)
        prefix, _, remainder = event.partition(".")
        component = cls.COMPONENTS.get(prefix)

        if component is None:
            component = level.lower()
            remainder = event

        msg = remainder.replace(".", " ").replace("_", " ").title()
        parts = [
            f"{cls.DIM}{timestamp}{cls.RESET}",
            f"{color}{component}{cls.RESET}",
            f"{cls.BOLD}{msg}{cls.RESET}",
        ]

        context = cls._format_context(event_dict)
        if context:
            parts.append(context)

        return " | ".join(parts)

    @classmethod
    def _format_context(cls, event_dict: dict[str, Any]) -> str:
        context_parts = []
        for key, value in sorted(event_dict.items()):
            if key.startswith("_"):
                continue
            if key == "error_kind":
                context_parts.append(f"{key}={cls.RED}{value}{cls.RESET}")
            else:
                context_parts.append(f"{key}={cls.CYAN}{value}{cls.RESET}")
        return " ".join(context_parts)
