"""
Structured Logging System for RiskLib

This module provides structured logging for optimization runs with:
- JSON-formatted or colored console output
- Size-rotated JSON log files
- Event counters for optimizations, frontier points and simulated paths
- Specialized log methods for optimization, frontier and simulation events

Library modules log through ``logging.getLogger(__name__)`` under the
``risklib`` namespace, which only carries a NullHandler. Handlers and the
namespace level are touched only when an application (e.g. the CLI)
calls setup_logging; get_logger never reconfigures the namespace.
"""

import json
import logging
import logging.handlers
import sys
import threading
import traceback
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

ROOT_LOGGER_NAME = "risklib"

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


class LogLevel(Enum):
    """Log levels supported by RiskLibLogger"""
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


class EventType(Enum):
    """Event types for structured logging"""
    OPTIMIZATION_START = "optimization_start"
    OPTIMIZATION_END = "optimization_end"
    FRONTIER = "frontier"
    SIMULATION = "simulation"
    ERROR = "error"
    PERFORMANCE = "performance"
    SYSTEM = "system"


@dataclass
class LogConfig:
    """Configuration for the logging system"""
    log_dir: str = "logs"
    log_level: LogLevel = LogLevel.INFO
    console_enabled: bool = False
    file_enabled: bool = False
    json_format: bool = False

    max_bytes: int = 10 * 1024 * 1024
    backup_count: int = 5

    # Counters stay off for the library preset
    track_performance: bool = False

    # "library", "development", "production", "testing"
    environment: str = "library"

    def __post_init__(self):
        """Apply environment-specific defaults"""
        if self.environment == "production":
            self.json_format = True
            self.file_enabled = True
            self.track_performance = True
        elif self.environment == "development":
            self.log_level = LogLevel.DEBUG
            self.console_enabled = True
            self.track_performance = True
        elif self.environment == "testing":
            self.log_level = LogLevel.DEBUG
            self.console_enabled = False
            self.file_enabled = False
            self.track_performance = True


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging

    One object per line:
    {"timestamp": "...", "level": "INFO", "logger": "risklib.optimizers.engine",
     "message": "...", "event_type": "optimization_end", "backend": "convex", ...}
    """

    def __init__(self, include_traceback: bool = True):
        super().__init__()
        self.include_traceback = include_traceback

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if hasattr(record, "event_type"):
            entry["event_type"] = record.event_type
        if hasattr(record, "context"):
            entry.update(record.context)

        if record.exc_info and self.include_traceback:
            exc_type, exc_value, _ = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc_value) if exc_value else None,
                "traceback": traceback.format_exception(*record.exc_info),
            }

        entry["source"] = {"file": record.filename, "line": record.lineno}
        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Colored single-line console output"""

    COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelno, self.RESET)
        stamp = datetime.now().strftime("%H:%M:%S")
        line = f"{color}[{stamp}] {record.levelname:<7} {record.name}: {record.getMessage()}{self.RESET}"

        fields = getattr(record, "context", None)
        if fields:
            scalars = [f"{k}={v}" for k, v in fields.items() if not isinstance(v, (dict, list))]
            if scalars:
                line += " | " + " ".join(scalars)

        if record.exc_info:
            line += "\n" + "".join(traceback.format_exception(*record.exc_info))
        return line


class PerformanceTracker:
    """
    Thread-safe event counters

    Counts started and completed optimizations, evaluated candidates,
    frontier points, simulated paths and errors by exception type. The set
    of counter names is fixed by the logging methods, so memory use does
    not grow with the number of runs.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._counters: Dict[str, int] = defaultdict(int)
        self._start_time = datetime.now(timezone.utc)

    def increment_counter(self, counter_name: str, value: int = 1):
        with self._lock:
            self._counters[counter_name] += value

    def get_counter(self, counter_name: str) -> int:
        with self._lock:
            return self._counters.get(counter_name, 0)

    def record_error(self, error_type: str, operation: Optional[str] = None):
        """Count an error overall, by type and by operation"""
        with self._lock:
            self._counters["errors_total"] += 1
            self._counters[f"errors_{error_type}"] += 1
            if operation:
                self._counters[f"errors_{operation}_{error_type}"] += 1

    def get_metrics_summary(self) -> Dict[str, Any]:
        """Uptime and a snapshot of every counter"""
        with self._lock:
            return {
                "uptime_seconds": (datetime.now(timezone.utc) - self._start_time).total_seconds(),
                "counters": dict(self._counters),
            }


class RiskLibLogger:
    """
    Structured event logger for RiskLib

    A process-wide singleton. Constructing it never changes the ``risklib``
    namespace; setup_logging is the only place handlers get attached.
    """

    _instance: Optional['RiskLibLogger'] = None
    _lock = threading.Lock()

    # Handlers attached by setup_logging, removed on reconfiguration
    _attached_handlers: List[logging.Handler] = []

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, name: str = ROOT_LOGGER_NAME, config: Optional[LogConfig] = None):
        if getattr(self, '_initialized', False):
            return

        self.name = name
        self.config = config or LogConfig()
        self._logger = logging.getLogger(name)
        self._performance_tracker = PerformanceTracker()
        self._initialized = True

    def attach_handlers(self):
        """
        Replace the handlers from an earlier setup_logging call with the
        ones this configuration asks for and set the namespace level.

        Handlers added by the host application are left in place.
        """
        with self._lock:
            for handler in RiskLibLogger._attached_handlers:
                self._logger.removeHandler(handler)
                handler.close()
            RiskLibLogger._attached_handlers = []

            self._logger.setLevel(self.config.log_level.value)

            if self.config.console_enabled:
                console_handler = logging.StreamHandler(sys.stderr)
                console_handler.setFormatter(
                    JSONFormatter() if self.config.json_format else ConsoleFormatter()
                )
                self._add_handler(console_handler)

            if self.config.file_enabled:
                log_dir = Path(self.config.log_dir)
                log_dir.mkdir(parents=True, exist_ok=True)
                file_handler = logging.handlers.RotatingFileHandler(
                    log_dir / f"{self.name}.log",
                    maxBytes=self.config.max_bytes,
                    backupCount=self.config.backup_count,
                )
                file_handler.setFormatter(JSONFormatter())
                self._add_handler(file_handler)

    def _add_handler(self, handler: logging.Handler):
        handler.setLevel(self.config.log_level.value)
        self._logger.addHandler(handler)
        RiskLibLogger._attached_handlers.append(handler)

    def _log(self, level: int, message: str, event_type: EventType = EventType.SYSTEM, **fields):
        self._logger.log(level, message, extra={"event_type": event_type.value, "context": fields})

    def _count(self, counter_name: str, value: int = 1):
        if self.config.track_performance:
            self._performance_tracker.increment_counter(counter_name, value)

    def debug(self, message: str, **fields):
        self._log(logging.DEBUG, message, **fields)

    def info(self, message: str, **fields):
        self._log(logging.INFO, message, **fields)

    def warning(self, message: str, **fields):
        self._log(logging.WARNING, message, **fields)

    def log_optimization_start(
        self,
        backend: str,
        objective: str,
        mode: str,
        n_assets: int,
        n_periods: int,
        risk_measure: str,
        parameters: Optional[Dict[str, Any]] = None,
    ):
        """
        Log the start of an optimization run

        Args:
            backend: Optimizer backend
            objective: Objective kind
            mode: Optimization mode
            n_assets: Number of assets
            n_periods: Number of return periods
            risk_measure: Name of the risk measure
            parameters: lambda, alpha/target, sample count, ...
        """
        fields = {
            "backend": backend,
            "objective": objective,
            "mode": mode,
            "n_assets": n_assets,
            "n_periods": n_periods,
            "risk_measure": risk_measure,
        }
        if parameters:
            fields["parameters"] = parameters

        self._log(logging.INFO,
                  f"Starting {backend} {mode} optimization ({objective}) on {n_assets} assets",
                  EventType.OPTIMIZATION_START, **fields)
        self._count("optimizations_started")

    def log_optimization_end(
        self,
        backend: str,
        objective: str,
        objective_value: float,
        weights: Dict[str, float],
        duration_seconds: Optional[float] = None,
        evaluations: int = 0,
    ):
        """Log a completed optimization run with its weights and evaluation count"""
        fields = {
            "backend": backend,
            "objective": objective,
            "objective_value": objective_value,
            "weights": weights,
            "evaluations": evaluations,
        }
        if duration_seconds is not None:
            fields["duration_seconds"] = duration_seconds

        self._log(logging.INFO,
                  f"Optimization completed ({backend}, {objective}): objective={objective_value:.6g}",
                  EventType.OPTIMIZATION_END, **fields)
        self._count("optimizations_completed")
        if evaluations:
            self._count("candidates_evaluated", evaluations)

    def log_frontier(self, n_points: int, risk_measure: str, duration_seconds: Optional[float] = None,
                     backend: Optional[str] = None):
        fields = {"n_points": n_points, "risk_measure": risk_measure, "backend": backend}
        if duration_seconds is not None:
            fields["duration_seconds"] = duration_seconds

        self._log(logging.INFO, f"Efficient frontier computed with {n_points} points",
                  EventType.FRONTIER, **fields)
        self._count("frontier_points", n_points)

    def log_simulation(
        self,
        n_simulations: int,
        n_periods: int,
        risk_measure: str,
        duration_seconds: Optional[float] = None,
        summary: Optional[Dict[str, float]] = None,
    ):
        fields = {"n_simulations": n_simulations, "n_periods": n_periods, "risk_measure": risk_measure}
        if duration_seconds is not None:
            fields["duration_seconds"] = duration_seconds
        if summary:
            fields["summary"] = summary

        self._log(logging.INFO, f"Scenario analysis completed: {n_simulations} paths x {n_periods} periods",
                  EventType.SIMULATION, **fields)
        self._count("paths_simulated", n_simulations)

    def log_error(self, error: Exception, operation: Optional[str] = None):
        """
        Log an exception with its traceback

        Args:
            error: Exception object
            operation: Operation that failed
        """
        fields = {
            "error_type": type(error).__name__,
            "error_message": str(error),
            "traceback": "".join(traceback.format_exception(type(error), error, error.__traceback__)),
        }
        if operation:
            fields["operation"] = operation

        self._log(logging.ERROR,
                  f"Error in {operation or 'operation'}: {type(error).__name__}: {error}",
                  EventType.ERROR, **fields)
        if self.config.track_performance:
            self._performance_tracker.record_error(type(error).__name__, operation)

    def log_performance_summary(self):
        """Log the current counters as a single performance event"""
        self._log(logging.INFO, "Performance summary", EventType.PERFORMANCE,
                  **self._performance_tracker.get_metrics_summary())

    @property
    def performance_tracker(self) -> PerformanceTracker:
        return self._performance_tracker


_global_logger: Optional[RiskLibLogger] = None


def setup_logging(
    log_dir: str = "logs",
    log_level: str = "INFO",
    console_enabled: bool = True,
    file_enabled: bool = False,
    json_format: bool = False,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
    track_performance: bool = False,
    environment: str = "library"
) -> RiskLibLogger:
    """
    Configure the ``risklib`` namespace for an application

    Args:
        log_dir: Directory for log files
        log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        console_enabled: Enable console output (stderr)
        file_enabled: Enable size-rotated JSON file output
        json_format: Use JSON format for console output
        max_bytes: Max file size before rotation
        backup_count: Number of rotated files to keep
        track_performance: Keep event counters
        environment: Preset name (library, development, production, testing)

    Returns:
        The new RiskLibLogger instance
    """
    global _global_logger

    config = LogConfig(
        log_dir=log_dir,
        log_level=LogLevel.__members__.get(log_level.upper(), LogLevel.INFO),
        console_enabled=console_enabled,
        file_enabled=file_enabled,
        json_format=json_format,
        max_bytes=max_bytes,
        backup_count=backup_count,
        track_performance=track_performance,
        environment=environment
    )

    # Reset singleton for reconfiguration
    RiskLibLogger._instance = None

    _global_logger = RiskLibLogger(config=config)
    _global_logger.attach_handlers()
    return _global_logger


def get_logger() -> RiskLibLogger:
    """
    Get the global logger instance

    Returns the instance from the last setup_logging call, or a library
    preset logger that leaves the namespace untouched.
    """
    global _global_logger

    if _global_logger is None:
        _global_logger = RiskLibLogger(config=LogConfig())

    return _global_logger


__all__ = [
    'RiskLibLogger',
    'LogConfig',
    'LogLevel',
    'EventType',
    'PerformanceTracker',
    'JSONFormatter',
    'ConsoleFormatter',
    'setup_logging',
    'get_logger',
]
