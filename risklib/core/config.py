"""
Configuration for RiskLib

Settings are plain dataclasses grouped in RiskLibConfig. They can be built
in code or loaded from a YAML file:

    optimizer:
      n_samples: 20000
      random_seed: 7
      n_workers: 4
    simulation:
      n_simulations: 5000
      n_periods: 252
    logging:
      level: DEBUG
      console_enabled: true
"""

import os
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, Optional, Tuple

import yaml

from .errors import ConfigurationError


@dataclass
class OptimizerConfig:
    """Settings for both optimizer backends.

    Attributes:
        n_samples: Candidates drawn by the stochastic optimizer
        random_seed: Seed for reproducible sampling (None for fresh entropy)
        n_workers: Worker threads for the stochastic search
        solver_method: scipy.optimize.minimize method for the convex backend
        ftol: Solver tolerance
        maxiter: Solver iteration limit
    """
    n_samples: int = 10000
    random_seed: Optional[int] = None
    n_workers: int = 1
    solver_method: str = "SLSQP"
    ftol: float = 1e-10
    maxiter: int = 1000

    def __post_init__(self):
        if self.n_samples < 1:
            raise ConfigurationError("optimizer.n_samples must be at least 1")
        if self.n_workers < 1:
            raise ConfigurationError("optimizer.n_workers must be at least 1")
        if self.ftol <= 0:
            raise ConfigurationError("optimizer.ftol must be positive")
        if self.maxiter < 1:
            raise ConfigurationError("optimizer.maxiter must be at least 1")


@dataclass
class SimulationConfig:
    """Settings for the Monte Carlo scenario evaluator.

    Attributes:
        n_simulations: Number of simulated paths
        n_periods: Periods per simulated path
        random_seed: Seed for reproducible paths
        n_workers: Worker threads for the simulation loop
        confidence_levels: Percentiles reported in scenario summaries
    """
    n_simulations: int = 1000
    n_periods: int = 252
    random_seed: Optional[int] = None
    n_workers: int = 1
    confidence_levels: Tuple[float, ...] = (5, 25, 50, 75, 95)

    def __post_init__(self):
        if self.n_simulations < 1:
            raise ConfigurationError("simulation.n_simulations must be at least 1")
        if self.n_periods < 1:
            raise ConfigurationError("simulation.n_periods must be at least 1")
        if self.n_workers < 1:
            raise ConfigurationError("simulation.n_workers must be at least 1")
        self.confidence_levels = tuple(float(c) for c in self.confidence_levels)
        if any(not 0 <= c <= 100 for c in self.confidence_levels):
            raise ConfigurationError("simulation.confidence_levels must lie in [0, 100]")


@dataclass
class LoggingSettings:
    """Logging options applied by the CLI through setup_logging."""
    level: str = "INFO"
    log_dir: str = "logs"
    console_enabled: bool = True
    file_enabled: bool = False
    json_format: bool = False

    def __post_init__(self):
        valid = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
        if self.level.upper() not in valid:
            raise ConfigurationError(f"logging.level must be one of {valid}")
        self.level = self.level.upper()


@dataclass
class RiskLibConfig:
    """Top level configuration"""
    optimizer: OptimizerConfig = field(default_factory=OptimizerConfig)
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    _SECTIONS = {
        "optimizer": OptimizerConfig,
        "simulation": SimulationConfig,
        "logging": LoggingSettings,
    }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "RiskLibConfig":
        """
        Build a configuration from a nested dictionary.

        Raises:
            ConfigurationError: On unknown sections, unknown keys or bad values
        """
        data = data or {}
        if not isinstance(data, dict):
            raise ConfigurationError("Configuration root must be a mapping")

        unknown = set(data) - set(cls._SECTIONS)
        if unknown:
            raise ConfigurationError(f"Unknown configuration sections: {sorted(unknown)}")

        sections = {}
        for name, section_cls in cls._SECTIONS.items():
            values = data.get(name) or {}
            if not isinstance(values, dict):
                raise ConfigurationError(f"Section '{name}' must be a mapping")
            allowed = {f.name for f in fields(section_cls)}
            bad_keys = set(values) - allowed
            if bad_keys:
                raise ConfigurationError(f"Unknown keys in '{name}': {sorted(bad_keys)}")
            try:
                sections[name] = section_cls(**values)
            except TypeError as e:
                raise ConfigurationError(f"Invalid values in '{name}': {e}") from e
        return cls(**sections)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a nested dictionary (YAML friendly)."""
        result = {}
        for name in self._SECTIONS:
            section = asdict(getattr(self, name))
            if "confidence_levels" in section:
                section["confidence_levels"] = list(section["confidence_levels"])
            result[name] = section
        return result


def load_config(config_path: Optional[str] = None) -> RiskLibConfig:
    """
    Load configuration from a YAML file.

    A missing path (or None) yields the defaults.

    Raises:
        ConfigurationError: If the file cannot be parsed or validated
    """
    if config_path is None or not os.path.exists(config_path):
        return RiskLibConfig()

    with open(config_path, "r") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Could not parse {config_path}: {e}") from e

    return RiskLibConfig.from_dict(data)


def save_config(config: RiskLibConfig, config_path: str) -> None:
    """Write configuration to a YAML file."""
    with open(config_path, "w") as f:
        yaml.safe_dump(config.to_dict(), f, sort_keys=False)
