"""
bootstrap/config.py - Engine configuration.

Provides configuration loading from files, environment variables, and defaults.
"""

from __future__ import annotations
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Optional
from pathlib import Path
import os
import json
import logging

from ..errors import OptimizationError, ErrorCode, ErrorCategory

logger = logging.getLogger("bootstrap.config")


class ConfigurationError(OptimizationError):
    """Engine settings are inconsistent."""

    code = ErrorCode.CFG_INVALID
    category = ErrorCategory.CONFIGURATION


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


def _env_optional_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    return int(value) if value not in (None, "") else None


@dataclass
class EngineSettings:
    """Tunable constants of the evolutionary search."""

    # Genetic operators
    elite_fraction: float = 0.1
    tournament_size: int = 3
    mutation_rate: float = 0.1
    mutation_scale: float = 0.1  # fraction of bound range

    # Termination
    stagnation_window: int = 20

    # Particle swarm
    pso_inertia: float = 0.7
    pso_cognitive: float = 1.5
    pso_social: float = 1.5
    pso_velocity_limit: float = 0.2  # fraction of bound range

    # Simulated annealing
    sa_initial_temperature: float = 0.05
    sa_cooling_rate: float = 0.95

    # Evaluation
    parallel_evaluation: bool = True
    max_workers: int = 4

    # Post-processing
    alternative_count: int = 5
    alternative_min_distance: float = 0.05
    sensitivity_perturbation: float = 0.2
    sensitivity_medium: float = 0.05
    sensitivity_high: float = 0.15
    sensitivity_critical: float = 0.30

    default_seed: Optional[int] = None

    def validate(self) -> None:
        """Raise ConfigurationError for settings the engine cannot run with."""
        if not 0.0 <= self.elite_fraction < 1.0:
            raise ConfigurationError(f"elite_fraction must be in [0, 1): {self.elite_fraction}")
        if self.tournament_size < 1:
            raise ConfigurationError(f"tournament_size must be >= 1: {self.tournament_size}")
        if not 0.0 <= self.mutation_rate <= 1.0:
            raise ConfigurationError(f"mutation_rate must be in [0, 1]: {self.mutation_rate}")
        if self.stagnation_window < 1:
            raise ConfigurationError(f"stagnation_window must be >= 1: {self.stagnation_window}")
        if not 0.0 < self.sa_cooling_rate < 1.0:
            raise ConfigurationError(f"sa_cooling_rate must be in (0, 1): {self.sa_cooling_rate}")
        if self.sa_initial_temperature <= 0:
            raise ConfigurationError("sa_initial_temperature must be positive")
        if not (self.sensitivity_medium <= self.sensitivity_high <= self.sensitivity_critical):
            raise ConfigurationError("sensitivity thresholds must be ascending")

    @classmethod
    def from_env(cls) -> "EngineSettings":
        return cls(
            elite_fraction=float(os.getenv("LASEROPT_ELITE_FRACTION", "0.1")),
            tournament_size=int(os.getenv("LASEROPT_TOURNAMENT_SIZE", "3")),
            mutation_rate=float(os.getenv("LASEROPT_MUTATION_RATE", "0.1")),
            mutation_scale=float(os.getenv("LASEROPT_MUTATION_SCALE", "0.1")),
            stagnation_window=int(os.getenv("LASEROPT_STAGNATION_WINDOW", "20")),
            sa_initial_temperature=float(os.getenv("LASEROPT_SA_TEMPERATURE", "0.05")),
            sa_cooling_rate=float(os.getenv("LASEROPT_SA_COOLING", "0.95")),
            parallel_evaluation=_env_bool("LASEROPT_PARALLEL", "true"),
            max_workers=int(os.getenv("LASEROPT_MAX_WORKERS", "4")),
            default_seed=_env_optional_int("LASEROPT_SEED"),
        )


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_file: Optional[str] = None
    json_logs: bool = False

    @classmethod
    def from_env(cls) -> "LoggingConfig":
        return cls(
            level=os.getenv("LASEROPT_LOG_LEVEL", "INFO"),
            format=os.getenv("LASEROPT_LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
            log_file=os.getenv("LASEROPT_LOG_FILE"),
            json_logs=_env_bool("LASEROPT_JSON_LOGS", "false"),
        )


@dataclass
class LaserOptConfig:
    """Root configuration for the optimization engine."""

    environment: str = "development"
    debug: bool = False

    engine: EngineSettings = field(default_factory=EngineSettings)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls) -> "LaserOptConfig":
        """Create configuration from environment variables."""
        return cls(
            environment=os.getenv("LASEROPT_ENVIRONMENT", "development"),
            debug=_env_bool("LASEROPT_DEBUG", "false"),
            engine=EngineSettings.from_env(),
            logging=LoggingConfig.from_env(),
        )

    @classmethod
    def from_file(cls, filepath: str) -> "LaserOptConfig":
        """Load configuration from JSON file."""
        path = Path(filepath)
        if not path.exists():
            logger.warning(f"Config file not found: {filepath}, using defaults")
            return cls.from_env()

        with open(path) as f:
            data = json.load(f)

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "LaserOptConfig":
        """Create config from dictionary, environment supplying the base."""
        config = cls.from_env()

        if "environment" in data:
            config.environment = data["environment"]
        if "debug" in data:
            config.debug = data["debug"]

        if "engine" in data:
            for key, value in data["engine"].items():
                if hasattr(config.engine, key):
                    setattr(config.engine, key, value)
                else:
                    logger.warning(f"Unknown engine setting ignored: {key}")

        if "logging" in data:
            for key, value in data["logging"].items():
                if hasattr(config.logging, key):
                    setattr(config.logging, key, value)

        config.engine.validate()
        return config

    def to_dict(self) -> Dict[str, Any]:
        """Serialize config to dictionary."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "engine": asdict(self.engine),
            "logging": asdict(self.logging),
        }


# Global config instance
_config: Optional[LaserOptConfig] = None


def load_config(filepath: str = None) -> LaserOptConfig:
    """
    Load configuration from file or environment.

    Args:
        filepath: Optional path to JSON config file

    Returns:
        LaserOptConfig instance
    """
    global _config

    if filepath:
        _config = LaserOptConfig.from_file(filepath)
    else:
        default_paths = [
            "./laseropt.json",
            "./config/laseropt.json",
            os.path.expanduser("~/.laseropt/config.json"),
        ]

        for path in default_paths:
            if Path(path).exists():
                logger.info(f"Loading config from: {path}")
                _config = LaserOptConfig.from_file(path)
                return _config

        _config = LaserOptConfig.from_env()

    logger.info(f"Configuration loaded: environment={_config.environment}")
    return _config


def get_config() -> LaserOptConfig:
    """Get current configuration, loading if needed."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Drop the cached configuration (tests and reloads)."""
    global _config
    _config = None
