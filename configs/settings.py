"""Configuration loading for the rover localization stack."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

import yaml

from configs.validator import validate_config
from exceptions import ConfigError, InvalidConfigError
from log_config.logger import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).with_name("default.yaml")


@dataclass(frozen=True)
class LoopConfig:
    fps: int = 20


@dataclass(frozen=True)
class SensorConfig:
    sample_rate: int = 4
    correction_interval_s: float = 2.0
    calibration_repetitions: int = 30
    calibration_wait_s: float = 1.0
    join_timeout_s: float = 2.0


@dataclass(frozen=True)
class ModelConfig:
    drift: float = 0.16
    position_error: float = 3.0
    velocity_error: float = 0.1
    initial_covariance: Tuple[float, float, float, float] = (3.0, 3.0, 0.0, 0.0)


@dataclass(frozen=True)
class AppConfig:
    log_level: str
    loop: LoopConfig
    sensors: SensorConfig
    model: ModelConfig


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> AppConfig:
    """Load and validate configuration from YAML file.

    Args:
        path: Path to configuration file

    Returns:
        Validated AppConfig instance

    Raises:
        ConfigError: If configuration is invalid or cannot be loaded
    """
    path = Path(path)
    try:
        logger.info(f"Loading configuration from {path}")
        if not path.exists():
            raise InvalidConfigError(f"Configuration file not found: {path}")

        data = yaml.safe_load(path.read_text()) or {}

        # Fills in schema defaults as a side effect
        validate_config(data)

    except yaml.YAMLError as e:
        logger.error(f"Failed to parse YAML configuration: {e}")
        raise InvalidConfigError(f"Failed to parse configuration file: {e}")

    try:
        model_data = dict(data["model"])
        model_data["initial_covariance"] = tuple(float(v) for v in model_data["initial_covariance"])

        config = AppConfig(
            log_level=data["log_level"],
            loop=LoopConfig(**data["loop"]),
            sensors=SensorConfig(**data["sensors"]),
            model=ModelConfig(**model_data),
        )

        logger.info(
            f"Configuration loaded successfully: {config.loop.fps}fps loop, "
            f"{config.sensors.sample_rate}Hz sampling, drift={config.model.drift}"
        )
        return config

    except ConfigError:
        raise
    except Exception as e:
        logger.error(f"Failed to construct configuration objects: {e}")
        raise InvalidConfigError(f"Failed to construct configuration: {e}")


__all__ = ["AppConfig", "LoopConfig", "ModelConfig", "SensorConfig", "load_config", "DEFAULT_CONFIG_PATH"]
