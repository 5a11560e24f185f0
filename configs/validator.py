"""Configuration validation using JSON Schema."""

from __future__ import annotations

from typing import Any, Dict

import jsonschema
from jsonschema import Draft7Validator, validators

from exceptions import ConfigValidationError
from log_config.logger import get_logger

logger = get_logger(__name__)

_POSITIVE_NUMBER = {"type": "number", "exclusiveMinimum": 0}

# JSON Schema for default.yaml configuration
CONFIG_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "properties": {
        "log_level": {
            "type": "string",
            "enum": ["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"],
            "default": "INFO",
        },
        "loop": {
            "type": "object",
            "default": {},
            "additionalProperties": False,
            "properties": {
                "fps": {"type": "integer", "minimum": 1, "maximum": 200, "default": 20},
            },
        },
        "sensors": {
            "type": "object",
            "default": {},
            "additionalProperties": False,
            "properties": {
                "sample_rate": {"type": "integer", "minimum": 1, "maximum": 200, "default": 4},
                "correction_interval_s": {**_POSITIVE_NUMBER, "default": 2.0},
                "calibration_repetitions": {"type": "integer", "minimum": 0, "default": 30},
                "calibration_wait_s": {"type": "number", "minimum": 0, "default": 1.0},
                "join_timeout_s": {**_POSITIVE_NUMBER, "default": 2.0},
            },
        },
        "model": {
            "type": "object",
            "default": {},
            "additionalProperties": False,
            "properties": {
                "drift": {"type": "number", "minimum": 0, "default": 0.16},
                "position_error": {**_POSITIVE_NUMBER, "default": 3.0},
                "velocity_error": {**_POSITIVE_NUMBER, "default": 0.1},
                "initial_covariance": {
                    "type": "array",
                    "items": {"type": "number", "minimum": 0},
                    "minItems": 4,
                    "maxItems": 4,
                    "default": [3.0, 3.0, 0.0, 0.0],
                },
            },
        },
    },
}


def extend_with_default(validator_class):
    """Extend JSON Schema validator to set default values."""
    validate_properties = validator_class.VALIDATORS["properties"]

    def set_defaults(validator, properties, instance, schema):
        if isinstance(instance, dict):
            for prop, subschema in properties.items():
                if "default" in subschema:
                    default = subschema["default"]
                    instance.setdefault(prop, dict(default) if isinstance(default, dict) else default)

        for error in validate_properties(validator, properties, instance, schema):
            yield error

    return validators.extend(validator_class, {"properties": set_defaults})


DefaultValidatingValidator = extend_with_default(Draft7Validator)


def validate_config(config: Dict[str, Any]) -> None:
    """Validate configuration against JSON Schema, filling in defaults.

    Args:
        config: Configuration dictionary (mutated in place with defaults)

    Raises:
        ConfigValidationError: If configuration is invalid
    """
    if not isinstance(config, dict):
        raise ConfigValidationError(
            "Configuration root must be a mapping",
            validation_errors=[f"root: expected mapping, got {type(config).__name__}"],
        )

    try:
        validator = DefaultValidatingValidator(CONFIG_SCHEMA)
        errors = list(validator.iter_errors(config))

        if errors:
            error_messages = []
            for error in errors:
                path = " -> ".join(str(p) for p in error.path) if error.path else "root"
                error_messages.append(f"{path}: {error.message}")

            logger.error(f"Configuration validation failed with {len(errors)} errors")
            for msg in error_messages:
                logger.error(f"  - {msg}")

            raise ConfigValidationError(
                f"Configuration validation failed with {len(errors)} error(s). See logs for details.",
                validation_errors=error_messages,
            )

        logger.info("Configuration validation passed")

    except jsonschema.exceptions.SchemaError as e:
        logger.error(f"Invalid schema: {e}")
        raise ConfigValidationError(f"Invalid schema definition: {e}")


__all__ = ["validate_config", "CONFIG_SCHEMA"]
