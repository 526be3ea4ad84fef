"""
Engine configuration: iteration caps and solver tolerances.

The defaults reproduce the on-chain contracts; overriding them is meant for
testing and research, not for pricing live pools.
"""

from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Literal, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .constants import (
    AMP_PRECISION,
    MAX_ITERATIONS,
    PCL_FEE_TOLERANCE,
    PCL_TOLERANCE,
)
from .exceptions import ConfigurationError


class EngineConfig(BaseModel):
    """Immutable solver settings shared by all curves."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_iterations: int = Field(
        default=MAX_ITERATIONS,
        ge=1,
        le=1024,
        description="Newton iteration cap before ConvergenceFailure",
    )
    stable_amp_precision: int = Field(
        default=AMP_PRECISION,
        ge=1,
        description="Scale factor of on-chain stable amp values",
    )
    pcl_tolerance: Decimal = Field(
        default=PCL_TOLERANCE,
        gt=0,
        le=1,
        description="Convergence tolerance of the concentrated Newton solvers",
    )
    pcl_fee_tolerance: Decimal = Field(
        default=PCL_FEE_TOLERANCE,
        ge=0,
        lt=1,
        description="Imbalance coefficients at or below this charge out_fee only",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.upper()
        return v

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "EngineConfig":
        """
        Validate a config mapping.

        Raises:
            ConfigurationError: If any field is unknown or out of range
        """
        try:
            return cls(**config_dict)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid engine configuration: {e.error_count()} error(s)",
                details={"errors": e.errors(include_url=False)},
            ) from e


DEFAULT_CONFIG = EngineConfig()


def load_config(config_path: Union[str, Path]) -> EngineConfig:
    """
    Load and validate engine config from a YAML file.

    The file may hold the settings at top level or under an ``engine`` key.

    Args:
        config_path: Path to config YAML file

    Returns:
        Validated EngineConfig instance

    Raises:
        ConfigurationError: If the file is missing, unparsable or invalid
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            config_dict = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if config_dict is None:
        return DEFAULT_CONFIG
    if not isinstance(config_dict, dict):
        raise ConfigurationError(
            f"Config file must contain a YAML dictionary: {config_path}"
        )

    if "engine" in config_dict:
        config_dict = config_dict["engine"] or {}
        if not isinstance(config_dict, dict):
            raise ConfigurationError("'engine' section must be a dictionary")

    return EngineConfig.from_dict(config_dict)
