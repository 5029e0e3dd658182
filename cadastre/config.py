"""
Configuration loading for cadastre processing.

Settings are read from ``config/cadastre.yaml`` under the project root
unless another path is given. A missing file falls back to the defaults;
a malformed one is an error.

Example file:

    loader:
      delimiter: ";"
      missing_marker: "NA"
    adjacency:
      grid_size: 1.0e-9
      use_bbox_prefilter: true
      max_workers: 4
"""

import logging
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from .acquisition.models import LoaderConfig
from .exceptions import ConfigurationError
from .processing.models import AdjacencyConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config") / "cadastre.yaml"


class CadastreConfig(BaseModel):
    """Complete configuration for loading parcels and building graphs."""

    loader: LoaderConfig = Field(
        default_factory=LoaderConfig,
        description="Parcel file reading configuration",
    )
    adjacency: AdjacencyConfig = Field(
        default_factory=AdjacencyConfig,
        description="Adjacency graph build configuration",
    )


DEFAULT_CONFIG = CadastreConfig()


def _read_yaml(config_path: Path) -> dict[str, Any]:
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot read config {config_path}", cause=e) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Config {config_path} must be a mapping, got {type(data).__name__}"
        )
    return data


def load_config(
    config_path: Optional[Path] = None,
    project_root: Optional[Path] = None,
) -> CadastreConfig:
    """
    Load configuration from YAML.

    Args:
        config_path: Path to the YAML file. Auto-detected if not provided.
        project_root: Project root used for auto-detection. Defaults to the
                      current working directory.

    Returns:
        CadastreConfig instance.

    Raises:
        ConfigurationError: If the file cannot be parsed or fails validation.
    """
    if config_path is None:
        config_path = (project_root or Path.cwd()) / DEFAULT_CONFIG_PATH
    config_path = Path(config_path)

    if not config_path.exists():
        logger.warning("Config not found at %s, using defaults", config_path)
        return CadastreConfig()

    data = _read_yaml(config_path)
    try:
        config = CadastreConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid config {config_path}", cause=e) from e

    logger.info("Loaded config from %s", config_path)
    return config
