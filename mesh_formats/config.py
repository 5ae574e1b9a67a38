"""
JSON-based decoder configuration.

All keys are optional; a missing key keeps its default. Unknown keys are
rejected so that typos don't silently fall back to defaults.
"""

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Union

from .constants import MD2_DEFAULT_VERTEX_FORMAT, MD2_VERTEX_FORMATS, STL_MAX_NAME_LENGTH
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecoderConfig:
    """
    Decoder options.

    Attributes:
        md2_vertex_format: Width of MD2 quantized vertex components, "int32" or "uint8"
        md2_static_pose: Only build a mesh for the first MD2 frame
        md2_strict_version: Treat an MD2 version other than 15 as fatal
        stl_max_name_length: Longest ASCII STL solid name accepted as node name
    """
    md2_vertex_format: str = MD2_DEFAULT_VERTEX_FORMAT
    md2_static_pose: bool = False
    md2_strict_version: bool = True
    stl_max_name_length: int = STL_MAX_NAME_LENGTH

    def __post_init__(self):
        invalid = validate_config(asdict(self))
        if invalid:
            raise ConfigurationError(
                f"Invalid configuration values: {', '.join(invalid)}",
                invalid_parameters=invalid
            )

    @classmethod
    def from_dict(cls, data: dict, config_file: str = None) -> "DecoderConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration keys: {', '.join(unknown)}",
                config_file=config_file, invalid_parameters=unknown
            )
        invalid = validate_config(data)
        if invalid:
            raise ConfigurationError(
                f"Invalid configuration values: {', '.join(invalid)}",
                config_file=config_file, invalid_parameters=invalid
            )
        return cls(**data)

    def to_dict(self) -> dict:
        return asdict(self)


def validate_config(data: dict) -> list:
    """Return the names of parameters in ``data`` holding invalid values."""
    invalid = []
    if "md2_vertex_format" in data and data["md2_vertex_format"] not in MD2_VERTEX_FORMATS:
        invalid.append("md2_vertex_format")
    for key in ("md2_static_pose", "md2_strict_version"):
        if key in data and not isinstance(data[key], bool):
            invalid.append(key)
    if "stl_max_name_length" in data:
        value = data["stl_max_name_length"]
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            invalid.append("stl_max_name_length")
    return invalid


def load_config(config_file: Union[str, Path, None]) -> DecoderConfig:
    """
    Load a DecoderConfig from a JSON file.

    Args:
        config_file: Path to JSON configuration, or None for defaults

    Returns:
        DecoderConfig with file values applied over the defaults

    Raises:
        ConfigurationError: If the file is unreadable, not a JSON object,
            or contains unknown keys or invalid values
    """
    if config_file is None:
        return DecoderConfig()

    config_file = Path(config_file)
    try:
        with open(config_file, 'r') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Failed to load configuration from {config_file}: {e}",
                                 config_file=str(config_file)) from e

    if not isinstance(data, dict):
        raise ConfigurationError("Configuration root must be a JSON object",
                                 config_file=str(config_file))

    config = DecoderConfig.from_dict(data, config_file=str(config_file))
    logger.debug(f"Configuration loaded from {config_file}: {config.to_dict()}")
    return config


def create_config_template(output_path: Path) -> None:
    """Write a configuration file holding every option at its default value."""
    with open(output_path, 'w') as f:
        json.dump(DecoderConfig().to_dict(), f, indent=2)
        f.write("\n")
