"""
Configuration file support for WKT conversion.

Settings live in a JSON file so the same limits and dialect can be shared
between runs and teammates.

Example JSON configuration:
{
  "settings": {
    "dialect": "oracle",
    "array_limit": 900,
    "clob_limit": 4000,
    "srid_mode": "expression",
    "pretty": false
  }
}

srid_mode controls how EPSG codes become Oracle SRIDs:
  - "expression": inline a COALESCE lookup evaluated by Oracle at run time
  - "database":   query a live connection once per SRID and inline the result
  - "none":       always emit NULL
"""

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .dialects import Dialect, SpatialSqlGenerator
from .srid_cache import ExpressionSridResolver, OracleSridResolver, QueryExecutor, SridCache

logger = logging.getLogger(__name__)


SRID_MODES = ("expression", "database", "none")


@dataclass
class ConversionConfig:
    """Settings for converting geometry literals."""
    dialect: str = Dialect.ORACLE.value
    array_limit: int = 900  # Oracle rejects array constructors with ~1000 arguments
    clob_limit: int = 4000  # Maximum length of an Oracle string literal
    srid_mode: str = "expression"
    pretty: bool = False
    source_file: Optional[str] = None  # Path to the config file (for reference)

    def __post_init__(self):
        errors = self.validate()
        if errors:
            raise ValueError("; ".join(errors))

    def validate(self) -> List[str]:
        """Return a list of problems with the current settings."""
        errors = []
        try:
            Dialect.from_name(self.dialect)
        except (ValueError, AttributeError):
            errors.append(f"dialect: unsupported value {self.dialect!r}")
        for key in ("array_limit", "clob_limit"):
            value = getattr(self, key)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                errors.append(f"{key}: must be a positive integer, got {value!r}")
        if self.srid_mode not in SRID_MODES:
            errors.append(f"srid_mode: must be one of {', '.join(SRID_MODES)}, got {self.srid_mode!r}")
        if not isinstance(self.pretty, bool):
            errors.append(f"pretty: must be true or false, got {self.pretty!r}")
        return errors

    def to_dict(self) -> Dict[str, Any]:
        settings = asdict(self)
        settings.pop("source_file")
        return {"settings": settings}

    def create_generator(self, query_executor: Optional[QueryExecutor] = None,
                         srid_cache: Optional[SridCache] = None) -> SpatialSqlGenerator:
        """
        Build a SpatialSqlGenerator from these settings.

        Args:
            query_executor: Scalar query function, required for srid_mode "database"
            srid_cache: Shared SRID cache for the database resolver

        Returns:
            Configured generator
        """
        if self.srid_mode == "database":
            if query_executor is None:
                raise ValueError("srid_mode 'database' needs a database connection")
            resolver = OracleSridResolver(query_executor, srid_cache=srid_cache)
        elif self.srid_mode == "expression":
            resolver = ExpressionSridResolver()
        else:
            resolver = None
        return SpatialSqlGenerator(
            dialect=self.dialect,
            srid_resolver=resolver,
            array_limit=self.array_limit,
            clob_limit=self.clob_limit,
        )


def parse_config(data: Dict[str, Any], source_file: Optional[str] = None) -> ConversionConfig:
    """
    Parse a configuration dictionary into a ConversionConfig object.

    Args:
        data: Dictionary containing the configuration
        source_file: Optional source file path for reference

    Returns:
        ConversionConfig object

    Raises:
        ValueError: If a setting is unknown or invalid
    """
    if not isinstance(data, dict):
        raise ValueError("Configuration must be a JSON object")
    settings = data.get("settings", {})
    if not isinstance(settings, dict):
        raise ValueError("'settings' must be a JSON object")

    known = {"dialect", "array_limit", "clob_limit", "srid_mode", "pretty"}
    unknown = sorted(set(settings) - known)
    if unknown:
        raise ValueError(f"Unknown setting(s): {', '.join(unknown)}")

    return ConversionConfig(source_file=source_file, **settings)


def load_config(config_path: str) -> ConversionConfig:
    """
    Load conversion settings from a JSON configuration file.

    Args:
        config_path: Path to the JSON configuration file

    Returns:
        ConversionConfig object

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ValueError: If the config file is invalid
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in config file: {e}")

    config = parse_config(data, str(path))
    logger.info("Loaded configuration from %s", path)
    return config


def create_sample_config() -> Dict[str, Any]:
    """Create a configuration dictionary holding the default settings."""
    return ConversionConfig().to_dict()


def save_sample_config(output_path: str) -> None:
    """
    Save a sample configuration file.

    Args:
        output_path: Path where to save the sample config
    """
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(create_sample_config(), f, indent=2)
    logger.info("Sample configuration saved to %s", output_path)


def validate_config(config_path: str) -> Tuple[bool, List[str]]:
    """
    Validate a configuration file.

    Args:
        config_path: Path to the configuration file

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    try:
        load_config(config_path)
    except (FileNotFoundError, ValueError, TypeError) as e:
        return False, [str(e)]
    return True, []
