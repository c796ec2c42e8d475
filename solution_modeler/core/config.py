"""Run configuration.

Values are layered, later layers winning:

1. Built-in defaults
2. YAML file: ``--config`` or ``solution-modeler.yaml`` beside the solution
3. Environment: SOLUTION_MODELER_EXCLUDE_PROJECTS, SOLUTION_MODELER_LOG_LEVEL,
   SOLUTION_MODELER_WAIT
4. Command-line flags

Example file::

    projects:
      exclude_markers: [Test, Example, Sample, Benchmark]
    output:
      default_extension: .puml
    logging:
      level: INFO
    run:
      wait_after_end: false
"""

import logging
import os
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional, Tuple

import yaml

from .constants import DEFAULT_EXCLUDE_MARKERS, DEFAULT_OUTPUT_EXTENSION

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "solution-modeler.yaml"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off", "")


class ConfigError(ValueError):
    """The configuration file or an override is invalid."""


@dataclass(frozen=True)
class ModelerConfig:
    exclude_markers: Tuple[str, ...] = DEFAULT_EXCLUDE_MARKERS
    default_extension: str = DEFAULT_OUTPUT_EXTENSION
    log_level: str = "INFO"
    wait_after_end: bool = False

    def with_overrides(
        self,
        exclude_markers: Optional[str] = None,
        log_level: Optional[str] = None,
        wait_after_end: Optional[bool] = None,
    ) -> "ModelerConfig":
        """Apply command-line values; None leaves a setting unchanged."""
        config = self
        if exclude_markers is not None:
            config = replace(config, exclude_markers=_split_markers(exclude_markers))
        if log_level is not None:
            config = replace(config, log_level=_log_level(log_level))
        if wait_after_end is not None:
            config = replace(config, wait_after_end=wait_after_end)
        return config


def find_config_file(solution_path: str) -> Optional[str]:
    """The conventional config file beside the solution, if present."""
    candidate = os.path.join(os.path.dirname(os.path.abspath(solution_path)), CONFIG_FILE_NAME)
    return candidate if os.path.isfile(candidate) else None


def load_config(config_path: Optional[str] = None, solution_path: Optional[str] = None) -> ModelerConfig:
    """Build the effective configuration from file and environment.

    Args:
        config_path: Explicit YAML file; must exist when given
        solution_path: Solution whose directory is searched for the default file

    Raises:
        ConfigError: If the file is missing, unreadable or holds invalid values
    """
    if config_path is None and solution_path is not None:
        config_path = find_config_file(solution_path)

    config = ModelerConfig()
    if config_path is not None:
        config = _apply_file(config, _read_yaml(config_path))
        logger.debug(f"Loaded configuration from {config_path}")
    return _apply_environment(config)


def _read_yaml(path: str) -> Dict[str, Any]:
    if not os.path.isfile(path):
        raise ConfigError(f"Configuration file not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read configuration {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration {path} must be a mapping")
    return data


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"Configuration section '{name}' must be a mapping")
    return section


def _apply_file(config: ModelerConfig, data: Dict[str, Any]) -> ModelerConfig:
    projects = _section(data, "projects")
    output = _section(data, "output")
    logging_section = _section(data, "logging")
    run = _section(data, "run")

    if "exclude_markers" in projects:
        markers = projects["exclude_markers"]
        if isinstance(markers, str):
            markers = _split_markers(markers)
        elif isinstance(markers, list):
            markers = tuple(str(m).strip() for m in markers if str(m).strip())
        else:
            raise ConfigError("projects.exclude_markers must be a list or comma-separated string")
        config = replace(config, exclude_markers=markers)

    if "default_extension" in output:
        extension = str(output["default_extension"] or "").strip()
        if extension and not extension.startswith("."):
            extension = f".{extension}"
        config = replace(config, default_extension=extension)

    if "level" in logging_section:
        config = replace(config, log_level=_log_level(str(logging_section["level"])))

    if "wait_after_end" in run:
        wait = run["wait_after_end"]
        if not isinstance(wait, bool):
            raise ConfigError("run.wait_after_end must be true or false")
        config = replace(config, wait_after_end=wait)

    return config


def _apply_environment(config: ModelerConfig) -> ModelerConfig:
    markers = os.getenv("SOLUTION_MODELER_EXCLUDE_PROJECTS")
    if markers is not None:
        config = replace(config, exclude_markers=_split_markers(markers))

    level = os.getenv("SOLUTION_MODELER_LOG_LEVEL")
    if level:
        config = replace(config, log_level=_log_level(level))

    wait = os.getenv("SOLUTION_MODELER_WAIT")
    if wait is not None:
        config = replace(config, wait_after_end=_parse_bool(wait, "SOLUTION_MODELER_WAIT"))

    return config


def _split_markers(text: str) -> Tuple[str, ...]:
    return tuple(part.strip() for part in text.split(",") if part.strip())


def _log_level(value: str) -> str:
    level = value.strip().upper()
    if level not in _LOG_LEVELS:
        raise ConfigError(f"Invalid log level: {value}. Expected one of {list(_LOG_LEVELS)}")
    return level


def _parse_bool(value: str, name: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigError(f"Invalid boolean for {name}: {value}")
