"""
Configuration loading.

A configuration path is either a single document or a directory of
documents. Every document found in a directory is merged into one
Configuration, in file name order, so the pipeline never needs to know
where its declarations came from.

Supported formats: JSON (.json) and YAML (.yaml, .yml).
"""

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from logship.config.models import Configuration
from logship.core.exceptions import ConfigurationInvalid, ConfigurationNotFound

__all__ = [
    "CONFIG_SUFFIXES",
    "load_configuration",
    "load_file",
    "load_directory",
]

logger = logging.getLogger(__name__)

CONFIG_SUFFIXES = (".json", ".yaml", ".yml")


def _read_document(path: Path) -> Any:
    suffix = path.suffix.lower()

    try:
        with path.open("r", encoding="utf-8") as f:
            if suffix in (".yaml", ".yml"):
                return yaml.safe_load(f)
            if suffix == ".json":
                text = f.read()
                return json.loads(text) if text.strip() else None
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationInvalid(f"Cannot parse configuration: {e}", path=str(path)) from e
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationInvalid(f"Cannot read configuration: {e}", path=str(path)) from e

    raise ConfigurationInvalid(
        f"Unsupported configuration format: {path.suffix or '(none)'}",
        path=str(path),
    )


def load_file(path: str | Path) -> Configuration:
    """
    Load a single configuration document.

    Raises:
        ConfigurationNotFound: If the file does not exist
        ConfigurationInvalid: If the document cannot be parsed or has the wrong shape
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigurationNotFound("Missing config file", path=str(path))

    logger.info("Reading configuration from file: %s", path.resolve())
    return Configuration.from_dict(_read_document(path), path=str(path))


def load_directory(path: str | Path) -> Configuration:
    """
    Load and merge every configuration document in a directory.

    Only files with a supported suffix are read; subdirectories are not
    descended into. An empty directory is an empty configuration.

    Raises:
        ConfigurationNotFound: If the directory does not exist
        ConfigurationInvalid: If any document cannot be parsed or has the wrong shape
    """
    path = Path(path)
    if not path.is_dir():
        raise ConfigurationNotFound("Missing config directory", path=str(path))

    logger.info("Reading configurations from directory: %s", path.resolve())

    configuration = Configuration()
    for document in sorted(path.iterdir()):
        if document.is_file() and document.suffix.lower() in CONFIG_SUFFIXES:
            logger.debug("Merging configuration document %s", document.name)
            configuration = configuration.merge(load_file(document))

    return configuration


def load_configuration(path: str | Path) -> Configuration:
    """
    Resolve a configuration path, file or directory, into one Configuration.

    Raises:
        ConfigurationNotFound: If the path is neither a file nor a directory
        ConfigurationInvalid: If a document cannot be parsed or has the wrong shape
    """
    path = Path(path)

    if path.is_dir():
        return load_directory(path)
    if path.is_file():
        return load_file(path)

    raise ConfigurationNotFound(
        "Configuration path is neither a file nor a directory",
        path=str(path),
    )
