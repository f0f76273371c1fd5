#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Configuration Loading Utility for spinham.

This module provides functions to load and validate the state configuration
(geometry, initial Hamiltonian parameters, chain layout) from a YAML file.
"""
import logging
import os
from typing import Any, Dict

import yaml
from pydantic import ValidationError

from .exceptions import ConfigurationError
from .schema import StateConfig

logger = logging.getLogger(__name__)


def read_yaml(filepath: str) -> Dict[str, Any]:
    """
    Reads a YAML file into a dictionary.

    Raises:
        FileNotFoundError: If the file is not found.
        ConfigurationError: If the YAML cannot be parsed or is not a mapping.
    """
    logger.info(f"Loading configuration from: {filepath}")
    if not os.path.exists(filepath):
        logger.error(f"Configuration file not found: {filepath}")
        raise FileNotFoundError(f"Configuration file not found: {filepath}")
    try:
        with open(filepath, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error(f"Error parsing YAML file {filepath}: {e}")
        raise ConfigurationError(f"Invalid YAML format in {filepath}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Top level of {filepath} must be a mapping, got {type(data).__name__}.")
    return data


def validate_config(data: Dict[str, Any], source: str = "<dict>") -> StateConfig:
    """Validate a configuration dictionary against the schema."""
    try:
        config = StateConfig.model_validate(data)
    except ValidationError as e:
        logger.error(f"Configuration validation failed for {source}: {e}")
        raise ConfigurationError(f"Invalid configuration in {source}:\n{e}") from e
    logger.info("Configuration validation passed.")
    return config


def load_state_config(filepath: str) -> StateConfig:
    """
    Loads and validates a state configuration from a YAML file.

    Args:
        filepath (str): The path to the YAML configuration file.

    Returns:
        StateConfig: The validated configuration.

    Raises:
        FileNotFoundError: If the configuration file is not found.
        ConfigurationError: If there's an error parsing the YAML or if the
                            content does not match the schema.
    """
    return validate_config(read_yaml(filepath), source=filepath)

