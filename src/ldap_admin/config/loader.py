"""Configuration loader for LDAP admin tools."""

import json
import os
import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from ..exceptions import ConfigError
from .models import Settings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.json"


def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load settings from a JSON file.
    
    Args:
        config_path: Path to configuration file. If None, uses the
                    LDAP_ADMIN_CONFIG environment variable, then
                    ``config.json`` in the working directory.
    
    Returns:
        Settings: Loaded and validated settings
        
    Raises:
        ConfigError: If the file is missing, unreadable, not valid JSON
                     or lacks a required key
    """
    # Determine config file path
    if config_path is None:
        config_path = os.getenv("LDAP_ADMIN_CONFIG") or DEFAULT_CONFIG_PATH
    
    config_file = Path(config_path)
    if not config_file.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")
    
    logger.info(f"Loading configuration from: {config_path}")
    
    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            config_data = json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in configuration file: {e}")
        raise ConfigError(f"Invalid JSON in configuration file {config_path}: {e}") from e
    except OSError as e:
        logger.error(f"Error reading configuration: {e}")
        raise ConfigError(f"Unable to read configuration file {config_path}: {e}") from e
    
    if not isinstance(config_data, dict):
        raise ConfigError(f"Configuration file {config_path} must contain a JSON object")
    
    try:
        settings = Settings(**config_data)
    except ValidationError as e:
        logger.error(f"Invalid configuration: {e}")
        raise ConfigError(f"Invalid configuration in {config_path}: {e}") from e
    
    logger.info("Configuration loaded successfully")
    
    # Log configuration summary (without sensitive data)
    logger.debug(f"LDAP URL: {settings.ldap_url}")
    logger.debug(f"Base DN: {settings.ldap_base_dn}")
    logger.debug(f"Admin DN: {settings.admin_dn}")
    logger.debug(f"User base: {settings.user_base}")
    logger.debug(f"Group base: {settings.group_base}")
    
    return settings
