"""Configuration module for LDAP admin tools."""

from .loader import load_config
from .models import LoggingConfig, Settings

__all__ = [
    "load_config",
    "LoggingConfig",
    "Settings",
]
