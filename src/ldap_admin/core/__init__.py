"""Core functionality for LDAP admin tools."""

from .ldap_manager import LDAPManager
from .logging import setup_logging

__all__ = ["LDAPManager", "setup_logging"]
