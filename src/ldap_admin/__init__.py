"""
ldap-admin-tools - command-line utilities for managing users and groups in an
LDAP directory.

Each utility loads the shared JSON configuration, binds as the directory
administrator, performs one operation and exits: create or delete a user,
change a password, add attribute values, manage group membership, and search
users or groups.
"""

__version__ = "0.1.0"

from .config import Settings, load_config
from .core import LDAPManager
from .tools import GroupTools, UserTools

__all__ = ["GroupTools", "LDAPManager", "Settings", "UserTools", "load_config"]
