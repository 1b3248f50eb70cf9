"""Tools for directory operations."""

from .base import BaseTool
from .lookup import LDAPUserDNResolver, UserDNResolver
from .user import UserTools, hash_password
from .group import GroupTools

__all__ = [
    "BaseTool",
    "LDAPUserDNResolver",
    "UserDNResolver",
    "UserTools",
    "GroupTools",
    "hash_password",
]
