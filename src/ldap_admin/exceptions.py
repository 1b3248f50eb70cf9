"""Exceptions for LDAP admin tools."""

from typing import Any, Dict, Optional

__all__ = [
    "ConfigError",
    "DirectoryConnectionError",
    "DirectoryError",
    "DirectoryOperationError",
    "EntryAlreadyExistsError",
    "EntryNotFoundError",
    "InvalidArgumentError",
    "NotInGroupError",
]


class DirectoryError(Exception):
    """Base class for all errors raised by the directory tools."""


class ConfigError(DirectoryError):
    """The configuration file could not be loaded."""


class DirectoryConnectionError(DirectoryError):
    """Connecting or binding to the LDAP server failed."""


class EntryNotFoundError(DirectoryError):
    """A lookup matched no entry."""


class EntryAlreadyExistsError(DirectoryError):
    """An entry with the requested DN already exists."""


class InvalidArgumentError(DirectoryError, ValueError):
    """A command argument cannot be turned into a directory request."""


class NotInGroupError(DirectoryError):
    """The user is not a member of the group it should be removed from."""

    def __init__(self, username: str, group: str) -> None:
        super().__init__(f"User '{username}' is not in group '{group}'")
        self.username = username
        self.group = group


class DirectoryOperationError(DirectoryError):
    """A directory request failed.

    Wraps the underlying ``ldap3`` exception or the server result of the
    failed operation.
    """

    def __init__(self, message: str, result: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.result = result
