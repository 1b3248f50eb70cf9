"""User management tools."""

import base64
import hashlib
from typing import List, Dict, Any

from ldap3 import MODIFY_ADD, MODIFY_REPLACE

from .base import BaseTool
from ..core.logging import log_ldap_operation
from ..exceptions import EntryNotFoundError, InvalidArgumentError

PASSWORD_SCHEME = "{SHA}"

USER_OBJECT_CLASSES = ["inetOrgPerson", "person", "organizationalPerson", "top"]

# Attribute values stored as group DNs rather than verbatim
GROUP_DN_ATTRIBUTE = "title"

# Only the number of values added to these is logged
CREDENTIAL_ATTRIBUTES = {"userpassword", "unicodepwd"}


def hash_password(password: str) -> str:
    """
    Hash a password into the directory's ``{SHA}`` credential format.

    The digest is unsalted, so equal passwords always produce the same
    stored value.

    Args:
        password: Cleartext password

    Returns:
        ``{SHA}`` followed by the base64 encoded SHA-1 digest
    """
    digest = hashlib.sha1(password.encode("utf-8")).digest()
    return PASSWORD_SCHEME + base64.b64encode(digest).decode("ascii")


class UserTools(BaseTool):
    """Tools for managing directory users."""

    def create_user(self, username: str, password: str, surname: str) -> Dict[str, Any]:
        """
        Create a new user under the users OU.

        Args:
            username: Username, used for ``uid`` and ``cn``
            password: Cleartext password, stored hashed
            surname: Surname, also used as display name and given name

        Returns:
            Summary of the created entry

        Raises:
            EntryAlreadyExistsError: If the user's DN is already taken
            DirectoryOperationError: If the add request fails
        """
        user_dn = self._build_dn(username, self.settings.user_base, naming_attribute="uid")
        mail = f"{username}@{self.settings.domain_mail}"

        user_attributes = {
            'objectClass': USER_OBJECT_CLASSES,
            'userPassword': hash_password(password),
            'sn': surname,
            'cn': username,
            'uid': username,
            'mail': mail,
            'displayName': surname,
            'givenName': surname
        }

        self.logger.info(f"Creating user: {username} ({user_dn})")

        self.ldap.add(user_dn, user_attributes)
        log_ldap_operation("create_user", user_dn, True, username=username)

        return {
            "username": username,
            "dn": user_dn,
            "mail": mail
        }

    def delete_user(self, username: str) -> Dict[str, Any]:
        """
        Delete a user.

        The entry is removed as is; group memberships pointing at it are
        left in place.

        Args:
            username: Username to delete

        Returns:
            Summary of the deleted entry
        """
        user_dn = self.resolver.resolve(username)

        self.logger.info(f"Deleting user: {username} ({user_dn})")

        self.ldap.delete(user_dn)
        log_ldap_operation("delete_user", user_dn, True, username=username)

        return {
            "username": username,
            "dn": user_dn
        }

    def modify_password(self, username: str, new_password: str) -> Dict[str, Any]:
        """
        Replace a user's password.

        Args:
            username: Username to modify
            new_password: New cleartext password

        Returns:
            Summary of the modified entry
        """
        user_dn = self.resolver.resolve(username)

        self.logger.info(f"Changing password for user: {username}")

        self.ldap.modify(user_dn, {
            'userPassword': [(MODIFY_REPLACE, [hash_password(new_password)])]
        })
        log_ldap_operation("modify_password", user_dn, True, username=username)

        return {
            "username": username,
            "dn": user_dn
        }

    def add_attribute(self, username: str, attribute: str, values: List[str]) -> Dict[str, Any]:
        """
        Add values to a user attribute.

        Values of ``title`` name groups and are stored as the group's DN
        (``cn=<value>,<groupOU>,<baseDN>``). Any other attribute stores the
        values verbatim.

        Args:
            username: Username to modify
            attribute: Attribute name
            values: Values to add

        Returns:
            Summary including the values actually stored

        Raises:
            InvalidArgumentError: If no value is given
        """
        if not values:
            raise InvalidArgumentError(f"At least one value is required for attribute '{attribute}'")

        user_dn = self.resolver.resolve(username)

        if attribute == GROUP_DN_ATTRIBUTE:
            stored_values = [self._group_dn(value) for value in values]
        else:
            stored_values = list(values)

        self.logger.info(f"Adding {len(stored_values)} value(s) to {attribute} of {username}")

        self.ldap.modify(user_dn, {
            attribute: [(MODIFY_ADD, stored_values)]
        })
        if attribute.lower() in CREDENTIAL_ATTRIBUTES:
            details = f"Added {len(stored_values)} value(s) to {attribute}"
        else:
            details = f"Added {attribute}: {stored_values}"
        log_ldap_operation("add_attribute", user_dn, True, details, username=username)

        return {
            "username": username,
            "dn": user_dn,
            "attribute": attribute,
            "values": stored_values
        }

    def search_user(self, username: str) -> Dict[str, Any]:
        """
        Get a user's main attributes.

        Args:
            username: Username to search for

        Returns:
            ``dn``, ``cn``, ``displayName``, ``mail`` and all ``titles``
            of the first matching entry

        Raises:
            EntryNotFoundError: If no entry matches
        """
        search_filter = f"(uid={self._escape_ldap_filter(username)})"

        results = self.ldap.search(
            search_base=self.settings.ldap_base_dn,
            search_filter=search_filter,
            attributes=['cn', 'displayName', 'mail', 'title']
        )

        if not results:
            log_ldap_operation("search_user", self.settings.ldap_base_dn, False, "User not found", username=username)
            raise EntryNotFoundError(f"User '{username}' not found")

        entry = results[0]
        attributes = entry['attributes']

        log_ldap_operation("search_user", entry["dn"], True, username=username)

        return {
            'dn': entry['dn'],
            'cn': self._first_value(attributes, 'cn'),
            'displayName': self._first_value(attributes, 'displayName'),
            'mail': self._first_value(attributes, 'mail'),
            'titles': list(attributes.get('title') or [])
        }
