"""Group membership tools."""

from typing import List, Dict, Any, Optional

from ldap3 import MODIFY_ADD, MODIFY_DELETE

from .base import BaseTool
from ..core.logging import log_ldap_operation
from ..exceptions import DirectoryError, DirectoryOperationError, EntryNotFoundError, NotInGroupError

GROUP_OBJECT_CLASS = "groupOfNames"


class GroupTools(BaseTool):
    """Tools for managing group membership."""

    def add_user_to_groups(self, username: str, groups: List[str]) -> Dict[str, Any]:
        """
        Add a user to each of the given groups.

        Groups are updated one request at a time, in order. The first failure
        stops processing; groups updated before it keep the new member.

        Args:
            username: Username to add
            groups: Group names under the groups OU

        Returns:
            Summary with the DNs of the updated groups

        Raises:
            DirectoryOperationError: Naming the group that could not be updated
        """
        user_dn = self.resolver.resolve(username)

        updated = []
        for group in groups:
            group_dn = self._group_dn(group)

            self.logger.info(f"Adding {user_dn} to group {group_dn}")

            try:
                self.ldap.modify(group_dn, {
                    'member': [(MODIFY_ADD, [user_dn])]
                })
            except DirectoryError as e:
                log_ldap_operation("add_group_member", group_dn, False, str(e), username=username)
                raise DirectoryOperationError(
                    f"Unable to add user '{username}' to group '{group}': {e}",
                    getattr(e, 'result', None)
                ) from e

            log_ldap_operation("add_group_member", group_dn, True, f"Added member: {user_dn}", username=username)
            updated.append(group_dn)

        return {
            "username": username,
            "dn": user_dn,
            "groups": updated
        }

    def remove_user_from_group(self, username: str, group: str) -> Dict[str, Any]:
        """
        Remove a user from a group.

        Args:
            username: Username to remove
            group: Group name under the groups OU

        Returns:
            Summary of the change

        Raises:
            EntryNotFoundError: If the user or the group does not exist
            NotInGroupError: If the user is not a member; nothing is modified
        """
        user_dn = self.resolver.resolve(username)

        group_entry = self._find_group(group)
        group_dn = group_entry['dn']
        members = group_entry['attributes'].get('member') or []

        # Keep the server's spelling of the value so the delete matches it
        member_value = next((m for m in members if self._same_dn(m, user_dn)), None)
        if member_value is None:
            log_ldap_operation("remove_group_member", group_dn, False, f"{user_dn} is not a member", username=username)
            raise NotInGroupError(username, group)

        self.logger.info(f"Removing {user_dn} from group {group_dn}")

        self.ldap.modify(group_dn, {
            'member': [(MODIFY_DELETE, [member_value])]
        })
        log_ldap_operation("remove_group_member", group_dn, True, f"Removed member: {user_dn}", username=username)

        return {
            "username": username,
            "dn": user_dn,
            "group": group,
            "group_dn": group_dn
        }

    def search_ou(self, name: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        List groups, or one group's members.

        Args:
            name: Group name. If None, every group under the base DN is listed.

        Returns:
            Without a name, ``{'cn', 'dn'}`` for every group (possibly empty).
            With a name, ``{'cn', 'dn', 'members'}`` for the matching group.

        Raises:
            EntryNotFoundError: If a name is given and no group matches
        """
        if not name:
            results = self.ldap.search(
                search_base=self.settings.ldap_base_dn,
                search_filter=f"(objectClass={GROUP_OBJECT_CLASS})",
                attributes=['cn']
            )
            log_ldap_operation("search_ou", self.settings.ldap_base_dn, True, f"Found {len(results)} groups")
            return [
                {'cn': self._first_value(entry['attributes'], 'cn'), 'dn': entry['dn']}
                for entry in results
            ]

        results = self._search_groups(name)
        if not results:
            log_ldap_operation("search_ou", name, False, "Group not found")
            raise EntryNotFoundError(f"Group '{name}' not found")

        log_ldap_operation("search_ou", results[0]['dn'], True, f"Found group: {name}")
        return [
            {
                'cn': self._first_value(entry['attributes'], 'cn'),
                'dn': entry['dn'],
                'members': list(entry['attributes'].get('member') or [])
            }
            for entry in results
        ]

    def _search_groups(self, name: str) -> List[Dict[str, Any]]:
        search_filter = f"(&(objectClass={GROUP_OBJECT_CLASS})(cn={self._escape_ldap_filter(name)}))"
        return self.ldap.search(
            search_base=self.settings.group_base,
            search_filter=search_filter,
            attributes=['cn', 'member']
        )

    def _find_group(self, name: str) -> Dict[str, Any]:
        results = self._search_groups(name)
        if not results:
            raise EntryNotFoundError(f"Group '{name}' not found")
        return results[0]
