"""LDAP connection manager for directory operations."""

import logging
from typing import Optional, List, Dict, Any, Union

import ldap3
from ldap3 import Server, Connection, NONE, SUBTREE, SYNC, ALL_ATTRIBUTES
from ldap3.core.exceptions import (
    LDAPCommunicationError,
    LDAPEntryAlreadyExistsResult,
    LDAPException,
    LDAPSocketOpenError,
)
from ldap3.utils.ciDict import CaseInsensitiveDict

from ..config.models import Settings
from ..exceptions import DirectoryConnectionError, DirectoryOperationError, EntryAlreadyExistsError

logger = logging.getLogger(__name__)

RESULT_SUCCESS = 0
RESULT_ENTRY_ALREADY_EXISTS = 68


class LDAPManager:
    """
    LDAP connection manager for directory operations.

    Holds a single connection bound as the administrator. The connection is
    opened on first use and released by ``disconnect`` or on leaving the
    ``with`` block. Failures are raised immediately and never retried.
    """

    def __init__(self,
                 settings: Settings,
                 server: Optional[Server] = None,
                 client_strategy: str = SYNC):
        """
        Initialize LDAP manager.

        Args:
            settings: Directory settings
            server: Pre-built ldap3 server, used instead of ``settings.ldap_url``
            client_strategy: ldap3 client strategy (``MOCK_SYNC`` in tests)
        """
        self.settings = settings
        self.client_strategy = client_strategy

        self._connection: Optional[Connection] = None
        self._server = server or self._setup_server()

    def _setup_server(self) -> Server:
        try:
            return Server(
                self.settings.ldap_url,
                get_info=NONE,
                connect_timeout=self.settings.timeout
            )
        except LDAPException as e:
            logger.error(f"Invalid LDAP server URL {self.settings.ldap_url}: {e}")
            raise DirectoryConnectionError(f"Invalid LDAP server URL {self.settings.ldap_url}: {e}") from e

    def connect(self) -> Connection:
        """
        Open the connection and bind as the administrator.

        Returns:
            Connection: Bound LDAP connection

        Raises:
            DirectoryConnectionError: If the server is unreachable or the
                                      bind is rejected
        """
        if self._connection and self._connection.bound:
            return self._connection

        logger.debug(f"Connecting to {self.settings.ldap_url} as {self.settings.admin_dn}")

        connection = Connection(
            self._server,
            user=self.settings.admin_dn,
            password=self.settings.admin_pass,
            auto_bind=ldap3.AUTO_BIND_NONE,
            client_strategy=self.client_strategy,
            receive_timeout=self.settings.timeout,
            authentication=ldap3.SIMPLE,
            raise_exceptions=True
        )

        try:
            bound = connection.bind()
        except (LDAPSocketOpenError, LDAPCommunicationError) as e:
            logger.error(f"Connection to {self.settings.ldap_url} failed: {e}")
            raise DirectoryConnectionError(f"Connection failed: {e}") from e
        except LDAPException as e:
            logger.error(f"Bind as {self.settings.admin_dn} failed: {e}")
            self._close(connection)
            raise DirectoryConnectionError(f"Authentication failed: {e}") from e

        if not bound:
            self._close(connection)
            raise DirectoryConnectionError(f"Authentication failed: {connection.result}")

        self._connection = connection
        logger.info(f"Bound to {self.settings.ldap_url} as {self.settings.admin_dn}")
        return connection

    def disconnect(self) -> None:
        """Disconnect from LDAP server."""
        if self._connection:
            try:
                self._close(self._connection)
                logger.info("Disconnected from LDAP server")
            finally:
                self._connection = None

    @staticmethod
    def _close(connection: Connection) -> None:
        try:
            connection.unbind()
        except LDAPException as e:
            logger.warning(f"Error during disconnect: {e}")

    def search(self,
               search_base: str,
               search_filter: str,
               attributes: Union[List[str], str] = ALL_ATTRIBUTES,
               search_scope: str = SUBTREE) -> List[Dict[str, Any]]:
        """
        Perform LDAP search operation.

        Args:
            search_base: Base DN for search
            search_filter: LDAP filter string
            attributes: Attributes to retrieve
            search_scope: Search scope (SUBTREE, LEVEL, BASE)

        Returns:
            Entries in server order, each ``{'dn': str, 'attributes': {...}}``.
            Attribute names are case-insensitive and values are always lists.

        Raises:
            DirectoryOperationError: If search fails
        """
        connection = self.connect()

        logger.debug(f"Searching: base={search_base}, filter={search_filter}")

        try:
            connection.search(
                search_base=search_base,
                search_filter=search_filter,
                search_scope=search_scope,
                attributes=attributes
            )
        except LDAPException as e:
            logger.error(f"Search error: {e}")
            raise DirectoryOperationError(f"Search failed: {e}", connection.result) from e

        # search() returns False for an empty result, so check the result code
        if connection.result and connection.result.get('result', RESULT_SUCCESS) != RESULT_SUCCESS:
            logger.error(f"Search failed: {connection.result}")
            raise DirectoryOperationError(f"Search failed: {connection.result}", connection.result)

        entries = []
        for response in connection.response or []:
            if response.get('type') != 'searchResEntry':
                continue

            entry_attributes = CaseInsensitiveDict()
            for attr_name, attr_value in (response.get('attributes') or {}).items():
                if isinstance(attr_value, list):
                    entry_attributes[attr_name] = attr_value
                else:
                    entry_attributes[attr_name] = [attr_value]

            entries.append({
                'dn': response['dn'],
                'attributes': entry_attributes
            })

        logger.debug(f"Search returned {len(entries)} entries")
        return entries

    def add(self, dn: str, attributes: Dict[str, Any]) -> bool:
        """
        Add LDAP entry.

        Args:
            dn: Distinguished name of new entry
            attributes: Entry attributes

        Returns:
            True if successful

        Raises:
            EntryAlreadyExistsError: If an entry with this DN exists
            DirectoryOperationError: If operation fails
        """
        connection = self.connect()

        logger.debug(f"Adding entry: {dn}")

        try:
            success = connection.add(dn, attributes=attributes)
        except LDAPEntryAlreadyExistsResult as e:
            logger.error(f"Entry already exists: {dn}")
            raise EntryAlreadyExistsError(f"Entry already exists: {dn}") from e
        except LDAPException as e:
            logger.error(f"Add error for {dn}: {e}")
            raise DirectoryOperationError(f"Add operation failed: {e}", connection.result) from e

        if success:
            logger.info(f"Successfully added entry: {dn}")
            return True

        if connection.result and connection.result.get('result') == RESULT_ENTRY_ALREADY_EXISTS:
            logger.error(f"Entry already exists: {dn}")
            raise EntryAlreadyExistsError(f"Entry already exists: {dn}")

        logger.error(f"Failed to add entry {dn}: {connection.result}")
        raise DirectoryOperationError(f"Add operation failed: {connection.result}", connection.result)

    def modify(self, dn: str, changes: Dict[str, Any]) -> bool:
        """
        Modify LDAP entry.

        Args:
            dn: Distinguished name of entry to modify
            changes: ldap3 changes, ``{attribute: [(operation, [values])]}``

        Returns:
            True if successful

        Raises:
            DirectoryOperationError: If operation fails
        """
        connection = self.connect()

        logger.debug(f"Modifying entry: {dn}")

        try:
            success = connection.modify(dn, changes)
        except LDAPException as e:
            logger.error(f"Modify error for {dn}: {e}")
            raise DirectoryOperationError(f"Modify operation failed: {e}", connection.result) from e

        if success:
            logger.info(f"Successfully modified entry: {dn}")
            return True

        logger.error(f"Failed to modify entry {dn}: {connection.result}")
        raise DirectoryOperationError(f"Modify operation failed: {connection.result}", connection.result)

    def delete(self, dn: str) -> bool:
        """
        Delete LDAP entry.

        Args:
            dn: Distinguished name of entry to delete

        Returns:
            True if successful

        Raises:
            DirectoryOperationError: If operation fails
        """
        connection = self.connect()

        logger.debug(f"Deleting entry: {dn}")

        try:
            success = connection.delete(dn)
        except LDAPException as e:
            logger.error(f"Delete error for {dn}: {e}")
            raise DirectoryOperationError(f"Delete operation failed: {e}", connection.result) from e

        if success:
            logger.info(f"Successfully deleted entry: {dn}")
            return True

        logger.error(f"Failed to delete entry {dn}: {connection.result}")
        raise DirectoryOperationError(f"Delete operation failed: {connection.result}", connection.result)

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.disconnect()
