"""Username to DN resolution."""

from abc import ABC, abstractmethod

from ldap3 import NO_ATTRIBUTES
from ldap3.utils.conv import escape_filter_chars

from ..core.ldap_manager import LDAPManager
from ..core.logging import get_logger, log_ldap_operation
from ..exceptions import EntryNotFoundError


class UserDNResolver(ABC):
    """Resolves a username to the DN of its directory entry."""
    
    @abstractmethod
    def resolve(self, username: str) -> str:
        """
        Resolve a username.
        
        Args:
            username: Value of the user's ``uid`` attribute
            
        Returns:
            Distinguished name of the user entry
            
        Raises:
            EntryNotFoundError: If no entry matches
        """


class LDAPUserDNResolver(UserDNResolver):
    """
    Look the user up in the directory by ``uid``.
    
    The whole base DN subtree is searched and the first match wins, so
    duplicate usernames under the base DN resolve to whichever entry the
    server returns first.
    """
    
    def __init__(self, ldap_manager: LDAPManager):
        self.ldap = ldap_manager
        self.logger = get_logger(self.__class__.__name__)
    
    def resolve(self, username: str) -> str:
        search_filter = f"(uid={escape_filter_chars(username)})"
        
        results = self.ldap.search(
            search_base=self.ldap.settings.ldap_base_dn,
            search_filter=search_filter,
            attributes=[NO_ATTRIBUTES]
        )
        
        if not results:
            log_ldap_operation("resolve_user", self.ldap.settings.ldap_base_dn, False, "User not found", username=username)
            raise EntryNotFoundError(f"User '{username}' not found")
        
        if len(results) > 1:
            self.logger.warning(f"{len(results)} entries match uid={username}, using {results[0]['dn']}")
        
        return results[0]['dn']
