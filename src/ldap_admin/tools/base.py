"""Base class for directory tools."""

from typing import Any, Dict, List, Optional, Tuple

from ldap3.core.exceptions import LDAPInvalidDnError
from ldap3.utils.conv import escape_filter_chars
from ldap3.utils.dn import escape_rdn, parse_dn

from ..core.ldap_manager import LDAPManager
from ..core.logging import get_logger
from ..exceptions import InvalidArgumentError
from .lookup import LDAPUserDNResolver, UserDNResolver


class BaseTool:
    """Base class for all directory tools."""
    
    def __init__(self, ldap_manager: LDAPManager, resolver: Optional[UserDNResolver] = None):
        """
        Initialize base tool.
        
        Args:
            ldap_manager: LDAP manager instance
            resolver: Username to DN lookup, defaults to a ``uid`` search
        """
        self.ldap = ldap_manager
        self.settings = ldap_manager.settings
        self.resolver = resolver or LDAPUserDNResolver(ldap_manager)
        self.logger = get_logger(self.__class__.__name__)
    
    def _escape_ldap_filter(self, value: str) -> str:
        """
        Escape special characters in LDAP filter values.
        
        Args:
            value: Value to escape
            
        Returns:
            Escaped value
        """
        return escape_filter_chars(value)
    
    def _build_dn(self, name: str, base: str, naming_attribute: str = "cn") -> str:
        """
        Build Distinguished Name from a name and its parent.
        
        Args:
            name: Value of the naming attribute
            base: Parent DN
            naming_attribute: RDN attribute type
            
        Returns:
            Complete DN
        """
        if not name:
            raise InvalidArgumentError(f"Empty value for {naming_attribute}")
        return f"{naming_attribute}={escape_rdn(name)},{base}"

    def _group_dn(self, group: str) -> str:
        """DN of a group under the groups OU."""
        return self._build_dn(group, self.settings.group_base)

    @staticmethod
    def _normalize_dn(dn: str) -> Tuple[Tuple[str, str, str], ...]:
        """
        Comparable form of a DN.

        Spacing around separators and the case of attribute types and values
        are ignored, so ``uid=Bob, ou=people`` equals ``uid=bob,ou=people``.
        Values that do not parse as a DN compare as lowercased text.
        """
        try:
            return tuple(
                (attr.lower(), value.lower(), separator)
                for attr, value, separator in parse_dn(dn, strip=True)
            )
        except LDAPInvalidDnError:
            return (('', dn.strip().lower(), ''),)

    def _same_dn(self, first: str, second: str) -> bool:
        return self._normalize_dn(first) == self._normalize_dn(second)

    @staticmethod
    def _first_value(attributes: Dict[str, List[Any]], name: str, default: Any = "") -> Any:
        values = attributes.get(name) or []
        return values[0] if values else default
