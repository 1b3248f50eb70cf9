"""Tests for group membership tools."""

import pytest

from ldap3 import MODIFY_ADD, MODIFY_DELETE

from ldap_admin.tools.group import GroupTools
from ldap_admin.tools.lookup import UserDNResolver
from ldap_admin.exceptions import (
    DirectoryOperationError,
    EntryNotFoundError,
    NotInGroupError,
)


ALICE_DN = 'uid=alice,ou=people,dc=example,dc=org'
DEVELOPERS_DN = 'cn=developers,ou=groups,dc=example,dc=org'
OPERATORS_DN = 'cn=operators,ou=groups,dc=example,dc=org'


class StaticResolver(UserDNResolver):
    """Resolver returning a fixed DN for alice."""
    
    def resolve(self, username):
        if username != 'alice':
            raise EntryNotFoundError(f"User '{username}' not found")
        return ALICE_DN


@pytest.fixture
def group_tools(mock_ldap_manager):
    """Group tools instance for testing."""
    return GroupTools(mock_ldap_manager, resolver=StaticResolver())


def group_entry(dn, cn, members):
    return {'dn': dn, 'attributes': {'cn': [cn], 'member': members}}


class TestAddUserToGroups:
    """Test adding a user to groups."""
    
    def test_add_to_groups(self, group_tools, mock_ldap_manager):
        result = group_tools.add_user_to_groups('alice', ['developers', 'operators'])
        
        assert result['groups'] == [DEVELOPERS_DN, OPERATORS_DN]
        assert mock_ldap_manager.modify.call_count == 2
        first, second = mock_ldap_manager.modify.call_args_list
        assert first[0] == (DEVELOPERS_DN, {'member': [(MODIFY_ADD, [ALICE_DN])]})
        assert second[0] == (OPERATORS_DN, {'member': [(MODIFY_ADD, [ALICE_DN])]})
    
    def test_stops_at_first_failure(self, group_tools, mock_ldap_manager):
        """Test later groups are not attempted after a failure."""
        mock_ldap_manager.modify.side_effect = [
            True,
            DirectoryOperationError("Modify operation failed: noSuchObject", {'result': 32}),
            True
        ]
        
        with pytest.raises(DirectoryOperationError, match="'missing'") as exc_info:
            group_tools.add_user_to_groups('alice', ['developers', 'missing', 'operators'])
        
        assert exc_info.value.result == {'result': 32}
        assert 'developers' not in str(exc_info.value)
        assert mock_ldap_manager.modify.call_count == 2
    
    def test_unknown_user(self, group_tools, mock_ldap_manager):
        with pytest.raises(EntryNotFoundError):
            group_tools.add_user_to_groups('ghost', ['developers'])
        
        mock_ldap_manager.modify.assert_not_called()


class TestRemoveUserFromGroup:
    """Test removing a user from a group."""
    
    def test_remove(self, group_tools, mock_ldap_manager):
        mock_ldap_manager.search.return_value = [
            group_entry(DEVELOPERS_DN, 'developers', ['cn=admin,dc=example,dc=org', ALICE_DN])
        ]
        
        result = group_tools.remove_user_from_group('alice', 'developers')
        
        assert result['group_dn'] == DEVELOPERS_DN
        mock_ldap_manager.modify.assert_called_once_with(
            DEVELOPERS_DN, {'member': [(MODIFY_DELETE, [ALICE_DN])]}
        )
        
        kwargs = mock_ldap_manager.search.call_args[1]
        assert kwargs['search_base'] == 'ou=groups,dc=example,dc=org'
        assert kwargs['search_filter'] == '(&(objectClass=groupOfNames)(cn=developers))'
    
    def test_remove_uses_stored_member_value(self, group_tools, mock_ldap_manager):
        """Test a member stored with different case still matches."""
        stored = 'UID=alice,OU=people,DC=example,DC=org'
        mock_ldap_manager.search.return_value = [group_entry(DEVELOPERS_DN, 'developers', [stored])]
        
        group_tools.remove_user_from_group('alice', 'developers')
        
        mock_ldap_manager.modify.assert_called_once_with(
            DEVELOPERS_DN, {'member': [(MODIFY_DELETE, [stored])]}
        )
    
    def test_remove_matches_spaced_member_value(self, group_tools, mock_ldap_manager):
        """Test spacing after RDN separators does not hide membership."""
        stored = 'uid=alice, ou=people, dc=example, dc=org'
        mock_ldap_manager.search.return_value = [group_entry(DEVELOPERS_DN, 'developers', [stored])]
        
        group_tools.remove_user_from_group('alice', 'developers')
        
        mock_ldap_manager.modify.assert_called_once_with(
            DEVELOPERS_DN, {'member': [(MODIFY_DELETE, [stored])]}
        )
    
    def test_similar_member_is_not_a_match(self, group_tools, mock_ldap_manager):
        mock_ldap_manager.search.return_value = [
            group_entry(DEVELOPERS_DN, 'developers', ['uid=alice,ou=people,dc=example,dc=com'])
        ]
        
        with pytest.raises(NotInGroupError):
            group_tools.remove_user_from_group('alice', 'developers')
        
        mock_ldap_manager.modify.assert_not_called()
    
    def test_not_in_group(self, group_tools, mock_ldap_manager):
        """Test removing a non-member fails without modifying the group."""
        mock_ldap_manager.search.return_value = [
            group_entry(DEVELOPERS_DN, 'developers', ['cn=admin,dc=example,dc=org'])
        ]
        
        with pytest.raises(NotInGroupError) as exc_info:
            group_tools.remove_user_from_group('alice', 'developers')
        
        assert exc_info.value.username == 'alice'
        assert exc_info.value.group == 'developers'
        mock_ldap_manager.modify.assert_not_called()
    
    def test_group_not_found(self, group_tools, mock_ldap_manager):
        mock_ldap_manager.search.return_value = []
        
        with pytest.raises(EntryNotFoundError, match="Group 'missing' not found"):
            group_tools.remove_user_from_group('alice', 'missing')
        
        mock_ldap_manager.modify.assert_not_called()


class TestSearchOU:
    """Test listing groups and members."""
    
    def test_list_all_groups(self, group_tools, mock_ldap_manager):
        mock_ldap_manager.search.return_value = [
            {'dn': DEVELOPERS_DN, 'attributes': {'cn': ['developers']}},
            {'dn': OPERATORS_DN, 'attributes': {'cn': ['operators']}}
        ]
        
        groups = group_tools.search_ou()
        
        assert [group['cn'] for group in groups] == ['developers', 'operators']
        kwargs = mock_ldap_manager.search.call_args[1]
        assert kwargs['search_base'] == 'dc=example,dc=org'
        assert kwargs['search_filter'] == '(objectClass=groupOfNames)'
    
    def test_list_no_groups(self, group_tools, mock_ldap_manager):
        mock_ldap_manager.search.return_value = []
        
        assert group_tools.search_ou() == []
    
    def test_named_group(self, group_tools, mock_ldap_manager):
        mock_ldap_manager.search.return_value = [
            group_entry(DEVELOPERS_DN, 'developers', ['cn=admin,dc=example,dc=org', ALICE_DN])
        ]
        
        groups = group_tools.search_ou('developers')
        
        assert groups == [{
            'cn': 'developers',
            'dn': DEVELOPERS_DN,
            'members': ['cn=admin,dc=example,dc=org', ALICE_DN]
        }]
        kwargs = mock_ldap_manager.search.call_args[1]
        assert kwargs['search_base'] == 'ou=groups,dc=example,dc=org'
    
    def test_named_group_not_found(self, group_tools, mock_ldap_manager):
        mock_ldap_manager.search.return_value = []
        
        with pytest.raises(EntryNotFoundError):
            group_tools.search_ou('missing')
