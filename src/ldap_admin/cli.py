"""
Command-line entry points.

Each console script loads the configuration, binds to the directory, runs a
single operation and exits. Results go to stdout; failures print
``Error: <message>`` to stderr and exit with status 1.
"""

import argparse
import sys
from typing import Any, Callable, Dict, List, Optional

from .config.loader import load_config
from .config.models import LoggingConfig
from .core.ldap_manager import LDAPManager
from .core.logging import get_logger, setup_logging
from .exceptions import DirectoryError
from .tools.group import GroupTools
from .tools.user import CREDENTIAL_ATTRIBUTES, UserTools

logger = get_logger("cli")


def _build_parser(prog: str, description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=prog, description=description)
    parser.add_argument(
        '-c', '--config',
        default=None,
        help='Path to the JSON configuration (default: $LDAP_ADMIN_CONFIG or ./config.json)'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Log directory operations at DEBUG level'
    )
    return parser


def _run(args: argparse.Namespace, operation: Callable[[LDAPManager], None]) -> None:
    """
    Load settings, bind, and run ``operation`` with the bound manager.

    The connection is released before returning or exiting.
    """
    # Defaults until the configuration, and its logging section, is loaded
    setup_logging(LoggingConfig(), verbose=args.verbose)

    try:
        settings = load_config(args.config)
        setup_logging(settings.logging, verbose=args.verbose)

        with LDAPManager(settings) as ldap:
            operation(ldap)
    except DirectoryError as e:
        logger.debug(f"Command failed: {e!r}")
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def _print_user(user: Dict[str, Any]) -> None:
    print(f"DN: {user['dn']}")
    print(f"CN: {user['cn']}")
    print(f"DisplayName: {user['displayName']}")
    print(f"Email: {user['mail']}")
    print("Titles:")
    for title in user['titles']:
        print(f"  - {title}")


def _print_groups(groups: List[Dict[str, Any]], named: bool) -> None:
    for group in groups:
        if not named:
            print(f"OU: {group['cn']}")
            continue
        print(f"Group: {group['cn']}")
        for member in group['members']:
            print(f"  Member: {member}")


def adduser_main(argv: Optional[List[str]] = None) -> None:
    """Create a user: ``ldap-adduser <username> <password> <surname>``."""
    parser = _build_parser('ldap-adduser', 'Create a user entry under the users OU.')
    parser.add_argument('username', help='Username (uid and cn)')
    parser.add_argument('password', help='Password, stored as a {SHA} hash')
    parser.add_argument('surname', help='Surname, also used as display name and given name')
    args = parser.parse_args(argv)

    def operation(ldap: LDAPManager) -> None:
        result = UserTools(ldap).create_user(args.username, args.password, args.surname)
        print(f"User '{args.username}' created successfully ({result['dn']})")

    _run(args, operation)


def deluser_main(argv: Optional[List[str]] = None) -> None:
    """Delete a user: ``ldap-deluser <username>``."""
    parser = _build_parser('ldap-deluser', 'Delete the user entry matching a username.')
    parser.add_argument('username', help='Username to delete')
    args = parser.parse_args(argv)

    def operation(ldap: LDAPManager) -> None:
        result = UserTools(ldap).delete_user(args.username)
        print(f"User '{args.username}' deleted successfully ({result['dn']})")

    _run(args, operation)


def modify_main(argv: Optional[List[str]] = None) -> None:
    """Modify a user: ``ldap-modify <command> [<args>]``."""
    parser = _build_parser('ldap-modify', 'Modify users and group membership.')
    subparsers = parser.add_subparsers(dest='command', metavar='<command>')

    sub = subparsers.add_parser('modify_user_pass', help="Change a user's password")
    sub.add_argument('username')
    sub.add_argument('new_password')

    sub = subparsers.add_parser(
        'add_user_attr',
        help='Add one or more values to a user attribute; '
             'title values are stored as cn=<value>,<groupOU>,<baseDN>'
    )
    sub.add_argument('username')
    sub.add_argument('attribute')
    sub.add_argument('values', nargs='+')

    sub = subparsers.add_parser('add_user_group', help='Add a user to one or more groups')
    sub.add_argument('username')
    sub.add_argument('groups', nargs='+')

    sub = subparsers.add_parser('del_user_from_groups', help='Remove a user from a group')
    sub.add_argument('username')
    sub.add_argument('group')

    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return

    def operation(ldap: LDAPManager) -> None:
        if args.command == 'modify_user_pass':
            UserTools(ldap).modify_password(args.username, args.new_password)
            print(f"Password changed for user '{args.username}'")
        elif args.command == 'add_user_attr':
            result = UserTools(ldap).add_attribute(args.username, args.attribute, args.values)
            if args.attribute.lower() in CREDENTIAL_ATTRIBUTES:
                shown = f"{len(result['values'])} value(s)"
            else:
                shown = ', '.join(result['values'])
            print(f"Added {args.attribute} to user '{args.username}': {shown}")
        elif args.command == 'add_user_group':
            GroupTools(ldap).add_user_to_groups(args.username, args.groups)
            print(f"User '{args.username}' added to groups: {', '.join(args.groups)}")
        elif args.command == 'del_user_from_groups':
            GroupTools(ldap).remove_user_from_group(args.username, args.group)
            print(f"User '{args.username}' removed from '{args.group}'")

    _run(args, operation)


def search_main(argv: Optional[List[str]] = None) -> None:
    """Search users and groups: ``ldap-search <command> [<args>]``."""
    parser = _build_parser('ldap-search', 'Search users and groups.')
    subparsers = parser.add_subparsers(dest='command', metavar='<command>')

    sub = subparsers.add_parser('searchUser', help='Show a user by username')
    sub.add_argument('username')

    sub = subparsers.add_parser(
        'searchOU',
        help='List all groups, or the members of the named group'
    )
    sub.add_argument('ouname', nargs='?', default=None)

    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return

    def operation(ldap: LDAPManager) -> None:
        if args.command == 'searchUser':
            _print_user(UserTools(ldap).search_user(args.username))
        elif args.command == 'searchOU':
            _print_groups(GroupTools(ldap).search_ou(args.ouname), named=bool(args.ouname))

    _run(args, operation)
