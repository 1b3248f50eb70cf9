"""Shared fixtures for the test suite."""

import json
import logging

import pytest
from unittest.mock import Mock
from ldap3 import Server, Connection, MOCK_SYNC, NONE

from ldap_admin.config.models import Settings
from ldap_admin.core.ldap_manager import LDAPManager
from ldap_admin.core.logging import LOGGER_NAME


BASE_DN = "dc=example,dc=org"
ADMIN_DN = "cn=admin,dc=example,dc=org"
ADMIN_PASSWORD = "secret"


@pytest.fixture
def config_data():
    """Configuration document as stored on disk."""
    return {
        "ldapBaseDN": BASE_DN,
        "adminDN": ADMIN_DN,
        "adminPass": ADMIN_PASSWORD,
        "ldapURL": "ldap://ldap.example.org:389",
        "userOU": "ou=people",
        "groupOU": "ou=groups",
        "domainMail": "example.org"
    }


@pytest.fixture
def settings(config_data):
    """Directory settings."""
    return Settings(**config_data)


@pytest.fixture
def config_file(tmp_path, config_data):
    """Configuration written to a temporary file."""
    path = tmp_path / "config.json"
    path.write_text(json.dumps(config_data), encoding="utf-8")
    return str(path)


@pytest.fixture
def mock_ldap_manager(settings):
    """Mock LDAP manager for tool tests."""
    manager = Mock(spec=LDAPManager)
    manager.settings = settings
    manager.search.return_value = []
    manager.add.return_value = True
    manager.modify.return_value = True
    manager.delete.return_value = True
    return manager


@pytest.fixture
def directory_server():
    """
    In-memory directory served by the ldap3 mock strategy.

    Holds the base entry, the admin account, the people and groups OUs, and
    two groups whose only member is the admin.
    """
    server = Server("fake_ldap_server", get_info=NONE)
    seed = Connection(server, client_strategy=MOCK_SYNC)
    seed.strategy.add_entry(BASE_DN, {
        "objectClass": ["dcObject", "organization"],
        "dc": "example",
        "o": "Example"
    })
    seed.strategy.add_entry(ADMIN_DN, {
        "objectClass": ["person"],
        "cn": "admin",
        "sn": "admin",
        "userPassword": ADMIN_PASSWORD
    })
    seed.strategy.add_entry(f"ou=people,{BASE_DN}", {
        "objectClass": ["organizationalUnit"],
        "ou": "people"
    })
    seed.strategy.add_entry(f"ou=groups,{BASE_DN}", {
        "objectClass": ["organizationalUnit"],
        "ou": "groups"
    })
    for group in ("developers", "operators"):
        seed.strategy.add_entry(f"cn={group},ou=groups,{BASE_DN}", {
            "objectClass": ["groupOfNames"],
            "cn": group,
            "member": [ADMIN_DN]
        })
    return server


@pytest.fixture
def directory(settings, directory_server):
    """LDAP manager bound to the in-memory directory."""
    manager = LDAPManager(settings, server=directory_server, client_strategy=MOCK_SYNC)
    yield manager
    manager.disconnect()


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers installed by a command run so they do not outlive the test."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
