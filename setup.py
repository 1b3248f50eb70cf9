"""
Setup script for ldap-admin-tools.

Installs the ``ldap_admin`` package and its four console scripts.
"""

from setuptools import setup, find_packages

setup(
    name="ldap-admin-tools",
    version="0.1.0",
    description="Command-line utilities for managing users and groups in an LDAP directory",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.9",
    install_requires=[
        "ldap3>=2.9",
        "pydantic>=2.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "ldap-adduser=ldap_admin.cli:adduser_main",
            "ldap-deluser=ldap_admin.cli:deluser_main",
            "ldap-modify=ldap_admin.cli:modify_main",
            "ldap-search=ldap_admin.cli:search_main",
        ],
    },
)
