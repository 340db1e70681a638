#!/usr/bin/env python3
"""
Login Tools Package
===================

Reusable browser login utilities.

Available subpackages:
- quick_login: saved credential picker injected into login pages
"""

from .quick_login import CredentialStore, PageInjector, create_credential_store

__all__ = [
    'CredentialStore',
    'PageInjector',
    'create_credential_store'
]

__version__ = "1.0.0"
