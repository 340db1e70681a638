#!/usr/bin/env python3
"""
Quick Login
===========

Save several credential sets per deployment of a web application and
re-apply one from a picker injected into its login page.

Features:
- Instance identification (database field, generator tag, origin)
- Per-instance credential lists in a JSON store
- Idempotent picker injection with periodic refresh
- Autofill and submit with delayed fallback
- Page-scoped sync signal between management and page

Usage:
    from login_tools.quick_login import create_credential_store, PageInjector

    store = create_credential_store("~/.quicklogin/credentials.json")
    injector = PageInjector(page, store)
    injector.refresh()
"""

from pathlib import Path

from .autofill import AutofillController
from .config import QuickLoginConfig
from .credential_store import (
    CredentialRecord,
    CredentialStore,
    JsonFileBackend,
    MemoryBackend,
    StorageBackend,
)
from .exceptions import (
    QuickLoginError,
    BackendUnavailableError,
    PageError,
    CredentialError,
    BrowserUnavailableError,
)
from .instance import PageState, detect_instance_key
from .management import CredentialManager
from .page_injector import InjectorState, PageInjector
from .pages import BasePage, SelectionControl, SoupPage
from .sync_signal import SyncSignal

__version__ = "1.0.0"

__all__ = [
    'AutofillController',
    'QuickLoginConfig',
    'CredentialRecord',
    'CredentialStore',
    'JsonFileBackend',
    'MemoryBackend',
    'StorageBackend',
    'QuickLoginError',
    'BackendUnavailableError',
    'PageError',
    'CredentialError',
    'BrowserUnavailableError',
    'PageState',
    'detect_instance_key',
    'CredentialManager',
    'InjectorState',
    'PageInjector',
    'BasePage',
    'SelectionControl',
    'SoupPage',
    'SyncSignal',
    'create_credential_store'
]

def create_credential_store(path) -> CredentialStore:
    """
    Factory function for a file-backed credential store

    Args:
        path: JSON file holding the store (created on first write)

    Returns:
        CredentialStore instance
    """
    return CredentialStore(JsonFileBackend(Path(path).expanduser()))
