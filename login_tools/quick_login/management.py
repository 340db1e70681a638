#!/usr/bin/env python3
"""
Credential Management for Quick Login

List, add and remove the credentials of one instance and trigger a login
in the page. Adding a credential emits the sync signal so an injector on
the same page re-renders without a reload.
"""

import logging
from typing import Optional, List

from .autofill import AutofillController
from .config import QuickLoginConfig
from .credential_store import CredentialStore, CredentialRecord
from .exceptions import CredentialError, PageError
from .instance import detect_instance_key
from .pages.base_page import BasePage
from .sync_signal import SyncSignal

logger = logging.getLogger(__name__)

class CredentialManager:
    """Management surface over the credential store"""

    def __init__(self, store: CredentialStore, page: BasePage = None,
                 config: QuickLoginConfig = None, signal: SyncSignal = None):
        self.store = store
        self.page = page
        self.config = config or QuickLoginConfig()
        self.signal = signal or SyncSignal(page, self.config.event_name)

    def resolve_instance_key(self) -> Optional[str]:
        """Evaluate the instance key inside the page, None without a usable page"""
        if self.page is None:
            return None
        try:
            state = self.page.snapshot(self.config.database_field, self.config.generator_meta)
        except PageError as e:
            logger.warning(f"Could not identify instance: {e}")
            return None
        return detect_instance_key(state)

    def list_credentials(self, key: str) -> List[CredentialRecord]:
        return self.store.get(key)

    def add_credential(self, key: str, username: str, secret: str) -> List[CredentialRecord]:
        """
        Save a new credential for an instance

        The sync signal is emitted only once the store has the new record.

        Raises:
            CredentialError: If username or secret is empty, or the store
                dropped the write
        """
        username = (username or '').strip()
        if not username or not secret:
            raise CredentialError("Both username and secret are required")

        records = self.store.add(key, CredentialRecord(username, secret))
        if records is None:
            raise CredentialError(f"Could not save credential for {key}: store unavailable")
        logger.info(f"Added credential '{username}' for {key}")
        self.signal.emit()
        return records

    def remove_credential(self, key: str, position: int) -> List[CredentialRecord]:
        """
        Remove the credential at position (0-based)

        Raises:
            CredentialError: If there is no credential at that position, or
                the store dropped the write
        """
        if not 0 <= position < len(self.store.get(key)):
            raise CredentialError(f"No credential at position {position + 1} for {key}")

        records = self.store.remove(key, position)
        if records is None:
            raise CredentialError(f"Could not remove credential for {key}: store unavailable")
        logger.info(f"Removed credential #{position + 1} for {key}")
        return records

    def login(self, key: str, position: int) -> bool:
        """
        Fill and submit the page's login form with a saved credential

        Raises:
            CredentialError: Without a page or a credential at position
        """
        if self.page is None:
            raise CredentialError("No page to log in on")
        records = self.store.get(key)
        if not 0 <= position < len(records):
            raise CredentialError(f"No credential at position {position + 1} for {key}")

        try:
            return AutofillController(self.page, self.config).apply(records[position])
        except PageError as e:
            logger.warning(f"Autofill failed: {e}")
            return False
