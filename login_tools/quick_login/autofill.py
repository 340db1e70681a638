#!/usr/bin/env python3
"""
Autofill Controller
"""

import logging
from typing import Callable, Any

from .config import QuickLoginConfig
from .credential_store import CredentialRecord
from .exceptions import PageError
from .pages.base_page import BasePage
from .utils import contains_login_path, schedule_later

logger = logging.getLogger(__name__)

Scheduler = Callable[[float, Callable[[], None]], Any]

class AutofillController:
    """Fills the login form with a credential record and submits it"""

    def __init__(self, page: BasePage, config: QuickLoginConfig = None,
                 scheduler: Scheduler = None):
        self.page = page
        self.config = config or QuickLoginConfig()
        self.scheduler = scheduler or schedule_later

    def apply(self, record: CredentialRecord) -> bool:
        """
        Fill in and submit the login form

        If either field is missing the page has changed shape and nothing
        is touched.

        Returns:
            True if both fields were filled
        """
        config = self.config
        if not (self.page.has_field(config.username_field) and self.page.has_field(config.secret_field)):
            logger.info("Login fields not found, skipping autofill")
            return False

        self.page.set_field_value(config.username_field, record.username)
        self.page.set_field_value(config.secret_field, record.secret)
        logger.info(f"Filled login form for {record.username}")

        if self.page.activate(config.submit_selectors):
            logger.debug("Activated submit control")
        else:
            logger.debug("No submit control found")

        self.scheduler(config.submit_fallback_delay, self._submit_if_still_on_login)
        return True

    def _submit_if_still_on_login(self):
        """Submit the form directly when clicking did not navigate away"""
        try:
            if contains_login_path(self.page.url, self.config.login_paths):
                if self.page.submit_form(self.config.username_field):
                    logger.debug("Still on login page, submitted form directly")
        except PageError as e:
            logger.debug(f"Fallback submit skipped: {e}")
