#!/usr/bin/env python3
"""
Sync Signal

One-shot "a credential was added" notification. Bound to a page, it
travels as a DOM custom event so a producer and a consumer that only share
the page can talk; unbound, it calls the local listeners directly. There is
no queue: a signal nobody listens for is lost, and the periodic refresh of
the injector picks the change up later.
"""

import logging
import threading
from typing import Callable, List

from .exceptions import PageError
from .pages.base_page import BasePage

logger = logging.getLogger(__name__)

DEFAULT_EVENT_NAME = 'quickLoginCredentialAdded'

class SyncSignal:
    """Page-scoped, payload-free refresh notification"""

    def __init__(self, page: BasePage = None, event_name: str = DEFAULT_EVENT_NAME):
        self.page = page
        self.event_name = event_name
        self._listeners: List[Callable[[], None]] = []
        self._lock = threading.Lock()

    def connect(self, listener: Callable[[], None]):
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def disconnect(self, listener: Callable[[], None]):
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _notify(self):
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener()
            except Exception as e:
                logger.error(f"Sync signal listener failed: {e}")

    def emit(self):
        """Fire the signal (fire-and-forget)"""
        if self.page is None:
            self._notify()
            return
        try:
            self.page.dispatch_event(self.event_name)
            logger.debug(f"Dispatched {self.event_name} on page")
        except PageError as e:
            logger.warning(f"Could not dispatch {self.event_name}: {e}")

    def listen(self):
        """Install the document listener on the bound page (idempotent)"""
        if self.page is not None:
            self.page.listen(self.event_name)

    def poll(self) -> bool:
        """Notify listeners if the page event fired since the last poll"""
        if self.page is None or not self.page.consume_event(self.event_name):
            return False
        logger.info("Credential added event detected, refreshing")
        self._notify()
        return True
