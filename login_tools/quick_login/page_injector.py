#!/usr/bin/env python3
"""
Page Injector

Detects a login page, inserts the credential picker exactly once, keeps it
in step with the store and turns a pick into autofill.

Per page load the injector moves through:

    IDLE -> CHECKING -> NOT_APPLICABLE
                     -> AWAITING_FORM_FIELD -> (retry) CHECKING
                     -> RENDERING -> RENDERED | NOT_APPLICABLE

Refreshes come from the initial load, the sync signal and a periodic
timer. They all go through ``refresh()``, which runs one pass at a time:
a trigger that arrives mid-pass is folded into a single follow-up pass.
"""

import logging
import threading
import time
from enum import Enum
from typing import Callable, Optional, Any

from .autofill import AutofillController
from .config import QuickLoginConfig
from .credential_store import CredentialStore
from .exceptions import PageError
from .instance import detect_instance_key
from .pages.base_page import BasePage, SelectionControl
from .sync_signal import SyncSignal
from .utils import contains_login_path, schedule_later

logger = logging.getLogger(__name__)

Scheduler = Callable[[float, Callable[[], None]], Any]

class InjectorState(Enum):
    IDLE = 'idle'
    CHECKING = 'checking'
    NOT_APPLICABLE = 'not_applicable'
    AWAITING_FORM_FIELD = 'awaiting_form_field'
    RENDERING = 'rendering'
    RENDERED = 'rendered'

class PageInjector:
    """Keeps one up-to-date credential picker on a login page"""

    def __init__(self, page: BasePage, store: CredentialStore, config: QuickLoginConfig = None,
                 autofill: AutofillController = None, signal: SyncSignal = None,
                 scheduler: Scheduler = None):
        self.page = page
        self.store = store
        self.config = config or QuickLoginConfig()
        self.scheduler = scheduler or schedule_later
        self.autofill = autofill or AutofillController(page, self.config, self.scheduler)
        self.signal = signal or SyncSignal(page, self.config.event_name)

        self.state = InjectorState.IDLE
        self.instance_key: Optional[str] = None
        self.control: Optional[SelectionControl] = None

        self._state_lock = threading.Lock()
        self._rendering = False
        self._pending = False
        self._retry_scheduled = False
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def is_login_page(self) -> bool:
        """
        Login form posting to a login path, or a generator tag naming the product.

        Either signal alone is enough so non-standard deployments still match.
        """
        config = self.config
        if self.page.shares_form(config.username_field, config.secret_field):
            action = self.page.form_action(config.username_field)
            if contains_login_path(action, config.login_paths):
                return True

        generator = self.page.meta_content(config.generator_meta)
        if generator and config.product_keyword and config.product_keyword.lower() in generator.lower():
            return True
        return False

    def refresh(self) -> InjectorState:
        """Run the check/render path; safe to call from any trigger at any time"""
        with self._state_lock:
            if self._rendering:
                self._pending = True
                return self.state
            self._rendering = True

        try:
            while True:
                self._refresh_pass()
                with self._state_lock:
                    if not self._pending:
                        self._rendering = False
                        break
                    self._pending = False
        except BaseException:
            with self._state_lock:
                self._rendering = False
                self._pending = False
            raise
        return self.state

    def _refresh_pass(self):
        try:
            self._check_and_render()
        except PageError as e:
            logger.warning(f"Page not accessible during refresh: {e}")

    def _check_and_render(self):
        config = self.config
        self.state = InjectorState.CHECKING
        self.signal.listen()

        if not self.is_login_page():
            self.state = InjectorState.NOT_APPLICABLE
            return

        if not self.page.has_field(config.username_field):
            self.state = InjectorState.AWAITING_FORM_FIELD
            self._schedule_retry()
            return

        self.state = InjectorState.RENDERING
        self.page.remove_element(config.control_id)
        self.control = None

        state = self.page.snapshot(config.database_field, config.generator_meta)
        self.instance_key = detect_instance_key(state)
        records = self.store.get(self.instance_key)
        if not records:
            logger.debug(f"No saved credentials for {self.instance_key}")
            self.state = InjectorState.NOT_APPLICABLE
            return

        control = SelectionControl(
            control_id=config.control_id,
            select_id=config.control_select_id(),
            records=tuple(records),
            title=config.title,
            placeholder=config.placeholder,
            helper_text=config.helper_text,
        )
        placement = self.page.insert_control(control, config.anchor_selectors)
        self.control = control
        self.state = InjectorState.RENDERED
        logger.debug(f"Rendered {len(records)} credential(s) for {self.instance_key} ({placement})")

    def _schedule_retry(self):
        with self._state_lock:
            if self._retry_scheduled:
                return
            self._retry_scheduled = True
        logger.debug("Login field not present yet, retrying shortly")
        try:
            self.scheduler(self.config.retry_delay, self._retry)
        except Exception:
            with self._state_lock:
                self._retry_scheduled = False
            raise

    def _retry(self):
        with self._state_lock:
            self._retry_scheduled = False
        self.refresh()

    def select(self, position: int) -> bool:
        """
        Apply the credential at position of the current control

        The control goes back to its placeholder after a short delay so
        picking the same entry again is a fresh action.
        """
        control = self.control
        if control is None or not 0 <= position < len(control.records):
            logger.warning(f"Ignoring selection {position}: no such entry")
            return False

        applied = self.autofill.apply(control.records[position])
        self.scheduler(self.config.reset_delay, lambda: self._reset_control(control))
        return applied

    def _reset_control(self, control: SelectionControl):
        try:
            self.page.reset_control(control)
        except PageError as e:
            logger.debug(f"Could not reset control: {e}")

    def poll(self):
        """Pick up a user selection and sync events from the page"""
        try:
            control = self.control
            if control is not None:
                position = self.page.take_selection(control)
                if position is not None:
                    self.select(position)
            self.signal.poll()
        except PageError as e:
            logger.debug(f"Poll skipped: {e}")

    def start(self):
        """Run the injector on a background thread until stop()"""
        if self._thread and self._thread.is_alive():
            return
        self.signal.connect(self.refresh)
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name='quick-login-injector', daemon=True)
        self._thread.start()

    def _run(self):
        self._run_step(self.refresh)
        next_refresh = time.monotonic() + self.config.refresh_interval
        while not self._stop_event.wait(self.config.poll_interval):
            self._run_step(self.poll)
            if time.monotonic() >= next_refresh:
                self._run_step(self.refresh)
                next_refresh = time.monotonic() + self.config.refresh_interval

    def _run_step(self, step: Callable[[], Any]):
        # One failing pass must not end the loop; the next tick retries
        try:
            step()
        except Exception as e:
            logger.error(f"Injector loop error in {step.__name__}: {e}")

    def stop(self, timeout: float = 5.0):
        """Stop the background thread"""
        self._stop_event.set()
        self.signal.disconnect(self.refresh)
        if self._thread:
            self._thread.join(timeout)
            self._thread = None

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
