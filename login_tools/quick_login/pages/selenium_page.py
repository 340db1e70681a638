#!/usr/bin/env python3
"""
Selenium Page Backend

Runs small scripts inside a live browser tab through
``driver.execute_script``. WebDriver is not thread-safe, so every call
takes the page lock: the injector thread and the management prompt share
one driver.
"""

import logging
import threading
from typing import Optional, List, Any

from selenium.common.exceptions import TimeoutException, WebDriverException
from selenium.webdriver.support.ui import WebDriverWait

from .base_page import BasePage, SelectionControl
from ..exceptions import PageError
from ..utils import css_attribute_value

logger = logging.getLogger(__name__)

FIELD_VALUE_JS = """
const el = document.querySelector(arguments[0]);
return el ? (el.value || '') : null;
"""

META_CONTENT_JS = """
const meta = document.querySelector(arguments[0]);
return meta ? (meta.content || '') : null;
"""

FORM_ACTION_JS = """
const el = document.querySelector(arguments[0]);
const form = el && el.closest('form');
return form ? form.action : null;
"""

SHARES_FORM_JS = """
const first = document.querySelector(arguments[0]);
const second = document.querySelector(arguments[1]);
if (!first || !second) return false;
const form = first.closest('form');
return !!form && form === second.closest('form');
"""

SET_VALUE_JS = """
const el = document.querySelector(arguments[0]);
if (!el) return false;
el.value = arguments[1];
el.dispatchEvent(new Event('input', {bubbles: true}));
el.dispatchEvent(new Event('change', {bubbles: true}));
return true;
"""

ACTIVATE_JS = """
for (const selector of arguments[0]) {
  const btn = document.querySelector(selector);
  if (btn) {
    btn.focus();
    btn.click();
    btn.dispatchEvent(new Event('mousedown', {bubbles: true}));
    btn.dispatchEvent(new Event('mouseup', {bubbles: true}));
    return true;
  }
}
return false;
"""

SUBMIT_FORM_JS = """
const el = document.querySelector(arguments[0]);
const form = el && el.closest('form');
if (!form) return false;
if (form.requestSubmit) { form.requestSubmit(); } else { form.submit(); }
return true;
"""

REMOVE_ELEMENT_JS = """
const elements = document.querySelectorAll(arguments[0]);
elements.forEach(function (el) { el.remove(); });
return elements.length > 0;
"""

INSERT_CONTROL_JS = """
const control = arguments[0];
const anchors = arguments[1];

const container = document.createElement('div');
container.id = control.controlId;
container.style.cssText = 'margin: 20px auto; width: 80%; max-width: 400px; position: relative;'
  + ' font-family: Roboto, "Segoe UI", Arial, sans-serif; z-index: 9999;';

const header = document.createElement('div');
header.textContent = control.title;
header.style.cssText = 'background-color: #875A7B; color: white; padding: 12px 16px; font-size: 16px;'
  + ' font-weight: 500; text-align: center; border-radius: 4px 4px 0 0; letter-spacing: 1px;';
container.appendChild(header);

const select = document.createElement('select');
select.id = control.selectId;
select.style.cssText = 'width: 100%; height: 52px; padding: 12px 16px; font-size: 16px; cursor: pointer;'
  + ' background-color: #ffffff; border: 2px solid #875A7B; border-radius: 0 0 4px 4px;';

const placeholder = document.createElement('option');
placeholder.value = '';
placeholder.textContent = control.placeholder;
placeholder.selected = true;
placeholder.disabled = true;
select.appendChild(placeholder);

control.labels.forEach(function (label, position) {
  const option = document.createElement('option');
  option.value = String(position);
  option.textContent = label;
  select.appendChild(option);
});

select.addEventListener('change', function () {
  if (this.value !== '') {
    this.dataset.quickLoginPending = this.value;
  }
});
container.appendChild(select);

if (control.helperText) {
  const helper = document.createElement('div');
  helper.textContent = control.helperText;
  helper.style.cssText = 'font-size: 12px; color: rgba(0, 0, 0, 0.6); margin: 4px 0 0 12px;';
  container.appendChild(helper);
}

for (const selector of anchors) {
  const anchor = document.querySelector(selector);
  if (anchor) {
    anchor.insertBefore(container, anchor.firstChild);
    return 'anchor';
  }
}

const form = document.querySelector('form');
if (form) {
  form.insertBefore(container, form.firstChild);
  return 'form';
}

container.style.position = 'fixed';
container.style.top = '20px';
container.style.left = '50%';
container.style.transform = 'translateX(-50%)';
container.style.backgroundColor = '#ffffff';
container.style.padding = '16px';
container.style.borderRadius = '8px';
container.style.boxShadow = '0 4px 8px rgba(0,0,0,0.2)';
document.body.appendChild(container);
return 'floating';
"""

RESET_CONTROL_JS = """
const select = document.getElementById(arguments[0]);
if (select) {
  select.selectedIndex = 0;
  delete select.dataset.quickLoginPending;
}
"""

TAKE_SELECTION_JS = """
const select = document.getElementById(arguments[0]);
if (!select || select.dataset.quickLoginPending === undefined) return null;
const position = parseInt(select.dataset.quickLoginPending, 10);
delete select.dataset.quickLoginPending;
return isNaN(position) ? null : position;
"""

LISTEN_JS = """
const name = arguments[0];
window.__quickLoginEvents = window.__quickLoginEvents || {};
if (!(name in window.__quickLoginEvents)) {
  window.__quickLoginEvents[name] = false;
  document.addEventListener(name, function () { window.__quickLoginEvents[name] = true; });
}
"""

DISPATCH_EVENT_JS = """
document.dispatchEvent(new CustomEvent(arguments[0]));
"""

CONSUME_EVENT_JS = """
const events = window.__quickLoginEvents;
if (!events || !events[arguments[0]]) return false;
events[arguments[0]] = false;
return true;
"""

def _input_selector(name: str) -> str:
    return f'input[name="{css_attribute_value(name)}"]'

def _id_selector(element_id: str) -> str:
    return f'[id="{css_attribute_value(element_id)}"]'

class SeleniumPage(BasePage):
    """Page backed by the current tab of a Selenium WebDriver"""

    def __init__(self, driver, lock: threading.RLock = None):
        self.driver = driver
        self._lock = lock or threading.RLock()

    def _run(self, script: str, *args) -> Any:
        with self._lock:
            try:
                return self.driver.execute_script(script, *args)
            except WebDriverException as e:
                raise PageError(f"Script execution failed: {e.msg or e}") from e

    @property
    def url(self) -> str:
        with self._lock:
            try:
                return self.driver.current_url
            except WebDriverException as e:
                raise PageError(f"Cannot read current URL: {e.msg or e}") from e

    def wait_until_ready(self, timeout: int = 30) -> bool:
        """Wait for document.readyState to be complete"""
        try:
            with self._lock:
                WebDriverWait(self.driver, timeout).until(
                    lambda d: d.execute_script("return document.readyState") == "complete"
                )
            return True
        except TimeoutException:
            logger.warning(f"Page load timeout after {timeout}s")
            return False
        except WebDriverException as e:
            raise PageError(f"Error waiting for page ready: {e.msg or e}") from e

    def field_value(self, name: str) -> Optional[str]:
        return self._run(FIELD_VALUE_JS, _input_selector(name))

    def meta_content(self, name: str) -> Optional[str]:
        return self._run(META_CONTENT_JS, f'meta[name="{css_attribute_value(name)}"]')

    def form_action(self, field_name: str) -> Optional[str]:
        return self._run(FORM_ACTION_JS, _input_selector(field_name))

    def shares_form(self, first_field: str, second_field: str) -> bool:
        return bool(self._run(SHARES_FORM_JS, _input_selector(first_field), _input_selector(second_field)))

    def set_field_value(self, name: str, value: str) -> bool:
        return bool(self._run(SET_VALUE_JS, _input_selector(name), value))

    def activate(self, selectors: List[str]) -> bool:
        return bool(self._run(ACTIVATE_JS, list(selectors)))

    def submit_form(self, field_name: str) -> bool:
        return bool(self._run(SUBMIT_FORM_JS, _input_selector(field_name)))

    def remove_element(self, element_id: str) -> bool:
        return bool(self._run(REMOVE_ELEMENT_JS, _id_selector(element_id)))

    def insert_control(self, control: SelectionControl, anchor_selectors: List[str]) -> str:
        payload = {
            'controlId': control.control_id,
            'selectId': control.select_id,
            'title': control.title,
            'placeholder': control.placeholder,
            'helperText': control.helper_text,
            'labels': control.labels,
        }
        return self._run(INSERT_CONTROL_JS, payload, list(anchor_selectors))

    def reset_control(self, control: SelectionControl) -> None:
        self._run(RESET_CONTROL_JS, control.select_id)

    def take_selection(self, control: SelectionControl) -> Optional[int]:
        position = self._run(TAKE_SELECTION_JS, control.select_id)
        return int(position) if position is not None else None

    def listen(self, event_name: str) -> None:
        self._run(LISTEN_JS, event_name)

    def dispatch_event(self, event_name: str) -> None:
        self._run(DISPATCH_EVENT_JS, event_name)

    def consume_event(self, event_name: str) -> bool:
        return bool(self._run(CONSUME_EVENT_JS, event_name))
