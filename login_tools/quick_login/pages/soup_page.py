#!/usr/bin/env python3
"""
BeautifulSoup Page Backend

Implements the page interface over parsed HTML. Used to identify an
instance without starting a browser (``quicklogin detect/list/add``) and to
exercise the injector offline. Clicks, submissions and dispatched events
are recorded instead of being executed.
"""

import logging
from typing import Optional, List, Set
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup, Tag

from .base_page import (
    BasePage,
    SelectionControl,
    PLACEMENT_ANCHOR,
    PLACEMENT_FORM,
    PLACEMENT_FLOATING,
)
from ..exceptions import PageError
from ..utils import css_attribute_value, validate_url

logger = logging.getLogger(__name__)

FLOATING_STYLE = 'position: fixed; top: 20px; left: 50%; transform: translateX(-50%); z-index: 9999'

class SoupPage(BasePage):
    """Page backed by a BeautifulSoup document"""

    def __init__(self, html: str, url: str = 'about:blank'):
        self.soup = BeautifulSoup(html or '', 'html.parser')
        self._url = url
        self.activations: List[Tag] = []
        self.submitted_forms: List[Tag] = []
        self.dispatched_events: List[str] = []
        self._listeners: Set[str] = set()
        self._fired: Set[str] = set()
        self._pending_selection: Optional[int] = None

    @classmethod
    def from_url(cls, url: str, session: requests.Session = None, timeout: int = 30) -> 'SoupPage':
        """
        Fetch a page and parse it

        Raises:
            PageError: If the page cannot be fetched
        """
        if not validate_url(url):
            raise PageError(f"Invalid URL: {url}")
        session = session or requests.Session()
        try:
            response = session.get(url, timeout=timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise PageError(f"Could not fetch {url}: {e}") from e
        return cls(response.text, response.url or url)

    @property
    def url(self) -> str:
        return self._url

    def navigate(self, url: str, html: str = None):
        """Move to another URL, optionally replacing the document"""
        self._url = url
        if html is not None:
            self.soup = BeautifulSoup(html, 'html.parser')
            self._listeners.clear()
            self._fired.clear()
            self._pending_selection = None

    def _input(self, name: str) -> Optional[Tag]:
        return self.soup.select_one(f'input[name="{css_attribute_value(name)}"]')

    def field_value(self, name: str) -> Optional[str]:
        field = self._input(name)
        if field is None:
            return None
        return field.get('value', '')

    def meta_content(self, name: str) -> Optional[str]:
        meta = self.soup.select_one(f'meta[name="{css_attribute_value(name)}"]')
        if meta is None:
            return None
        return meta.get('content', '')

    def form_action(self, field_name: str) -> Optional[str]:
        field = self._input(field_name)
        form = field.find_parent('form') if field else None
        if form is None:
            return None
        action = form.get('action')
        return urljoin(self._url, action) if action else self._url

    def shares_form(self, first_field: str, second_field: str) -> bool:
        first = self._input(first_field)
        second = self._input(second_field)
        if first is None or second is None:
            return False
        form = first.find_parent('form')
        return form is not None and form is second.find_parent('form')

    def set_field_value(self, name: str, value: str) -> bool:
        field = self._input(name)
        if field is None:
            return False
        field['value'] = value
        return True

    def activate(self, selectors: List[str]) -> bool:
        for selector in selectors:
            element = self.soup.select_one(selector)
            if element is not None:
                self.activations.append(element)
                logger.debug(f"Activated element matching {selector}")
                return True
        return False

    def submit_form(self, field_name: str) -> bool:
        field = self._input(field_name)
        form = field.find_parent('form') if field else None
        if form is None:
            return False
        self.submitted_forms.append(form)
        return True

    def remove_element(self, element_id: str) -> bool:
        elements = self.soup.find_all(id=element_id)
        for element in elements:
            element.decompose()
        return bool(elements)

    def insert_control(self, control: SelectionControl, anchor_selectors: List[str]) -> str:
        container = self.soup.new_tag('div', id=control.control_id)

        header = self.soup.new_tag('div', attrs={'class': 'quick-login-header'})
        header.string = control.title
        container.append(header)

        select = self.soup.new_tag('select', id=control.select_id)
        placeholder = self.soup.new_tag('option', value='', selected='selected', disabled='disabled')
        placeholder.string = control.placeholder
        select.append(placeholder)
        for position, label in enumerate(control.labels):
            option = self.soup.new_tag('option', value=str(position))
            option.string = label
            select.append(option)
        container.append(select)

        if control.helper_text:
            helper = self.soup.new_tag('div', attrs={'class': 'quick-login-helper'})
            helper.string = control.helper_text
            container.append(helper)

        for selector in anchor_selectors:
            anchor = self.soup.select_one(selector)
            if anchor is not None:
                anchor.insert(0, container)
                return PLACEMENT_ANCHOR

        form = self.soup.find('form')
        if form is not None:
            form.insert(0, container)
            return PLACEMENT_FORM

        container['style'] = FLOATING_STYLE
        (self.soup.body or self.soup).append(container)
        return PLACEMENT_FLOATING

    def _options(self, control: SelectionControl) -> List[Tag]:
        select = self.soup.find(id=control.select_id)
        return select.find_all('option') if select else []

    def choose(self, control: SelectionControl, position: int) -> bool:
        """Simulate the user picking an entry of the injected control"""
        options = self._options(control)
        if not 0 <= position < len(options) - 1:
            return False
        for option in options:
            if option.has_attr('selected'):
                del option['selected']
        options[position + 1]['selected'] = 'selected'
        self._pending_selection = position
        return True

    def selected_label(self, control: SelectionControl) -> Optional[str]:
        """Text of the currently selected option, None if the control is absent"""
        for option in self._options(control):
            if option.has_attr('selected'):
                return option.get_text()
        return None

    def reset_control(self, control: SelectionControl) -> None:
        options = self._options(control)
        for option in options:
            if option.has_attr('selected'):
                del option['selected']
        if options:
            options[0]['selected'] = 'selected'

    def take_selection(self, control: SelectionControl) -> Optional[int]:
        position, self._pending_selection = self._pending_selection, None
        return position

    def listen(self, event_name: str) -> None:
        self._listeners.add(event_name)

    def dispatch_event(self, event_name: str) -> None:
        self.dispatched_events.append(event_name)
        if event_name in self._listeners:
            self._fired.add(event_name)

    def consume_event(self, event_name: str) -> bool:
        if event_name in self._fired:
            self._fired.discard(event_name)
            return True
        return False
