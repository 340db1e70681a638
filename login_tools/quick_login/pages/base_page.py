#!/usr/bin/env python3
"""
Base Page Backend

The DOM collaborator the injector, autofill and management code work
against. ``SeleniumPage`` drives a live browser tab, ``SoupPage`` works on
parsed HTML.
"""

from abc import ABC, abstractmethod
from typing import Optional, List, NamedTuple, Tuple

from ..credential_store import CredentialRecord
from ..instance import PageState
from ..utils import origin_from_url

PLACEMENT_ANCHOR = 'anchor'
PLACEMENT_FORM = 'form'
PLACEMENT_FLOATING = 'floating'

class SelectionControl(NamedTuple):
    """The credential picker injected into a login page"""
    control_id: str
    select_id: str
    records: Tuple[CredentialRecord, ...]
    title: str = 'QUICK LOGIN'
    placeholder: str = 'Select a saved user...'
    helper_text: str = ''

    @property
    def labels(self) -> List[str]:
        """Option labels, one per record, in store order"""
        return [record.username for record in self.records]

class BasePage(ABC):
    """Abstract access to one page's document"""

    @property
    @abstractmethod
    def url(self) -> str:
        """Current page URL"""
        pass

    @abstractmethod
    def field_value(self, name: str) -> Optional[str]:
        """
        Value of the first input with the given name

        Returns:
            The value ('' when empty), or None if no such input exists
        """
        pass

    @abstractmethod
    def meta_content(self, name: str) -> Optional[str]:
        """Content of <meta name=...>, None if absent"""
        pass

    @abstractmethod
    def form_action(self, field_name: str) -> Optional[str]:
        """Resolved action URL of the form enclosing the named input, None if not in a form"""
        pass

    @abstractmethod
    def shares_form(self, first_field: str, second_field: str) -> bool:
        """Check whether both named inputs exist inside the same form"""
        pass

    @abstractmethod
    def set_field_value(self, name: str, value: str) -> bool:
        """Set the value of the named input, False if it is absent"""
        pass

    @abstractmethod
    def activate(self, selectors: List[str]) -> bool:
        """Focus and click the first element matching any selector, False if none"""
        pass

    @abstractmethod
    def submit_form(self, field_name: str) -> bool:
        """Submit the form enclosing the named input, False if there is none"""
        pass

    @abstractmethod
    def remove_element(self, element_id: str) -> bool:
        """Remove the element with this id, False if it was not present"""
        pass

    @abstractmethod
    def insert_control(self, control: SelectionControl, anchor_selectors: List[str]) -> str:
        """
        Insert the selection control

        The control goes at the top of the first anchor found, else at the
        top of the first form, else floats over <body>.

        Returns:
            One of PLACEMENT_ANCHOR, PLACEMENT_FORM, PLACEMENT_FLOATING
        """
        pass

    @abstractmethod
    def reset_control(self, control: SelectionControl) -> None:
        """Put the control back on its placeholder entry"""
        pass

    @abstractmethod
    def take_selection(self, control: SelectionControl) -> Optional[int]:
        """Return and clear the position the user picked, None if nothing is pending"""
        pass

    @abstractmethod
    def listen(self, event_name: str) -> None:
        """Install a document listener for a custom event (idempotent)"""
        pass

    @abstractmethod
    def dispatch_event(self, event_name: str) -> None:
        """Dispatch a custom event on the document"""
        pass

    @abstractmethod
    def consume_event(self, event_name: str) -> bool:
        """Return True once if the event fired since the last call"""
        pass

    def has_field(self, name: str) -> bool:
        return self.field_value(name) is not None

    def snapshot(self, database_field: str = 'db', generator_meta: str = 'generator') -> PageState:
        """Collect the page state used for instance identification"""
        return PageState(
            origin=origin_from_url(self.url),
            database=self.field_value(database_field),
            generator=self.meta_content(generator_meta),
        )
