#!/usr/bin/env python3
"""
Instance Identification

Derives a stable key that tells one deployment of the target application
from another. Every context (CLI, injector thread) builds a ``PageState``
through ``BasePage.snapshot()`` and passes it here, so they all agree on
the key for the same page.
"""

from typing import NamedTuple, Optional

DB_PREFIX = 'db:'
META_PREFIX = 'meta:'
ORIGIN_PREFIX = 'origin:'

class PageState(NamedTuple):
    """The parts of a page that identify an instance"""
    origin: str
    database: Optional[str] = None
    generator: Optional[str] = None

def detect_instance_key(page_state: PageState) -> str:
    """
    Generate the instance key for a page.

    Priority order, first match wins:
    1. Database name from the ``db`` form field (most specific)
    2. Generator meta tag content (product/version family)
    3. Page origin (always available)
    """
    if page_state.database:
        return DB_PREFIX + page_state.database
    if page_state.generator:
        return META_PREFIX + page_state.generator
    return ORIGIN_PREFIX + page_state.origin
