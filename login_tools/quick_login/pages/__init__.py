#!/usr/bin/env python3
"""
Page Backends for Quick Login
"""

from .base_page import BasePage, SelectionControl
from .soup_page import SoupPage

__all__ = [
    'BasePage',
    'SelectionControl',
    'SoupPage'
]
