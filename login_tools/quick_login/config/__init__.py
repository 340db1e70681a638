#!/usr/bin/env python3
"""
Quick Login Configuration Module
"""

from .quick_login_config import QuickLoginConfig

__all__ = [
    'QuickLoginConfig'
]
