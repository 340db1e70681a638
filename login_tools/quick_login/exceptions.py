#!/usr/bin/env python3
"""
Quick Login Exception Classes
"""

class QuickLoginError(Exception):
    """Base exception for quick login errors"""
    pass

class BackendUnavailableError(QuickLoginError):
    """Raised by storage backends when the persisted store cannot be read or written"""
    pass

class PageError(QuickLoginError):
    """Raised when the page (DOM or browser) cannot be queried or mutated"""
    pass

class CredentialError(QuickLoginError):
    """Raised when a credential cannot be added, removed or applied"""
    pass

class BrowserUnavailableError(QuickLoginError):
    """Raised when no browser automation driver can be started"""
    pass
