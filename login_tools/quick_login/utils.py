#!/usr/bin/env python3
"""
Quick Login Utility Functions
"""

import logging
import re
import threading
import urllib.parse
from typing import Callable, Iterable, Optional

logger = logging.getLogger(__name__)

DEFAULT_PORTS = {'http': 80, 'https': 443}

def origin_from_url(url: str) -> str:
    """Return scheme://host[:port] for a URL, like ``location.origin`` in a browser"""
    parsed = urllib.parse.urlparse(url or '')
    if not parsed.scheme or not parsed.hostname:
        return 'null'

    scheme = parsed.scheme.lower()
    host = parsed.hostname.lower()
    if ':' in host:
        # IPv6 literal
        host = f"[{host}]"

    try:
        port = parsed.port
    except ValueError:
        port = None

    if port and port != DEFAULT_PORTS.get(scheme):
        return f"{scheme}://{host}:{port}"
    return f"{scheme}://{host}"

def contains_login_path(url: Optional[str], login_paths: Iterable[str]) -> bool:
    """Check whether a URL (or form action) contains one of the login paths"""
    if not url:
        return False
    return any(path and path in url for path in login_paths)

def validate_url(url: str) -> bool:
    """Validate URL format"""
    try:
        result = urllib.parse.urlparse(url)
        return all([result.scheme, result.netloc])
    except (ValueError, TypeError):
        return False

def css_attribute_value(value: str) -> str:
    """Escape a value for use inside a double-quoted CSS attribute selector"""
    return re.sub(r'(["\\])', r'\\\1', value)

def schedule_later(delay: float, callback: Callable[[], None]) -> threading.Timer:
    """Run callback once after delay seconds on a daemon timer thread"""
    def run():
        try:
            callback()
        except Exception as e:
            logger.error(f"Scheduled callback failed: {e}")

    timer = threading.Timer(delay, run)
    timer.daemon = True
    timer.start()
    return timer
