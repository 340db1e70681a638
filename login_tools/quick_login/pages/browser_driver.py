#!/usr/bin/env python3
"""
Browser Session

Starts a Selenium WebDriver (Chrome or Firefox) for the page injector and
hands out ``SeleniumPage`` objects for the current tab.
"""

import logging
import subprocess
import threading
from typing import Optional, Dict, Any

from selenium import webdriver
from selenium.common.exceptions import WebDriverException
from selenium.webdriver.chrome.options import Options as ChromeOptions
from selenium.webdriver.chrome.service import Service as ChromeService
from selenium.webdriver.firefox.options import Options as FirefoxOptions
from selenium.webdriver.firefox.service import Service as FirefoxService
from webdriver_manager.chrome import ChromeDriverManager
from webdriver_manager.firefox import GeckoDriverManager

from .selenium_page import SeleniumPage
from ..exceptions import BrowserUnavailableError, PageError

logger = logging.getLogger(__name__)

BROWSER_COMMANDS = [
    ('chrome', ['google-chrome', 'google-chrome-stable', 'chromium', 'chromium-browser']),
    ('firefox', ['firefox', 'firefox-esr']),
]

class BrowserSession:
    """
    Owns one WebDriver and the lock that serializes access to it.

    Usage:
        with BrowserSession(config) as browser:
            page = browser.open("https://erp.example.com/web/login")
    """

    def __init__(self, config: Dict[str, Any] = None):
        self.config = config or {}
        self.browser_config = self._get_browser_config()
        self.driver: Optional[webdriver.Remote] = None
        self.lock = threading.RLock()

    def _get_browser_config(self) -> Dict[str, Any]:
        """Get browser configuration merged over defaults"""
        default_config = {
            'browser': 'auto',
            'headless': False,
            'timeout': 30,
            'window_size': (1280, 900),
            'user_agent': None,
        }
        default_config.update(self.config.get('browser', {}) or {})
        return default_config

    def _detect_available_browser(self) -> Optional[str]:
        """Detect which browser is installed"""
        for browser_type, commands in BROWSER_COMMANDS:
            for cmd in commands:
                try:
                    result = subprocess.run([cmd, '--version'], capture_output=True, check=True, text=True)
                    logger.info(f"Found {browser_type} browser: {cmd} - {result.stdout.strip()}")
                    return browser_type
                except (subprocess.CalledProcessError, FileNotFoundError):
                    logger.debug(f"Browser check failed for: {cmd}")
                    continue
        return None

    def _create_driver(self) -> webdriver.Remote:
        """Create and configure WebDriver, trying the other browser as fallback"""
        browser_type = self.browser_config['browser']
        if browser_type == 'auto':
            browser_type = self._detect_available_browser()
        if not browser_type:
            raise BrowserUnavailableError(
                "No supported browser found. Install Chrome/Chromium or Firefox."
            )

        browsers_to_try = [browser_type]
        browsers_to_try.append('firefox' if browser_type == 'chrome' else 'chrome')

        errors = []
        for attempt_browser in browsers_to_try:
            try:
                logger.info(f"Attempting to create {attempt_browser} WebDriver...")
                if attempt_browser == 'chrome':
                    return self._create_chrome_driver()
                return self._create_firefox_driver()
            except (WebDriverException, ValueError, OSError) as e:
                logger.warning(f"Failed to create {attempt_browser} WebDriver: {e}")
                errors.append(f"{attempt_browser}: {e}")

        raise BrowserUnavailableError("All browser automation failed: " + "; ".join(errors))

    def _create_chrome_driver(self) -> webdriver.Chrome:
        """Create Chrome WebDriver"""
        options = ChromeOptions()
        if self.browser_config['headless']:
            options.add_argument('--headless=new')
        options.add_argument('--no-sandbox')
        options.add_argument('--disable-dev-shm-usage')
        options.add_argument('--no-first-run')
        options.add_argument('--password-store=basic')
        options.add_experimental_option("excludeSwitches", ["enable-automation"])

        width, height = self.browser_config['window_size']
        options.add_argument(f'--window-size={width},{height}')
        if self.browser_config.get('user_agent'):
            options.add_argument(f'--user-agent={self.browser_config["user_agent"]}')

        service = ChromeService(ChromeDriverManager().install())
        driver = webdriver.Chrome(service=service, options=options)
        driver.set_page_load_timeout(self.browser_config['timeout'])
        logger.info(f"🚀 Created Chrome WebDriver (headless={self.browser_config['headless']})")
        return driver

    def _create_firefox_driver(self) -> webdriver.Firefox:
        """Create Firefox WebDriver"""
        options = FirefoxOptions()
        if self.browser_config['headless']:
            options.add_argument('--headless')

        width, height = self.browser_config['window_size']
        options.add_argument(f'--width={width}')
        options.add_argument(f'--height={height}')
        if self.browser_config.get('user_agent'):
            options.set_preference("general.useragent.override", self.browser_config["user_agent"])
        options.set_preference("browser.startup.page", 0)
        options.set_preference("app.update.enabled", False)

        service = FirefoxService(GeckoDriverManager().install())
        driver = webdriver.Firefox(service=service, options=options)
        driver.set_page_load_timeout(self.browser_config['timeout'])
        logger.info(f"🚀 Created Firefox WebDriver (headless={self.browser_config['headless']})")
        return driver

    def start(self) -> webdriver.Remote:
        """
        Start the browser if needed

        Raises:
            BrowserUnavailableError: If no driver can be created
        """
        if self.driver is None:
            self.driver = self._create_driver()
        return self.driver

    def open(self, url: str) -> SeleniumPage:
        """Navigate the tab to url and return its page"""
        driver = self.start()
        page = SeleniumPage(driver, lock=self.lock)
        with self.lock:
            try:
                driver.get(url)
            except WebDriverException as e:
                raise PageError(f"Could not open {url}: {e.msg or e}") from e
        page.wait_until_ready(self.browser_config['timeout'])
        return page

    def is_alive(self) -> bool:
        """Check whether the browser window is still there"""
        if self.driver is None:
            return False
        with self.lock:
            try:
                self.driver.current_url
                return True
            except WebDriverException:
                return False

    def stop(self):
        """Stop the browser and cleanup resources"""
        if self.driver:
            try:
                with self.lock:
                    self.driver.quit()
                logger.info("🧹 WebDriver stopped")
            except WebDriverException as e:
                logger.warning(f"Error stopping WebDriver: {e}")
            finally:
                self.driver = None

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
