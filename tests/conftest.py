"""
Test configuration and shared fixtures for quicklogin tests
"""
import pytest
import tempfile
import shutil
from pathlib import Path

from login_tools.quick_login.config import QuickLoginConfig
from login_tools.quick_login.credential_store import CredentialStore, MemoryBackend
from login_tools.quick_login.pages.soup_page import SoupPage


class FakeScheduler:
    """Collects delayed callbacks so tests can run them on demand"""

    def __init__(self):
        self.calls = []

    def __call__(self, delay, callback):
        self.calls.append((delay, callback))

    def run_all(self):
        calls, self.calls = self.calls, []
        for _, callback in calls:
            callback()
        return len(calls)

    def delays(self):
        return [delay for delay, _ in self.calls]


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests"""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path)


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def config():
    return QuickLoginConfig()


@pytest.fixture
def memory_store():
    """Credential store on an in-memory backend"""
    return CredentialStore(MemoryBackend())


@pytest.fixture
def sample_html_pages():
    """Sample HTML pages for testing"""
    return {
        'odoo_login': """
        <html>
            <head>
                <title>Login | My Company</title>
                <meta name="generator" content="Odoo">
            </head>
            <body>
                <div class="container">
                    <div class="card">
                        <form class="oe_login_form" action="/web/login" method="post">
                            <input type="hidden" name="csrf_token" value="abc123">
                            <input type="hidden" name="db" value="mydb">
                            <input type="text" name="login" placeholder="Email">
                            <input type="password" name="password" placeholder="Password">
                            <button type="submit" class="btn btn-primary">Log in</button>
                        </form>
                    </div>
                </div>
            </body>
        </html>
        """,
        'plain_login': """
        <html>
            <head><title>Login</title></head>
            <body>
                <form action="/web/login" method="post">
                    <input type="text" name="login">
                    <input type="password" name="password">
                    <button type="submit">Sign in</button>
                </form>
            </body>
        </html>
        """,
        'loading_login': """
        <html>
            <head><meta name="generator" content="Odoo 17.0"></head>
            <body><div class="o_loading">Loading...</div></body>
        </html>
        """,
        'no_password': """
        <html>
            <head><meta name="generator" content="Odoo"></head>
            <body>
                <form action="/web/login" method="post">
                    <input type="text" name="login">
                    <button type="submit">Next</button>
                </form>
            </body>
        </html>
        """,
        'homepage': """
        <html>
            <head><title>Home Page</title></head>
            <body>
                <main>
                    <h1>Welcome</h1>
                    <form action="/search"><input type="text" name="q"></form>
                </main>
            </body>
        </html>
        """,
    }


@pytest.fixture
def odoo_page(sample_html_pages):
    return SoupPage(sample_html_pages['odoo_login'], 'https://erp.example.com/web/login')
