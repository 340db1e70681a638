"""
Tests for the quicklogin command line interface
"""
import json
import pytest
from unittest.mock import Mock, patch
from click.testing import CliRunner

from login_tools.quick_login.credential_store import CredentialRecord, CredentialStore, JsonFileBackend
from login_tools.quick_login.exceptions import PageError
from login_tools.quick_login.pages.soup_page import SoupPage
from src import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def cli_env(temp_dir, monkeypatch):
    """Isolated config file and store path; logging left to pytest"""
    for name in ('QUICKLOGIN_STORE_PATH', 'QUICKLOGIN_BROWSER', 'QUICKLOGIN_HEADLESS',
                 'QUICKLOGIN_REFRESH_INTERVAL', 'LOG_LEVEL'):
        monkeypatch.delenv(name, raising=False)
    config_path = temp_dir / 'config.yaml'
    config_path.write_text('logging:\n  level: WARNING\n', encoding='utf-8')
    store_path = temp_dir / 'credentials.json'
    with patch('src.cli.setup_logging'):
        yield ['--config', str(config_path), '--store', str(store_path)], store_path


class TestStoreCommands:
    """Commands that work on an explicit instance key"""

    def test_add_and_list(self, runner, cli_env):
        args, store_path = cli_env
        result = runner.invoke(cli.main, args + ['add', '--key', 'db:mydb', '-u', 'admin', '-s', 'x'])
        assert result.exit_code == 0, result.output
        assert 'Saved admin for db:mydb' in result.output

        result = runner.invoke(cli.main, args + ['list', '--key', 'db:mydb'])
        assert result.exit_code == 0
        assert '1. admin' in result.output

        with open(store_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        assert data['credentialsByInstance']['db:mydb'] == [{'username': 'admin', 'secret': 'x'}]

    def test_add_prompts_for_secret(self, runner, cli_env):
        args, store_path = cli_env
        result = runner.invoke(cli.main, args + ['add', '--key', 'db:mydb', '-u', 'demo'], input='hidden\n')
        assert result.exit_code == 0, result.output
        assert CredentialStore(JsonFileBackend(store_path)).get('db:mydb') == [CredentialRecord('demo', 'hidden')]

    def test_add_blank_username_fails(self, runner, cli_env):
        args, _ = cli_env
        result = runner.invoke(cli.main, args + ['add', '--key', 'db:mydb', '-u', '  ', '-s', 'x'])
        assert result.exit_code == 1
        assert 'required' in result.output

    def test_add_reports_unsaved_write(self, runner, cli_env, temp_dir):
        args, _ = cli_env
        blocker = temp_dir / 'not_a_dir'
        blocker.write_text('', encoding='utf-8')
        args = args[:2] + ['--store', str(blocker / 'credentials.json')]

        result = runner.invoke(cli.main, args + ['add', '--key', 'db:mydb', '-u', 'admin', '-s', 'x'])
        assert result.exit_code == 1
        assert 'store unavailable' in result.output
        assert 'Saved' not in result.output

    def test_remove(self, runner, cli_env):
        args, store_path = cli_env
        CredentialStore(JsonFileBackend(store_path)).put(
            'db:mydb', [CredentialRecord('u1', 's1'), CredentialRecord('u2', 's2')])

        result = runner.invoke(cli.main, args + ['remove', '1', '--key', 'db:mydb'])
        assert result.exit_code == 0, result.output
        assert '1. u2' in result.output
        assert CredentialStore(JsonFileBackend(store_path)).get('db:mydb') == [CredentialRecord('u2', 's2')]

    def test_remove_out_of_range(self, runner, cli_env):
        args, _ = cli_env
        result = runner.invoke(cli.main, args + ['remove', '3', '--key', 'db:mydb'])
        assert result.exit_code == 1
        assert 'No credential at position 3' in result.output

    def test_list_all(self, runner, cli_env):
        args, store_path = cli_env
        store = CredentialStore(JsonFileBackend(store_path))
        store.put('db:a', [CredentialRecord('u1', 's1')])
        store.put('origin:https://b.example.com', [CredentialRecord('u2', 's2'), CredentialRecord('u3', 's3')])

        result = runner.invoke(cli.main, args + ['list', '--all'])
        assert result.exit_code == 0
        assert 'db:a' in result.output
        assert '2 user(s)' in result.output

    def test_list_all_empty(self, runner, cli_env):
        args, _ = cli_env
        result = runner.invoke(cli.main, args + ['list', '--all'])
        assert 'No users saved.' in result.output

    def test_list_requires_url_or_key(self, runner, cli_env):
        args, _ = cli_env
        result = runner.invoke(cli.main, args + ['list'])
        assert result.exit_code == 2


class TestPageCommands:
    """Commands that identify the instance from a page"""

    def test_detect_from_html_file(self, runner, cli_env, temp_dir, sample_html_pages):
        args, _ = cli_env
        html_path = temp_dir / 'login.html'
        html_path.write_text(sample_html_pages['odoo_login'], encoding='utf-8')

        result = runner.invoke(cli.main, args + ['detect', 'https://erp.example.com/web/login',
                                                 '--html', str(html_path)])
        assert result.exit_code == 0, result.output
        assert 'Instance key: db:mydb' in result.output
        assert 'Login page:   yes' in result.output
        assert 'Saved users:  0' in result.output

    def test_add_resolves_key_from_url(self, runner, cli_env, sample_html_pages):
        args, store_path = cli_env
        page = SoupPage(sample_html_pages['plain_login'], 'https://erp.example.com:443/web/login')
        with patch('src.cli._fetch_page', return_value=page) as fetch:
            result = runner.invoke(cli.main, args + ['add', 'https://erp.example.com/web/login',
                                                     '-u', 'admin', '-s', 'x'])
        assert result.exit_code == 0, result.output
        fetch.assert_called_once()
        store = CredentialStore(JsonFileBackend(store_path))
        assert store.get('origin:https://erp.example.com') == [CredentialRecord('admin', 'x')]

    def test_fetch_failure(self, runner, cli_env):
        args, _ = cli_env
        with patch('src.cli._fetch_page', side_effect=PageError("Failed to fetch")):
            result = runner.invoke(cli.main, args + ['list', 'https://down.example.com/web/login'])
        assert result.exit_code == 1
        assert 'Failed to fetch' in result.output


class TestManagePrompt:
    """Interactive management loop"""

    def _run(self, runner, manager, lines):
        command = cli.click.Command('manage', callback=lambda: cli._manage_prompt(manager))
        return runner.invoke(command, [], input='\n'.join(lines) + '\n')

    def test_add_list_remove(self, runner, memory_store, odoo_page):
        manager = cli.CredentialManager(memory_store, odoo_page)
        result = self._run(runner, manager, ['add', 'admin', 'x', 'list', 'remove 1', 'list', 'quit'])
        assert result.exit_code == 0, result.output
        assert 'Saved admin' in result.output
        assert '1. admin' in result.output
        assert 'No users saved for db:mydb.' in result.output
        assert memory_store.get('db:mydb') == []

    def test_login(self, runner, memory_store, odoo_page):
        memory_store.put('db:mydb', [CredentialRecord('admin', 'x')])
        manager = cli.CredentialManager(memory_store, odoo_page)
        with patch('login_tools.quick_login.autofill.schedule_later'):
            result = self._run(runner, manager, ['login 1', 'quit'])
        assert 'Logging in as user #1' in result.output
        assert odoo_page.field_value('login') == 'admin'

    def test_errors_are_reported(self, runner, memory_store, odoo_page):
        manager = cli.CredentialManager(memory_store, odoo_page)
        result = self._run(runner, manager, ['remove 4', 'frobnicate', 'quit'])
        assert 'No credential at position 4' in result.output
        assert 'Unknown command: frobnicate' in result.output

    def test_not_a_login_page(self, runner, memory_store):
        page = Mock()
        page.snapshot.side_effect = PageError("tab closed")
        manager = cli.CredentialManager(memory_store, page)
        result = self._run(runner, manager, ['list', 'quit'])
        assert 'Not a login page' in result.output
