"""
Unit tests for configuration loading
"""
import logging
import pytest

from login_tools.quick_login.config import QuickLoginConfig
from src.utils import apply_env_overrides, get_default_config, load_config, merge_config


class TestQuickLoginConfig:
    """Test QuickLoginConfig functionality"""

    def test_defaults(self):
        config = QuickLoginConfig()
        assert config.username_field == 'login'
        assert config.secret_field == 'password'
        assert config.login_paths == ['/web/login']
        assert config.submit_selectors == ['button[type="submit"]', '.btn-primary']
        assert config.control_select_id() == 'quick-login-container-select'

    def test_from_dict_coerces_values(self):
        config = QuickLoginConfig.from_dict({
            'login_paths': '/odoo/login',
            'retry_delay': '1',
            'product_keyword': None,
        })
        assert config.login_paths == ['/odoo/login']
        assert config.retry_delay == 1.0
        assert config.product_keyword == 'odoo'

    def test_from_dict_warns_on_unknown_keys(self, caplog):
        with caplog.at_level(logging.WARNING):
            config = QuickLoginConfig.from_dict({'username_field': 'email', 'colour': 'red'})
        assert config.username_field == 'email'
        assert 'colour' in caplog.text

    def test_from_dict_empty(self):
        assert QuickLoginConfig.from_dict(None) == QuickLoginConfig()

    def test_to_dict_round_trip(self):
        config = QuickLoginConfig(control_id='picker', reset_delay=2.0)
        assert QuickLoginConfig.from_dict(config.to_dict()) == config

    def test_from_yaml_file(self, temp_dir):
        path = temp_dir / 'config.yaml'
        path.write_text('quick_login:\n  secret_field: pwd\n  anchor_selectors: .login-box\n', encoding='utf-8')
        config = QuickLoginConfig.from_yaml_file(path)
        assert config.secret_field == 'pwd'
        assert config.anchor_selectors == ['.login-box']

    def test_from_yaml_file_missing(self, temp_dir):
        assert QuickLoginConfig.from_yaml_file(temp_dir / 'missing.yaml') == QuickLoginConfig()


class TestAppConfig:
    """Test application config loading and overrides"""

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        for name in ('QUICKLOGIN_STORE_PATH', 'QUICKLOGIN_BROWSER', 'QUICKLOGIN_HEADLESS',
                     'QUICKLOGIN_REFRESH_INTERVAL', 'LOG_LEVEL'):
            monkeypatch.delenv(name, raising=False)

    def test_merge_config_is_deep(self):
        base = {'browser': {'browser': 'auto', 'headless': False}}
        merged = merge_config(base, {'browser': {'headless': True}})
        assert merged == {'browser': {'browser': 'auto', 'headless': True}}
        assert base['browser']['headless'] is False

    def test_load_config_merges_file(self, temp_dir):
        path = temp_dir / 'config.yaml'
        path.write_text('storage:\n  path: /tmp/creds.json\nquick_login:\n  reset_delay: 3\n', encoding='utf-8')
        config = load_config(str(path))
        assert config['storage']['path'] == '/tmp/creds.json'
        assert config['quick_login']['reset_delay'] == 3
        assert config['quick_login']['username_field'] == 'login'

    def test_load_config_missing_file(self, temp_dir):
        assert load_config(str(temp_dir / 'missing.yaml')) == get_default_config()

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv('QUICKLOGIN_STORE_PATH', '/data/creds.json')
        monkeypatch.setenv('QUICKLOGIN_HEADLESS', 'yes')
        monkeypatch.setenv('QUICKLOGIN_REFRESH_INTERVAL', '10')
        config = apply_env_overrides(get_default_config())
        assert config['storage']['path'] == '/data/creds.json'
        assert config['browser']['headless'] is True
        assert config['quick_login']['refresh_interval'] == 10.0

    def test_invalid_env_override_is_ignored(self, monkeypatch):
        monkeypatch.setenv('QUICKLOGIN_REFRESH_INTERVAL', 'soon')
        config = apply_env_overrides(get_default_config())
        assert config['quick_login']['refresh_interval'] == 5.0
