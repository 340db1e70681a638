import os
import copy
import logging
import logging.handlers
import yaml
from pathlib import Path
from typing import Dict, Any
from dotenv import load_dotenv


def get_user_data_dir() -> str:
    """Directory holding the credential store by default."""
    xdg_data_home = os.getenv('XDG_DATA_HOME')
    if xdg_data_home:
        return os.path.join(xdg_data_home, 'quicklogin')
    return os.path.join(str(Path.home()), '.quicklogin')


def load_config(config_path: str = 'config.yaml') -> Dict[str, Any]:
    """Load configuration from YAML file with environment variable overrides."""
    # Load environment variables
    load_dotenv()

    config = get_default_config()
    try:
        if os.path.exists(config_path):
            with open(config_path, 'r', encoding='utf-8') as f:
                file_config = yaml.safe_load(f) or {}
            config = merge_config(config, file_config)
    except (OSError, yaml.YAMLError) as e:
        logging.warning(f"Could not load config from {config_path}: {e}")

    # Override with environment variables
    config = apply_env_overrides(config)

    return config


def merge_config(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge override into a copy of base, section by section."""
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


def get_default_config() -> Dict[str, Any]:
    """Get default configuration values."""
    return {
        'quick_login': {
            'username_field': 'login',
            'secret_field': 'password',
            'database_field': 'db',
            'generator_meta': 'generator',
            'login_paths': ['/web/login'],
            'product_keyword': 'odoo',
            'submit_selectors': ['button[type="submit"]', '.btn-primary'],
            'anchor_selectors': ['.card', '.oe_login_form', '.container'],
            'retry_delay': 0.3,
            'refresh_interval': 5.0,
            'poll_interval': 0.25,
            'reset_delay': 1.0,
            'submit_fallback_delay': 0.5
        },
        'storage': {
            'path': os.path.join(get_user_data_dir(), 'credentials.json')
        },
        'browser': {
            'browser': 'auto',
            'headless': False,
            'timeout': 30,
            'window_size': [1280, 900]
        },
        'http': {
            'timeout': 30,
            'user_agent': 'quicklogin/1.0'
        },
        'logging': {
            'level': 'INFO',
            'log_to_file': False,
            'log_filename': 'quicklogin.log',
            'logs_dir': 'logs',
            'rotate_logs': True
        }
    }


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def apply_env_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    """Apply environment variable overrides to configuration."""
    env_mappings = {
        'QUICKLOGIN_STORE_PATH': ('storage', 'path', str),
        'QUICKLOGIN_BROWSER': ('browser', 'browser', str),
        'QUICKLOGIN_HEADLESS': ('browser', 'headless', _parse_bool),
        'QUICKLOGIN_REFRESH_INTERVAL': ('quick_login', 'refresh_interval', float),
        'LOG_LEVEL': ('logging', 'level', str),
    }

    for env_var, (section, key, converter) in env_mappings.items():
        value = os.getenv(env_var)
        if value is not None:
            try:
                converted_value = converter(value)
                config.setdefault(section, {})[key] = converted_value
            except (ValueError, TypeError) as e:
                logging.warning(f"Invalid value for {env_var}: {value} - {e}")

    return config


def setup_logging(logging_config: Dict[str, Any]) -> logging.Logger:
    """Setup logging configuration."""
    level = getattr(logging, str(logging_config.get('level', 'INFO')).upper(), logging.INFO)

    logger = logging.getLogger()
    logger.setLevel(level)

    # Clear existing handlers
    logger.handlers.clear()

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # File handler
    if logging_config.get('log_to_file', False):
        logs_dir = logging_config.get('logs_dir', 'logs')
        os.makedirs(logs_dir, exist_ok=True)
        log_filename = os.path.join(logs_dir, logging_config.get('log_filename', 'quicklogin.log'))

        if logging_config.get('rotate_logs', True):
            file_handler = logging.handlers.RotatingFileHandler(
                log_filename,
                maxBytes=10*1024*1024,  # 10MB
                backupCount=5,
                encoding='utf-8'
            )
        else:
            file_handler = logging.FileHandler(log_filename, encoding='utf-8')

        file_handler.setLevel(logging.DEBUG)  # File gets all logs
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def truncate_text(text: str, max_length: int = 100) -> str:
    """Truncate text to specified length with ellipsis."""
    if len(text) <= max_length:
        return text
    return text[:max_length-3] + "..."
