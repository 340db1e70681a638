#!/usr/bin/env python3
"""
Quick Login Configuration Models
"""

from dataclasses import dataclass, field, fields
from typing import Dict, List, Any
import logging
import yaml
from pathlib import Path

logger = logging.getLogger(__name__)

@dataclass
class QuickLoginConfig:
    """Page detection, selectors and timing for the quick login control"""
    username_field: str = "login"
    secret_field: str = "password"
    database_field: str = "db"
    generator_meta: str = "generator"
    login_paths: List[str] = field(default_factory=lambda: ["/web/login"])
    product_keyword: str = "odoo"
    submit_selectors: List[str] = field(default_factory=lambda: ['button[type="submit"]', '.btn-primary'])
    anchor_selectors: List[str] = field(default_factory=lambda: ['.card', '.oe_login_form', '.container'])
    control_id: str = "quick-login-container"
    title: str = "QUICK LOGIN"
    placeholder: str = "Select a saved user..."
    helper_text: str = "Click to select a user for quick login"
    event_name: str = "quickLoginCredentialAdded"
    retry_delay: float = 0.3
    refresh_interval: float = 5.0
    poll_interval: float = 0.25
    reset_delay: float = 1.0
    submit_fallback_delay: float = 0.5

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'QuickLoginConfig':
        """Create QuickLoginConfig from dictionary, ignoring unknown keys"""
        config_dict = config_dict or {}
        known = {f.name for f in fields(cls)}
        unknown = set(config_dict) - known
        if unknown:
            logger.warning(f"Ignoring unknown quick_login settings: {', '.join(sorted(unknown))}")

        values = {name: value for name, value in config_dict.items() if name in known and value is not None}
        for name in ('login_paths', 'submit_selectors', 'anchor_selectors'):
            if name in values and isinstance(values[name], str):
                values[name] = [values[name]]
        for name in ('retry_delay', 'refresh_interval', 'poll_interval', 'reset_delay', 'submit_fallback_delay'):
            if name in values:
                values[name] = float(values[name])
        return cls(**values)

    @classmethod
    def from_yaml_file(cls, file_path: Path) -> 'QuickLoginConfig':
        """Load configuration from YAML file"""
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                config_dict = yaml.safe_load(f) or {}
            return cls.from_dict(config_dict.get('quick_login', {}))
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load quick login config from {file_path}: {e}")
            return cls()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def control_select_id(self) -> str:
        """Element id of the <select> inside the injected container"""
        return f"{self.control_id}-select"
