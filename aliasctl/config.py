import json
import os
import sys
from pathlib import Path
from typing import Dict, Any, Optional

from aliasctl.errors import ConfigurationError


def get_config_dir() -> Path:
    """Directory holding config.json and aliases.json"""
    override = os.environ.get("ALIASCTL_CONFIG_DIR")
    if override:
        return Path(override)
    if sys.platform == "win32":
        app_data = os.environ.get("APPDATA")
        base = Path(app_data) if app_data else Path.home() / "AppData" / "Roaming"
        return base / "AliasCtl"
    return Path.home() / ".config" / "aliasctl"


class Config:
    """Manage aliasctl configuration"""

    DEFAULT_CONFIG = {
        "default_shell": None,
        "default_alias_file": None,
        "ai_provider": None,
        "ai_providers": {},
        "auto_backup": True,
        "max_backups": 10,
    }

    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = config_dir or get_config_dir()
        self.config_path = self.config_dir / "config.json"
        self.config = self.load()

    def load(self) -> Dict[str, Any]:
        """Load configuration from file"""
        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    user_config = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigurationError(
                    f"invalid configuration file {self.config_path}",
                    cause=e,
                    hints=["Fix the JSON by hand or delete the file and run 'aliasctl detect-shell'"],
                )
            except OSError as e:
                raise ConfigurationError(f"cannot read configuration file {self.config_path}", cause=e)
            return {**self.DEFAULT_CONFIG, "ai_providers": {}, **user_config}
        return {**self.DEFAULT_CONFIG, "ai_providers": {}}

    def save(self) -> None:
        """Save configuration to file"""
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, 'w') as f:
                json.dump(self.config, f, indent=2)
        except OSError as e:
            raise ConfigurationError(
                f"cannot write configuration file {self.config_path}",
                cause=e,
                hints=["Check permissions of the configuration directory",
                       "Set ALIASCTL_CONFIG_DIR to use another location"],
            )

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value"""
        value = self.config.get(key)
        return default if value is None else value

    def set(self, key: str, value: Any) -> None:
        """Set configuration value"""
        self.config[key] = value
        self.save()

    @property
    def store_path(self) -> Path:
        return self.config_dir / "aliases.json"
