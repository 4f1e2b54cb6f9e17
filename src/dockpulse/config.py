"""
Configuration management for dockpulse.

This module provides configuration file support with YAML format,
user preferences, and default settings.

Features:
- YAML configuration file at ~/.config/dockpulse/config.yaml
  (DOCKPULSE_CONFIG overrides the location)
- Default values with user overrides
- Keybinding customization, including what `r` does
- Color theme passed explicitly to the renderers
- Log level / location override

Architecture:
- ConfigManager: loads and saves the file
- Merges user config with defaults
- Invalid values are logged and replaced by defaults
- The resulting AppConfig is handed to the app; there is no global instance
"""

import logging
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)

R_ACTIONS = ("refresh", "restart")


@dataclass
class KeyBindings:
    """Customizable key bindings (Textual key names)."""
    up: List[str] = field(default_factory=lambda: ["up", "k"])
    down: List[str] = field(default_factory=lambda: ["down", "j"])
    open: List[str] = field(default_factory=lambda: ["enter"])
    back: List[str] = field(default_factory=lambda: ["escape", "backspace"])
    start: List[str] = field(default_factory=lambda: ["x"])
    stop: List[str] = field(default_factory=lambda: ["s"])
    help: List[str] = field(default_factory=lambda: ["question_mark", "?"])
    quit: List[str] = field(default_factory=lambda: ["q", "ctrl+c"])
    # `r` is "refresh" in some setups and "restart container" in others.
    # r_action picks which one `r` triggers; the other one moves to `R`.
    r_action: str = "refresh"


@dataclass
class ColorTheme:
    """Color theme configuration (Rich color names or #hex)."""
    name: str = "default"
    accent: str = "#7D56F4"
    text: str = "#FAFAFA"
    running: str = "#04B575"
    stopped: str = "#FF6B6B"
    warning: str = "yellow"
    error: str = "red"
    selected: str = "bold #FFFFAF on #5F00FF"
    header: str = "bold"
    border: str = "grey50"
    tree_branch: str = "#5F5FFF"
    tree_root: str = "#00AF5F"
    tree_item: str = "#FF87D7"
    status_bar: str = "#cdd6f4 on #1e1e2e"
    muted: str = "grey58"


@dataclass
class UIConfig:
    """UI-related configuration."""
    color_theme: ColorTheme = field(default_factory=ColorTheme)
    refresh_interval: float = 0.5  # seconds
    error_timeout: float = 3.0  # seconds


@dataclass
class DockerConfig:
    """Docker-related configuration."""
    include_stopped: bool = True


@dataclass
class LogConfig:
    """Logging configuration."""
    level: str = "INFO"
    file_path: Optional[str] = None  # None for default
    max_size_mb: int = 10
    backup_count: int = 5


@dataclass
class AppConfig:
    """Main application configuration."""
    keybindings: KeyBindings = field(default_factory=KeyBindings)
    ui: UIConfig = field(default_factory=UIConfig)
    docker: DockerConfig = field(default_factory=DockerConfig)
    logging: LogConfig = field(default_factory=LogConfig)


def _same_kind(default: Any, value: Any) -> bool:
    """Whether a user value can replace a default of this type."""
    if isinstance(default, bool):
        return isinstance(value, bool)
    if isinstance(value, bool):
        return False
    if isinstance(default, list):
        # key lists: non-empty, strings only
        return isinstance(value, list) and bool(value) and all(isinstance(v, str) for v in value)
    if isinstance(default, float):
        return isinstance(value, (int, float))
    if default is None:
        return value is None or isinstance(value, str)
    return isinstance(value, type(default))


def default_config_path() -> Path:
    override = os.environ.get("DOCKPULSE_CONFIG")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "dockpulse" / "config.yaml"


class ConfigManager:
    """Configuration manager with YAML file support."""

    def __init__(self, config_file: Optional[Path] = None):
        self.config_file = Path(config_file) if config_file else default_config_path()
        self.config_dir = self.config_file.parent
        self._config: AppConfig = AppConfig()

    def load_config(self) -> AppConfig:
        """Load configuration from YAML file, writing defaults if it is missing."""
        try:
            if self.config_file.exists():
                with open(self.config_file, 'r') as f:
                    user_config = yaml.safe_load(f) or {}
                if not isinstance(user_config, dict):
                    raise ValueError("top level of config file must be a mapping")

                self._config = self._merge_configs(AppConfig(), user_config)
                logger.debug(f"Loaded configuration from {self.config_file}")
            else:
                self._config = AppConfig()
                self.save_config()
                logger.info(f"Created default configuration at {self.config_file}")
        except Exception as e:
            logger.error(f"Failed to load config: {e}, using defaults")
            self._config = AppConfig()
        self._validate(self._config)
        return self._config

    def save_config(self) -> None:
        """Save current configuration to YAML file."""
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, 'w') as f:
                yaml.safe_dump(asdict(self._config), f, default_flow_style=False, indent=2)
            logger.debug(f"Saved configuration to {self.config_file}")
        except Exception as e:
            logger.error(f"Failed to save config: {e}")

    def get_config(self) -> AppConfig:
        """Get current configuration."""
        return self._config

    def _merge_configs(self, default: AppConfig, user: Dict[str, Any]) -> AppConfig:
        """Merge user config with defaults."""
        if 'keybindings' in user:
            self._merge_dataclass(default.keybindings, user['keybindings'])
        if 'ui' in user:
            ui = user['ui']
            theme = None
            if isinstance(ui, dict):
                ui = dict(ui)
                theme = ui.pop('color_theme', None)
            self._merge_dataclass(default.ui, ui)
            if theme:
                self._merge_dataclass(default.ui.color_theme, theme)
        if 'docker' in user:
            self._merge_dataclass(default.docker, user['docker'])
        if 'logging' in user:
            self._merge_dataclass(default.logging, user['logging'])
        return default

    def _merge_dataclass(self, obj: Any, updates: Optional[Dict[str, Any]]) -> None:
        """Merge updates into dataclass object, keeping defaults for wrongly typed values."""
        if updates is None:
            return
        section = type(obj).__name__
        if not isinstance(updates, dict):
            logger.error(f"Invalid {section} section {updates!r}, using defaults")
            return
        known = {f.name for f in fields(obj)}
        for key, value in updates.items():
            if key not in known:
                logger.warning(f"Ignoring unknown config key: {key}")
                continue
            default = getattr(obj, key)
            if isinstance(default, list) and isinstance(value, str):
                value = [value]
            if not _same_kind(default, value):
                logger.error(f"Invalid {section}.{key} {value!r}, using {default!r}")
                continue
            setattr(obj, key, value)

    def _validate(self, config: AppConfig) -> None:
        keys = config.keybindings
        if keys.r_action not in R_ACTIONS:
            logger.error(f"Invalid keybindings.r_action {keys.r_action!r}, using 'refresh'")
            keys.r_action = "refresh"

        defaults = UIConfig()
        for name in ("refresh_interval", "error_timeout"):
            value = getattr(config.ui, name)
            if not isinstance(value, (int, float)) or value <= 0:
                logger.error(f"Invalid ui.{name} {value!r}, using {getattr(defaults, name)}")
                setattr(config.ui, name, getattr(defaults, name))

        level = config.logging.level
        if not isinstance(logging.getLevelName(level.upper()), int):
            logger.error(f"Invalid logging.level {level!r}, using 'INFO'")
            config.logging.level = "INFO"


def load_config(config_file: Optional[Path] = None) -> AppConfig:
    return ConfigManager(config_file).load_config()
