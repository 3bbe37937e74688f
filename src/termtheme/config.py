"""Configuration management for the termtheme engine."""

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import List, Optional

import yaml

from .theme_engine.schema import TerminalCapability

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "TERMTHEME_CONFIG"
DEFAULT_CONFIG_PATH = Path("~/.config/termtheme/config.yaml")


@dataclass
class EngineConfig:
    """Global configuration model for the theme engine."""

    # Output capability for themes in "auto" mode; None means detect
    capability: Optional[TerminalCapability] = None

    # Resolution limits
    max_inheritance_depth: int = 32

    # Diagnostics
    warn_low_contrast: bool = False
    log_level: str = "WARNING"

    # Directories searched for bare theme names
    theme_dirs: List[str] = field(default_factory=list)

    def __post_init__(self):
        """Normalize loosely typed values read from YAML."""
        if self.capability is not None:
            self.capability = TerminalCapability(str(self.capability))
        self.log_level = str(self.log_level).upper()
        self.theme_dirs = [os.path.expanduser(str(d)) for d in self.theme_dirs]
        if self.max_inheritance_depth < 1:
            raise ValueError("max_inheritance_depth must be at least 1")

    def to_yaml(self) -> str:
        """Serialize config to YAML."""
        data = {
            "capability": self.capability.value if self.capability else None,
            "max_inheritance_depth": self.max_inheritance_depth,
            "warn_low_contrast": self.warn_low_contrast,
            "log_level": self.log_level,
            "theme_dirs": self.theme_dirs,
        }
        return yaml.dump(data, default_flow_style=False)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "EngineConfig":
        """Deserialize config from YAML; unknown keys are ignored."""
        data = yaml.safe_load(yaml_str) or {}
        if not isinstance(data, dict):
            raise ValueError("Configuration must be a mapping")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning(f"Ignoring unknown configuration keys: {', '.join(unknown)}")
        return cls(**{key: value for key, value in data.items() if key in known})

    def find_theme(self, name: str) -> Optional[Path]:
        """Look a bare theme name up in ``theme_dirs``."""
        for directory in self.theme_dirs:
            for suffix in (".json", ".yaml", ".yml"):
                candidate = Path(directory) / f"{name}{suffix}"
                if candidate.is_file():
                    return candidate
        return None


def default_config_path() -> Path:
    """Config file location, honoring ``$TERMTHEME_CONFIG``."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(os.path.expanduser(override))
    return Path(os.path.expanduser(str(DEFAULT_CONFIG_PATH)))


class Config:
    """Configuration manager for termtheme."""

    _instance: Optional[EngineConfig] = None

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> EngineConfig:
        """Load configuration from file, falling back to defaults."""
        config_path = Path(config_path) if config_path else default_config_path()
        config = EngineConfig()

        if config_path.exists():
            try:
                config = EngineConfig.from_yaml(config_path.read_text(encoding="utf-8"))
                logger.debug(f"Loaded configuration from {config_path}")
            except (OSError, ValueError, TypeError, yaml.YAMLError) as e:
                logger.warning(f"Failed to load config from {config_path}: {e}. "
                               "Using default configuration.")

        cls._instance = config
        return config

    @classmethod
    def save(cls, config: EngineConfig, config_path: Optional[Path] = None) -> Path:
        """Save configuration to file."""
        config_path = Path(config_path) if config_path else default_config_path()
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(config.to_yaml(), encoding="utf-8")
        logger.info(f"Configuration saved to {config_path}")
        return config_path

    @classmethod
    def get(cls) -> EngineConfig:
        """Get the current configuration instance."""
        if cls._instance is None:
            cls._instance = cls.load()
        return cls._instance

    @classmethod
    def reload(cls) -> EngineConfig:
        """Forget the cached configuration and read it again."""
        cls._instance = None
        return cls.load()


def get_config() -> EngineConfig:
    """Get the current configuration."""
    return Config.get()


def load_config(config_path: Optional[Path] = None) -> EngineConfig:
    """Load configuration from file."""
    return Config.load(config_path)


def save_config(config: EngineConfig, config_path: Optional[Path] = None) -> Path:
    """Save configuration to file."""
    return Config.save(config, config_path)
