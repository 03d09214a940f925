"""
Configuration — Centralized settings management

Config hierarchy (highest to lowest priority):
  1. Environment variables (STATUSLINE_*)
  2. Project config (<project>/.statusline/config.yaml)
  3. User config (~/.statusline/config.yaml)
  4. Defaults

Configuration is read-only at runtime: the status line never writes
its settings back.
"""

import logging
import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List

import yaml

from .presentation.colors import Color, YELLOW, PURPLE, parse_color
from .presentation.symbols import SYMBOL_SETS


logger = logging.getLogger(__name__)

DEFAULT_WIDGETS = ["project", "repository", "usage"]
SYMBOL_CHOICES = ("auto",) + tuple(SYMBOL_SETS)
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _validate_opacity(name: str, value: float) -> Optional[str]:
    if not 0.0 <= value <= 1.0:
        return f"{name} must be between 0 and 1, got {value}"
    return None


@dataclass
class DisplayConfig:
    """Display preferences."""
    symbols: str = "auto"  # "auto" | "nerd" | "unicode" | "ascii"
    widgets: List[str] = field(default_factory=lambda: list(DEFAULT_WIDGETS))
    separator: str = " | "
    separator_opacity: float = 0.8
    debug: bool = False    # include tracebacks in diagnostics

    def validate(self) -> Optional[str]:
        """Validate config. Returns error message or None if valid."""
        if self.symbols not in SYMBOL_CHOICES:
            return f"Unknown symbols setting '{self.symbols}'. Valid: {', '.join(SYMBOL_CHOICES)}"
        # Imported here: widgets import config
        from .widgets import WIDGET_TYPES
        unknown = [w for w in self.widgets if w not in WIDGET_TYPES]
        if unknown:
            return f"Unknown widget '{unknown[0]}'. Valid: {', '.join(WIDGET_TYPES)}"
        return _validate_opacity("display.separator_opacity", self.separator_opacity)


@dataclass
class CommandConfig:
    """Deadlines for external commands."""
    timeout_ms: int = 5000
    probe_timeout_ms: int = 2000

    def validate(self) -> Optional[str]:
        if self.timeout_ms <= 0:
            return "commands.timeout_ms must be > 0"
        if self.probe_timeout_ms <= 0:
            return "commands.probe_timeout_ms must be > 0"
        return None


@dataclass
class SessionConfig:
    """Transcript loading."""
    load_timeout_ms: int = 1000

    def validate(self) -> Optional[str]:
        if self.load_timeout_ms <= 0:
            return "session.load_timeout_ms must be > 0"
        return None


@dataclass
class RepositoryWidgetConfig:
    """Repository widget behavior."""
    enabled: bool = True
    placeholder: str = " "              # between icon and branch name
    show_repository_state: bool = True  # rebasing / merging
    show_file_status: bool = True       # staged, unstaged, conflicts...
    show_clean_status: bool = True
    opacity: float = 0.7
    icon_color: Color = YELLOW

    def validate(self) -> Optional[str]:
        return _validate_opacity("repository.opacity", self.opacity)


@dataclass
class ProjectWidgetConfig:
    """Project widget behavior."""
    enabled: bool = True
    show_icon: bool = True
    icon_color: Color = PURPLE
    separator: str = " "                # between icon and text
    opacity: float = 0.7
    markers: List[str] = field(default_factory=lambda: ["*.sln", "*.slnx"])

    def validate(self) -> Optional[str]:
        return _validate_opacity("project.opacity", self.opacity)


@dataclass
class UsageWidgetConfig:
    """Token usage widget behavior."""
    enabled: bool = True
    max_tokens: int = 150000
    width: int = 20
    opacity: float = 0.7

    def validate(self) -> Optional[str]:
        if self.max_tokens <= 0:
            return "usage.max_tokens must be > 0"
        if self.width <= 0:
            return "usage.width must be > 0"
        return _validate_opacity("usage.opacity", self.opacity)


@dataclass
class LoggingConfig:
    """Log destination. Standard output is reserved for the status line."""
    level: str = "WARNING"
    file: Optional[str] = None
    json: bool = False

    def validate(self) -> Optional[str]:
        if self.level.upper() not in LOG_LEVELS:
            return f"Unknown log level '{self.level}'. Valid: {', '.join(LOG_LEVELS)}"
        return None


@dataclass
class Config:
    """Application configuration."""
    display: DisplayConfig = field(default_factory=DisplayConfig)
    commands: CommandConfig = field(default_factory=CommandConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    repository: RepositoryWidgetConfig = field(default_factory=RepositoryWidgetConfig)
    project: ProjectWidgetConfig = field(default_factory=ProjectWidgetConfig)
    usage: UsageWidgetConfig = field(default_factory=UsageWidgetConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def validate(self) -> Optional[str]:
        """First validation error across all sections, or None."""
        for section in (self.display, self.commands, self.session,
                        self.repository, self.project, self.usage, self.logging):
            error = section.validate()
            if error:
                return error
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "display": {
                "symbols": self.display.symbols,
                "widgets": list(self.display.widgets),
                "separator": self.display.separator,
                "separator_opacity": self.display.separator_opacity,
                "debug": self.display.debug,
            },
            "commands": {
                "timeout_ms": self.commands.timeout_ms,
                "probe_timeout_ms": self.commands.probe_timeout_ms,
            },
            "session": {
                "load_timeout_ms": self.session.load_timeout_ms,
            },
            "repository": {
                "enabled": self.repository.enabled,
                "placeholder": self.repository.placeholder,
                "show_repository_state": self.repository.show_repository_state,
                "show_file_status": self.repository.show_file_status,
                "show_clean_status": self.repository.show_clean_status,
                "opacity": self.repository.opacity,
                "icon_color": self.repository.icon_color.to_hex(),
            },
            "project": {
                "enabled": self.project.enabled,
                "show_icon": self.project.show_icon,
                "icon_color": self.project.icon_color.to_hex(),
                "separator": self.project.separator,
                "opacity": self.project.opacity,
                "markers": list(self.project.markers),
            },
            "usage": {
                "enabled": self.usage.enabled,
                "max_tokens": self.usage.max_tokens,
                "width": self.usage.width,
                "opacity": self.usage.opacity,
            },
            "logging": {
                "level": self.logging.level,
                "file": self.logging.file,
                "json": self.logging.json,
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """Create from dictionary. Missing keys take their defaults."""
        display_data = _section(data, "display")
        commands_data = _section(data, "commands")
        session_data = _section(data, "session")
        repo_data = _section(data, "repository")
        project_data = _section(data, "project")
        usage_data = _section(data, "usage")
        logging_data = _section(data, "logging")

        defaults = cls()

        return cls(
            display=DisplayConfig(
                symbols=str(display_data.get("symbols", defaults.display.symbols)),
                widgets=_as_list(display_data.get("widgets"), defaults.display.widgets),
                separator=str(display_data.get("separator", defaults.display.separator)),
                separator_opacity=float(display_data.get("separator_opacity", defaults.display.separator_opacity)),
                debug=_as_bool(display_data.get("debug"), defaults.display.debug),
            ),
            commands=CommandConfig(
                timeout_ms=int(commands_data.get("timeout_ms", defaults.commands.timeout_ms)),
                probe_timeout_ms=int(commands_data.get("probe_timeout_ms", defaults.commands.probe_timeout_ms)),
            ),
            session=SessionConfig(
                load_timeout_ms=int(session_data.get("load_timeout_ms", defaults.session.load_timeout_ms)),
            ),
            repository=RepositoryWidgetConfig(
                enabled=_as_bool(repo_data.get("enabled"), True),
                placeholder=str(repo_data.get("placeholder", defaults.repository.placeholder)),
                show_repository_state=_as_bool(repo_data.get("show_repository_state"), True),
                show_file_status=_as_bool(repo_data.get("show_file_status"), True),
                show_clean_status=_as_bool(repo_data.get("show_clean_status"), True),
                opacity=float(repo_data.get("opacity", defaults.repository.opacity)),
                icon_color=_as_color(repo_data.get("icon_color"), defaults.repository.icon_color),
            ),
            project=ProjectWidgetConfig(
                enabled=_as_bool(project_data.get("enabled"), True),
                show_icon=_as_bool(project_data.get("show_icon"), True),
                icon_color=_as_color(project_data.get("icon_color"), defaults.project.icon_color),
                separator=str(project_data.get("separator", defaults.project.separator)),
                opacity=float(project_data.get("opacity", defaults.project.opacity)),
                markers=_as_list(project_data.get("markers"), defaults.project.markers),
            ),
            usage=UsageWidgetConfig(
                enabled=_as_bool(usage_data.get("enabled"), True),
                max_tokens=int(usage_data.get("max_tokens", defaults.usage.max_tokens)),
                width=int(usage_data.get("width", defaults.usage.width)),
                opacity=float(usage_data.get("opacity", defaults.usage.opacity)),
            ),
            logging=LoggingConfig(
                level=str(logging_data.get("level", defaults.logging.level)),
                file=logging_data.get("file") or None,
                json=_as_bool(logging_data.get("json"), False),
            ),
        )


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    """A config section as a mapping; anything else is ignored with a warning."""
    value = data.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        logger.warning("Ignoring config section '%s': expected a mapping, got %s", name, type(value).__name__)
        return {}
    return value


def _as_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).lower() in ("true", "1", "yes", "on")


def _as_list(value: Any, default: List[str]) -> List[str]:
    if value is None:
        return list(default)
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return [str(item) for item in value]


def _as_color(value: Any, default: Color) -> Color:
    if value is None:
        return default
    return parse_color(value)


class ConfigError(ValueError):
    """Configuration values could not be converted."""


class ConfigManager:
    """
    Manages configuration loading.

    Hierarchy:
      1. Environment (STATUSLINE_*)
      2. Project config (.statusline/config.yaml)
      3. User config (~/.statusline/config.yaml)
      4. Defaults
    """

    PROJECT_CONFIG_DIR = ".statusline"
    CONFIG_FILE = "config.yaml"

    def __init__(self, project_dir: Optional[Path] = None, user_config_dir: Optional[Path] = None):
        self.project_dir = Path(project_dir) if project_dir else None
        if user_config_dir is None:
            env_dir = os.environ.get("STATUSLINE_CONFIG_DIR")
            user_config_dir = Path(env_dir) if env_dir else Path.home() / ".statusline"
        self.user_config_dir = Path(user_config_dir)
        self._config: Optional[Config] = None

    @property
    def project_config_path(self) -> Optional[Path]:
        if self.project_dir is None:
            return None
        return self.project_dir / self.PROJECT_CONFIG_DIR / self.CONFIG_FILE

    @property
    def user_config_path(self) -> Path:
        return self.user_config_dir / self.CONFIG_FILE

    def load(self) -> Config:
        """
        Load configuration from all sources.

        Raises:
            ConfigError: A value has the wrong type (e.g. width: "wide")
        """
        if self._config is not None:
            return self._config

        config_data: Dict[str, Any] = {}

        # Layer 1: User config
        config_data = self._merge(config_data, self._read_yaml(self.user_config_path))

        # Layer 2: Project config (higher priority)
        if self.project_config_path is not None:
            config_data = self._merge(config_data, self._read_yaml(self.project_config_path))

        # Layer 3: Environment overrides
        config_data = self._merge(config_data, self._env_overrides())

        try:
            self._config = Config.from_dict(config_data)
        except (TypeError, ValueError, AttributeError) as e:
            raise ConfigError(f"Invalid configuration: {e}") from e
        return self._config

    def _read_yaml(self, path: Path) -> Dict[str, Any]:
        if not path.exists():
            return {}
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Ignoring malformed config %s: %s", path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring config %s: top level is not a mapping", path)
            return {}
        return data

    def _env_overrides(self) -> Dict[str, Any]:
        overrides: Dict[str, Any] = {}
        env = os.environ

        if env.get("STATUSLINE_SYMBOLS"):
            overrides.setdefault("display", {})["symbols"] = env["STATUSLINE_SYMBOLS"]
        if env.get("STATUSLINE_WIDGETS"):
            overrides.setdefault("display", {})["widgets"] = env["STATUSLINE_WIDGETS"]
        if env.get("STATUSLINE_DEBUG"):
            overrides.setdefault("display", {})["debug"] = env["STATUSLINE_DEBUG"]
        if env.get("STATUSLINE_MAX_TOKENS"):
            overrides.setdefault("usage", {})["max_tokens"] = env["STATUSLINE_MAX_TOKENS"]
        if env.get("STATUSLINE_COMMAND_TIMEOUT_MS"):
            overrides.setdefault("commands", {})["timeout_ms"] = env["STATUSLINE_COMMAND_TIMEOUT_MS"]
        if env.get("STATUSLINE_LOG_LEVEL"):
            overrides.setdefault("logging", {})["level"] = env["STATUSLINE_LOG_LEVEL"]

        return overrides

    def _merge(self, base: Dict, override: Dict) -> Dict:
        """Deep merge two dicts, override wins."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge(result[key], value)
            else:
                result[key] = value
        return result


# Convenience function
def get_config(project_dir: Optional[Path] = None) -> Config:
    """Load configuration for a project."""
    return ConfigManager(project_dir).load()
