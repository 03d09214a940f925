"""
Statusline — One-line session status for a coding assistant

Reads the session payload from stdin and prints a single ANSI-styled
line: project identity, repository state and context token usage.
Quiet when there is nothing to show; never fails the host shell.

Usage:
    echo '{"transcript_path": "...", "workspace": {...}}' | statusline
    statusline --symbols ascii --widgets repository,usage
    python -m statusline --debug
"""

__version__ = "0.1.0"

# Core layer (session data)
from .core.session import (
    StatuslineInput, SessionMessage, UsageStatistics, SessionContext,
    SessionError, TranscriptNotFoundError, TranscriptTimeoutError,
    parse_input, load_session, load_transcript,
)

# Service layer (external state)
from .services.executor import CommandExecutor, CommandResult
from .services.git import GitProbe, RepositoryStatusSnapshot, parse_porcelain_status
from .services.project import ProjectProbe, ProjectIdentity

# Presentation layer
from .presentation.colors import Color, blend
from .presentation.renderer import Renderer, StyledText
from .presentation.progress import ProgressBarSpec, THEMES

# Composition
from .config import Config, ConfigManager, ConfigError, get_config
from .widgets import Widget, WidgetContext, WIDGET_TYPES, build_widgets
from .pipeline import Pipeline, WidgetOutcome

__all__ = [
    "__version__",
    "StatuslineInput", "SessionMessage", "UsageStatistics", "SessionContext",
    "SessionError", "TranscriptNotFoundError", "TranscriptTimeoutError",
    "parse_input", "load_session", "load_transcript",
    "CommandExecutor", "CommandResult",
    "GitProbe", "RepositoryStatusSnapshot", "parse_porcelain_status",
    "ProjectProbe", "ProjectIdentity",
    "Color", "blend", "Renderer", "StyledText", "ProgressBarSpec", "THEMES",
    "Config", "ConfigManager", "ConfigError", "get_config",
    "Widget", "WidgetContext", "WIDGET_TYPES", "build_widgets",
    "Pipeline", "WidgetOutcome",
]
