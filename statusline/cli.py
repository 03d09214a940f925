"""
CLI — Status line entry point

Invoked by the host once per refresh with the session payload on stdin.
Writes one styled line to stdout and always exits 0: problems surface
as inline diagnostics, never as a failing process.

Run order:
1. Parse stdin (malformed payload -> diagnostic, continue without input)
2. Load config for the project (invalid -> diagnostic, use defaults)
3. Load the transcript (missing/slow -> diagnostic, continue without it)
4. Evaluate widgets and write the line
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional, List, TextIO

from . import __version__
from .config import Config, ConfigError, ConfigManager, SYMBOL_CHOICES
from .core.session import INPUT_HEADER, SessionContext, SessionError, parse_input, load_session
from .logging_config import setup_logging
from .pipeline import Pipeline
from .presentation.colors import WHITE
from .presentation.renderer import Renderer, StyledText
from .presentation.symbols import get_symbols
from .services.executor import CommandExecutor
from .widgets import WidgetContext, build_widgets


logger = logging.getLogger(__name__)

CONFIG_HEADER = "[Config]"


def _read_stdin(stdin: Optional[TextIO]) -> str:
    if stdin is None or stdin.isatty():
        return ""
    return stdin.read()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="statusline",
        description="Statusline -- one-line session status for a coding assistant",
        epilog="Reads the session payload (JSON) from stdin.",
    )
    parser.add_argument(
        '--config-dir',
        default=None,
        help='User config directory (default: STATUSLINE_CONFIG_DIR or ~/.statusline)'
    )
    parser.add_argument(
        '--symbols',
        choices=SYMBOL_CHOICES,
        default=None,
        help='Glyph set (overrides config)'
    )
    parser.add_argument(
        '--widgets',
        default=None,
        help='Comma-separated widget order, e.g. "project,repository,usage"'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Include stack traces in diagnostics'
    )
    parser.add_argument(
        '--version', '-V',
        action='version',
        version=f'statusline {__version__}'
    )
    return parser


def _apply_arguments(config: Config, args: argparse.Namespace) -> None:
    if args.symbols:
        config.display.symbols = args.symbols
    if args.widgets:
        config.display.widgets = [w.strip() for w in args.widgets.split(",") if w.strip()]
    if args.debug:
        config.display.debug = True


def load_config(
    project_dir: Optional[Path],
    args: argparse.Namespace,
    renderer: Renderer,
) -> Config:
    """Effective config; any problem is reported and defaults are used."""
    config_dir = Path(args.config_dir) if args.config_dir else None
    try:
        config = ConfigManager(project_dir, user_config_dir=config_dir).load()
    except ConfigError as e:
        renderer.write_diagnostic(CONFIG_HEADER, str(e))
        config = Config()

    _apply_arguments(config, args)

    error = config.validate()
    if error:
        renderer.write_diagnostic(CONFIG_HEADER, error)
        config = Config()
        _apply_arguments(config, args)
        if config.validate():
            # Bad command-line values: fall back entirely
            config = Config()
    return config


def run(
    argv: Optional[List[str]] = None,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
) -> int:
    """
    Produce one status line.

    Args:
        argv: Command-line arguments (default: sys.argv[1:])
        stdin: Payload stream (default: sys.stdin)
        stdout: Output stream (default: sys.stdout)

    Returns:
        Exit code, always 0
    """
    args = _build_parser().parse_args(argv)
    renderer = Renderer(stdout if stdout is not None else sys.stdout)

    try:
        raw = _read_stdin(stdin if stdin is not None else sys.stdin)
    except UnicodeDecodeError as e:
        renderer.write_diagnostic(INPUT_HEADER, str(e))
        raw = ""

    statusline_input, diagnostic = parse_input(raw)
    if diagnostic:
        header, _, detail = diagnostic.partition("\n")
        renderer.write_diagnostic(header, detail)

    project_dir = Path(statusline_input.project_dir) if statusline_input and statusline_input.project_dir else None
    config = load_config(project_dir, args, renderer)

    setup_logging(
        level=config.logging.level,
        log_file=config.logging.file,
        json_format=config.logging.json,
    )

    try:
        session = load_session(statusline_input, timeout_ms=config.session.load_timeout_ms)
    except SessionError as e:
        logger.warning("Session not loaded: %s", e)
        renderer.write_exception(e, include_traceback=config.display.debug)
        session = SessionContext(input=statusline_input)

    context = WidgetContext(
        session=session,
        config=config,
        executor=CommandExecutor(default_timeout_ms=config.commands.timeout_ms),
        symbols=get_symbols(config.display.symbols),
    )
    separator = StyledText(
        config.display.separator,
        foreground=WHITE,
        opacity=config.display.separator_opacity,
    )
    pipeline = Pipeline(build_widgets(config.display.widgets, config), renderer, separator)
    pipeline.run(context)
    renderer.flush()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the statusline command."""
    try:
        return run(argv)
    except Exception as e:
        # Last boundary: the host shell must never see a failure
        logger.error("Unhandled error: %s", e, exc_info=True)
        Renderer().write_exception(e, include_traceback=bool(os.environ.get("STATUSLINE_DEBUG")))
        return 0


if __name__ == '__main__':
    sys.exit(main())
