"""
Shared pytest fixtures for the statusline suite.

Usage in tests:
    def test_something(widget_context):
        units = RepositoryWidget().render(widget_context)

    def test_probe(fake_executor):
        fake_executor.responses.update(git_responses(branch="dev"))
"""

import logging

import pytest

from statusline.config import Config
from statusline.core.session import SessionContext, StatuslineInput
from statusline.presentation.symbols import ASCII
from statusline.widgets import WidgetContext
from tests.factories import FakeExecutor, input_payload


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep user config and STATUSLINE_* variables out of every test."""
    for name in (
        "STATUSLINE_SYMBOLS", "STATUSLINE_WIDGETS", "STATUSLINE_MAX_TOKENS",
        "STATUSLINE_DEBUG", "STATUSLINE_LOG_LEVEL", "STATUSLINE_COMMAND_TIMEOUT_MS",
        "STATUSLINE_ASCII_ONLY", "STATUSLINE_UNICODE",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("STATUSLINE_CONFIG_DIR", str(tmp_path / "user-config"))


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo setup_logging() so caplog sees records in later tests."""
    yield
    package_logger = logging.getLogger("statusline")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture
def fake_executor():
    """Executor with git available and no scripted responses."""
    return FakeExecutor()


@pytest.fixture
def project_dir(tmp_path):
    d = tmp_path / "my-project"
    d.mkdir()
    return d


@pytest.fixture
def widget_context(project_dir, fake_executor):
    """
    Context for a session in project_dir, ASCII symbols, no transcript.

    Example:
        def test_folder(widget_context):
            units = ProjectWidget().render(widget_context)
    """
    statusline_input = StatuslineInput.from_dict(input_payload(project_dir))
    return WidgetContext(
        session=SessionContext(input=statusline_input),
        config=Config(),
        executor=fake_executor,
        symbols=ASCII,
        cwd=project_dir,
    )
