"""
Session — Input payload and transcript loading

The host writes one JSON object to stdin per invocation (session id,
transcript path, workspace, model, cost counters). The transcript it
points to is newline-delimited JSON; each line is one session message,
optionally carrying token usage.

A SessionContext is built once per run and passed to every widget.
There is no process-wide cache: each invocation starts from scratch.

Errors:
- Malformed input is not an exception: parse_input() returns a diagnostic
- TranscriptNotFoundError: input names a transcript that does not exist
- TranscriptTimeoutError: loading did not finish within its deadline
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, List, Dict, Any, Tuple

import orjson


logger = logging.getLogger(__name__)

DEFAULT_LOAD_TIMEOUT_MS = 1000
INPUT_HEADER = "[StatuslineInput]"


class SessionError(Exception):
    """Session context could not be loaded."""


class TranscriptNotFoundError(SessionError):
    """The referenced transcript file does not exist."""


class TranscriptTimeoutError(SessionError):
    """Transcript loading exceeded its deadline."""


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    return 0


def _as_float(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    return 0.0


# =============================================================================
# Input payload (stdin)
# =============================================================================

@dataclass
class ModelInfo:
    id: str = ""
    display_name: str = ""


@dataclass
class WorkspaceInfo:
    current_dir: str = ""
    project_dir: str = ""


@dataclass
class OutputStyleInfo:
    name: str = ""


@dataclass
class CostInfo:
    """Cumulative counters for the session."""
    total_cost_usd: float = 0.0
    total_duration_ms: int = 0
    total_api_duration_ms: int = 0
    total_lines_added: int = 0
    total_lines_removed: int = 0


@dataclass
class StatuslineInput:
    """Session context written to stdin by the host."""
    hook_event_name: str = ""
    session_id: str = ""
    transcript_path: str = ""
    cwd: str = ""
    model: ModelInfo = field(default_factory=ModelInfo)
    workspace: WorkspaceInfo = field(default_factory=WorkspaceInfo)
    version: str = ""
    output_style: OutputStyleInfo = field(default_factory=OutputStyleInfo)
    cost: CostInfo = field(default_factory=CostInfo)

    @property
    def project_dir(self) -> str:
        """Project directory, falling back to current dir and cwd."""
        return self.workspace.project_dir or self.workspace.current_dir or self.cwd

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StatuslineInput':
        model = _as_dict(data.get("model"))
        workspace = _as_dict(data.get("workspace"))
        style = _as_dict(data.get("output_style"))
        cost = _as_dict(data.get("cost"))

        return cls(
            hook_event_name=_as_str(data.get("hook_event_name")),
            session_id=_as_str(data.get("session_id")),
            transcript_path=_as_str(data.get("transcript_path")),
            cwd=_as_str(data.get("cwd")),
            model=ModelInfo(
                id=_as_str(model.get("id")),
                display_name=_as_str(model.get("display_name")),
            ),
            workspace=WorkspaceInfo(
                current_dir=_as_str(workspace.get("current_dir")),
                project_dir=_as_str(workspace.get("project_dir")),
            ),
            version=_as_str(data.get("version")),
            output_style=OutputStyleInfo(name=_as_str(style.get("name"))),
            cost=CostInfo(
                total_cost_usd=_as_float(cost.get("total_cost_usd")),
                total_duration_ms=_as_int(cost.get("total_duration_ms")),
                total_api_duration_ms=_as_int(cost.get("total_api_duration_ms")),
                total_lines_added=_as_int(cost.get("total_lines_added")),
                total_lines_removed=_as_int(cost.get("total_lines_removed")),
            ),
        )


def parse_input(raw: str) -> Tuple[Optional[StatuslineInput], Optional[str]]:
    """
    Parse the stdin payload.

    Args:
        raw: Complete stdin text

    Returns:
        (input, None) on success.
        (None, None) when stdin is empty: input is simply absent.
        (None, diagnostic) when the payload is malformed; the diagnostic
        holds a header line and the offending text.
    """
    if not raw or not raw.strip():
        return None, None

    try:
        data = orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        return None, f"{INPUT_HEADER} {e}\n{raw}"

    if not isinstance(data, dict):
        return None, f"{INPUT_HEADER} expected a JSON object, got {type(data).__name__}\n{raw}"

    return StatuslineInput.from_dict(data), None


# =============================================================================
# Transcript (newline-delimited JSON)
# =============================================================================

@dataclass
class CacheCreation:
    ephemeral_5m_input_tokens: int = 0
    ephemeral_1h_input_tokens: int = 0


@dataclass
class UsageStatistics:
    """Token usage attached to one assistant message."""
    input_tokens: int = 0
    cache_creation_input_tokens: int = 0
    cache_read_input_tokens: int = 0
    output_tokens: int = 0
    cache_creation: Optional[CacheCreation] = None
    service_tier: str = ""

    @property
    def tokens(self) -> int:
        """Input + cache creation + cache read + output."""
        return (self.input_tokens + self.cache_creation_input_tokens
                + self.cache_read_input_tokens + self.output_tokens)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'UsageStatistics':
        cache = data.get("cache_creation")
        return cls(
            input_tokens=_as_int(data.get("input_tokens")),
            cache_creation_input_tokens=_as_int(data.get("cache_creation_input_tokens")),
            cache_read_input_tokens=_as_int(data.get("cache_read_input_tokens")),
            output_tokens=_as_int(data.get("output_tokens")),
            cache_creation=CacheCreation(
                ephemeral_5m_input_tokens=_as_int(cache.get("ephemeral_5m_input_tokens")),
                ephemeral_1h_input_tokens=_as_int(cache.get("ephemeral_1h_input_tokens")),
            ) if isinstance(cache, dict) else None,
            service_tier=_as_str(data.get("service_tier")),
        )


@dataclass
class MessageContent:
    id: Optional[str] = None
    type: str = ""
    role: str = ""
    model: Optional[str] = None
    stop_reason: Optional[str] = None
    usage: Optional[UsageStatistics] = None


@dataclass
class SessionMessage:
    """One line of the transcript."""
    uuid: str = ""
    parent_uuid: Optional[str] = None
    session_id: str = ""
    type: str = ""
    is_sidechain: bool = False
    user_type: str = ""
    cwd: str = ""
    version: str = ""
    git_branch: str = ""
    timestamp: str = ""
    request_id: Optional[str] = None
    message: MessageContent = field(default_factory=MessageContent)

    @property
    def usage(self) -> Optional[UsageStatistics]:
        return self.message.usage

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SessionMessage':
        content = _as_dict(data.get("message"))
        usage = content.get("usage")
        return cls(
            uuid=_as_str(data.get("uuid")),
            parent_uuid=data.get("parentUuid") if isinstance(data.get("parentUuid"), str) else None,
            session_id=_as_str(data.get("sessionId")),
            type=_as_str(data.get("type")),
            is_sidechain=data.get("isSidechain") is True,
            user_type=_as_str(data.get("userType")),
            cwd=_as_str(data.get("cwd")),
            version=_as_str(data.get("version")),
            git_branch=_as_str(data.get("gitBranch")),
            timestamp=_as_str(data.get("timestamp")),
            request_id=data.get("requestId") if isinstance(data.get("requestId"), str) else None,
            message=MessageContent(
                id=content.get("id") if isinstance(content.get("id"), str) else None,
                type=_as_str(content.get("type")),
                role=_as_str(content.get("role")),
                model=content.get("model") if isinstance(content.get("model"), str) else None,
                stop_reason=content.get("stop_reason") if isinstance(content.get("stop_reason"), str) else None,
                usage=UsageStatistics.from_dict(usage) if isinstance(usage, dict) else None,
            ),
        )


def load_transcript(path: Path, timeout_ms: int = DEFAULT_LOAD_TIMEOUT_MS) -> List[SessionMessage]:
    """
    Read a transcript, one message per line.

    The deadline is checked before each line, so a huge or slow file
    cannot hold the status line past timeout_ms. Malformed lines are
    skipped.

    Raises:
        TranscriptTimeoutError: Deadline passed before the end of file
        SessionError: File could not be read
    """
    deadline = time.monotonic() + timeout_ms / 1000
    messages = []
    skipped = 0

    try:
        with open(path, "rb") as f:
            for line_number, line in enumerate(f, start=1):
                if time.monotonic() > deadline:
                    raise TranscriptTimeoutError(
                        f"Transcript \"{path}\" not loaded within {timeout_ms}ms "
                        f"(stopped at line {line_number})"
                    )
                line = line.strip()
                if not line:
                    continue
                try:
                    data = orjson.loads(line)
                except orjson.JSONDecodeError:
                    skipped += 1
                    continue
                if isinstance(data, dict):
                    messages.append(SessionMessage.from_dict(data))
                else:
                    skipped += 1
    except OSError as e:
        raise SessionError(f"Could not read transcript \"{path}\": {e}") from e

    if skipped:
        logger.debug("Skipped %d malformed transcript lines in %s", skipped, path)
    return messages


# =============================================================================
# Context
# =============================================================================

@dataclass
class SessionContext:
    """Everything widgets know about the current session."""
    input: Optional[StatuslineInput] = None
    messages: List[SessionMessage] = field(default_factory=list)

    @property
    def has_input(self) -> bool:
        return self.input is not None

    @property
    def project_dir(self) -> Optional[Path]:
        if self.input is None or not self.input.project_dir:
            return None
        return Path(self.input.project_dir)

    @property
    def tokens(self) -> int:
        """
        Largest per-message token total in the transcript.

        Returns -1 when no message carries usage.
        """
        totals = [m.usage.tokens for m in self.messages if m.usage is not None]
        return max(totals) if totals else -1


def load_session(
    statusline_input: Optional[StatuslineInput],
    timeout_ms: int = DEFAULT_LOAD_TIMEOUT_MS,
) -> SessionContext:
    """
    Build the context for one run.

    Absent input or an empty transcript path gives a context without
    messages. A transcript path that does not exist is an error.

    Raises:
        TranscriptNotFoundError: Referenced transcript is missing
        TranscriptTimeoutError: Transcript not loaded within timeout_ms
    """
    if statusline_input is None or not statusline_input.transcript_path:
        return SessionContext(input=statusline_input)

    path = Path(statusline_input.transcript_path).expanduser()
    if not path.is_file():
        raise TranscriptNotFoundError(f"File \"{statusline_input.transcript_path}\" does not exist.")

    start = time.monotonic()
    messages = load_transcript(path, timeout_ms)
    logger.debug(
        "Loaded %d messages for session %s in %.1fms",
        len(messages), statusline_input.session_id, (time.monotonic() - start) * 1000,
    )
    return SessionContext(input=statusline_input, messages=messages)
