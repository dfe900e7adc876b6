# Copyright 2025-2026 Dimensional Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Structured logging for rrtplan.

Every module calls ``logger = setup_logger()`` once at import time. Records
go to a compact console line and, unless disabled, to a rotating JSONL file
shared by the whole process.

Environment:
    RRTPLAN_LOG_LEVEL: Level name for new loggers (default INFO)
    RRTPLAN_LOG_DIR: Directory for the JSONL file
    RRTPLAN_LOG_TO_FILE: Set to 0 to keep records on the console only
"""

from collections.abc import Iterator, Mapping
from datetime import datetime
import inspect
import logging
import logging.handlers
import os
from pathlib import Path
import sys
import tempfile
from typing import Any

import structlog
from structlog.processors import CallsiteParameter, CallsiteParameterAdder

from rrtplan.constants import RRTPLAN_LOG_DIR, RRTPLAN_PROJECT_ROOT

_LOG_FILE_PATH: Path | None = None
_STRUCTLOG_CONFIGURED = False

_LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
_LOG_FILE_BACKUPS = 20


def _candidate_log_directories() -> Iterator[Path]:
    override = os.getenv("RRTPLAN_LOG_DIR")
    if override:
        yield Path(override)
    if (RRTPLAN_PROJECT_ROOT / ".git").exists():
        yield RRTPLAN_LOG_DIR
    else:
        state_home = os.getenv("XDG_STATE_HOME")
        state_dir = Path(state_home) if state_home else Path.home() / ".local" / "state"
        yield state_dir / "rrtplan" / "logs"
    yield Path(tempfile.gettempdir()) / "rrtplan" / "logs"


def _get_log_directory() -> Path:
    """First candidate directory that exists or can be created."""
    last_error: OSError | None = None
    for log_dir in _candidate_log_directories():
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            last_error = e
            continue
        return log_dir
    raise RuntimeError("No writable log directory") from last_error


def _get_log_file_path() -> Path:
    global _LOG_FILE_PATH

    if _LOG_FILE_PATH is None:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        _LOG_FILE_PATH = _get_log_directory() / f"rrtplan_{timestamp}_{os.getpid()}.jsonl"
    return _LOG_FILE_PATH


def _file_logging_enabled() -> bool:
    return os.getenv("RRTPLAN_LOG_TO_FILE", "1").strip().lower() not in ("0", "false", "no")


def _configure_structlog() -> None:
    global _STRUCTLOG_CONFIGURED

    if _STRUCTLOG_CONFIGURED:
        return
    _STRUCTLOG_CONFIGURED = True

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            CallsiteParameterAdder(
                parameters=[CallsiteParameter.FUNC_NAME, CallsiteParameter.LINENO]
            ),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


# ============= Console Rendering =============

_CONSOLE_PATH_WIDTH = 32
_CONSOLE_USE_COLORS = hasattr(sys.stdout, "isatty") and sys.stdout.isatty()

_CONSOLE_RESET = "\033[0m"
_CONSOLE_DIM = "\033[1;30m"
_CONSOLE_KEY = "\033[0;36m"
_CONSOLE_VAL = "\033[0;35m"
_CONSOLE_LEVEL_COLORS = {
    "dbg": "\033[1;36m",
    "inf": "\033[1;32m",
    "war": "\033[1;33m",
    "err": "\033[1;31m",
    "cri": "\033[1;31m",
}

# Callsite and exception fields that only belong in the JSON file
_CONSOLE_DROPPED_KEYS = frozenset(
    {
        "func_name",
        "lineno",
        "exception",
        "exc_info",
        "_record",
        "_from_structlog",
    }
)


def _format_time(timestamp: str) -> str:
    try:
        dt = datetime.fromisoformat(timestamp.replace("Z", "+00:00")) if timestamp else datetime.now()
    except (ValueError, AttributeError):
        return str(timestamp)[:12]
    return f"{dt:%H:%M:%S}.{dt.microsecond // 1000:03d}"


def _paint(text: str, color: str) -> str:
    return f"{color}{text}{_CONSOLE_RESET}" if _CONSOLE_USE_COLORS and color else text


def _compact_console_processor(logger: Any, method_name: str, event_dict: Mapping[str, Any]) -> str:
    """Render ``HH:MM:SS.mmm [lvl][module path] event key=value ...``."""
    fields = {k: v for k, v in event_dict.items() if k not in _CONSOLE_DROPPED_KEYS}

    time_str = _format_time(fields.pop("timestamp", ""))
    level = str(fields.pop("level", "???"))[:3].lower()
    # truncated from the left so the module name stays visible
    source = str(fields.pop("logger", ""))[-_CONSOLE_PATH_WIDTH:].ljust(_CONSOLE_PATH_WIDTH)
    event = fields.pop("event", "")

    parts = [
        _paint(time_str, _CONSOLE_DIM),
        " ",
        _paint(f"[{level}]", _CONSOLE_LEVEL_COLORS.get(level, "")),
        _paint(f"[{source}]", _CONSOLE_DIM),
        f" {event}",
    ]
    for key in sorted(fields):
        parts.append(f" {_paint(key + '=', _CONSOLE_KEY)}{_paint(str(fields[key]), _CONSOLE_VAL)}")
    return "".join(parts)


# ============= Public API =============


def _logger_name(filename: str) -> str:
    try:
        return str(Path(filename).relative_to(RRTPLAN_PROJECT_ROOT))
    except (ValueError, TypeError):
        return filename


def _resolve_level(level: int | None) -> int:
    if level is not None:
        return level
    level_name = os.getenv("RRTPLAN_LOG_LEVEL", "INFO").upper()
    resolved = logging.getLevelName(level_name)
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logger(*, level: int | None = None) -> Any:
    """Set up a structured logger named after the calling module's file.

    Args:
        level: The logging level. Defaults to ``RRTPLAN_LOG_LEVEL`` or INFO.

    Returns:
        A configured structlog logger instance.
    """
    name = _logger_name(inspect.stack()[1].filename)
    level = _resolve_level(level)
    _configure_structlog()

    stdlib_logger = logging.getLogger(name)
    stdlib_logger.handlers.clear()
    stdlib_logger.setLevel(level)
    stdlib_logger.propagate = False

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=_compact_console_processor)
    )
    handlers: list[logging.Handler] = [console_handler]

    if _file_logging_enabled():
        file_handler = logging.handlers.RotatingFileHandler(
            _get_log_file_path(),
            mode="a",
            maxBytes=_LOG_FILE_MAX_BYTES,
            backupCount=_LOG_FILE_BACKUPS,
            encoding="utf-8",
        )
        file_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(processor=structlog.processors.JSONRenderer())
        )
        handlers.append(file_handler)

    for handler in handlers:
        handler.setLevel(level)
        stdlib_logger.addHandler(handler)

    return structlog.get_logger(name)
