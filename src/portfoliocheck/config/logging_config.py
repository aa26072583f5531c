"""Logging setup for portfoliocheck.

Every handler writes lines with a bracketed lowercase level tag, e.g.::

    2026-01-01T12:00:00Z [warn] portfoliocheck.resolver: Lookup of a.test failed: ...

The ``logging`` config section picks the root level, the stderr/file/syslog
handlers and optional per-logger levels (``loggers``), e.g. to keep
``portfoliocheck.resolver`` at debug while the root stays at info.
"""

from __future__ import annotations

import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

LEVEL_NAMES: Dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "crit": logging.CRITICAL,
    "critical": logging.CRITICAL,
}

_TAGS = {
    logging.DEBUG: "[debug]",
    logging.INFO: "[info]",
    logging.WARNING: "[warn]",
    logging.ERROR: "[error]",
    logging.CRITICAL: "[crit]",
}

LINE_FORMAT = "%(asctime)s %(level_tag)s %(name)s: %(message)s"


def parse_level(value: Any, default: int = logging.INFO) -> int:
    """Map a config level name such as ``warn`` to a logging level number."""

    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return LEVEL_NAMES.get(str(value).strip().lower(), default)


class _LevelTagFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        record.level_tag = _TAGS.get(record.levelno, f"[lvl{record.levelno}]")
        return super().format(record)


class BracketLevelFormatter(_LevelTagFormatter):
    """Formatter for stderr and file output, timestamped in UTC."""

    def __init__(self, fmt: Optional[str] = None) -> None:
        super().__init__(fmt or LINE_FORMAT)

    def formatTime(self, record, datefmt=None):
        return datetime.fromtimestamp(record.created, timezone.utc).strftime(
            "%Y-%m-%dT%H:%M:%SZ"
        )


class SyslogFormatter(_LevelTagFormatter):
    """Formatter for syslog: program tag first, no timestamp (syslog adds one)."""

    def __init__(self, tag: str = "portfoliocheck") -> None:
        super().__init__(tag.replace("%", "%%") + ": %(level_tag)s %(name)s: %(message)s")
        self.tag = tag


def _file_handler(file_path: str, formatter: logging.Formatter) -> logging.Handler:
    path = Path(file_path.strip()).expanduser().resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    handler.setFormatter(formatter)
    return handler


def _syslog_handler(syslog_cfg: Any) -> logging.Handler:
    opts: Mapping[str, Any] = syslog_cfg if isinstance(syslog_cfg, dict) else {}
    facility = getattr(
        logging.handlers.SysLogHandler,
        f"LOG_{str(opts.get('facility', 'USER')).upper()}",
        logging.handlers.SysLogHandler.LOG_USER,
    )
    handler = logging.handlers.SysLogHandler(
        address=opts.get("address", "/dev/log"), facility=facility
    )
    handler.setFormatter(SyslogFormatter(tag=str(opts.get("tag", "portfoliocheck"))))
    return handler


def init_logging(cfg: Optional[Dict[str, Any]]) -> List[logging.Handler]:
    """Brief: Configure the root logger from the `logging` config section.

    Inputs:
      - cfg: mapping with optional keys
          - level: debug, info, warn, error, crit (default info)
          - stderr: log to stderr (default True)
          - file: path of a log file; parent directories are created
          - syslog: True, or a mapping with address/facility/tag
          - loggers: {logger name: level} overrides

    Outputs:
      - list of handlers now attached to the root logger. A syslog handler
        that cannot be opened is skipped with a warning.

    Example:
      >>> init_logging({"level": "debug", "stderr": True, "loggers": {"portfoliocheck.resolver": "info"}})
    """

    cfg = cfg or {}
    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
    root.setLevel(parse_level(cfg.get("level", "info")))

    formatter = BracketLevelFormatter()
    if cfg.get("stderr", True):
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setFormatter(formatter)
        root.addHandler(stderr_handler)

    file_path = cfg.get("file")
    if isinstance(file_path, str) and file_path.strip():
        root.addHandler(_file_handler(file_path, formatter))

    if cfg.get("syslog"):
        try:
            root.addHandler(_syslog_handler(cfg["syslog"]))
        except (OSError, ValueError) as e:
            root.warning("Failed to configure syslog: %s", e)

    for name, level in (cfg.get("loggers") or {}).items():
        logging.getLogger(name).setLevel(parse_level(level))

    logging.captureWarnings(True)
    return list(root.handlers)
