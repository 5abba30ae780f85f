"""
Root logger setup for the ``beautrip`` command.

Only the CLI calls ``configure_logging``, once per command and before any
data is loaded.  Everything else logs through ``logging.getLogger(__name__)``.

Console output goes to stderr so that ``validate-config --full`` dumps on
stdout stay machine-readable.  With ``json_format = true`` every record
becomes one line::

    {"ts": "2024-06-10T09:00:00Z", "level": "INFO", "logger": "beautrip_planner.cli",
     "msg": "Ranked 12 groups", "user_scope": "local"}
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from beautrip_planner.config import LoggingConfig

TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s | %(message)s"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# HTTP client libraries log every request at INFO.
_CHATTY_LOGGERS = ("httpx", "httpcore")

_RESERVED = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", None, None))
) | {"message", "asctime"}


class _JsonFormatter(logging.Formatter):
    """One JSON object per record; ``extra=`` keys are copied to the top level."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        doc: dict = {
            "ts":     created.strftime(TIMESTAMP_FORMAT),
            "level":  record.levelname,
            "logger": record.name,
            "msg":    record.getMessage(),
        }
        doc.update(
            (name, value)
            for name, value in vars(record).items()
            if name not in _RESERVED and not name.startswith("_")
        )
        if record.exc_info:
            doc["exc"] = self.formatException(record.exc_info)
        return json.dumps(doc, ensure_ascii=False, default=str)


def _handler(
    target: Optional[Path],
    level: int,
    formatter: logging.Formatter,
) -> logging.Handler:
    """Stderr handler when ``target`` is ``None``, else a UTF-8 file handler."""
    handler: logging.Handler
    if target is None:
        handler = logging.StreamHandler(sys.stderr)
    else:
        target.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(target, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def configure_logging(config: "LoggingConfig") -> None:
    """Install stderr (and optionally file) handlers on the root logger.

    Replaces whatever handlers were installed before, so calling it twice in
    one process (as the CLI tests do) leaves a single consistent setup.

    Args:
        config: ``[logging]`` section of the loaded ``AppConfig``.
    """
    level = logging.getLevelName(config.level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    formatter = (
        _JsonFormatter()
        if config.json_format
        else logging.Formatter(TEXT_FORMAT, datefmt=TIMESTAMP_FORMAT)
    )

    targets: list[Optional[Path]] = [None]
    if config.log_file:
        targets.append(Path(config.log_file))

    logging.basicConfig(
        level=level,
        handlers=[_handler(t, level, formatter) for t in targets],
        force=True,
    )
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
