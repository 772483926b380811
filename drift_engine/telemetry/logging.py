"""Log formatting for drift engine output.

Two modes, chosen by :class:`~drift_engine.config.DriftSettings`:

* plain text via :func:`logging.basicConfig` (the default), or
* single-line JSON records when ``DRIFT_STRUCTURED_LOGGING=true``.

The JSON form carries the engine's own context objects as top-level keys,
so a log pipeline can filter on a fingerprint or on ``has_drift`` without
parsing the message text:

* ``snapshot``: emitted by :meth:`KeyedTable.stamp` when a snapshot is
  committed (fingerprint, label, rows).
* ``drift``: emitted by :class:`DriftReporter` for every check (status,
  reference fingerprint prefix and, when a report was produced,
  ``has_drift`` and the detail kind).

Output schema per JSON line::

    {
        "timestamp": "2025-05-15T12:34:56.789012+00:00",
        "level": "WARNING",
        "logger": "drift_engine.drift.reporter",
        "message": "Snapshot not found in cache ...",
        "snapshot": { ... },      // stamp context
        "drift": { ... },         // drift check context
        "error": "MissingColumnError",  // exception class, only on exceptions
        "exc_info": "Traceback ..."     // only on exceptions
    }
"""

from __future__ import annotations

import json
import logging
import traceback
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from drift_engine.config import DriftSettings

PLAIN_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"

# Record attributes passed through ``extra=`` that are copied into the JSON line.
CONTEXT_FIELDS = ("snapshot", "drift")


class JSONFormatter(logging.Formatter):
    """Format drift engine log records as single-line JSON.

    Only the context keys in :data:`CONTEXT_FIELDS` are copied from the
    record; any other ``extra=`` attributes are left out.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            (field, getattr(record, field))
            for field in CONTEXT_FIELDS
            if getattr(record, field, None) is not None
        )

        if record.exc_info and record.exc_info[0] is not None:
            payload["error"] = record.exc_info[0].__name__
            payload["exc_info"] = "".join(traceback.format_exception(*record.exc_info))

        return json.dumps(payload, default=str, ensure_ascii=False)


def configure_logging(settings: DriftSettings, *, logger_name: str = "drift_engine") -> logging.Logger:
    """Install a handler on the drift engine logger according to *settings*.

    Existing handlers on that logger are replaced so repeated calls do not
    duplicate output.
    """
    target = logging.getLogger(logger_name)
    target.handlers.clear()

    handler = logging.StreamHandler()
    if settings.structured_logging:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT))

    target.addHandler(handler)
    target.setLevel(settings.effective_log_level)
    target.propagate = False

    target.debug(
        "Logging configured: structured=%s level=%s",
        settings.structured_logging,
        logging.getLevelName(settings.effective_log_level),
    )
    return target
