"""Exception hierarchy for the drift engine.

Hard errors are raised at the offending call.  Cache misses are *not*
errors: the store returns ``None`` and the drift reporter returns a
:class:`~drift_engine.models.drift.DriftCheck` with a non-reported status.
"""

from __future__ import annotations

from collections.abc import Iterable


class DriftEngineError(Exception):
    """Base class for all drift engine errors."""


class ConfigurationError(DriftEngineError, ValueError):
    """Raised when a component is constructed with invalid limits."""


class InvalidKeyError(DriftEngineError, ValueError):
    """Raised when a key column list is empty or otherwise unusable."""


class MissingColumnError(InvalidKeyError):
    """Raised when named columns are absent from a table.

    Attributes
    ----------
    missing:
        The absent column names, in the order they were requested.
    """

    def __init__(self, missing: Iterable[object], *, where: str = "table") -> None:
        self.missing = tuple(missing)
        self.where = where
        names = ", ".join(str(name) for name in self.missing)
        super().__init__(f"Column(s) not found in {where}: {names}")
