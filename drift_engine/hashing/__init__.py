"""Content hashing for tables."""

from drift_engine.hashing.fingerprint import (
    FINGERPRINT_VERSION,
    Fingerprint,
    fingerprint_of,
    fingerprint_of_columns,
)

__all__ = [
    "FINGERPRINT_VERSION",
    "Fingerprint",
    "fingerprint_of",
    "fingerprint_of_columns",
]
