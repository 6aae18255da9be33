"""Exceptions raised by the combat domain.

Illegal actions are reported through return values; exceptions are reserved
for programming errors and malformed persisted data.
"""


class StellarArenaError(Exception):
    """Base class for combat domain errors."""


class InvalidShipRecordError(StellarArenaError):
    """Raised when a ship snapshot cannot be turned back into a ship."""
