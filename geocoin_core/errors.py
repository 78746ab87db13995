from __future__ import annotations


class GeocoinError(Exception):
    """Base class for all game errors."""


class InvalidConfiguration(GeocoinError, ValueError):
    """Bad tile size, radius or other startup setting."""


class EmptyCacheError(GeocoinError):
    """Collect requested from a cache holding no coins."""


class EmptyInventoryError(GeocoinError):
    """Deposit requested while the player carries no coins."""


class CacheNotVisibleError(GeocoinError):
    """No materialized cache exists at the requested cell."""


class CorruptMementoError(GeocoinError, ValueError):
    """A serialized cache could not be decoded."""


class StorageUnavailable(GeocoinError):
    """The persistent store could not be read or written."""
