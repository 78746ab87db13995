from __future__ import annotations

# Facade module that re-exports Geocoin core functionality.
# The Flask app, the tools and the tests import from here.
# Single-responsibility modules live under geocoin_core/*.

from geocoin_core.board import Board, Bounds, Cell, LatLng
from geocoin_core.cache import Coin, Geocache, coin_from_json, coin_to_json
from geocoin_core.config import DEFAULT_ORIGIN, GameConfig
from geocoin_core.db import (
    COINS_KEY,
    LOCATION_KEY,
    MEMENTOS_KEY,
    MemoryStore,
    SqliteStore,
    _ensure_db_dir,
    _resolve_db_path,
)
from geocoin_core.errors import (
    CacheNotVisibleError,
    CorruptMementoError,
    EmptyCacheError,
    EmptyInventoryError,
    GeocoinError,
    InvalidConfiguration,
    StorageUnavailable,
)
from geocoin_core.events import (
    ALL_EVENTS,
    CACHE_CONTENT_CHANGED,
    INVENTORY_CHANGED,
    STORAGE_UNAVAILABLE,
    VISIBLE_CACHES_CHANGED,
    Event,
    Notifier,
)
from geocoin_core.luck import (
    _fnv1a64,
    _mix64,
    cell_luck_key,
    initial_coin_count,
    initial_value_key,
    luck,
    spawns_cache,
)
from geocoin_core.session import DIRECTIONS, WorldSession

__all__ = [
    "Board", "Bounds", "Cell", "LatLng",
    "Coin", "Geocache", "coin_from_json", "coin_to_json",
    "DEFAULT_ORIGIN", "GameConfig",
    "COINS_KEY", "LOCATION_KEY", "MEMENTOS_KEY", "MemoryStore", "SqliteStore",
    "CacheNotVisibleError", "CorruptMementoError", "EmptyCacheError", "EmptyInventoryError",
    "GeocoinError", "InvalidConfiguration", "StorageUnavailable",
    "ALL_EVENTS", "CACHE_CONTENT_CHANGED", "INVENTORY_CHANGED", "STORAGE_UNAVAILABLE",
    "VISIBLE_CACHES_CHANGED", "Event", "Notifier",
    "cell_luck_key", "initial_coin_count", "initial_value_key", "luck", "spawns_cache",
    "DIRECTIONS", "WorldSession",
]
