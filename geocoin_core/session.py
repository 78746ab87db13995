from __future__ import annotations

import json
import logging
import math
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .board import Board, Cell, LatLng
from .cache import Coin, Geocache, coin_from_json, coin_to_json
from .config import GameConfig
from .db import COINS_KEY, LOCATION_KEY, MEMENTOS_KEY, MemoryStore
from .errors import (
    CacheNotVisibleError,
    CorruptMementoError,
    EmptyInventoryError,
    StorageUnavailable,
)
from .events import (
    CACHE_CONTENT_CHANGED,
    INVENTORY_CHANGED,
    STORAGE_UNAVAILABLE,
    VISIBLE_CACHES_CHANGED,
    Notifier,
)
from .luck import LuckFn, luck, spawns_cache

logger = logging.getLogger(__name__)

# (di, dj) per tile step; i follows latitude, j follows longitude
DIRECTIONS: Dict[str, Tuple[int, int]] = {
    "north": (1, 0),
    "south": (-1, 0),
    "east": (0, 1),
    "west": (0, -1),
    "n": (1, 0),
    "s": (-1, 0),
    "e": (0, 1),
    "w": (0, -1),
}


class WorldSession:
    """Owns one player's world: position, inventory, the caches in view and every cache memento.

    A cache is materialized (a live Geocache) while its cell lies within the visibility
    window and dematerialized when the player walks away. Its coins survive in a memento
    string keyed by cell, so revisiting a cell restores it exactly. Every mutation
    writes location, inventory and mementos to the store in one call.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        store: Any = None,
        luck_fn: LuckFn = luck,
    ) -> None:
        self.config = (config or GameConfig()).validate()
        self.board = Board(self.config.tile_degrees, self.config.visibility_radius)
        self.store = store if store is not None else MemoryStore()
        self.luck_fn = luck_fn
        self.events = Notifier()
        self.location = self.origin
        self.inventory: List[Coin] = []
        self.caches: Dict[Cell, Geocache] = {}
        self._mementos: Dict[str, str] = {}
        self._storage_warned = False

    @classmethod
    def load(cls, config: Optional[GameConfig] = None, store: Any = None, luck_fn: LuckFn = luck) -> 'WorldSession':
        """Restores a session from `store` (or starts at the origin) and materializes the caches in view."""
        session = cls(config, store, luck_fn)
        session._restore()
        session._sync_window()
        session.save()
        return session

    @property
    def origin(self) -> LatLng:
        return LatLng(*self.config.origin)

    @property
    def mementos(self) -> Mapping[str, str]:
        return MappingProxyType(self._mementos)

    @property
    def player_cell(self) -> Cell:
        return self.board.cell_for_point(self.location)

    # ---------- visibility ----------

    def visible_cells(self) -> List[Cell]:
        """Cells in the window around the player that host a cache, row-major."""
        p = self.config.spawn_probability
        return [c for c in self.board.cells_near_point(self.location) if spawns_cache(c, p, self.luck_fn)]

    def _materialize(self, cell: Cell) -> Geocache:
        text = self._mementos.get(cell.key)
        if text is not None:
            try:
                cache = Geocache.from_memento(text, self.board)
                if cache.cell is not cell:
                    raise CorruptMementoError(f"memento stored under {cell.key} describes {cache.key}")
                return cache
            except CorruptMementoError as e:
                logger.warning("Discarding corrupt memento for cell %s: %s", cell.key, e)
                del self._mementos[cell.key]
        cache = Geocache.generate(self.board, cell, self.config.max_coins, self.luck_fn)
        self._mementos[cell.key] = cache.to_memento()
        logger.debug("Generated cache %s with %d coins", cell.key, len(cache.coins))
        return cache

    def _dematerialize(self, cell: Cell) -> None:
        cache = self.caches.pop(cell)
        self._mementos[cell.key] = cache.to_memento()

    def _sync_window(self) -> Tuple[List[str], List[str]]:
        wanted = self.visible_cells()
        wanted_set = set(wanted)
        removed = [c for c in self.caches if c not in wanted_set]
        for cell in removed:
            self._dematerialize(cell)
        added: List[Cell] = []
        for cell in wanted:
            if cell not in self.caches:
                self.caches[cell] = self._materialize(cell)
                added.append(cell)
        return [c.key for c in added], [c.key for c in removed]

    # ---------- movement ----------

    def move_player(self, destination: LatLng) -> None:
        if not (math.isfinite(destination.lat) and math.isfinite(destination.lng)):
            raise ValueError(f"destination must be finite, got {destination!r}")
        self.location = LatLng(float(destination.lat), float(destination.lng))
        added, removed = self._sync_window()
        if added or removed:
            self.events.emit(VISIBLE_CACHES_CHANGED, added=added, removed=removed)
        self.save()

    def step_player(self, direction: str) -> None:
        """Moves the player one tile in a compass direction."""
        try:
            di, dj = DIRECTIONS[direction.strip().lower()]
        except (KeyError, AttributeError):
            raise ValueError(f"unknown direction: {direction!r}") from None
        w = self.board.tile_width
        self.move_player(LatLng(self.location.lat + di * w, self.location.lng + dj * w))

    # ---------- coin transfer ----------

    def cache_at(self, cell_key: str) -> Geocache:
        cell = self.board.cell_for_key(cell_key)
        cache = self.caches.get(cell)
        if cache is None:
            raise CacheNotVisibleError(f"no cache in view at {cell.key}")
        return cache

    def can_collect(self, cell_key: str) -> bool:
        cache = self.caches.get(self.board.cell_for_key(cell_key))
        return cache is not None and not cache.is_empty()

    def can_deposit(self, cell_key: str) -> bool:
        return bool(self.inventory) and self.board.cell_for_key(cell_key) in self.caches

    def collect_from_cache(self, cell_key: str) -> Coin:
        cache = self.cache_at(cell_key)
        coin = cache.collect(self.inventory)
        self._mementos[cache.key] = cache.to_memento()
        logger.debug("Collected %s from %s", coin.label, cache.key)
        self.events.emit(CACHE_CONTENT_CHANGED, cell=cache.key, coins=len(cache.coins))
        self.events.emit(INVENTORY_CHANGED, count=len(self.inventory))
        self.save()
        return coin

    def deposit_to_cache(self, cell_key: str) -> Coin:
        cache = self.cache_at(cell_key)
        if not self.inventory:
            raise EmptyInventoryError("no coins to deposit")
        coin = self.inventory.pop()
        cache.deposit(coin)
        self._mementos[cache.key] = cache.to_memento()
        logger.debug("Deposited %s into %s", coin.label, cache.key)
        self.events.emit(CACHE_CONTENT_CHANGED, cell=cache.key, coins=len(cache.coins))
        self.events.emit(INVENTORY_CHANGED, count=len(self.inventory))
        self.save()
        return coin

    # ---------- reset ----------

    def reset_session(self) -> None:
        """Forgets everything: stored state, mementos and inventory. The player returns to the origin."""
        try:
            self.store.clear()
        except StorageUnavailable as e:
            self._storage_failed(e)
        removed = [c.key for c in self.caches]
        self.caches.clear()
        self._mementos.clear()
        self.inventory.clear()
        self.location = self.origin
        added, _ = self._sync_window()
        logger.info("Session reset; %d caches in view", len(added))
        self.events.emit(VISIBLE_CACHES_CHANGED, added=added, removed=removed)
        self.events.emit(INVENTORY_CHANGED, count=0)
        self.save()

    # ---------- persistence ----------

    def _storage_failed(self, error: StorageUnavailable) -> None:
        if self._storage_warned:
            logger.debug("Storage still unavailable: %s", error)
            return
        self._storage_warned = True
        logger.warning("Storage unavailable, continuing in memory: %s", error)
        self.events.emit(STORAGE_UNAVAILABLE, error=str(error))

    def save(self) -> bool:
        """Writes the whole session to the store. Returns False when the write was skipped."""
        payload = {
            LOCATION_KEY: json.dumps({"latitude": self.location.lat, "longitude": self.location.lng}),
            COINS_KEY: json.dumps([coin_to_json(c) for c in self.inventory]),
            MEMENTOS_KEY: json.dumps([[k, v] for k, v in self._mementos.items()]),
        }
        try:
            self.store.put_many(payload)
            return True
        except StorageUnavailable as e:
            self._storage_failed(e)
            return False

    def _read(self, key: str) -> Any:
        raw = self.store.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Ignoring unreadable %s in store", key)
            return None

    def _restore(self) -> None:
        try:
            loc = self._read(LOCATION_KEY)
            coins = self._read(COINS_KEY)
            mementos = self._read(MEMENTOS_KEY)
        except StorageUnavailable as e:
            self._storage_failed(e)
            return

        if loc is not None:
            try:
                lat, lng = float(loc["latitude"]), float(loc["longitude"])
                if not (math.isfinite(lat) and math.isfinite(lng)):
                    raise ValueError("non-finite location")
                self.location = LatLng(lat, lng)
            except (KeyError, TypeError, ValueError):
                logger.warning("Ignoring malformed %s: %r", LOCATION_KEY, loc)

        if isinstance(coins, list):
            for item in coins:
                try:
                    self.inventory.append(coin_from_json(item, self.board))
                except CorruptMementoError as e:
                    logger.warning("Dropping malformed inventory coin: %s", e)
        elif coins is not None:
            logger.warning("Ignoring malformed %s", COINS_KEY)

        if isinstance(mementos, list):
            for pair in mementos:
                if isinstance(pair, list) and len(pair) == 2 and all(isinstance(p, str) for p in pair):
                    self._mementos[pair[0]] = pair[1]
                else:
                    logger.warning("Dropping malformed memento entry: %r", pair)
        elif mementos is not None:
            logger.warning("Ignoring malformed %s", MEMENTOS_KEY)

    # ---------- queries ----------

    def total_coins(self) -> int:
        """Coins in the inventory plus every cache, live or remembered."""
        total = len(self.inventory) + sum(len(c.coins) for c in self.caches.values())
        live = {c.key for c in self.caches}
        for key, text in self._mementos.items():
            if key in live:
                continue
            try:
                total += len(Geocache.from_memento(text, self.board).coins)
            except CorruptMementoError:
                continue
        return total

    def snapshot(self) -> Dict[str, Any]:
        caches = []
        for cache in self.caches.values():
            item = cache.to_json()
            item["canCollect"] = not cache.is_empty()
            item["canDeposit"] = bool(self.inventory)
            caches.append(item)
        return {
            "location": {"latitude": self.location.lat, "longitude": self.location.lng},
            "cell": self.player_cell.key,
            "inventory": [c.label for c in self.inventory],
            "caches": caches,
        }
