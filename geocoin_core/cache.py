from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from .board import Board, Bounds, Cell, LatLng
from .errors import CorruptMementoError, EmptyCacheError
from .luck import LuckFn, initial_coin_count, luck


@dataclass(frozen=True)
class Coin:
    """A unique coin, identified by the cell it was minted in and its serial there."""
    cell: Cell
    serial: int

    @property
    def label(self) -> str:
        return f"{self.cell.i}:{self.cell.j}#{self.serial}"


def coin_to_json(coin: Coin) -> Dict[str, Any]:
    return {"cell": {"i": coin.cell.i, "j": coin.cell.j}, "serial": coin.serial}


def _strict_int(value: Any, what: str) -> int:
    # bool is an int subclass; reject it along with floats and strings
    if isinstance(value, bool) or not isinstance(value, int):
        raise CorruptMementoError(f"{what} must be an integer, got {value!r}")
    return value


def _strict_float(value: Any, what: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise CorruptMementoError(f"{what} must be a number, got {value!r}")
    return float(value)


def _cell_from_json(obj: Any, board: Board, what: str) -> Cell:
    if not isinstance(obj, dict) or "i" not in obj or "j" not in obj:
        raise CorruptMementoError(f"{what} must be an object with i and j")
    return board.canonical_cell(_strict_int(obj["i"], f"{what}.i"), _strict_int(obj["j"], f"{what}.j"))


def coin_from_json(obj: Any, board: Board) -> Coin:
    if not isinstance(obj, dict) or "cell" not in obj or "serial" not in obj:
        raise CorruptMementoError(f"coin must be an object with cell and serial, got {obj!r}")
    serial = _strict_int(obj["serial"], "coin.serial")
    if serial < 0:
        raise CorruptMementoError(f"coin.serial must be non-negative, got {serial}")
    return Coin(cell=_cell_from_json(obj["cell"], board, "coin.cell"), serial=serial)


class Geocache:
    """Live state of one cache: its cell, its rectangle on the map and the coins it holds.

    Coins are kept in insertion order and collected from the end (stack order).
    """

    def __init__(self, cell: Cell, bounds: Bounds, coins: Optional[Iterable[Coin]] = None) -> None:
        self.cell = cell
        self.bounds = bounds
        self.coins: List[Coin] = list(coins or [])

    @property
    def key(self) -> str:
        return self.cell.key

    @classmethod
    def generate(cls, board: Board, cell: Cell, max_coins: int, luck_fn: LuckFn = luck) -> 'Geocache':
        count = initial_coin_count(cell, max_coins, luck_fn)
        return cls(cell, board.cell_bounds(cell), [Coin(cell, serial) for serial in range(count)])

    def is_empty(self) -> bool:
        return not self.coins

    def collect(self, inventory: Optional[List[Coin]] = None) -> Coin:
        """Removes the most recently added coin, appending it to `inventory` when given."""
        if not self.coins:
            raise EmptyCacheError(f"cache {self.key} has no coins")
        coin = self.coins.pop()
        if inventory is not None:
            inventory.append(coin)
        return coin

    def deposit(self, coin: Coin) -> None:
        self.coins.append(coin)

    def to_memento(self) -> str:
        return json.dumps(
            {
                "cell": {"i": self.cell.i, "j": self.cell.j},
                "bounds": self.bounds.as_pairs(),
                "coins": [coin_to_json(c) for c in self.coins],
            },
            sort_keys=True,
            separators=(",", ":"),
        )

    @classmethod
    def from_memento(cls, text: str, board: Board) -> 'Geocache':
        """Inverse of to_memento. Raises CorruptMementoError on anything malformed."""
        if not isinstance(text, str):
            raise CorruptMementoError(f"memento must be a string, got {type(text).__name__}")
        try:
            obj = json.loads(text)
        except ValueError as e:
            raise CorruptMementoError(f"memento is not valid JSON: {e}") from e
        if not isinstance(obj, dict):
            raise CorruptMementoError("memento must be a JSON object")
        for field in ("cell", "bounds", "coins"):
            if field not in obj:
                raise CorruptMementoError(f"memento missing {field!r}")
        cell = _cell_from_json(obj["cell"], board, "cell")

        raw_bounds = obj["bounds"]
        if not isinstance(raw_bounds, list) or len(raw_bounds) != 2 \
                or not all(isinstance(p, list) and len(p) == 2 for p in raw_bounds):
            raise CorruptMementoError(f"bounds must be two [lat, lng] pairs, got {raw_bounds!r}")
        (s, w), (n, e) = raw_bounds
        bounds = Bounds(
            LatLng(_strict_float(s, "bounds"), _strict_float(w, "bounds")),
            LatLng(_strict_float(n, "bounds"), _strict_float(e, "bounds")),
        )

        raw_coins = obj["coins"]
        if not isinstance(raw_coins, list):
            raise CorruptMementoError("coins must be a list")
        coins = [coin_from_json(c, board) for c in raw_coins]
        return cls(cell, bounds, coins)

    def to_json(self) -> Dict[str, Any]:
        return {
            "cell": self.key,
            "bounds": self.bounds.as_pairs(),
            "coins": [c.label for c in self.coins],
        }

    def __repr__(self) -> str:
        return f"Geocache({self.key}, coins={len(self.coins)})"
