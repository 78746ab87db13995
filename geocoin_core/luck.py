from __future__ import annotations

import math
from typing import Callable

from .board import Cell

LuckFn = Callable[[str], float]

_FNV_OFFSET = 0xcbf29ce484222325
_FNV_PRIME = 0x100000001b3
_MASK64 = 0xFFFFFFFFFFFFFFFF


def _fnv1a64(data: bytes) -> int:
    h = _FNV_OFFSET
    for b in data:
        h ^= b
        h = (h * _FNV_PRIME) & _MASK64
    return h


def _mix64(value: int) -> int:
    # SplitMix64 finalizer
    value = (value + 0x9e3779b97f4a7c15) & _MASK64
    value ^= (value >> 30)
    value = (value * 0xbf58476d1ce4e5b9) & _MASK64
    value ^= (value >> 27)
    value = (value * 0x94d049bb133111eb) & _MASK64
    value ^= (value >> 31)
    return value & _MASK64


def luck(key: str) -> float:
    """Stable pseudo-random value in [0, 1) for a string key.

    Independent of PYTHONHASHSEED, so the world regenerates identically across runs.
    """
    h = _mix64(_fnv1a64(key.encode("utf-8")))
    return (h >> 11) / float(1 << 53)


def cell_luck_key(cell: Cell) -> str:
    return f"{cell.i},{cell.j}"


def initial_value_key(cell: Cell) -> str:
    return f"{cell.i},{cell.j},initialValue"


def spawns_cache(cell: Cell, probability: float, luck_fn: LuckFn = luck) -> bool:
    return luck_fn(cell_luck_key(cell)) < probability


def initial_coin_count(cell: Cell, max_coins: int, luck_fn: LuckFn = luck) -> int:
    """Coins in a freshly generated cache; serials run 0..count-1."""
    return int(math.floor(luck_fn(initial_value_key(cell)) * max_coins))
