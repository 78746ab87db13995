#!/usr/bin/env python3
"""
Quick inspector for a Geocoin SQLite store.
Prints the saved player location, the inventory and every cache memento with its coin count.
"""
from __future__ import annotations

import json
import os
import sys
from typing import List, Optional

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from game import (  # noqa: E402
    COINS_KEY,
    LOCATION_KEY,
    MEMENTOS_KEY,
    Board,
    CorruptMementoError,
    GameConfig,
    Geocache,
    SqliteStore,
)


def peek(db_path: str) -> List[str]:
    store = SqliteStore(db_path)
    config = GameConfig()
    board = Board(config.tile_degrees, config.visibility_radius)
    lines = [f"File: {db_path}"]

    loc = store.get(LOCATION_KEY)
    lines.append(f"location: {loc if loc is not None else '(none)'}")

    coins = json.loads(store.get(COINS_KEY) or "[]")
    lines.append(f"inventory: {len(coins)} coins")

    pairs = json.loads(store.get(MEMENTOS_KEY) or "[]")
    lines.append(f"mementos: {len(pairs)}")
    for key, text in pairs:
        try:
            cache = Geocache.from_memento(text, board)
            lines.append(f"  {key}: {len(cache.coins)} coins")
        except CorruptMementoError as e:
            lines.append(f"  {key}: CORRUPT ({e})")
    return lines


def main(argv: Optional[List[str]] = None) -> None:
    args = sys.argv[1:] if argv is None else argv
    path = args[0] if args else os.getenv("GEOCOIN_DB", os.path.join("data", "geocoin.db"))
    if not os.path.isfile(path):
        print(f"No store at {path}")
        return
    for line in peek(path):
        print(line)


if __name__ == "__main__":
    main()
