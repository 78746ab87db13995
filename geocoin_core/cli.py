from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from typing import Callable, Optional, TextIO

from .config import GameConfig
from .db import MemoryStore, SqliteStore
from .errors import CacheNotVisibleError, EmptyCacheError, EmptyInventoryError
from .events import ALL_EVENTS, Event
from .logs import setup_logging
from .session import WorldSession

logger = logging.getLogger(__name__)

HELP = "commands: n s e w | collect i,j | deposit i,j | look | reset | quit"


def describe(session: WorldSession) -> str:
    snap = session.snapshot()
    loc = snap["location"]
    lines = [
        f"At {loc['latitude']:.6f},{loc['longitude']:.6f} (cell {snap['cell']}), carrying {len(snap['inventory'])} coins",
    ]
    for cache in snap["caches"]:
        lines.append(f"  cache {cache['cell']}: {len(cache['coins'])} coins")
    return "\n".join(lines)


def run_command(session: WorldSession, line: str, out: Callable[[str], None]) -> bool:
    """Executes one REPL line. Returns False when the user asked to quit."""
    parts = line.strip().split()
    if not parts:
        return True
    cmd, args = parts[0].lower(), parts[1:]
    try:
        if cmd in ("q", "quit", "exit"):
            return False
        if cmd in ("n", "s", "e", "w", "north", "south", "east", "west"):
            session.step_player(cmd)
        elif cmd == "look":
            out(describe(session))
        elif cmd == "collect" and len(args) == 1:
            coin = session.collect_from_cache(args[0])
            out(f"Collected {coin.label}")
        elif cmd == "deposit" and len(args) == 1:
            coin = session.deposit_to_cache(args[0])
            out(f"Deposited {coin.label}")
        elif cmd == "reset":
            session.reset_session()
        else:
            out(HELP)
    except (EmptyCacheError, EmptyInventoryError, CacheNotVisibleError) as e:
        out(f"Can't do that: {e}")
    except ValueError as e:
        out(f"Bad input: {e}")
    return True


def main(argv: Optional[list] = None, stdin: TextIO = sys.stdin) -> None:
    parser = argparse.ArgumentParser(description='Geocoin Carrier text client')
    parser.add_argument('--db', default=None, help='SQLite store path (default: GEOCOIN_DB or data/geocoin.db)')
    parser.add_argument('--memory', action='store_true', help='Keep state in memory only')
    parser.add_argument('--origin', default=None, help='Start location as lat,lng for a fresh session')
    parser.add_argument('--log-level', default=None, help='Logging level (default: GEOCOIN_LOG_LEVEL or INFO)')
    args = parser.parse_args(argv)

    setup_logging(args.log_level)
    config = GameConfig.from_env()
    if args.origin:
        lat_s, lng_s = args.origin.split(',')
        config = replace(config, origin=(float(lat_s), float(lng_s))).validate()
    store = MemoryStore() if args.memory else SqliteStore(args.db or config.db_path)
    session = WorldSession.load(config, store)
    logger.info("Session ready at cell %s with %d caches in view", session.player_cell.key, len(session.caches))

    def _print_event(event: Event) -> None:
        print(f"[{event.name}] " + " ".join(f"{k}={v}" for k, v in event.payload.items()))

    session.events.subscribe(ALL_EVENTS, _print_event)
    print(describe(session))
    print(HELP)
    for line in stdin:
        if not run_command(session, line, print):
            break
