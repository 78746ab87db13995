import io
import json
import os
import sys
import tempfile
import unittest
from contextlib import redirect_stdout

from game import GameConfig, MemoryStore, SqliteStore, WorldSession, MEMENTOS_KEY
from geocoin_core import cli

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "tools")))
import peek_store  # noqa: E402

TABLE = {"5,5": 0.05, "5,5,initialValue": 0.37, "5,6": 0.02, "5,6,initialValue": 0.0}


def _session():
    config = GameConfig(tile_degrees=1e-4, visibility_radius=1, spawn_probability=0.1,
                        max_coins=10, origin=(5.5e-4, 5.5e-4))
    return WorldSession.load(config, MemoryStore(), lambda k: TABLE.get(k, 0.99))


class TestCli(unittest.TestCase):
    def test_given_commands_when_run_then_session_updated_and_messages_printed(self):
        session = _session()
        out = []
        self.assertTrue(cli.run_command(session, "collect 5,5", out.append))
        self.assertEqual(out[-1], "Collected 5:5#2")
        self.assertTrue(cli.run_command(session, "collect 5,6", out.append))
        self.assertTrue(out[-1].startswith("Can't do that"))
        self.assertTrue(cli.run_command(session, "deposit 5,6", out.append))
        self.assertEqual(out[-1], "Deposited 5:5#2")
        self.assertTrue(cli.run_command(session, "n", out.append))
        self.assertEqual(session.player_cell.key, "6,5")
        self.assertTrue(cli.run_command(session, "collect zz", out.append))
        self.assertTrue(out[-1].startswith("Bad input"))
        self.assertTrue(cli.run_command(session, "dance", out.append))
        self.assertEqual(out[-1], cli.HELP)
        self.assertTrue(cli.run_command(session, "look", out.append))
        self.assertIn("cache 5,6: 1 coins", out[-1])
        self.assertFalse(cli.run_command(session, "quit", out.append))

    def test_given_script_on_stdin_when_main_runs_then_events_echoed(self):
        buf = io.StringIO()
        with redirect_stdout(buf):
            cli.main(["--memory", "--origin", "36.9895,-122.0628", "--log-level", "WARNING"],
                     stdin=io.StringIO("e\nw\nquit\n"))
        text = buf.getvalue()
        self.assertIn("carrying 0 coins", text)
        self.assertIn(cli.HELP, text)


class TestPeekStore(unittest.TestCase):
    def test_given_saved_store_when_peeking_then_location_and_mementos_listed(self):
        with tempfile.TemporaryDirectory() as td:
            path = os.path.join(td, "geocoin.db")
            session = _session()
            store = SqliteStore(path)
            session.store = store
            session.collect_from_cache("5,5")
            data = json.loads(store.get(MEMENTOS_KEY))
            data.append(["9,9", "garbage"])
            store.put_many({MEMENTOS_KEY: json.dumps(data)})

            lines = peek_store.peek(path)
            self.assertIn("inventory: 1 coins", lines)
            self.assertIn("  5,5: 2 coins", lines)
            self.assertIn("  5,6: 0 coins", lines)
            self.assertTrue(any(line.startswith("  9,9: CORRUPT") for line in lines))


if __name__ == "__main__":
    unittest.main(verbosity=2)
