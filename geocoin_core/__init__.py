"""
Geocoin Carrier core Python package.

Pure game logic for the geolocation coin game, kept free of any web or map
dependency so the Flask app, the CLI and the tests share one implementation.
Modules:
- board.py: Board, Cell, LatLng, Bounds (canonical spatial grid)
- luck.py: deterministic key -> [0, 1) generator
- cache.py: Coin, Geocache and the memento codec
- session.py: WorldSession (movement, coin transfer, persistence)
- db.py: key-value stores backing the session
- events.py: Notifier and event names
- config.py, errors.py, logs.py: settings, error types, logging setup
- cli.py: text-mode client
"""
