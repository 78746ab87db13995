from __future__ import annotations

import math
import os
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from .errors import InvalidConfiguration

# Oakes College classroom, Santa Cruz
DEFAULT_ORIGIN: Tuple[float, float] = (36.98949379578401, -122.06277128548504)


@dataclass(frozen=True)
class GameConfig:
    """Tunable world parameters. Distances are in degrees of latitude/longitude."""
    tile_degrees: float = 1e-4
    visibility_radius: int = 8
    spawn_probability: float = 0.1
    max_coins: int = 100
    origin: Tuple[float, float] = DEFAULT_ORIGIN
    db_path: str = os.path.join("data", "geocoin.db")

    def validate(self) -> 'GameConfig':
        if not isinstance(self.tile_degrees, (int, float)) or not math.isfinite(self.tile_degrees) or self.tile_degrees <= 0:
            raise InvalidConfiguration(f"tile_degrees must be a positive number, got {self.tile_degrees!r}")
        if isinstance(self.visibility_radius, bool) or not isinstance(self.visibility_radius, int) or self.visibility_radius < 0:
            raise InvalidConfiguration(f"visibility_radius must be a non-negative integer, got {self.visibility_radius!r}")
        if not 0.0 <= self.spawn_probability <= 1.0:
            raise InvalidConfiguration(f"spawn_probability must be within [0, 1], got {self.spawn_probability!r}")
        if isinstance(self.max_coins, bool) or not isinstance(self.max_coins, int) or self.max_coins < 0:
            raise InvalidConfiguration(f"max_coins must be a non-negative integer, got {self.max_coins!r}")
        lat, lng = self.origin
        if not (math.isfinite(lat) and math.isfinite(lng)):
            raise InvalidConfiguration(f"origin must be finite, got {self.origin!r}")
        return self

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'GameConfig':
        """Builds a config from GEOCOIN_* variables, falling back to defaults."""
        env = os.environ if environ is None else environ
        base = cls()

        def _get(name: str, conv, default):
            raw = env.get(name)
            if raw is None or raw.strip() == "":
                return default
            try:
                return conv(raw.strip())
            except ValueError:
                raise InvalidConfiguration(f"{name}={raw!r} is not a valid value") from None

        origin = base.origin
        origin_raw = env.get("GEOCOIN_ORIGIN")
        if origin_raw:
            try:
                lat_s, lng_s = origin_raw.split(",")
                origin = (float(lat_s), float(lng_s))
            except ValueError:
                raise InvalidConfiguration(f"GEOCOIN_ORIGIN={origin_raw!r} must look like 'lat,lng'") from None

        cfg = cls(
            tile_degrees=_get("GEOCOIN_TILE_DEGREES", float, base.tile_degrees),
            visibility_radius=_get("GEOCOIN_VISIBILITY_RADIUS", int, base.visibility_radius),
            spawn_probability=_get("GEOCOIN_SPAWN_PROBABILITY", float, base.spawn_probability),
            max_coins=_get("GEOCOIN_MAX_COINS", int, base.max_coins),
            origin=origin,
            db_path=env.get("GEOCOIN_DB") or base.db_path,
        )
        return cfg.validate()
