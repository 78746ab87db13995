from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .errors import InvalidConfiguration


@dataclass(frozen=True)
class Cell:
    """A discrete grid coordinate. Obtain instances through Board so they stay canonical."""
    i: int
    j: int

    @property
    def key(self) -> str:
        return f"{self.i},{self.j}"


@dataclass(frozen=True)
class LatLng:
    lat: float
    lng: float


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned rectangle given by its south-west and north-east corners."""
    south_west: LatLng
    north_east: LatLng

    def as_pairs(self) -> List[List[float]]:
        return [
            [self.south_west.lat, self.south_west.lng],
            [self.north_east.lat, self.north_east.lng],
        ]


class Board:
    """Maps continuous coordinates onto a grid of canonical cells.

    Each (i, j) resolves to exactly one Cell object for the lifetime of the board.
    """

    def __init__(self, tile_width: float, visibility_radius: int) -> None:
        if isinstance(tile_width, bool) or not isinstance(tile_width, (int, float)) \
                or not math.isfinite(tile_width) or tile_width <= 0:
            raise InvalidConfiguration(f"tile width must be a positive number, got {tile_width!r}")
        if isinstance(visibility_radius, bool) or not isinstance(visibility_radius, int) or visibility_radius < 0:
            raise InvalidConfiguration(f"visibility radius must be a non-negative integer, got {visibility_radius!r}")
        self.tile_width = float(tile_width)
        self.visibility_radius = visibility_radius
        self._known_cells: Dict[Tuple[int, int], Cell] = {}

    def canonical_cell(self, i: int, j: int) -> Cell:
        """Returns the interned Cell for (i, j), creating it on first request."""
        k = (int(i), int(j))
        cell = self._known_cells.get(k)
        if cell is None:
            cell = Cell(*k)
            self._known_cells[k] = cell
        return cell

    def cell_for_point(self, point: LatLng) -> Cell:
        i = math.floor(point.lat / self.tile_width)
        j = math.floor(point.lng / self.tile_width)
        return self.canonical_cell(i, j)

    def cell_for_key(self, key: str) -> Cell:
        """Parses an "i,j" key into its canonical cell."""
        parts = str(key).split(",")
        if len(parts) != 2:
            raise ValueError(f"bad cell key: {key!r}")
        i_s, j_s = (p.strip() for p in parts)
        return self.canonical_cell(int(i_s), int(j_s))

    def cell_bounds(self, cell: Cell) -> Bounds:
        w = self.tile_width
        return Bounds(
            LatLng(cell.i * w, cell.j * w),
            LatLng((cell.i + 1) * w, (cell.j + 1) * w),
        )

    def cells_near_point(self, point: LatLng, radius: Optional[int] = None) -> List[Cell]:
        """All cells within `radius` grid steps (inclusive square), row-major: i slowest, then j."""
        r = self.visibility_radius if radius is None else radius
        if r < 0:
            raise InvalidConfiguration(f"radius must be non-negative, got {r!r}")
        origin = self.cell_for_point(point)
        result: List[Cell] = []
        for di in range(-r, r + 1):
            for dj in range(-r, r + 1):
                result.append(self.canonical_cell(origin.i + di, origin.j + dj))
        return result

    def known_cell_count(self) -> int:
        return len(self._known_cells)
