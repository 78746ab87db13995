import unittest

from game import Board, Cell, InvalidConfiguration, LatLng


class TestBoard(unittest.TestCase):
    def setUp(self):
        self.board = Board(tile_width=1e-4, visibility_radius=2)

    def test_given_same_point_when_resolving_cell_then_identical_object_returned(self):
        p = LatLng(36.98949379578401, -122.06277128548504)
        c1 = self.board.cell_for_point(p)
        c2 = self.board.cell_for_point(LatLng(p.lat, p.lng))
        self.assertIs(c1, c2)
        self.assertIs(c1, self.board.canonical_cell(c1.i, c1.j))
        self.assertIs(c1, self.board.cell_for_key(c1.key))

    def test_given_points_in_same_tile_when_resolving_then_same_cell(self):
        a = self.board.cell_for_point(LatLng(5.1e-4, 7.1e-4))
        b = self.board.cell_for_point(LatLng(5.9e-4, 7.9e-4))
        self.assertIs(a, b)
        self.assertEqual((a.i, a.j), (5, 7))

    def test_given_negative_coordinates_when_resolving_then_floor_not_truncate(self):
        c = self.board.cell_for_point(LatLng(-0.5e-4, -1.5e-4))
        self.assertEqual((c.i, c.j), (-1, -2))
        self.assertEqual(c.key, "-1,-2")

    def test_given_cell_when_computing_bounds_then_tile_rectangle(self):
        bounds = self.board.cell_bounds(self.board.canonical_cell(3, -2))
        self.assertAlmostEqual(bounds.south_west.lat, 3e-4)
        self.assertAlmostEqual(bounds.south_west.lng, -2e-4)
        self.assertAlmostEqual(bounds.north_east.lat, 4e-4)
        self.assertAlmostEqual(bounds.north_east.lng, -1e-4)
        # recomputed, equal by value
        self.assertEqual(bounds, self.board.cell_bounds(self.board.canonical_cell(3, -2)))

    def test_given_point_when_listing_nearby_cells_then_square_window_row_major(self):
        p = LatLng(5.5e-4, 5.5e-4)
        for r in range(0, 4):
            cells = self.board.cells_near_point(p, r)
            self.assertEqual(len(cells), (2 * r + 1) ** 2)
            self.assertIn(self.board.cell_for_point(p), cells)
            self.assertEqual(len(set(cells)), len(cells))
        cells = self.board.cells_near_point(p)
        self.assertEqual(len(cells), 25)
        self.assertEqual(cells[0], Cell(3, 3))
        self.assertEqual(cells[1], Cell(3, 4))
        self.assertEqual(cells[5], Cell(4, 3))
        self.assertEqual(cells[-1], Cell(7, 7))
        self.assertIs(cells[12], self.board.cell_for_point(p))

    def test_given_repeated_window_queries_when_overlapping_then_cells_shared(self):
        a = self.board.cells_near_point(LatLng(5.5e-4, 5.5e-4), 1)
        b = self.board.cells_near_point(LatLng(6.5e-4, 5.5e-4), 1)
        shared = [c for c in a if c in b]
        self.assertEqual(len(shared), 6)
        for c in shared:
            self.assertIs(c, b[b.index(c)])
        self.assertEqual(self.board.known_cell_count(), 12)

    def test_given_bad_tile_width_or_radius_when_constructing_then_invalid_configuration(self):
        for width in (0, -1e-4, float("nan"), float("inf")):
            with self.assertRaises(InvalidConfiguration):
                Board(tile_width=width, visibility_radius=1)
        with self.assertRaises(InvalidConfiguration):
            Board(tile_width=1e-4, visibility_radius=-1)
        with self.assertRaises(InvalidConfiguration):
            Board(tile_width=1e-4, visibility_radius=1.5)
        with self.assertRaises(InvalidConfiguration):
            self.board.cells_near_point(LatLng(0, 0), -1)

    def test_given_malformed_key_when_parsing_then_value_error(self):
        for key in ("", "1", "1,2,3", "a,b"):
            with self.assertRaises(ValueError):
                self.board.cell_for_key(key)
        self.assertEqual(self.board.cell_for_key(" 4, -5 ").key, "4,-5")


if __name__ == "__main__":
    unittest.main(verbosity=2)
