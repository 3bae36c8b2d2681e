"""
Structured wind grid with lon/lat lookups.

The grid follows the Earth/GFS convention:
  column i increases east from xmin
  row j increases south from ymax

Samples are treated as cell values whose coordinate is the cell center
(see index_to_coordinate). Lookups return a Vector or None, never a partial
interpolation.
"""
import logging
import math
from typing import Callable, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from .vector import Vector

logger = logging.getLogger(__name__)

# (pixel_x, pixel_y) -> (lon, lat) or None when nothing is under the pixel
Unproject = Callable[[float, float], Optional[Tuple[float, float]]]


def clamp(x, a, b):
    return a if x < a else b if x > b else x


class Field:
    def __init__(
        self,
        xmin: float,
        xmax: float,
        ymin: float,
        ymax: float,
        cols: int,
        rows: int,
        us: Sequence[Optional[float]],
        vs: Sequence[Optional[float]],
        delta_x: float,
        delta_y: float,
        wrapped_x: Optional[bool] = None,
    ):
        self.xmin = float(xmin)
        self.xmax = float(xmax)
        self.ymin = float(ymin)
        self.ymax = float(ymax)
        self.cols = int(cols)
        self.rows = int(rows)
        self.delta_x = float(delta_x)
        self.delta_y = float(delta_y)

        if self.cols < 1 or self.rows < 1:
            raise ValueError(f"cols and rows must be >= 1, got cols={cols}, rows={rows}")
        if self.delta_x == 0 or self.delta_y == 0:
            raise ValueError(f"delta_x and delta_y must be non-zero, got {delta_x}, {delta_y}")

        if self.delta_y < 0 and self.ymin < self.ymax:
            # rows already run top-to-bottom, keep the bounds as given
            logger.warning("Grid data is flipped on Y (delta_y=%s)", self.delta_y)
        else:
            self.ymin, self.ymax = min(self.ymin, self.ymax), max(self.ymin, self.ymax)

        cols_from_bounds = math.ceil((self.xmax - self.xmin) / self.delta_x)
        rows_from_bounds = math.ceil((self.ymax - self.ymin) / self.delta_y)
        if cols_from_bounds != self.cols or rows_from_bounds != self.rows:
            logger.warning(
                "Grid size mismatch: declared %dx%d, bounds/deltas give %dx%d; using declared",
                self.cols, self.rows, cols_from_bounds, rows_from_bounds,
            )

        # floor(ni * dlon) >= 360 means the grid spans the whole globe
        self.is_continuous = math.floor(self.cols * self.delta_x) >= 360
        # [0, 360] longitudes are mapped back to [-180, 180]
        self.wrapped_x = bool(wrapped_x) if wrapped_x is not None else self.xmax > 180

        self.grid: List[List[Optional[Vector]]] = self._build_grid(us, vs)
        self.range: Tuple[float, float] = self._calculate_range()

    @classmethod
    def from_dict(cls, options: Mapping) -> "Field":
        """
        Build from the decoded-source mapping:
        {xmin, xmax, ymin, ymax, cols, rows, deltaX, deltaY, us, vs[, wrappedX]}
        """
        try:
            return cls(
                xmin=options["xmin"],
                xmax=options["xmax"],
                ymin=options["ymin"],
                ymax=options["ymax"],
                cols=options["cols"],
                rows=options["rows"],
                us=options["us"],
                vs=options["vs"],
                delta_x=options["deltaX"],
                delta_y=options["deltaY"],
                wrapped_x=options.get("wrappedX"),
            )
        except KeyError as e:
            raise ValueError(f"Missing field option {e.args[0]!r}") from e

    def _build_grid(self, us, vs) -> List[List[Optional[Vector]]]:
        # None becomes NaN here, so one finite check covers null/NaN/inf
        u = np.asarray(us, dtype=float).ravel()
        v = np.asarray(vs, dtype=float).ravel()

        n = self.cols * self.rows
        if u.size != n or v.size != n:
            raise ValueError(f"Grid size mismatch: got {u.size} us and {v.size} vs, expected {n}")

        valid = np.isfinite(u) & np.isfinite(v)
        n_empty = int(n - np.count_nonzero(valid))
        if n_empty:
            logger.debug("%d of %d grid points have no value", n_empty, n)

        u = u.reshape(self.rows, self.cols)
        v = v.reshape(self.rows, self.cols)
        valid = valid.reshape(self.rows, self.cols)

        grid = []
        for j in range(self.rows):
            row = [
                Vector(float(u[j, i]), float(v[j, i])) if valid[j, i] else None
                for i in range(self.cols)
            ]
            if self.is_continuous:
                # duplicate column 0 so the seam interpolates without a modulo
                row.append(row[0])
            grid.append(row)
        return grid

    def _calculate_range(self) -> Tuple[float, float]:
        lo = math.inf
        hi = -math.inf
        found = False
        for row in self.grid:
            for cell in row:
                if cell is None:
                    continue
                found = True
                if cell.magnitude < lo:
                    lo = cell.magnitude
                if cell.magnitude > hi:
                    hi = cell.magnitude
        if not found:
            raise ValueError("Field has no valid vectors; cannot compute magnitude range")
        return lo, hi

    def release(self):
        self.grid = []

    def extent(self) -> Tuple[float, float, float, float]:
        return self.xmin, self.ymin, self.xmax, self.ymax

    def wrapped_longitudes(self) -> Tuple[float, float]:
        xmin, xmax = self.xmin, self.xmax
        if self.wrapped_x:
            if self.is_continuous:
                xmin, xmax = -180.0, 180.0
            else:
                xmin, xmax = self.xmin - 360.0, self.xmax - 360.0
        return xmin, xmax

    def contains(self, lon: float, lat: float) -> bool:
        xmin, xmax = self.wrapped_longitudes()
        lon_in = xmin <= lon <= xmax
        if self.delta_y >= 0:
            lat_in = self.ymin <= lat <= self.ymax
        else:
            lat_in = self.ymax <= lat <= self.ymin
        return lon_in and lat_in

    def decimal_indexes_for(self, lon: float, lat: float) -> Tuple[float, float]:
        # % is a floored modulo on floats, so negative offsets wrap into [0, 360)
        i = ((lon - self.xmin) % 360.0) / self.delta_x
        j = (self.ymax - lat) / self.delta_y
        return i, j

    def value_at_indexes(self, i: int, j: int) -> Optional[Vector]:
        if 0 <= j < len(self.grid):
            row = self.grid[j]
            if 0 <= i < len(row):
                return row[i]
        return None

    def nearest_value_at(self, lon: float, lat: float) -> Optional[Vector]:
        if not self.contains(lon, lat):
            return None
        i, j = self.decimal_indexes_for(lon, lat)
        ii = clamp(math.floor(i), 0, self.cols - 1)
        jj = clamp(math.floor(j), 0, self.rows - 1)
        return self.value_at_indexes(ii, jj)

    value_at = nearest_value_at

    def has_value_at(self, lon: float, lat: float) -> bool:
        return self.nearest_value_at(lon, lat) is not None

    def interpolated_value_at(self, lon: float, lat: float) -> Optional[Vector]:
        if not self.contains(lon, lat):
            return None
        i, j = self.decimal_indexes_for(lon, lat)
        # shift to cell-center space: sample (i, j) sits at decimal index (i + .5, j + .5)
        return self.interpolate_point(i - 0.5, j - 0.5)

    def interpolate_point(self, x: float, y: float) -> Optional[Vector]:
        """
        Bilinear blend of the four samples enclosing cell-center position (x, y).

        For x = 1.4, y = 8.3 the enclosing samples are (1, 8), (2, 8), (1, 9)
        and (2, 9). On continuous grids the column after the last one is
        column 0; otherwise columns clamp to the edge. Rows always clamp.
        Returns None if any of the four samples is empty.
        """
        fi, ci, fj, cj = self.four_surrounding_indexes(x, y)

        row = self.grid[fj] if 0 <= fj < len(self.grid) else None
        if not row:
            return None
        g00 = row[fi]
        g10 = row[ci]
        if g00 is None or g10 is None:
            return None

        row = self.grid[cj] if 0 <= cj < len(self.grid) else None
        if not row:
            return None
        g01 = row[fi]
        g11 = row[ci]
        if g01 is None or g11 is None:
            return None

        return self.bilinear_interpolate_vector(
            x - math.floor(x), y - math.floor(y), g00, g10, g01, g11
        )

    def four_surrounding_indexes(self, x: float, y: float) -> Tuple[int, int, int, int]:
        fi = math.floor(x)
        ci = fi + 1
        if self.is_continuous:
            if fi < 0:
                fi = self.cols - 1
            if ci >= self.cols:
                ci = 0
        fi = clamp(fi, 0, self.cols - 1)
        ci = clamp(ci, 0, self.cols - 1)

        fy = math.floor(y)
        fj = clamp(fy, 0, self.rows - 1)
        cj = clamp(fy + 1, 0, self.rows - 1)
        return fi, ci, fj, cj

    @staticmethod
    def bilinear_interpolate_vector(
        x: float, y: float, g00: Vector, g10: Vector, g01: Vector, g11: Vector
    ) -> Vector:
        rx = 1 - x
        ry = 1 - y
        a = rx * ry
        b = x * ry
        c = rx * y
        d = x * y
        u = g00.u * a + g10.u * b + g01.u * c + g11.u * d
        v = g00.v * a + g10.v * b + g01.v * c + g11.v * d
        # magnitude comes from the blended components, not blended magnitudes
        return Vector(u, v)

    def longitude_at_x(self, i: float) -> float:
        lon = self.xmin + self.delta_x / 2.0 + i * self.delta_x
        if self.wrapped_x and lon > 180:
            lon -= 360.0
        return lon

    def latitude_at_y(self, j: float) -> float:
        return self.ymax - self.delta_y / 2.0 - j * self.delta_y

    def index_to_coordinate(self, i: float, j: float) -> Tuple[float, float]:
        """Lon/lat of the center of cell (i, j)."""
        return self.longitude_at_x(i), self.latitude_at_y(j)

    def seed_random_position(
        self,
        width: Optional[int] = None,
        height: Optional[int] = None,
        unproject: Optional[Unproject] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> Tuple[float, float]:
        """
        Random starting lon/lat for a particle.

        Integer indexes are drawn in [0, width) x [0, height) (grid size by
        default) and handed to unproject, which maps the seeding surface to
        lon/lat. When unproject is missing or returns None the indexes are
        read as grid cells instead.
        """
        if rng is None:
            rng = np.random.default_rng()
        i = int(rng.random() * (width or self.cols))
        j = int(rng.random() * (height or self.rows))

        coords = unproject(i, j) if unproject is not None else None
        if coords is None:
            return self.index_to_coordinate(i, j)
        return float(coords[0]), float(coords[1])
