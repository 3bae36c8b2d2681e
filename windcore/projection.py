from typing import Optional, Protocol, Tuple


class Projection(Protocol):
    """Host capability that maps lon/lat to the drawing surface and back."""

    def project(self, lon: float, lat: float) -> Optional[Tuple[float, float]]: ...

    def unproject(self, x: float, y: float) -> Optional[Tuple[float, float]]: ...

    def is_visible(self, lon: float, lat: float) -> bool: ...


class EquirectangularView:
    """
    Plain 2-D map host: a lon/lat box stretched linearly over a
    width x height pixel surface (y grows downwards).
    """

    def __init__(self, width: int, height: int, bounds: Tuple[float, float, float, float]):
        self.bounds = bounds  # (lon_min, lat_min, lon_max, lat_max)
        self.resize(width, height)

    def resize(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError(f"Surface size must be positive, got {width}x{height}")
        self.width = int(width)
        self.height = int(height)

    def project(self, lon: float, lat: float) -> Optional[Tuple[float, float]]:
        lon_min, lat_min, lon_max, lat_max = self.bounds
        x = (lon - lon_min) / (lon_max - lon_min) * self.width
        y = (lat_max - lat) / (lat_max - lat_min) * self.height
        return x, y

    def unproject(self, x: float, y: float) -> Optional[Tuple[float, float]]:
        if not (0 <= x <= self.width and 0 <= y <= self.height):
            return None
        lon_min, lat_min, lon_max, lat_max = self.bounds
        lon = lon_min + x / self.width * (lon_max - lon_min)
        lat = lat_max - y / self.height * (lat_max - lat_min)
        return lon, lat

    def is_visible(self, lon: float, lat: float) -> bool:
        lon_min, lat_min, lon_max, lat_max = self.bounds
        return lon_min <= lon <= lon_max and lat_min <= lat <= lat_max
