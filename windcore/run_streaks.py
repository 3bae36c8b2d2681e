# run_streaks.py
#
# Headless streak run: builds a field, animates it for a fixed number of
# frames and writes the last drawn segments as GeoJSON.
#
#   WIND_JSON  optional GFS JSON file (synthetic vortex field when unset)
#   FRAMES     number of host frames to run (default 300)
#   OUT_DIR    output folder (default streaks_output)

import json
import logging
import os
from pathlib import Path

import numpy as np

from .config import EngineConfig
from .export import segments_to_geojson
from .field import Field
from .layer import StreakLayer
from .loaders import field_from_gfs, load_gfs_json
from .logging_config import setup_logging
from .pacer import HeadlessFrameSource
from .projection import EquirectangularView

# ================= CONFIG =================
DEFAULT_FRAMES = 300
DEFAULT_OUT_DIR = "streaks_output"
SURFACE_W, SURFACE_H = 720, 360
# ========================================


def synthetic_vortex_field(cols: int = 72, rows: int = 36) -> Field:
    """Single cyclone centered on (0, 0) over the whole globe at 5 degree spacing."""
    dx = 360.0 / cols
    dy = 180.0 / rows
    lon = -180.0 + dx / 2 + dx * np.arange(cols)
    lat = 90.0 - dy / 2 - dy * np.arange(rows)
    lon2d, lat2d = np.meshgrid(lon, lat)

    r = np.hypot(lon2d, lat2d) + 1e-6
    strength = 20.0 * np.exp(-r / 40.0)
    us = (-lat2d / r * strength).ravel()
    vs = (lon2d / r * strength).ravel()

    return Field(
        xmin=-180.0, xmax=180.0, ymin=-90.0, ymax=90.0,
        cols=cols, rows=rows, us=us, vs=vs, delta_x=dx, delta_y=dy,
    )


class CountingRenderer:
    def __init__(self):
        self.frames = 0
        self.strokes = 0

    def draw(self, frame):
        self.frames += 1
        self.strokes += len(frame.strokes)


def main():
    setup_logging(logging.INFO)

    wind_json = os.environ.get("WIND_JSON")
    frames = int(os.environ.get("FRAMES", DEFAULT_FRAMES))
    out_dir = Path(os.environ.get("OUT_DIR", DEFAULT_OUT_DIR))

    if wind_json:
        print("Loading wind field:", wind_json)
        field = field_from_gfs(load_gfs_json(wind_json))
    else:
        print("Using synthetic vortex field")
        field = synthetic_vortex_field()

    xmin, xmax = field.wrapped_longitudes()
    ymin, ymax = sorted((field.ymin, field.ymax))
    view = EquirectangularView(SURFACE_W, SURFACE_H, (xmin, ymin, xmax, ymax))

    config = EngineConfig(particle_count=2000, frame_interval_ms=0)
    renderer = CountingRenderer()
    layer = StreakLayer(
        field, config, view, renderer,
        width=SURFACE_W, height=SURFACE_H, rng=np.random.default_rng(12345),
    )

    source = HeadlessFrameSource(frame_ms=0)
    layer.start(source.request_frame, source.cancel_frame)
    source.run(max_frames=frames)
    layer.stop()

    print(f"frames drawn: {renderer.frames}  strokes: {renderer.strokes}")
    print(f"magnitude range: {field.range[0]:.3f} .. {field.range[1]:.3f}")

    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / "streaks_last_frame.geojson"
    with open(out_path, "w") as f:
        json.dump(segments_to_geojson(layer.last_segments), f)
    print("Saved:", out_path)

    return out_path


if __name__ == "__main__":
    main()
