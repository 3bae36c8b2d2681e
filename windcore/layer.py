"""
Streak layer: wires a Field, the particle engine, color mapping, a host
projection and a renderer, paced by FramePacer.

Per tick:
  1. engine.simulate() stages segments in lon/lat
  2. segments whose target is hidden, or whose ends do not project, are dropped
  3. the rest become screen-space strokes handed to renderer.draw()
  4. engine.commit() moves only the particles that were drawn
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol, Tuple

import numpy as np

from .colors import ColorMapper
from .config import EngineConfig
from .field import Field
from .loaders import fetch_gfs_json, field_from_gfs, field_from_netcdf_url
from .pacer import CancelFrame, FramePacer, RequestFrame
from .particles import ParticleEngine, Segment
from .projection import Projection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Stroke:
    start: Tuple[float, float]  # screen px
    end: Tuple[float, float]
    color: str


@dataclass(frozen=True)
class StreakFrame:
    strokes: List[Stroke]
    global_alpha: float
    line_width: float


class Renderer(Protocol):
    def draw(self, frame: StreakFrame) -> None: ...


class StreakLayer:
    def __init__(
        self,
        field: Field,
        config: EngineConfig,
        projection: Projection,
        renderer: Renderer,
        width: Optional[int] = None,
        height: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.field = field
        self.config = config
        self.projection = projection
        self.renderer = renderer
        self.colors = ColorMapper(config.color_scale, field.range)
        self.engine = ParticleEngine(
            field, config, unproject=projection.unproject, width=width, height=height, rng=rng
        )
        self.pacer: Optional[FramePacer] = None
        self.last_segments: List[Segment] = []

    @classmethod
    def from_gfs_url(cls, url: str, config: EngineConfig, projection: Projection, renderer: Renderer, **kwargs):
        return cls(field_from_gfs(fetch_gfs_json(url)), config, projection, renderer, **kwargs)

    @classmethod
    def from_netcdf_url(cls, url: str, config: EngineConfig, projection: Projection, renderer: Renderer, **kwargs):
        return cls(field_from_netcdf_url(url), config, projection, renderer, **kwargs)

    @property
    def size(self) -> Tuple[Optional[int], Optional[int]]:
        return self.engine.width, self.engine.height

    def resize(self, width: int, height: int):
        """Update the seeding surface; particles and field are left alone."""
        self.engine.width = int(width)
        self.engine.height = int(height)

    def render(self) -> StreakFrame:
        segments = self.engine.simulate()

        strokes = []
        drawn = []
        project = self.projection.project
        for seg in segments:
            if not self.projection.is_visible(*seg.target):
                continue
            start = project(*seg.source)
            end = project(*seg.target)
            if start is None or end is None:
                continue
            strokes.append(Stroke(start=tuple(start), end=tuple(end), color=self.colors.color_for(seg.magnitude)))
            drawn.append(seg)

        self.engine.commit(s.index for s in drawn)
        self.last_segments = drawn

        frame = StreakFrame(strokes=strokes, global_alpha=self.config.global_alpha, line_width=self.config.line_width)
        self.renderer.draw(frame)
        return frame

    def start(self, request_frame: RequestFrame, cancel_frame: CancelFrame):
        if self.pacer is None:
            self.pacer = FramePacer(self.config.frame_interval_ms, self.render, request_frame, cancel_frame)
        if not self.engine.particles:
            self.engine.prepare()
        logger.info(
            "Starting streak layer: %d particles, %.1f ms frames",
            self.config.particle_count, self.config.frame_interval_ms,
        )
        self.pacer.start()

    def stop(self):
        if self.pacer is not None:
            self.pacer.stop()

    def release(self):
        self.stop()
        self.engine.particles = []
        self.field.release()
