"""
Particle pool advected through a Field.

A tick runs in two phases:
  simulate()  recycles, samples and advects particles and stages segments
  commit()    moves the particles whose segment was actually drawn

Particles that produced no drawn segment keep their position, so nothing
jumps between ticks without being rendered.
"""
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

import numpy as np

from .config import EngineConfig
from .field import Field, Unproject

logger = logging.getLogger(__name__)


@dataclass
class ParticleState:
    x: float                    # lon
    y: float                    # lat
    age: int
    xt: Optional[float] = None  # pending target, valid for the current tick
    yt: Optional[float] = None
    m: Optional[float] = None   # last sampled magnitude


@dataclass(frozen=True)
class Segment:
    index: int                  # pool slot of the particle
    source: Tuple[float, float]
    target: Tuple[float, float]
    magnitude: float


class ParticleEngine:
    def __init__(
        self,
        field: Field,
        config: EngineConfig,
        unproject: Optional[Unproject] = None,
        width: Optional[int] = None,
        height: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.field = field
        self.max_age = config.max_age
        self.velocity_scale = config.velocity_scale
        self.particle_count = config.particle_count
        # seeding surface, grid size when unset
        self.unproject = unproject
        self.width = width
        self.height = height
        self.rng = rng if rng is not None else np.random.default_rng()
        self.particles: List[ParticleState] = []
        self.ticks = 0

    def prepare(self):
        """(Re)build the pool with random positions and random ages in [0, max_age)."""
        self.particles = []
        for _ in range(self.particle_count):
            x, y = self.seed_position()
            age = int(self.rng.integers(0, self.max_age))
            self.particles.append(ParticleState(x=x, y=y, age=age))
        logger.debug("Prepared %d particles", len(self.particles))

    def seed_position(self) -> Tuple[float, float]:
        return self.field.seed_random_position(self.width, self.height, self.unproject, self.rng)

    def simulate(self) -> List[Segment]:
        """
        Advance every particle by one tick and return the staged segments,
        in pool order, for particles that are still alive and visible.
        """
        if not self.particles:
            self.prepare()

        max_age = self.max_age
        segments = []
        recycled = 0

        for idx, p in enumerate(self.particles):
            p.xt = p.yt = None

            if p.age > max_age:
                p.age = 0
                p.x, p.y = self.seed_position()
                recycled += 1
            else:
                self._advect(p)

            p.age += 1

            if p.xt is None:
                continue
            if p.age > max_age:
                p.xt = p.yt = None
                continue
            segments.append(Segment(idx, (p.x, p.y), (p.xt, p.yt), p.m))

        self.ticks += 1
        logger.debug("Tick %d: %d segments, %d recycled", self.ticks, len(segments), recycled)
        return segments

    def _advect(self, p: ParticleState):
        field = self.field
        vector = field.interpolated_value_at(p.x, p.y)
        if vector is None:
            # no flow here: reseed on the next tick
            p.age = self.max_age
            return

        xt = p.x + vector.u * self.velocity_scale
        yt = p.y + vector.v * self.velocity_scale

        if field.has_value_at(xt, yt):
            p.xt = xt
            p.yt = yt
            p.m = vector.magnitude
        else:
            # left coverage: keep moving, stop drawing, reseed on the next tick
            p.x = xt
            p.y = yt
            p.age = self.max_age

    def commit(self, indexes: Iterable[int]):
        """Move drawn particles onto their staged targets."""
        for idx in indexes:
            p = self.particles[idx]
            if p.xt is None:
                continue
            p.x = p.xt
            p.y = p.yt
            p.xt = p.yt = None

    def step(self) -> List[Segment]:
        """simulate() then commit every staged segment (no culling)."""
        segments = self.simulate()
        self.commit(s.index for s in segments)
        return segments
