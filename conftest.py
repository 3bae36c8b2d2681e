import numpy as np
import pytest

from windcore.config import EngineConfig
from windcore.field import Field


@pytest.fixture
def compass_field():
    """2x2 grid of four orthogonal unit vectors over [0, 2] x [0, 2]."""
    return Field(
        xmin=0, xmax=2, ymin=0, ymax=2, cols=2, rows=2,
        delta_x=1, delta_y=1,
        us=[1, 0, 0, -1],
        vs=[0, 1, -1, 0],
    )


@pytest.fixture
def uniform_field():
    """10x10 eastward flow of magnitude 1 over [0, 10] x [0, 10]."""
    n = 10 * 10
    return Field(
        xmin=0, xmax=10, ymin=0, ymax=10, cols=10, rows=10,
        delta_x=1, delta_y=1,
        us=np.ones(n), vs=np.zeros(n),
    )


@pytest.fixture
def small_config():
    return EngineConfig(
        particle_count=3, max_age=5, velocity_scale=0.1,
        frame_interval_ms=0, color_scale=("blue", "green", "red"),
    )
