from .colors import ColorMapper, index_for
from .config import EngineConfig
from .field import Field
from .layer import StreakFrame, StreakLayer, Stroke
from .pacer import FramePacer, HeadlessFrameSource
from .particles import ParticleEngine, ParticleState, Segment
from .vector import Vector

__version__ = "0.1.0"
