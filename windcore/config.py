from dataclasses import dataclass, field
from typing import Mapping, Tuple, Union

ColorScale = Union[str, Tuple[str, ...]]

DEFAULT_COLOR_SCALE = (
    "rgb(36,104,180)",
    "rgb(60,157,194)",
    "rgb(128,205,193)",
    "rgb(151,218,168)",
    "rgb(198,231,181)",
    "rgb(238,247,217)",
    "rgb(255,238,159)",
    "rgb(252,217,125)",
    "rgb(255,182,100)",
    "rgb(252,150,75)",
    "rgb(250,112,52)",
    "rgb(245,64,32)",
    "rgb(237,45,28)",
    "rgb(220,24,32)",
    "rgb(180,0,35)",
)

# camelCase option name -> EngineConfig attribute
_OPTION_ALIASES = {
    "globalAlpha": "global_alpha",
    "lineWidth": "line_width",
    "colorScale": "color_scale",
    "velocityScale": "velocity_scale",
    "maxAge": "max_age",
    "particleCount": "particle_count",
    "paths": "particle_count",
    "frameIntervalMs": "frame_interval_ms",
    "frameRate": "frame_interval_ms",
}


@dataclass(frozen=True)
class EngineConfig:
    global_alpha: float = 0.9        # stroke alpha [0, 1]
    line_width: float = 3.0          # stroke width (px)
    color_scale: ColorScale = field(default=DEFAULT_COLOR_SCALE)
    velocity_scale: float = 0.025    # degrees per flow unit per tick
    max_age: int = 60                # ticks a particle lives before reseeding
    particle_count: int = 10000
    frame_interval_ms: float = 20.0  # minimum time between ticks

    def __post_init__(self):
        scale = self.color_scale
        if not isinstance(scale, str):
            scale = tuple(scale)
            if not scale:
                raise ValueError("color_scale must be a color or a non-empty sequence of colors")
            object.__setattr__(self, "color_scale", scale)

        if not 0.0 <= self.global_alpha <= 1.0:
            raise ValueError(f"global_alpha must be in [0, 1], got {self.global_alpha}")
        if self.line_width <= 0:
            raise ValueError(f"line_width must be > 0, got {self.line_width}")
        if self.velocity_scale <= 0:
            raise ValueError(f"velocity_scale must be > 0, got {self.velocity_scale}")
        if int(self.max_age) != self.max_age or self.max_age < 1:
            raise ValueError(f"max_age must be an integer >= 1, got {self.max_age}")
        if int(self.particle_count) != self.particle_count or self.particle_count < 1:
            raise ValueError(f"particle_count must be an integer >= 1, got {self.particle_count}")
        if self.frame_interval_ms < 0:
            raise ValueError(f"frame_interval_ms must be >= 0, got {self.frame_interval_ms}")

        object.__setattr__(self, "max_age", int(self.max_age))
        object.__setattr__(self, "particle_count", int(self.particle_count))

    @classmethod
    def from_options(cls, options: Mapping) -> "EngineConfig":
        """
        Build from a mapping using either attribute names or the
        camelCase option names (globalAlpha, paths, frameRate, ...).
        Unknown keys raise ValueError.
        """
        kwargs = {}
        for key, value in options.items():
            name = _OPTION_ALIASES.get(key, key)
            if name not in cls.__dataclass_fields__:
                raise ValueError(f"Unknown engine option {key!r}")
            kwargs[name] = value
        return cls(**kwargs)
