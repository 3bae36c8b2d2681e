import math
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Vector:
    u: float  # eastward component
    v: float  # northward component
    magnitude: float = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "magnitude", math.sqrt(self.u * self.u + self.v * self.v))

    def direction_to(self) -> float:
        """
        Bearing in degrees [0, 360) the flow is heading towards.
        N is 0 and E is 90.
        """
        deg = math.degrees(math.atan2(self.u, self.v))
        if deg < 0:
            deg += 360.0
        return deg

    def direction_from(self) -> float:
        """Bearing in degrees [0, 360) the flow is coming from."""
        return (self.direction_to() + 180.0) % 360.0
