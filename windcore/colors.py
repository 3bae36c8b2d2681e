import math
from typing import Sequence, Tuple

from .config import ColorScale


def index_for(magnitude: float, vmin: float, vmax: float, scale: Sequence) -> int:
    """
    Position of magnitude within [vmin, vmax] on a discrete color scale,
    clamped to [0, len(scale) - 1]. A degenerate range maps to 0.
    """
    last = len(scale) - 1
    if vmax == vmin or last <= 0:
        return 0
    # round half up
    idx = math.floor((magnitude - vmin) / (vmax - vmin) * last + 0.5)
    return max(0, min(last, int(idx)))


class ColorMapper:
    """Resolves a stroke color from a magnitude and the field's magnitude range."""

    def __init__(self, color_scale: ColorScale, value_range: Tuple[float, float]):
        self.color_scale = color_scale
        self.vmin, self.vmax = value_range

    def color_for(self, magnitude: float) -> str:
        if isinstance(self.color_scale, str):
            return self.color_scale
        return self.color_scale[index_for(magnitude, self.vmin, self.vmax, self.color_scale)]
