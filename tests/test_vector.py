import dataclasses

import pytest

from windcore.vector import Vector


def test_magnitude_computed_at_construction():
    vec = Vector(3.0, 4.0)
    assert vec.magnitude == 5.0


def test_vector_is_immutable():
    vec = Vector(1.0, 0.0)
    with pytest.raises(dataclasses.FrozenInstanceError):
        vec.u = 2.0


def test_direction_to_compass_points():
    assert abs(Vector(0.0, 1.0).direction_to() - 0.0) < 1e-9
    assert abs(Vector(1.0, 0.0).direction_to() - 90.0) < 1e-9
    assert abs(Vector(0.0, -1.0).direction_to() - 180.0) < 1e-9
    assert abs(Vector(-1.0, 0.0).direction_to() - 270.0) < 1e-9


def test_direction_from_is_opposite():
    # westerly wind blows towards the east
    assert abs(Vector(1.0, 0.0).direction_from() - 270.0) < 1e-9
    assert abs(Vector(0.0, -1.0).direction_from() - 0.0) < 1e-9
