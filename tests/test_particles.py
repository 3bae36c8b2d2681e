import numpy as np
import pytest

from windcore.config import EngineConfig
from windcore.particles import ParticleEngine, ParticleState, Segment


def _engine(field, config, *particles):
    engine = ParticleEngine(field, config, rng=np.random.default_rng(3))
    engine.particles = [ParticleState(x=x, y=y, age=age) for x, y, age in particles]
    return engine


def test_prepare_fills_pool(uniform_field, small_config):
    engine = ParticleEngine(uniform_field, small_config, rng=np.random.default_rng(0))
    engine.prepare()
    assert len(engine.particles) == small_config.particle_count
    for p in engine.particles:
        assert 0 <= p.age < small_config.max_age
        assert uniform_field.contains(p.x, p.y)
        assert p.xt is None


def test_simulate_prepares_pool_on_first_tick(uniform_field, small_config):
    engine = ParticleEngine(uniform_field, small_config, rng=np.random.default_rng(0))
    engine.simulate()
    assert len(engine.particles) == small_config.particle_count


def test_visible_particle_stages_segment_without_moving(uniform_field, small_config):
    engine = _engine(uniform_field, small_config, (5.0, 5.0, 0))
    segments = engine.simulate()

    assert len(segments) == 1
    seg = segments[0]
    assert seg.index == 0
    assert seg.source == (5.0, 5.0)
    assert abs(seg.target[0] - 5.1) < 1e-12
    assert seg.target[1] == 5.0
    assert seg.magnitude == 1.0

    p = engine.particles[0]
    assert (p.x, p.y) == (5.0, 5.0)
    assert p.age == 1
    assert p.m == 1.0


def test_commit_moves_particle_to_target(uniform_field, small_config):
    engine = _engine(uniform_field, small_config, (5.0, 5.0, 0))
    engine.simulate()
    engine.commit([0])
    p = engine.particles[0]
    assert abs(p.x - 5.1) < 1e-12
    assert p.xt is None and p.yt is None


def test_uncommitted_particle_does_not_jump(uniform_field, small_config):
    engine = _engine(uniform_field, small_config, (5.0, 5.0, 0))
    engine.simulate()
    segments = engine.simulate()
    assert segments[0].source == (5.0, 5.0)
    assert engine.particles[0].age == 2


def test_aged_out_particle_is_recycled_without_drawing(uniform_field, small_config, monkeypatch):
    engine = _engine(uniform_field, small_config, (5.0, 5.0, small_config.max_age + 1))
    monkeypatch.setattr(engine, "seed_position", lambda: (2.5, 7.5))

    segments = engine.simulate()

    p = engine.particles[0]
    assert segments == []
    assert (p.x, p.y) == (2.5, 7.5)
    assert p.age == 1
    assert p.xt is None

    # draws again from the next tick on
    assert len(engine.simulate()) == 1


def test_particle_at_max_age_stages_nothing(uniform_field, small_config):
    engine = _engine(uniform_field, small_config, (5.0, 5.0, small_config.max_age))
    assert engine.simulate() == []
    p = engine.particles[0]
    assert p.age == small_config.max_age + 1
    assert p.xt is None
    assert (p.x, p.y) == (5.0, 5.0)


def test_particle_leaving_coverage_moves_hidden_then_recycles(uniform_field, small_config, monkeypatch):
    engine = _engine(uniform_field, small_config, (9.95, 5.0, 0))
    monkeypatch.setattr(engine, "seed_position", lambda: (1.5, 1.5))

    assert engine.simulate() == []
    p = engine.particles[0]
    assert abs(p.x - 10.05) < 1e-12
    assert p.age == small_config.max_age + 1

    assert engine.simulate() == []
    assert (p.x, p.y) == (1.5, 1.5)
    assert p.age == 1


def test_particle_without_flow_is_scheduled_for_recycle(uniform_field, small_config, monkeypatch):
    engine = _engine(uniform_field, small_config, (-5.0, 5.0, 2))
    monkeypatch.setattr(engine, "seed_position", lambda: (3.5, 3.5))

    assert engine.simulate() == []
    p = engine.particles[0]
    assert (p.x, p.y) == (-5.0, 5.0)
    assert p.age == small_config.max_age + 1

    engine.simulate()
    assert (p.x, p.y) == (3.5, 3.5)


def test_segments_follow_pool_order(uniform_field, small_config):
    engine = _engine(
        uniform_field, small_config,
        (1.0, 1.0, 0), (-5.0, 5.0, 0), (3.0, 3.0, 0),
    )
    segments = engine.simulate()
    assert [s.index for s in segments] == [0, 2]
    assert all(isinstance(s, Segment) for s in segments)


def test_step_simulates_and_commits(uniform_field):
    config = EngineConfig(particle_count=1, max_age=100, velocity_scale=0.5)
    engine = _engine(uniform_field, config, (2.0, 2.0, 0))
    for _ in range(4):
        engine.step()
    p = engine.particles[0]
    assert abs(p.x - 4.0) < 1e-12
    assert p.y == 2.0
    assert p.age == 4


@pytest.mark.parametrize("max_age", [1, 3, 10])
def test_every_particle_eventually_recycles(uniform_field, max_age):
    config = EngineConfig(particle_count=20, max_age=max_age, velocity_scale=0.01)
    engine = ParticleEngine(uniform_field, config, rng=np.random.default_rng(max_age))
    engine.prepare()
    for _ in range(max_age + 2):
        engine.step()
        assert all(p.age <= max_age + 1 for p in engine.particles)
