"""Tests for the MetricEvolutionEngine."""

import asyncio
import random
from datetime import timedelta

import pytest

from simfleet.evolution.engine import MetricEvolutionEngine
from simfleet.evolution.state import EvolutionState
from tests.conftest import EPOCH, FixedRandom, make_identity


@pytest.mark.asyncio
async def test_first_advance_bootstraps():
    engine = MetricEvolutionEngine(rng=FixedRandom(0.0), clock=lambda: EPOCH)
    sample = await engine.advance(make_identity())
    assert (sample.cpu_usage, sample.memory_usage, sample.disk_usage) == (10.0, 20.0, 5.0)
    assert sample.timestamp == EPOCH
    assert len(engine) == 1


@pytest.mark.asyncio
async def test_advance_continues_from_previous():
    engine = MetricEvolutionEngine(rng=FixedRandom(0.5), clock=lambda: EPOCH)
    identity = make_identity()
    first = await engine.advance(identity)
    second = await engine.advance(identity)
    # zero perturbation; at epoch 0 only memory drifts (+3)
    assert second.cpu_usage == first.cpu_usage
    assert second.memory_usage == round(first.memory_usage + 3.0, 2)
    assert second.disk_usage == first.disk_usage
    assert engine.last_sample(identity.id) == second


@pytest.mark.asyncio
async def test_explicit_now_overrides_clock():
    engine = MetricEvolutionEngine(rng=FixedRandom(0.5), clock=lambda: EPOCH)
    later = EPOCH + timedelta(days=1)
    sample = await engine.advance(make_identity(), now=later)
    assert sample.timestamp == later


@pytest.mark.asyncio
async def test_servers_evolve_independently():
    engine = MetricEvolutionEngine(rng=FixedRandom(0.25), clock=lambda: EPOCH)
    a, b = make_identity("server-001"), make_identity("server-002")
    for _ in range(3):
        await engine.advance(a)

    # b's first sample is a bootstrap, untouched by a's history.
    first_b = await engine.advance(b)
    fresh = MetricEvolutionEngine(rng=FixedRandom(0.25), clock=lambda: EPOCH)
    assert first_b.cpu_usage == (await fresh.advance(b)).cpu_usage
    assert first_b.server_id == "server-002"
    assert set(engine.snapshot()) == {"server-001", "server-002"}


@pytest.mark.asyncio
async def test_seeded_engines_are_reproducible():
    identity = make_identity()
    runs = []
    for _ in range(2):
        engine = MetricEvolutionEngine.seeded(99, clock=lambda: EPOCH)
        runs.append([await engine.advance(identity) for _ in range(10)])
    assert runs[0] == runs[1]


@pytest.mark.asyncio
async def test_concurrent_advances_do_not_lose_updates():
    rng = random.Random(5)
    engine = MetricEvolutionEngine(rng=rng, clock=lambda: EPOCH)
    servers = [make_identity(f"server-{i:03d}") for i in range(1, 51)]

    for _ in range(5):
        await asyncio.gather(*(engine.advance(s) for s in servers))

    assert len(engine) == 50
    for s in servers:
        assert engine.last_sample(s.id).server_id == s.id


@pytest.mark.asyncio
async def test_state_lock_serializes_same_server():
    engine = MetricEvolutionEngine(rng=FixedRandom(0.5), clock=lambda: EPOCH)
    identity = make_identity()
    samples = await asyncio.gather(*(engine.advance(identity) for _ in range(4)))
    # Each advance saw the one before it: memory climbs by 3 every time.
    memories = sorted(s.memory_usage for s in samples)
    assert memories == [
        memories[0],
        round(memories[0] + 3, 2),
        round(memories[0] + 6, 2),
        round(memories[0] + 9, 2),
    ]


@pytest.mark.asyncio
async def test_uses_supplied_state():
    state = EvolutionState()
    engine = MetricEvolutionEngine(rng=FixedRandom(0.5), clock=lambda: EPOCH, state=state)
    await engine.advance(make_identity())
    assert engine.state is state
    assert len(state) == 1
