"""
Shared fixtures for the step counter tests.

Synthetic signals use a six-sample step shape (rise, peak, fall, dip, valley,
recover) so peaks are six samples apart.
"""

import pytest

from stepcounter.core.models import Sample

STEP_SHAPE = [0.2, 1.0, 0.2, -0.2, -1.0, -0.2]
GRAVITY = 9.8


def make_walk(amplitude=1.0, period_ms=120, n_samples=60, rest_samples=10):
    """Magnitude samples: rest at gravity, then a repeated step shape on top of it."""
    samples = []
    for i in range(rest_samples):
        samples.append(Sample(0.0, 0.0, GRAVITY, i * period_ms))
    for i in range(n_samples):
        magnitude = GRAVITY + amplitude * STEP_SHAPE[i % len(STEP_SHAPE)]
        samples.append(Sample(0.0, 0.0, magnitude, (rest_samples + i) * period_ms))
    return samples


def make_dynamic(amplitude=1.0, period_ms=120, n_samples=60):
    """Already-conditioned values with their timestamps."""
    values = [amplitude * STEP_SHAPE[i % len(STEP_SHAPE)] for i in range(n_samples)]
    stamps = [i * period_ms for i in range(n_samples)]
    return values, stamps


@pytest.fixture
def walk_samples():
    """Factory fixture for walking sample streams."""
    return make_walk


@pytest.fixture
def dynamic_walk():
    """Factory fixture for conditioned walking sequences."""
    return make_dynamic


@pytest.fixture
def scenario_magnitudes():
    """Ten resting samples followed by one rise-fall-rise oscillation."""
    return [9.8] * 10 + [9.8, 10.3, 9.5, 9.1, 9.9, 10.4, 9.4]
