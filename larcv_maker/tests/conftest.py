import numpy as np
import pytest

from larcv_maker.geom.geom_service import GeometryService
from larcv_maker.signal_map import SignalMap

N_SAMPLES = 4492


@pytest.fixture
def geom():
    return GeometryService()


def make_wires(hits, n_samples=N_SAMPLES):
    """
    hits: dict channel -> list of (first_tick, last_tick, value), ticks inclusive.
    Returns (channels, signals) ready for SignalMap.from_wires.
    """
    channels = []
    signals = []
    for channel, blocks in hits.items():
        samples = np.zeros(n_samples, dtype=np.float32)
        for first_tick, last_tick, value in blocks:
            samples[first_tick:last_tick + 1] = value
        channels.append(channel)
        signals.append(samples)
    return np.asarray(channels, dtype=np.int32), signals


def block(first_channel, last_channel, first_tick, last_tick, value=50.0):
    return {ch: [(first_tick, last_tick, value)] for ch in range(first_channel, last_channel + 1)}


@pytest.fixture
def signal_map_for(geom):
    def _build(hits, n_samples=N_SAMPLES):
        channels, signals = make_wires(hits, n_samples)
        return SignalMap.from_wires(channels, signals, geom)
    return _build
