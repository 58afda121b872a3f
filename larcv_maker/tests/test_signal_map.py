import numpy as np

from larcv_maker.signal_map import SignalMap


def test_modules_in_first_seen_order(geom):
    channels = [5200, 10, 2600, 20]
    signals = [np.ones(5)] * 4

    signal_map = SignalMap.from_wires(channels, signals, geom)

    assert signal_map.modules == [2, 0, 1]
    assert len(signal_map) == 4


def test_lookup_and_missing_channel(geom):
    signal_map = SignalMap.from_wires([7], [[1.0, 2.0, 3.0]], geom)

    assert 7 in signal_map
    assert 8 not in signal_map
    assert signal_map.get(8) is None
    np.testing.assert_array_equal(signal_map.get(7), np.array([1, 2, 3], dtype=np.float32))
    assert signal_map.get(7).dtype == np.float32


def test_duplicate_channel_keeps_first(geom):
    signal_map = SignalMap.from_wires([7, 7], [[1.0], [9.0]], geom)

    assert len(signal_map) == 1
    assert signal_map.get(7)[0] == 1.0


def test_signals_may_differ_in_length(geom):
    signal_map = SignalMap.from_wires([1, 2], [np.zeros(3), np.zeros(10)], geom)

    assert sorted(signal_map) == [1, 2]
    assert {ch: s.size for ch, s in signal_map.items()} == {1: 3, 2: 10}


def test_empty_event(geom):
    signal_map = SignalMap.from_wires([], [], geom)

    assert len(signal_map) == 0
    assert signal_map.modules == []
