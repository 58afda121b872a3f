import pytest

from larcv_maker.errors import NoGoodModule
from larcv_maker.roi.best_module import find_best_module, module_adc_sum

from conftest import block


def test_single_candidate_with_zero_sum(geom, signal_map_for):
    signal_map = signal_map_for(block(2560 * 3, 2560 * 3 + 5, 0, 10, value=0.0))

    assert find_best_module([3], signal_map, geom, max_tick=4492) == 3


def test_largest_sum_wins(geom, signal_map_for):
    hits = block(100, 110, 0, 10, value=5.0)
    hits.update(block(2560 + 100, 2560 + 110, 0, 10, value=7.0))
    signal_map = signal_map_for(hits)

    assert signal_map.modules == [0, 1]
    assert find_best_module(signal_map.modules, signal_map, geom, max_tick=4492) == 1


def test_tie_keeps_first_candidate(geom, signal_map_for):
    hits = block(2560 + 100, 2560 + 110, 0, 10, value=5.0)
    hits.update(block(100, 110, 0, 10, value=5.0))
    signal_map = signal_map_for(hits)

    assert find_best_module([1, 0], signal_map, geom, max_tick=4492) == 1
    assert find_best_module([0, 1], signal_map, geom, max_tick=4492) == 0


def test_sum_covers_all_planes(geom, signal_map_for):
    hits = block(0, 0, 0, 9, value=1.0)
    hits.update(block(800, 800, 0, 9, value=1.0))
    hits.update(block(2559, 2559, 0, 9, value=1.0))
    signal_map = signal_map_for(hits)

    assert module_adc_sum(0, signal_map, geom, max_tick=4492) == pytest.approx(30.0)


def test_ticks_past_max_tick_are_ignored(geom, signal_map_for):
    hits = block(100, 110, 3000, 3100, value=100.0)
    hits.update(block(2560 + 100, 2560 + 110, 0, 10, value=1.0))
    signal_map = signal_map_for(hits)

    assert find_best_module([0, 1], signal_map, geom, max_tick=4492) == 0
    assert find_best_module([0, 1], signal_map, geom, max_tick=3000) == 1


def test_no_candidates_raises(geom, signal_map_for):
    signal_map = signal_map_for({})

    with pytest.raises(NoGoodModule):
        find_best_module([], signal_map, geom, max_tick=4492)
