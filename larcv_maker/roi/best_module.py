"""
Best-module selection
"""

from larcv_maker.errors import NoGoodModule


def module_adc_sum(module, signal_map, geom, max_tick):
    """
    Total amplitude of every channel of every plane in a module, ticks [0, max_tick).
    """
    total = 0.0
    for first_channel, last_channel in geom.module_channel_ranges(module):
        for channel in range(first_channel, last_channel + 1):
            samples = signal_map.get(channel)
            if samples is not None:
                total += float(samples[:max_tick].sum(dtype="float64"))
    return total


def find_best_module(modules, signal_map, geom, max_tick):
    """
    Pick the module carrying the most charge.

    Args:
        modules (list[int]): candidate modules, in iteration order
        signal_map (SignalMap)
        geom (GeometryService)
        max_tick (int): exclusive tick bound of the sum

    Returns:
        int: selected module. Ties keep the first candidate seen.
    """
    best_module = None
    best_adc = None

    for module in modules:
        adc = module_adc_sum(module, signal_map, geom, max_tick)
        if best_module is None or adc > best_adc:
            best_module = module
            best_adc = adc

    if best_module is None:
        raise NoGoodModule("No candidate module in event")
    return best_module
