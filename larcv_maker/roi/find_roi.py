"""
ROI finding: bounding box of above-threshold samples in one plane, grown by
margins and snapped to the constraints of the downsampler.
"""

from dataclasses import dataclass

import numpy as np

from larcv_maker.errors import NoROI, UnsatisfiableConstraint


@dataclass(frozen=True)
class ROI:
    module: int
    plane: int
    first_wire: int
    last_wire: int
    first_tick: int
    last_tick: int
    downsample: int

    @property
    def n_wires(self):
        return self.last_wire - self.first_wire + 1

    @property
    def n_ticks(self):
        return self.last_tick - self.first_tick + 1

    def bounds(self):
        return self.first_wire, self.last_wire, self.first_tick, self.last_tick


def scan_plane(first_channel, last_channel, signal_map, adc_cut):
    """
    Tightest (first_wire, last_wire, first_tick, last_tick) enclosing every
    sample above adc_cut, or None if there is none.
    """
    first_wire = last_wire = first_tick = last_tick = None

    for channel in range(first_channel, last_channel + 1):
        samples = signal_map.get(channel)
        if samples is None:
            continue
        ticks = np.flatnonzero(samples > adc_cut)
        if ticks.size == 0:
            continue

        if first_wire is None:
            first_wire = channel
        last_wire = channel
        if first_tick is None or ticks[0] < first_tick:
            first_tick = int(ticks[0])
        if last_tick is None or ticks[-1] > last_tick:
            last_tick = int(ticks[-1])

    if first_wire is None:
        return None
    return first_wire, last_wire, first_tick, last_tick


def choose_downsample(n_wires, n_ticks, geom):
    if n_wires > geom.image_size or n_ticks // geom.tick_rebin > geom.image_size:
        return 2
    return 1


def _ticks_to_add(n_ticks, order):
    remainder = n_ticks % order
    return order - remainder if remainder else 0


def align_ticks(first_tick, last_tick, downsample, geom):
    """
    Grow [first_tick, last_tick] by the tick margin and pad it to a multiple
    of the rebinning order, staying inside the tier's tick window.
    """
    window_first, window_last = geom.tick_window(downsample)
    order = geom.tick_order(downsample)
    margin = geom.tick_margin * downsample

    n_ticks = last_tick - first_tick + 1
    ticks_to_add = _ticks_to_add(n_ticks, order)

    if n_ticks + 2 * margin + ticks_to_add > window_last - window_first:
        return window_first, window_last

    # start of the ROI
    first_tick = max(first_tick - (margin + ticks_to_add), window_first)

    # end of the ROI, padded for whatever the start could not absorb
    n_ticks = last_tick - first_tick + 1
    ticks_to_add = _ticks_to_add(n_ticks, order)
    last_tick = min(last_tick + margin + ticks_to_add, window_last)

    # residual from clamping the end
    n_ticks = last_tick - first_tick + 1
    ticks_to_add = _ticks_to_add(n_ticks, order)
    if ticks_to_add:
        first_tick = max(first_tick - ticks_to_add, window_first)

    return first_tick, last_tick


def find_roi(module, plane, signal_map, geom, adc_cut):
    """
    Validated ROI and downsample factor for one plane of one module.

    Args:
        module (int): module index
        plane (int): plane index inside the module
        signal_map (SignalMap)
        geom (GeometryService)
        adc_cut (float): samples strictly above this count as signal

    Returns:
        ROI

    Raises:
        NoROI: nothing above threshold in the plane
        UnsatisfiableConstraint: parity or tick alignment cannot be met
    """
    first_channel, last_channel = geom.plane_channel_range(module, plane)

    box = scan_plane(first_channel, last_channel, signal_map, adc_cut)
    if box is None:
        raise NoROI(module, plane)
    first_wire, last_wire, first_tick, last_tick = box

    downsample = choose_downsample(last_wire - first_wire + 1, last_tick - first_tick + 1, geom)

    # wire margin, clamped to the plane
    margin = geom.wire_margin * downsample
    first_wire = max(first_wire - margin, first_channel)
    last_wire = min(last_wire + margin, last_channel)

    # the wire count must divide by the downsample factor
    if (last_wire - first_wire + 1) % downsample == 1:
        if last_wire < last_channel:
            last_wire += 1
        elif first_wire > first_channel:
            first_wire -= 1
        else:
            raise UnsatisfiableConstraint(
                f"Odd number of wires ({last_wire - first_wire + 1}) spanning the whole of "
                f"module {module}, plane {plane}")

    first_tick, last_tick = align_ticks(first_tick, last_tick, downsample, geom)

    window_first, window_last = geom.tick_window(downsample)
    n_ticks = last_tick - first_tick + 1
    order = geom.tick_order(downsample)
    if not window_first <= first_tick <= last_tick <= window_last:
        raise UnsatisfiableConstraint(
            f"Ticks {first_tick}-{last_tick} fall outside the window "
            f"{window_first}-{window_last} in module {module}, plane {plane}")
    if n_ticks % order != 0:
        raise UnsatisfiableConstraint(
            f"Number of ticks {n_ticks} is not divisible by order {order} "
            f"in module {module}, plane {plane}")

    return ROI(module, plane, first_wire, last_wire, first_tick, last_tick, downsample)
