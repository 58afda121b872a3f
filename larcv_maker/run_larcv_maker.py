"""
Run the full ROI image pipeline over a file of wire signals.
"""

import argparse
import logging
import time

import structlog

from larcv_maker.errors import EmptyInput, EventSkipped
from larcv_maker.geom.geom_service import GeometryService
from larcv_maker.image_constants import (
    DEFAULT_ADC_CUT, DEFAULT_MAX_TICK, DEFAULT_WIRE_LABEL, DEFAULT_EVENT_TYPE
)
from larcv_maker.logging_config import configure_logging
from larcv_maker.roi.best_module import find_best_module
from larcv_maker.roi.build_image import build_event_images
from larcv_maker.roi.find_roi import find_roi
from larcv_maker.signal_map import SignalMap
from larcv_maker.utils.io_helpers import ImageWriter, output_file_name, read_wire_events

logger = structlog.get_logger(__name__)


def make_event_images(channels, signals, geom, adc_cut=DEFAULT_ADC_CUT, max_tick=DEFAULT_MAX_TICK):
    """
    Module, per-plane ROIs and image set for one event.

    Every plane of the chosen module must yield a valid ROI before any image
    is built; otherwise the EventSkipped subclass propagates to the caller.

    Returns:
        (int, list[ROI], np.ndarray of shape (n_planes, image_size, image_size))
    """
    signal_map = SignalMap.from_wires(channels, signals, geom)
    if len(signal_map) == 0:
        raise EmptyInput("No activity inside the TPC")

    module = find_best_module(signal_map.modules, signal_map, geom, max_tick)

    rois = [find_roi(module, plane, signal_map, geom, adc_cut) for plane in range(geom.n_planes)]

    images = build_event_images(rois, signal_map, geom)
    return module, rois, images


def run_larcv_maker(input_file, output_file=None, **kwargs):
    """
    Read wire signals, build images for every usable event, and write them out.

    Keyword options: wire_label, adc_cut, max_tick, event_type, tsv_path, geom, max_events.
    Returns a dict of event counts.
    """
    wire_label = kwargs.get("wire_label", DEFAULT_WIRE_LABEL)
    adc_cut = kwargs.get("adc_cut", DEFAULT_ADC_CUT)
    max_tick = kwargs.get("max_tick", DEFAULT_MAX_TICK)
    event_type = kwargs.get("event_type", DEFAULT_EVENT_TYPE)
    max_events = kwargs.get("max_events", None)
    if max_tick <= 0:
        raise ValueError(f"max_tick must be positive, got {max_tick}")

    geom = kwargs.get("geom", None)
    if geom is None:
        geom = GeometryService(tsv_path=kwargs.get("tsv_path", None))

    output_file = output_file_name(output_file)
    counts = {"read": 0, "written": 0, "skipped": 0}

    total_start = time.perf_counter()
    process_time = 0.0
    with ImageWriter(output_file, geom.n_planes, geom.image_size) as writer:
        for run, subrun, event, channels, signals in read_wire_events(input_file, wire_label, max_events):
            counts["read"] += 1
            log = logger.bind(run=run, subrun=subrun, event_id=event)

            process_start = time.perf_counter()
            try:
                module, rois, images = make_event_images(channels, signals, geom, adc_cut, max_tick)
            except EventSkipped as err:
                counts["skipped"] += 1
                log.warning("Skipping event", reason=err.reason, detail=str(err))
                continue
            finally:
                process_time += time.perf_counter() - process_start

            writer.save_entry(run, subrun, event, event_type, module, rois, images)
            counts["written"] += 1
            log.debug("Saved event", module=module, downsample=[roi.downsample for roi in rois])

    total_time = time.perf_counter() - total_start
    logger.info(
        "Timing summary",
        process_time=f"{process_time:.2f} s",
        write_and_read_time=f"{total_time - process_time:.2f} s",
        total_time=f"{total_time:.2f} s",
        **counts,
    )
    return counts


def main(argv=None):
    parser = argparse.ArgumentParser(description="Make fixed-size ROI images from wire signals.")
    parser.add_argument("input_file", help="ROOT file with the wire signal tree")
    parser.add_argument(
        "--output_file", "-o", type=str, default=None,
        help="Output ROOT file (default: larcv_$PROCESS.root or larcv.root)"
    )
    parser.add_argument(
        "--wire_label", type=str, default=DEFAULT_WIRE_LABEL,
        help=f"Name of the wire signal tree (default: {DEFAULT_WIRE_LABEL})"
    )
    parser.add_argument(
        "--adc_cut", type=float, default=DEFAULT_ADC_CUT,
        help=f"Samples above this ADC value count as signal (default: {DEFAULT_ADC_CUT})"
    )
    parser.add_argument(
        "--max_tick", type=int, default=DEFAULT_MAX_TICK,
        help=f"Tick bound for module selection (default: {DEFAULT_MAX_TICK})"
    )
    parser.add_argument(
        "--event_type", type=int, default=DEFAULT_EVENT_TYPE,
        help=f"Label written with every event (default: {DEFAULT_EVENT_TYPE})"
    )
    parser.add_argument(
        "--geometry", dest="tsv_path", type=str, default=None,
        help="Plane geometry TSV (default: bundled ProtoDUNE APA layout)"
    )
    parser.add_argument(
        "--max_events", type=int, default=None,
        help="Stop after this many input events"
    )
    parser.add_argument(
        "--log_level", type=str, default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    parser.add_argument(
        "--log_json", type=str, default=None,
        help="Also write JSON logs to this file"
    )
    args = parser.parse_args(argv)

    configure_logging(level=getattr(logging, args.log_level), json_file=args.log_json)

    run_larcv_maker(
        input_file=args.input_file,
        output_file=args.output_file,
        wire_label=args.wire_label,
        adc_cut=args.adc_cut,
        max_tick=args.max_tick,
        event_type=args.event_type,
        tsv_path=args.tsv_path,
        max_events=args.max_events,
    )


if __name__ == "__main__":
    main()
