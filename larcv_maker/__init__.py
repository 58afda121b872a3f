from larcv_maker.errors import (
    EmptyInput, EventSkipped, NoGoodModule, NoROI, UnsatisfiableConstraint
)
from larcv_maker.geom.geom_service import GeometryService, PlaneRange
from larcv_maker.roi import ROI, build_event_images, build_image, find_best_module, find_roi
from larcv_maker.run_larcv_maker import make_event_images, run_larcv_maker
from larcv_maker.signal_map import SignalMap

__all__ = [
    "ROI",
    "EmptyInput",
    "EventSkipped",
    "GeometryService",
    "NoGoodModule",
    "NoROI",
    "PlaneRange",
    "SignalMap",
    "UnsatisfiableConstraint",
    "build_event_images",
    "build_image",
    "find_best_module",
    "find_roi",
    "make_event_images",
    "run_larcv_maker",
]
