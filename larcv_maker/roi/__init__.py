from larcv_maker.roi.best_module import find_best_module
from larcv_maker.roi.build_image import build_event_images, build_image, compress
from larcv_maker.roi.find_roi import ROI, find_roi

__all__ = [
    "ROI",
    "build_event_images",
    "build_image",
    "compress",
    "find_best_module",
    "find_roi",
]
