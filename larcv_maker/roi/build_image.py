import numpy as np
from numba import njit
import structlog

logger = structlog.get_logger(__name__)


def crop_roi(roi, signal_map):
    """
    Raw n_wires x n_ticks window of the ROI.
    Absent channels and ticks past the end of a signal stay zero.
    """
    raw = np.zeros((roi.n_wires, roi.n_ticks), dtype=np.float32)
    for i in range(roi.n_wires):
        samples = signal_map.get(roi.first_wire + i)
        if samples is None:
            continue
        segment = samples[roi.first_tick:roi.last_tick + 1]
        raw[i, :segment.size] = segment
    return raw


def compress(image, n_rows, n_cols):
    """
    Python wrapper: checks the shape divides evenly, then rebins by summing
    each block so the total charge is preserved.
    """
    rows, cols = image.shape
    if n_rows <= 0 or n_cols <= 0 or rows % n_rows or cols % n_cols:
        raise ValueError(f"Cannot compress {rows}x{cols} image to {n_rows}x{n_cols}")
    return compress_sum(np.ascontiguousarray(image, dtype=np.float32), n_rows, n_cols)


@njit
def compress_sum(image, n_rows, n_cols):
    row_factor = image.shape[0] // n_rows
    col_factor = image.shape[1] // n_cols
    out = np.zeros((n_rows, n_cols), dtype=np.float64)

    for i in range(image.shape[0]):
        for j in range(image.shape[1]):
            out[i // row_factor, j // col_factor] += image[i, j]

    return out.astype(np.float32)


def build_image(roi, signal_map, geom):
    """
    Canonical image_size x image_size picture of one plane's ROI.
    Rebinned content sits at the origin; everything else is zero.
    """
    raw = crop_roi(roi, signal_map)

    width = roi.n_wires // roi.downsample
    height = roi.n_ticks // geom.tick_order(roi.downsample)
    compressed = compress(raw, width, height)
    logger.debug(
        "Plane image",
        module=roi.module, plane=roi.plane,
        raw=f"{roi.n_wires}x{roi.n_ticks}",
        downsampled=f"{width}x{height}",
    )

    size = geom.image_size
    image = np.zeros((size, size), dtype=np.float32)
    w = min(width, size)
    h = min(height, size)
    image[:w, :h] = compressed[:w, :h]
    return image


def build_event_images(rois, signal_map, geom):
    """
    Stack one image per plane: (n_planes, image_size, image_size).
    """
    return np.stack([build_image(roi, signal_map, geom) for roi in rois])
