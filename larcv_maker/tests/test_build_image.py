import numpy as np
import pytest

from larcv_maker.roi.build_image import build_event_images, build_image, compress, crop_roi
from larcv_maker.roi.find_roi import ROI, find_roi

from conftest import block


def test_compress_sums_blocks():
    image = np.arange(16, dtype=np.float32).reshape(4, 4)

    result = compress(image, 2, 1)

    assert result.shape == (2, 1)
    assert result[0, 0] == pytest.approx(image[:2].sum())
    assert result[1, 0] == pytest.approx(image[2:].sum())


def test_compress_identity():
    image = np.random.default_rng(7).random((6, 8)).astype(np.float32)

    np.testing.assert_allclose(compress(image, 6, 8), image, rtol=1e-6)


def test_compress_rejects_uneven_shape():
    with pytest.raises(ValueError):
        compress(np.zeros((5, 8), dtype=np.float32), 2, 2)


def test_missing_channel_is_zero_column(signal_map_for):
    hits = block(1650, 1652, 100, 103, value=20.0)
    del hits[1651]
    signal_map = signal_map_for(hits)
    roi = ROI(0, 2, 1650, 1652, 100, 103, 1)

    raw = crop_roi(roi, signal_map)

    assert raw.shape == (3, 4)
    assert np.all(raw[1] == 0)
    assert np.all(raw[0] == 20.0)
    assert np.all(raw[2] == 20.0)


def test_ticks_past_signal_end_are_zero(signal_map_for):
    signal_map = signal_map_for(block(1650, 1650, 0, 9, value=3.0), n_samples=10)
    roi = ROI(0, 2, 1650, 1650, 4, 15, 1)

    raw = crop_roi(roi, signal_map)

    assert raw.shape == (1, 12)
    assert np.all(raw[0, :6] == 3.0)
    assert np.all(raw[0, 6:] == 0)


def test_image_is_canonical_and_preserves_charge(geom, signal_map_for):
    signal_map = signal_map_for(block(1650, 1700, 100, 140, value=50.0))
    roi = find_roi(0, 2, signal_map, geom, adc_cut=10)

    image = build_image(roi, signal_map, geom)

    assert image.shape == (600, 600)
    assert image.dtype == np.float32
    width = roi.n_wires // roi.downsample
    height = roi.n_ticks // (4 * roi.downsample)
    assert (width, height) == (71, 31)
    assert np.all(image[width:, :] == 0)
    assert np.all(image[:, height:] == 0)
    assert image.sum() == pytest.approx(51 * 41 * 50.0)


def test_downsampled_image_preserves_charge(geom, signal_map_for):
    signal_map = signal_map_for(block(50, 750, 1000, 1100, value=2.0))
    roi = find_roi(0, 0, signal_map, geom, adc_cut=1)

    image = build_image(roi, signal_map, geom)

    assert roi.downsample == 2
    width = roi.n_wires // 2
    height = roi.n_ticks // 8
    assert np.all(image[width:, :] == 0)
    assert np.all(image[:, height:] == 0)
    assert image.sum() == pytest.approx(701 * 101 * 2.0, rel=1e-5)


def test_content_wider_than_canvas_is_cropped(geom, signal_map_for):
    # 600 raw wires stay at downsample 1, and the margin pushes them to 620
    signal_map = signal_map_for(block(100, 699, 100, 140, value=1.0))
    roi = find_roi(0, 0, signal_map, geom, adc_cut=0.5)

    image = build_image(roi, signal_map, geom)

    assert roi.downsample == 1
    assert roi.n_wires == 620
    assert image.shape == (600, 600)
    assert image[599].sum() > 0


def test_event_images_stack_planes(geom, signal_map_for):
    hits = block(100, 150, 200, 240)
    hits.update(block(900, 950, 200, 240))
    hits.update(block(1700, 1750, 200, 240))
    signal_map = signal_map_for(hits)
    rois = [find_roi(0, plane, signal_map, geom, adc_cut=10) for plane in range(3)]

    images = build_event_images(rois, signal_map, geom)

    assert images.shape == (3, 600, 600)
    for plane in range(3):
        assert images[plane].sum() == pytest.approx(51 * 41 * 50.0)
