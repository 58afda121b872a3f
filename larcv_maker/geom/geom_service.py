# geom/geom_service.py

from importlib import resources

import pandas as pd
import structlog

from larcv_maker.image_constants import (
    CHANNELS_PER_MODULE, PLANE_SPLIT, WIRE_MARGIN, TICK_MARGIN, TICK_REBIN,
    TICK_WINDOWS, IMAGE_SIZE
)

logger = structlog.get_logger(__name__)

DEFAULT_TSV = "protodune_apa.tsv"


class PlaneRange:
    def __init__(self, plane_id, plane_name, first_channel, n_channels):
        # --- Plane identifier ---
        self.plane_id = int(plane_id)
        self.plane_name = plane_name

        # --- Channel span, relative to the start of a module ---
        self.first_channel = int(first_channel)
        self.n_channels = int(n_channels)
        self.last_channel = self.first_channel + self.n_channels - 1

    def __repr__(self):
        return (f"PlaneRange({self.plane_id}, {self.plane_name!r}, "
                f"{self.first_channel}, {self.n_channels})")


class GeometryService:
    """
    Channel layout and imaging constants for one detector configuration.

    Plane splits come from ``planes`` when given, otherwise from a TSV file
    (the bundled ProtoDUNE APA layout when ``tsv_path`` is None). Every other
    value defaults to ``image_constants`` and can be overridden per instance.
    """

    def __init__(self, tsv_path=None, planes=None,
                 channels_per_module=CHANNELS_PER_MODULE,
                 wire_margin=WIRE_MARGIN, tick_margin=TICK_MARGIN,
                 tick_rebin=TICK_REBIN, image_size=IMAGE_SIZE,
                 tick_windows=None):
        self.channels_per_module = int(channels_per_module)
        self.wire_margin = int(wire_margin)
        self.tick_margin = int(tick_margin)
        self.tick_rebin = int(tick_rebin)
        self.image_size = int(image_size)
        self.tick_windows = dict(TICK_WINDOWS if tick_windows is None else tick_windows)
        self.tsv_path = tsv_path

        if planes is not None:
            self.planes = list(planes)
        elif tsv_path is not None:
            self.planes = self.load_geometry_from_tsv(tsv_path)
        else:
            self.planes = self.load_default_geometry()

        self.validate()

    @classmethod
    def from_constants(cls, **kwargs):
        planes = [PlaneRange(i, name, first, n) for i, (name, first, n) in enumerate(PLANE_SPLIT)]
        return cls(planes=planes, **kwargs)

    def load_default_geometry(self):
        source = resources.files("larcv_maker.geom").joinpath("data", DEFAULT_TSV)
        with resources.as_file(source) as path:
            return self.load_geometry_from_tsv(path)

    def load_geometry_from_tsv(self, tsv_path):
        columns = ["plane_id", "plane_name", "first_channel", "n_channels"]
        df = pd.read_csv(tsv_path, sep="\t", comment="#", names=columns)
        df = df.sort_values("plane_id")

        planes = []
        for row in df.itertuples():
            planes.append(PlaneRange(
                plane_id=row.plane_id,
                plane_name=str(row.plane_name).strip(),
                first_channel=row.first_channel,
                n_channels=row.n_channels,
            ))
        logger.debug("Loaded plane geometry", tsv_path=str(tsv_path), n_planes=len(planes))
        return planes

    def validate(self):
        if not self.planes:
            raise ValueError("Geometry has no planes")
        if self.channels_per_module <= 0:
            raise ValueError(f"channels_per_module must be positive, got {self.channels_per_module}")

        ids = [plane.plane_id for plane in self.planes]
        if ids != list(range(len(self.planes))):
            raise ValueError(f"Plane ids must be 0..{len(self.planes) - 1}, got {ids}")

        previous_last = -1
        for plane in sorted(self.planes, key=lambda p: p.first_channel):
            if plane.n_channels <= 0:
                raise ValueError(f"Plane {plane.plane_id} has no channels")
            if plane.first_channel <= previous_last:
                raise ValueError(f"Plane {plane.plane_id} overlaps the previous plane")
            if plane.last_channel >= self.channels_per_module:
                raise ValueError(
                    f"Plane {plane.plane_id} ends at channel {plane.last_channel}, "
                    f"outside a module of {self.channels_per_module} channels")
            previous_last = plane.last_channel

        for downsample in (1, 2):
            if downsample not in self.tick_windows:
                raise ValueError(f"No tick window for downsample factor {downsample}")
            first_tick, last_tick = self.tick_windows[downsample]
            if not 0 <= first_tick < last_tick:
                raise ValueError(f"Bad tick window {first_tick}-{last_tick} for factor {downsample}")

    @property
    def n_planes(self):
        return len(self.planes)

    def module_of(self, channel):
        return int(channel) // self.channels_per_module

    def plane_channel_range(self, module, plane):
        """Absolute (first, last) channel of a plane in a module, both inclusive."""
        p = self.planes[plane]
        offset = module * self.channels_per_module
        return offset + p.first_channel, offset + p.last_channel

    def module_channel_ranges(self, module):
        return [self.plane_channel_range(module, plane) for plane in range(self.n_planes)]

    def tick_window(self, downsample):
        return self.tick_windows[downsample]

    def tick_order(self, downsample):
        return self.tick_rebin * downsample
