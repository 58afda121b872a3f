# image_constants.py

# Readout geometry (ProtoDUNE-style APA)
CHANNELS_PER_MODULE = 2560   # channels per APA, all three planes
PLANE_SPLIT = [               # (plane name, first channel in module, number of channels)
    ("U", 0, 800),
    ("V", 800, 800),
    ("Z", 1600, 960),
]

# ROI expansion
WIRE_MARGIN = 10   # wires added on each side, scaled by the downsample factor
TICK_MARGIN = 40   # ticks added on each side, scaled by the downsample factor
TICK_REBIN = 4     # ticks always merged per output pixel, before channel downsampling

# Global tick window per downsample tier, inclusive bounds
TICK_WINDOWS = {
    1: (0, 4491),
    2: (2, 4489),
}

# Canonical output image
IMAGE_SIZE = 600

# Run defaults
DEFAULT_ADC_CUT = 10
DEFAULT_MAX_TICK = 4492
DEFAULT_WIRE_LABEL = "caldata"
DEFAULT_EVENT_TYPE = 0
