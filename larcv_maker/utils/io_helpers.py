import os

import awkward as ak
import numpy as np
import structlog
import uproot

logger = structlog.get_logger(__name__)

WIRE_BRANCHES = ["run", "subrun", "event", "channel", "nsamples", "signal"]
IMAGE_TREE = "image2d_tpc"


def output_file_name(output_file=None):
    """
    Explicit name if given, else larcv_<PROCESS>.root when PROCESS is set, else larcv.root.
    """
    if output_file:
        return output_file
    process = os.environ.get("PROCESS")
    if process:
        return f"larcv_{process}.root"
    return "larcv.root"


def split_signals(nsamples, flat_signal):
    """
    Cut the concatenated samples of one event back into one array per wire.
    """
    nsamples = np.asarray(nsamples, dtype=np.int64)
    flat_signal = np.asarray(flat_signal, dtype=np.float32)
    if nsamples.sum() != flat_signal.size:
        raise ValueError(
            f"nsamples adds up to {nsamples.sum()} but the event has {flat_signal.size} samples")
    return np.split(flat_signal, np.cumsum(nsamples)[:-1]) if nsamples.size else []


def read_wire_events(input_file, wire_label, max_events=None, step_size=100):
    """
    Yield (run, subrun, event, channels, signals) for every entry of the wire tree.

    The tree named wire_label holds one entry per event with jagged branches
    channel/nsamples (one value per wire) and signal (all samples, wire after wire).
    """
    with uproot.open(input_file) as f:
        try:
            tree = f[wire_label]
        except KeyError:
            raise RuntimeError(f"Could not find '{wire_label}' in {input_file}") from None

        n_read = 0
        for batch in tree.iterate(WIRE_BRANCHES, step_size=step_size, library="ak"):
            for entry in batch:
                if max_events is not None and n_read >= max_events:
                    return
                channels = ak.to_numpy(entry["channel"])
                signals = split_signals(ak.to_numpy(entry["nsamples"]), ak.to_numpy(entry["signal"]))
                if len(signals) != len(channels):
                    raise ValueError(
                        f"Event {entry['event']} has {len(channels)} channels "
                        f"but {len(signals)} signals")
                yield int(entry["run"]), int(entry["subrun"]), int(entry["event"]), channels, signals
                n_read += 1


def write_wire_events(output_file, wire_label, events):
    """
    Write events of (run, subrun, event, channels, signals) in the layout read_wire_events expects.
    """
    runs, subruns, event_ids = [], [], []
    channels, nsamples, signals = [], [], []
    for run, subrun, event, event_channels, event_signals in events:
        runs.append(run)
        subruns.append(subrun)
        event_ids.append(event)
        channels.append(np.asarray(event_channels, dtype=np.int32))
        nsamples.append(np.asarray([len(s) for s in event_signals], dtype=np.int32))
        signals.append(np.concatenate(
            [np.zeros(0, dtype=np.float32)] + [np.asarray(s, dtype=np.float32) for s in event_signals]))

    with uproot.recreate(output_file) as f:
        f[wire_label] = {
            "run": np.asarray(runs, dtype=np.int32),
            "subrun": np.asarray(subruns, dtype=np.int32),
            "event": np.asarray(event_ids, dtype=np.int32),
            "channel": _jagged(channels, np.int32),
            "nsamples": _jagged(nsamples, np.int32),
            "signal": _jagged(signals, np.float32),
        }


def _jagged(arrays, dtype):
    counts = np.asarray([len(a) for a in arrays], dtype=np.int64)
    flat = np.concatenate([np.zeros(0, dtype=dtype)] + [np.asarray(a, dtype=dtype) for a in arrays])
    return ak.unflatten(flat, counts)


class ImageWriter:
    """
    Buffered writer of per-event plane images and labels to a ROOT tree.
    """

    def __init__(self, output_file, n_planes, image_size, flush_every=10):
        self.output_file = output_file
        self.n_planes = n_planes
        self.image_size = image_size
        self.flush_every = flush_every
        self.n_written = 0
        self._buffer = []
        self._file = None
        self._tree = None

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def open(self):
        self._file = uproot.recreate(self.output_file)
        self._tree = self._file.mktree(IMAGE_TREE, {
            "run": np.int32,
            "subrun": np.int32,
            "event": np.int32,
            "event_type": np.int32,
            "module": np.int32,
            "downsample": np.dtype((np.int32, (self.n_planes,))),
            "roi": np.dtype((np.int32, (self.n_planes, 4))),
            "image": np.dtype((np.float32, (self.n_planes, self.image_size, self.image_size))),
        })

    def save_entry(self, run, subrun, event, event_type, module, rois, images):
        if images.shape != (self.n_planes, self.image_size, self.image_size):
            raise ValueError(f"Unexpected image set shape {images.shape}")
        self._buffer.append({
            "run": run,
            "subrun": subrun,
            "event": event,
            "event_type": event_type,
            "module": module,
            "downsample": [roi.downsample for roi in rois],
            "roi": [roi.bounds() for roi in rois],
            "image": images,
        })
        if len(self._buffer) >= self.flush_every:
            self.flush()

    def flush(self):
        if not self._buffer:
            return
        entries = self._buffer
        self._tree.extend({
            "run": np.asarray([e["run"] for e in entries], dtype=np.int32),
            "subrun": np.asarray([e["subrun"] for e in entries], dtype=np.int32),
            "event": np.asarray([e["event"] for e in entries], dtype=np.int32),
            "event_type": np.asarray([e["event_type"] for e in entries], dtype=np.int32),
            "module": np.asarray([e["module"] for e in entries], dtype=np.int32),
            "downsample": np.asarray([e["downsample"] for e in entries], dtype=np.int32),
            "roi": np.asarray([e["roi"] for e in entries], dtype=np.int32),
            "image": np.stack([e["image"] for e in entries]).astype(np.float32),
        })
        self.n_written += len(entries)
        self._buffer = []

    def close(self):
        if self._file is None:
            return
        self.flush()
        self._file.close()
        self._file = None
        self._tree = None
        logger.info("Wrote image file", output_file=self.output_file, n_entries=self.n_written)
