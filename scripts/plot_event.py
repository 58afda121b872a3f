import argparse

import uproot
import numpy as np
import matplotlib
matplotlib.use("Agg")

import matplotlib.pyplot as plt

from larcv_maker.utils.io_helpers import IMAGE_TREE


def plot_event(file_name, entry, output_png=None):
    with uproot.open(file_name) as file:
        tree = file[IMAGE_TREE]
        if entry >= tree.num_entries:
            print(f"Entry {entry} out of range (file has {tree.num_entries} entries)")
            return
        arrays = tree.arrays(["run", "subrun", "event", "module", "downsample", "image"],
                             entry_start=entry, entry_stop=entry + 1, library="np")

    run, subrun, event = (int(arrays[name][0]) for name in ("run", "subrun", "event"))
    module = int(arrays["module"][0])
    downsample = np.asarray(arrays["downsample"][0])
    images = np.asarray(arrays["image"][0])

    num_planes = images.shape[0]
    fig, axes = plt.subplots(1, num_planes, figsize=(5 * num_planes, 5), sharey=True)
    axes = np.atleast_1d(axes)

    for plane, ax in enumerate(axes):
        # wires along x, ticks along y
        ax.imshow(images[plane].T, aspect="auto", cmap="viridis", origin="lower")
        ax.set_title(f"Plane {plane} (downsample {downsample[plane]})")
        ax.set_xlabel("Wire bin")
        if plane == 0:
            ax.set_ylabel("Tick bin")

    fig.suptitle(f"Run {run} subrun {subrun} event {event}, module {module}")
    plt.tight_layout()
    if output_png is None:
        output_png = f"event_{run}_{subrun}_{event}.png"
    plt.savefig(output_png, dpi=150)
    plt.close()
    print(f"Saved {output_png}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Draw the plane images of one written event.")
    parser.add_argument("file_name", help="Image file written by larcv-maker")
    parser.add_argument("--entry", type=int, default=0, help="Tree entry to draw (default: 0)")
    parser.add_argument("--output_png", type=str, default=None, help="Output PNG path")
    args = parser.parse_args()

    plot_event(args.file_name, args.entry, args.output_png)
