"""
Per-event channel -> samples lookup.
"""

import numpy as np


class SignalMap:
    """
    Read-only mapping from channel id to its amplitude samples for one event.

    ``modules`` lists the populated modules in the order their first channel
    was seen; module selection walks candidates in that order.
    """

    def __init__(self, signals, modules):
        self._signals = signals
        self.modules = modules

    @classmethod
    def from_wires(cls, channels, signals, geom):
        """
        Args:
            channels (array-like[int]): one channel id per wire
            signals (iterable[array-like]): samples of each wire, same order as channels
            geom (GeometryService): provides the channel -> module mapping

        A channel repeated in the input keeps its first occurrence.
        """
        mapping = {}
        modules = []
        seen_modules = set()
        for channel, samples in zip(channels, signals):
            channel = int(channel)
            if channel in mapping:
                continue
            mapping[channel] = np.asarray(samples, dtype=np.float32)

            module = geom.module_of(channel)
            if module not in seen_modules:
                seen_modules.add(module)
                modules.append(module)
        return cls(mapping, modules)

    def get(self, channel):
        return self._signals.get(channel)

    def __contains__(self, channel):
        return channel in self._signals

    def __iter__(self):
        return iter(self._signals)

    def __len__(self):
        return len(self._signals)

    def items(self):
        return self._signals.items()
