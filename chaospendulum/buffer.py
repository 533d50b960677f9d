"""
buffer.py

Fixed-capacity sample storage for real time plots.

Each channel keeps the most recent (x, y) pairs in a ring. Storage is
mirrored: every sample is written both at index i and at i + capacity of
arrays twice the capacity long, so the samples from oldest to newest always
form one contiguous slice and reading never has to stitch the ring back
together. A push is O(1) whatever the capacity.
"""

import logging
from typing import Dict, Hashable, List, Tuple

import numpy as np

from .configs import require_count
from .errors import ArrayLengthMismatch, UnknownChannel

logger = logging.getLogger(__name__)


Slice = Tuple[np.ndarray, np.ndarray, int]


class ChannelBuffer:
    """Ring of up to `capacity` (x, y) pairs for a single channel."""

    def __init__(self, capacity: int):
        self._capacity = require_count("capacity", capacity)
        self._x = np.zeros(2 * self._capacity)
        self._y = np.zeros(2 * self._capacity)
        self._start = 0  # index of the oldest sample
        self._count = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return self._count

    def push(self, x: float, y: float) -> None:
        """Append a pair, recycling the oldest one when full."""
        cap = self._capacity
        if self._count < cap:
            i = self._start + self._count
            if i >= cap:
                i -= cap
            self._count += 1
        else:
            i = self._start
            self._start = i + 1 if i + 1 < cap else 0

        self._x[i] = self._x[i + cap] = x
        self._y[i] = self._y[i + cap] = y

    def slice(self, copy: bool = False) -> Slice:
        """
        Returns (xs, ys, count) from oldest to newest.

        Without copy, xs and ys are read-only views of the live storage and
        are only valid until the next push.
        """
        lo, hi = self._start, self._start + self._count
        xs, ys = self._x[lo:hi], self._y[lo:hi]
        if copy:
            xs, ys = xs.copy(), ys.copy()
        else:
            xs.flags.writeable = False
            ys.flags.writeable = False
        if xs.shape[0] != ys.shape[0]:
            raise ArrayLengthMismatch(xs.shape[0], ys.shape[0])
        return xs, ys, self._count

    def clear(self) -> None:
        self._start = 0
        self._count = 0


class SampleBuffer:
    """
    Per-channel sample storage of fixed capacity.

    Channels are created on first push. reset() forgets every channel but
    keeps its storage for the channels pushed afterwards.

    Example:
        >>> buf = SampleBuffer(capacity=3)
        >>> for i in range(5):
        ...     buf.push("theta", i, 10 * i)
        >>> xs, ys, n = buf.slice("theta")
        >>> xs.tolist(), n
        ([2.0, 3.0, 4.0], 3)
    """

    def __init__(self, capacity: int = 500, stride: int = 1):
        self._capacity = require_count("capacity", capacity)
        self._channels: Dict[Hashable, ChannelBuffer] = {}
        self._pool: List[ChannelBuffer] = []
        self._stride = 1
        self.decimate(stride)
        logger.debug("SampleBuffer created: capacity=%d", self._capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def stride(self) -> int:
        return self._stride

    def decimate(self, stride: int) -> None:
        """
        Sets the decimation stride: only every stride-th step of the owning
        PlotWindow results in a push. The calls are counted by the window.
        """
        self._stride = require_count("stride", stride)

    def push(self, channel: Hashable, x: float, y: float) -> None:
        """Append (x, y) to channel, creating the channel on first use."""
        buf = self._channels.get(channel)
        if buf is None:
            buf = self._pool.pop() if self._pool else ChannelBuffer(self._capacity)
            self._channels[channel] = buf
        buf.push(x, y)

    def slice(self, channel: Hashable, copy: bool = False) -> Slice:
        """
        Returns (xs, ys, count) for channel, oldest first.

        Raises:
            UnknownChannel: Nothing was pushed to channel since the last reset.
        """
        try:
            buf = self._channels[channel]
        except KeyError:
            raise UnknownChannel(channel) from None
        return buf.slice(copy=copy)

    def count(self, channel: Hashable) -> int:
        return self.slice(channel)[2]

    def channels(self) -> List[Hashable]:
        return list(self._channels)

    def reset(self) -> None:
        """Clears every channel; the storage is kept and reused."""
        for buf in self._channels.values():
            buf.clear()
            self._pool.append(buf)
        self._channels.clear()

    def __contains__(self, channel) -> bool:
        return channel in self._channels

    def __len__(self) -> int:
        return len(self._channels)
