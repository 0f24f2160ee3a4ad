"""Downmix, smoothing and decimation to 8 kHz for mulawkit.

Every input frame is averaged across channels into one mono sample and pushed
into a short sliding window. On every ``factor``-th frame the rounded mean of
the window is emitted. This is a causal moving average, a light noise
smoother rather than a proper anti-aliasing filter.
"""

from __future__ import annotations

import struct
from collections import deque
from typing import Iterator

from mulawkit.core.models import BYTES_PER_SAMPLE, TARGET_SAMPLE_RATE, WavHeaderInfo

SMOOTHING_WINDOW = 5


def round_half_away(numerator: int, denominator: int) -> int:
    """Integer division rounded to nearest, ties away from zero."""
    if denominator <= 0:
        raise ValueError("denominator must be positive")
    magnitude = (2 * abs(numerator) + denominator) // (2 * denominator)
    return -magnitude if numerator < 0 else magnitude


def downsample_factor(sample_rate: int) -> int:
    """Integral ratio of ``sample_rate`` to the 8000 Hz target."""
    factor, remainder = divmod(sample_rate, TARGET_SAMPLE_RATE)
    if remainder or factor == 0:
        raise ValueError(f"Sample rate {sample_rate} is not a multiple of {TARGET_SAMPLE_RATE}")
    return factor


class SampleWindow:
    """Bounded FIFO of the most recent mono samples.

    Usage:
        window = SampleWindow(5)
        window.push(120)
        smoothed = window.mean()
    """

    def __init__(self, size: int = SMOOTHING_WINDOW) -> None:
        if size < 1:
            raise ValueError("window size must be at least 1")
        self._samples: deque[int] = deque(maxlen=size)
        self._total = 0

    def push(self, sample: int) -> None:
        if len(self._samples) == self._samples.maxlen:
            self._total -= self._samples[0]
        self._samples.append(sample)
        self._total += sample

    def mean(self) -> int:
        """Rounded mean of the current contents (0 when empty)."""
        if not self._samples:
            return 0
        return round_half_away(self._total, len(self._samples))

    def clear(self) -> None:
        self._samples.clear()
        self._total = 0

    @property
    def size(self) -> int:
        return self._samples.maxlen or 0

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[int]:
        return iter(self._samples)


class Resampler:
    """Stateful mono downmix + moving average + integer decimation.

    Feed frames in file order with :meth:`push_frame`; it returns the smoothed
    sample on output ticks and None otherwise.
    """

    def __init__(self, channels: int, factor: int, window_size: int = SMOOTHING_WINDOW) -> None:
        if channels < 1:
            raise ValueError("channels must be at least 1")
        if factor < 1:
            raise ValueError("factor must be at least 1")
        self.channels = channels
        self.factor = factor
        self.window = SampleWindow(window_size)
        self._frame_index = 0

    def downmix(self, frame: tuple[int, ...]) -> int:
        # Missing channel samples count as silence
        return round_half_away(sum(frame), self.channels)

    def push_frame(self, frame: tuple[int, ...]) -> int | None:
        self.window.push(self.downmix(frame))
        is_tick = self._frame_index % self.factor == 0
        self._frame_index += 1
        if is_tick:
            return self.window.mean()
        return None

    @property
    def frames_seen(self) -> int:
        return self._frame_index


def iter_frames(data: bytes, info: WavHeaderInfo) -> Iterator[tuple[int, ...]]:
    """Yield the per-channel int16 samples of every frame in the data chunk."""
    channels = info.num_channels
    frame_size = BYTES_PER_SAMPLE * channels
    start = info.data_offset
    end = info.data_offset + info.data_size
    frame_struct = struct.Struct(f"<{channels}h")

    for pos in range(start, end, frame_size):
        if pos + frame_size <= end:
            yield frame_struct.unpack_from(data, pos)
            continue
        # Trailing partial frame: keep only the channel samples that fit
        samples = []
        for channel in range(channels):
            sample_pos = pos + channel * BYTES_PER_SAMPLE
            if sample_pos + BYTES_PER_SAMPLE <= end:
                samples.append(struct.unpack_from("<h", data, sample_pos)[0])
        yield tuple(samples)


def iter_smoothed_samples(
    data: bytes,
    info: WavHeaderInfo,
    window_size: int = SMOOTHING_WINDOW,
    resampler: Resampler | None = None,
) -> Iterator[int]:
    """Yield the 8 kHz mono samples that feed the mu-law encoder, in order.

    Stops after ``info.output_length`` samples; trailing frames that do not
    complete a decimation step are dropped.
    """
    if resampler is None:
        resampler = Resampler(info.num_channels, downsample_factor(info.sample_rate), window_size)
    limit = info.output_length
    produced = 0
    if limit == 0:
        return
    for frame in iter_frames(data, info):
        sample = resampler.push_frame(frame)
        if sample is None:
            continue
        yield sample
        produced += 1
        if produced >= limit:
            return
