"""WAV to mu-law conversion orchestration.

Each call builds its own ConversionContext (header info, resampler state,
output buffer, progress reporter), so concurrent conversions never share
mutable state. Everything that can fail on the input (container parsing,
format validation) happens in :func:`prepare`, before any output is produced
or any progress is reported.

Usage:
    from mulawkit import convert

    result = convert(wav_bytes, on_progress=lambda pct: print(pct))
    open("out.ulaw", "wb").write(result.encoded)
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import AsyncIterator, Iterator

from loguru import logger

from mulawkit.audio.codecs import mulaw_decode, mulaw_encode_sample
from mulawkit.audio.resampler import (
    SMOOTHING_WINDOW,
    Resampler,
    downsample_factor,
    iter_smoothed_samples,
)
from mulawkit.audio.validation import validate
from mulawkit.audio.wav import build_pcm16_header, parse_wav_header
from mulawkit.config import ConverterConfig, load_config
from mulawkit.core.errors import BoundsError, ConversionCancelled, ConversionError
from mulawkit.core.events import (
    AnyConversionEvent,
    ConversionCompleted,
    ConversionFailed,
    ProgressEvent,
)
from mulawkit.core.models import AudioMetadata, ConversionResult, WavHeaderInfo
from mulawkit.progress import ProgressReporter, ProgressSink

DEFAULT_BATCH_SIZE = 4096


@dataclass
class ConversionContext:
    """State of one in-flight conversion.

    Args:
        data: The complete input file. Read only.
        info: Parsed and validated header of ``data``.
        window_size: Moving-average length in input frames.
        on_progress: Optional progress sink.
    """

    data: bytes
    info: WavHeaderInfo
    window_size: int = SMOOTHING_WINDOW
    on_progress: ProgressSink | None = field(default=None, repr=False)

    # Internal
    resampler: Resampler = field(init=False, repr=False)
    _samples: Iterator[int] = field(init=False, repr=False)
    _output: bytearray = field(init=False, repr=False)
    _reporter: ProgressReporter = field(init=False, repr=False)
    _produced: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        self.resampler = Resampler(
            self.info.num_channels,
            downsample_factor(self.info.sample_rate),
            self.window_size,
        )
        self._samples = iter_smoothed_samples(self.data, self.info, resampler=self.resampler)
        self._output = bytearray(self.info.output_length)
        self._reporter = ProgressReporter(self.total, self.on_progress)

    @property
    def total(self) -> int:
        """Number of output samples this conversion will produce."""
        return self.info.output_length

    @property
    def produced(self) -> int:
        return self._produced

    @property
    def done(self) -> bool:
        return self._produced >= self.total

    def run_batch(self, max_samples: int) -> int:
        """Encode up to ``max_samples`` more output samples, in order.

        Returns:
            How many samples were produced by this call.
        """
        start = self._produced
        while self._produced < self.total and self._produced - start < max_samples:
            try:
                sample = next(self._samples)
            except StopIteration:
                self.abort()
                raise BoundsError(
                    f"Data chunk ended after {self._produced} of {self.total} samples"
                ) from None
            self._output[self._produced] = mulaw_encode_sample(sample)
            self._produced += 1
            self._reporter.advance(self._produced)
        return self._produced - start

    def run(self) -> bytes:
        """Encode everything that is left and return the output."""
        self.run_batch(self.total)
        return self.finish()

    def finish(self) -> bytes:
        """Close progress reporting and return the immutable output buffer."""
        if not self.done:
            raise RuntimeError(f"Conversion incomplete: {self._produced}/{self.total} samples")
        self._reporter.complete()
        return bytes(self._output)

    def abort(self) -> None:
        self._reporter.abort()

    @property
    def metadata(self) -> AudioMetadata:
        return AudioMetadata.from_header(self.info)


def prepare(
    data: bytes,
    strict: bool = False,
    window_size: int = SMOOTHING_WINDOW,
    on_progress: ProgressSink | None = None,
) -> ConversionContext:
    """Parse and validate ``data`` and set up a conversion context.

    Raises:
        FormatError, UnsupportedFormatError, BoundsError: The input cannot be
            converted. Nothing has been reported to ``on_progress``.
    """
    info = parse_wav_header(data)
    validate(info, strict=strict)
    logger.debug(
        f"Converting {info.frame_count} frames: {info.num_channels}ch @ {info.sample_rate} Hz, "
        f"factor={info.downsample_factor}, outputs={info.output_length}"
    )
    return ConversionContext(data=data, info=info, window_size=window_size, on_progress=on_progress)


def encode(
    data: bytes,
    on_progress: ProgressSink | None = None,
    strict: bool = False,
    window_size: int = SMOOTHING_WINDOW,
) -> bytes:
    """Convert a 16-bit PCM WAV file to 8 kHz mono mu-law samples.

    Args:
        data: The complete WAV file.
        on_progress: Called once per output sample with a percentage.
        strict: Also reject fmt chunks that are not exactly 16 bytes.
        window_size: Moving-average length in input frames.

    Returns:
        The raw mu-law samples (no header).
    """
    context = prepare(data, strict=strict, window_size=window_size, on_progress=on_progress)
    return context.run()


async def encode_async(
    data: bytes,
    on_progress: ProgressSink | None = None,
    batch_size: int = DEFAULT_BATCH_SIZE,
    cancel_event: asyncio.Event | None = None,
    strict: bool = False,
    window_size: int = SMOOTHING_WINDOW,
) -> bytes:
    """Like :func:`encode`, yielding to the event loop between batches.

    The output is identical to :func:`encode` for any ``batch_size``.

    Raises:
        ConversionCancelled: ``cancel_event`` was set between two batches.
    """
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")
    context = prepare(data, strict=strict, window_size=window_size, on_progress=on_progress)
    await _drive(context, batch_size, cancel_event)
    return context.finish()


async def _drive(
    context: ConversionContext,
    batch_size: int,
    cancel_event: asyncio.Event | None,
) -> None:
    while not context.done:
        if cancel_event is not None and cancel_event.is_set():
            context.abort()
            logger.info(f"Conversion cancelled at {context.produced}/{context.total} samples")
            raise ConversionCancelled()
        context.run_batch(batch_size)
        await asyncio.sleep(0)


def convert(
    data: bytes,
    config: ConverterConfig | dict | str | None = None,
    on_progress: ProgressSink | None = None,
) -> ConversionResult:
    """Convert ``data`` and return the encoded samples with source metadata."""
    cfg = load_config(config)
    context = prepare(
        data,
        strict=cfg.conversion.strict_fmt_chunk,
        window_size=cfg.conversion.smoothing_window,
        on_progress=on_progress,
    )
    encoded = context.run()
    logger.info(
        f"Converted {context.info.file_size} bytes "
        f"({context.info.sample_rate} Hz, {context.info.num_channels}ch) "
        f"to {len(encoded)} mu-law samples"
    )
    return ConversionResult(encoded=encoded, metadata=context.metadata)


async def convert_async(
    data: bytes,
    config: ConverterConfig | dict | str | None = None,
    on_progress: ProgressSink | None = None,
    cancel_event: asyncio.Event | None = None,
) -> ConversionResult:
    """Async :func:`convert` using the configured batch size."""
    cfg = load_config(config)
    context = prepare(
        data,
        strict=cfg.conversion.strict_fmt_chunk,
        window_size=cfg.conversion.smoothing_window,
        on_progress=on_progress,
    )
    await _drive(context, cfg.conversion.batch_size, cancel_event)
    return ConversionResult(encoded=context.finish(), metadata=context.metadata)


def iter_conversion(
    data: bytes,
    config: ConverterConfig | dict | str | None = None,
) -> Iterator[ProgressEvent | ConversionCompleted]:
    """Run a conversion lazily as a finite sequence of events.

    Yields one ProgressEvent per output sample, then a single
    ConversionCompleted. Conversion errors are raised from the first
    ``next()`` call, before any event.
    """
    cfg = load_config(config)
    pending: list[int] = []
    context = prepare(
        data,
        strict=cfg.conversion.strict_fmt_chunk,
        window_size=cfg.conversion.smoothing_window,
        on_progress=pending.append,
    )
    while not context.done:
        context.run_batch(1)
        for percent in pending:
            yield ProgressEvent(percent=percent, output_index=context.produced, total=context.total)
        pending.clear()
    encoded = context.finish()
    for percent in pending:
        yield ProgressEvent(percent=percent, output_index=context.produced, total=context.total)
    yield ConversionCompleted(encoded=encoded, metadata=context.metadata)


async def stream_conversion(
    data: bytes,
    config: ConverterConfig | dict | str | None = None,
    cancel_event: asyncio.Event | None = None,
) -> AsyncIterator[AnyConversionEvent]:
    """Async event stream for remote observers.

    Progress is coalesced: an event is emitted only when the percentage
    changes. Conversion errors end the stream with a ConversionFailed event
    instead of raising.
    """
    cfg = load_config(config)
    pending: list[int] = []
    last_sent = -1
    try:
        context = prepare(
            data,
            strict=cfg.conversion.strict_fmt_chunk,
            window_size=cfg.conversion.smoothing_window,
            on_progress=pending.append,
        )
        while not context.done:
            if cancel_event is not None and cancel_event.is_set():
                context.abort()
                raise ConversionCancelled()
            context.run_batch(cfg.conversion.batch_size)
            if pending and pending[-1] != last_sent:
                last_sent = pending[-1]
                yield ProgressEvent(percent=last_sent, output_index=context.produced, total=context.total)
            pending.clear()
            await asyncio.sleep(0)
        encoded = context.finish()
    except ConversionError as e:
        logger.warning(f"Streamed conversion failed: {e.code}: {e}")
        yield ConversionFailed(code=e.code, message=str(e))
        return

    # An empty data chunk reports its single 100 on finish()
    if pending and pending[-1] != last_sent:
        yield ProgressEvent(percent=pending[-1], output_index=context.produced, total=context.total)
    yield ConversionCompleted(encoded=encoded, metadata=context.metadata)


def read_metadata(data: bytes) -> AudioMetadata:
    """Parse the header only and describe the source file."""
    info = parse_wav_header(data)
    if info.byte_rate == 0:
        logger.warning("WAV header has a zero byte rate; duration reported as 0")
    return AudioMetadata.from_header(info)


def decode(encoded: bytes) -> bytes:
    """Expand mu-law samples to 16-bit PCM little-endian."""
    return mulaw_decode(encoded)


def decode_to_wav(encoded: bytes) -> bytes:
    """Expand mu-law samples into a playable 8 kHz mono PCM16 WAV file."""
    pcm = mulaw_decode(encoded)
    return build_pcm16_header(len(pcm)) + pcm
