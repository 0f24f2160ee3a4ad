"""Format validation for mulawkit.

Only plain 16-bit PCM, mono or stereo, at a multiple of 8000 Hz can be
converted. Each rule is a separate check so callers (and tests) can run them
individually; none of them touch any state.
"""

from __future__ import annotations

from typing import Callable

from mulawkit.core.errors import UnsupportedFormatError
from mulawkit.core.models import TARGET_SAMPLE_RATE, WavHeaderInfo

SUPPORTED_CHANNELS = (1, 2)


def check_audio_format(info: WavHeaderInfo) -> None:
    if info.audio_format != 1:
        raise UnsupportedFormatError(
            "non-PCM", f"Only PCM audio format is supported (got format tag {info.audio_format})."
        )


def check_bit_depth(info: WavHeaderInfo) -> None:
    if info.bits_per_sample != 16:
        raise UnsupportedFormatError(
            "bit depth", f"Only 16-bit audio is supported (got {info.bits_per_sample}-bit)."
        )


def check_channels(info: WavHeaderInfo) -> None:
    if info.num_channels not in SUPPORTED_CHANNELS:
        raise UnsupportedFormatError(
            "channel count", f"Only mono or stereo audio is supported (got {info.num_channels} channels)."
        )


def check_sample_rate(info: WavHeaderInfo) -> None:
    if info.sample_rate == 0 or info.sample_rate % TARGET_SAMPLE_RATE != 0:
        raise UnsupportedFormatError(
            "sample rate", f"Sample rate must be a multiple of 8000 Hz (got {info.sample_rate} Hz)."
        )


def check_fmt_chunk_size(info: WavHeaderInfo) -> None:
    """Strict-mode only: reject fmt chunks with extension bytes."""
    if info.fmt_chunk_size != 16:
        raise UnsupportedFormatError(
            "non-canonical fmt chunk",
            f"Expected a 16-byte fmt chunk (got {info.fmt_chunk_size} bytes).",
        )


_CHECKS: list[Callable[[WavHeaderInfo], None]] = [
    check_audio_format,
    check_bit_depth,
    check_channels,
    check_sample_rate,
]


def _checks_for(strict: bool) -> list[Callable[[WavHeaderInfo], None]]:
    if strict:
        return _CHECKS + [check_fmt_chunk_size]
    return _CHECKS


def validate(info: WavHeaderInfo, strict: bool = False) -> None:
    """Raise UnsupportedFormatError for the first rule ``info`` breaks."""
    for check in _checks_for(strict):
        check(info)


def find_problems(info: WavHeaderInfo, strict: bool = False) -> list[UnsupportedFormatError]:
    """Run every check and collect the failures instead of stopping at the first."""
    problems = []
    for check in _checks_for(strict):
        try:
            check(info)
        except UnsupportedFormatError as e:
            problems.append(e)
    return problems


def is_supported(info: WavHeaderInfo, strict: bool = False) -> bool:
    return not find_problems(info, strict)
