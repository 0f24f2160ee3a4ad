"""RIFF/WAVE container handling for mulawkit.

``parse_wav_header`` walks the chunk list of an in-memory WAV file and returns
the raw header fields; it does no format validation. ``build_header`` writes
the canonical 44-byte header for 8 kHz mono mu-law output.
"""

from __future__ import annotations

import struct

from loguru import logger

from mulawkit.core.errors import (
    BoundsError,
    DataChunkNotFoundError,
    MissingFmtChunkError,
    NotRiffError,
    NotWaveError,
)
from mulawkit.core.models import WavHeaderInfo

RIFF_TAG = b"RIFF"
WAVE_TAG = b"WAVE"
FMT_TAG = b"fmt "
DATA_TAG = b"data"

WAVE_FORMAT_PCM = 1
WAVE_FORMAT_MULAW = 7

HEADER_SIZE = 44
# RIFF header (12 bytes) + fmt chunk header (8) + the 16 bytes of PCM fields
_FMT_FIELDS_END = 36
_MAX_DATA_LENGTH = 0xFFFFFFFF - (HEADER_SIZE - 8)

_HEADER_STRUCT = struct.Struct("<4sI4s4sIHHIIHH4sI")


def parse_wav_header(data: bytes) -> WavHeaderInfo:
    """Parse the header of a RIFF/WAVE file held in memory.

    Args:
        data: The complete file contents.

    Returns:
        The raw header fields plus the location of the ``data`` payload.

    Raises:
        NotRiffError, NotWaveError, MissingFmtChunkError: Bad magic tags.
        DataChunkNotFoundError: The chunk walk ran off the end of the file.
        BoundsError: A header field or the data payload lies outside the buffer.
    """
    view = memoryview(data)
    total = len(view)

    if bytes(view[0:4]) != RIFF_TAG:
        raise NotRiffError()
    if bytes(view[8:12]) != WAVE_TAG:
        raise NotWaveError()
    if bytes(view[12:16]) != FMT_TAG:
        raise MissingFmtChunkError()
    if total < _FMT_FIELDS_END:
        raise BoundsError(f"File too short for a fmt chunk ({total} bytes)")

    fmt_chunk_size = struct.unpack_from("<I", view, 16)[0]
    (
        audio_format,
        num_channels,
        sample_rate,
        byte_rate,
        block_align,
        bits_per_sample,
    ) = struct.unpack_from("<HHIIHH", view, 20)

    offset = 12 + 8 + fmt_chunk_size
    while True:
        if offset >= total:
            raise DataChunkNotFoundError()
        if offset + 8 > total:
            raise BoundsError(f"Truncated chunk header at offset {offset}")
        chunk_id = bytes(view[offset:offset + 4])
        chunk_size = struct.unpack_from("<I", view, offset + 4)[0]
        if chunk_id == DATA_TAG:
            break
        logger.debug(f"Skipping chunk {chunk_id!r} ({chunk_size} bytes) at offset {offset}")
        offset += 8 + chunk_size

    data_offset = offset + 8
    if data_offset + chunk_size > total:
        raise BoundsError(
            f"Data chunk claims {chunk_size} bytes at offset {data_offset}, "
            f"but the file is only {total} bytes"
        )

    info = WavHeaderInfo(
        audio_format=audio_format,
        num_channels=num_channels,
        sample_rate=sample_rate,
        bits_per_sample=bits_per_sample,
        byte_rate=byte_rate,
        block_align=block_align,
        fmt_chunk_size=fmt_chunk_size,
        data_offset=data_offset,
        data_size=chunk_size,
        file_size=total,
    )
    logger.debug(
        f"Parsed WAV header: format={audio_format}, channels={num_channels}, "
        f"rate={sample_rate}, bits={bits_per_sample}, "
        f"data_offset={data_offset}, data_size={chunk_size}"
    )
    return info


def _pack_header(
    audio_format: int,
    channels: int,
    sample_rate: int,
    bits_per_sample: int,
    data_length: int,
) -> bytes:
    if not 0 <= data_length <= _MAX_DATA_LENGTH:
        raise ValueError(f"Data length out of range for a RIFF header: {data_length}")
    block_align = channels * (bits_per_sample // 8)
    byte_rate = sample_rate * block_align
    return _HEADER_STRUCT.pack(
        RIFF_TAG,
        36 + data_length,  # File size minus the first 8 bytes
        WAVE_TAG,
        FMT_TAG,
        16,
        audio_format,
        channels,
        sample_rate,
        byte_rate,
        block_align,
        bits_per_sample,
        DATA_TAG,
        data_length,
    )


def build_header(data_length: int) -> bytes:
    """Build the 44-byte header for 8000 Hz mono 8-bit mu-law audio."""
    return _pack_header(WAVE_FORMAT_MULAW, 1, 8000, 8, data_length)


def build_pcm16_header(data_length: int, sample_rate: int = 8000, channels: int = 1) -> bytes:
    """Build a 44-byte header for 16-bit PCM audio (used for decoded output)."""
    return _pack_header(WAVE_FORMAT_PCM, channels, sample_rate, 16, data_length)


def wrap_mulaw(encoded: bytes) -> bytes:
    """Prefix mu-law samples with a playable WAV header."""
    return build_header(len(encoded)) + bytes(encoded)
