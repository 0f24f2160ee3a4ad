"""Data model shared by the parser, validator and converter.

WavHeaderInfo is produced once per parse and never mutated. AudioMetadata is
what hosts show to users (the "file information" panel), and ConversionResult
bundles it with the encoded μ-law bytes.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

BYTES_PER_SAMPLE = 2
TARGET_SAMPLE_RATE = 8000


class WavHeaderInfo(BaseModel):
    """Raw header fields of a RIFF/WAVE file.

    ``data_offset`` points at the first byte of the ``data`` chunk payload and
    ``data_size`` is the payload length taken from the chunk header.
    """

    model_config = ConfigDict(frozen=True)

    audio_format: int
    num_channels: int
    sample_rate: int
    bits_per_sample: int
    byte_rate: int
    block_align: int = 0
    fmt_chunk_size: int = 16
    data_offset: int
    data_size: int
    file_size: int = 0

    @property
    def frame_size(self) -> int:
        """Bytes per frame (one 16-bit sample per channel)."""
        return BYTES_PER_SAMPLE * self.num_channels

    @property
    def frame_count(self) -> int:
        if self.num_channels <= 0:
            return 0
        return self.data_size // self.frame_size

    @property
    def downsample_factor(self) -> int:
        """Ratio of the source rate to the 8000 Hz target."""
        return self.sample_rate // TARGET_SAMPLE_RATE

    @property
    def output_length(self) -> int:
        """Number of μ-law samples a conversion of this file produces."""
        factor = self.downsample_factor
        if factor <= 0:
            return 0
        return self.frame_count // factor

    @property
    def duration_seconds(self) -> float:
        if self.byte_rate == 0:
            return 0.0
        return self.data_size / self.byte_rate


class AudioMetadata(BaseModel):
    """Source file details surfaced to the caller."""

    bit_rate: int
    channels: int
    sample_rate: int
    sample_size: int
    duration_seconds: float
    file_size: int

    @classmethod
    def from_header(cls, info: WavHeaderInfo) -> AudioMetadata:
        return cls(
            bit_rate=info.byte_rate * 8,
            channels=info.num_channels,
            sample_rate=info.sample_rate,
            sample_size=info.bits_per_sample,
            duration_seconds=info.duration_seconds,
            file_size=info.file_size,
        )


class ConversionResult(BaseModel):
    """Encoded output of one conversion run."""

    model_config = ConfigDict(frozen=True)

    encoded: bytes
    metadata: AudioMetadata

    def as_wav(self) -> bytes:
        """The encoded samples prefixed with a playable 44-byte WAV header."""
        from mulawkit.audio.wav import wrap_mulaw

        return wrap_mulaw(self.encoded)

    def __len__(self) -> int:
        return len(self.encoded)
