"""Tests for RIFF/WAVE parsing and header building."""

import struct

import pytest

from mulawkit.audio.wav import (
    HEADER_SIZE,
    build_header,
    build_pcm16_header,
    parse_wav_header,
    wrap_mulaw,
)
from mulawkit.core.errors import (
    BoundsError,
    DataChunkNotFoundError,
    FormatError,
    MissingFmtChunkError,
    NotRiffError,
    NotWaveError,
)


class TestParseWavHeader:

    def test_canonical_mono(self, make_wav):
        data = make_wav(samples=[1, 2, 3, 4], sample_rate=8000)
        info = parse_wav_header(data)
        assert info.audio_format == 1
        assert info.num_channels == 1
        assert info.sample_rate == 8000
        assert info.bits_per_sample == 16
        assert info.byte_rate == 16000
        assert info.block_align == 2
        assert info.fmt_chunk_size == 16
        assert info.data_offset == 44
        assert info.data_size == 8
        assert info.file_size == len(data)

    def test_stereo_fields(self, make_wav):
        info = parse_wav_header(make_wav(samples=[0] * 8, channels=2, sample_rate=16000))
        assert info.num_channels == 2
        assert info.byte_rate == 64000
        assert info.frame_count == 4
        assert info.downsample_factor == 2
        assert info.output_length == 2

    def test_skips_intervening_chunks(self, make_wav):
        data = make_wav(
            samples=[7, 8],
            extra_chunks=[(b"LIST", b"INFOISFT" + b"\x00" * 10), (b"fact", b"\x02\x00\x00\x00")],
        )
        info = parse_wav_header(data)
        assert info.data_size == 4
        assert data[info.data_offset:info.data_offset + info.data_size] == struct.pack("<2h", 7, 8)

    def test_extended_fmt_chunk(self, make_wav):
        data = make_wav(samples=[1, 2], fmt_extra=b"\x00\x00")
        info = parse_wav_header(data)
        assert info.fmt_chunk_size == 18
        assert info.data_offset == 46

    def test_parser_does_not_validate(self, make_wav):
        info = parse_wav_header(make_wav(samples=[1], audio_format=3, sample_rate=11025))
        assert info.audio_format == 3
        assert info.sample_rate == 11025

    def test_missing_riff(self, make_wav):
        data = b"RIFX" + make_wav(samples=[1])[4:]
        with pytest.raises(NotRiffError):
            parse_wav_header(data)

    def test_missing_wave(self, make_wav):
        data = bytearray(make_wav(samples=[1]))
        data[8:12] = b"AVI "
        with pytest.raises(NotWaveError):
            parse_wav_header(bytes(data))

    def test_missing_fmt(self, make_wav):
        data = bytearray(make_wav(samples=[1]))
        data[12:16] = b"JUNK"
        with pytest.raises(MissingFmtChunkError):
            parse_wav_header(bytes(data))

    def test_empty_buffer(self):
        with pytest.raises(NotRiffError):
            parse_wav_header(b"")

    def test_format_errors_share_base(self):
        with pytest.raises(FormatError):
            parse_wav_header(b"not a wav file at all")

    def test_data_chunk_not_found(self, make_wav):
        data = make_wav(samples=[1, 2])
        # Cut the file right after the fmt chunk
        with pytest.raises(DataChunkNotFoundError):
            parse_wav_header(data[:36])

    def test_data_chunk_not_found_after_skipping(self, make_wav):
        data = make_wav(samples=[1, 2])
        renamed = data[:36] + b"junk" + data[40:]
        with pytest.raises(DataChunkNotFoundError):
            parse_wav_header(renamed)

    def test_truncated_chunk_header(self, make_wav):
        data = make_wav(samples=[1, 2])
        with pytest.raises(BoundsError):
            parse_wav_header(data[:40])

    def test_truncated_fmt_fields(self, make_wav):
        data = make_wav(samples=[1, 2])
        with pytest.raises(BoundsError):
            parse_wav_header(data[:30])

    def test_data_size_exceeds_buffer(self, make_wav):
        data = make_wav(samples=[1, 2], data_size=400)
        with pytest.raises(BoundsError):
            parse_wav_header(data)

    def test_oversized_skip_chunk(self, make_wav):
        data = make_wav(samples=[1], extra_chunks=[(b"LIST", b"")])
        # Claim the LIST chunk is huge so the cursor jumps past the end
        patched = data[:40] + struct.pack("<I", 10_000) + data[44:]
        with pytest.raises(DataChunkNotFoundError):
            parse_wav_header(patched)

    def test_accepts_bytearray_and_memoryview(self, make_wav):
        data = make_wav(samples=[1, 2, 3])
        assert parse_wav_header(bytearray(data)).data_size == 6
        assert parse_wav_header(memoryview(data)).data_size == 6


class TestBuildHeader:

    def test_header_layout(self):
        header = build_header(100)
        assert len(header) == HEADER_SIZE == 44
        assert header[0:4] == b"RIFF"
        assert header[8:12] == b"WAVE"
        assert header[12:16] == b"fmt "
        assert header[36:40] == b"data"
        assert struct.unpack_from("<I", header, 4)[0] == 136
        assert struct.unpack_from("<I", header, 40)[0] == 100

    def test_mulaw_fmt_fields(self):
        header = build_header(0)
        fmt_size, fmt_tag, channels, rate, byte_rate, block_align, bits = struct.unpack_from(
            "<IHHIIHH", header, 16
        )
        assert fmt_size == 16
        assert fmt_tag == 7
        assert channels == 1
        assert rate == 8000
        assert byte_rate == 8000
        assert block_align == 1
        assert bits == 8

    def test_rejects_out_of_range_length(self):
        with pytest.raises(ValueError):
            build_header(-1)
        with pytest.raises(ValueError):
            build_header(2**32)

    def test_wrapped_output_parses(self):
        wrapped = wrap_mulaw(b"\xff" * 10)
        assert len(wrapped) == 54
        info = parse_wav_header(wrapped)
        assert info.audio_format == 7
        assert info.bits_per_sample == 8
        assert info.data_offset == 44
        assert info.data_size == 10

    def test_pcm16_header(self):
        header = build_pcm16_header(320, sample_rate=8000)
        info = parse_wav_header(header + b"\x00" * 320)
        assert info.audio_format == 1
        assert info.bits_per_sample == 16
        assert info.byte_rate == 16000
        assert info.block_align == 2
        assert info.data_size == 320
