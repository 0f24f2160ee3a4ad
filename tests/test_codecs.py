"""Tests for the mulawkit G.711 mu-law codec."""

import struct

from mulawkit.audio.codecs import (
    MULAW_BIAS,
    mulaw_decode,
    mulaw_decode_sample,
    mulaw_encode,
    mulaw_encode_sample,
    mulaw_segment,
)


def _roundtrip(sample):
    return mulaw_decode_sample(mulaw_encode_sample(sample))


def _tolerance(sample):
    # Segment quantization plus the encoder bias, or ~10% for loud samples
    return max(2 * MULAW_BIAS, abs(sample) // 10)


class TestMulawSample:
    """Tests for single-sample encode/decode."""

    def test_encode_decode_roundtrip(self):
        """Encoding then decoding should approximately recover the original."""
        samples = [0, 100, 1000, 5000, 10000, 20000, 30000, 32767]
        samples += [-x for x in samples] + [-32768]

        for sample in samples:
            recovered = _roundtrip(sample)
            assert abs(recovered - sample) <= _tolerance(sample), \
                f"Sample {sample} -> encoded -> {recovered} (too much error)"

    def test_sign_preserved(self):
        for sample in [1, 100, 5000, 32767]:
            assert _roundtrip(sample) > 0
            assert _roundtrip(-sample) < 0
        assert _roundtrip(0) >= 0

    def test_ordering_preserved(self):
        """Decoded values never decrease as the input increases."""
        previous = None
        for sample in range(-32768, 32768, 7):
            recovered = _roundtrip(sample)
            if previous is not None:
                assert recovered >= previous, f"ordering broken at {sample}"
            previous = recovered

    def test_silence(self):
        """Silence lands in the lowest used segment, close to 0."""
        encoded = mulaw_encode_sample(0)
        assert encoded == 0x6F
        assert mulaw_decode_sample(encoded) == MULAW_BIAS

    def test_saturation_keeps_sign_bit(self):
        """Full-scale input must not overflow into the sign bit."""
        assert mulaw_encode_sample(32767) == 0x00
        assert mulaw_encode_sample(-32768) == 0x80
        assert mulaw_decode_sample(0x00) == 32124
        assert mulaw_decode_sample(0x80) == -32124

    def test_out_of_range_input_is_clamped(self):
        assert mulaw_encode_sample(40000) == mulaw_encode_sample(32767)
        assert mulaw_encode_sample(-40000) == mulaw_encode_sample(-32768)

    def test_encode_is_deterministic(self):
        for sample in (-12345, -1, 0, 1, 12345):
            assert mulaw_encode_sample(sample) == mulaw_encode_sample(sample)

    def test_output_is_a_byte(self):
        for sample in range(-32768, 32768, 101):
            assert 0 <= mulaw_encode_sample(sample) <= 0xFF

    def test_decode_zero_codes(self):
        """Both zero-magnitude codes decode to silence."""
        assert mulaw_decode_sample(0xFF) == 0
        assert mulaw_decode_sample(0x7F) == 0

    def test_segment(self):
        assert mulaw_segment(0x00) == (7, 15)
        assert mulaw_segment(0x6F) == (1, 0)
        assert mulaw_segment(0xFF) == (0, 0)


class TestMulawBuffers:
    """Tests for the bulk PCM16 <-> mu-law helpers."""

    def test_encode_length(self):
        """Mu-law encodes 2 PCM bytes to 1 mu-law byte."""
        pcm = b"\x00" * 100  # 50 samples
        encoded = mulaw_encode(pcm)
        assert len(encoded) == 50

    def test_decode_length(self):
        """Mu-law decodes 1 mu-law byte to 2 PCM bytes."""
        mulaw_data = bytes(range(100))
        decoded = mulaw_decode(mulaw_data)
        assert len(decoded) == 200

    def test_bulk_matches_single_sample(self):
        samples = [0, 1000, -1000, 32767, -32768]
        pcm = struct.pack(f"<{len(samples)}h", *samples)
        assert mulaw_encode(pcm) == bytes(mulaw_encode_sample(s) for s in samples)

    def test_batch_roundtrip(self):
        """Multiple samples should roundtrip together."""
        n_samples = 160  # 20ms at 8kHz
        pcm = struct.pack(f"<{n_samples}h", *([1000] * n_samples))
        decoded = mulaw_decode(mulaw_encode(pcm))
        assert len(decoded) == len(pcm)
        recovered = struct.unpack(f"<{n_samples}h", decoded)
        assert all(abs(r - 1000) <= _tolerance(1000) for r in recovered)
