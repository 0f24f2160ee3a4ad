"""mulawkit - WAV to G.711 mu-law converter.

Turns 16-bit PCM WAV files (mono or stereo, any multiple of 8000 Hz) into
8 kHz mono mu-law audio, raw or wrapped in a playable WAV container.

Quick start (CLI):
    $ pip install mulawkit
    $ mulawkit info speech.wav
    $ mulawkit convert speech.wav --wav

Quick start (programmatic):
    from mulawkit import convert

    result = convert(open("speech.wav", "rb").read())
    print(result.metadata.duration_seconds)
    open("speech.ulaw", "wb").write(result.encoded)
"""

__version__ = "0.1.0"

# Core
from mulawkit.config import ConverterConfig, load_config
from mulawkit.converter import (
    ConversionContext,
    convert,
    convert_async,
    decode,
    decode_to_wav,
    encode,
    encode_async,
    iter_conversion,
    prepare,
    read_metadata,
    stream_conversion,
)
from mulawkit.progress import ProgressReporter

# Models and events
from mulawkit.core.models import AudioMetadata, ConversionResult, WavHeaderInfo
from mulawkit.core.events import (
    ConversionCompleted,
    ConversionEvent,
    ConversionFailed,
    EventType,
    ProgressEvent,
)

# Errors
from mulawkit.core.errors import (
    BoundsError,
    ConversionCancelled,
    ConversionError,
    DataChunkNotFoundError,
    FormatError,
    MissingFmtChunkError,
    NotRiffError,
    NotWaveError,
    UnsupportedFormatError,
)

# Audio
from mulawkit.audio.codecs import mulaw_decode_sample, mulaw_encode_sample
from mulawkit.audio.resampler import Resampler, SampleWindow
from mulawkit.audio.validation import validate
from mulawkit.audio.wav import build_header, parse_wav_header

__all__ = [
    # Core
    "ConverterConfig",
    "load_config",
    "ConversionContext",
    "convert",
    "convert_async",
    "decode",
    "decode_to_wav",
    "encode",
    "encode_async",
    "iter_conversion",
    "prepare",
    "read_metadata",
    "stream_conversion",
    "ProgressReporter",
    # Models and events
    "AudioMetadata",
    "ConversionResult",
    "WavHeaderInfo",
    "ConversionEvent",
    "ConversionCompleted",
    "ConversionFailed",
    "EventType",
    "ProgressEvent",
    # Errors
    "ConversionError",
    "FormatError",
    "NotRiffError",
    "NotWaveError",
    "MissingFmtChunkError",
    "DataChunkNotFoundError",
    "UnsupportedFormatError",
    "BoundsError",
    "ConversionCancelled",
    # Audio
    "mulaw_encode_sample",
    "mulaw_decode_sample",
    "Resampler",
    "SampleWindow",
    "validate",
    "build_header",
    "parse_wav_header",
]
