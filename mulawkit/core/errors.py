"""Error taxonomy for mulawkit.

Every failure raised by the conversion core derives from ConversionError and
carries a stable ``code`` string, so hosts (CLI, HTTP server) can report it
without inspecting the exception type. All errors are deterministic: the same
input always fails the same way, so nothing here is retried.
"""

from __future__ import annotations


class ConversionError(Exception):
    """Base class for everything the conversion core raises."""

    code: str = "conversion_error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.__class__.__doc__ or self.code)
        self.message = str(self)


# ---------------------------------------------------------------------------
# Container errors
# ---------------------------------------------------------------------------


class FormatError(ConversionError):
    """The buffer is not a well-formed RIFF/WAVE container."""

    code = "format_error"


class NotRiffError(FormatError):
    """Not a valid RIFF file."""

    code = "not_riff"


class NotWaveError(FormatError):
    """Not a valid WAVE file."""

    code = "not_wave"


class MissingFmtChunkError(FormatError):
    """fmt chunk not found."""

    code = "fmt_not_found"


class DataChunkNotFoundError(FormatError):
    """Data chunk not found."""

    code = "data_not_found"


# ---------------------------------------------------------------------------
# Validation / bounds / lifecycle
# ---------------------------------------------------------------------------


class UnsupportedFormatError(ConversionError):
    """The container parsed, but its audio format cannot be converted.

    Args:
        reason: Which check failed ("non-PCM", "bit depth", "channel count",
            "sample rate" or "non-canonical fmt chunk").
        detail: Human readable explanation.
    """

    code = "unsupported_format"

    def __init__(self, reason: str, detail: str = "") -> None:
        self.reason = reason
        super().__init__(detail or f"Unsupported format: {reason}")


class BoundsError(ConversionError):
    """A chunk or sample read would run past the end of the buffer."""

    code = "out_of_bounds"


class ConversionCancelled(ConversionError):
    """The conversion was cancelled between batches."""

    code = "cancelled"
