"""
Exception hierarchy for the Verdict streamer.

Decoder errors are raised synchronously while a WAV file is parsed or
converted. Session errors are raised by the live client or delivered to
its ``error`` listeners.
"""


class VerdictError(Exception):
    """Base class for every error raised by this package."""


# -----------------------------------------------------------
# Audio decoding
# -----------------------------------------------------------


class AudioDecodeError(VerdictError):
    """Raised when a WAV buffer cannot be turned into target PCM."""


class FormatError(AudioDecodeError):
    """Missing or invalid RIFF/WAVE container markers."""


class UnsupportedFormatError(AudioDecodeError):
    """Non-PCM audio format tag or unsupported bit depth."""


class MalformedFileError(AudioDecodeError):
    """Missing, truncated or out-of-order chunks."""


# -----------------------------------------------------------
# Live session
# -----------------------------------------------------------


class LiveSessionError(VerdictError):
    """Raised by the realtime session client."""


class SessionNotReadyError(LiveSessionError):
    """An operation was attempted outside the READY state."""


class TransportError(LiveSessionError):
    """Connection-level failure of the underlying transport."""


class MessageParseError(LiveSessionError):
    """An inbound server payload could not be parsed."""
