"""Exception types raised by the I/O collaborators and the config layer.

The decoding pipeline itself never raises on sample content; these only
surface from file reading, configuration and live capture.
"""


class CWDecodeError(Exception):
    """Base class for every error raised by cwdecode."""


class AudioFileNotFound(CWDecodeError, FileNotFoundError):
    pass


class InvalidFormat(CWDecodeError, ValueError):
    pass


class UnsupportedEncoding(InvalidFormat):
    """Valid container, but a sample type or layout we do not decode."""


class ConfigError(CWDecodeError, ValueError):
    pass


class CaptureError(CWDecodeError, RuntimeError):
    pass
