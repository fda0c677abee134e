"""
cwdecode: Morse (CW) audio to text.

    from cwdecode import decode_file, CWDecoder
    print(decode_file("recording.wav").text)
"""

__version__ = "0.3.0"

from .config import DecoderConfig, load_config, save_config
from .decoder import CWDecoder, DecodeResult, decode_file, decode_samples
from .errors import (
    AudioFileNotFound,
    CaptureError,
    ConfigError,
    CWDecodeError,
    InvalidFormat,
    UnsupportedEncoding,
)
from .sample_buffer import SampleBuffer
from .segmenter import Run

__all__ = [
    "__version__",
    "AudioFileNotFound",
    "CaptureError",
    "ConfigError",
    "CWDecodeError",
    "CWDecoder",
    "DecodeResult",
    "DecoderConfig",
    "InvalidFormat",
    "Run",
    "SampleBuffer",
    "UnsupportedEncoding",
    "decode_file",
    "decode_samples",
    "load_config",
    "save_config",
]
