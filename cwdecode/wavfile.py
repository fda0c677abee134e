"""
WAV file collaborator: path -> (sample_rate, mono float samples).

Parsing is scipy.io.wavfile's; this module only normalises sample types to
[-1, 1] and turns failures into the typed errors from cwdecode.errors.

Supported: mono PCM at 8-bit unsigned, 16-bit, 24/32-bit int, and 32/64-bit
float. Multi-channel files are rejected.
"""

from __future__ import annotations

import os
from typing import Tuple

import numpy as np
from scipy.io import wavfile

from .errors import AudioFileNotFound, InvalidFormat, UnsupportedEncoding

# full-scale divisor per integer sample type
_FULL_SCALE = {
    np.dtype(np.int16): 32768.0,
    np.dtype(np.int32): 2147483648.0,
}


def read_wav(path: str) -> Tuple[int, np.ndarray]:
    if not os.path.isfile(path):
        raise AudioFileNotFound(f"{path}: file not found")
    try:
        sample_rate, data = wavfile.read(path)
    except ValueError as e:
        raise InvalidFormat(f"{path}: {e}") from e
    except EOFError as e:
        raise InvalidFormat(f"{path}: truncated file ({e})") from e
    except OSError as e:
        raise InvalidFormat(f"{path}: cannot read ({e})") from e

    if data.ndim > 1 and data.shape[1] != 1:
        raise UnsupportedEncoding(f"{path}: {data.shape[1]} channels, only mono is supported")
    data = data.reshape(-1)
    if len(data) == 0:
        raise InvalidFormat(f"{path}: no audio samples")
    if sample_rate <= 0:
        raise InvalidFormat(f"{path}: invalid sample rate {sample_rate}")

    return int(sample_rate), to_float(data, path)


def to_float(data: np.ndarray, source: str = "samples") -> np.ndarray:
    if data.dtype in _FULL_SCALE:
        return data.astype(np.float64) / _FULL_SCALE[data.dtype]
    if data.dtype == np.uint8:
        return (data.astype(np.float64) - 128.0) / 128.0
    if data.dtype in (np.float32, np.float64):
        return data.astype(np.float64)
    raise UnsupportedEncoding(f"{source}: unsupported sample type {data.dtype}")


def write_wav(path: str, samples, sample_rate: int) -> None:
    """Write 16-bit mono PCM, clipping to full scale."""
    clipped = np.clip(np.asarray(samples, dtype=np.float64), -1.0, 1.0)
    pcm = (clipped * 32767.0).astype(np.int16)
    wavfile.write(path, int(sample_rate), pcm)
