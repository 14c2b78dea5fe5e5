from __future__ import annotations

from typing import BinaryIO, Iterable, Iterator, Optional, Tuple
import logging
import os
import sys
import numpy as np
from numpy.typing import NDArray
import soundfile as sf

from .errors import TapeIOError

logger = logging.getLogger(__name__)

STDIN_NAME = "<stdin>"
STDOUT_NAME = "<stdout>"
CHUNK_SIZE = 4096


def _is_std(path: Optional[str]) -> bool:
    return path is None or path == "-"


def display_name(path: Optional[str], default: str) -> str:
    return default if _is_std(path) else str(path)


def open_input(path: Optional[str]) -> BinaryIO:
    """Open the byte source; None or "-" selects standard input."""
    if _is_std(path):
        return sys.stdin.buffer
    try:
        return open(path, "rb")
    except OSError as e:
        raise TapeIOError("open", str(path), e) from e


def open_output(path: Optional[str]) -> BinaryIO:
    """Open the raw sample sink; None or "-" selects standard output."""
    if _is_std(path):
        return sys.stdout.buffer
    try:
        return open(path, "wb")
    except OSError as e:
        raise TapeIOError("open", str(path), e) from e


def read_chunks(stream: BinaryIO, chunk_size: int = CHUNK_SIZE, name: str = STDIN_NAME) -> Iterator[bytes]:
    """Yield successive chunks of `stream` until end of input.

    End of input is an empty read; any OSError is a read failure.
    """
    while True:
        try:
            chunk = stream.read(chunk_size)
        except OSError as e:
            raise TapeIOError("read", name, e) from e
        if not chunk:
            return
        yield chunk


def write_raw(sink: BinaryIO, chunks: Iterable[NDArray[np.uint8]], name: str = STDOUT_NAME) -> int:
    """Write sample arrays to `sink` as headerless unsigned bytes.

    Returns the number of samples written. Samples already written stay
    written if a later chunk fails.
    """
    total = 0
    try:
        for x in chunks:
            sink.write(np.asarray(x, dtype=np.uint8).tobytes())
            total += int(x.size)
        sink.flush()
    except OSError as e:
        raise TapeIOError("write", name, e) from e
    return total


def detach_stdout() -> None:
    """Point the stdout file descriptor at os.devnull after a failed write.

    Interpreter shutdown flushes stdout again; on a closed pipe that would
    raise a second BrokenPipeError.
    """
    try:
        fd = sys.stdout.fileno()
    except (AttributeError, OSError, ValueError):
        return
    devnull = os.open(os.devnull, os.O_WRONLY)
    os.dup2(devnull, fd)
    os.close(devnull)


def _u8_to_i16(x: NDArray[np.uint8]) -> NDArray[np.int16]:
    # libsndfile maps int16 to PCM_U8 as (v >> 8) + 128, so this is lossless
    return ((x.astype(np.int16) - 128) << 8).astype(np.int16)


def write_wav(path: str, chunks: Iterable[NDArray[np.uint8]], sample_rate_hz: int) -> int:
    """Write sample arrays to a mono 8-bit unsigned WAV file at `path`.

    The samples are identical to the raw output; only the RIFF header is added.
    """
    try:
        f = sf.SoundFile(path, mode="w", samplerate=int(sample_rate_hz), channels=1, format="WAV", subtype="PCM_U8")
    except (OSError, RuntimeError) as e:
        raise TapeIOError("open", path, e) from e
    total = 0
    with f:
        try:
            for x in chunks:
                f.write(_u8_to_i16(np.asarray(x, dtype=np.uint8)))
                total += int(x.size)
        except (OSError, RuntimeError) as e:
            raise TapeIOError("write", path, e) from e
    logger.debug("wrote %d samples to %s", total, path)
    return total


def read_wav_u8(path: str) -> Tuple[NDArray[np.uint8], int]:
    """Return the unsigned 8-bit samples and sample rate of a mono WAV file."""
    data, fs = sf.read(path, dtype="int16", always_2d=False)
    if data.ndim == 2:
        data = data[:, 0]
    samples = ((data.astype(np.int32) >> 8) + 128).astype(np.uint8)
    return samples, int(fs)
