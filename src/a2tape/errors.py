from __future__ import annotations

from typing import Optional


class TapeError(Exception):
    """Base class for errors raised by a2tape."""


class TapeIOError(TapeError):
    """Opening, reading or writing a byte source or sample sink failed.

    `path` is the file name, or "<stdin>"/"<stdout>" for the standard streams.
    """

    def __init__(self, action: str, path: str, cause: Optional[BaseException] = None) -> None:
        self.action = action
        self.path = path
        self.cause = cause
        reason = getattr(cause, "strerror", None) or (str(cause) if cause is not None else "")
        msg = f"Failed to {action} {path}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class EncoderStateError(TapeError):
    """An encoder step was called out of order."""
