"""Takeover payloads: content a window displays in place of the terminal."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TypeAlias

IMAGE_PREFIX = "image:"


class InvalidTakeoverError(ValueError):
    """The takeover payload does not follow a supported grammar."""


@dataclass(frozen=True, slots=True)
class ImageTakeover:
    """Display the image stored at ``path`` on the host file system."""

    path: Path


TakeoverEvent: TypeAlias = ImageTakeover


def parse_takeover(msg: str) -> TakeoverEvent:
    """Parse a takeover payload.

    Expected format: ``image:<absolute path>``, where the path names an
    existing regular file.
    """
    if not msg.startswith(IMAGE_PREFIX):
        raise InvalidTakeoverError(f"unsupported takeover payload {msg!r}")

    path = Path(msg.removeprefix(IMAGE_PREFIX))
    # TODO: reject non-image files here instead of leaving it to the decoder.
    if not path.is_absolute():
        raise InvalidTakeoverError(f"takeover image path must be absolute: {str(path)!r}")
    if not path.is_file():
        raise InvalidTakeoverError(f"takeover image does not exist: {str(path)!r}")
    return ImageTakeover(path)


__all__ = [
    "IMAGE_PREFIX",
    "ImageTakeover",
    "InvalidTakeoverError",
    "TakeoverEvent",
    "parse_takeover",
]
