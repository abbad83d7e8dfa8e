"""Image buffer model."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ImageSource(Enum):
    """Where the bytes of an ImageBuffer came from."""

    SERVICE = "service"
    """Bitmap returned verbatim by the remote service."""

    ENCODED = "encoded"
    """Raw pixels from the service, encoded locally."""

    PLACEHOLDER = "placeholder"
    """Synthetic gradient (demo / fallback path)."""


@dataclass(frozen=True)
class ImageBuffer:
    """
    Complete image file contents plus declared geometry.

    Immutable once constructed. Handed to the image writer, which is the
    last owner of the bytes.
    """

    data: bytes
    width: int
    height: int
    source: ImageSource
    bits_per_pixel: int = 24

    @property
    def size(self) -> int:
        return len(self.data)
