"""Raster targets the renderer writes into."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

import numpy as np
import PIL.Image

BYTES_PER_PIXEL = 4


class Surface(Protocol):
    """A caller-owned RGBA raster.

    ``buffer`` holds ``width * height * 4`` bytes in row-major RGBA order.
    The renderer fills it and then calls :meth:`commit` once per render.
    """

    width: int
    height: int
    buffer: bytearray

    def commit(self) -> None:
        ...


class ImageSurface:
    """An in-memory surface whose commits produce a Pillow image."""

    def __init__(self, width: int, height: int) -> None:
        self.width = int(width)
        self.height = int(height)
        self.buffer = bytearray(max(self.width, 0) * max(self.height, 0) * BYTES_PER_PIXEL)
        self.image: PIL.Image.Image | None = None
        self.commits = 0

    def __repr__(self) -> str:
        return f"{type(self).__name__}(width={self.width!r}, height={self.height!r})"

    def commit(self) -> None:
        self.image = PIL.Image.frombytes("RGBA", (self.width, self.height), bytes(self.buffer))
        self.commits += 1

    def to_array(self) -> np.ndarray:
        """Return a ``(height, width, 4)`` ``uint8`` copy of the buffer."""

        return np.frombuffer(bytes(self.buffer), dtype=np.uint8).reshape(self.height, self.width, BYTES_PER_PIXEL)

    def save(self, path: Path | str, image_format: str | None = None) -> Path:
        """Write the last committed image to ``path``, creating parent directories.

        ``image_format`` is a file extension such as ``"png"`` or ``"jpg"``;
        by default it is taken from the suffix of ``path``. Formats without an
        alpha channel receive an RGB copy.
        """

        if self.image is None:
            raise ValueError("surface has not been committed yet")
        output_path = Path(path)
        pil_format = _pil_format_name(image_format or output_path.suffix.lstrip("."))
        image = self.image
        if pil_format in _OPAQUE_FORMATS:
            image = image.convert("RGB")
        output_path.parent.mkdir(parents=True, exist_ok=True)
        image.save(str(output_path), format=pil_format)
        return output_path


_OPAQUE_FORMATS = {"JPEG", "BMP"}


def _pil_format_name(ext: str) -> str:
    upper = ext.upper()
    if upper == "JPG":
        return "JPEG"
    if upper == "TIF":
        return "TIFF"
    return upper
