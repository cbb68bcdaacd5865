"""
Pixel buffers and image I/O.

A PixelBuffer is a flat uint8 array of RGBA groups plus its dimensions. It
is the only thing the codecs see; decoding and encoding image files is done
here with Pillow. Only lossless output (PNG) keeps embedded bits intact.
"""

import base64
import io
import logging
import os
from dataclasses import dataclass
from typing import BinaryIO, Union

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)

CHANNELS = 4          # R, G, B, A
USABLE_CHANNELS = 3   # alpha is never written

ImageInput = Union[str, os.PathLike, bytes, BinaryIO, Image.Image]


@dataclass
class PixelBuffer:
    """
    RGBA pixel data owned by a single embed or extract call.

    Attributes:
        data: Flat uint8 array of length width * height * 4
        width: Image width in pixels
        height: Image height in pixels
    """

    data: np.ndarray
    width: int
    height: int

    def __post_init__(self):
        self.data = np.asarray(self.data, dtype=np.uint8).reshape(-1)
        if self.data.size != self.width * self.height * CHANNELS:
            raise ValueError(
                f"Pixel data has {self.data.size} values, expected "
                f"{self.width}x{self.height}x{CHANNELS}"
            )

    @classmethod
    def blank(cls, width: int, height: int, fill: int = 0) -> "PixelBuffer":
        """Opaque buffer with every color channel set to `fill`."""
        data = np.full((height, width, CHANNELS), fill, dtype=np.uint8)
        data[:, :, 3] = 255
        return cls(data.reshape(-1), width, height)

    @classmethod
    def from_image(cls, image: Image.Image) -> "PixelBuffer":
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        width, height = image.size
        arr = np.array(image, dtype=np.uint8)
        return cls(arr.reshape(-1), width, height)

    @classmethod
    def load(cls, source: ImageInput) -> "PixelBuffer":
        """
        Decode an image from a path, raw bytes, a file object or a PIL image.

        Raises:
            PIL.UnidentifiedImageError: If the data is not a readable image
        """
        if isinstance(source, Image.Image):
            return cls.from_image(source)
        if isinstance(source, (bytes, bytearray)):
            source = io.BytesIO(source)

        with Image.open(source) as img:
            img.load()
            buffer = cls.from_image(img)
        logger.debug(f"Loaded {buffer.width}x{buffer.height} image")
        return buffer

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(self.data.copy(), self.width, self.height)

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def force_opaque(self) -> None:
        self.data.reshape(-1, CHANNELS)[:, 3] = 255

    def to_image(self) -> Image.Image:
        arr = self.data.reshape(self.height, self.width, CHANNELS)
        return Image.fromarray(arr)

    def to_png_bytes(self) -> bytes:
        bio = io.BytesIO()
        self.to_image().save(bio, format="PNG")
        return bio.getvalue()

    def save(self, destination: Union[str, os.PathLike, BinaryIO]) -> None:
        """Write the buffer as a PNG file."""
        self.to_image().save(destination, format="PNG")
        logger.debug(f"Saved {self.width}x{self.height} image")

    def to_data_url(self) -> str:
        return "data:image/png;base64," + base64.b64encode(self.to_png_bytes()).decode("ascii")
