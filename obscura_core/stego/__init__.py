"""
Obscura Steganography Package - Hidden Data in Image Pixels.

This package hides text in the least significant bits of the R, G and B
channels of an image, either as a plain (optionally encrypted) message or as
a signed watermark record.

Modules:
    bits: 16-bit-per-unit text codec
    pixels: RGBA pixel buffers and Pillow image I/O
    capacity: Capacity arithmetic and validation
    lsb: Channel-order LSB embedding and extraction
    frame: 32-bit length header framing
    image: Hidden messages (ImageStego)
    watermark: Invisible watermarks (WatermarkCodec)

Usage:
    >>> from obscura_core.stego import ImageStego, PixelBuffer
    >>> stego = ImageStego()
    >>> pixels = stego.encode(PixelBuffer.load("cover.png"), "secret", password="pw")
    >>> pixels.save("stego.png")
    >>> stego.decode_file("stego.png", password="pw")
    'secret'
"""

from .capacity import CapacityPlanner
from .frame import FrameCodec
from .image import ImageStego
from .pixels import PixelBuffer
from .watermark import ExtractedWatermark, WatermarkCodec, WatermarkRecord

__all__ = [
    "CapacityPlanner",
    "ExtractedWatermark",
    "FrameCodec",
    "ImageStego",
    "PixelBuffer",
    "WatermarkCodec",
    "WatermarkRecord",
]
