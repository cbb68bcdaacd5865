# least-significant-bit embed/extract over the R, G, B channels of an RGBA buffer
#
# Bit i of the payload lands in channel (i % 3) of pixel (i // 3). Embedding
# and extraction share `_channel_indices`, so both walk the channels in the
# same order.

import logging

import numpy as np

from .pixels import CHANNELS, USABLE_CHANNELS, PixelBuffer

logger = logging.getLogger(__name__)


def _channel_indices(start: int, count: int) -> np.ndarray:
    # positions of bits [start, start + count) inside the flat RGBA array
    pos = np.arange(start, start + count, dtype=np.int64)
    return (pos // USABLE_CHANNELS) * CHANNELS + (pos % USABLE_CHANNELS)


def channel_capacity(pixels: PixelBuffer) -> int:
    return pixels.pixel_count * USABLE_CHANNELS


def embed_bits(pixels: PixelBuffer, bits: np.ndarray) -> PixelBuffer:
    """
    Write one bit into the LSB of each R, G, B channel, in order.

    Returns a new buffer; `pixels` is left untouched. Channels beyond the
    payload and every alpha channel keep their values.
    """
    if bits.size > channel_capacity(pixels):
        raise ValueError("Payload too large for cover.")

    out = pixels.copy()
    idx = _channel_indices(0, bits.size)
    out.data[idx] = (out.data[idx] & 0xFE) | (bits.astype(np.uint8) & 1)
    logger.debug(f"Embedded {bits.size} bits into {pixels.width}x{pixels.height} buffer")
    return out


def extract_bits(pixels: PixelBuffer, count: int, start: int = 0) -> np.ndarray:
    """Read `count` LSBs beginning at bit position `start`."""
    if start < 0 or count < 0 or start + count > channel_capacity(pixels):
        raise ValueError("Requested bits exceed capacity.")
    idx = _channel_indices(start, count)
    return (pixels.data[idx] & 1).astype(np.uint8)
