"""
Length framing for hidden payloads.

    [ HEADER: 32-bit big-endian bit count ] || [ PAYLOAD BITS ]

The header is validated on extraction only for plausibility: a length of
zero, or one longer than the bits the image can still hold after the header,
is rejected. Random LSBs that happen to produce a plausible length are not
detected here; the watermark signature check catches those.
"""

import logging
import struct

import numpy as np

from ..errors import InvalidHeaderError
from . import lsb
from .bits import bits_to_bytes, bytes_to_bits
from .capacity import HEADER_BITS, CapacityPlanner
from .pixels import PixelBuffer

logger = logging.getLogger(__name__)

MAX_PAYLOAD_BITS = 0xFFFFFFFF


class FrameCodec:
    """Adds and removes the 32-bit length header around payload bits."""

    HEADER_BITS = HEADER_BITS

    @staticmethod
    def header(length: int) -> np.ndarray:
        if not 0 <= length <= MAX_PAYLOAD_BITS:
            raise ValueError(f"Payload of {length} bits cannot be framed")
        return bytes_to_bits(struct.pack(">I", length))

    def frame(self, payload_bits: np.ndarray) -> np.ndarray:
        return np.concatenate([self.header(payload_bits.size), payload_bits.astype(np.uint8)])

    def embed(self, pixels: PixelBuffer, payload_bits: np.ndarray) -> PixelBuffer:
        """
        Frame the payload, check capacity, then write it.

        Raises:
            CapacityExceededError: Before any channel is modified
        """
        framed = self.frame(payload_bits)
        CapacityPlanner.for_pixels(pixels).require(framed.size)
        return lsb.embed_bits(pixels, framed)

    def read_length(self, pixels: PixelBuffer) -> int:
        """
        Read and bound-check the header.

        Raises:
            InvalidHeaderError: If the length is zero or cannot fit the image
        """
        planner = CapacityPlanner.for_pixels(pixels)
        if planner.available_bits < self.HEADER_BITS:
            raise InvalidHeaderError(0, planner.max_payload_bits)

        header_bits = lsb.extract_bits(pixels, self.HEADER_BITS)
        (length,) = struct.unpack(">I", bits_to_bytes(header_bits))

        if length <= 0 or length > planner.max_payload_bits:
            logger.warning(f"Rejected implausible header length {length} (max {planner.max_payload_bits})")
            raise InvalidHeaderError(length, planner.max_payload_bits)
        return length

    def unframe(self, pixels: PixelBuffer) -> np.ndarray:
        """Return exactly the payload bits announced by the header."""
        length = self.read_length(pixels)
        logger.debug(f"Header announces {length} payload bits")
        return lsb.extract_bits(pixels, length, start=self.HEADER_BITS)
