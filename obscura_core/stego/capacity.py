"""Embedding capacity of a pixel buffer."""

import logging

from ..errors import CapacityExceededError
from .bits import UNIT_BITS
from .pixels import USABLE_CHANNELS, PixelBuffer

logger = logging.getLogger(__name__)

HEADER_BITS = 32


class CapacityPlanner:
    """
    Decides whether a payload fits into an image.

    One bit is stored per R, G and B channel, so an image offers
    width * height * 3 bits, of which the first 32 hold the length header.

    Example:
        >>> planner = CapacityPlanner(10, 10)
        >>> planner.available_bits
        300
        >>> planner.can_embed(128)
        True
    """

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height

    @classmethod
    def for_pixels(cls, pixels: PixelBuffer) -> "CapacityPlanner":
        return cls(pixels.width, pixels.height)

    @property
    def available_bits(self) -> int:
        return self.width * self.height * USABLE_CHANNELS

    @property
    def max_payload_bits(self) -> int:
        """Bits left for the payload once the length header is stored."""
        return max(self.available_bits - HEADER_BITS, 0)

    @property
    def max_characters(self) -> int:
        """Longest message (in 16-bit units) a plain stego embed can hold."""
        return self.max_payload_bits // UNIT_BITS

    def can_embed(self, payload_bits: int) -> bool:
        return payload_bits <= self.available_bits

    def require(self, payload_bits: int) -> None:
        """
        Raise unless `payload_bits` (header included) fits.

        Raises:
            CapacityExceededError: Carries the needed and available bit counts
        """
        logger.debug(f"Capacity check: needed={payload_bits}, available={self.available_bits}")
        if not self.can_embed(payload_bits):
            raise CapacityExceededError(payload_bits, self.available_bits)
