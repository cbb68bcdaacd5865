"""
Image Steganography Module.

This module hides text messages in the least significant bits of an image's
color channels and recovers them. A message may optionally be encrypted with
a password before it is embedded; the hidden payload is then the textual
cipher packet produced by the CryptoPacker.

Payload layout inside the R, G, B LSBs:
    [ 32-bit length in bits ] || [ 16 bits per UTF-16 code unit ]

Features:
    - LSB embedding, one bit per color channel, alpha untouched
    - Optional AES-256-GCM encryption of the message
    - Capacity calculation and validation before any pixel is changed
    - File helpers that load any Pillow-readable image and write PNG
"""

import logging
import os
from typing import Optional, Union

from ..crypto import CryptoPacker
from ..errors import StegoError
from . import bits
from .capacity import CapacityPlanner
from .frame import FrameCodec
from .pixels import ImageInput, PixelBuffer

logger = logging.getLogger(__name__)


class ImageStego:
    """
    Image steganography handler for hidden text messages.

    Attributes:
        crypto: Packer used when a password is given

    Example:
        >>> stego = ImageStego()
        >>> cover = PixelBuffer.blank(100, 100)
        >>> stego_pixels = stego.encode(cover, "Secret message", password="secure")
        >>> stego.decode(stego_pixels, password="secure")
        'Secret message'
    """

    def __init__(self, crypto: Optional[CryptoPacker] = None, frame_codec: Optional[FrameCodec] = None):
        self.crypto = crypto or CryptoPacker()
        self.frames = frame_codec or FrameCodec()

    def capacity(self, pixels: PixelBuffer) -> CapacityPlanner:
        return CapacityPlanner.for_pixels(pixels)

    def encode(self, pixels: PixelBuffer, message: str, password: Optional[str] = None) -> PixelBuffer:
        """
        Hide a message in a copy of `pixels`.

        Args:
            pixels: Cover image
            message: Text to hide
            password: Encrypt the message first when given

        Returns:
            New PixelBuffer carrying the message

        Raises:
            StegoError: If the message is empty
            CapacityExceededError: If the framed payload does not fit
        """
        if not message:
            raise StegoError("Message must not be empty", code=1001)

        payload = message
        if password:
            payload = self.crypto.encrypt(message, password)

        result = self.frames.embed(pixels, bits.encode(payload))
        logger.info(
            f"Embedded {len(payload)} characters into {pixels.width}x{pixels.height} image"
            f" (encrypted={bool(password)})"
        )
        return result

    def decode(self, pixels: PixelBuffer, password: Optional[str] = None) -> str:
        """
        Recover a hidden message.

        Raises:
            InvalidHeaderError: If no plausible payload length is embedded
            MalformedPacketError: If a password is given but the payload is not a packet
            DecryptionFailedError: If the password is wrong
        """
        text = bits.decode(self.frames.unframe(pixels))
        logger.info(f"Extracted {len(text)} characters")

        if password:
            return self.crypto.decrypt(text, password)
        return text

    def encode_file(
        self,
        source: ImageInput,
        destination: Union[str, os.PathLike],
        message: str,
        password: Optional[str] = None,
    ) -> PixelBuffer:
        """Load a cover image, hide `message` and save the result as PNG."""
        result = self.encode(PixelBuffer.load(source), message, password)
        result.save(destination)
        return result

    def decode_file(self, source: ImageInput, password: Optional[str] = None) -> str:
        return self.decode(PixelBuffer.load(source), password)
