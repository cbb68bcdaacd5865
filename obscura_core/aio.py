"""
Coroutine API for event-loop callers.

Key derivation dominates the cost of every crypto call, and image decoding
and encoding block on Pillow, so these are pushed to a worker thread with
asyncio.to_thread. Each call works on its own values; there is no shared
state and no cancellation (a cancelled await leaves the worker running to
completion and the result is dropped).

Example Usage:
    >>> obscura = AsyncObscura()
    >>> packet = await obscura.encrypt("secret", "password")
    >>> pixels = await obscura.load_image("cover.png")
    >>> marked = await obscura.add_watermark(pixels, "(c) ACME")
    >>> await obscura.save_image(marked, "marked.png")
"""

import asyncio
import os
from typing import Optional, Union

from .crypto import CryptoConfig, CryptoPacker, DecryptedFile, FileMetadata
from .crypto.provider import CryptoProvider
from .stego import ExtractedWatermark, ImageStego, PixelBuffer, WatermarkCodec
from .stego.pixels import ImageInput


class AsyncObscura:
    """Async facade over CryptoPacker, ImageStego and WatermarkCodec."""

    def __init__(self, config: Optional[CryptoConfig] = None, provider: Optional[CryptoProvider] = None):
        self.crypto = CryptoPacker(config, provider)
        self.stego = ImageStego(self.crypto)
        self.watermarks = WatermarkCodec(self.crypto)

    # crypto

    async def encrypt(self, plaintext: str, password: str) -> str:
        return await asyncio.to_thread(self.crypto.encrypt, plaintext, password)

    async def decrypt(self, packet: str, password: str) -> str:
        return await asyncio.to_thread(self.crypto.decrypt, packet, password)

    async def encrypt_file(self, data: bytes, password: str, metadata: FileMetadata) -> bytes:
        return await asyncio.to_thread(self.crypto.encrypt_file, data, password, metadata)

    async def decrypt_file(self, packet: Union[str, bytes], password: str) -> DecryptedFile:
        return await asyncio.to_thread(self.crypto.decrypt_file, packet, password)

    # image I/O

    async def load_image(self, source: ImageInput) -> PixelBuffer:
        return await asyncio.to_thread(PixelBuffer.load, source)

    async def save_image(self, pixels: PixelBuffer, destination: Union[str, os.PathLike]) -> None:
        await asyncio.to_thread(pixels.save, destination)

    # stego

    async def hide_message(self, pixels: PixelBuffer, message: str, password: Optional[str] = None) -> PixelBuffer:
        return await asyncio.to_thread(self.stego.encode, pixels, message, password)

    async def reveal_message(self, pixels: PixelBuffer, password: Optional[str] = None) -> str:
        return await asyncio.to_thread(self.stego.decode, pixels, password)

    async def add_watermark(self, pixels: PixelBuffer, watermark: str, password: Optional[str] = None) -> PixelBuffer:
        return await asyncio.to_thread(self.watermarks.add, pixels, watermark, password)

    async def extract_watermark(self, pixels: PixelBuffer, password: Optional[str] = None) -> ExtractedWatermark:
        return await asyncio.to_thread(self.watermarks.extract, pixels, password)
