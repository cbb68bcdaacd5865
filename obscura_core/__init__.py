"""
Obscura Core Package

Password-based encryption, LSB steganography and invisible watermarking.

Subpackages:
    crypto: Cipher packets for text and files, hashing
    stego: Hidden messages and watermarks in image pixels

Modules:
    errors: Exception hierarchy shared by all components
    aio: Coroutine wrappers for use inside an event loop
"""

from . import crypto
from . import stego
from .errors import (
    CapacityExceededError,
    CryptoError,
    DecryptionFailedError,
    EncryptionFailedError,
    InvalidHeaderError,
    MalformedPacketError,
    NoWatermarkFoundError,
    ObscuraError,
    PasswordRequiredError,
    StegoError,
)

__all__ = [
    "crypto",
    "stego",
    "CapacityExceededError",
    "CryptoError",
    "DecryptionFailedError",
    "EncryptionFailedError",
    "InvalidHeaderError",
    "MalformedPacketError",
    "NoWatermarkFoundError",
    "ObscuraError",
    "PasswordRequiredError",
    "StegoError",
]

__version__ = "1.0.0"
