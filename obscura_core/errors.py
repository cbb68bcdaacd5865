"""
Obscura Error Hierarchy.

Every failure raised by the crypto packer and the steganography codecs derives
from ObscuraError, which carries a numeric code and a details dictionary so
callers (CLI, async facade) can report failures without parsing messages.

Code ranges:
    1000-1999: steganography (capacity, header, watermark)
    3000-3999: encryption
    4000-4999: decryption and packet parsing
    5000-5999: hashing
"""

from typing import Any, Dict, Optional


class ObscuraError(Exception):
    """Base exception for all Obscura failures."""

    def __init__(self, message: str, code: Optional[int] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self) -> str:
        base = f"{type(self).__name__}: {self.message}"
        if self.code:
            base += f" (Code: {self.code})"
        return base


# -- crypto -------------------------------------------------------------------

class CryptoError(ObscuraError):
    """Raised when a cryptographic operation fails."""


class EncryptionFailedError(CryptoError):
    """Raised when the crypto provider cannot encrypt the given input."""

    def __init__(self, reason: str):
        super().__init__(f"Encryption failed: {reason}", code=3002)


class MalformedPacketError(CryptoError):
    """Raised when a cipher packet does not have the expected shape."""

    def __init__(self, message: str, expected: Optional[int] = None, found: Optional[int] = None):
        details = {}
        if expected is not None:
            details = {"expected": expected, "found": found}
        super().__init__(message, code=4010, details=details)


class DecryptionFailedError(CryptoError):
    """
    Raised when authenticated decryption fails.

    The message is identical whether the password was wrong, the ciphertext
    was modified, or the recovered plaintext could not be interpreted.
    """

    MESSAGE = "Decryption failed. Incorrect password or corrupted data."

    def __init__(self):
        super().__init__(self.MESSAGE, code=4001)


# -- steganography ------------------------------------------------------------

class StegoError(ObscuraError):
    """Raised for steganography embedding and extraction errors."""


class CapacityExceededError(StegoError):
    """Raised before any pixel is written when the payload does not fit."""

    def __init__(self, needed: int, available: int):
        super().__init__(
            f"Message too long for this image. Needed: {needed} bits, Available: {available} bits.",
            code=1002,
            details={"needed": needed, "available": available},
        )
        self.needed = needed
        self.available = available


class InvalidHeaderError(StegoError):
    """Raised when the embedded length header is implausible."""

    def __init__(self, length: int, max_bits: int):
        super().__init__(
            "No hidden data found or corrupted header",
            code=1021,
            details={"length": length, "max_bits": max_bits},
        )
        self.length = length
        self.max_bits = max_bits


class NoWatermarkFoundError(StegoError):
    """Raised when the extracted payload lacks the watermark signature."""

    def __init__(self):
        super().__init__("No valid Obscura watermark found", code=1030)


class PasswordRequiredError(StegoError):
    """Raised when a protected watermark is extracted without a password."""

    def __init__(self):
        super().__init__(
            "This watermark is password protected. Please enter the password.",
            code=1031,
        )
