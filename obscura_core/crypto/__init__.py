"""
Obscura Crypto Package.

Password-based authenticated encryption of text and files, and hashing.

Modules:
    provider: Pluggable primitives (PBKDF2, AES-GCM, digests, CSPRNG)
    packer: Cipher packet wire formats and the CryptoPacker
    source: ByteSource, the resolved form of text/bytes/file inputs

Usage:
    >>> from obscura_core.crypto import CryptoPacker
    >>> packer = CryptoPacker()
    >>> packet = packer.encrypt("secret", "password")
    >>> packer.decrypt(packet, "password")
    'secret'
"""

from .packer import (
    CipherPacket,
    CryptoConfig,
    CryptoPacker,
    DecryptedFile,
    FileMetadata,
    FilePacket,
)
from .provider import CryptographyProvider, CryptoProvider
from .source import ByteSource, SourceKind

__all__ = [
    "ByteSource",
    "CipherPacket",
    "CryptoConfig",
    "CryptoPacker",
    "CryptoProvider",
    "CryptographyProvider",
    "DecryptedFile",
    "FileMetadata",
    "FilePacket",
    "SourceKind",
]
