"""
Obscura Crypto Packer - password-based authenticated encryption.

This module turns a password and a plaintext into a self-contained, textual
cipher packet and back. Keys are derived with PBKDF2-HMAC-SHA-256 and data is
sealed with AES-256-GCM, so any modification of the packet or a wrong
password is detected on decryption.

Wire formats:
    Text packet:  <b64 salt>:<b64 iv>:<b64 ciphertext+tag>
    File packet:  <b64 salt>:<b64 iv>:<b64 encrypted metadata>:<b64 encrypted data>

The file packet (".obs" file) encrypts its JSON metadata and its data with
the same derived key and the same IV. Existing files depend on this layout,
so it is kept as-is even though a fresh IV per region would be preferable:
the shared nonce is only tolerable because both plaintexts come from the
same caller in the same call.

Example Usage:
    >>> packer = CryptoPacker()
    >>> packet = packer.encrypt("HELLO_WORLD", "test-pass")
    >>> packer.decrypt(packet, "test-pass")
    'HELLO_WORLD'
"""

import base64
import binascii
import json
import logging
import mimetypes
import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..errors import (
    CryptoError,
    DecryptionFailedError,
    EncryptionFailedError,
    MalformedPacketError,
)
from .provider import CryptographyProvider, CryptoProvider
from .source import ByteSource

logger = logging.getLogger(__name__)

DELIMITER = ":"
DEFAULT_MIME_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class CryptoConfig:
    """
    Parameters for key derivation and encryption.

    Attributes:
        algorithm: AEAD algorithm name (informational, always AES-GCM)
        key_length: Derived key size in bits
        hash_name: PBKDF2 hash function
        iterations: PBKDF2 iteration count
        salt_length: Salt size in bytes
        iv_length: GCM nonce size in bytes
    """

    algorithm: str = "AES-GCM"
    key_length: int = 256
    hash_name: str = "SHA-256"
    iterations: int = 100_000
    salt_length: int = 16
    iv_length: int = 12


def _b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _b64decode(segment: str) -> bytes:
    try:
        return base64.b64decode(segment, validate=True)
    except (binascii.Error, ValueError):
        raise MalformedPacketError("Invalid format. Packet segments must be base64.") from None


def _as_size(value) -> int:
    # metadata is authenticated but may still come from another writer
    try:
        return int(value or 0)
    except (TypeError, ValueError, OverflowError):
        return 0


def _split(packet: Union[str, bytes], expected: int, shape: str):
    if isinstance(packet, (bytes, bytearray)):
        try:
            packet = bytes(packet).decode("ascii")
        except UnicodeDecodeError:
            raise MalformedPacketError(f"Invalid format. Expected '{shape}'.") from None

    parts = packet.strip().split(DELIMITER)
    if len(parts) != expected:
        raise MalformedPacketError(
            f"Invalid format. Expected '{shape}'.",
            expected=expected,
            found=len(parts),
        )
    return [_b64decode(part) for part in parts]


@dataclass(frozen=True)
class CipherPacket:
    """Salt, IV and sealed ciphertext of one text encryption."""

    salt: bytes
    iv: bytes
    ciphertext: bytes

    SEGMENTS = 3

    @classmethod
    def parse(cls, packet: Union[str, bytes]) -> "CipherPacket":
        salt, iv, ciphertext = _split(packet, cls.SEGMENTS, "salt:iv:ciphertext")
        return cls(salt, iv, ciphertext)

    def serialize(self) -> str:
        return DELIMITER.join(_b64encode(part) for part in (self.salt, self.iv, self.ciphertext))


@dataclass(frozen=True)
class FilePacket:
    """Salt, IV, sealed metadata and sealed data of one file encryption."""

    salt: bytes
    iv: bytes
    metadata: bytes
    data: bytes

    SEGMENTS = 4

    @classmethod
    def parse(cls, packet: Union[str, bytes]) -> "FilePacket":
        salt, iv, metadata, data = _split(packet, cls.SEGMENTS, "salt:iv:metadata:data")
        return cls(salt, iv, metadata, data)

    def serialize(self) -> str:
        return DELIMITER.join(
            _b64encode(part) for part in (self.salt, self.iv, self.metadata, self.data)
        )


@dataclass
class FileMetadata:
    """
    Description of an encrypted file, stored encrypted inside the packet.

    Attributes:
        filename: Original file name
        mime_type: MIME type ("type" on the wire)
        size: Original size in bytes
        timestamp: Encryption time in epoch milliseconds
    """

    filename: str
    mime_type: str = DEFAULT_MIME_TYPE
    size: int = 0
    timestamp: Optional[int] = field(default_factory=lambda: int(time.time() * 1000))

    @classmethod
    def for_path(cls, path: Union[str, os.PathLike], mime_type: Optional[str] = None) -> "FileMetadata":
        """Describe a file on disk, guessing its MIME type from the extension."""
        path = Path(path)
        if mime_type is None:
            mime_type = mimetypes.guess_type(path.name)[0] or DEFAULT_MIME_TYPE
        return cls(filename=path.name, mime_type=mime_type, size=path.stat().st_size)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filename": self.filename,
            "type": self.mime_type,
            "size": self.size,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FileMetadata":
        return cls(
            filename=data.get("filename") or "decrypted.bin",
            mime_type=data.get("type") or DEFAULT_MIME_TYPE,
            size=_as_size(data.get("size")),
            timestamp=data.get("timestamp"),
        )


@dataclass
class DecryptedFile:
    """Result of decrypting an .obs file."""

    data: bytes
    metadata: FileMetadata

    @property
    def filename(self) -> str:
        return self.metadata.filename

    @property
    def mime_type(self) -> str:
        return self.metadata.mime_type

    @property
    def size(self) -> int:
        return self.metadata.size


class CryptoPacker:
    """
    Password-based encryption of text and files into cipher packets.

    A key is derived from scratch on every call; nothing is cached between
    calls, and every encryption draws a fresh salt and IV.

    Attributes:
        config: Key derivation and cipher parameters
        provider: Primitive implementation (defaults to CryptographyProvider)
    """

    def __init__(self, config: Optional[CryptoConfig] = None, provider: Optional[CryptoProvider] = None):
        self.config = config or CryptoConfig()
        self.provider = provider or CryptographyProvider()

    def derive_key(self, password: str, salt: bytes) -> bytes:
        """Stretch a password into an AES key with PBKDF2."""
        return self.provider.derive_key(
            password.encode("utf-8"),
            salt,
            iterations=self.config.iterations,
            length=self.config.key_length // 8,
            hash_name=self.config.hash_name,
        )

    def _fresh_salt_and_iv(self):
        return (
            self.provider.random_bytes(self.config.salt_length),
            self.provider.random_bytes(self.config.iv_length),
        )

    def _open(self, key: bytes, iv: bytes, sealed: bytes) -> bytes:
        try:
            return self.provider.open(key, iv, sealed)
        except CryptoError:
            logger.warning("Decryption rejected: authentication failed")
            raise DecryptionFailedError() from None

    def encrypt(self, plaintext: str, password: str) -> str:
        """
        Encrypt text and return a "salt:iv:ciphertext" packet.

        Raises:
            EncryptionFailedError: If the provider cannot encrypt
        """
        try:
            salt, iv = self._fresh_salt_and_iv()
            key = self.derive_key(password, salt)
            sealed = self.provider.seal(key, iv, plaintext.encode("utf-8"))
        except CryptoError:
            raise
        except Exception as e:
            logger.error(f"Encryption failed: {e}")
            raise EncryptionFailedError(str(e)) from e

        logger.info(f"Encrypted {len(plaintext)} characters into a text packet")
        return CipherPacket(salt, iv, sealed).serialize()

    def decrypt(self, packet: str, password: str) -> str:
        """
        Decrypt a "salt:iv:ciphertext" packet.

        Raises:
            MalformedPacketError: If the packet does not have three base64 segments
            DecryptionFailedError: On a wrong password or tampered data
        """
        parsed = CipherPacket.parse(packet)
        key = self.derive_key(password, parsed.salt)
        plaintext = self._open(key, parsed.iv, parsed.ciphertext)

        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError:
            raise DecryptionFailedError() from None

    def encrypt_file(
        self,
        data: Union[ByteSource, bytes, os.PathLike],
        password: str,
        metadata: FileMetadata,
    ) -> bytes:
        """
        Encrypt file contents together with their metadata.

        Returns:
            ASCII bytes of the four-segment packet, ready to write as an .obs file
        """
        source = ByteSource.resolve(data)
        try:
            salt, iv = self._fresh_salt_and_iv()
            key = self.derive_key(password, salt)
            meta_json = json.dumps(metadata.to_dict()).encode("utf-8")
            sealed_meta = self.provider.seal(key, iv, meta_json)
            sealed_data = self.provider.seal(key, iv, source.data)
        except CryptoError:
            raise
        except Exception as e:
            logger.error(f"File encryption failed: {e}")
            raise EncryptionFailedError(str(e)) from e

        logger.info(f"Encrypted file {metadata.filename!r} ({len(source)} bytes)")
        return FilePacket(salt, iv, sealed_meta, sealed_data).serialize().encode("ascii")

    def decrypt_file(self, packet: Union[str, bytes], password: str) -> DecryptedFile:
        """
        Decrypt an .obs packet into its data and metadata.

        Raises:
            MalformedPacketError: If the packet does not have four base64 segments
            DecryptionFailedError: On a wrong password or tampered data
        """
        parsed = FilePacket.parse(packet)
        key = self.derive_key(password, parsed.salt)

        meta_bytes = self._open(key, parsed.iv, parsed.metadata)
        try:
            meta = json.loads(meta_bytes.decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            raise DecryptionFailedError() from None
        if not isinstance(meta, dict):
            raise DecryptionFailedError()

        data = self._open(key, parsed.iv, parsed.data)
        metadata = FileMetadata.from_dict(meta)
        logger.info(f"Decrypted file {metadata.filename!r} ({len(data)} bytes)")
        return DecryptedFile(data=data, metadata=metadata)

    def hash(self, source: Union[ByteSource, str, bytes, os.PathLike], algorithm: str = "SHA-256") -> str:
        """
        Hex digest of text, bytes or a file.

        Args:
            source: Input; a str is hashed as UTF-8 text, a Path as file contents
            algorithm: MD5, SHA-1, SHA-256, SHA-384 or SHA-512
        """
        resolved = ByteSource.resolve(source)
        return self.provider.digest(algorithm, resolved.data).hex()
