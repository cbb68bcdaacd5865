"""
Crypto Provider - pluggable cryptographic primitives.

The packer never talks to a crypto library directly. It asks a CryptoProvider
for key derivation, AEAD sealing/opening, digests and random bytes. The
default provider is backed by the `cryptography` package; tests and embedders
may inject their own.

Example Usage:
    >>> provider = CryptographyProvider()
    >>> key = provider.derive_key(b"password", salt, iterations=100_000, length=32)
    >>> sealed = provider.seal(key, iv, b"data")
    >>> provider.open(key, iv, sealed)
    b'data'
"""

import logging
import os
from abc import ABC, abstractmethod

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from ..errors import CryptoError

logger = logging.getLogger(__name__)

TAG_LEN = 16  # AES-GCM tag, appended to the ciphertext


def normalize_hash_name(name: str) -> str:
    """Map 'SHA-256', 'sha256' and 'sha_256' to the same key."""
    return name.upper().replace("-", "").replace("_", "")


class CryptoProvider(ABC):
    """
    Interface for the primitives used by the packer.

    `open` must raise CryptoError when authentication fails.
    """

    @abstractmethod
    def derive_key(self, password: bytes, salt: bytes, iterations: int, length: int, hash_name: str = "SHA-256") -> bytes:
        """PBKDF2-HMAC key derivation."""

    @abstractmethod
    def seal(self, key: bytes, iv: bytes, plaintext: bytes) -> bytes:
        """AEAD-encrypt and return ciphertext || tag."""

    @abstractmethod
    def open(self, key: bytes, iv: bytes, sealed: bytes) -> bytes:
        """Verify and decrypt ciphertext || tag."""

    @abstractmethod
    def digest(self, algorithm: str, data: bytes) -> bytes:
        """Hash data with the named algorithm."""

    def random_bytes(self, length: int) -> bytes:
        """Return CSPRNG output."""
        return os.urandom(length)


class CryptographyProvider(CryptoProvider):
    """CryptoProvider backed by the `cryptography` package (AES-GCM, PBKDF2)."""

    HASHES = {
        "MD5": hashes.MD5,
        "SHA1": hashes.SHA1,
        "SHA256": hashes.SHA256,
        "SHA384": hashes.SHA384,
        "SHA512": hashes.SHA512,
    }

    def _hash_algorithm(self, name: str) -> hashes.HashAlgorithm:
        try:
            return self.HASHES[normalize_hash_name(name)]()
        except KeyError:
            raise CryptoError(f"Unsupported hash algorithm: {name}", code=5001) from None

    def derive_key(self, password: bytes, salt: bytes, iterations: int, length: int, hash_name: str = "SHA-256") -> bytes:
        kdf = PBKDF2HMAC(
            algorithm=self._hash_algorithm(hash_name),
            length=length,
            salt=salt,
            iterations=iterations,
        )
        return kdf.derive(password)

    def seal(self, key: bytes, iv: bytes, plaintext: bytes) -> bytes:
        encryptor = Cipher(algorithms.AES(key), modes.GCM(iv)).encryptor()
        ciphertext = encryptor.update(plaintext) + encryptor.finalize()
        return ciphertext + encryptor.tag

    def open(self, key: bytes, iv: bytes, sealed: bytes) -> bytes:
        if len(sealed) < TAG_LEN:
            raise CryptoError("Ciphertext shorter than authentication tag", code=4002)

        ciphertext, tag = sealed[:-TAG_LEN], sealed[-TAG_LEN:]
        try:
            decryptor = Cipher(algorithms.AES(key), modes.GCM(iv, tag)).decryptor()
            return decryptor.update(ciphertext) + decryptor.finalize()
        except (InvalidTag, ValueError) as e:
            logger.debug(f"AES-GCM open rejected input: {type(e).__name__}")
            raise CryptoError("Authentication failed", code=4002) from None

    def digest(self, algorithm: str, data: bytes) -> bytes:
        h = hashes.Hash(self._hash_algorithm(algorithm))
        h.update(data)
        return h.finalize()
