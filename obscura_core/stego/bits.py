"""
Bit codec for hidden text.

Text is stored as fixed 16-bit big-endian units, one per UTF-16 code unit,
so a character outside the Basic Multilingual Plane takes two units (a
surrogate pair). This is twice the size of UTF-8 for ASCII text but it is the
format existing stego images use, so the width must not change without a
format version bump.

Bits are carried as 1-D numpy uint8 arrays holding 0 or 1.
"""

import numpy as np

UNIT_BITS = 16
_CODEC = "utf-16-be"


def bytes_to_bits(data: bytes) -> np.ndarray:
    arr = np.frombuffer(data, dtype=np.uint8)
    return np.unpackbits(arr).astype(np.uint8)


def bits_to_bytes(bits: np.ndarray) -> bytes:
    """Pack bits MSB-first; the bit count must be a multiple of 8."""
    return np.packbits(bits.astype(np.uint8)).tobytes()


def encode(text: str) -> np.ndarray:
    """Encode text as 16 bits per UTF-16 code unit."""
    return bytes_to_bits(text.encode(_CODEC, errors="surrogatepass"))


def decode(bits: np.ndarray) -> str:
    """
    Decode 16-bit units back into text.

    A trailing group shorter than 16 bits is dropped rather than padded.
    Unpaired surrogates are kept as-is so arbitrary bits always decode.
    """
    usable = (len(bits) // UNIT_BITS) * UNIT_BITS
    return bits_to_bytes(bits[:usable]).decode(_CODEC, errors="surrogatepass")


def bit_length(text: str) -> int:
    """Number of payload bits `encode(text)` produces."""
    return len(text.encode(_CODEC, errors="surrogatepass")) * 8
