"""
Invisible Watermarking Module.

An invisible watermark is a small JSON record (owner string, timestamp,
format version) hidden with the same LSB framing as plain messages, but
prefixed with a signature so that watermarked images can be told apart from
images carrying ordinary hidden text:

    OBSCURA_WM||{"watermark": "...", "timestamp": 1700000000000, "version": "1.0"}
    OBSCURA_WM||<salt>:<iv>:<ciphertext>            (password protected)

Whether a payload is protected is guessed from its first character: JSON
objects start with "{", cipher packets start with base64. This guess is a
heuristic, not a format tag; a non-JSON unprotected payload is classified as
protected. Changing it requires a new format version.
"""

import json
import math
import logging
import os
import time
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Optional, Union

from ..crypto import CryptoPacker
from ..errors import (
    CryptoError,
    DecryptionFailedError,
    NoWatermarkFoundError,
    PasswordRequiredError,
    StegoError,
)
from . import bits
from .frame import FrameCodec
from .pixels import ImageInput, PixelBuffer

logger = logging.getLogger(__name__)


def _reject_constant(name: str):
    # NaN and Infinity are not JSON
    raise ValueError(f"Invalid JSON constant: {name}")


def _as_timestamp(value) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return int(value)


def _as_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


@dataclass
class WatermarkRecord:
    """
    Ownership record embedded as a watermark.

    Attributes:
        watermark: Owner name, copyright line, UUID, ...
        timestamp: Creation time in epoch milliseconds
        version: Record format version
    """

    watermark: str
    timestamp: int
    version: str = "1.0"

    def to_json(self) -> str:
        return json.dumps(asdict(self), separators=(",", ":"), ensure_ascii=False)


@dataclass
class ExtractedWatermark:
    """
    Result of a watermark extraction.

    Legacy watermarks (a bare string rather than a JSON record) have no
    timestamp and report version "Legacy".
    """

    watermark: str
    timestamp: Optional[int]
    version: str
    is_protected: bool

    @property
    def timestamp_readable(self) -> str:
        if self.timestamp is None:
            return "Unknown"
        try:
            moment = datetime.fromtimestamp(self.timestamp / 1000)
        except (OverflowError, OSError, ValueError):
            return "Unknown"
        return moment.strftime("%Y-%m-%d %H:%M:%S")


class WatermarkCodec:
    """
    Adds and extracts signed, optionally encrypted watermark records.

    Example:
        >>> codec = WatermarkCodec()
        >>> marked = codec.add(PixelBuffer.blank(200, 200), "(c) Jane Doe", password="pw")
        >>> codec.extract(marked, password="pw").watermark
        '(c) Jane Doe'
    """

    SIGNATURE = "OBSCURA_WM"
    DELIMITER = "||"
    VERSION = "1.0"

    def __init__(self, crypto: Optional[CryptoPacker] = None, frame_codec: Optional[FrameCodec] = None):
        self.crypto = crypto or CryptoPacker()
        self.frames = frame_codec or FrameCodec()

    @property
    def prefix(self) -> str:
        return self.SIGNATURE + self.DELIMITER

    def add(
        self,
        pixels: PixelBuffer,
        watermark: str,
        password: Optional[str] = None,
        timestamp: Optional[int] = None,
    ) -> PixelBuffer:
        """
        Embed a watermark record into a copy of `pixels`.

        The alpha channel of the result is forced to fully opaque so that
        encoders working with pre-multiplied alpha cannot disturb the bits.

        Raises:
            CapacityExceededError: If the record does not fit the image
        """
        if timestamp is None:
            timestamp = int(time.time() * 1000)
        record = WatermarkRecord(watermark=watermark, timestamp=timestamp, version=self.VERSION)

        payload = record.to_json()
        if password:
            payload = self.crypto.encrypt(payload, password)

        opaque = pixels.copy()
        opaque.force_opaque()
        result = self.frames.embed(opaque, bits.encode(self.prefix + payload))
        logger.info(f"Watermark embedded (protected={bool(password)})")
        return result

    def _read_payload(self, pixels: PixelBuffer) -> str:
        text = bits.decode(self.frames.unframe(pixels))
        if not text.startswith(self.prefix):
            raise NoWatermarkFoundError()
        return text[len(self.prefix):]

    def extract(self, pixels: PixelBuffer, password: Optional[str] = None) -> ExtractedWatermark:
        """
        Extract the watermark record from `pixels`.

        Raises:
            InvalidHeaderError: If the length header is implausible
            NoWatermarkFoundError: If the signature is missing
            PasswordRequiredError: If the record is protected and no password is given
            DecryptionFailedError: If decryption or parsing of a protected record fails
        """
        payload = self._read_payload(pixels)
        looks_encrypted = not payload.strip().startswith("{")

        if looks_encrypted and not password:
            raise PasswordRequiredError()

        if password:
            try:
                payload = self.crypto.decrypt(payload, password)
            except CryptoError:
                logger.warning("Watermark decryption failed")
                raise DecryptionFailedError() from None

        try:
            record = json.loads(payload, parse_constant=_reject_constant)
            if not isinstance(record, dict):
                raise ValueError("watermark record is not an object")
        except ValueError:
            if looks_encrypted:
                raise DecryptionFailedError() from None
            logger.info("Extracted legacy watermark")
            return ExtractedWatermark(
                watermark=payload,
                timestamp=None,
                version="Legacy",
                is_protected=False,
            )

        return ExtractedWatermark(
            watermark=_as_text(record.get("watermark")),
            timestamp=_as_timestamp(record.get("timestamp")),
            version=str(record.get("version", self.VERSION)),
            is_protected=looks_encrypted,
        )

    def has_watermark(self, pixels: PixelBuffer) -> bool:
        """True if `pixels` carries a signed payload, protected or not."""
        try:
            self._read_payload(pixels)
        except StegoError:
            return False
        return True

    def add_to_file(
        self,
        source: ImageInput,
        destination: Union[str, os.PathLike],
        watermark: str,
        password: Optional[str] = None,
    ) -> PixelBuffer:
        """Watermark an image file and save the result as PNG."""
        result = self.add(PixelBuffer.load(source), watermark, password)
        result.save(destination)
        return result

    def extract_from_file(self, source: ImageInput, password: Optional[str] = None) -> ExtractedWatermark:
        return self.extract(PixelBuffer.load(source), password)
