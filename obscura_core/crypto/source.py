"""
Byte sources for hashing and encryption inputs.

Inputs arrive as text, raw bytes or a file on disk. They are resolved once,
at the API boundary, into a ByteSource so the internals only ever see bytes.
"""

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Union


class SourceKind(Enum):
    """Origin of the bytes held by a ByteSource."""

    TEXT = "text"
    BYTES = "bytes"


@dataclass(frozen=True)
class ByteSource:
    """
    Tagged byte payload.

    Attributes:
        kind: Whether the payload started out as text or binary data
        data: UTF-8 encoding of the text, or the raw bytes
    """

    kind: SourceKind
    data: bytes

    @classmethod
    def text(cls, value: str) -> "ByteSource":
        return cls(SourceKind.TEXT, value.encode("utf-8"))

    @classmethod
    def raw(cls, value: Union[bytes, bytearray, memoryview]) -> "ByteSource":
        return cls(SourceKind.BYTES, bytes(value))

    @classmethod
    def from_path(cls, path: Union[str, os.PathLike]) -> "ByteSource":
        """Read a whole file as a binary source."""
        return cls(SourceKind.BYTES, Path(path).read_bytes())

    @classmethod
    def resolve(cls, value: Union["ByteSource", str, bytes, bytearray, memoryview, os.PathLike]) -> "ByteSource":
        """
        Turn any supported input into a ByteSource.

        Strings are treated as text, never as paths; pass a pathlib.Path
        to hash or encrypt a file.

        Raises:
            TypeError: If the value is none of the supported types
        """
        if isinstance(value, ByteSource):
            return value
        if isinstance(value, str):
            return cls.text(value)
        if isinstance(value, (bytes, bytearray, memoryview)):
            return cls.raw(value)
        if isinstance(value, os.PathLike):
            return cls.from_path(value)
        raise TypeError(f"Unsupported input type: {type(value).__name__}")

    def __len__(self) -> int:
        return len(self.data)
