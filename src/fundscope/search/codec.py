"""Embedding (de)serialization for the storage column.

Two representations exist side by side in one column: packed little-endian
float32 (when the backend has native vector support) and JSON arrays.
Decoding sniffs the stored type, so rows written under either mode stay
readable.
"""
from __future__ import annotations

import json
import math
import struct
from collections.abc import Sequence
from enum import Enum


class EmbeddingFormat(str, Enum):
    BINARY = "binary"
    JSON = "json"


def serialize_f32(vector: Sequence[float]) -> bytes:
    """Pack a float vector into little-endian binary (sqlite-vec format)."""
    return struct.pack(f"<{len(vector)}f", *vector)


def deserialize_f32(raw: bytes | bytearray | memoryview) -> list[float] | None:
    data = bytes(raw)
    if not data or len(data) % 4:
        return None
    values = list(struct.unpack(f"<{len(data) // 4}f", data))
    if not all(math.isfinite(x) for x in values):
        return None
    return values


def _parse_json_vector(raw: str) -> list[float] | None:
    try:
        value = json.loads(raw)
    except ValueError:
        return None
    if not isinstance(value, list) or not value:
        return None
    out: list[float] = []
    for item in value:
        if isinstance(item, bool) or not isinstance(item, (int, float)):
            return None
        try:
            number = float(item)
        except OverflowError:
            return None
        if not math.isfinite(number):
            return None
        out.append(number)
    return out


class VectorCodec:
    def __init__(self, fmt: EmbeddingFormat = EmbeddingFormat.JSON) -> None:
        self.format = fmt

    def encode(self, vector: Sequence[float]) -> bytes | str:
        values = [float(x) for x in vector]
        if not values:
            raise ValueError("Cannot encode an empty vector.")
        if not all(math.isfinite(x) for x in values):
            raise ValueError("Cannot encode a vector with non-finite values.")
        if self.format == EmbeddingFormat.BINARY:
            return serialize_f32(values)
        return json.dumps(values)

    @staticmethod
    def decode(raw: bytes | bytearray | memoryview | str | None) -> list[float] | None:
        """Return the stored vector, or ``None`` when it is absent or unreadable."""
        if raw is None:
            return None
        if isinstance(raw, (bytes, bytearray, memoryview)):
            return deserialize_f32(raw)
        if isinstance(raw, str):
            return _parse_json_vector(raw)
        return None
