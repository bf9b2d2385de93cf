"""
Serialization and compression utilities for caching.

Uses orjson for high-performance JSON serialization/deserialization.
"""

from base64 import b64decode, b64encode
from gzip import compress as gzip_compress
from gzip import decompress as gzip_decompress
from logging import getLogger
from typing import Any

from orjson import OPT_NON_STR_KEYS
from orjson import JSONDecodeError
from orjson import dumps as orjson_dumps
from orjson import loads as orjson_loads

from blogpost.configs import file_logger
from blogpost.errors import CacheCodecError

logger = file_logger(getLogger(__name__))

COMPRESSION_MARKER = "\x00GZIP\x00"


def serialize(value: object) -> str:
    """
    Serialize value to JSON string.

    Args:
        value: Value to serialize.

    Returns:
        JSON serialized string.

    Raises:
        CacheCodecError: If serialization fails.
    """
    try:
        return orjson_dumps(value, default=str, option=OPT_NON_STR_KEYS).decode("utf-8")
    except TypeError as e:
        logger.exception("Serialization failed")
        raise CacheCodecError("serialize") from e


def deserialize(value: str) -> Any:
    """
    Deserialize JSON string to value.

    Args:
        value: JSON string to deserialize.

    Returns:
        Deserialized value.

    Raises:
        CacheCodecError: If deserialization fails.
    """
    try:
        return orjson_loads(value)
    except JSONDecodeError as e:
        logger.exception("Deserialization failed")
        raise CacheCodecError("deserialize") from e


def compress(data: str) -> str:
    """
    Compress data using gzip.

    Args:
        data: Data to compress.

    Returns:
        Compressed data as base64-encoded string with marker.

    Raises:
        CacheCodecError: If compression fails.
    """
    try:
        compressed = gzip_compress(data.encode("utf-8"))
        return COMPRESSION_MARKER + b64encode(compressed).decode("utf-8")
    except (OSError, ValueError) as e:
        logger.exception("Compression failed")
        raise CacheCodecError("compress") from e


def decompress(data: str) -> str:
    """
    Decompress gzip data.

    Values without the marker are returned unchanged.

    Args:
        data: Compressed base64-encoded data with marker.

    Returns:
        Decompressed string.

    Raises:
        CacheCodecError: If decompression fails.
    """
    if not data.startswith(COMPRESSION_MARKER):
        return data
    try:
        encoded = data[len(COMPRESSION_MARKER) :]
        return gzip_decompress(b64decode(encoded.encode("utf-8"))).decode("utf-8")
    except (OSError, ValueError) as e:
        logger.exception("Decompression failed")
        raise CacheCodecError("decompress") from e


def do_compress(data: str, threshold: int) -> bool:
    """Return True when the encoded data is larger than the threshold."""
    return len(data.encode("utf-8")) > threshold
