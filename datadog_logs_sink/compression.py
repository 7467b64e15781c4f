"""Gzip payload compression for HTTP delivery."""

import gzip

# Value sent in the Content-Encoding header
CONTENT_ENCODING = "gzip"


def compress_payload(data: bytes) -> bytes:
    """Compress a serialized envelope with gzip."""
    return gzip.compress(data)


def decompress_payload(data: bytes) -> bytes:
    """Decompress a gzip payload."""
    return gzip.decompress(data)


def is_compressed(data: bytes) -> bool:
    """Detect gzip data by its 0x1f 0x8b magic bytes."""
    return len(data) >= 2 and data[0] == 0x1F and data[1] == 0x8B
